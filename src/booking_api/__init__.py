"""FastAPI application for the studio booking REST API."""

__version__ = "0.1.0"
