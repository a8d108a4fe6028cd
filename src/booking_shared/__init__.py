"""Shared domain models and services for the studio booking backend."""

__version__ = "0.1.0"
