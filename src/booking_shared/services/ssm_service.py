"""SSM Parameter Store service for processor and property-management secrets.

Secrets live under /booking/{environment}/{integration}/{name}, e.g.
/booking/prod/stripe/secret_key or /booking/prod/forte/access_id.
"""

import logging
import os
from functools import lru_cache
from typing import ClassVar

import boto3
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)


class SSMServiceError(Exception):
    """Raised when SSM parameter retrieval fails."""


def parameter_path(integration: str, name: str, environment: str | None = None) -> str:
    """Build the SSM path for an integration secret.

    Args:
        integration: Integration name (stripe, forte, beds24)
        name: Secret name within the integration
        environment: Environment name. Defaults to ENVIRONMENT env var or "dev".

    Returns:
        Full parameter path
    """
    env = environment or os.environ.get("ENVIRONMENT", "dev")
    return f"/booking/{env}/{integration}/{name}"


class SSMService:
    """Service for retrieving secrets from AWS SSM Parameter Store.

    Values are decrypted and cached in-process for the lifetime of the
    instance's class, so warm Lambda invocations skip the API call.
    """

    _cache: ClassVar[dict[str, str]] = {}

    def __init__(self) -> None:
        """Initialize the SSM client."""
        self._client = boto3.client("ssm")

    def get_parameter(self, name: str, *, use_cache: bool = True) -> str:
        """Retrieve a parameter value from SSM Parameter Store.

        Args:
            name: Full parameter path (e.g., "/booking/dev/stripe/secret_key")
            use_cache: Whether to use cached value if available (default: True)

        Returns:
            The decrypted parameter value.

        Raises:
            SSMServiceError: If parameter cannot be retrieved.
        """
        if use_cache and name in self._cache:
            logger.debug("SSM cache hit for %s", name)
            return self._cache[name]

        try:
            logger.info("Fetching SSM parameter: %s", name)
            response = self._client.get_parameter(Name=name, WithDecryption=True)
            value = response["Parameter"]["Value"]
            self._cache[name] = value
            return value

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            if error_code == "ParameterNotFound":
                raise SSMServiceError(f"SSM parameter not found: {name}") from e
            if error_code == "AccessDeniedException":
                raise SSMServiceError(
                    f"Access denied to SSM parameter: {name}. "
                    "Check IAM permissions for ssm:GetParameter."
                ) from e
            raise SSMServiceError(
                f"Failed to retrieve SSM parameter {name}: {e}"
            ) from e

    def get_integration_secret(
        self,
        integration: str,
        name: str,
        environment: str | None = None,
    ) -> str:
        """Retrieve a secret by integration and name.

        Args:
            integration: Integration name (stripe, forte, beds24)
            name: Secret name within the integration
            environment: Environment name override

        Returns:
            The decrypted secret value.

        Raises:
            SSMServiceError: If the secret cannot be retrieved.
        """
        return self.get_parameter(parameter_path(integration, name, environment))

    def clear_cache(self) -> None:
        """Clear all cached parameters."""
        self._cache.clear()
        logger.info("SSM parameter cache cleared")


@lru_cache(maxsize=1)
def get_ssm_service() -> SSMService:
    """Get the shared SSMService instance (singleton pattern)."""
    return SSMService()
