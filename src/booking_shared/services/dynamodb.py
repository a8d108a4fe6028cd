"""DynamoDB access for the Stripe webhook event log.

Bookings live in Beds24; DynamoDB only records which webhook events have
been handled. Table names are prefixed per environment
(`booking-{env}-<table>`, or DYNAMODB_TABLE_PREFIX when set).
"""

import os
from typing import Any

import boto3
from botocore.exceptions import ClientError

_instance: "DynamoDBService | None" = None


def get_dynamodb_service() -> "DynamoDBService":
    """Get the shared DynamoDBService, creating it on first use."""
    global _instance
    if _instance is None:
        _instance = DynamoDBService()
    return _instance


def reset_dynamodb_service() -> None:
    """Drop the shared instance so the next call builds a fresh one.

    Tests call this so the resource is created inside mock_aws.
    """
    global _instance
    _instance = None


class DynamoDBService:
    """Keyed reads, writes and deletes on prefixed tables."""

    def __init__(self, environment: str | None = None) -> None:
        environment = environment or os.getenv("ENVIRONMENT", "dev")
        self.table_prefix = os.getenv("DYNAMODB_TABLE_PREFIX", f"booking-{environment}")
        self._resource = boto3.resource("dynamodb")

    def table_name(self, table: str) -> str:
        """Full table name for a short name such as 'stripe-webhook-events'."""
        return f"{self.table_prefix}-{table}"

    def get_item(self, table: str, key: dict[str, Any]) -> dict[str, Any] | None:
        """Fetch one item by primary key, or None when absent."""
        response = self._resource.Table(self.table_name(table)).get_item(Key=key)
        return response.get("Item")

    def put_new_item(self, table: str, item: dict[str, Any], key_attribute: str) -> bool:
        """Insert an item unless one with the same key already exists.

        Args:
            table: Short table name
            item: Item to store
            key_attribute: Partition key attribute name

        Returns:
            True if written, False if the key was already taken
        """
        try:
            self._resource.Table(self.table_name(table)).put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(#pk)",
                ExpressionAttributeNames={"#pk": key_attribute},
            )
        except ClientError as e:
            if e.response["Error"]["Code"] == "ConditionalCheckFailedException":
                return False
            raise
        return True

    def put_item(self, table: str, item: dict[str, Any]) -> None:
        """Write an item, replacing any existing item with the same key."""
        self._resource.Table(self.table_name(table)).put_item(Item=item)

    def delete_item(self, table: str, key: dict[str, Any]) -> None:
        """Delete an item by primary key; missing items are ignored."""
        self._resource.Table(self.table_name(table)).delete_item(Key=key)
