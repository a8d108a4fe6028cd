"""Pytest configuration and fixtures for the studio booking backend tests.

This module provides reusable fixtures for testing:
- AWS mocking with moto (DynamoDB webhook log, SSM secrets)
- Sample stay data (nightly rates, payment requests)
- Singleton resets between tests
"""

import datetime as dt
import os
from decimal import Decimal
from typing import Any, Generator

import boto3
import pytest
from moto import mock_aws

from booking_shared.models.pricing import NightlyRate

# === Environment Setup ===

# Set environment variables for testing before imports
os.environ.setdefault("AWS_DEFAULT_REGION", "us-east-1")
os.environ.setdefault("DYNAMODB_TABLE_PREFIX", "test-booking")
os.environ.setdefault("ENVIRONMENT", "dev")

# Only set fake credentials for moto if no real credentials are present
if not os.environ.get("AWS_PROFILE") and not os.environ.get("AWS_ACCESS_KEY_ID"):
    os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
    os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")

WEBHOOK_EVENTS_TABLE = "test-booking-stripe-webhook-events"


# === Singleton Fixtures ===


@pytest.fixture(autouse=True)
def reset_singletons() -> Generator[None, None, None]:
    """Reset cached services before and after each test.

    Tests using mock_aws then get fresh boto3 clients created inside the
    mock context rather than a client from a previous test.
    """
    from booking_api.dependencies import reset_services

    reset_services()
    yield
    reset_services()


# === AWS Fixtures ===


@pytest.fixture
def aws_credentials() -> None:
    """Mocked AWS Credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def dynamodb_client(aws_credentials: None) -> Generator[Any, None, None]:
    """Create a mocked DynamoDB client."""
    with mock_aws():
        client = boto3.client("dynamodb", region_name="us-east-1")
        yield client


@pytest.fixture
def webhook_events_table(dynamodb_client: Any) -> str:
    """Create the webhook event log table."""
    dynamodb_client.create_table(
        TableName=WEBHOOK_EVENTS_TABLE,
        KeySchema=[{"AttributeName": "event_id", "KeyType": "HASH"}],
        AttributeDefinitions=[{"AttributeName": "event_id", "AttributeType": "S"}],
        BillingMode="PAY_PER_REQUEST",
    )
    return WEBHOOK_EVENTS_TABLE


# === Sample Data Fixtures ===


def _make_rates(
    count: int,
    rate: Decimal | int | str = 100,
    start: dt.date = dt.date(2030, 7, 1),
) -> list[NightlyRate]:
    """Build `count` consecutive nightly rates at a flat rate."""
    return [
        NightlyRate(date=start + dt.timedelta(days=i), rate=Decimal(str(rate)))
        for i in range(count)
    ]


@pytest.fixture
def short_stay_rates() -> list[NightlyRate]:
    """Three nights at 100.00."""
    return _make_rates(3)


@pytest.fixture
def long_stay_rates() -> list[NightlyRate]:
    """Sixty-five nights at 50.00 (three billing periods)."""
    return _make_rates(65, 50)


@pytest.fixture
def guest_details() -> dict[str, Any]:
    """Guest and stay fields shared by payment requests."""
    return {
        "room_slug": "room-12345",
        "guests": 2,
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@example.com",
        "phone": "+1 555 0100",
    }


@pytest.fixture
def make_rates():
    """Factory for consecutive flat nightly rates."""
    return _make_rates
