"""Pricing models for nightly rates, price breakdowns and billing schedules.

Amounts are decimal currency units (e.g. Decimal("150.00") = $150.00).
All models are frozen: a breakdown is built once per call and never mutated.
"""

import datetime as dt
import os
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class NightlyRate(BaseModel):
    """Rate charged for the night starting on `date`."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={"examples": [{"date": "2026-07-15", "rate": "150.00"}]},
    )

    date: dt.date = Field(..., description="Night's calendar date (YYYY-MM-DD)")
    rate: Decimal = Field(..., ge=0, description="Nightly rate in currency units")


class BillingPeriod(BaseModel):
    """One charge cycle within a long-term stay."""

    model_config = ConfigDict(frozen=True)

    period_number: int = Field(..., ge=1, description="1-based period index")
    start_date: dt.date = Field(..., description="First night in the period")
    end_date: dt.date = Field(..., description="Last night in the period")
    nights: int = Field(..., ge=1, description="Nights billed in this period")
    subtotal: Decimal = Field(..., description="Sum of nightly rates in the period")
    tax_amount: Decimal = Field(..., description="Always zero for long-term periods")
    total: Decimal = Field(..., description="Period amount without card fee (ACH)")
    total_with_cc_fee: Decimal = Field(..., description="Period amount paid by card")
    is_first_payment: bool = Field(..., description="True for period 1")
    is_prorated: bool = Field(
        ...,
        description="True for a non-first period shorter than the billing cycle",
    )


class PricingBreakdown(BaseModel):
    """Full guest-facing price breakdown for a stay."""

    model_config = ConfigDict(
        frozen=True,
        json_schema_extra={
            "examples": [
                {
                    "nights": 3,
                    "nightly_rates": [
                        {"date": "2026-07-15", "rate": "100.00"},
                        {"date": "2026-07-16", "rate": "100.00"},
                        {"date": "2026-07-17", "rate": "100.00"},
                    ],
                    "subtotal": "300.00",
                    "tax_rate": "0.08",
                    "tax_amount": "24.00",
                    "total_before_fees": "324.00",
                    "cc_fee_percent": "0",
                    "cc_fee_amount": "0.00",
                    "total_with_cc_fee": "324.00",
                    "total_ach": "324.00",
                    "is_long_term": False,
                    "billing_schedule": None,
                }
            ]
        },
    )

    nights: int = Field(..., ge=0)
    nightly_rates: list[NightlyRate]
    subtotal: Decimal
    tax_rate: Decimal
    tax_amount: Decimal
    total_before_fees: Decimal
    cc_fee_percent: Decimal
    cc_fee_amount: Decimal
    total_with_cc_fee: Decimal = Field(..., description="Amount charged by card")
    total_ach: Decimal = Field(..., description="Amount charged by bank transfer")
    is_long_term: bool
    billing_schedule: list[BillingPeriod] | None = Field(
        default=None,
        description="Monthly billing schedule, present only for long-term stays",
    )


class PricingConfig(BaseModel):
    """Deployment-specific pricing parameters.

    One engine serves every property; only these values differ per deployment.
    """

    model_config = ConfigDict(frozen=True)

    default_tax_rate: Decimal = Field(default=Decimal("0.08"), ge=0)
    long_term_threshold: int = Field(default=30, ge=1)
    cc_fee_rate: Decimal = Field(default=Decimal("0.03"), ge=0)
    billing_cycle_nights: int = Field(default=30, ge=1)

    @classmethod
    def from_env(cls) -> "PricingConfig":
        """Build config from environment variables, falling back to defaults.

        Reads STAY_TAX_RATE, LONG_TERM_THRESHOLD_NIGHTS, CC_FEE_RATE and
        BILLING_CYCLE_NIGHTS.
        """
        values: dict[str, str] = {}
        env_map = {
            "default_tax_rate": "STAY_TAX_RATE",
            "long_term_threshold": "LONG_TERM_THRESHOLD_NIGHTS",
            "cc_fee_rate": "CC_FEE_RATE",
            "billing_cycle_nights": "BILLING_CYCLE_NIGHTS",
        }
        for field_name, env_var in env_map.items():
            raw = os.environ.get(env_var)
            if raw:
                values[field_name] = raw.strip()
        return cls.model_validate(values)
