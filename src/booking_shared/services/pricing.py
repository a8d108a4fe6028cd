"""Pricing engine for stay price breakdowns.

Tax rules: stays shorter than the long-term threshold are taxed at the
jurisdiction rate; long-term stays are tax exempt.
Payment: card payments carry a processing fee ONLY on long-term stays;
short-term card fees are absorbed by the property. ACH never carries a fee.
Long-term stays are billed in consecutive cycles of up to 30 nights.

The engine is a pure function of its inputs. The checkout quote and the
payment endpoints both call it with the raw nightly rates, so the amount
charged always matches the amount shown.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Sequence

from booking_shared.models.pricing import (
    BillingPeriod,
    NightlyRate,
    PricingBreakdown,
    PricingConfig,
)

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round2(amount: Decimal) -> Decimal:
    """Round to cent precision, half away from zero."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def to_cents(amount: Decimal) -> int:
    """Convert a currency amount to integer minor units for processor APIs."""
    return int((amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def _as_decimal(value: Decimal | float | int | str) -> Decimal:
    if isinstance(value, Decimal):
        return value
    # str() keeps floats like 0.1 from expanding to binary noise
    return Decimal(str(value))


class PricingEngine:
    """Computes price breakdowns from nightly rates.

    Holds only immutable configuration, so a single instance can be shared
    across concurrent requests.
    """

    def __init__(self, config: PricingConfig | None = None) -> None:
        """Initialize pricing engine.

        Args:
            config: Deployment pricing parameters. Defaults to PricingConfig().
        """
        self.config = config or PricingConfig()

    def compute_breakdown(
        self,
        nightly_rates: Sequence[NightlyRate],
        tax_rate_override: Decimal | float | None = None,
    ) -> PricingBreakdown:
        """Compute the full price breakdown for a stay.

        Args:
            nightly_rates: One entry per night, chronological and contiguous
            tax_rate_override: Replaces the default tax rate for short stays;
                ignored for long-term stays, which are always tax exempt

        Returns:
            PricingBreakdown with totals and, for long-term stays, a
            billing schedule
        """
        cfg = self.config
        rates = list(nightly_rates)
        nights = len(rates)
        is_long_term = nights >= cfg.long_term_threshold

        if is_long_term:
            tax_rate = ZERO
        elif tax_rate_override is not None:
            tax_rate = _as_decimal(tax_rate_override)
        else:
            tax_rate = cfg.default_tax_rate

        # Subtotal is never rounded; only derived tax and fee amounts are.
        subtotal = sum((r.rate for r in rates), ZERO)
        tax_amount = round2(subtotal * tax_rate)
        total_before_fees = subtotal + tax_amount

        cc_fee_percent = cfg.cc_fee_rate if is_long_term else ZERO
        cc_fee_amount = round2(total_before_fees * cc_fee_percent)

        return PricingBreakdown(
            nights=nights,
            nightly_rates=rates,
            subtotal=subtotal,
            tax_rate=tax_rate,
            tax_amount=tax_amount,
            total_before_fees=total_before_fees,
            cc_fee_percent=cc_fee_percent,
            cc_fee_amount=cc_fee_amount,
            total_with_cc_fee=total_before_fees + cc_fee_amount,
            total_ach=total_before_fees,
            is_long_term=is_long_term,
            billing_schedule=self.build_billing_schedule(rates) if is_long_term else None,
        )

    def build_billing_schedule(self, nightly_rates: Sequence[NightlyRate]) -> list[BillingPeriod]:
        """Split a long-term stay into consecutive billing periods.

        Periods are cut by list position, not by date arithmetic. Every
        period except possibly the last has exactly one full cycle of nights.

        Args:
            nightly_rates: Nightly rates for the whole stay

        Returns:
            Billing periods in order, numbered from 1
        """
        cycle = self.config.billing_cycle_nights
        periods: list[BillingPeriod] = []

        for period_number, start in enumerate(range(0, len(nightly_rates), cycle), start=1):
            chunk = nightly_rates[start : start + cycle]
            subtotal = sum((r.rate for r in chunk), ZERO)
            # Long-term periods are tax exempt unconditionally.
            total = subtotal
            periods.append(
                BillingPeriod(
                    period_number=period_number,
                    start_date=chunk[0].date,
                    end_date=chunk[-1].date,
                    nights=len(chunk),
                    subtotal=subtotal,
                    tax_amount=ZERO,
                    total=total,
                    total_with_cc_fee=total + round2(total * self.config.cc_fee_rate),
                    is_first_payment=period_number == 1,
                    is_prorated=period_number > 1 and len(chunk) < cycle,
                )
            )

        return periods


def compute_breakdown(
    nightly_rates: Sequence[NightlyRate],
    tax_rate_override: Decimal | float | None = None,
    config: PricingConfig | None = None,
) -> PricingBreakdown:
    """Compute a price breakdown with the given (or default) configuration."""
    return PricingEngine(config).compute_breakdown(nightly_rates, tax_rate_override)


def card_charge_amount(breakdown: PricingBreakdown) -> Decimal:
    """Amount to charge now when paying by card.

    Long-term stays pay the first billing period; short stays pay in full.
    """
    if breakdown.is_long_term and breakdown.billing_schedule:
        return breakdown.billing_schedule[0].total_with_cc_fee
    return breakdown.total_with_cc_fee


def ach_charge_amount(breakdown: PricingBreakdown) -> Decimal:
    """Amount to charge now when paying by bank transfer."""
    if breakdown.is_long_term and breakdown.billing_schedule:
        return breakdown.billing_schedule[0].total
    return breakdown.total_ach


def remaining_periods(breakdown: PricingBreakdown) -> list[BillingPeriod]:
    """Billing periods after the first, charged later off-session."""
    if not breakdown.billing_schedule:
        return []
    return list(breakdown.billing_schedule[1:])
