"""Unit tests for the pricing engine.

Test categories:
- Short stays: tax, no card fee
- Long-term stays: tax exemption, card fee, billing schedule
- Boundaries and empty input
- Rounding and determinism
- Charge selection helpers
"""

import datetime as dt
from decimal import Decimal

import pytest

from booking_shared.models.pricing import NightlyRate, PricingConfig
from booking_shared.services.pricing import (
    PricingEngine,
    ach_charge_amount,
    card_charge_amount,
    compute_breakdown,
    remaining_periods,
    round2,
    to_cents,
)


# === Test Fixtures ===


@pytest.fixture
def engine() -> PricingEngine:
    """Engine with a 10% jurisdiction tax rate."""
    return PricingEngine(PricingConfig(default_tax_rate=Decimal("0.10")))


# === Short Stays ===


class TestShortStay:
    """Stays below the long-term threshold."""

    def test_three_nights_at_default_tax(self, engine: PricingEngine, make_rates):
        """3 nights at 100 with 10% tax total 330 by card and ACH."""
        result = engine.compute_breakdown(make_rates(3, 100))

        assert result.nights == 3
        assert result.subtotal == Decimal("300")
        assert result.tax_rate == Decimal("0.10")
        assert result.tax_amount == Decimal("30.00")
        assert result.total_before_fees == Decimal("330.00")
        assert result.cc_fee_percent == 0
        assert result.cc_fee_amount == 0
        assert result.total_with_cc_fee == Decimal("330.00")
        assert result.total_ach == Decimal("330.00")
        assert result.is_long_term is False
        assert result.billing_schedule is None

    def test_tax_rate_override_replaces_default(self, engine: PricingEngine, make_rates):
        """An override applies instead of the configured rate."""
        result = engine.compute_breakdown(make_rates(2, 100), tax_rate_override=Decimal("0.05"))

        assert result.tax_rate == Decimal("0.05")
        assert result.tax_amount == Decimal("10.00")
        assert result.total_ach == Decimal("210.00")

    def test_float_override_is_exact(self, engine: PricingEngine, make_rates):
        """Float overrides do not leak binary representation error."""
        result = engine.compute_breakdown(make_rates(1, 100), tax_rate_override=0.1)

        assert result.tax_rate == Decimal("0.1")
        assert result.tax_amount == Decimal("10.00")

    def test_default_config_uses_eight_percent(self, make_rates):
        """Module-level helper uses the default configuration."""
        result = compute_breakdown(make_rates(3, 100))

        assert result.tax_amount == Decimal("24.00")
        assert result.total_with_cc_fee == Decimal("324.00")

    def test_twenty_nine_nights_is_short(self, engine: PricingEngine, make_rates):
        """One night below the threshold is still a short stay."""
        result = engine.compute_breakdown(make_rates(29, 100))

        assert result.is_long_term is False
        assert result.billing_schedule is None
        assert result.tax_amount == Decimal("290.00")


# === Long-Term Stays ===


class TestLongTermStay:
    """Stays at or above the long-term threshold."""

    def test_forty_five_nights_two_periods(self, engine: PricingEngine, make_rates):
        """45 nights at 50 split into a full and a prorated period."""
        result = engine.compute_breakdown(make_rates(45, 50))

        assert result.subtotal == Decimal("2250")
        assert result.tax_rate == 0
        assert result.tax_amount == 0
        assert result.is_long_term is True
        assert result.cc_fee_percent == Decimal("0.03")
        assert result.cc_fee_amount == Decimal("67.50")
        assert result.total_with_cc_fee == Decimal("2317.50")
        assert result.total_ach == Decimal("2250")

        first, second = result.billing_schedule
        assert first.period_number == 1
        assert first.nights == 30
        assert first.total == Decimal("1500")
        assert first.total_with_cc_fee == Decimal("1545.00")
        assert first.is_first_payment is True
        assert first.is_prorated is False

        assert second.period_number == 2
        assert second.nights == 15
        assert second.total == Decimal("750")
        assert second.total_with_cc_fee == Decimal("772.50")
        assert second.is_first_payment is False
        assert second.is_prorated is True

    def test_period_dates_follow_list_position(self, engine: PricingEngine, make_rates):
        """Periods start and end on the dates of their first and last nights."""
        start = dt.date(2030, 1, 1)
        result = engine.compute_breakdown(make_rates(45, 50, start))

        first, second = result.billing_schedule
        assert first.start_date == start
        assert first.end_date == dt.date(2030, 1, 30)
        assert second.start_date == dt.date(2030, 1, 31)
        assert second.end_date == dt.date(2030, 2, 14)

    def test_exactly_thirty_nights_is_long_term(self, engine: PricingEngine, make_rates):
        """The threshold is inclusive and yields one unprorated period."""
        result = engine.compute_breakdown(make_rates(30, 100))

        assert result.is_long_term is True
        assert len(result.billing_schedule) == 1
        period = result.billing_schedule[0]
        assert period.nights == 30
        assert period.is_prorated is False
        assert period.is_first_payment is True

    def test_tax_override_ignored(self, engine: PricingEngine, make_rates):
        """Long-term stays stay tax exempt even with an override."""
        result = engine.compute_breakdown(make_rates(31, 100), tax_rate_override=Decimal("0.2"))

        assert result.tax_rate == 0
        assert result.tax_amount == 0

    def test_periods_are_tax_exempt(self, engine: PricingEngine, make_rates):
        """Every billing period carries zero tax."""
        result = engine.compute_breakdown(make_rates(95, 80))

        assert all(p.tax_amount == 0 for p in result.billing_schedule)

    def test_full_final_period_is_not_prorated(self, engine: PricingEngine, make_rates):
        """A final period of exactly one cycle is not prorated."""
        result = engine.compute_breakdown(make_rates(60, 40))

        assert [p.nights for p in result.billing_schedule] == [30, 30]
        assert not any(p.is_prorated for p in result.billing_schedule)

    def test_configurable_threshold_and_cycle(self, make_rates):
        """Threshold, cycle and fee come from configuration."""
        config = PricingConfig(
            long_term_threshold=7,
            billing_cycle_nights=7,
            cc_fee_rate=Decimal("0.05"),
        )
        result = PricingEngine(config).compute_breakdown(make_rates(10, 100))

        assert result.is_long_term is True
        assert [p.nights for p in result.billing_schedule] == [7, 3]
        assert result.billing_schedule[0].total_with_cc_fee == Decimal("735.00")


# === Schedule Properties ===


class TestScheduleProperties:
    """Invariants that hold for every long-term stay length."""

    @pytest.mark.parametrize("nights", [30, 31, 59, 60, 61, 89, 120, 200])
    def test_periods_cover_stay(self, engine: PricingEngine, make_rates, nights: int):
        """Periods partition the stay: count, nights and subtotal all add up."""
        rates = [
            NightlyRate(date=dt.date(2030, 1, 1) + dt.timedelta(days=i), rate=Decimal("73.37") + i)
            for i in range(nights)
        ]
        result = engine.compute_breakdown(rates)
        schedule = result.billing_schedule

        assert len(schedule) == -(-nights // 30)
        assert sum(p.nights for p in schedule) == nights
        assert sum((p.subtotal for p in schedule), Decimal("0")) == result.subtotal
        assert all(p.nights == 30 for p in schedule[:-1])
        assert all(p.nights <= 30 for p in schedule)
        last = schedule[-1]
        assert last.is_prorated == (len(schedule) > 1 and last.nights < 30)
        assert not schedule[0].is_prorated
        assert result.total_ach <= result.total_with_cc_fee


# === Edge Cases ===


class TestEdgeCases:
    """Empty input, rounding and determinism."""

    def test_empty_rates(self, engine: PricingEngine):
        """No nights gives a zero breakdown without raising."""
        result = engine.compute_breakdown([])

        assert result.nights == 0
        assert result.subtotal == 0
        assert result.total_with_cc_fee == 0
        assert result.is_long_term is False
        assert result.billing_schedule is None

    def test_subtotal_is_exact_sum(self, engine: PricingEngine):
        """Fractional-cent rates are summed without rounding."""
        rates = [
            NightlyRate(date=dt.date(2030, 1, 1), rate=Decimal("33.333")),
            NightlyRate(date=dt.date(2030, 1, 2), rate=Decimal("33.333")),
        ]
        result = engine.compute_breakdown(rates)

        assert result.subtotal == Decimal("66.666")
        assert result.tax_amount == Decimal("6.67")

    def test_tax_rounds_half_up(self, engine: PricingEngine):
        """Half a cent rounds up, not to even."""
        result = engine.compute_breakdown(
            [NightlyRate(date=dt.date(2030, 1, 1), rate=Decimal("1.25"))]
        )

        assert result.tax_amount == Decimal("0.13")

    def test_recomputation_is_identical(self, engine: PricingEngine, long_stay_rates):
        """Two computations of the same input are equal."""
        first = engine.compute_breakdown(long_stay_rates)
        second = engine.compute_breakdown(list(long_stay_rates))

        assert first == second
        assert first.model_dump_json() == second.model_dump_json()

    def test_round2_and_to_cents(self):
        """Helpers round half away from zero."""
        assert round2(Decimal("2.675")) == Decimal("2.68")
        assert to_cents(Decimal("1545.00")) == 154500
        assert to_cents(Decimal("772.505")) == 77251


# === Charge Selection ===


class TestChargeSelection:
    """Amounts charged now by card and by ACH."""

    def test_short_stay_charges_full_total(self, engine: PricingEngine, short_stay_rates):
        """Short stays pay the full total; card and ACH are equal."""
        breakdown = engine.compute_breakdown(short_stay_rates)

        assert card_charge_amount(breakdown) == Decimal("330.00")
        assert ach_charge_amount(breakdown) == Decimal("330.00")
        assert remaining_periods(breakdown) == []

    def test_long_stay_charges_first_period(self, engine: PricingEngine, long_stay_rates):
        """Long-term stays pay period 1; card adds the fee, ACH does not."""
        breakdown = engine.compute_breakdown(long_stay_rates)

        assert card_charge_amount(breakdown) == Decimal("1545.00")
        assert ach_charge_amount(breakdown) == Decimal("1500")
        assert [p.period_number for p in remaining_periods(breakdown)] == [2, 3]


# === Configuration ===


class TestPricingConfig:
    """Environment-driven configuration."""

    def test_defaults(self):
        """Defaults match the standard deployment."""
        config = PricingConfig()

        assert config.default_tax_rate == Decimal("0.08")
        assert config.long_term_threshold == 30
        assert config.cc_fee_rate == Decimal("0.03")
        assert config.billing_cycle_nights == 30

    def test_from_env(self, monkeypatch):
        """Values are read from environment variables."""
        monkeypatch.setenv("STAY_TAX_RATE", "0.115")
        monkeypatch.setenv("LONG_TERM_THRESHOLD_NIGHTS", "28")
        monkeypatch.delenv("CC_FEE_RATE", raising=False)
        monkeypatch.delenv("BILLING_CYCLE_NIGHTS", raising=False)

        config = PricingConfig.from_env()

        assert config.default_tax_rate == Decimal("0.115")
        assert config.long_term_threshold == 28
        assert config.cc_fee_rate == Decimal("0.03")
