"""
Unit Tests for Pilot Bonus Calculator

Tests verify the unpaid / low / high pilot tiers and the gap below the low tier.
"""

from datetime import date
from decimal import Decimal

import pytest

from commission_engine.calculators.pilot import PilotBonusCalculator
from commission_engine.models import CalculationContext, Contract, Invoice, RateConfiguration


class TestPilotBonusTiers:
    """Test pilot tier selection with the standard configuration."""

    @pytest.fixture
    def calculator(self):
        return PilotBonusCalculator()

    def test_unpaid_pilot(self, calculator):
        ctx = self._make_context(amount=0)

        assert calculator.calculate(ctx) == Decimal("500")

    def test_low_tier(self, calculator):
        """$30,000 sits between the $25,000 and $50,000 breakpoints."""
        ctx = self._make_context(amount=30000)

        assert calculator.calculate(ctx) == Decimal("2500")

    def test_low_tier_lower_bound_is_inclusive(self, calculator):
        ctx = self._make_context(amount=25000)

        assert calculator.calculate(ctx) == Decimal("2500")

    def test_high_tier_lower_bound_is_inclusive(self, calculator):
        ctx = self._make_context(amount=50000)

        assert calculator.calculate(ctx) == Decimal("5000")

    def test_just_below_high_tier(self, calculator):
        ctx = self._make_context(amount="49999.99")

        assert calculator.calculate(ctx) == Decimal("2500")

    def test_large_invoice_gets_high_tier(self, calculator):
        ctx = self._make_context(amount=1000000)

        assert calculator.calculate(ctx) == Decimal("5000")

    @pytest.mark.parametrize("amount", ["0.01", "1", "24999.99"])
    def test_gap_between_unpaid_and_low_tier(self, calculator, amount):
        """Paid pilots below the low breakpoint earn nothing."""
        ctx = self._make_context(amount=amount)

        assert calculator.calculate(ctx) == Decimal("0")

    def test_non_pilot_never_gets_bonus(self, calculator):
        for amount in (0, 30000, 50000):
            ctx = self._make_context(amount=amount, is_pilot=False)
            assert calculator.calculate(ctx) == Decimal("0")

    def test_configured_tiers(self, calculator):
        ctx = self._make_context(
            amount=12000,
            pilot_bonus_low=1000,
            pilot_bonus_low_min=10000,
            pilot_bonus_high_min=20000,
        )

        assert calculator.calculate(ctx) == Decimal("1000")

    def test_tiers_are_mutually_exclusive(self, calculator):
        """Exactly one of {unpaid, low, high, zero} for each amount."""
        config = RateConfiguration.from_dict({"base_commission_rate": "0.10"})
        expected = {
            "0": config.pilot_bonus_unpaid,
            "1": Decimal("0"),
            "24999.99": Decimal("0"),
            "25000": config.pilot_bonus_low,
            "49999.99": config.pilot_bonus_low,
            "50000": config.pilot_bonus_high,
            "750000": config.pilot_bonus_high,
        }
        for amount, bonus in expected.items():
            assert calculator.calculate(self._make_context(amount=amount)) == bonus, amount

    def _make_context(self, amount, is_pilot=True, **config_overrides) -> CalculationContext:
        contract = Contract(
            client_name="Pilot Client",
            ae_id=1,
            contract_value=Decimal("60000"),
            acv=Decimal("60000"),
            contract_type="new",
            contract_length=1,
            payment_terms="monthly",
            is_pilot=is_pilot,
        )
        invoice = Invoice(
            contract_id=1,
            amount=Decimal(str(amount)),
            revenue_type="recurring",
            invoice_date=date(2025, 3, 15),
        )
        config = RateConfiguration.from_dict({"base_commission_rate": "0.10", **config_overrides})
        return CalculationContext(invoice=invoice, contract=contract, config=config)
