"""
Unit Tests for Multi-Year and Upfront Bonus Calculators
"""

from datetime import date
from decimal import Decimal

import pytest

from commission_engine.calculators.bonuses import MultiYearBonusCalculator, UpfrontBonusCalculator
from commission_engine.models import CalculationContext, Contract, Invoice, RateConfiguration


class TestMultiYearBonus:
    """Multi-year bonus requires length > 1 year AND ACV above the minimum."""

    @pytest.fixture
    def calculator(self):
        return MultiYearBonusCalculator()

    def test_multi_year_high_acv_earns_bonus(self, calculator):
        ctx = _make_context(contract_length=4, acv=1000000)

        assert calculator.calculate(ctx) == Decimal("10000")

    def test_low_acv_earns_nothing(self, calculator):
        """$64,000 ACV is below the $250,000 minimum."""
        ctx = _make_context(contract_length=4, acv=64000)

        assert calculator.calculate(ctx) == Decimal("0")

    def test_acv_exactly_at_minimum_earns_nothing(self, calculator):
        ctx = _make_context(contract_length=3, acv=250000)

        assert calculator.calculate(ctx) == Decimal("0")

    def test_single_year_earns_nothing(self, calculator):
        ctx = _make_context(contract_length=1, acv=1000000)

        assert calculator.calculate(ctx) == Decimal("0")

    def test_configured_amount(self, calculator):
        ctx = _make_context(contract_length=2, acv=300000, multi_year_bonus=7500)

        assert calculator.calculate(ctx) == Decimal("7500")


class TestUpfrontBonus:
    """Upfront bonus applies to the literal 'upfront' payment terms only."""

    @pytest.fixture
    def calculator(self):
        return UpfrontBonusCalculator()

    def test_upfront_terms_earn_bonus(self, calculator):
        ctx = _make_context(payment_terms="upfront")

        assert calculator.calculate(ctx) == Decimal("15000")

    def test_full_upfront_does_not_earn_bonus(self, calculator):
        ctx = _make_context(payment_terms="full-upfront")

        assert calculator.calculate(ctx) == Decimal("0")

    @pytest.mark.parametrize("terms", ["annual", "quarterly", "monthly"])
    def test_periodic_terms_earn_nothing(self, calculator, terms):
        ctx = _make_context(payment_terms=terms)

        assert calculator.calculate(ctx) == Decimal("0")


def _make_context(contract_length=1, acv=100000, payment_terms="annual", **config_overrides) -> CalculationContext:
    contract = Contract(
        client_name="Test Client",
        ae_id=1,
        contract_value=Decimal(str(acv)) * contract_length,
        acv=Decimal(str(acv)),
        contract_type="new",
        contract_length=contract_length,
        payment_terms=payment_terms,
    )
    invoice = Invoice(
        contract_id=1,
        amount=Decimal("10000"),
        revenue_type="recurring",
        invoice_date=date(2025, 3, 15),
    )
    config = RateConfiguration.from_dict({"base_commission_rate": "0.10", **config_overrides})
    return CalculationContext(invoice=invoice, contract=contract, config=config)
