"""
Tests for domain model construction and config-level defaults.
"""

from datetime import date, datetime
from decimal import Decimal

import pytest

from commission_engine.models import (
    DEFAULT_RATE_CONFIGURATION,
    Commission,
    CommissionBreakdown,
    CommissionInput,
    ConfigAssignment,
    Contract,
    Invoice,
    RateConfiguration,
)


class TestRateConfigurationDefaults:
    """Defaults are resolved once, when the configuration is built."""

    def test_absent_fields_take_config_defaults(self):
        config = RateConfiguration.from_dict({"base_commission_rate": 0.1})

        assert config.base_commission_rate == Decimal("0.1")
        assert config.high_value_cap == Decimal("8250000")
        assert config.high_value_rate == Decimal("0.025")
        assert config.pilot_bonus_unpaid == Decimal("500")
        assert config.multi_year_min_acv == Decimal("250000")
        assert config.upfront_bonus == Decimal("15000")
        assert config.ote_cap_amount == Decimal("1000000")
        assert config.ote_decelerator == Decimal("0.90")

    def test_null_fields_take_config_defaults(self):
        config = RateConfiguration.from_dict({"base_commission_rate": 0.1, "upfront_bonus": None})

        assert config.upfront_bonus == DEFAULT_RATE_CONFIGURATION["upfront_bonus"]

    def test_explicit_zero_is_kept(self):
        config = RateConfiguration.from_dict({"base_commission_rate": 0.1, "pilot_bonus_unpaid": 0})

        assert config.pilot_bonus_unpaid == Decimal("0")

    def test_base_rate_is_required(self):
        with pytest.raises(KeyError):
            RateConfiguration.from_dict({"upfront_bonus": 1000})

    def test_non_numeric_value_rejected(self):
        with pytest.raises(ValueError, match="ote_cap_amount must be numeric"):
            RateConfiguration.from_dict({"base_commission_rate": 0.1, "ote_cap_amount": "lots"})

    def test_boolean_is_not_a_number(self):
        with pytest.raises(ValueError):
            RateConfiguration.from_dict({"base_commission_rate": True})

    def test_floats_converted_through_str(self):
        config = RateConfiguration.from_dict({"base_commission_rate": 0.1})

        assert config.base_commission_rate == Decimal("0.1")
        assert config.base_commission_rate != Decimal(0.1)

    def test_with_changes_coerces_money(self):
        config = RateConfiguration.from_dict({"base_commission_rate": 0.1, "name": "Standard"})
        updated = config.with_changes(upfront_bonus=20000, name="Enterprise")

        assert updated.upfront_bonus == Decimal("20000")
        assert updated.name == "Enterprise"
        assert config.upfront_bonus == Decimal("15000")


class TestInputModels:
    """Contract / Invoice / CommissionInput parsing."""

    def test_contract_from_dict(self):
        contract = Contract.from_dict({
            "client_name": "Acme",
            "ae_id": "7",
            "contract_value": "256000",
            "acv": 64000,
            "contract_type": "renewal",
            "contract_length": 4,
            "payment_terms": "monthly",
        })

        assert contract.ae_id == 7
        assert contract.contract_value == Decimal("256000")
        assert contract.is_pilot is False
        assert contract.contract_type == "renewal"

    def test_invoice_from_dict_parses_date(self):
        invoice = Invoice.from_dict({
            "contract_id": 1,
            "amount": "64000.50",
            "revenue_type": "recurring",
            "invoice_date": "2025-03-15T00:00:00Z",
        })

        assert invoice.invoice_date == date(2025, 3, 15)
        assert invoice.amount == Decimal("64000.50")
        assert invoice.is_commissionable is True

    def test_invoice_bad_date_rejected(self):
        with pytest.raises(ValueError, match="invoice_date"):
            Invoice.from_dict({
                "contract_id": 1,
                "amount": 1,
                "revenue_type": "recurring",
                "invoice_date": "15/03/2025",
            })

    @pytest.mark.parametrize("revenue_type", ["non-recurring", "service"])
    def test_non_commissionable_revenue(self, revenue_type):
        invoice = Invoice(contract_id=1, amount=Decimal("1"), revenue_type=revenue_type, invoice_date=date(2025, 1, 1))

        assert invoice.is_commissionable is False

    def test_commission_input_defaults_ytd_to_zero(self):
        input_data = CommissionInput.from_dict({
            "invoice": {"amount": 1, "revenue_type": "recurring", "invoice_date": "2025-01-01"},
            "contract": {
                "ae_id": 1,
                "contract_value": 1,
                "acv": 1,
                "contract_length": 1,
                "payment_terms": "annual",
            },
            "config": {"base_commission_rate": 0.1},
        })

        assert input_data.year_to_date_earned == Decimal("0")

    @pytest.mark.parametrize("amount", ["NaN", "Infinity", "-Infinity", "sNaN", float("nan"), float("inf")])
    def test_non_finite_amount_rejected(self, amount):
        with pytest.raises(ValueError, match="amount must be a finite number"):
            Invoice.from_dict({
                "contract_id": 1,
                "amount": amount,
                "revenue_type": "recurring",
                "invoice_date": "2025-01-01",
            })

    def test_non_finite_config_value_rejected(self):
        with pytest.raises(ValueError, match="ote_cap_amount"):
            RateConfiguration.from_dict({"base_commission_rate": 0.1, "ote_cap_amount": "Infinity"})

    @pytest.mark.parametrize("flag", ["false", "true", 0, 1])
    def test_is_pilot_must_be_boolean(self, flag):
        with pytest.raises(ValueError, match="is_pilot must be true or false"):
            Contract.from_dict({
                "ae_id": 1,
                "contract_value": 1,
                "acv": 1,
                "contract_length": 1,
                "payment_terms": "annual",
                "is_pilot": flag,
            })

    @pytest.mark.parametrize("flag, expected", [(True, True), (False, False), (None, False)])
    def test_is_pilot_accepts_booleans_and_null(self, flag, expected):
        contract = Contract.from_dict({
            "ae_id": 1,
            "contract_value": 1,
            "acv": 1,
            "contract_length": 1,
            "payment_terms": "annual",
            "is_pilot": flag,
        })

        assert contract.is_pilot is expected


class TestConfigAssignment:

    def test_effective_window_is_inclusive(self):
        assignment = ConfigAssignment(
            ae_id=1, config_id=1, start_date=date(2025, 1, 1), end_date=date(2025, 6, 30)
        )

        assert assignment.is_effective_on(date(2025, 1, 1))
        assert assignment.is_effective_on(date(2025, 6, 30))
        assert not assignment.is_effective_on(date(2024, 12, 31))
        assert not assignment.is_effective_on(date(2025, 7, 1))

    def test_open_ended(self):
        assignment = ConfigAssignment.from_dict({"ae_id": 1, "config_id": 2, "start_date": "2025-01-01"})

        assert assignment.end_date is None
        assert assignment.is_effective_on(date(2030, 1, 1))


class TestCommissionRecord:

    def test_breakdown_totals(self):
        breakdown = CommissionBreakdown(
            base_commission=Decimal("100000"),
            multi_year_bonus=Decimal("10000"),
            total_commission=Decimal("99000"),
            cap_applied=True,
        )

        assert breakdown.subtotal == Decimal("110000")
        assert breakdown.cap_adjustment == Decimal("-11000")

    def test_to_dict(self):
        commission = Commission(
            invoice_id=3,
            ae_id=7,
            breakdown=CommissionBreakdown(base_commission=Decimal("6400.00"), total_commission=Decimal("6400.00")),
            id=1,
            created_at=datetime(2025, 3, 15, 9, 30),
        )
        data = commission.to_dict()

        assert data["total_commission"] == "6400.00"
        assert data["ote_applied"] is False
        assert data["status"] == "pending"
        assert data["approved_at"] is None
        assert data["created_at"] == "2025-03-15T09:30:00"
        assert commission.is_earned is False
