"""
Input Validation for the Commission Engine

Validates contracts, invoices and rate configurations before the engine runs.
The engine itself trusts its inputs; this is the caller-side gate.
Raises ValueError with clear messages for any constraint violations.
"""

from decimal import Decimal

from .models import (
    CONTRACT_TYPES,
    PAYMENT_TERMS,
    REVENUE_TYPES,
    CommissionInput,
    Contract,
    Invoice,
    RateConfiguration,
)

RATE_FIELDS = ("base_commission_rate", "high_value_rate", "ote_decelerator")
AMOUNT_FIELDS = (
    "high_value_cap",
    "pilot_bonus_unpaid",
    "pilot_bonus_low",
    "pilot_bonus_low_min",
    "pilot_bonus_high",
    "pilot_bonus_high_min",
    "multi_year_bonus",
    "multi_year_min_acv",
    "upfront_bonus",
    "ote_cap_amount",
)


class InputValidator:
    """Validates commission input according to business rules."""

    def validate(self, input_data: CommissionInput) -> None:
        """
        Run all validations. Raises ValueError if any check fails.
        """
        self._validate_invoice(input_data.invoice)
        self._validate_contract(input_data.contract)
        self.validate_config(input_data.config)

        if input_data.year_to_date_earned < 0:
            raise ValueError(
                f"year_to_date_earned cannot be negative, got: {input_data.year_to_date_earned}"
            )

    def _validate_invoice(self, invoice: Invoice) -> None:
        """Validate invoice-level constraints."""
        if invoice.amount < 0:
            raise ValueError(f"invoice amount cannot be negative, got: {invoice.amount}")

        if invoice.revenue_type not in REVENUE_TYPES:
            raise ValueError(
                f"Invalid revenue_type: {invoice.revenue_type}. Must be one of {', '.join(REVENUE_TYPES)}"
            )

    def _validate_contract(self, contract: Contract) -> None:
        """Validate contract-level constraints."""
        if contract.contract_value < 0:
            raise ValueError(f"contract_value cannot be negative, got: {contract.contract_value}")

        if contract.acv < 0:
            raise ValueError(f"acv cannot be negative, got: {contract.acv}")

        if contract.contract_length < 1:
            raise ValueError(f"contract_length must be at least 1 year, got: {contract.contract_length}")

        if contract.contract_type not in CONTRACT_TYPES:
            raise ValueError(
                f"Invalid contract_type: {contract.contract_type}. Must be one of {', '.join(CONTRACT_TYPES)}"
            )

        if contract.payment_terms not in PAYMENT_TERMS:
            raise ValueError(
                f"Invalid payment_terms: {contract.payment_terms}. Must be one of {', '.join(PAYMENT_TERMS)}"
            )

    def validate_config(self, config: RateConfiguration) -> None:
        """Validate rate configuration constraints."""
        for name in RATE_FIELDS:
            rate = getattr(config, name)
            if not (Decimal("0") <= rate <= Decimal("1")):
                raise ValueError(f"{name} must be between 0 and 1, got: {rate}")

        for name in AMOUNT_FIELDS:
            amount = getattr(config, name)
            if amount < 0:
                raise ValueError(f"{name} cannot be negative, got: {amount}")

        if config.pilot_bonus_low_min > config.pilot_bonus_high_min:
            raise ValueError(
                f"pilot_bonus_low_min ({config.pilot_bonus_low_min}) cannot exceed "
                f"pilot_bonus_high_min ({config.pilot_bonus_high_min})"
            )
