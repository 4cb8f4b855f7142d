"""
Commission Engine - Main Orchestrator

Coordinates the commission calculation pipeline through discrete, testable steps.
"""

import json
from decimal import Decimal
from typing import Any, Dict

from .calculators import (
    BaseCommissionCalculator,
    MultiYearBonusCalculator,
    OteCapEnforcer,
    PilotBonusCalculator,
    UpfrontBonusCalculator,
)
from .errors import MissingConfigurationError
from .models import (
    CalculationContext,
    CommissionBreakdown,
    CommissionInput,
    Contract,
    Invoice,
    RateConfiguration,
)
from .output import OutputBuilder
from .validators import InputValidator


class CommissionEngine:
    """
    Stateless commission calculator.

    Implements a clear pipeline pattern:
    1. Short-circuit non-commissionable revenue
    2. Build Context
    3. Calculate Base Commission
    4. Calculate Pilot Bonus
    5. Calculate Multi-Year Bonus
    6. Calculate Upfront Bonus
    7. Apply OTE Cap

    Holds no per-call state; one instance can serve any number of callers
    concurrently. It performs no validation and no I/O.
    """

    def __init__(self):
        self.base_calculator = BaseCommissionCalculator()
        self.pilot_calculator = PilotBonusCalculator()
        self.multi_year_calculator = MultiYearBonusCalculator()
        self.upfront_calculator = UpfrontBonusCalculator()
        self.ote_cap_enforcer = OteCapEnforcer()

    def calculate(
        self,
        invoice: Invoice,
        contract: Contract,
        config: RateConfiguration,
        year_to_date_earned: Decimal = Decimal("0"),
    ) -> CommissionBreakdown:
        """
        Calculate the commission breakdown for one invoice.

        Args:
            invoice: The invoice being commissioned (amount >= 0)
            contract: The invoice's contract
            config: The AE's active, fully-resolved rate configuration
            year_to_date_earned: Approved + paid commission total for the AE
                this year, excluding this invoice

        Returns:
            CommissionBreakdown with the four components, total and cap flag
        """
        # Step 1: Non-recurring and service revenue never earns commission
        if not invoice.is_commissionable:
            return CommissionBreakdown()

        # Step 2: Build context
        ctx = CalculationContext(
            invoice=invoice,
            contract=contract,
            config=config,
            year_to_date_earned=year_to_date_earned,
        )

        # Steps 3-6: Components
        ctx.base_commission = self.base_calculator.calculate(ctx)
        ctx.pilot_bonus = self.pilot_calculator.calculate(ctx)
        ctx.multi_year_bonus = self.multi_year_calculator.calculate(ctx)
        ctx.upfront_bonus = self.upfront_calculator.calculate(ctx)

        # Step 7: OTE cap
        return self.ote_cap_enforcer.apply(ctx)

    def process(self, input_data: CommissionInput) -> CommissionBreakdown:
        """Calculate from a CommissionInput bundle."""
        return self.calculate(
            input_data.invoice,
            input_data.contract,
            input_data.config,
            input_data.year_to_date_earned,
        )


class CommissionRequestProcessor:
    """
    Validates raw API input and renders the engine result for a response.

    This is the caller side of the engine: it owns validation and the
    missing-configuration check, the engine owns the arithmetic.
    """

    def __init__(self, engine: CommissionEngine | None = None):
        self.engine = engine or CommissionEngine()
        self.validator = InputValidator()
        self.output_builder = OutputBuilder()

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Process a commission calculation from raw dictionary input.

        Convenience method for API usage.
        """
        self.check_request_shape(data)

        input_data = CommissionInput.from_dict(data)
        self.validator.validate(input_data)
        breakdown = self.engine.process(input_data)
        return self.output_builder.build(input_data, breakdown)

    @staticmethod
    def check_request_shape(data: Any) -> None:
        """
        Reject request bodies whose sections are not JSON objects.

        Raises:
            ValueError: the body, invoice, contract or config is not an object
            MissingConfigurationError: config is absent, null or empty
        """
        if not isinstance(data, dict):
            raise ValueError(f"Request body must be a JSON object, got: {type(data).__name__}")
        for section in ("invoice", "contract"):
            if not isinstance(data.get(section), dict):
                raise ValueError(f"'{section}' must be a JSON object")

        config = data.get("config")
        if not config:
            raise MissingConfigurationError(data["contract"].get("ae_id", "unknown"))
        if not isinstance(config, dict):
            raise ValueError("'config' must be a JSON object")

    @staticmethod
    def invoice_reference(data: Dict[str, Any]) -> Any:
        """Invoice id for log lines; call after check_request_shape."""
        return data["invoice"].get("id", "new")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

_default_engine = CommissionEngine()


def calculate_commission(
    invoice: Invoice,
    contract: Contract,
    config: RateConfiguration,
    year_to_date_earned: Decimal = Decimal("0"),
) -> CommissionBreakdown:
    """Calculate one commission breakdown with the shared stateless engine."""
    return _default_engine.calculate(invoice, contract, config, year_to_date_earned)


def process_commission_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """Process a calculation request from a Python dict and return a Python dict."""
    processor = CommissionRequestProcessor()
    return processor.process_from_dict(input_data)


def process_commission_from_json(json_input: str) -> str:
    """
    Process a calculation request from a JSON string and return a JSON string.
    """
    try:
        input_data = json.loads(json_input)
        result = process_commission_from_dict(input_data)
        return json.dumps(result, indent=2)

    except MissingConfigurationError as e:
        error_response = {"error": str(e), "status": "missing_configuration"}
        return json.dumps(error_response, indent=2)

    except (ValueError, KeyError, TypeError) as e:
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)
