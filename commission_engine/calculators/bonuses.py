"""
Contract Bonus Calculators

Flat bonuses driven by contract terms rather than the invoice amount.
"""

from decimal import Decimal

from ..models import CalculationContext
from .base_commission import quantize_money


class MultiYearBonusCalculator:
    """Bonus for multi-year contracts above the ACV threshold."""

    def calculate(self, ctx: CalculationContext) -> Decimal:
        contract = ctx.contract
        config = ctx.config

        if contract.contract_length > 1 and contract.acv > config.multi_year_min_acv:
            return quantize_money(config.multi_year_bonus)
        return Decimal('0')


class UpfrontBonusCalculator:
    """Bonus for contracts paid upfront."""

    # 'full-upfront' is a separate payment term and does not qualify
    QUALIFYING_TERMS = ('upfront',)

    def calculate(self, ctx: CalculationContext) -> Decimal:
        if ctx.contract.payment_terms in self.QUALIFYING_TERMS:
            return quantize_money(ctx.config.upfront_bonus)
        return Decimal('0')
