"""
Pilot Bonus Calculator

Flat bonus tiers for pilot contracts, keyed on the invoice amount.
"""

from decimal import Decimal

from ..models import CalculationContext
from .base_commission import quantize_money


class PilotBonusCalculator:
    """Calculates the pilot bonus for an invoice."""

    def calculate(self, ctx: CalculationContext) -> Decimal:
        """
        Calculate pilot bonus.

        Tiers (pilot contracts only):
        - amount == 0                     -> pilot_bonus_unpaid
        - low_min <= amount < high_min    -> pilot_bonus_low
        - amount >= high_min              -> pilot_bonus_high
        - 0 < amount < low_min            -> no bonus
        """
        if not ctx.contract.is_pilot:
            return Decimal('0')

        config = ctx.config
        amount = ctx.invoice.amount

        if amount == 0:
            return quantize_money(config.pilot_bonus_unpaid)

        if config.pilot_bonus_low_min <= amount < config.pilot_bonus_high_min:
            return quantize_money(config.pilot_bonus_low)

        if amount >= config.pilot_bonus_high_min:
            return quantize_money(config.pilot_bonus_high)

        # Paid, but below the lowest tier
        return Decimal('0')
