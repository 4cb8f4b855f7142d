"""
OTE Cap Enforcer

Applies the annual earnings cap (OTE) decelerator to the commission total.
"""

from ..models import CalculationContext, CommissionBreakdown
from .base_commission import quantize_money


class OteCapEnforcer:
    """Enforces the annual OTE cap on an AE's cumulative earnings."""

    def apply(self, ctx: CalculationContext) -> CommissionBreakdown:
        """
        Build the final breakdown, decelerating the total if the cap is exceeded.

        The cap is exceeded when year_to_date_earned + subtotal is strictly
        greater than ote_cap_amount. Reaching the cap exactly does not trigger
        the decelerator.

        Only the total is decelerated. The four components are reported at
        their pre-decelerator values so the adjustment stays visible.
        """
        subtotal = ctx.subtotal
        cap_applied = (ctx.year_to_date_earned + subtotal) > ctx.config.ote_cap_amount

        if cap_applied:
            total = quantize_money(subtotal * ctx.config.ote_decelerator)
        else:
            total = subtotal

        return CommissionBreakdown(
            base_commission=ctx.base_commission,
            pilot_bonus=ctx.pilot_bonus,
            multi_year_bonus=ctx.multi_year_bonus,
            upfront_bonus=ctx.upfront_bonus,
            total_commission=total,
            cap_applied=cap_applied,
        )
