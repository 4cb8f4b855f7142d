"""
Base Commission Calculator

Applies the configured base rate to the invoice amount, with a reduced rate
above the high-value threshold for high-value deals.
All use Decimal for precision with ROUND_HALF_UP rounding.
"""

from decimal import ROUND_HALF_UP, Decimal

from ..models import CalculationContext


def quantize_money(value: Decimal) -> Decimal:
    """Round to 2 decimal places using half-up rounding."""
    return value.quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)


class BaseCommissionCalculator:
    """Calculates the base commission for an invoice."""

    def calculate(self, ctx: CalculationContext) -> Decimal:
        """
        Calculate base commission.

        High-value deals (contract value above high_value_cap):
        - Invoice portion up to high_value_cap earns base_commission_rate
        - Invoice portion above it earns high_value_rate

        The threshold is tested against the contract's total value but split
        on the invoice amount. Both use the same high_value_cap number.

        All other deals earn base_commission_rate on the full invoice amount.
        """
        config = ctx.config
        amount = ctx.invoice.amount
        base_rate = config.base_commission_rate
        cap = config.high_value_cap

        if ctx.contract.contract_value > cap and amount > cap:
            return quantize_money(cap * base_rate + (amount - cap) * config.high_value_rate)

        return quantize_money(amount * base_rate)
