"""
Output Builder

Constructs the API response for a commission calculation.
"""

from decimal import Decimal

from .models import CommissionBreakdown, CommissionInput


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return round(float(value), 2)


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"${value:,.2f}"


def _pct(rate: Decimal) -> str:
    return f"{float(rate) * 100:g}%"


class OutputBuilder:
    """Builds the calculation response."""

    def build(self, input_data: CommissionInput, breakdown: CommissionBreakdown) -> dict:
        """Construct the complete response from the input and the engine result."""
        return {
            "commission_summary": self._build_summary(input_data, breakdown),
            "calculations": self._build_calculations(input_data, breakdown),
            "cap": self._build_cap(input_data, breakdown),
        }

    def _build_summary(self, input_data: CommissionInput, breakdown: CommissionBreakdown) -> dict:
        invoice = input_data.invoice
        contract = input_data.contract
        return {
            "invoice_id": invoice.id,
            "contract_id": contract.id if contract.id is not None else invoice.contract_id,
            "ae_id": contract.ae_id,
            "client_name": contract.client_name,
            "invoice_amount": to_money(invoice.amount),
            "revenue_type": invoice.revenue_type,
            "invoice_date": invoice.invoice_date.isoformat(),
            "config_name": input_data.config.name,
            "total_commission": to_money(breakdown.total_commission),
            "ote_applied": breakdown.cap_applied,
            "status": "pending",
        }

    def _build_calculations(self, input_data: CommissionInput, breakdown: CommissionBreakdown) -> dict:
        """Build calculations section with value and dynamic description for each line."""
        invoice = input_data.invoice
        contract = input_data.contract
        config = input_data.config
        amount = to_money(invoice.amount)

        if not invoice.is_commissionable:
            skipped = f"Not commissionable: {invoice.revenue_type} revenue"
            calculations = {
                name: {"value": 0.0, "description": skipped}
                for name in ("base_commission", "pilot_bonus", "multi_year_bonus", "upfront_bonus")
            }
            calculations["total_commission"] = {"value": 0.0, "description": skipped}
            return calculations

        cap = config.high_value_cap
        if contract.contract_value > cap and invoice.amount > cap:
            base_desc = (
                f"{_pct(config.base_commission_rate)} × {_fmt(to_money(cap))} + "
                f"{_pct(config.high_value_rate)} × {_fmt(to_money(invoice.amount - cap))} (high-value deal)"
            )
        else:
            base_desc = f"{_pct(config.base_commission_rate)} × {_fmt(amount)}"

        if not contract.is_pilot:
            pilot_desc = "Not a pilot contract"
        elif invoice.amount == 0:
            pilot_desc = "Unpaid pilot bonus"
        elif invoice.amount >= config.pilot_bonus_high_min:
            pilot_desc = f"Paid pilot bonus (invoice ≥ {_fmt(to_money(config.pilot_bonus_high_min))})"
        elif invoice.amount >= config.pilot_bonus_low_min:
            pilot_desc = f"Paid pilot bonus (invoice ≥ {_fmt(to_money(config.pilot_bonus_low_min))})"
        else:
            pilot_desc = f"Pilot invoice below {_fmt(to_money(config.pilot_bonus_low_min))} - no bonus"

        if breakdown.multi_year_bonus:
            multi_year_desc = (
                f"{contract.contract_length}-year contract with ACV {_fmt(to_money(contract.acv))} "
                f"> {_fmt(to_money(config.multi_year_min_acv))}"
            )
        else:
            multi_year_desc = "Multi-year bonus not applicable"

        if breakdown.upfront_bonus:
            upfront_desc = "Upfront payment terms"
        else:
            upfront_desc = f"Upfront bonus not applicable ({contract.payment_terms} payment terms)"

        calculations = {
            "base_commission": {
                "value": to_money(breakdown.base_commission),
                "description": base_desc,
            },
            "pilot_bonus": {"value": to_money(breakdown.pilot_bonus), "description": pilot_desc},
            "multi_year_bonus": {"value": to_money(breakdown.multi_year_bonus), "description": multi_year_desc},
            "upfront_bonus": {"value": to_money(breakdown.upfront_bonus), "description": upfront_desc},
            "subtotal": {
                "value": to_money(breakdown.subtotal),
                "description": "base + pilot + multi-year + upfront",
            },
        }

        # Surface the decelerator as its own line so parts and total reconcile
        if breakdown.cap_applied:
            calculations["ote_cap_adjustment"] = {
                "value": to_money(breakdown.cap_adjustment),
                "description": (
                    f"OTE cap applied: subtotal × {_pct(config.ote_decelerator)} "
                    f"(cap {_fmt(to_money(config.ote_cap_amount))} exceeded)"
                ),
            }

        calculations["total_commission"] = {
            "value": to_money(breakdown.total_commission),
            "description": "subtotal + OTE cap adjustment" if breakdown.cap_applied else "subtotal",
        }
        return calculations

    def _build_cap(self, input_data: CommissionInput, breakdown: CommissionBreakdown) -> dict:
        config = input_data.config
        earned_after = input_data.year_to_date_earned + breakdown.total_commission
        return {
            "ote_cap_amount": to_money(config.ote_cap_amount),
            "ote_decelerator": float(config.ote_decelerator),
            "year_to_date_earned_before": to_money(input_data.year_to_date_earned),
            "year_to_date_earned_after": to_money(earned_after),
            "cap_applied": breakdown.cap_applied,
        }
