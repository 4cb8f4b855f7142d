"""
Domain Models for the Commission Engine

These dataclasses provide type-safe representations of contracts, invoices,
rate configurations and the commissions computed from them.
All monetary values use Decimal for precision.
"""

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from decimal import Decimal, InvalidOperation

# =============================================================================
# ENUMERATED VALUES
# =============================================================================

CONTRACT_TYPES = ("new", "renewal", "upsell")
PAYMENT_TERMS = ("annual", "quarterly", "monthly", "upfront", "full-upfront")
REVENUE_TYPES = ("recurring", "non-recurring", "service")
NON_COMMISSIONABLE_REVENUE_TYPES = ("non-recurring", "service")

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUS_PAID = "paid"
COMMISSION_STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED, STATUS_PAID)

# Statuses that count toward an AE's earned total
EARNED_STATUSES = (STATUS_APPROVED, STATUS_PAID)


def to_decimal(value, name: str = "value") -> Decimal:
    """Convert a JSON number (or numeric string) to Decimal via str()."""
    if isinstance(value, bool) or value is None:
        raise ValueError(f"{name} must be numeric, got: {value!r}")
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ValueError(f"{name} must be numeric, got: {value!r}") from None
    if not result.is_finite():
        raise ValueError(f"{name} must be a finite number, got: {value!r}")
    return result


def to_date(value, name: str = "date") -> date:
    """Accept a date, a datetime or an ISO 'YYYY-MM-DD' string."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value)[:10])
    except ValueError:
        raise ValueError(f"{name} must be an ISO date, got: {value!r}") from None


def _optional_date(value, name: str) -> date | None:
    return to_date(value, name) if value is not None else None


def to_bool(value, name: str = "flag") -> bool:
    """Accept a JSON boolean; null means False. Strings like "false" are rejected."""
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{name} must be true or false, got: {value!r}")
    return value


# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass(frozen=True)
class Contract:
    """A signed deal owned by an account executive."""

    client_name: str
    ae_id: int
    contract_value: Decimal
    acv: Decimal
    contract_type: str  # 'new', 'renewal' or 'upsell'
    contract_length: int  # years
    payment_terms: str
    is_pilot: bool = False
    id: int | None = None
    notes: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Contract":
        return cls(
            client_name=data.get("client_name", ""),
            ae_id=int(data["ae_id"]),
            contract_value=to_decimal(data["contract_value"], "contract_value"),
            acv=to_decimal(data["acv"], "acv"),
            contract_type=data.get("contract_type", "new"),
            contract_length=int(data["contract_length"]),
            payment_terms=data["payment_terms"],
            is_pilot=to_bool(data.get("is_pilot"), "is_pilot"),
            id=data.get("id"),
            notes=data.get("notes"),
        )


@dataclass(frozen=True)
class Invoice:
    """A billing event against a contract."""

    contract_id: int | None
    amount: Decimal
    revenue_type: str  # 'recurring', 'non-recurring' or 'service'
    invoice_date: date
    id: int | None = None
    notes: str | None = None

    @property
    def is_commissionable(self) -> bool:
        return self.revenue_type not in NON_COMMISSIONABLE_REVENUE_TYPES

    @classmethod
    def from_dict(cls, data: dict) -> "Invoice":
        return cls(
            contract_id=data.get("contract_id"),
            amount=to_decimal(data["amount"], "amount"),
            revenue_type=data["revenue_type"],
            invoice_date=to_date(data["invoice_date"], "invoice_date"),
            id=data.get("id"),
            notes=data.get("notes"),
        )


# Config-level defaults. The engine never falls back to these on its own;
# RateConfiguration.from_dict resolves them once when a configuration is built.
DEFAULT_RATE_CONFIGURATION = {
    "high_value_cap": Decimal("8250000"),
    "high_value_rate": Decimal("0.025"),
    "pilot_bonus_unpaid": Decimal("500"),
    "pilot_bonus_low": Decimal("2500"),
    "pilot_bonus_low_min": Decimal("25000"),
    "pilot_bonus_high": Decimal("5000"),
    "pilot_bonus_high_min": Decimal("50000"),
    "multi_year_bonus": Decimal("10000"),
    "multi_year_min_acv": Decimal("250000"),
    "upfront_bonus": Decimal("15000"),
    "ote_cap_amount": Decimal("1000000"),
    "ote_decelerator": Decimal("0.90"),
}


@dataclass(frozen=True)
class RateConfiguration:
    """A named set of commission parameters assignable to an AE."""

    base_commission_rate: Decimal
    high_value_cap: Decimal = DEFAULT_RATE_CONFIGURATION["high_value_cap"]
    high_value_rate: Decimal = DEFAULT_RATE_CONFIGURATION["high_value_rate"]
    pilot_bonus_unpaid: Decimal = DEFAULT_RATE_CONFIGURATION["pilot_bonus_unpaid"]
    pilot_bonus_low: Decimal = DEFAULT_RATE_CONFIGURATION["pilot_bonus_low"]
    pilot_bonus_low_min: Decimal = DEFAULT_RATE_CONFIGURATION["pilot_bonus_low_min"]
    pilot_bonus_high: Decimal = DEFAULT_RATE_CONFIGURATION["pilot_bonus_high"]
    pilot_bonus_high_min: Decimal = DEFAULT_RATE_CONFIGURATION["pilot_bonus_high_min"]
    multi_year_bonus: Decimal = DEFAULT_RATE_CONFIGURATION["multi_year_bonus"]
    multi_year_min_acv: Decimal = DEFAULT_RATE_CONFIGURATION["multi_year_min_acv"]
    upfront_bonus: Decimal = DEFAULT_RATE_CONFIGURATION["upfront_bonus"]
    ote_cap_amount: Decimal = DEFAULT_RATE_CONFIGURATION["ote_cap_amount"]
    ote_decelerator: Decimal = DEFAULT_RATE_CONFIGURATION["ote_decelerator"]
    name: str = "Standard Commission Structure"
    description: str | None = None
    id: int | None = None

    def with_changes(self, **changes) -> "RateConfiguration":
        """Return a copy with the given fields replaced (monetary fields coerced)."""
        coerced = {
            key: to_decimal(value, key) if key in DEFAULT_RATE_CONFIGURATION or key == "base_commission_rate" else value
            for key, value in changes.items()
        }
        return replace(self, **coerced)

    @classmethod
    def from_dict(cls, data: dict) -> "RateConfiguration":
        """
        Build a fully-resolved configuration.

        base_commission_rate is required. Every other rate field falls back to
        DEFAULT_RATE_CONFIGURATION only when absent or null; an explicit zero
        is kept as zero.
        """
        resolved = {}
        for key, default in DEFAULT_RATE_CONFIGURATION.items():
            value = data.get(key)
            resolved[key] = to_decimal(value, key) if value is not None else default

        return cls(
            base_commission_rate=to_decimal(data["base_commission_rate"], "base_commission_rate"),
            name=data.get("name", "Standard Commission Structure"),
            description=data.get("description"),
            id=data.get("id"),
            **resolved,
        )


@dataclass(frozen=True)
class ConfigAssignment:
    """Assignment of a rate configuration to an AE for an effective period."""

    ae_id: int
    config_id: int
    start_date: date
    end_date: date | None = None  # None = open-ended, otherwise inclusive
    id: int | None = None

    def is_effective_on(self, on_date: date) -> bool:
        if self.start_date > on_date:
            return False
        return self.end_date is None or self.end_date >= on_date

    @classmethod
    def from_dict(cls, data: dict) -> "ConfigAssignment":
        return cls(
            ae_id=int(data["ae_id"]),
            config_id=int(data["config_id"]),
            start_date=to_date(data["start_date"], "start_date"),
            end_date=_optional_date(data.get("end_date"), "end_date"),
            id=data.get("id"),
        )


@dataclass
class CommissionInput:
    """Complete input for one commission calculation."""

    invoice: Invoice
    contract: Contract
    config: RateConfiguration
    year_to_date_earned: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, data: dict) -> "CommissionInput":
        return cls(
            invoice=Invoice.from_dict(data["invoice"]),
            contract=Contract.from_dict(data["contract"]),
            config=RateConfiguration.from_dict(data["config"]),
            year_to_date_earned=to_decimal(data.get("year_to_date_earned", 0), "year_to_date_earned"),
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass(frozen=True)
class CommissionBreakdown:
    """
    Result of one commission calculation.

    When cap_applied is True, total_commission is the decelerated subtotal
    while the four components keep their pre-decelerator values.
    """

    base_commission: Decimal = Decimal("0")
    pilot_bonus: Decimal = Decimal("0")
    multi_year_bonus: Decimal = Decimal("0")
    upfront_bonus: Decimal = Decimal("0")
    total_commission: Decimal = Decimal("0")
    cap_applied: bool = False

    @property
    def subtotal(self) -> Decimal:
        return self.base_commission + self.pilot_bonus + self.multi_year_bonus + self.upfront_bonus

    @property
    def cap_adjustment(self) -> Decimal:
        """Amount removed by the OTE decelerator (zero or negative)."""
        return self.total_commission - self.subtotal


@dataclass
class CalculationContext:
    """
    Holds all intermediate state during one commission calculation.
    This is the "bag" that flows through the calculator pipeline.
    """

    # Input (immutable during processing)
    invoice: Invoice
    contract: Contract
    config: RateConfiguration
    year_to_date_earned: Decimal = Decimal("0")

    # Step results (populated as we go)
    base_commission: Decimal = Decimal("0")
    pilot_bonus: Decimal = Decimal("0")
    multi_year_bonus: Decimal = Decimal("0")
    upfront_bonus: Decimal = Decimal("0")

    @property
    def subtotal(self) -> Decimal:
        return self.base_commission + self.pilot_bonus + self.multi_year_bonus + self.upfront_bonus


@dataclass
class Commission:
    """A persisted commission record, mutated only by the approval workflow."""

    invoice_id: int
    ae_id: int
    breakdown: CommissionBreakdown
    status: str = STATUS_PENDING
    id: int | None = None
    approved_by: int | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def total_commission(self) -> Decimal:
        return self.breakdown.total_commission

    @property
    def is_earned(self) -> bool:
        return self.status in EARNED_STATUSES

    def to_dict(self) -> dict:
        breakdown = self.breakdown
        return {
            "id": self.id,
            "invoice_id": self.invoice_id,
            "ae_id": self.ae_id,
            "base_commission": str(breakdown.base_commission),
            "pilot_bonus": str(breakdown.pilot_bonus),
            "multi_year_bonus": str(breakdown.multi_year_bonus),
            "upfront_bonus": str(breakdown.upfront_bonus),
            "total_commission": str(breakdown.total_commission),
            "ote_applied": breakdown.cap_applied,
            "status": self.status,
            "approved_by": self.approved_by,
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat(),
        }
