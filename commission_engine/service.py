"""
Commission Service

Runs the engine for stored invoices and owns the approval workflow.

The engine is pure; everything it needs from persistence is resolved here
through injected lookups:
- the invoice's contract (ContractLookup)
- the AE's active rate configuration (RateConfigurationLookup)
- the AE's year-to-date earned total (LedgerQuery)
"""

import calendar
import logging
import threading
from collections import defaultdict
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Protocol

from .errors import InvalidStatusTransitionError, MissingConfigurationError, NotFoundError
from .models import (
    STATUS_APPROVED,
    STATUS_PAID,
    STATUS_PENDING,
    STATUS_REJECTED,
    Commission,
    CommissionInput,
    Contract,
    Invoice,
    RateConfiguration,
)
from .processor import CommissionEngine
from .validators import InputValidator

logger = logging.getLogger(__name__)

# Approval workflow: the only valid status moves
STATUS_TRANSITIONS: dict[str, tuple[str, ...]] = {
    STATUS_PENDING: (STATUS_APPROVED, STATUS_REJECTED),
    STATUS_APPROVED: (STATUS_PAID,),
    STATUS_REJECTED: (),
    STATUS_PAID: (),
}

RECENT_DEALS_LIMIT = 5
ADMIN_RECENT_LIMIT = 10


class ContractLookup(Protocol):
    def get_contract(self, contract_id: int) -> Contract | None:
        ...


class RateConfigurationLookup(Protocol):
    def get_active_rate_configuration(self, ae_id: int, on_date: date) -> RateConfiguration | None:
        """Return the single active configuration for the AE on the date, or None."""
        ...


class LedgerQuery(Protocol):
    def year_to_date_earned(self, ae_id: int, year: int) -> Decimal:
        """Sum of total_commission over the AE's approved and paid commissions in the year."""
        ...


class CommissionRepository(LedgerQuery, Protocol):
    def add_invoice(self, invoice: Invoice) -> Invoice:
        ...

    def get_invoice(self, invoice_id: int) -> Invoice | None:
        ...

    def add_commission(self, commission: Commission) -> Commission:
        ...

    def get_commission(self, commission_id: int) -> Commission | None:
        ...

    def save_commission(self, commission: Commission) -> Commission:
        ...

    def commission_for_invoice(self, invoice_id: int) -> Commission | None:
        ...

    def list_commissions(self, ae_id: int | None = None, status: str | None = None) -> list[Commission]:
        ...


class CommissionService:
    """Creates commissions from invoices and moves them through approval."""

    def __init__(
        self,
        contracts: ContractLookup,
        configs: RateConfigurationLookup,
        ledger: CommissionRepository,
        engine: CommissionEngine | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.contracts = contracts
        self.configs = configs
        self.ledger = ledger
        self.engine = engine or CommissionEngine()
        self.validator = InputValidator()
        self._clock = clock or datetime.now
        # One lock per AE: the YTD read, calculation and write happen together
        self._ae_locks: dict[int, threading.Lock] = defaultdict(threading.Lock)
        self._ae_locks_guard = threading.Lock()

    # -------------------------------------------------------------------------
    # Commission creation
    # -------------------------------------------------------------------------

    def record_invoice(self, invoice: Invoice) -> Commission:
        """Store a new invoice and create its pending commission."""
        stored = self.ledger.add_invoice(invoice)
        logger.info(f"Invoice {stored.id} recorded for contract {stored.contract_id}")
        return self.create_commission_for_invoice(stored)

    def create_commission_for_invoice(self, invoice: Invoice) -> Commission:
        """
        Compute and persist the pending commission for a stored invoice.

        Raises:
            NotFoundError: the invoice's contract does not exist
            MissingConfigurationError: the AE has no active rate configuration
            ValueError: invalid input, or the invoice already has a commission
        """
        if invoice.id is None:
            raise ValueError("Invoice must be stored before its commission is created")

        contract = self.contracts.get_contract(invoice.contract_id)
        if contract is None:
            raise NotFoundError("Contract", invoice.contract_id)

        now = self._clock()
        config = self.configs.get_active_rate_configuration(contract.ae_id, now.date())
        if config is None:
            logger.warning(f"No active commission configuration for AE {contract.ae_id}")
            raise MissingConfigurationError(contract.ae_id, now.date())

        with self._lock_for(contract.ae_id):
            if self.ledger.commission_for_invoice(invoice.id) is not None:
                raise ValueError(f"Invoice {invoice.id} already has a commission")

            input_data = CommissionInput(
                invoice=invoice,
                contract=contract,
                config=config,
                year_to_date_earned=self.ledger.year_to_date_earned(contract.ae_id, now.year),
            )
            self.validator.validate(input_data)
            breakdown = self.engine.process(input_data)

            commission = self.ledger.add_commission(
                Commission(
                    invoice_id=invoice.id,
                    ae_id=contract.ae_id,
                    breakdown=breakdown,
                    status=STATUS_PENDING,
                    created_at=now,
                )
            )

        logger.info(
            f"Commission {commission.id} created for invoice {invoice.id}: "
            f"{breakdown.total_commission} (OTE applied: {breakdown.cap_applied})"
        )
        return commission

    def _lock_for(self, ae_id: int) -> threading.Lock:
        with self._ae_locks_guard:
            return self._ae_locks[ae_id]

    # -------------------------------------------------------------------------
    # Approval workflow
    # -------------------------------------------------------------------------

    def approve(self, commission_id: int, admin_id: int) -> Commission:
        return self._transition(commission_id, STATUS_APPROVED, admin_id)

    def reject(self, commission_id: int, admin_id: int, reason: str) -> Commission:
        if not reason or not reason.strip():
            raise ValueError("Rejection reason is required")
        return self._transition(commission_id, STATUS_REJECTED, admin_id, reason=reason.strip())

    def mark_paid(self, commission_id: int, admin_id: int) -> Commission:
        return self._transition(commission_id, STATUS_PAID, admin_id)

    def _transition(self, commission_id: int, target: str, admin_id: int, reason: str | None = None) -> Commission:
        commission = self.ledger.get_commission(commission_id)
        if commission is None:
            raise NotFoundError("Commission", commission_id)

        with self._lock_for(commission.ae_id):
            current = commission.status
            if target not in STATUS_TRANSITIONS[current]:
                raise InvalidStatusTransitionError(commission_id, current, target)

            commission.status = target
            if target in (STATUS_APPROVED, STATUS_REJECTED):
                commission.approved_by = admin_id
                commission.approved_at = self._clock()
            if reason is not None:
                commission.rejection_reason = reason
            self.ledger.save_commission(commission)

        logger.info(f"Commission {commission_id} moved {current} -> {target} by admin {admin_id}")
        return commission

    # -------------------------------------------------------------------------
    # Statements and dashboards
    # -------------------------------------------------------------------------

    def pending_commissions(self, ae_id: int | None = None) -> list[dict]:
        pending = self.ledger.list_commissions(ae_id=ae_id, status=STATUS_PENDING)
        return [self._with_details(c) for c in self._newest_first(pending)]

    def commission_statement(
        self,
        ae_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        contract_id: int | None = None,
        status: str | None = None,
    ) -> list[dict]:
        """The AE's commissions, filtered on invoice date, contract and status, newest first."""
        statement = []
        for commission in self._newest_first(self.ledger.list_commissions(ae_id=ae_id, status=status)):
            invoice = self.ledger.get_invoice(commission.invoice_id)
            if invoice is None:
                logger.error(f"Invoice {commission.invoice_id} not found for commission {commission.id}")
                continue
            if start_date is not None and invoice.invoice_date < start_date:
                continue
            if end_date is not None and invoice.invoice_date > end_date:
                continue
            if contract_id is not None and invoice.contract_id != contract_id:
                continue
            statement.append(self._with_details(commission, invoice))
        return statement

    def ote_progress(self, ae_id: int, year: int | None = None) -> dict:
        """Progress toward the AE's OTE cap, using their active configuration."""
        today = self._clock().date()
        year = year or today.year
        config = self.configs.get_active_rate_configuration(ae_id, today)
        if config is None:
            raise MissingConfigurationError(ae_id, today)

        current = self.ledger.year_to_date_earned(ae_id, year)
        if config.ote_cap_amount > 0:
            percentage = min(current / config.ote_cap_amount * Decimal("100"), Decimal("100"))
        else:
            percentage = Decimal("100")

        return {
            "current": str(current.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
            "cap": str(config.ote_cap_amount),
            "percentage": float(percentage.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)),
        }

    def _ote_progress_or_none(self, ae_id: int, year: int) -> dict | None:
        # Dashboards still render for an AE with no configuration assigned
        try:
            return self.ote_progress(ae_id, year)
        except MissingConfigurationError:
            logger.warning(f"No active commission configuration for AE {ae_id}; OTE progress omitted")
            return None

    def monthly_commissions(self, ae_id: int, months: int = 6) -> list[dict]:
        """
        Earned commission per calendar month for the last `months` months.

        Includes the current month, oldest first. Months with nothing earned
        are reported as zero.
        """
        if months < 1:
            raise ValueError(f"months must be at least 1, got: {months}")

        now = self._clock()
        totals: dict[tuple[int, int], Decimal] = defaultdict(Decimal)
        for commission in self.ledger.list_commissions(ae_id=ae_id):
            if commission.is_earned:
                totals[(commission.created_at.year, commission.created_at.month)] += commission.total_commission

        history = []
        current_index = now.year * 12 + now.month - 1
        for index in range(current_index - months + 1, current_index + 1):
            year, month = divmod(index, 12)
            history.append({
                "name": calendar.month_abbr[month + 1],
                "year": year,
                "month": month + 1,
                "commission": str(totals.get((year, month + 1), Decimal("0"))),
            })
        return history

    def ae_dashboard(self, ae_id: int) -> dict:
        now = self._clock()
        commissions = self.ledger.list_commissions(ae_id=ae_id)

        monthly = [
            c for c in commissions
            if c.is_earned and (c.created_at.year, c.created_at.month) == (now.year, now.month)
        ]
        pending = [c for c in commissions if c.status == STATUS_PENDING]

        return {
            "monthly_commission": {
                "total": str(sum((c.total_commission for c in monthly), Decimal("0"))),
                "count": len(monthly),
            },
            "ytd_commission": str(self.ledger.year_to_date_earned(ae_id, now.year)),
            "pending_approvals": {
                "total": str(sum((c.total_commission for c in pending), Decimal("0"))),
                "count": len(pending),
            },
            "total_deals": len(commissions),
            "ote_progress": self._ote_progress_or_none(ae_id, now.year),
            "recent_deals": [
                self._with_details(c) for c in self._newest_first(commissions)[:RECENT_DEALS_LIMIT]
            ],
        }

    def admin_dashboard(self) -> dict:
        """
        Company-wide overview: earned totals, per-AE earnings with OTE
        progress, the pending payout count and the latest commissions.

        Per-AE progress uses each AE's own active cap for the current year,
        or None for an AE with no configuration.
        """
        now = self._clock()
        commissions = self.ledger.list_commissions()
        earned = [c for c in commissions if c.is_earned]

        by_ae: dict[int, list[Commission]] = defaultdict(list)
        for commission in earned:
            by_ae[commission.ae_id].append(commission)

        ae_commissions = []
        for ae_id in sorted(by_ae):
            progress = self._ote_progress_or_none(ae_id, now.year)
            ae_commissions.append({
                "ae_id": ae_id,
                "total": str(sum((c.total_commission for c in by_ae[ae_id]), Decimal("0"))),
                "count": len(by_ae[ae_id]),
                "ote_progress": progress["percentage"] if progress else None,
            })

        return {
            "total_commissions": {
                "total": str(sum((c.total_commission for c in earned), Decimal("0"))),
                "count": len(earned),
            },
            "ae_commissions": ae_commissions,
            "pending_payouts_count": sum(1 for c in commissions if c.status == STATUS_PENDING),
            "recent_commissions": [
                self._with_details(c) for c in self._newest_first(commissions)[:ADMIN_RECENT_LIMIT]
            ],
        }

    @staticmethod
    def _newest_first(commissions: list[Commission]) -> list[Commission]:
        return sorted(commissions, key=lambda c: (c.created_at, c.id), reverse=True)

    def _with_details(self, commission: Commission, invoice: Invoice | None = None) -> dict:
        details = commission.to_dict()
        invoice = invoice or self.ledger.get_invoice(commission.invoice_id)
        contract = self.contracts.get_contract(invoice.contract_id) if invoice else None
        details.update({
            "invoice_amount": str(invoice.amount) if invoice else None,
            "invoice_date": invoice.invoice_date.isoformat() if invoice else None,
            "contract_client_name": contract.client_name if contract else None,
            "contract_type": contract.contract_type if contract else None,
        })
        return details
