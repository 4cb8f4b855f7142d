"""
In-memory storage for contracts, invoices, rate configurations and commissions.

Stands in for the relational persistence layer. Implements the lookup
protocols the CommissionService depends on.
"""

import itertools
import threading
from dataclasses import replace
from datetime import date
from decimal import Decimal

from .errors import NotFoundError
from .models import (
    Commission,
    ConfigAssignment,
    Contract,
    Invoice,
    RateConfiguration,
)


class MemoryStorage:
    """Dictionary-backed store. Safe to share between threads."""

    def __init__(self):
        self._lock = threading.RLock()
        self._ids = {
            "contract": itertools.count(1),
            "invoice": itertools.count(1),
            "config": itertools.count(1),
            "assignment": itertools.count(1),
            "commission": itertools.count(1),
        }
        self._contracts: dict[int, Contract] = {}
        self._invoices: dict[int, Invoice] = {}
        self._configs: dict[int, RateConfiguration] = {}
        self._assignments: dict[int, ConfigAssignment] = {}
        self._commissions: dict[int, Commission] = {}

    # -------------------------------------------------------------------------
    # Contracts and invoices
    # -------------------------------------------------------------------------

    def add_contract(self, contract: Contract) -> Contract:
        with self._lock:
            contract = replace(contract, id=next(self._ids["contract"]))
            self._contracts[contract.id] = contract
            return contract

    def get_contract(self, contract_id: int) -> Contract | None:
        return self._contracts.get(contract_id)

    def list_contracts(self, ae_id: int | None = None) -> list[Contract]:
        with self._lock:
            contracts = list(self._contracts.values())
        if ae_id is not None:
            contracts = [c for c in contracts if c.ae_id == ae_id]
        return contracts

    def add_invoice(self, invoice: Invoice) -> Invoice:
        with self._lock:
            if invoice.contract_id not in self._contracts:
                raise NotFoundError("Contract", invoice.contract_id)
            invoice = replace(invoice, id=next(self._ids["invoice"]))
            self._invoices[invoice.id] = invoice
            return invoice

    def get_invoice(self, invoice_id: int) -> Invoice | None:
        return self._invoices.get(invoice_id)

    # -------------------------------------------------------------------------
    # Rate configurations
    # -------------------------------------------------------------------------

    def add_rate_configuration(self, config: RateConfiguration) -> RateConfiguration:
        with self._lock:
            config = replace(config, id=next(self._ids["config"]))
            self._configs[config.id] = config
            return config

    def get_rate_configuration(self, config_id: int) -> RateConfiguration | None:
        return self._configs.get(config_id)

    def list_rate_configurations(self) -> list[RateConfiguration]:
        with self._lock:
            return list(self._configs.values())

    def update_rate_configuration(self, config_id: int, **changes) -> RateConfiguration:
        """
        Replace fields on a stored configuration.

        Commissions already computed with the old values are left untouched.
        """
        with self._lock:
            config = self._configs.get(config_id)
            if config is None:
                raise NotFoundError("Rate configuration", config_id)
            changes.pop("id", None)
            updated = config.with_changes(**changes)
            self._configs[config_id] = updated
            return updated

    def assign_rate_configuration(
        self,
        ae_id: int,
        config_id: int,
        start_date: date,
        end_date: date | None = None,
    ) -> ConfigAssignment:
        with self._lock:
            if config_id not in self._configs:
                raise NotFoundError("Rate configuration", config_id)
            if end_date is not None and end_date < start_date:
                raise ValueError(f"end_date ({end_date}) cannot be before start_date ({start_date})")

            assignment = ConfigAssignment(
                ae_id=ae_id,
                config_id=config_id,
                start_date=start_date,
                end_date=end_date,
                id=next(self._ids["assignment"]),
            )
            self._assignments[assignment.id] = assignment
            return assignment

    def assignments_for_ae(self, ae_id: int) -> list[ConfigAssignment]:
        """All assignments for an AE, most recent start date first."""
        with self._lock:
            assignments = [a for a in self._assignments.values() if a.ae_id == ae_id]
        return sorted(assignments, key=lambda a: (a.start_date, a.id), reverse=True)

    def get_active_rate_configuration(self, ae_id: int, on_date: date) -> RateConfiguration | None:
        """
        Resolve the single active configuration for an AE on a date.

        Among assignments effective on that date, the one with the latest
        start date wins (later assignment id breaks ties).
        """
        for assignment in self.assignments_for_ae(ae_id):
            if assignment.is_effective_on(on_date):
                return self._configs.get(assignment.config_id)
        return None

    # -------------------------------------------------------------------------
    # Commissions
    # -------------------------------------------------------------------------

    def add_commission(self, commission: Commission) -> Commission:
        with self._lock:
            commission.id = next(self._ids["commission"])
            self._commissions[commission.id] = commission
            return commission

    def get_commission(self, commission_id: int) -> Commission | None:
        return self._commissions.get(commission_id)

    def save_commission(self, commission: Commission) -> Commission:
        with self._lock:
            if commission.id not in self._commissions:
                raise NotFoundError("Commission", commission.id)
            self._commissions[commission.id] = commission
            return commission

    def commission_for_invoice(self, invoice_id: int) -> Commission | None:
        with self._lock:
            for commission in self._commissions.values():
                if commission.invoice_id == invoice_id:
                    return commission
        return None

    def list_commissions(self, ae_id: int | None = None, status: str | None = None) -> list[Commission]:
        with self._lock:
            commissions = list(self._commissions.values())
        if ae_id is not None:
            commissions = [c for c in commissions if c.ae_id == ae_id]
        if status is not None:
            commissions = [c for c in commissions if c.status == status]
        return commissions

    def year_to_date_earned(self, ae_id: int, year: int) -> Decimal:
        """Sum of total_commission for the AE's approved and paid commissions created in `year`."""
        total = Decimal("0")
        for commission in self.list_commissions(ae_id=ae_id):
            if commission.is_earned and commission.created_at.year == year:
                total += commission.total_commission
        return total
