"""
Domain errors for the Commission Engine.

Input validation failures are plain ValueError, as everywhere else in the
engine. The classes below cover the conditions callers need to tell apart.
"""


class CommissionEngineError(Exception):
    """Base class for commission domain errors."""


class MissingConfigurationError(CommissionEngineError, LookupError):
    """No active rate configuration is resolvable for an account executive."""

    def __init__(self, ae_id, on_date=None):
        self.ae_id = ae_id
        self.on_date = on_date
        message = f"No active commission configuration found for AE {ae_id}"
        if on_date is not None:
            message += f" on {on_date.isoformat()}"
        super().__init__(message)


class NotFoundError(CommissionEngineError, LookupError):
    """A referenced contract, invoice, commission or configuration does not exist."""

    def __init__(self, kind: str, identifier):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} {identifier} not found")


class InvalidStatusTransitionError(CommissionEngineError, ValueError):
    """The approval workflow does not allow moving between these statuses."""

    def __init__(self, commission_id, current: str, target: str):
        self.commission_id = commission_id
        self.current = current
        self.target = target
        super().__init__(f"Commission {commission_id} cannot move from '{current}' to '{target}'")
