"""
COMMISSION ENGINE
Per-invoice sales commission calculation with an annual OTE cap.
"""

from .errors import MissingConfigurationError
from .models import Commission, CommissionBreakdown, Contract, Invoice, RateConfiguration
from .processor import CommissionEngine, calculate_commission
from .service import CommissionService
from .storage import MemoryStorage

__all__ = [
    'CommissionEngine',
    'CommissionService',
    'MemoryStorage',
    'calculate_commission',
    'Commission',
    'CommissionBreakdown',
    'Contract',
    'Invoice',
    'RateConfiguration',
    'MissingConfigurationError',
]
