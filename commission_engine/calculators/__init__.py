"""
Calculators Package

Provides one calculation component per commission step.
"""

from .base_commission import BaseCommissionCalculator, quantize_money
from .bonuses import MultiYearBonusCalculator, UpfrontBonusCalculator
from .ote_cap import OteCapEnforcer
from .pilot import PilotBonusCalculator

__all__ = [
    "BaseCommissionCalculator",
    "PilotBonusCalculator",
    "MultiYearBonusCalculator",
    "UpfrontBonusCalculator",
    "OteCapEnforcer",
    "quantize_money",
]
