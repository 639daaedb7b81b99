"""
Pipeline orchestration.
"""

from .money_supply_analyzer import MoneySupplyAnalyzer

__all__ = [
    "MoneySupplyAnalyzer",
]
