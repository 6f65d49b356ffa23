"""Balancing strategy implementations."""

from .base import BalanceStrategy
from .percent_basis import PercentBasisStrategy
from .worth_basis import WorthBasisStrategy

__all__ = [
    "BalanceStrategy",
    "PercentBasisStrategy",
    "WorthBasisStrategy",
]
