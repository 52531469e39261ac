"""Verifiable dice bet settlement."""

from .errors import SettlementError
from .settlement import Settlement, SettlementEngine
from .batch import execute_batch

__all__ = [
    "SettlementError",
    "Settlement",
    "SettlementEngine",
    "execute_batch",
]
