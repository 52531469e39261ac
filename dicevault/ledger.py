"""Lamport balances and the fund-transfer primitive."""

from __future__ import annotations

import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from .config import PROGRAM_ID, U64_MAX
from .derivation import Authority
from .errors import TransferFailed


def log_ledger_event(
    action: str,
    source: Optional[bytes],
    destination: Optional[bytes],
    amount: int,
    reason: str,
    *,
    journal_file: str = "ledger_journal.jsonl",
) -> None:
    """Append a ledger event to the journal."""

    entry = {
        "action": action,
        "source": source.hex() if source else None,
        "destination": destination.hex() if destination else None,
        "amount": int(amount),
        "reason": reason,
        "timestamp": int(time.time()),
    }
    with open(journal_file, "a", encoding="utf-8") as fh:
        fh.write(json.dumps(entry) + "\n")


def load_balances(path: str) -> Dict[bytes, int]:
    """Return balances from ``path`` if it exists, else empty dict."""
    file = Path(path)
    if not file.exists():
        return {}
    with open(file, "r", encoding="utf-8") as f:
        raw = json.load(f)
    return {bytes.fromhex(k): int(v) for k, v in raw.items()}


def save_balances(balances: Dict[bytes, int], path: str) -> None:
    """Persist ``balances`` to ``path`` as JSON."""
    with open(Path(path), "w", encoding="utf-8") as f:
        json.dump({k.hex(): v for k, v in sorted(balances.items())}, f, indent=2)


class Ledger:
    """In-memory balance sheet keyed by 32-byte addresses.

    Debits need either the source's own signature (``signer``) or an
    :class:`Authority` that re-derives to the source under ``program_id``.
    """

    def __init__(
        self,
        balances: Optional[Dict[bytes, int]] = None,
        *,
        program_id: bytes = PROGRAM_ID,
        journal_file: Optional[str] = None,
    ) -> None:
        self._balances: Dict[bytes, int] = dict(balances or {})
        self.program_id = program_id
        self.journal_file = journal_file
        self._pending: List[Tuple[Any, ...]] = []

    def balance(self, address: bytes) -> int:
        return self._balances.get(address, 0)

    @property
    def balances(self) -> Dict[bytes, int]:
        return dict(self._balances)

    def _journal(self, action: str, source, destination, amount: int, reason: str) -> None:
        self._pending.append((action, source, destination, amount, reason))

    def commit(self) -> None:
        """Write journal entries recorded since the last commit."""
        pending, self._pending = self._pending, []
        if not self.journal_file:
            return
        for action, source, destination, amount, reason in pending:
            log_ledger_event(action, source, destination, amount, reason, journal_file=self.journal_file)

    def deposit(self, address: bytes, amount: int, reason: str = "deposit") -> None:
        """Credit ``amount`` lamports from outside the ledger."""
        if amount < 0:
            raise ValueError("amount must be non-negative")
        self._balances[address] = self.balance(address) + amount
        self._journal("deposit", None, address, amount, reason)

    def _authorized(self, source: bytes, signer: Optional[bytes], authority: Optional[Authority]) -> bool:
        if signer is not None and signer == source:
            return True
        if authority is not None and authority.program_id == self.program_id:
            return authority.controls(source)
        return False

    def transfer(
        self,
        source: bytes,
        destination: bytes,
        amount: int,
        *,
        signer: Optional[bytes] = None,
        authority: Optional[Authority] = None,
        reason: str = "transfer",
    ) -> None:
        """Move ``amount`` lamports from ``source`` to ``destination``.

        The source balance is read at call time; there is no cached view.
        """
        if not self._authorized(source, signer, authority):
            raise TransferFailed("source did not authorize the transfer")
        if len(destination) != 32:
            raise TransferFailed("invalid destination account")
        if amount < 0 or amount > U64_MAX:
            raise TransferFailed("amount outside u64 range")
        available = self.balance(source)
        if available < amount:
            raise TransferFailed(f"insufficient funds: have {available}, need {amount}")

        self._balances[source] = available - amount
        self._balances[destination] = self.balance(destination) + amount
        logging.debug("transfer %d from %s to %s (%s)", amount, source.hex(), destination.hex(), reason)
        self._journal("transfer", source, destination, amount, reason)

    def close_account(self, address: bytes, refund_to: bytes, reason: str = "close") -> int:
        """Empty a program-owned account into ``refund_to`` and return the amount."""
        if len(refund_to) != 32:
            raise TransferFailed("invalid refund account")
        amount = self._balances.pop(address, 0)
        self._balances[refund_to] = self.balance(refund_to) + amount
        self._journal("close", address, refund_to, amount, reason)
        return amount

    def snapshot(self) -> Tuple[Dict[bytes, int], int]:
        return dict(self._balances), len(self._pending)

    def restore(self, snapshot: Tuple[Dict[bytes, int], int]) -> None:
        balances, pending = snapshot
        self._balances = dict(balances)
        del self._pending[pending:]

    @classmethod
    def load(cls, path: str, **kwargs) -> "Ledger":
        return cls(load_balances(path), **kwargs)

    def save(self, path: str) -> None:
        save_balances(self._balances, path)


__all__ = [
    "Ledger",
    "load_balances",
    "save_balances",
    "log_ledger_event",
]
