"""Storage for open bet records.

Each record lives at its derived address and holds a storage deposit in the
ledger under that same address.  Destroying the record hands the deposit to
the player.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple

from .bet import BET_SIZE, BetRecord
from .config import rent_exempt_minimum
from .errors import BetExists, RecordNotFound
from .ledger import Ledger

BET_RENT = rent_exempt_minimum(BET_SIZE)


class BetStore:
    def __init__(self, ledger: Ledger, records: Optional[Dict[bytes, bytes]] = None) -> None:
        self.ledger = ledger
        self._records: Dict[bytes, bytes] = dict(records or {})

    def __contains__(self, bet_id: bytes) -> bool:
        return bet_id in self._records

    def __iter__(self) -> Iterator[Tuple[bytes, BetRecord]]:
        for bet_id, data in sorted(self._records.items()):
            yield bet_id, BetRecord.from_bytes(data)

    def load(self, bet_id: bytes) -> BetRecord:
        try:
            data = self._records[bet_id]
        except KeyError:
            raise RecordNotFound(bet_id.hex()) from None
        return BetRecord.from_bytes(data)

    def raw(self, bet_id: bytes) -> bytes:
        """Return the serialized record, type tag included."""
        try:
            return self._records[bet_id]
        except KeyError:
            raise RecordNotFound(bet_id.hex()) from None

    def create(self, bet_id: bytes, record: BetRecord, payer: bytes) -> None:
        """Store ``record`` at ``bet_id``; ``payer`` funds the deposit."""
        if bet_id in self._records:
            raise BetExists(bet_id.hex())
        self.ledger.transfer(payer, bet_id, BET_RENT, signer=payer, reason="bet_rent")
        self._records[bet_id] = record.to_bytes()

    def destroy(self, bet_id: bytes, refund_to: bytes) -> int:
        """Remove the record and return the refunded deposit."""
        if bet_id not in self._records:
            raise RecordNotFound(bet_id.hex())
        refund = self.ledger.close_account(bet_id, refund_to, reason="bet_closed")
        del self._records[bet_id]
        return refund

    def snapshot(self) -> Dict[bytes, bytes]:
        return dict(self._records)

    def restore(self, snapshot: Dict[bytes, bytes]) -> None:
        self._records = dict(snapshot)

    def save(self, directory: str) -> None:
        """Write one JSON file per open bet to ``directory``.

        Files of bets that no longer exist are removed.
        """
        path = Path(directory)
        path.mkdir(parents=True, exist_ok=True)
        for stale in path.glob("*.json"):
            try:
                bet_id = bytes.fromhex(stale.stem)
            except ValueError:
                continue
            if bet_id not in self._records:
                stale.unlink()
        for bet_id, data in self._records.items():
            entry = {"data": data.hex(), **BetRecord.from_bytes(data).to_dict()}
            with open(path / f"{bet_id.hex()}.json", "w", encoding="utf-8") as fh:
                json.dump(entry, fh, indent=2)

    @classmethod
    def load_dir(cls, ledger: Ledger, directory: str) -> "BetStore":
        path = Path(directory)
        records: Dict[bytes, bytes] = {}
        if path.exists():
            for file in path.glob("*.json"):
                try:
                    bet_id = bytes.fromhex(file.stem)
                except ValueError:
                    continue
                with open(file, "r", encoding="utf-8") as fh:
                    entry = json.load(fh)
                records[bet_id] = bytes.fromhex(entry["data"])
        return cls(ledger, records)


__all__ = ["BET_RENT", "BetStore"]
