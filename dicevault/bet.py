"""Bet record and its binary layout.

The serialized record is an 8-byte type tag followed by fixed-width
little-endian fields::

    tag(8) | player(32) | seed(u128) | slot(u64) | amount(u64) | roll(u8) | bump(u8)

The house signs everything after the tag, so :meth:`BetRecord.message` is the
exact byte string an attestation has to cover.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import Any, Dict

from .config import BET_SEED, BET_TAG, BET_TAG_SIZE, PROGRAM_ID, VAULT_SEED
from .derivation import Authority, find_program_address

_FIXED = struct.Struct("<32s16sQQBB")
BET_SIZE = BET_TAG_SIZE + _FIXED.size


def seed_bytes(seed: int) -> bytes:
    """Return the 16-byte little-endian form of a u128 ``seed``."""
    return seed.to_bytes(16, "little")


def vault_authority(house: bytes, program_id: bytes = PROGRAM_ID) -> Authority:
    """Return the authority controlling the vault paired with ``house``."""
    return Authority.derive([VAULT_SEED, house], program_id)


def bet_address(vault: bytes, seed: int, program_id: bytes = PROGRAM_ID) -> tuple[bytes, int]:
    """Return ``(address, bump)`` of the bet record for ``seed`` in ``vault``."""
    return find_program_address([BET_SEED, vault, seed_bytes(seed)], program_id)


@dataclass(frozen=True)
class BetRecord:
    player: bytes
    seed: int
    slot: int
    amount: int
    roll: int
    bump: int

    def to_bytes(self) -> bytes:
        return BET_TAG + self.message()

    def message(self) -> bytes:
        """Return the record bytes without the type tag."""
        return _FIXED.pack(
            self.player,
            seed_bytes(self.seed),
            self.slot,
            self.amount,
            self.roll,
            self.bump,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "BetRecord":
        if len(data) != BET_SIZE:
            raise ValueError("bet record has wrong size")
        if data[:BET_TAG_SIZE] != BET_TAG:
            raise ValueError("bet record has wrong type tag")
        player, seed, slot, amount, roll, bump = _FIXED.unpack(data[BET_TAG_SIZE:])
        return cls(player, int.from_bytes(seed, "little"), slot, amount, roll, bump)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "player": self.player.hex(),
            "seed": str(self.seed),
            "slot": self.slot,
            "amount": self.amount,
            "roll": self.roll,
            "bump": self.bump,
        }


__all__ = [
    "BET_SIZE",
    "BetRecord",
    "bet_address",
    "seed_bytes",
    "vault_authority",
]
