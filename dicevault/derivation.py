"""Deterministic sub-account derivation.

An address is derived from a list of seed components and an owning program
id.  Derived addresses are forced off the Ed25519 curve so nobody can hold a
private key for them; the owning program instead proves control by presenting
an :class:`Authority` carrying the seeds, which the ledger re-derives before
accepting a debit.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Sequence, Tuple

from nacl.bindings import crypto_core_ed25519_is_valid_point

MAX_SEEDS = 16
MAX_SEED_LEN = 32
PDA_MARKER = b"ProgramDerivedAddress"


class DerivationError(ValueError):
    """Raised when seeds cannot produce an off-curve address."""


def create_program_address(seeds: Sequence[bytes], program_id: bytes) -> bytes:
    """Return the address for ``seeds`` exactly, without searching a bump."""
    if len(seeds) > MAX_SEEDS:
        raise DerivationError("too many seeds")
    h = hashlib.sha256()
    for seed in seeds:
        if len(seed) > MAX_SEED_LEN:
            raise DerivationError("seed too long")
        h.update(seed)
    h.update(program_id)
    h.update(PDA_MARKER)
    address = h.digest()
    if crypto_core_ed25519_is_valid_point(address):
        raise DerivationError("derived address lies on the curve")
    return address


def find_program_address(seeds: Sequence[bytes], program_id: bytes) -> Tuple[bytes, int]:
    """Return ``(address, bump)`` using the highest bump yielding a valid address."""
    for bump in range(255, -1, -1):
        try:
            return create_program_address([*seeds, bytes([bump])], program_id), bump
        except DerivationError:
            continue
    raise DerivationError("no viable bump seed")


@dataclass(frozen=True)
class Authority:
    """Capability to act as a derived address.

    ``seeds`` excludes the bump, which is kept separately so the address can be
    reproduced with a single hash.
    """

    seeds: Tuple[bytes, ...]
    bump: int
    program_id: bytes

    @classmethod
    def derive(cls, seeds: Sequence[bytes], program_id: bytes) -> "Authority":
        _, bump = find_program_address(seeds, program_id)
        return cls(tuple(seeds), bump, program_id)

    @property
    def address(self) -> bytes:
        return create_program_address([*self.seeds, bytes([self.bump])], self.program_id)

    def controls(self, address: bytes) -> bool:
        """Return ``True`` if this authority re-derives to ``address``."""
        try:
            return self.address == address
        except DerivationError:
            return False


__all__ = [
    "DerivationError",
    "create_program_address",
    "find_program_address",
    "Authority",
]
