"""Instructions submitted together in one atomic batch."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Tuple

from .config import PROGRAM_ID, RESOLVE_TAG


@dataclass(frozen=True)
class Instruction:
    program_id: bytes
    data: bytes
    accounts: Tuple[bytes, ...] = field(default_factory=tuple)


def resolve_instruction(bet_id: bytes, signature: bytes) -> Instruction:
    """Return the instruction asking the engine to resolve ``bet_id``."""
    data = RESOLVE_TAG + struct.pack("<I", len(signature)) + signature + bet_id
    return Instruction(PROGRAM_ID, data, (bet_id,))


def decode_resolve(data: bytes) -> Tuple[bytes, bytes]:
    """Return ``(bet_id, signature)`` from resolve instruction ``data``."""
    tag_len = len(RESOLVE_TAG)
    if len(data) < tag_len + 4 or data[:tag_len] != RESOLVE_TAG:
        raise ValueError("not a resolve instruction")
    (sig_len,) = struct.unpack_from("<I", data, tag_len)
    start = tag_len + 4
    signature = data[start : start + sig_len]
    bet_id = data[start + sig_len :]
    if len(signature) != sig_len or len(bet_id) != 32:
        raise ValueError("truncated resolve instruction")
    return bet_id, signature


__all__ = ["Instruction", "resolve_instruction", "decode_resolve"]
