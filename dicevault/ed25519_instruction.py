"""Ed25519 signature verification requests.

A request is laid out as::

    count(u8) | padding(u8) | offsets * count | payload

where each offsets entry is seven little-endian u16 values::

    sig_offset | sig_ix | pubkey_offset | pubkey_ix | msg_offset | msg_size | msg_ix

An ``*_ix`` of ``0xFFFF`` points into the request's own data, any other value
is the index of another instruction in the same batch.  An entry is only
*verifiable* by the settlement engine when all three point at the request
itself, because that is the only data the engine gets to inspect.
"""

from __future__ import annotations

import base64
import struct
from dataclasses import dataclass
from typing import List, Optional, Sequence

from nacl import signing

from .config import ED25519_PROGRAM_ID
from .errors import InvalidSignature, MalformedVerificationRequest
from .instruction import Instruction
from .signature_utils import PUBLIC_KEY_SIZE, SIGNATURE_SIZE, verify_signature

SELF_INDEX = 0xFFFF
HEADER_SIZE = 2
_OFFSETS = struct.Struct("<7H")
OFFSETS_SIZE = _OFFSETS.size


@dataclass(frozen=True)
class SignatureOffsets:
    signature_offset: int
    signature_ix: int
    public_key_offset: int
    public_key_ix: int
    message_offset: int
    message_size: int
    message_ix: int

    @property
    def self_contained(self) -> bool:
        return self.signature_ix == self.public_key_ix == self.message_ix == SELF_INDEX


@dataclass(frozen=True)
class SignatureEntry:
    is_verifiable: bool
    public_key: Optional[bytes]
    signature: Optional[bytes]
    message: Optional[bytes]


def _slice(data: bytes, offset: int, size: int) -> bytes:
    if offset + size > len(data):
        raise ValueError("offset out of range")
    return data[offset : offset + size]


def parse_offsets(data: bytes) -> List[SignatureOffsets]:
    if len(data) < HEADER_SIZE:
        raise ValueError("verification request too short")
    count = data[0]
    offsets: List[SignatureOffsets] = []
    for i in range(count):
        start = HEADER_SIZE + i * OFFSETS_SIZE
        if start + OFFSETS_SIZE > len(data):
            raise ValueError("truncated signature offsets")
        offsets.append(SignatureOffsets(*_OFFSETS.unpack_from(data, start)))
    return offsets


def unpack_signatures(data: bytes) -> List[SignatureEntry]:
    """Decode every signature entry of a request.

    Entries referring to other instructions are reported as unverifiable
    with their fields left as ``None``.
    """
    entries: List[SignatureEntry] = []
    for off in parse_offsets(data):
        if not off.self_contained:
            entries.append(SignatureEntry(False, None, None, None))
            continue
        entries.append(
            SignatureEntry(
                True,
                _slice(data, off.public_key_offset, PUBLIC_KEY_SIZE),
                _slice(data, off.signature_offset, SIGNATURE_SIZE),
                _slice(data, off.message_offset, off.message_size),
            )
        )
    return entries


def build_instruction(public_key: bytes, signature: bytes, message: bytes) -> Instruction:
    """Return a single-signature request carrying all data inline."""
    if len(public_key) != PUBLIC_KEY_SIZE or len(signature) != SIGNATURE_SIZE:
        raise ValueError("invalid public key or signature length")
    pubkey_offset = HEADER_SIZE + OFFSETS_SIZE
    sig_offset = pubkey_offset + PUBLIC_KEY_SIZE
    msg_offset = sig_offset + SIGNATURE_SIZE
    header = bytes([1, 0]) + _OFFSETS.pack(
        sig_offset,
        SELF_INDEX,
        pubkey_offset,
        SELF_INDEX,
        msg_offset,
        len(message),
        SELF_INDEX,
    )
    return Instruction(ED25519_PROGRAM_ID, header + public_key + signature + message)


def build_instruction_with_private_key(private_key: str, message: bytes) -> Instruction:
    """Sign ``message`` with base64 ``private_key`` and wrap it in a request."""
    key = signing.SigningKey(base64.b64decode(private_key))
    signature = key.sign(message).signature
    return build_instruction(key.verify_key.encode(), signature, message)


def execute(instruction: Instruction, batch: Sequence[Instruction]) -> None:
    """Verify every signature of ``instruction`` as the Ed25519 facility.

    Offsets pointing at other instructions are resolved against ``batch``.
    """
    data = instruction.data

    def source(ix: int) -> bytes:
        if ix == SELF_INDEX:
            return data
        if ix >= len(batch):
            raise MalformedVerificationRequest(f"instruction index {ix} out of range")
        return batch[ix].data

    try:
        offsets = parse_offsets(data)
        for off in offsets:
            public_key = _slice(source(off.public_key_ix), off.public_key_offset, PUBLIC_KEY_SIZE)
            signature = _slice(source(off.signature_ix), off.signature_offset, SIGNATURE_SIZE)
            message = _slice(source(off.message_ix), off.message_offset, off.message_size)
            if not verify_signature(message, signature, public_key):
                raise InvalidSignature()
    except ValueError as exc:
        raise MalformedVerificationRequest(str(exc)) from exc


__all__ = [
    "SELF_INDEX",
    "SignatureOffsets",
    "SignatureEntry",
    "parse_offsets",
    "unpack_signatures",
    "build_instruction",
    "build_instruction_with_private_key",
    "execute",
]
