"""Derive the dice outcome from an attestation signature."""

import hashlib

_U128_MASK = (1 << 128) - 1


def _wrapping_add_u128(a: int, b: int) -> int:
    # Deliberate wraparound; never reuse for money.
    return (a + b) & _U128_MASK


def derive_roll(signature: bytes) -> int:
    """Return an outcome in ``[1, 100]`` from ``signature``.

    The SHA-256 digest is split into two little-endian 128-bit halves whose
    wrapping sum is reduced modulo 100.
    """
    if len(signature) < 64:
        raise ValueError("signature must be at least 64 bytes")
    digest = hashlib.sha256(signature).digest()
    lower = int.from_bytes(digest[:16], "little")
    upper = int.from_bytes(digest[16:], "little")
    return _wrapping_add_u128(lower, upper) % 100 + 1


__all__ = ["derive_roll"]
