"""Utilities for generating and verifying Ed25519 signatures.

Keys are exchanged as base64 strings, matching the key files written by
:func:`save_keys`.  Signatures travel as raw 64-byte values because the
settlement engine compares and hashes them byte for byte.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Tuple

from nacl import signing
from nacl.exceptions import BadSignatureError

SIGNATURE_SIZE = 64
PUBLIC_KEY_SIZE = 32


def generate_keypair() -> Tuple[str, str]:
    """Generate a new Ed25519 keypair.

    Returns a tuple of ``(public_key, private_key)`` where both values are
    base64-encoded strings.
    """
    private_key = signing.SigningKey.generate()
    public_key = private_key.verify_key
    priv_b64 = base64.b64encode(private_key.encode()).decode("ascii")
    pub_b64 = base64.b64encode(public_key.encode()).decode("ascii")
    return pub_b64, priv_b64


def public_key_bytes(public_key: str) -> bytes:
    """Return the raw 32 bytes of a base64 ``public_key``."""
    raw = base64.b64decode(public_key)
    if len(raw) != PUBLIC_KEY_SIZE:
        raise ValueError("public key must be 32 bytes")
    return raw


def sign_data(data: bytes, private_key: str) -> bytes:
    """Return the detached 64-byte signature of ``data``."""
    signing_key = signing.SigningKey(base64.b64decode(private_key))
    return signing_key.sign(data).signature


def verify_signature(data: bytes, signature: bytes, public_key: bytes) -> bool:
    """Verify that ``signature`` matches ``data`` for raw ``public_key``."""
    if len(signature) != SIGNATURE_SIZE or len(public_key) != PUBLIC_KEY_SIZE:
        return False
    try:
        signing.VerifyKey(public_key).verify(data, signature)
    except BadSignatureError:
        return False
    return True


def save_keys(filename: str, pub: str, priv: str) -> None:
    """Save base64-encoded ``pub`` and ``priv`` keys to ``filename``."""
    with open(filename, "w", encoding="utf-8") as f:
        f.write(f"{pub}\n{priv}\n")


def load_keys(filename: str) -> Tuple[str, str]:
    """Load ``(public_key, private_key)`` from ``filename``."""
    with open(filename, "r", encoding="utf-8") as f:
        pub = f.readline().strip()
        priv = f.readline().strip()
    if not pub or not priv:
        raise ValueError("key file malformed")
    return pub, priv


def load_or_create_keys(filename: str) -> Tuple[str, str]:
    """Return keys from ``filename``, generating and saving a pair if missing."""
    if Path(filename).exists():
        return load_keys(filename)
    pub, priv = generate_keypair()
    save_keys(filename, pub, priv)
    return pub, priv


__all__ = [
    "SIGNATURE_SIZE",
    "PUBLIC_KEY_SIZE",
    "generate_keypair",
    "public_key_bytes",
    "sign_data",
    "verify_signature",
    "save_keys",
    "load_keys",
    "load_or_create_keys",
]
