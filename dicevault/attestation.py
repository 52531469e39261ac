"""Verify the house attestation accompanying a resolve request."""

from __future__ import annotations

import logging
from typing import Optional

from .bet import BetRecord
from .config import ED25519_PROGRAM_ID
from .ed25519_instruction import unpack_signatures
from .errors import (
    InvalidSignature,
    MalformedVerificationRequest,
    MessageMismatch,
    MultipleOrZeroSignatures,
    SignatureMismatch,
    UnverifiableHeader,
    UntrustedVerifier,
    WrongSigner,
)
from .instruction import Instruction
from .signature_utils import verify_signature


def verify_attestation(
    signature: bytes,
    verification: Optional[Instruction],
    bet: BetRecord,
    house: bytes,
) -> None:
    """Raise unless ``verification`` proves ``house`` signed ``bet``.

    ``verification`` is the instruction executed immediately before the
    resolve request.  Inside a batch the Ed25519 facility has already checked
    it, but the engine can be called directly, so the signature is verified
    again once key, signature and message are known to be the expected ones.
    """
    if verification is None or verification.program_id != ED25519_PROGRAM_ID:
        logging.debug("verification request targets an untrusted program")
        raise UntrustedVerifier()
    if verification.accounts:
        raise MalformedVerificationRequest("verification request must not reference accounts")

    try:
        entries = unpack_signatures(verification.data)
    except ValueError as exc:
        raise MalformedVerificationRequest(str(exc)) from exc

    if len(entries) != 1:
        raise MultipleOrZeroSignatures(f"found {len(entries)} signatures")
    entry = entries[0]

    if not entry.is_verifiable:
        raise UnverifiableHeader()
    if entry.public_key != house:
        logging.debug("attestation signed by %s, expected %s", entry.public_key.hex(), house.hex())
        raise WrongSigner()
    if entry.signature != signature:
        raise SignatureMismatch()
    if entry.message != bet.message():
        raise MessageMismatch()
    if not verify_signature(entry.message, entry.signature, entry.public_key):
        raise InvalidSignature()


__all__ = ["verify_attestation"]
