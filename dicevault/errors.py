"""Exceptions raised while settling a bet.

Every failure a resolution attempt can hit has its own class so callers can
tell them apart.  ``code`` mirrors the numeric error code reported by the CLI
and the HTTP API.
"""

from __future__ import annotations


class SettlementError(Exception):
    """Base class for all settlement failures."""

    code = 6000
    message = "settlement failed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail
        super().__init__(detail or self.message)


class UntrustedVerifier(SettlementError):
    code = 6001
    message = "verification request is not addressed to the Ed25519 program"


class MalformedVerificationRequest(SettlementError):
    code = 6002
    message = "verification request is malformed"


class MultipleOrZeroSignatures(SettlementError):
    code = 6003
    message = "verification request must carry exactly one signature"


class UnverifiableHeader(SettlementError):
    code = 6004
    message = "signature entry is not verifiable"


class WrongSigner(SettlementError):
    code = 6005
    message = "signature was not produced by the house"


class SignatureMismatch(SettlementError):
    code = 6006
    message = "verified signature differs from the supplied signature"


class MessageMismatch(SettlementError):
    code = 6007
    message = "signed message differs from the bet record"


class ArithmeticOverflow(SettlementError):
    code = 6008
    message = "arithmetic overflow"


class TransferFailed(SettlementError):
    code = 6009
    message = "fund transfer failed"


class RecordNotFound(SettlementError):
    code = 6010
    message = "bet record not found"


class InvalidSignature(SettlementError):
    code = 6011
    message = "Ed25519 signature verification failed"


class BetExists(SettlementError):
    code = 6012
    message = "a bet with this seed already exists"


class InvalidBet(SettlementError):
    code = 6013
    message = "bet parameters are out of range"


__all__ = [
    "SettlementError",
    "UntrustedVerifier",
    "MalformedVerificationRequest",
    "MultipleOrZeroSignatures",
    "UnverifiableHeader",
    "WrongSigner",
    "SignatureMismatch",
    "MessageMismatch",
    "ArithmeticOverflow",
    "TransferFailed",
    "RecordNotFound",
    "InvalidSignature",
    "BetExists",
    "InvalidBet",
]
