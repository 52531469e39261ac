"""Configuration constants for the dicevault settlement engine."""

import hashlib

# Identity of the settlement program.  Every derived account (vault, bet
# records) is owned by this id, so changing it moves every address.
PROGRAM_ID = hashlib.sha256(b"dicevault settlement program").digest()

# Well-known id of the Ed25519 signature verification facility.  A
# verification request addressed to any other program is not trusted.
ED25519_PROGRAM_ID = hashlib.sha256(b"Ed25519SigVerify111111111111111111111111111").digest()

VAULT_SEED = b"vault"
BET_SEED = b"bet"

# Leading type tag of a serialized bet record.  The house signs the record
# bytes *after* this tag.
BET_TAG = hashlib.sha256(b"account:Bet").digest()[:8]
BET_TAG_SIZE = len(BET_TAG)

# Instruction tag for a resolve request inside a batch.
RESOLVE_TAG = hashlib.sha256(b"global:resolve_bet").digest()[:8]

HOUSE_EDGE_BPS = 150
BPS_DENOMINATOR = 10_000

MIN_ROLL = 2
MAX_ROLL = 96
MIN_BET = 10_000_000  # lamports (0.01 SOL)

U64_MAX = 2**64 - 1
U128_MAX = 2**128 - 1

# Storage deposit charged for keeping an account of ``size`` bytes alive.
ACCOUNT_STORAGE_OVERHEAD = 128
LAMPORTS_PER_BYTE_YEAR = 3480
EXEMPTION_YEARS = 2


def rent_exempt_minimum(size: int) -> int:
    """Return the deposit in lamports needed to store ``size`` bytes."""
    return (ACCOUNT_STORAGE_OVERHEAD + size) * LAMPORTS_PER_BYTE_YEAR * EXEMPTION_YEARS


DEFAULT_DATA_DIR = "data"
BALANCES_FILE = "balances.json"
BETS_DIR = "bets"
JOURNAL_FILE = "ledger_journal.jsonl"
