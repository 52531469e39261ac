import importlib.util
import time

import pytest

if importlib.util.find_spec("nacl") is None:
    raise pytest.UsageError(
        "PyNaCl is required for the test suite. Install dependencies with 'pip install -e .[test]'."
    )

from dicevault import ed25519_instruction, signature_utils
from dicevault.bet import BetRecord, bet_address
from dicevault.ledger import Ledger
from dicevault.settlement import SettlementEngine

SOL = 1_000_000_000


@pytest.fixture(autouse=True)
def _deterministic(monkeypatch):
    """Freeze ``time.time`` so journal entries are reproducible."""
    monkeypatch.setattr(time, "time", lambda: 1_700_000_000.0)


def _keys() -> dict:
    pub, priv = signature_utils.generate_keypair()
    return {"public": signature_utils.public_key_bytes(pub), "private": priv, "b64": pub}


@pytest.fixture
def house() -> dict:
    """House (oracle) keypair with the raw public key under ``public``."""
    return _keys()


@pytest.fixture
def player() -> dict:
    return _keys()


@pytest.fixture
def ledger(house, player) -> Ledger:
    return Ledger({house["public"]: 100 * SOL, player["public"]: 10 * SOL})


@pytest.fixture
def engine(house, ledger) -> SettlementEngine:
    eng = SettlementEngine(house["public"], ledger)
    eng.initialize_vault(50 * SOL)
    return eng


@pytest.fixture
def open_bet(engine, player):
    """Return a factory storing a bet directly, bypassing placement limits."""

    def _open(seed: int = 42, roll: int = 50, amount: int = 1_000_000) -> bytes:
        bet_id, bump = bet_address(engine.vault, seed)
        record = BetRecord(player["public"], seed, 0, amount, roll, bump)
        with engine.atomic():
            engine.store.create(bet_id, record, payer=player["public"])
            engine.ledger.transfer(player["public"], engine.vault, amount, signer=player["public"])
        return bet_id

    return _open


@pytest.fixture
def attest(engine, house):
    """Return ``(signature, verification)`` for a stored bet."""

    def _attest(bet_id: bytes, private_key: str | None = None):
        message = engine.store.load(bet_id).message()
        request = ed25519_instruction.build_instruction_with_private_key(
            private_key or house["private"], message
        )
        signature = ed25519_instruction.unpack_signatures(request.data)[0].signature
        return signature, request

    return _attest
