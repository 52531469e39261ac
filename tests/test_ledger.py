import json

import pytest

from dicevault.config import PROGRAM_ID
from dicevault.derivation import Authority
from dicevault.errors import TransferFailed
from dicevault.ledger import Ledger, load_balances

ALICE = b"\xaa" * 32
BOB = b"\xbb" * 32


def test_signed_transfer():
    ledger = Ledger({ALICE: 100})
    ledger.transfer(ALICE, BOB, 40, signer=ALICE)
    assert ledger.balance(ALICE) == 60
    assert ledger.balance(BOB) == 40


def test_transfer_requires_authorization():
    ledger = Ledger({ALICE: 100})
    with pytest.raises(TransferFailed):
        ledger.transfer(ALICE, BOB, 1)
    with pytest.raises(TransferFailed):
        ledger.transfer(ALICE, BOB, 1, signer=BOB)
    assert ledger.balance(ALICE) == 100


def test_authority_transfer_from_derived_account():
    auth = Authority.derive([b"vault", ALICE], PROGRAM_ID)
    ledger = Ledger({auth.address: 500})
    ledger.transfer(auth.address, BOB, 200, authority=auth)
    assert ledger.balance(auth.address) == 300

    foreign = Authority.derive([b"vault", ALICE], b"\x01" * 32)
    with pytest.raises(TransferFailed):
        ledger.transfer(auth.address, BOB, 1, authority=foreign)
    other = Authority.derive([b"vault", BOB], PROGRAM_ID)
    with pytest.raises(TransferFailed):
        ledger.transfer(auth.address, BOB, 1, authority=other)


def test_insufficient_funds_and_bad_destination():
    ledger = Ledger({ALICE: 10})
    with pytest.raises(TransferFailed):
        ledger.transfer(ALICE, BOB, 11, signer=ALICE)
    with pytest.raises(TransferFailed):
        ledger.transfer(ALICE, b"short", 1, signer=ALICE)
    assert ledger.balances == {ALICE: 10}


def test_journal_written_on_commit_only(tmp_path):
    journal = tmp_path / "journal.jsonl"
    ledger = Ledger({ALICE: 100}, journal_file=str(journal))
    state = ledger.snapshot()
    ledger.transfer(ALICE, BOB, 5, signer=ALICE)
    ledger.restore(state)
    ledger.transfer(ALICE, BOB, 7, signer=ALICE, reason="test")
    assert not journal.exists()
    ledger.commit()

    lines = journal.read_text().strip().splitlines()
    assert len(lines) == 1
    entry = json.loads(lines[0])
    assert entry == {
        "action": "transfer",
        "source": ALICE.hex(),
        "destination": BOB.hex(),
        "amount": 7,
        "reason": "test",
        "timestamp": 1_700_000_000,
    }


def test_close_account_moves_everything():
    ledger = Ledger({ALICE: 33})
    assert ledger.close_account(ALICE, BOB) == 33
    assert ledger.balance(ALICE) == 0
    assert ledger.balance(BOB) == 33


def test_balances_persist(tmp_path):
    path = tmp_path / "balances.json"
    Ledger({ALICE: 1, BOB: 2}).save(str(path))
    assert load_balances(str(path)) == {ALICE: 1, BOB: 2}
    assert Ledger.load(str(path)).balance(BOB) == 2
    assert load_balances(str(tmp_path / "missing.json")) == {}
