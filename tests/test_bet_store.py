import pytest

from dicevault.bet import BetRecord
from dicevault.bet_store import BET_RENT, BetStore
from dicevault.errors import BetExists, RecordNotFound
from dicevault.ledger import Ledger

PLAYER = b"\x0c" * 32
BET_ID = b"\x0d" * 32


def _store() -> BetStore:
    return BetStore(Ledger({PLAYER: 10 * BET_RENT}))


def test_create_charges_rent_and_destroy_refunds():
    store = _store()
    record = BetRecord(PLAYER, 1, 0, 500, 40, 255)
    store.create(BET_ID, record, payer=PLAYER)
    assert store.load(BET_ID) == record
    assert store.ledger.balance(BET_ID) == BET_RENT

    with pytest.raises(BetExists):
        store.create(BET_ID, record, payer=PLAYER)

    assert store.destroy(BET_ID, refund_to=PLAYER) == BET_RENT
    assert store.ledger.balance(PLAYER) == 10 * BET_RENT
    with pytest.raises(RecordNotFound):
        store.load(BET_ID)
    with pytest.raises(RecordNotFound):
        store.destroy(BET_ID, refund_to=PLAYER)


def test_save_and_load_dir(tmp_path):
    store = _store()
    record = BetRecord(PLAYER, 2, 9, 700, 30, 254)
    store.create(BET_ID, record, payer=PLAYER)
    store.save(str(tmp_path))
    assert (tmp_path / f"{BET_ID.hex()}.json").exists()

    loaded = BetStore.load_dir(store.ledger, str(tmp_path))
    assert loaded.raw(BET_ID) == record.to_bytes()
    assert list(loaded) == [(BET_ID, record)]

    store.destroy(BET_ID, refund_to=PLAYER)
    store.save(str(tmp_path))
    assert not list(tmp_path.glob("*.json"))


def test_save_ignores_foreign_json_files(tmp_path):
    notes = tmp_path / "notes.json"
    notes.write_text("{}", encoding="utf-8")
    store = _store()
    record = BetRecord(PLAYER, 3, 0, 900, 20, 253)
    store.create(BET_ID, record, payer=PLAYER)

    store.save(str(tmp_path))
    assert notes.exists()
    loaded = BetStore.load_dir(store.ledger, str(tmp_path))
    assert list(loaded) == [(BET_ID, record)]
