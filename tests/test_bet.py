import pytest

from dicevault.bet import BET_SIZE, BetRecord, bet_address, vault_authority
from dicevault.config import BET_TAG


def _record() -> BetRecord:
    return BetRecord(b"\x05" * 32, 2**100 + 7, 1234, 1_000_000, 50, 254)


def test_layout_sizes():
    rec = _record()
    data = rec.to_bytes()
    assert BET_SIZE == 74
    assert len(data) == 74
    assert data[:8] == BET_TAG
    assert rec.message() == data[8:]
    assert len(rec.message()) == 66


def test_field_encoding():
    msg = _record().message()
    assert msg[:32] == b"\x05" * 32
    assert int.from_bytes(msg[32:48], "little") == 2**100 + 7
    assert int.from_bytes(msg[48:56], "little") == 1234
    assert int.from_bytes(msg[56:64], "little") == 1_000_000
    assert msg[64] == 50
    assert msg[65] == 254


def test_from_bytes_rejects_bad_data():
    data = _record().to_bytes()
    assert BetRecord.from_bytes(data) == _record()
    with pytest.raises(ValueError):
        BetRecord.from_bytes(b"\x00" * 8 + data[8:])
    with pytest.raises(ValueError):
        BetRecord.from_bytes(data[:-1])


def test_bet_address_scoped_to_vault():
    vault_a = vault_authority(b"\x01" * 32).address
    vault_b = vault_authority(b"\x02" * 32).address
    assert bet_address(vault_a, 42) != bet_address(vault_b, 42)
    assert bet_address(vault_a, 42) != bet_address(vault_a, 43)
