import json

import pytest

pytest.importorskip("nacl")

from dicevault import cli, settlement
from dicevault.bet_store import BET_RENT


def _run(capsys, data_dir, *argv) -> str:
    cli.main(["--data-dir", str(data_dir), *argv])
    return capsys.readouterr().out.strip()


def test_full_flow(tmp_path, capsys, monkeypatch):
    data = tmp_path / "data"
    house = _run(capsys, data, "keygen", str(tmp_path / "house.txt"))
    player = _run(capsys, data, "keygen", str(tmp_path / "player.txt"))
    _run(capsys, data, "fund", house, "5000000000")
    _run(capsys, data, "fund", player, "1000000000")

    vault = _run(capsys, data, "init-vault", "--house-keys", str(tmp_path / "house.txt"), "2000000000")
    assert _run(capsys, data, "balance", vault) == "2000000000"

    bet_id = _run(
        capsys,
        data,
        "place-bet",
        "--house", house,
        "--player-keys", str(tmp_path / "player.txt"),
        "--seed", "42",
        "--roll", "50",
        "--amount", "100000000",
    )
    shown = json.loads(_run(capsys, data, "show-bet", bet_id))
    assert shown["roll"] == 50 and shown["player"] == player

    signed = json.loads(_run(capsys, data, "sign-bet", "--house-keys", str(tmp_path / "house.txt"), bet_id))

    monkeypatch.setattr(settlement, "derive_roll", lambda sig: 75)
    result = json.loads(
        _run(
            capsys,
            data,
            "resolve",
            "--house", house,
            "--signature", signed["signature"],
            "--verification", signed["verification"],
            bet_id,
        )
    )
    assert result["won"] is False
    assert result["rent_refund"] == BET_RENT
    assert _run(capsys, data, "balance", player) == str(1_000_000_000 - 100_000_000)
    assert not (data / "bets" / f"{bet_id}.json").exists()
    assert (data / "ledger_journal.jsonl").exists()

    with pytest.raises(SystemExit) as exc:
        cli.main(["--data-dir", str(data), "show-bet", bet_id])
    assert "6010" in str(exc.value)


def test_invalid_address(tmp_path):
    with pytest.raises(SystemExit):
        cli.main(["--data-dir", str(tmp_path), "balance", "zz"])


@pytest.mark.parametrize(
    "signature,verification,field",
    [("AAAA", "not base64!", "verification"), ("%%%%", "AAAA", "signature")],
)
def test_resolve_rejects_bad_base64(tmp_path, signature, verification, field):
    with pytest.raises(SystemExit) as exc:
        cli.main(
            [
                "--data-dir", str(tmp_path),
                "resolve",
                "--house", "00" * 32,
                "--signature", signature,
                "--verification", verification,
                "11" * 32,
            ]
        )
    assert field in str(exc.value)
