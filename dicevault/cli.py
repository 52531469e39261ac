import argparse
import base64
import binascii
import json
import logging
from pathlib import Path
from typing import Tuple

from . import ed25519_instruction, signature_utils
from .batch import execute_batch
from .bet_store import BetStore
from .config import BALANCES_FILE, BETS_DIR, DEFAULT_DATA_DIR, ED25519_PROGRAM_ID, JOURNAL_FILE
from .errors import SettlementError
from .instruction import Instruction, resolve_instruction
from .ledger import Ledger
from .settlement import SettlementEngine


def _open_state(args: argparse.Namespace) -> Tuple[Ledger, BetStore]:
    base = Path(args.data_dir)
    base.mkdir(parents=True, exist_ok=True)
    ledger = Ledger.load(str(base / BALANCES_FILE), journal_file=str(base / JOURNAL_FILE))
    store = BetStore.load_dir(ledger, str(base / BETS_DIR))
    return ledger, store


def _save_state(args: argparse.Namespace, ledger: Ledger, store: BetStore) -> None:
    base = Path(args.data_dir)
    ledger.save(str(base / BALANCES_FILE))
    store.save(str(base / BETS_DIR))


def _address(value: str) -> bytes:
    try:
        raw = bytes.fromhex(value)
    except ValueError:
        raise SystemExit(f"Invalid address: {value}")
    if len(raw) != 32:
        raise SystemExit(f"Invalid address: {value}")
    return raw


def _b64(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error:
        raise SystemExit(f"Invalid base64 for {field}")


def _key_address(keyfile: str) -> Tuple[bytes, str]:
    if not Path(keyfile).exists():
        raise SystemExit(f"Key file not found: {keyfile}")
    pub, priv = signature_utils.load_keys(keyfile)
    return signature_utils.public_key_bytes(pub), priv


def _engine(args: argparse.Namespace, house: bytes) -> SettlementEngine:
    ledger, store = _open_state(args)
    return SettlementEngine(house, ledger, store)


def cmd_keygen(args: argparse.Namespace) -> None:
    pub, _ = signature_utils.load_or_create_keys(args.keyfile)
    print(signature_utils.public_key_bytes(pub).hex())


def cmd_fund(args: argparse.Namespace) -> None:
    ledger, store = _open_state(args)
    ledger.deposit(_address(args.address), args.amount, reason="airdrop")
    ledger.commit()
    _save_state(args, ledger, store)
    print(ledger.balance(_address(args.address)))


def cmd_init_vault(args: argparse.Namespace) -> None:
    house, _ = _key_address(args.house_keys)
    engine = _engine(args, house)
    engine.initialize_vault(args.amount)
    _save_state(args, engine.ledger, engine.store)
    print(engine.vault.hex())


def cmd_place_bet(args: argparse.Namespace) -> None:
    player, _ = _key_address(args.player_keys)
    engine = _engine(args, _address(args.house))
    bet_id = engine.place_bet(player, args.seed, args.roll, args.amount, slot=args.slot)
    _save_state(args, engine.ledger, engine.store)
    print(bet_id.hex())


def cmd_sign_bet(args: argparse.Namespace) -> None:
    """Produce the house attestation for a stored bet."""
    _, priv = _key_address(args.house_keys)
    _, store = _open_state(args)
    message = store.load(_address(args.bet_id)).message()
    request = ed25519_instruction.build_instruction_with_private_key(priv, message)
    signature = ed25519_instruction.unpack_signatures(request.data)[0].signature
    print(
        json.dumps(
            {
                "signature": base64.b64encode(signature).decode("ascii"),
                "verification": base64.b64encode(request.data).decode("ascii"),
            }
        )
    )


def cmd_resolve(args: argparse.Namespace) -> None:
    engine = _engine(args, _address(args.house))
    bet_id = _address(args.bet_id)
    batch = [
        Instruction(ED25519_PROGRAM_ID, _b64(args.verification, "verification")),
        resolve_instruction(bet_id, _b64(args.signature, "signature")),
    ]
    (settlement,) = execute_batch(engine, batch)
    _save_state(args, engine.ledger, engine.store)
    print(json.dumps(settlement.to_dict()))


def cmd_show_bet(args: argparse.Namespace) -> None:
    _, store = _open_state(args)
    bet = store.load(_address(args.bet_id))
    print(json.dumps(bet.to_dict()))


def cmd_balance(args: argparse.Namespace) -> None:
    ledger, _ = _open_state(args)
    print(ledger.balance(_address(args.address)))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="dicevault", description="Dice bet settlement")
    parser.add_argument("--data-dir", default=DEFAULT_DATA_DIR, help="Data directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_keygen = sub.add_parser("keygen", help="Create or show a keypair")
    p_keygen.add_argument("keyfile")
    p_keygen.set_defaults(func=cmd_keygen)

    p_fund = sub.add_parser("fund", help="Credit lamports to an address")
    p_fund.add_argument("address")
    p_fund.add_argument("amount", type=int)
    p_fund.set_defaults(func=cmd_fund)

    p_init = sub.add_parser("init-vault", help="Fund the house vault")
    p_init.add_argument("--house-keys", required=True)
    p_init.add_argument("amount", type=int)
    p_init.set_defaults(func=cmd_init_vault)

    p_place = sub.add_parser("place-bet", help="Place a bet")
    p_place.add_argument("--house", required=True, help="House public key (hex)")
    p_place.add_argument("--player-keys", required=True)
    p_place.add_argument("--seed", type=int, required=True)
    p_place.add_argument("--roll", type=int, required=True)
    p_place.add_argument("--amount", type=int, required=True)
    p_place.add_argument("--slot", type=int, default=0)
    p_place.set_defaults(func=cmd_place_bet)

    p_sign = sub.add_parser("sign-bet", help="Sign a bet as the house")
    p_sign.add_argument("--house-keys", required=True)
    p_sign.add_argument("bet_id")
    p_sign.set_defaults(func=cmd_sign_bet)

    p_resolve = sub.add_parser("resolve", help="Resolve a bet")
    p_resolve.add_argument("--house", required=True, help="House public key (hex)")
    p_resolve.add_argument("--signature", required=True, help="Base64 signature")
    p_resolve.add_argument("--verification", required=True, help="Base64 Ed25519 request")
    p_resolve.add_argument("bet_id")
    p_resolve.set_defaults(func=cmd_resolve)

    p_show = sub.add_parser("show-bet", help="Display an open bet")
    p_show.add_argument("bet_id")
    p_show.set_defaults(func=cmd_show_bet)

    p_balance = sub.add_parser("balance", help="Show an address balance")
    p_balance.add_argument("address")
    p_balance.set_defaults(func=cmd_balance)

    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )
    try:
        args.func(args)
    except SettlementError as exc:
        raise SystemExit(f"error {exc.code}: {exc}")


if __name__ == "__main__":  # pragma: no cover - manual execution
    main()


__all__ = [
    "main",
    "build_parser",
    "cmd_keygen",
    "cmd_fund",
    "cmd_init_vault",
    "cmd_place_bet",
    "cmd_sign_bet",
    "cmd_resolve",
    "cmd_show_bet",
    "cmd_balance",
]
