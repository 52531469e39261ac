from __future__ import annotations

import base64
import binascii
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from dicevault.batch import execute_batch
from dicevault.bet_store import BetStore
from dicevault.config import BALANCES_FILE, BETS_DIR, ED25519_PROGRAM_ID, JOURNAL_FILE
from dicevault.errors import RecordNotFound, SettlementError
from dicevault.instruction import Instruction, resolve_instruction
from dicevault.ledger import Ledger
from dicevault.settlement import SettlementEngine

app = FastAPI()
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

DATA_DIR = Path("data")


class ResolveRequest(BaseModel):
    house: str
    signature: str
    verification: str


def _address(value: str) -> bytes:
    try:
        raw = bytes.fromhex(value)
    except ValueError:
        raw = b""
    if len(raw) != 32:
        raise HTTPException(status_code=400, detail=f"Invalid address: {value}")
    return raw


def _b64(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error:
        raise HTTPException(status_code=400, detail=f"{field} is not valid base64")


def _open_state() -> tuple[Ledger, BetStore]:
    ledger = Ledger.load(str(DATA_DIR / BALANCES_FILE), journal_file=str(DATA_DIR / JOURNAL_FILE))
    return ledger, BetStore.load_dir(ledger, str(DATA_DIR / BETS_DIR))


def _error(exc: SettlementError) -> HTTPException:
    status = 404 if isinstance(exc, RecordNotFound) else 400
    return HTTPException(
        status_code=status,
        detail={"code": exc.code, "error": type(exc).__name__, "message": str(exc)},
    )


@app.post("/api/bets/{bet_id}/resolve")
async def resolve_bet(bet_id: str, req: ResolveRequest) -> dict:
    """Resolve ``bet_id`` with a house attestation."""
    bet = _address(bet_id)
    house = _address(req.house)
    signature = _b64(req.signature, "signature")
    verification = _b64(req.verification, "verification")

    DATA_DIR.mkdir(parents=True, exist_ok=True)
    ledger, store = _open_state()
    engine = SettlementEngine(house, ledger, store)
    batch = [
        Instruction(ED25519_PROGRAM_ID, verification),
        resolve_instruction(bet, signature),
    ]
    try:
        (settlement,) = execute_batch(engine, batch)
    except SettlementError as exc:
        raise _error(exc)
    ledger.save(str(DATA_DIR / BALANCES_FILE))
    store.save(str(DATA_DIR / BETS_DIR))
    return settlement.to_dict()


@app.get("/api/bets/{bet_id}")
async def get_bet(bet_id: str) -> dict:
    _, store = _open_state()
    try:
        bet = store.load(_address(bet_id))
    except SettlementError as exc:
        raise _error(exc)
    return {"bet_id": bet_id, **bet.to_dict()}


@app.get("/api/balance/{address}")
async def balance(address: str) -> dict:
    """Return the lamport balance of ``address``."""
    ledger, _ = _open_state()
    return {"address": address, "balance": ledger.balance(_address(address))}
