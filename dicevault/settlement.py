"""Settle bets against the house vault."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Dict, Iterator, Optional

from .attestation import verify_attestation
from .bet import BetRecord, bet_address, vault_authority
from .bet_store import BetStore
from .config import MAX_ROLL, MIN_BET, MIN_ROLL, PROGRAM_ID, U64_MAX
from .errors import InvalidBet, RecordNotFound
from .instruction import Instruction
from .ledger import Ledger
from .outcome import derive_roll
from .payout import calculate_payout


@dataclass(frozen=True)
class Settlement:
    bet_id: bytes
    player: bytes
    roll: int
    outcome: int
    won: bool
    payout: int
    rent_refund: int

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["bet_id"] = self.bet_id.hex()
        data["player"] = self.player.hex()
        return data


class SettlementEngine:
    """Resolve bets placed against the vault owned by ``house``.

    Every state change goes through :meth:`atomic`, so a failed attempt
    leaves balances and bet records exactly as they were.
    """

    def __init__(
        self,
        house: bytes,
        ledger: Ledger,
        store: Optional[BetStore] = None,
        *,
        program_id: bytes = PROGRAM_ID,
    ) -> None:
        self.house = house
        self.ledger = ledger
        self.store = store if store is not None else BetStore(ledger)
        self.program_id = program_id
        self.vault_authority = vault_authority(house, program_id)
        self.vault = self.vault_authority.address
        self._lock = threading.RLock()
        self._depth = 0

    @contextmanager
    def atomic(self) -> Iterator[None]:
        with self._lock:
            ledger_state = self.ledger.snapshot()
            store_state = self.store.snapshot()
            self._depth += 1
            try:
                yield
            except BaseException:
                self.ledger.restore(ledger_state)
                self.store.restore(store_state)
                raise
            finally:
                self._depth -= 1
            if self._depth == 0:
                self.ledger.commit()

    def bet_id(self, seed: int) -> bytes:
        return bet_address(self.vault, seed, self.program_id)[0]

    def initialize_vault(self, amount: int) -> None:
        """Fund the vault with ``amount`` lamports from the house."""
        with self.atomic():
            self.ledger.transfer(self.house, self.vault, amount, signer=self.house, reason="vault_init")
        logging.info("vault %s funded with %d lamports", self.vault.hex(), amount)

    def place_bet(self, player: bytes, seed: int, roll: int, amount: int, *, slot: int = 0) -> bytes:
        """Stake ``amount`` on ``roll`` and return the new bet id."""
        if not MIN_ROLL <= roll <= MAX_ROLL:
            raise InvalidBet(f"roll must be between {MIN_ROLL} and {MAX_ROLL}")
        if not MIN_BET <= amount <= U64_MAX:
            raise InvalidBet(f"amount must be at least {MIN_BET}")
        if not 0 <= seed < 2**128:
            raise InvalidBet("seed must fit in 128 bits")
        bet_id, bump = bet_address(self.vault, seed, self.program_id)
        record = BetRecord(player, seed, slot, amount, roll, bump)
        with self.atomic():
            self.store.create(bet_id, record, payer=player)
            self.ledger.transfer(player, self.vault, amount, signer=player, reason="bet_stake")
        logging.info("bet %s placed: amount=%d roll=%d", bet_id.hex(), amount, roll)
        return bet_id

    def resolve(
        self,
        bet_id: bytes,
        signature: bytes,
        verification: Optional[Instruction],
    ) -> Settlement:
        """Settle ``bet_id`` using the house attestation ``signature``.

        ``verification`` is the Ed25519 request executed just before this
        call in the same batch.
        """
        with self.atomic():
            bet = self.store.load(bet_id)
            expected, bump = bet_address(self.vault, bet.seed, self.program_id)
            if expected != bet_id or bump != bet.bump:
                raise RecordNotFound("bet does not belong to this vault")

            verify_attestation(signature, verification, bet, self.house)
            outcome = derive_roll(signature)

            payout = 0
            won = outcome < bet.roll
            if won:
                payout = calculate_payout(bet.amount, bet.roll)
                self.ledger.transfer(
                    self.vault,
                    bet.player,
                    payout,
                    authority=self.vault_authority,
                    reason="bet_payout",
                )
            refund = self.store.destroy(bet_id, refund_to=bet.player)

        logging.info(
            "bet %s resolved: outcome=%d roll=%d %s payout=%d",
            bet_id.hex(),
            outcome,
            bet.roll,
            "won" if won else "lost",
            payout,
        )
        return Settlement(bet_id, bet.player, bet.roll, outcome, won, payout, refund)


__all__ = ["Settlement", "SettlementEngine"]
