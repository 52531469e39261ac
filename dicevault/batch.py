"""Execute an ordered batch of instructions all-or-nothing."""

from __future__ import annotations

from typing import List, Sequence

from . import ed25519_instruction
from .config import ED25519_PROGRAM_ID
from .instruction import Instruction, decode_resolve
from .settlement import Settlement, SettlementEngine


def execute_batch(engine: SettlementEngine, instructions: Sequence[Instruction]) -> List[Settlement]:
    """Run ``instructions`` in order and return the settlements produced.

    A resolve instruction is checked against the instruction right before
    it.  If any instruction fails nothing in the batch takes effect.
    """
    settlements: List[Settlement] = []
    with engine.atomic():
        for index, ix in enumerate(instructions):
            if ix.program_id == ED25519_PROGRAM_ID:
                ed25519_instruction.execute(ix, instructions)
            elif ix.program_id == engine.program_id:
                bet_id, signature = decode_resolve(ix.data)
                previous = instructions[index - 1] if index > 0 else None
                settlements.append(engine.resolve(bet_id, signature, previous))
            else:
                raise ValueError("unknown program")
    return settlements


__all__ = ["execute_batch"]
