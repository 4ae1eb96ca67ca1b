from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .evaluator import HandEvaluation


class Phase(str, Enum):
    PREFLOP = "PREFLOP"
    FLOP = "FLOP"
    TURN = "TURN"
    RIVER = "RIVER"
    SHOWDOWN = "SHOWDOWN"
    HAND_COMPLETE = "HAND_COMPLETE"
    SESSION_END = "SESSION_END"
    SUMMARY = "SUMMARY"

    @property
    def is_betting(self) -> bool:
        return self in BETTING_PHASES


BETTING_PHASES = frozenset({Phase.PREFLOP, Phase.FLOP, Phase.TURN, Phase.RIVER})


class Player(str, Enum):
    HUMAN = "HUMAN"
    BOT = "BOT"

    @property
    def opponent(self) -> "Player":
        return Player.BOT if self is Player.HUMAN else Player.HUMAN


@dataclass
class TableConfig:
    starting_stack_bb: int = 100
    sb: int = 1
    bb: int = 2

    def __post_init__(self) -> None:
        if self.sb <= 0 or self.bb <= 0:
            raise ValueError("Blinds must be positive")
        if self.sb > self.bb:
            raise ValueError("Small blind cannot exceed big blind")
        if self.starting_stack_bb <= 0:
            raise ValueError("Starting stack must be positive")

    @property
    def starting_stack(self) -> int:
        return self.starting_stack_bb * self.bb


@dataclass(frozen=True)
class ShowdownResult:
    winner: Optional[Player]
    player_hand: HandEvaluation
    bot_hand: HandEvaluation
    pot_won: int

    def hand_for(self, player: Player) -> HandEvaluation:
        return self.player_hand if player is Player.HUMAN else self.bot_hand


class IllegalAction(ValueError):
    """Raised when a driver submits an action the current state does not allow."""

    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg
