from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ActionType(str, Enum):
    FOLD = "FOLD"
    CHECK = "CHECK"
    CALL = "CALL"
    BET = "BET"
    RAISE = "RAISE"
    ALL_IN = "ALL_IN"


AGGRESSIVE = frozenset({ActionType.BET, ActionType.RAISE, ActionType.ALL_IN})
AMOUNTLESS = frozenset({ActionType.FOLD, ActionType.CHECK})


@dataclass(frozen=True)
class Action:
    """One betting decision.

    For BET, RAISE and ALL_IN the amount is the actor's new total bet for the
    street, not the increment. CALL carries the exact owed amount.
    """

    kind: ActionType
    amount: int = 0

    def __post_init__(self) -> None:
        if not isinstance(self.kind, ActionType):
            raise ValueError(f"Unsupported action {self.kind}")
        if self.kind in AMOUNTLESS and self.amount:
            raise ValueError(f"{self.kind.value} takes no amount")
        if self.amount < 0:
            raise ValueError("Amount cannot be negative")

    @classmethod
    def fold(cls) -> "Action":
        return cls(ActionType.FOLD)

    @classmethod
    def check(cls) -> "Action":
        return cls(ActionType.CHECK)

    @classmethod
    def call(cls, amount: int) -> "Action":
        return cls(ActionType.CALL, amount)

    @classmethod
    def bet(cls, amount: int) -> "Action":
        return cls(ActionType.BET, amount)

    @classmethod
    def raise_to(cls, amount: int) -> "Action":
        return cls(ActionType.RAISE, amount)

    @classmethod
    def all_in(cls, amount: int) -> "Action":
        return cls(ActionType.ALL_IN, amount)

    @property
    def is_aggressive(self) -> bool:
        return self.kind in AGGRESSIVE

    def description(self) -> str:
        if self.kind == ActionType.FOLD:
            return "folds"
        if self.kind == ActionType.CHECK:
            return "checks"
        if self.kind == ActionType.CALL:
            return f"calls {self.amount}"
        if self.kind == ActionType.BET:
            return f"bets {self.amount}"
        if self.kind == ActionType.RAISE:
            return f"raises to {self.amount}"
        if self.kind == ActionType.ALL_IN:
            return f"all-in for {self.amount}"
        raise ValueError(f"Unsupported action {self.kind}")


@dataclass(frozen=True)
class AvailableActions:
    """Legality snapshot for the player to act.

    ``min_bet`` and ``max_raise`` are increments over the chips the player
    already has in this street, while ``min_raise`` is a raise-to total and
    ``can_call`` the exact CALL amount. BET, RAISE and ALL_IN actions carry
    street totals, so the smallest legal opening bet is
    ``Action.bet(current_bet + min_bet)``.
    """

    can_fold: bool
    can_check: bool
    can_call: Optional[int]
    min_bet: Optional[int]
    min_raise: Optional[int]
    max_raise: int

    @classmethod
    def compute(cls, to_call: int, min_raise_to: int, stack: int, big_blind: int) -> "AvailableActions":
        # Owing the whole stack (or more) leaves all-in as the only way to continue.
        can_check = to_call == 0
        can_call = to_call if 0 < to_call < stack else None
        min_bet = min(big_blind, stack) if can_check and stack > 0 else None
        min_raise = min_raise_to if to_call > 0 and min_raise_to < stack else None
        return cls(
            can_fold=to_call > 0,
            can_check=can_check,
            can_call=can_call,
            min_bet=min_bet,
            min_raise=min_raise,
            max_raise=stack,
        )

    def to_payload(self) -> dict:
        return {
            "can_fold": self.can_fold,
            "can_check": self.can_check,
            "can_call": self.can_call,
            "min_bet": self.min_bet,
            "min_raise": self.min_raise,
            "max_raise": self.max_raise,
        }


def raise_floor(street_high: int, last_raise_size: int, big_blind: int) -> int:
    return street_high + max(big_blind, last_raise_size)
