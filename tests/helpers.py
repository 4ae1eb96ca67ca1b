from __future__ import annotations

import random
from typing import Iterable, List, Optional, Sequence, Tuple

from holdem.actions import Action
from holdem.cards import Deck, parse_cards
from holdem.game import GameState
from holdem.models import Player, TableConfig


def create_state(
    *,
    starting_stack_bb: int = 100,
    sb: int = 1,
    bb: int = 2,
    seed: int = 42,
    deal: bool = True,
) -> GameState:
    """Instantiate a heads-up state; the first hand puts the button on the human seat."""
    return GameState(TableConfig(starting_stack_bb=starting_stack_bb, sb=sb, bb=bb), seed=seed, deal=deal)


class StackedDeck(Deck):
    """Deck whose first cards are fixed; deal order is human, bot, flop, turn, river."""

    def __init__(self, labels: Sequence[str], rng: Optional[random.Random] = None) -> None:
        super().__init__(rng)
        front = parse_cards(labels)
        self._cards = front + [card for card in self._cards if card not in front]

    def shuffle(self) -> None:
        self._index = 0


def rig_deck(monkeypatch, labels: Sequence[str]) -> None:
    monkeypatch.setattr("holdem.game.Deck", lambda rng=None: StackedDeck(labels, rng))


def perform_actions(state: GameState, actions: Iterable[Tuple[Player, Action]]) -> List[dict]:
    """Apply a scripted sequence of (player, action) pairs and collect the events."""
    events: List[dict] = []
    for player, action in actions:
        events.extend(state.apply_action(player, action))
    return events


def passive_action(state: GameState) -> Action:
    available = state.available_actions()
    if available.can_check:
        return Action.check()
    if available.can_call is not None:
        return Action.call(available.can_call)
    actor = state.to_act
    return Action.all_in(state.current_bet(actor) + state.stack_of(actor))


def play_passively(state: GameState) -> List[dict]:
    """Check or call until the current hand is over."""
    events: List[dict] = []
    steps = 0
    while not state.is_hand_over():
        steps += 1
        assert steps < 100, "hand did not terminate"
        events.extend(state.apply_action(state.to_act, passive_action(state)))
    return events
