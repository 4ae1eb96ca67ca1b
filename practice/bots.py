from __future__ import annotations

import random
from typing import List, Optional

from holdem.actions import Action, AvailableActions
from holdem.cards import Card
from holdem.game import GameState
from holdem.models import Phase, Player


_RNG = random.Random()


def _rough_hand_strength(hole: List[Card]) -> int:
    """Very rough proxy for hand quality used to drive aggression choices."""
    if len(hole) < 2:
        return 0

    values = [int(card.rank) for card in hole]

    score = sum(values)
    if values[0] == values[1]:
        score += 14  # pairs are quite strong pre-flop
    else:
        gap = abs(values[0] - values[1])
        if gap == 1:
            score += 4
        elif gap == 2:
            score += 2
    if hole[0].suit == hole[1].suit:
        score += 3
    if min(values) >= 11:
        score += 2

    return score


def _should_raise(strength: int, phase: Phase, facing_bet: bool, rng: random.Random) -> bool:
    base = 0.2 if facing_bet else 0.35
    phase_bonus = {
        Phase.PREFLOP: 0.0,
        Phase.FLOP: 0.05,
        Phase.TURN: 0.1,
        Phase.RIVER: 0.12,
    }.get(phase, 0.0)
    scaled_strength = min(strength / 45.0, 0.45)
    probability = min(0.85, base + phase_bonus + scaled_strength)

    # Always attack with premium holdings.
    if strength >= 36:
        return True
    return rng.random() < probability


def _choose_amount(floor: int, ceiling: int, facing_bet: bool, rng: random.Random) -> int:
    if ceiling <= floor:
        return ceiling

    span = ceiling - floor
    roll = rng.random()

    # Facing a bet → weight toward stronger responses, otherwise mix in more probes.
    if facing_bet:
        if roll < 0.2:
            return floor
        if roll > 0.85:
            return ceiling
    else:
        if roll < 0.35:
            return floor
        if roll > 0.9:
            return ceiling

    return floor + int(span * rng.random())


def _aggressive_action(
    state: GameState,
    player: Player,
    available: AvailableActions,
    facing_bet: bool,
    rng: random.Random,
) -> Optional[Action]:
    current = state.current_bet(player)
    all_in_total = current + state.stack_of(player)

    if available.min_raise is not None:
        floor = available.min_raise
    elif available.min_bet is not None:
        floor = current + available.min_bet
    else:
        return None

    amount = _choose_amount(floor, all_in_total, facing_bet, rng)
    if amount >= all_in_total:
        return Action.all_in(all_in_total)
    if facing_bet:
        return Action.raise_to(amount)
    return Action.bet(amount)


def house_strategy(state: GameState, player: Player, rng: Optional[random.Random] = None) -> Action:
    """Aggressive demo policy: mixes in random raises with a bias toward stronger holdings.

    Only ever picks from the state's AvailableActions, so the result is legal.
    """
    rng = rng or _RNG
    available = state.available_actions(player)
    strength = _rough_hand_strength(state.hole_cards(player))
    facing_bet = state.amount_to_call(player) > 0
    opponent_all_in = state.stack_of(player.opponent) == 0

    if not opponent_all_in and _should_raise(strength, state.phase, facing_bet, rng):
        action = _aggressive_action(state, player, available, facing_bet, rng)
        if action is not None:
            return action

    if available.can_call is not None:
        return Action.call(available.can_call)

    # Prefer checking when no chips are at risk.
    if available.can_check:
        return Action.check()

    # Owing the whole stack: commit only with a decent holding.
    if strength >= 30 and state.stack_of(player) > 0:
        return Action.all_in(state.current_bet(player) + state.stack_of(player))

    return Action.fold()
