from __future__ import annotations

import logging
import random
from typing import Dict, List, Optional, Tuple

from .actions import Action, ActionType, AvailableActions, raise_floor
from .cards import Card, Deck, cards_to_labels
from .evaluator import HandEvaluation, evaluate_hand
from .models import IllegalAction, Phase, Player, ShowdownResult, TableConfig

# GameState owns every chip of a heads-up session. No I/O lives here, only
# poker rules, chip accounting and betting order. Callers must serialise
# access; every apply_action reads and mutates shared fields.

LOGGER = logging.getLogger("holdem.game")

Event = Dict[str, object]


class GameState:
    """Heads-up No-Limit Hold'em state machine for a human seat and a bot seat."""

    def __init__(self, config: Optional[TableConfig] = None, seed: Optional[int] = None, deal: bool = True) -> None:
        self.config = config or TableConfig()
        self._rng = random.Random(seed)

        self.phase = Phase.HAND_COMPLETE
        self.deck = Deck(self._rng)
        self.player_cards: List[Card] = []
        self.bot_cards: List[Card] = []
        self.board: List[Card] = []
        self.pot = 0
        self.player_stack = self.config.starting_stack
        self.bot_stack = self.config.starting_stack
        self.player_bet = 0
        self.bot_bet = 0
        # The first hand flips the button to the human seat.
        self.to_act = Player.HUMAN
        self.button = Player.BOT
        self.last_aggressor: Optional[Player] = None
        self.last_raise_size = self.config.bb
        self.actions_this_street = 0
        self.last_action: Optional[Tuple[Player, Action]] = None
        self.showdown_result: Optional[ShowdownResult] = None

        # Session counters survive hand resets.
        self.starting_stack = self.config.starting_stack
        self.session_chips = 2 * self.starting_stack
        self.hand_number = 0
        self.hands_played = 0
        self.hands_won = 0
        self.biggest_pot_won = 0
        self.biggest_pot_lost = 0

        self.hand_winner: Optional[Player] = None
        if deal:
            self.start_new_hand()

    # Chip helpers ----------------------------------------------------

    def stack_of(self, player: Player) -> int:
        return self.player_stack if player is Player.HUMAN else self.bot_stack

    def current_bet(self, player: Player) -> int:
        return self.player_bet if player is Player.HUMAN else self.bot_bet

    def hole_cards(self, player: Player) -> List[Card]:
        return self.player_cards if player is Player.HUMAN else self.bot_cards

    def max_bet(self) -> int:
        return max(self.player_bet, self.bot_bet)

    def total_chips(self) -> int:
        return self.player_stack + self.bot_stack + self.pot

    def _move_chips(self, player: Player, amount: int) -> int:
        """Move chips from a stack into the pot, never more than the stack holds."""
        if player is Player.HUMAN:
            actual = max(0, min(amount, self.player_stack))
            self.player_stack -= actual
            self.player_bet += actual
        else:
            actual = max(0, min(amount, self.bot_stack))
            self.bot_stack -= actual
            self.bot_bet += actual
        self.pot += actual
        return actual

    def _return_chips(self, player: Player, amount: int) -> None:
        if player is Player.HUMAN:
            self.player_stack += amount
            self.player_bet -= amount
        else:
            self.bot_stack += amount
            self.bot_bet -= amount
        self.pot -= amount

    def _award(self, player: Player, amount: int) -> None:
        if player is Player.HUMAN:
            self.player_stack += amount
        else:
            self.bot_stack += amount

    def _deal(self, count: int) -> List[Card]:
        cards = self.deck.deal_n(count)
        if len(cards) != count:
            raise RuntimeError("Deck exhausted mid-hand")
        return cards

    # Hand lifecycle --------------------------------------------------

    def start_new_hand(self) -> List[Event]:
        if self.phase.is_betting:
            raise RuntimeError("Hand already in progress")
        if self.player_stack == 0 or self.bot_stack == 0:
            raise RuntimeError("Not enough chips to start a hand")

        self.hand_number += 1
        self.button = self.button.opponent
        self.phase = Phase.PREFLOP
        # Fresh deck every hand; the old one is discarded.
        self.deck = Deck(self._rng)
        self.deck.shuffle()
        self.player_cards = self._deal(2)
        self.bot_cards = self._deal(2)
        self.board = []
        self.pot = 0
        self.player_bet = 0
        self.bot_bet = 0
        self.last_aggressor = None
        self.last_raise_size = self.config.bb
        self.last_action = None
        self.showdown_result = None
        self.hand_winner = None
        self.actions_this_street = 0

        sb_player = self.button
        bb_player = self.button.opponent
        sb_posted = self._move_chips(sb_player, self.config.sb)
        bb_posted = self._move_chips(bb_player, self.config.bb)
        self.to_act = self.button

        LOGGER.debug("Hand %s started, button=%s", self.hand_number, self.button.value)
        events: List[Event] = [
            {
                "ev": "POST_BLINDS",
                "hand": self.hand_number,
                "sb_player": sb_player.value,
                "bb_player": bb_player.value,
                "sb": sb_posted,
                "bb": bb_posted,
            }
        ]

        # Short stacks can be all-in from the blinds alone.
        events.extend(self._return_uncalled())
        if (self.player_stack == 0 or self.bot_stack == 0) and self.player_bet == self.bot_bet:
            events.extend(self._advance_phase())
        return events

    def next_hand(self) -> List[Event]:
        if self.phase not in (Phase.SHOWDOWN, Phase.HAND_COMPLETE):
            raise RuntimeError("Hand still in progress")
        if self.is_session_over():
            self.phase = Phase.SESSION_END
            LOGGER.info("Session over after %s hands", self.hands_played)
            return [{"ev": "SESSION_END", "player_stack": self.player_stack, "bot_stack": self.bot_stack}]
        return self.start_new_hand()

    def end_session(self) -> None:
        self.phase = Phase.SUMMARY

    # Action handling -------------------------------------------------

    def amount_to_call(self, player: Player) -> int:
        return max(self.max_bet() - self.current_bet(player), 0)

    def min_raise_to(self) -> int:
        return raise_floor(self.max_bet(), self.last_raise_size, self.config.bb)

    def available_actions(self, player: Optional[Player] = None) -> AvailableActions:
        actor = player or self.to_act
        return AvailableActions.compute(
            self.amount_to_call(actor),
            self.min_raise_to(),
            self.stack_of(actor),
            self.config.bb,
        )

    def validate_action(self, player: Player, action: Action) -> None:
        if not self.phase.is_betting:
            raise IllegalAction("HAND_OVER", "Hand not in progress")
        if player is not self.to_act:
            raise IllegalAction("OUT_OF_TURN", f"It is {self.to_act.value}'s turn")

        stack = self.stack_of(player)
        current = self.current_bet(player)
        to_call = self.amount_to_call(player)
        kind = action.kind

        if kind == ActionType.FOLD:
            return
        if kind == ActionType.CHECK:
            if to_call > 0:
                raise IllegalAction("CANNOT_CHECK", "Cannot check when facing a bet")
            return
        if kind == ActionType.CALL:
            if to_call == 0:
                raise IllegalAction("NOTHING_TO_CALL", "Nothing to call")
            if to_call >= stack:
                raise IllegalAction("CALL_EXCEEDS_STACK", "Call covers the whole stack; go all-in instead")
            if action.amount != to_call:
                raise IllegalAction("BAD_AMOUNT", f"Call must be exactly {to_call}")
            return
        if kind == ActionType.ALL_IN:
            if stack == 0:
                raise IllegalAction("NO_CHIPS", "No chips behind")
            if action.amount != current + stack:
                raise IllegalAction("BAD_AMOUNT", f"All-in total must be {current + stack}")
            return
        if kind in (ActionType.BET, ActionType.RAISE):
            if stack == 0:
                raise IllegalAction("NO_CHIPS", "No chips behind")
            if kind == ActionType.BET:
                if to_call > 0:
                    raise IllegalAction("CANNOT_BET", "Facing a bet; raise instead")
                floor = current + min(self.config.bb, stack)
            else:
                if to_call == 0:
                    raise IllegalAction("CANNOT_RAISE", "Nothing to raise; bet instead")
                floor = self.min_raise_to()
            if action.amount > current + stack:
                raise IllegalAction("EXCEEDS_STACK", "Bet exceeds stack")
            if action.amount < floor:
                raise IllegalAction("BELOW_MINIMUM", f"Minimum is {floor}")
            return
        raise ValueError(f"Unsupported action {kind}")

    def apply_action(self, player: Player, action: Action) -> List[Event]:
        self.validate_action(player, action)
        self.last_action = (player, action)
        self.actions_this_street += 1

        events: List[Event] = []
        kind = action.kind

        # Each branch records what happened so drivers can display it.
        if kind == ActionType.FOLD:
            return self._handle_fold(player)
        elif kind == ActionType.CHECK:
            events.append({"ev": "CHECK", "player": player.value})
        elif kind == ActionType.CALL:
            moved = self._move_chips(player, action.amount)
            events.append({"ev": "CALL", "player": player.value, "amount": moved})
        elif kind in (ActionType.BET, ActionType.RAISE, ActionType.ALL_IN):
            previous_high = self.max_bet()
            moved = self._move_chips(player, action.amount - self.current_bet(player))
            total = self.current_bet(player)
            # An all-in that only calls must not take over aggressor tracking.
            if kind != ActionType.ALL_IN or total > previous_high:
                self.last_aggressor = player
                self.last_raise_size = total - previous_high
            events.append({"ev": kind.value, "player": player.value, "amount": moved, "total": total})
        else:
            raise ValueError(f"Unsupported action {kind}")

        events.extend(self._return_uncalled())
        if self._is_betting_round_complete():
            events.extend(self._advance_phase())
        else:
            self.to_act = player.opponent
        return events

    def _return_uncalled(self) -> List[Event]:
        if self.player_bet == self.bot_bet:
            return []
        high = Player.HUMAN if self.player_bet > self.bot_bet else Player.BOT
        short = high.opponent
        if self.stack_of(short) > 0:
            return []
        excess = self.current_bet(high) - self.current_bet(short)
        self._return_chips(high, excess)
        return [{"ev": "RETURN_UNCALLED", "player": high.value, "amount": excess}]

    def _is_betting_round_complete(self) -> bool:
        if self.player_stack == 0 or self.bot_stack == 0:
            return self.player_bet == self.bot_bet
        if self.player_bet != self.bot_bet:
            return False

        if self.last_aggressor is None:
            if self.phase == Phase.PREFLOP:
                # BB option: limped pots close only once the big blind checks.
                bb_player = self.button.opponent
                return self.last_action is not None and self.last_action == (bb_player, Action.check())
            return self.actions_this_street >= 2

        # Bets are level after a bet or raise, so the last action was a call.
        return True

    def _advance_phase(self) -> List[Event]:
        events: List[Event] = []
        self.player_bet = 0
        self.bot_bet = 0
        self.last_aggressor = None
        self.last_raise_size = self.config.bb
        self.actions_this_street = 0

        if self.phase == Phase.PREFLOP:
            cards = self._deal(3)
            self.phase = Phase.FLOP
            events.append({"ev": "FLOP", "cards": cards_to_labels(cards)})
        elif self.phase == Phase.FLOP:
            cards = self._deal(1)
            self.phase = Phase.TURN
            events.append({"ev": "TURN", "card": cards[0].label})
        elif self.phase == Phase.TURN:
            cards = self._deal(1)
            self.phase = Phase.RIVER
            events.append({"ev": "RIVER", "card": cards[0].label})
        elif self.phase == Phase.RIVER:
            events.extend(self._resolve_showdown())
            return events
        else:
            raise RuntimeError(f"Cannot advance from {self.phase.value}")
        self.board.extend(cards)

        self.to_act = self.button.opponent
        # Nobody can bet with a player all-in, so deal straight to showdown.
        if self.player_stack == 0 or self.bot_stack == 0:
            events.extend(self._advance_phase())
        return events

    # Settlement ------------------------------------------------------

    def _handle_fold(self, folder: Player) -> List[Event]:
        winner = folder.opponent
        pot = self.pot
        self._award(winner, pot)
        self.pot = 0
        self._record_result(winner, pot)
        self.phase = Phase.HAND_COMPLETE
        return [
            {"ev": "FOLD", "player": folder.value},
            {"ev": "POT_AWARD", "player": winner.value, "amount": pot},
            {"ev": "HAND_COMPLETE", "winner": winner.value, "pot": pot},
        ]

    def _resolve_showdown(self) -> List[Event]:
        player_eval = evaluate_hand(self.player_cards, self.board)
        bot_eval = evaluate_hand(self.bot_cards, self.board)
        winner = _compare(player_eval, bot_eval)
        pot = self.pot

        events: List[Event] = [
            {
                "ev": "SHOWDOWN",
                "player": Player.HUMAN.value,
                "hand": cards_to_labels(self.player_cards),
                "board": cards_to_labels(self.board),
                "rank": player_eval.description,
            },
            {
                "ev": "SHOWDOWN",
                "player": Player.BOT.value,
                "hand": cards_to_labels(self.bot_cards),
                "board": cards_to_labels(self.board),
                "rank": bot_eval.description,
            },
        ]

        if winner is not None:
            self._award(winner, pot)
            events.append({"ev": "POT_AWARD", "player": winner.value, "amount": pot})
        else:
            # Odd chip goes to the out-of-position player.
            half, remainder = divmod(pot, 2)
            out_of_position = self.button.opponent
            self._award(out_of_position, half + remainder)
            self._award(self.button, half)
            events.append({"ev": "POT_AWARD", "player": out_of_position.value, "amount": half + remainder})
            events.append({"ev": "POT_AWARD", "player": self.button.value, "amount": half})
        self.pot = 0

        self._record_result(winner, pot)
        self.showdown_result = ShowdownResult(
            winner=winner,
            player_hand=player_eval,
            bot_hand=bot_eval,
            pot_won=pot,
        )
        self.phase = Phase.SHOWDOWN
        LOGGER.debug(
            "Hand %s showdown: %s vs %s, winner=%s pot=%s",
            self.hand_number,
            player_eval.description,
            bot_eval.description,
            winner.value if winner else "split",
            pot,
        )
        return events

    def _record_result(self, winner: Optional[Player], pot: int) -> None:
        self.hands_played += 1
        self.hand_winner = winner
        if winner is Player.HUMAN:
            self.hands_won += 1
            self.biggest_pot_won = max(self.biggest_pot_won, pot)
        elif winner is Player.BOT:
            self.biggest_pot_lost = max(self.biggest_pot_lost, pot)

    # Queries ---------------------------------------------------------

    def is_hand_over(self) -> bool:
        return not self.phase.is_betting

    def is_session_over(self) -> bool:
        return self.player_stack == 0 or self.bot_stack == 0

    def is_player_turn(self) -> bool:
        return self.to_act is Player.HUMAN and self.phase.is_betting

    def pot_odds(self) -> Optional[Tuple[float, float]]:
        """(pot-to-call ratio, equity needed) for the human, or None when nothing is owed."""
        to_call = self.amount_to_call(Player.HUMAN)
        if to_call == 0:
            return None
        pot_after_call = self.pot + to_call
        return pot_after_call / to_call, to_call / pot_after_call

    def session_profit_bb(self) -> float:
        return (self.player_stack - self.starting_stack) / self.config.bb

    def act_payload(self, player: Player) -> Dict[str, object]:
        available = self.available_actions(player)
        opponent = player.opponent
        return {
            "hand": self.hand_number,
            "player": player.value,
            "phase": self.phase.value,
            "pot": self.pot,
            "current_bet": self.max_bet(),
            "min_raise_to": self.min_raise_to(),
            "you": {
                "hole": cards_to_labels(self.hole_cards(player)),
                "stack": self.stack_of(player),
                "bet": self.current_bet(player),
                "to_call": self.amount_to_call(player),
                "is_button": self.button is player,
            },
            "opponent": {
                "stack": self.stack_of(opponent),
                "bet": self.current_bet(opponent),
            },
            "table": {"sb": self.config.sb, "bb": self.config.bb},
            "board": cards_to_labels(self.board),
            "legal": available.to_payload(),
        }

    def end_hand_payload(self) -> Dict[str, object]:
        return {
            "hand": self.hand_number,
            "phase": self.phase.value,
            "stacks": {Player.HUMAN.value: self.player_stack, Player.BOT.value: self.bot_stack},
            "winner": self.hand_winner.value if self.hand_winner else None,
            "pot_won": self.showdown_result.pot_won if self.showdown_result else None,
        }


def _compare(player_eval: HandEvaluation, bot_eval: HandEvaluation) -> Optional[Player]:
    if player_eval > bot_eval:
        return Player.HUMAN
    if bot_eval > player_eval:
        return Player.BOT
    return None
