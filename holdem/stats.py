from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Dict, Iterable, Optional

from .actions import Action, ActionType
from .game import GameState
from .models import Phase, Player

# Session statistics only observe the engine after the fact; nothing here
# feeds back into betting or settlement.

LOGGER = logging.getLogger("holdem.stats")

DEFAULT_STATS_PATH = Path.home() / ".holdem" / "stats.json"


def _percent(part: int, whole: int) -> float:
    return part / whole * 100.0 if whole else 0.0


@dataclass
class PlayerStats:
    total_hands: int = 0
    total_sessions: int = 0
    vpip_hands: int = 0
    pfr_hands: int = 0
    bets: int = 0
    raises: int = 0
    calls: int = 0
    saw_flop_hands: int = 0
    showdown_hands: int = 0
    showdown_wins: int = 0
    total_profit_chips: int = 0
    biggest_pot_won: int = 0
    biggest_pot_lost: int = 0

    def vpip(self) -> float:
        return _percent(self.vpip_hands, self.total_hands)

    def pfr(self) -> float:
        return _percent(self.pfr_hands, self.total_hands)

    def went_to_showdown(self) -> float:
        return _percent(self.showdown_hands, self.saw_flop_hands)

    def won_at_showdown(self) -> float:
        return _percent(self.showdown_wins, self.showdown_hands)

    def aggression_factor(self) -> float:
        aggressive = self.bets + self.raises
        if self.calls == 0:
            # Capped for display instead of infinity.
            return 99.9 if aggressive else 0.0
        return aggressive / self.calls

    def win_rate_bb_per_100(self, big_blind: int) -> float:
        if self.total_hands == 0:
            return 0.0
        return self.total_profit_chips / big_blind / self.total_hands * 100.0

    def to_dict(self) -> Dict[str, int]:
        return asdict(self)

    @classmethod
    def from_dict(cls, payload: Dict[str, object]) -> "PlayerStats":
        if not isinstance(payload, dict):
            raise ValueError("Stats payload must be an object")
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in payload.items():
            if key not in known:
                continue
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"Stat {key} must be an integer")
            values[key] = value
        return cls(**values)


class StatsRecorder:
    """Feeds engine actions and events for one seat into PlayerStats."""

    def __init__(self, stats: PlayerStats, player: Player = Player.HUMAN) -> None:
        self.stats = stats
        self.player = player
        self._vpip_recorded = False
        self._pfr_recorded = False
        self._saw_flop = False

    def record_action(self, state: GameState, player: Player, action: Action) -> None:
        # Call before apply_action so the street is still the one acted on.
        if player is not self.player:
            return
        preflop = state.phase == Phase.PREFLOP
        kind = action.kind

        if kind == ActionType.CALL:
            self.stats.calls += 1
        elif kind == ActionType.BET:
            self.stats.bets += 1
        elif kind in (ActionType.RAISE, ActionType.ALL_IN):
            self.stats.raises += 1

        if preflop and kind not in (ActionType.FOLD, ActionType.CHECK) and not self._vpip_recorded:
            self.stats.vpip_hands += 1
            self._vpip_recorded = True
        if preflop and action.is_aggressive and not self._pfr_recorded:
            self.stats.pfr_hands += 1
            self._pfr_recorded = True

    def record_events(self, state: GameState, events: Iterable[Dict[str, object]]) -> None:
        for event in events:
            kind = event.get("ev")
            if kind == "POST_BLINDS":
                self.stats.total_hands += 1
                self._vpip_recorded = False
                self._pfr_recorded = False
                self._saw_flop = False
            elif kind == "FLOP" and not self._saw_flop:
                self.stats.saw_flop_hands += 1
                self._saw_flop = True
            elif kind == "HAND_COMPLETE":
                self._record_pot(event.get("winner"), int(event.get("pot", 0)))

        result = state.showdown_result
        if state.phase == Phase.SHOWDOWN and result is not None and any(ev.get("ev") == "SHOWDOWN" for ev in events):
            self.stats.showdown_hands += 1
            if result.winner is self.player:
                self.stats.showdown_wins += 1
            self._record_pot(result.winner.value if result.winner else None, result.pot_won)

    def _record_pot(self, winner: Optional[object], pot: int) -> None:
        if winner is None:
            return
        if winner == self.player.value:
            self.stats.biggest_pot_won = max(self.stats.biggest_pot_won, pot)
        else:
            self.stats.biggest_pot_lost = max(self.stats.biggest_pot_lost, pot)

    def record_session_end(self, state: GameState) -> None:
        self.stats.total_sessions += 1
        self.stats.total_profit_chips += state.stack_of(self.player) - state.starting_stack


class StatsStore:
    def __init__(self, stats: PlayerStats, path: Path) -> None:
        self.stats = stats
        self.path = path

    @classmethod
    def load_or_create(cls, path: Optional[Path] = None) -> "StatsStore":
        path = Path(path) if path is not None else DEFAULT_STATS_PATH
        stats = PlayerStats()
        if path.exists():
            try:
                stats = PlayerStats.from_dict(json.loads(path.read_text(encoding="utf-8")))
            except (OSError, ValueError, TypeError) as exc:
                LOGGER.warning("Could not load stats from %s, starting fresh: %s", path, exc)
                stats = PlayerStats()
        return cls(stats, path)

    def save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(self.stats.to_dict(), indent=2), encoding="utf-8")
        except OSError as exc:
            LOGGER.warning("Could not save stats to %s: %s", self.path, exc)
