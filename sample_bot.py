#!/usr/bin/env python3
"""
Starter bot for the heads-up practice server.

Usage:
    pip install -e .
    python -m practice.server --port 9876
    python sample_bot.py --name MY_BOT --url ws://127.0.0.1:9876/

This script shows the core loop:
  * handshake with the host
  * wait for `act` prompts
  * choose an action from the legality snapshot in the payload
  * log a short recap of every hand

Replace the `choose_action` function with your custom strategy.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import websockets

LOGGER = logging.getLogger("sample_bot")
STREAM_HANDLER = logging.StreamHandler()
STREAM_HANDLER.setFormatter(logging.Formatter("%(message)s"))
if not LOGGER.handlers:
    LOGGER.addHandler(STREAM_HANDLER)
LOGGER.propagate = False

USE_UNICODE_CARDS = True
SUIT_SYMBOLS = {"c": "♣", "d": "♦", "h": "♥", "s": "♠"}


@dataclass
class ActionContext:
    hand: int
    phase: str

    # Your cards and chips
    hole_cards: List[str]
    stack: int
    bet: int  # Chips already in front of you this street
    to_call: int
    is_button: bool

    # Table state
    pot: int
    current_bet: int  # Highest bet this street
    min_raise_to: int
    board: List[str]
    sb: int
    bb: int
    opponent_stack: int
    opponent_bet: int

    # Legality snapshot (can_fold, can_check, can_call, min_bet, min_raise, max_raise)
    legal: Dict[str, Any] = field(default_factory=dict)

    @property
    def all_in_total(self) -> int:
        return self.bet + self.stack


def build_context(message: Dict[str, Any]) -> ActionContext:
    you = message.get("you", {})
    opponent = message.get("opponent", {})
    table = message.get("table", {})
    return ActionContext(
        hand=message.get("hand", 0),
        phase=message.get("phase", "PREFLOP"),
        hole_cards=list(you.get("hole", [])),
        stack=you.get("stack", 0),
        bet=you.get("bet", 0),
        to_call=you.get("to_call", 0),
        is_button=bool(you.get("is_button", False)),
        pot=message.get("pot", 0),
        current_bet=message.get("current_bet", 0),
        min_raise_to=message.get("min_raise_to", 0),
        board=list(message.get("board", [])),
        sb=table.get("sb", 0),
        bb=table.get("bb", 0),
        opponent_stack=opponent.get("stack", 0),
        opponent_bet=opponent.get("bet", 0),
        legal=dict(message.get("legal", {})),
    )


def choose_action(ctx: ActionContext) -> Tuple[str, Optional[int]]:
    """Training wheels strategy: check, call small bets, raise pocket pairs preflop."""

    paired = len(ctx.hole_cards) == 2 and ctx.hole_cards[0][0] == ctx.hole_cards[1][0]
    if paired and ctx.phase == "PREFLOP":
        if ctx.legal.get("min_raise") is not None:
            return "RAISE", ctx.legal["min_raise"]
        if ctx.legal.get("min_bet") is not None:
            return "BET", ctx.bet + ctx.legal["min_bet"]

    if ctx.legal.get("can_check"):
        return "CHECK", None

    call_amount = ctx.legal.get("can_call")
    if call_amount is not None and call_amount <= 5 * max(ctx.bb, 1):
        return "CALL", call_amount

    return "FOLD", None


def fallback_action(ctx: ActionContext) -> Tuple[str, Optional[int]]:
    """Select the safest legal move (check > fold)."""

    if ctx.legal.get("can_check"):
        return "CHECK", None
    return "FOLD", None


def sanitize_action(action: str, amount: Optional[int], ctx: ActionContext) -> Tuple[str, Optional[int]]:
    """Ensure the outgoing action abides by the host constraints."""

    legal = ctx.legal
    if action == "FOLD":
        return action, None
    if action == "CHECK":
        if not legal.get("can_check"):
            LOGGER.warning("CHECK chosen but not legal; falling back")
            return fallback_action(ctx)
        return action, None
    if action == "CALL":
        if legal.get("can_call") is None:
            LOGGER.warning("CALL chosen but not legal; falling back")
            return fallback_action(ctx)
        return action, legal["can_call"]
    if action == "ALL_IN":
        if ctx.stack <= 0:
            return fallback_action(ctx)
        return action, ctx.all_in_total
    if action in {"BET", "RAISE"}:
        if action == "BET":
            minimum = legal.get("min_bet")
            floor = ctx.bet + minimum if minimum is not None else None
        else:
            floor = legal.get("min_raise")
        if floor is None:
            LOGGER.warning("%s chosen but not legal; falling back", action)
            return fallback_action(ctx)
        if amount is None or amount < floor:
            LOGGER.warning("%s total %s below minimum %s; clamping", action, amount, floor)
            amount = floor
        if amount >= ctx.all_in_total:
            return "ALL_IN", ctx.all_in_total
        return action, int(amount)

    LOGGER.warning("Unknown action '%s' requested; falling back", action)
    return fallback_action(ctx)


async def play_session(websocket: websockets.WebSocketClientProtocol, name: str) -> None:
    """Listen for host messages, respond to act prompts, and log hand summaries."""

    hand_log: List[str] = []

    async for raw in websocket:
        message = json.loads(raw)
        msg_type = message.get("type")

        if msg_type == "welcome":
            cfg = message.get("config", {})
            LOGGER.info(
                "[welcome] %s seated as %s | stack=%s sb=%s bb=%s",
                name,
                message.get("seat"),
                cfg.get("starting_stack"),
                cfg.get("sb"),
                cfg.get("bb"),
            )
            continue

        if msg_type == "start_hand":
            hand_log = []
            continue

        if msg_type == "event":
            line = describe_event(message)
            if line:
                hand_log.append(line)
            continue

        if msg_type == "act":
            ctx = build_context(message)
            action, amount = choose_action(ctx)
            action, amount = sanitize_action(action, amount, ctx)
            payload: Dict[str, Any] = {"type": "action", "v": 1, "action": action}
            if amount is not None:
                payload["amount"] = int(amount)
            LOGGER.debug("Sending action: %s", payload)
            await websocket.send(json.dumps(payload))
            continue

        if msg_type == "end_hand":
            LOGGER.info("[hand %s] winner=%s", message.get("hand"), message.get("winner") or "split")
            for line in hand_log:
                LOGGER.info("    %s", line)
            LOGGER.info("  stacks %s", message.get("stacks"))
            continue

        if msg_type == "match_end":
            LOGGER.info(
                "[match] winner=%s hands=%s final_stacks=%s",
                message.get("winner"),
                message.get("hands_played"),
                message.get("final_stacks"),
            )
            break

        if msg_type == "error":
            LOGGER.warning("[error] %s", message)
            continue

        LOGGER.debug("Ignoring message type=%s", msg_type)


def describe_event(event: Dict[str, Any]) -> Optional[str]:
    ev = event.get("ev")
    player = event.get("player")
    if ev == "POST_BLINDS":
        return f"{event.get('sb_player')} posts SB {event.get('sb')}, {event.get('bb_player')} posts BB {event.get('bb')}"
    if ev in {"FOLD", "CHECK"}:
        return f"{player} {ev.lower()}s"
    if ev == "CALL":
        return f"{player} calls {event.get('amount')}"
    if ev in {"BET", "RAISE", "ALL_IN"}:
        verb = {"BET": "bets", "RAISE": "raises", "ALL_IN": "goes all-in"}[ev]
        return f"{player} {verb} to {event.get('total')}"
    if ev == "RETURN_UNCALLED":
        return f"{event.get('amount')} uncalled returned to {player}"
    if ev == "FLOP":
        return f"Flop [{render_cards(event.get('cards', []))}]"
    if ev in {"TURN", "RIVER"}:
        return f"{ev.capitalize()} [{render_card(event.get('card', ''))}]"
    if ev == "SHOWDOWN":
        return f"{player} shows {render_cards(event.get('hand', []))} ({event.get('rank')})"
    if ev == "POT_AWARD":
        return f"{player} +{event.get('amount')}"
    return None


async def run_bot(name: str, url: str) -> None:
    async with websockets.connect(url) as ws:
        await ws.send(json.dumps({"type": "hello", "v": 1, "name": name}))
        LOGGER.info("[connect] %s as %s", url, name)
        # Stay inside play_session until the server sends match_end.
        await play_session(ws, name)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sample heads-up bot client")
    parser.add_argument("--name", default="SAMPLE", help="Display name sent in the hello message")
    parser.add_argument("--url", default="ws://127.0.0.1:9876/", help="WebSocket URL")
    parser.add_argument("--log-level", default="INFO")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    LOGGER.setLevel(getattr(logging, args.log_level.upper(), logging.INFO))
    asyncio.run(run_bot(args.name, args.url))


def render_card(card: str) -> str:
    """Return a card such as 'Ah' rendered with a unicode suit if enabled."""

    if USE_UNICODE_CARDS and len(card) == 2 and card[1] in SUIT_SYMBOLS:
        return card[0] + SUIT_SYMBOLS[card[1]]
    return card


def render_cards(cards: List[str]) -> str:
    if not cards:
        return "--"
    return " ".join(render_card(card) for card in cards)


if __name__ == "__main__":
    main()
