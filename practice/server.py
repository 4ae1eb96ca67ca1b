from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import websockets
from http import HTTPStatus

from holdem.actions import Action, ActionType
from holdem.game import GameState
from holdem.models import IllegalAction, Phase, Player, TableConfig
from holdem.stats import PlayerStats, StatsRecorder, StatsStore
from practice.bots import house_strategy

LOGGER = logging.getLogger("practice_host")

REMOTE_SEAT = Player.HUMAN
HOUSE_SEAT = Player.BOT


class PracticeServerError(Exception):
    def __init__(self, code: str, msg: str) -> None:
        super().__init__(msg)
        self.code = code
        self.msg = msg


def _config_payload(config: TableConfig) -> Dict[str, Any]:
    return {
        "variant": "HUNL",
        "starting_stack": config.starting_stack,
        "sb": config.sb,
        "bb": config.bb,
    }


def parse_action(message: Dict[str, Any]) -> Action:
    raw_kind = message.get("action")
    try:
        kind = ActionType(raw_kind)
    except ValueError:
        raise PracticeServerError("BAD_ACTION", f"Unknown action {raw_kind!r}") from None

    amount = message.get("amount")
    if amount is None:
        amount = 0
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise PracticeServerError("BAD_AMOUNT", "amount must be an integer")
    try:
        return Action(kind, amount)
    except ValueError as exc:
        raise PracticeServerError("BAD_AMOUNT", str(exc)) from None


@dataclass
class RemoteClient:
    name: str
    websocket: websockets.WebSocketServerProtocol

    async def send_json(self, payload: Dict[str, Any]) -> None:
        await self.websocket.send(json.dumps({"v": 1, **payload}))


# Each connection gets its own PracticeSession and GameState.


class PracticeSession:
    """Plays one heads-up session: the remote client against the house policy."""

    def __init__(
        self,
        config: TableConfig,
        remote: RemoteClient,
        max_hands: Optional[int] = None,
        seed: Optional[int] = None,
        stats: Optional[PlayerStats] = None,
    ) -> None:
        self.config = config
        self.remote = remote
        self.max_hands = max_hands
        self.state = GameState(config, seed=seed, deal=False)
        self.house_rng = random.Random(seed)
        self.stats = StatsRecorder(stats if stats is not None else PlayerStats(), REMOTE_SEAT)
        # Engine calls are serialised; GameState has no locking of its own.
        self.lock = asyncio.Lock()

    async def run(self) -> None:
        try:
            events = await self._engine_call(self.state.start_new_hand)
            while True:
                await self.remote.send_json({"type": "start_hand", "hand": self.state.hand_number})
                await self._broadcast_events(events)
                await self._play_hand()
                await self.remote.send_json({"type": "end_hand", **self.state.end_hand_payload()})

                if self.max_hands is not None and self.state.hand_number >= self.max_hands:
                    break
                events = await self._engine_call(self.state.next_hand)
                if self.state.phase == Phase.SESSION_END:
                    break
        finally:
            # A disconnect ends the session too; chips left in an unfinished pot count as lost.
            self.stats.record_session_end(self.state)
        await self.remote.send_json({"type": "match_end", **self._match_result_payload()})

    async def _engine_call(self, func, *args):
        async with self.lock:
            result = func(*args)
        self.stats.record_events(self.state, result)
        return result

    async def _play_hand(self) -> None:
        while not self.state.is_hand_over():
            actor = self.state.to_act
            if actor is REMOTE_SEAT:
                events = await self._prompt_remote()
            else:
                # House policy is instant and runs locally.
                async with self.lock:
                    action = house_strategy(self.state, actor, self.house_rng)
                events = await self._apply(actor, action)
            await self._broadcast_events(events)

    async def _apply(self, actor: Player, action: Action) -> List[Dict[str, object]]:
        async with self.lock:
            self.stats.record_action(self.state, actor, action)
            events = self.state.apply_action(actor, action)
        self.stats.record_events(self.state, events)
        return events

    async def _prompt_remote(self) -> List[Dict[str, object]]:
        while True:
            async with self.lock:
                payload = self.state.act_payload(REMOTE_SEAT)
            await self.remote.send_json({"type": "act", **payload})
            raw = await self.remote.websocket.recv()
            try:
                message = json.loads(raw)
            except json.JSONDecodeError:
                await self._send_error("BAD_JSON", "Message is not valid JSON")
                continue
            if message.get("type") != "action":
                continue
            try:
                action = parse_action(message)
                # Reject before recording so stats only see accepted actions.
                async with self.lock:
                    self.state.validate_action(REMOTE_SEAT, action)
                return await self._apply(REMOTE_SEAT, action)
            except PracticeServerError as exc:
                await self._send_error(exc.code, exc.msg)
            except IllegalAction as exc:
                LOGGER.debug("Rejected %s from %s: %s", action, self.remote.name, exc.msg)
                await self._send_error(exc.code, exc.msg)

    async def _send_error(self, code: str, msg: str) -> None:
        await self.remote.send_json({"type": "error", "code": code, "msg": msg})

    async def _broadcast_events(self, events: List[Dict[str, object]]) -> None:
        for event in events:
            await self.remote.send_json({"type": "event", **event})

    def _match_result_payload(self) -> Dict[str, Any]:
        state = self.state
        winner: Optional[str] = None
        if state.player_stack == 0:
            winner = HOUSE_SEAT.value
        elif state.bot_stack == 0:
            winner = REMOTE_SEAT.value
        return {
            "winner": winner,
            "hands_played": state.hands_played,
            "hands_won": state.hands_won,
            "final_stacks": {REMOTE_SEAT.value: state.player_stack, HOUSE_SEAT.value: state.bot_stack},
            "profit_bb": state.session_profit_bb(),
            "stats": {
                "vpip": self.stats.stats.vpip(),
                "pfr": self.stats.stats.pfr(),
                "aggression_factor": self.stats.stats.aggression_factor(),
            },
        }


async def handle_connection(
    websocket: websockets.WebSocketServerProtocol,
    config: TableConfig,
    max_hands: Optional[int] = None,
    stats_path: Optional[Path] = None,
) -> None:
    hello_raw = await websocket.recv()
    try:
        hello = json.loads(hello_raw)
    except json.JSONDecodeError:
        hello = {}
    if hello.get("type") != "hello":
        await websocket.send(json.dumps({"v": 1, "type": "error", "code": "BAD_HELLO", "msg": "Expected hello"}))
        return

    name_raw = hello.get("name")
    name = name_raw.strip() if isinstance(name_raw, str) else ""
    remote = RemoteClient(name=name or "REMOTE", websocket=websocket)
    await remote.send_json({
        "type": "welcome",
        "table_id": "PRACTICE",
        "seat": REMOTE_SEAT.value,
        "config": _config_payload(config),
    })

    store = StatsStore.load_or_create(stats_path) if stats_path is not None else None
    session = PracticeSession(config, remote, max_hands=max_hands, stats=store.stats if store else None)
    LOGGER.info("Practice session started for %s", remote.name)
    try:
        await session.run()
    except websockets.ConnectionClosed:
        LOGGER.info("%s disconnected after %s hands", remote.name, session.state.hands_played)
    except Exception as exc:  # noqa: BLE001
        LOGGER.exception("Practice session crashed: %s", exc)
    if store is not None:
        store.save()


async def _process_request(path, request_headers):
    """Return a simple HTTP response for health checks."""

    upgrade_header = request_headers.get("Upgrade", "").lower()
    if upgrade_header == "websocket":
        return None  # let the WebSocket handshake continue

    if path in {"/", "/health", "/healthz"}:
        body = b"practice server running\n"
        headers = [
            ("Content-Type", "text/plain; charset=utf-8"),
            ("Content-Length", str(len(body))),
        ]
        return HTTPStatus.OK, headers, body
    body = b"not found\n"
    headers = [
        ("Content-Type", "text/plain; charset=utf-8"),
        ("Content-Length", str(len(body))),
    ]
    return HTTPStatus.NOT_FOUND, headers, body


async def run_server(
    host: str,
    port: int,
    config: TableConfig,
    max_hands: Optional[int] = None,
    stats_path: Optional[Path] = None,
) -> None:
    async def _handler(ws):
        await handle_connection(ws, config, max_hands, stats_path)

    async with websockets.serve(_handler, host, port, process_request=_process_request):
        LOGGER.info("Practice server listening on %s:%s", host, port)
        await asyncio.Future()


def main() -> None:
    parser = argparse.ArgumentParser(description="Heads-up practice server (remote client vs house bot)")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=9876)
    parser.add_argument("--stack", type=int, default=100, help="Starting stack in big blinds")
    parser.add_argument("--sb", type=int, default=1)
    parser.add_argument("--bb", type=int, default=2)
    parser.add_argument("--max-hands", type=int, default=None, help="Stop the session after this many hands")
    parser.add_argument("--stats-file", type=Path, default=None, help="Accumulate the remote seat's stats in this JSON file")
    args = parser.parse_args()

    config = TableConfig(starting_stack_bb=args.stack, sb=args.sb, bb=args.bb)
    asyncio.run(run_server(args.host, args.port, config, args.max_hands, args.stats_file))


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
