"""Turn dispatcher: accepts both players and runs one match to completion.

Lifecycle:
    AWAITING_PLAYERS  both listeners open, waiting for a connection and a name
    PLAYING           strict alternating rounds until the board is over
    ENDED             result computed, "#" sent, connections closed

Only one side is ever read from at a time, so the board needs no locking.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum

from chaser.config import Settings
from chaser.schemas.game import Board, Side
from chaser.services.game.engine import (
    ACTION_ACK,
    GAME_OVER,
    READY_ACK,
    READY_PROMPT,
    ActionDecodeError,
    decode_action,
    encode_response,
    get_result,
    increment_turn,
    process_action,
    surroundings_response,
)
from chaser.services.game.engine.codec import SERVER_EOL
from chaser.services.game.recorder import NullRecorder, Recorder

from .connection import Connection, ConnectionFailure

logger = logging.getLogger(__name__)


class MatchPhase(str, Enum):
    AWAITING_PLAYERS = "awaiting_players"
    PLAYING = "playing"
    ENDED = "ended"


class ProtocolViolation(Exception):
    """A player sent something the protocol does not allow at this point."""


class HandshakeFailed(Exception):
    """A player did not connect or send its name in time."""


@dataclass
class MatchSummary:
    """What the caller gets back once a match has ended."""

    winner: Side | None
    winner_name: str | None
    reason: str
    turns: int
    hot_items: int
    cool_items: int
    completed: bool = True


class MatchServer:
    """Runs a single match between the Hot and Cool ports.

    Call ``listen()`` to bind both ports (bind errors propagate), then
    ``run()`` to accept the players and play.
    """

    def __init__(self, board: Board, settings: Settings, recorder: Recorder | None = None):
        self._board = board
        self._settings = settings
        self._recorder: Recorder = recorder or NullRecorder()
        self._phase = MatchPhase.AWAITING_PLAYERS

        self._ports = {Side.HOT: settings.HOT_PORT, Side.COOL: settings.COOL_PORT}
        self._servers: dict[Side, asyncio.Server] = {}
        self._pending: dict[Side, asyncio.Future] = {}
        self._connections: dict[Side, Connection] = {}

    @property
    def phase(self) -> MatchPhase:
        return self._phase

    @property
    def board(self) -> Board:
        return self._board

    @property
    def ports(self) -> dict[Side, int]:
        """Actually bound port per side (differs from settings when 0 is configured)."""
        bound = {}
        for side, server in self._servers.items():
            sockets = server.sockets
            bound[side] = sockets[0].getsockname()[1] if sockets else self._ports[side]
        return bound

    # --- Accept phase ---

    async def listen(self) -> None:
        """Bind both listeners. Raises OSError if either port is unavailable."""
        loop = asyncio.get_running_loop()
        try:
            for side in (Side.HOT, Side.COOL):
                pending = loop.create_future()
                self._pending[side] = pending
                self._servers[side] = await asyncio.start_server(
                    self._acceptor(side, pending), self._settings.HOST, self._ports[side]
                )
                logger.info("Waiting for %s player on port %d", side.value, self.ports[side])
        except OSError:
            self._stop_listening()
            raise

    def _acceptor(self, side: Side, pending: asyncio.Future):
        async def on_connect(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
            if pending.done():
                logger.warning(
                    "Rejecting extra connection on %s port from %s",
                    side.value,
                    writer.get_extra_info("peername"),
                )
                writer.close()
                return
            pending.set_result((reader, writer))

        return on_connect

    def _stop_listening(self) -> None:
        # No wait_closed(): it also waits for the accepted player connections
        for server in self._servers.values():
            server.close()

    async def _accept(self, side: Side, cancelled: asyncio.Event) -> tuple[Connection, str]:
        """Wait for ``side``'s connection and name line.

        Sets ``cancelled`` on failure so the other side stops waiting too.
        """
        pending = self._pending[side]
        cancel_wait = asyncio.ensure_future(cancelled.wait())
        try:
            await asyncio.wait(
                {pending, cancel_wait},
                timeout=self._settings.ACCEPT_TIMEOUT,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            cancel_wait.cancel()

        self._servers[side].close()

        if not pending.done():
            pending.cancel()
            if cancelled.is_set():
                raise HandshakeFailed(f"{side.value} accept cancelled")
            cancelled.set()
            raise HandshakeFailed(
                f"{side.value} did not connect within {self._settings.ACCEPT_TIMEOUT:.1f}s"
            )

        reader, writer = pending.result()
        connection = Connection(
            reader, writer, label=side.value, timeout=self._settings.RECEIVE_TIMEOUT
        )
        logger.info("%s player connected from %s", side.value, connection.peer)

        encoding = self._settings.name_encoding_for(self._ports[side])
        try:
            name = await connection.receive(encoding=encoding)
        except ConnectionFailure as e:
            await connection.close()
            cancelled.set()
            raise HandshakeFailed(f"failed to receive {side.value} player name: {e}") from e

        return connection, name

    async def accept_players(self) -> bool:
        """Accept both players concurrently. Returns False if either fails."""
        if not self._servers:
            await self.listen()

        cancelled = asyncio.Event()
        results = await asyncio.gather(
            self._accept(Side.HOT, cancelled),
            self._accept(Side.COOL, cancelled),
            return_exceptions=True,
        )
        self._stop_listening()

        failures = []
        for side, result in zip((Side.HOT, Side.COOL), results):
            if isinstance(result, HandshakeFailed):
                failures.append(str(result))
            elif isinstance(result, BaseException):
                raise result
            else:
                connection, name = result
                self._connections[side] = connection
                self._board.character(side).name = name
                logger.info("%s player registered: %s", side.value, name)

        if failures:
            for message in failures:
                logger.error("Connection failed: %s", message)
            await self._close_connections()
            return False
        return True

    # --- Playing ---

    def _turn_order(self) -> tuple[Side, Side]:
        if self._board.turn % 2 == 0:
            return Side.HOT, Side.COOL
        return Side.COOL, Side.HOT

    async def play_round(self, side: Side) -> None:
        """Run one side's Ready cycle and, unless the match is over, its action cycle.

        Raises:
            ConnectionFailure: On timeout or a closed peer.
            ProtocolViolation: On a bad ready token or an undecodable action.
        """
        board = self._board
        connection = self._connections[side]

        await connection.send(READY_PROMPT + SERVER_EOL)
        token = await connection.receive()
        if token != READY_ACK:
            raise ProtocolViolation(f"expected {READY_ACK!r}, got {token!r}")

        response = surroundings_response(board, side)
        await connection.send(encode_response(response))
        if response.game_over:
            return

        line = await connection.receive()
        try:
            action = decode_action(line)
        except ActionDecodeError as e:
            raise ProtocolViolation(f"failed to parse action: {e}") from e

        response = process_action(board, side, action)
        await connection.send(encode_response(response))
        if response.game_over:
            return

        ack = await connection.receive()
        if ack != ACTION_ACK:
            logger.warning(
                "Expected %r acknowledgment from %s, got %r", ACTION_ACK, side.value, ack
            )

    def _forfeit(self, side: Side, error: Exception) -> None:
        logger.warning("%s turn error: %s", side.value, error)
        self._board.character(side).alive = False
        self._board.game_over = True

    async def play(self) -> None:
        """Alternate rounds until the board is over or the turn limit is hit."""
        board = self._board
        self._phase = MatchPhase.PLAYING
        logger.info("Both players connected. Starting game (max_turns=%d)", board.max_turns)

        while not board.game_over and board.turn < board.max_turns:
            first, second = self._turn_order()
            if not await self._take_round(first):
                return
            if board.game_over:
                return
            if not await self._take_round(second):
                return

            # The second mover may have ended the game; the turn still completed
            increment_turn(board)
            self._record("action", board)

    async def _take_round(self, side: Side) -> bool:
        """Play ``side``'s round. Returns False if the side forfeited."""
        try:
            await self.play_round(side)
        except (ConnectionFailure, ProtocolViolation) as e:
            self._forfeit(side, e)
            return False
        return True

    # --- Teardown ---

    def _record(self, method: str, *args) -> None:
        try:
            getattr(self._recorder, method)(*args)
        except Exception as e:
            logger.warning("Failed to write %s to recorder: %s", method, e)

    async def _close_connections(self) -> None:
        for connection in self._connections.values():
            await connection.close()

    async def finish(self) -> MatchSummary:
        """Compute the result, notify both players and close everything."""
        board = self._board
        result = get_result(board)
        logger.info("Game over at turn %d", board.turn)

        if result.winner is None:
            winner_name = loser_name = None
            logger.info("Result: Draw - %s", result.reason)
        else:
            winner_name = board.character(result.winner).name
            loser_name = board.character(result.loser).name
            logger.info("Result: %s wins! - %s", winner_name, result.reason)
        logger.info("Hot: %d items, Cool: %d items", board.hot.items, board.cool.items)

        self._record("result", winner_name, loser_name, result.reason)

        for side, connection in self._connections.items():
            if not connection.is_open:
                continue
            try:
                await connection.send(GAME_OVER + SERVER_EOL)
            except ConnectionFailure as e:
                logger.debug("Could not send game over to %s: %s", side.value, e)

        await self._close_connections()
        self._record("close")
        self._phase = MatchPhase.ENDED

        return MatchSummary(
            winner=result.winner,
            winner_name=winner_name,
            reason=result.reason,
            turns=board.turn,
            hot_items=board.hot.items,
            cool_items=board.cool.items,
        )

    async def run(self) -> MatchSummary:
        """Accept both players, play the match and tear down."""
        logger.info("Starting CHaser server (max_turns=%d)", self._board.max_turns)
        if not await self.accept_players():
            self._record("close")
            self._phase = MatchPhase.ENDED
            return MatchSummary(
                winner=None,
                winner_name=None,
                reason="connection failure",
                turns=self._board.turn,
                hot_items=self._board.hot.items,
                cool_items=self._board.cool.items,
                completed=False,
            )

        self._record("set_names", self._board.hot.name, self._board.cool.name)
        await self.play()
        return await self.finish()
