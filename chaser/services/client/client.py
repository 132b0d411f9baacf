"""Player-side codec: connects to one server port and issues actions."""

import logging

from chaser.schemas.game import Direction, SensorResponse
from chaser.services.game.engine import (
    ACTION_ACK,
    GAME_OVER,
    READY_ACK,
    GameAction,
    LookAction,
    PutAction,
    SearchAction,
    WalkAction,
    decode_response,
    encode_action,
)
from chaser.services.game.engine.codec import (
    CLIENT_EOL,
    LEGACY_NAME_ENCODING,
    LEGACY_NAME_PORTS,
)
from chaser.services.match.connection import Connection, PeerClosed

logger = logging.getLogger(__name__)


class NotConnectedError(RuntimeError):
    """An action was issued before ``connect()``."""


class AlreadyConnectedError(RuntimeError):
    """``connect()`` was called twice."""


def encode_name(name: str, port: int) -> bytes:
    """Name line payload; the legacy ports expect CP932, everything else UTF-8."""
    if port in LEGACY_NAME_PORTS:
        return name.encode(LEGACY_NAME_ENCODING)
    return name.encode("utf-8")


class ChaserClient:
    """Async client for one player.

    Usage:
        async with ChaserClient("127.0.0.1", 2009, "bot") as client:
            while True:
                resp = await client.ready()
                if resp.game_over:
                    break
                resp = await client.search(Direction.UP)
                if resp.game_over:
                    break
    """

    def __init__(self, host: str, port: int, name: str, timeout: float | None = None):
        self.host = host
        self.port = port
        self.name = name
        self.timeout = timeout
        self._connection: Connection | None = None

    @property
    def connected(self) -> bool:
        return self._connection is not None

    async def connect(self) -> None:
        if self._connection is not None:
            raise AlreadyConnectedError("already connected to server")

        name_bytes = encode_name(self.name, self.port)
        connection = await Connection.open(
            self.host, self.port, label=f"server:{self.port}", timeout=self.timeout
        )
        try:
            await connection.send_bytes(name_bytes + b"\n")
        except Exception:
            await connection.close()
            raise
        self._connection = connection
        logger.info("Connected to %s:%d as %s", self.host, self.port, self.name)

    async def disconnect(self) -> None:
        if self._connection is None:
            return
        connection, self._connection = self._connection, None
        await connection.close()

    async def __aenter__(self) -> "ChaserClient":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()

    def _require_connection(self) -> Connection:
        if self._connection is None:
            raise NotConnectedError("not connected to server")
        return self._connection

    async def _read_response(self, connection: Connection) -> SensorResponse:
        try:
            line = await connection.receive()
        except PeerClosed:
            logger.debug("Server closed the connection, treating as game over")
            return SensorResponse.over()
        if line == GAME_OVER:
            return SensorResponse.over()
        return decode_response(line)

    async def ready(self) -> SensorResponse:
        """Wait for the server's prompt, answer it and return the surroundings."""
        connection = self._require_connection()

        try:
            prompt = await connection.receive()
        except PeerClosed:
            return SensorResponse.over()
        if prompt == GAME_OVER:
            return SensorResponse.over()

        await connection.send(READY_ACK + CLIENT_EOL)
        return await self._read_response(connection)

    async def send_action(self, action: GameAction) -> SensorResponse:
        """Send one action, read its response and acknowledge it."""
        connection = self._require_connection()

        await connection.send(encode_action(action))
        response = await self._read_response(connection)
        if response.game_over:
            return response

        await connection.send(ACTION_ACK + CLIENT_EOL)
        return response

    async def walk(self, direction: Direction) -> SensorResponse:
        return await self.send_action(WalkAction(direction=direction))

    async def look(self, direction: Direction) -> SensorResponse:
        return await self.send_action(LookAction(direction=direction))

    async def search(self, direction: Direction) -> SensorResponse:
        return await self.send_action(SearchAction(direction=direction))

    async def put(self, direction: Direction) -> SensorResponse:
        return await self.send_action(PutAction(direction=direction))
