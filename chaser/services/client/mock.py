"""Scripted single-player server for exercising clients without a real match."""

import asyncio
import logging

from chaser.services.game.engine import GAME_OVER, READY_PROMPT
from chaser.services.game.engine.codec import SERVER_EOL
from chaser.services.match.connection import Connection, ConnectionFailure

logger = logging.getLogger(__name__)


class MockServer:
    """Plays the server side of the protocol for one client.

    Each Ready prompt and each action is answered with the next scripted
    response line. Once the script runs out the client is sent ``#``. A
    response starting with ``0`` ends the match like a real game-over.
    Every line the client sends (name first) is kept in ``received``.
    """

    def __init__(
        self,
        responses: list[str] | None = None,
        host: str = "127.0.0.1",
        port: int = 0,
        timeout: float = 5.0,
    ):
        self.host = host
        self.timeout = timeout
        self.received: list[str] = []
        self._responses = list(responses or [])
        self._port = port
        self._server: asyncio.Server | None = None
        self._connection: Connection | None = None
        self._finished = asyncio.Event()

    @property
    def port(self) -> int:
        return self._port

    @property
    def running(self) -> bool:
        return self._server is not None

    def set_responses(self, responses: list[str]) -> None:
        self._responses = list(responses)

    async def start(self) -> None:
        if self._server is not None:
            raise RuntimeError("mock server already running")
        self._server = await asyncio.start_server(self._handle, self.host, self._port)
        self._port = self._server.sockets[0].getsockname()[1]
        logger.debug("Mock server listening on %s:%d", self.host, self._port)

    async def stop(self) -> None:
        server, self._server = self._server, None
        if server is None:
            return
        server.close()
        if self._connection is not None:
            await self._connection.close()

    async def wait_finished(self) -> None:
        """Block until the client session has ended."""
        await self._finished.wait()

    async def __aenter__(self) -> "MockServer":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def _respond(self, connection: Connection) -> bool:
        """Send the next scripted line. Returns False once the match is over."""
        if not self._responses:
            await connection.send(GAME_OVER + SERVER_EOL)
            return False
        response = self._responses.pop(0)
        await connection.send(response + SERVER_EOL)
        return not response.startswith("0")

    async def _handle(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        if self._connection is not None:
            writer.close()
            return

        connection = Connection(reader, writer, label="mock-client", timeout=self.timeout)
        self._connection = connection
        try:
            self.received.append(await connection.receive())
            while True:
                await connection.send(READY_PROMPT + SERVER_EOL)
                self.received.append(await connection.receive())
                if not await self._respond(connection):
                    break
                self.received.append(await connection.receive())
                if not await self._respond(connection):
                    break
                self.received.append(await connection.receive())
        except ConnectionFailure as e:
            logger.debug("Mock session ended: %s", e)
        finally:
            await connection.close()
            self._finished.set()
