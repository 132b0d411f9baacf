import asyncio
import logging

logger = logging.getLogger(__name__)

DEFAULT_RECEIVE_TIMEOUT = 10.0


class ConnectionFailure(ConnectionError):
    """A line could not be sent or received. Always fatal for the match side."""


class ReceiveTimeout(ConnectionFailure):
    """No complete line arrived before the idle deadline."""


class PeerClosed(ConnectionFailure):
    """The remote end closed the stream."""


class Connection:
    """Line-oriented duplex channel over an asyncio stream pair.

    ``send`` writes text verbatim (the caller supplies the terminator).
    ``receive`` returns the next line with surrounding whitespace stripped, or
    raises once the idle deadline passes. ``close`` may be called any number
    of times.
    """

    def __init__(
        self,
        reader: asyncio.StreamReader | None,
        writer: asyncio.StreamWriter | None,
        label: str = "peer",
        timeout: float | None = DEFAULT_RECEIVE_TIMEOUT,
        encoding: str = "utf-8",
    ):
        self._reader = reader
        self._writer = writer
        self.label = label
        self.timeout = timeout
        self.encoding = encoding

    @classmethod
    async def open(
        cls,
        host: str,
        port: int,
        label: str = "server",
        timeout: float | None = None,
        encoding: str = "utf-8",
    ) -> "Connection":
        """Dial ``host:port`` and wrap the resulting stream."""
        try:
            reader, writer = await asyncio.open_connection(host, port)
        except OSError as e:
            raise ConnectionFailure(f"failed to connect to {host}:{port}: {e}") from e
        return cls(reader, writer, label=label, timeout=timeout, encoding=encoding)

    @property
    def is_open(self) -> bool:
        return self._writer is not None

    @property
    def peer(self) -> str:
        if self._writer is None:
            return "closed"
        peername = self._writer.get_extra_info("peername")
        if not peername:
            return "unknown"
        return f"{peername[0]}:{peername[1]}"

    async def send(self, message: str) -> None:
        await self.send_bytes(message.encode(self.encoding))

    async def send_bytes(self, data: bytes) -> None:
        if self._writer is None:
            raise ConnectionFailure(f"{self.label}: connection is closed")
        logger.debug("%s <- %r", self.label, data)
        try:
            self._writer.write(data)
            await self._writer.drain()
        except (OSError, RuntimeError) as e:
            raise ConnectionFailure(f"{self.label}: failed to send message: {e}") from e

    async def receive(self, encoding: str | None = None) -> str:
        """Read the next line, stripped of whitespace and terminators.

        Args:
            encoding: Overrides the connection's text encoding for this line.

        Raises:
            ReceiveTimeout: If no full line arrives within ``timeout`` seconds.
            PeerClosed: If the stream ends before a terminator.
            ConnectionFailure: On any other read error.
        """
        if self._reader is None:
            raise ConnectionFailure(f"{self.label}: connection is closed")
        try:
            data = await asyncio.wait_for(self._reader.readline(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise ReceiveTimeout(
                f"{self.label}: no message within {self.timeout:.1f}s"
            ) from e
        except (OSError, ValueError) as e:
            raise ConnectionFailure(f"{self.label}: failed to receive message: {e}") from e

        if not data.endswith(b"\n"):
            raise PeerClosed(f"{self.label}: connection closed by peer")

        logger.debug("%s -> %r", self.label, data)
        return data.decode(encoding or self.encoding, errors="replace").strip()

    async def close(self) -> None:
        writer, self._writer, self._reader = self._writer, None, None
        if writer is None:
            return
        try:
            writer.close()
            await writer.wait_closed()
        except (OSError, RuntimeError) as e:
            logger.debug("Error closing connection %s: %s", self.label, e)
        logger.debug("Connection %s closed", self.label)
