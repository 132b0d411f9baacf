"""Tests for the player-side client against a scripted server."""

import asyncio

import pytest

from chaser.schemas.game import Direction, Reading
from chaser.services.client import (
    AlreadyConnectedError,
    ChaserClient,
    NotConnectedError,
    encode_name,
)


async def _with_server(script, body):
    """Run ``script(reader, writer, seen)`` as the server and ``body(port)`` as the player.

    Returns (body result, list of lines the server read).
    """
    seen: list[bytes] = []

    async def handler(reader, writer):
        seen.append(await reader.readline())  # name
        await script(reader, writer, seen)
        writer.close()

    server = await asyncio.start_server(handler, "127.0.0.1", 0)
    port = server.sockets[0].getsockname()[1]
    try:
        result = await body(port)
    finally:
        server.close()
    return result, seen


async def _send(writer, text: str):
    writer.write(text.encode())
    await writer.drain()


class TestRound:
    """Test a complete ready and action cycle."""

    def test_ready_then_walk(self):
        async def script(reader, writer, seen):
            await _send(writer, "Ready\n")
            seen.append(await reader.readline())
            await _send(writer, "1000300000\n")
            seen.append(await reader.readline())
            await _send(writer, "1020000000\n")
            seen.append(await reader.readline())

        async def body(port):
            async with ChaserClient("127.0.0.1", port, "walker", timeout=2.0) as client:
                first = await client.ready()
                second = await client.walk(Direction.LEFT)
                return first, second

        (first, second), seen = asyncio.run(_with_server(script, body))

        assert seen == [b"walker\n", b"gr\r\n", b"wk 2\r\n", b"#\r\n"]
        assert not first.game_over
        assert first.readings[3] == Reading.ITEM
        assert second.readings[1] == Reading.WALL

    def test_each_action_mnemonic(self):
        async def script(reader, writer, seen):
            for _ in range(3):
                seen.append(await reader.readline())
                await _send(writer, "1000000000\n")
                seen.append(await reader.readline())

        async def body(port):
            async with ChaserClient("127.0.0.1", port, "p", timeout=2.0) as client:
                await client.look(Direction.UP)
                await client.search(Direction.DOWN)
                await client.put(Direction.RIGHT)

        _, seen = asyncio.run(_with_server(script, body))

        assert seen[1::2] == [b"lk 0\r\n", b"sc 1\r\n", b"pt 3\r\n"]


class TestGameOver:
    """Test the ways a server signals the end of the match."""

    def test_game_over_response_is_not_acknowledged(self):
        async def script(reader, writer, seen):
            seen.append(await reader.readline())
            await _send(writer, "0000000000\n")
            seen.append(await reader.read())

        async def body(port):
            client = ChaserClient("127.0.0.1", port, "p", timeout=2.0)
            await client.connect()
            response = await client.walk(Direction.DOWN)
            await client.disconnect()
            return response

        response, seen = asyncio.run(_with_server(script, body))

        assert response.game_over
        assert seen == [b"p\n", b"wk 1\r\n", b""]

    def test_hash_instead_of_prompt(self):
        async def script(reader, writer, seen):
            await _send(writer, "#\n")
            seen.append(await reader.read())

        async def body(port):
            async with ChaserClient("127.0.0.1", port, "p", timeout=2.0) as client:
                return await client.ready()

        response, seen = asyncio.run(_with_server(script, body))

        assert response.game_over
        assert response.values == (0,) * 10
        assert seen[-1] == b""

    def test_closed_connection_is_game_over(self):
        async def script(reader, writer, seen):
            pass

        async def body(port):
            async with ChaserClient("127.0.0.1", port, "p", timeout=2.0) as client:
                return await client.ready()

        response, _ = asyncio.run(_with_server(script, body))

        assert response.game_over


class TestConnectionState:
    def test_action_before_connect(self):
        client = ChaserClient("127.0.0.1", 1, "p")
        with pytest.raises(NotConnectedError):
            asyncio.run(client.ready())
        with pytest.raises(NotConnectedError):
            asyncio.run(client.walk(Direction.UP))

    def test_connect_twice(self):
        async def script(reader, writer, seen):
            await reader.read()

        async def body(port):
            async with ChaserClient("127.0.0.1", port, "p", timeout=2.0) as client:
                with pytest.raises(AlreadyConnectedError):
                    await client.connect()
                return client.connected

        connected, _ = asyncio.run(_with_server(script, body))
        assert connected

    def test_disconnect_without_connect(self):
        asyncio.run(ChaserClient("127.0.0.1", 1, "p").disconnect())


class TestEncodeName:
    def test_legacy_ports_use_cp932(self):
        assert encode_name("テスト", 40000) == "テスト".encode("cp932")
        assert encode_name("テスト", 50000) == "テスト".encode("cp932")

    def test_other_ports_use_utf8(self):
        assert encode_name("テスト", 2009) == "テスト".encode("utf-8")
