"""Tests for the command line entry points."""

import asyncio
import sys

import pytest

from chaser.main import _build_recorder, main, run_bot, serve
from chaser.schemas.game import Side
from chaser.services.game import DumpRecorder, MapFormatError, NullRecorder
from chaser.services.match import MatchServer

from .conftest import make_board, make_settings

MAP_TEXT = "N tiny\nT 4\nS 2,3\nD 0,1,3\nH 1,0\nC 1,2\n"


class TestRunBot:
    def test_bots_finish_a_match(self):
        board = make_board(["...", "..."], hot=(1, 0), cool=(1, 2), max_turns=4)
        server = MatchServer(board, make_settings())

        async def scenario():
            await server.listen()
            ports = server.ports
            match = asyncio.create_task(server.run())
            await asyncio.gather(
                run_bot("127.0.0.1", ports[Side.HOT], "one"),
                run_bot("127.0.0.1", ports[Side.COOL], "two"),
            )
            return await match

        summary = asyncio.run(scenario())

        assert summary.completed
        assert summary.turns == 4
        assert summary.reason == "draw"


class TestServe:
    def test_bad_map_raises_before_binding(self, tmp_path):
        path = tmp_path / "broken.txt"
        path.write_text("S 2,2\n", encoding="utf-8")

        with pytest.raises(MapFormatError):
            asyncio.run(serve(path, make_settings()))

    def test_recorder_selection(self, tmp_path):
        path = tmp_path / "map.txt"
        path.write_text(MAP_TEXT, encoding="utf-8")

        assert isinstance(_build_recorder(make_settings(), path), NullRecorder)

        dump_path = tmp_path / "out.dump"
        recorder = _build_recorder(
            make_settings(DUMP_ENABLED=True, DUMP_PATH=str(dump_path)), path
        )
        assert isinstance(recorder, DumpRecorder)
        recorder.set_names("a", "b")
        recorder.close()
        assert dump_path.read_text(encoding="utf-8").splitlines() == [
            "a,b",
            "tiny",
            "4",
            "2,3",
            "0,1,3",
            "1,0",
            "1,2",
            "0,0",
        ]


class TestMain:
    def test_missing_map_exits(self, tmp_path, monkeypatch):
        monkeypatch.setattr(
            sys, "argv", ["chaser", "serve", str(tmp_path / "nope.txt"), "--no-dump"]
        )
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1

    def test_requires_subcommand(self, monkeypatch):
        monkeypatch.setattr(sys, "argv", ["chaser"])
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 2

    def test_out_of_range_port_rejected(self, tmp_path, monkeypatch):
        path = tmp_path / "map.txt"
        path.write_text(MAP_TEXT, encoding="utf-8")
        monkeypatch.setattr(
            sys, "argv", ["chaser", "serve", str(path), "--no-dump", "-f", "70000"]
        )
        with pytest.raises(SystemExit) as exc_info:
            main()
        assert exc_info.value.code == 1
