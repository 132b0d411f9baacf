"""Replay recording.

The match calls a Recorder once with the player names, once per completed
turn with the board, and once with the result. Recorders may raise; the match
logs and carries on.
"""

import logging
from pathlib import Path
from typing import IO, Protocol

from chaser.schemas.game import Board

logger = logging.getLogger(__name__)


class Recorder(Protocol):
    def set_names(self, hot_name: str, cool_name: str) -> None: ...

    def action(self, board: Board) -> None: ...

    def result(self, winner: str | None, loser: str | None, reason: str) -> None: ...

    def close(self) -> None: ...


class NullRecorder:
    """Recorder used when dumping is disabled."""

    def set_names(self, hot_name: str, cool_name: str) -> None:
        pass

    def action(self, board: Board) -> None:
        pass

    def result(self, winner: str | None, loser: str | None, reason: str) -> None:
        pass

    def close(self) -> None:
        pass


class DumpRecorder:
    """Writes the text dump consumed by replay viewers.

    Layout:
        hot,cool                 names
        <map payload lines>      the map file minus its tags
        0,0                      initial scores
        then per turn: grid rows, hot row,col, cool row,col, hotItems,coolItems
        gameend
        <winner>,win,<reason>  or  draw,draw,<reason>
    """

    def __init__(self, path: str | Path, map_lines: list[str]):
        self._path = Path(path)
        self._map_lines = map_lines
        self._file: IO[str] | None = self._path.open("w", encoding="utf-8")
        logger.info("Dump file opened: %s", self._path)

    @property
    def path(self) -> Path:
        return self._path

    def _write(self, lines: list[str]) -> None:
        if self._file is None:
            raise ValueError(f"dump file {self._path} is closed")
        self._file.write("".join(line + "\n" for line in lines))
        self._file.flush()

    def set_names(self, hot_name: str, cool_name: str) -> None:
        self._write([f"{hot_name},{cool_name}", *self._map_lines, "0,0"])

    def action(self, board: Board) -> None:
        lines = [",".join(str(int(cell)) for cell in row) for row in board.grid]
        lines.append(f"{board.hot.position.row},{board.hot.position.col}")
        lines.append(f"{board.cool.position.row},{board.cool.position.col}")
        lines.append(f"{board.hot.items},{board.cool.items}")
        self._write(lines)

    def result(self, winner: str | None, loser: str | None, reason: str) -> None:
        if winner is None:
            outcome = f"draw,draw,{reason}"
        else:
            outcome = f"{winner},win,{reason}"
        self._write(["gameend", outcome])

    def close(self) -> None:
        if self._file is None:
            return
        self._file.close()
        self._file = None
        logger.debug("Dump file closed: %s", self._path)
