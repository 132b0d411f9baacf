"""Map file loader.

Each line is a one-character tag, a space, and a payload:

    N <name>             ignored
    T <max-turns>
    S <height>,<width>
    D <row>,<col>,<cell> repeated; 0 empty, 2 wall, 3 item
    H <row>,<col>        Hot start
    C <row>,<col>        Cool start
"""

import logging
from pathlib import Path

from pydantic import ValidationError

from chaser.schemas.game import Board, Cell, Character, Position

logger = logging.getLogger(__name__)


class MapFormatError(ValueError):
    """The map text cannot be turned into a Board."""


def _ints(data: str, count: int, what: str, exact: bool = True) -> list[int]:
    parts = data.split(",")
    if len(parts) < count or (exact and len(parts) != count):
        raise MapFormatError(f"invalid {what} format: {data!r}")
    try:
        return [int(p.strip()) for p in parts[:count]]
    except ValueError as e:
        raise MapFormatError(f"invalid {what}: {data!r}") from e


def parse_map(text: str) -> Board:
    """Build a Board from map file text.

    Raises:
        MapFormatError: On malformed lines, a missing size or turn count,
            cell data before the size line, or an unknown cell code.
    """
    max_turns: int | None = None
    height = width = 0
    grid: list[list[Cell]] | None = None
    hot = Position(row=0, col=0)
    cool = Position(row=0, col=0)

    for line_no, line in enumerate(text.splitlines(), start=1):
        if len(line) < 2:
            continue
        prefix = line[:2]
        data = line[2:].strip()

        if prefix == "N ":
            continue
        elif prefix == "T ":
            (max_turns,) = _ints(data, 1, "turn count")
        elif prefix == "S ":
            height, width = _ints(data, 2, "size")
            if height <= 0 or width <= 0:
                raise MapFormatError(f"line {line_no}: size must be positive: {data!r}")
            grid = [[Cell.EMPTY] * width for _ in range(height)]
        elif prefix == "D ":
            if grid is None:
                raise MapFormatError(f"line {line_no}: map data before size line")
            row, col, value = _ints(data, 3, "map data", exact=False)
            try:
                cell = Cell(value)
            except ValueError as e:
                raise MapFormatError(f"line {line_no}: invalid cell value {value}") from e
            if 0 <= row < height and 0 <= col < width:
                grid[row][col] = cell
            else:
                logger.debug("Ignoring out-of-range cell at line %d: %s", line_no, data)
        elif prefix == "H ":
            row, col = _ints(data, 2, "hot position")
            hot = Position(row=row, col=col)
        elif prefix == "C ":
            row, col = _ints(data, 2, "cool position")
            cool = Position(row=row, col=col)

    if grid is None:
        raise MapFormatError("map has no size line")
    if max_turns is None:
        raise MapFormatError("map has no turn count")

    try:
        board = Board(
            grid=grid,
            width=width,
            height=height,
            max_turns=max_turns,
            hot=Character(position=hot),
            cool=Character(position=cool),
        )
    except ValidationError as e:
        raise MapFormatError(str(e)) from e

    logger.info(
        "Map loaded: %dx%d, max_turns=%d, hot=(%d,%d), cool=(%d,%d)",
        height,
        width,
        max_turns,
        hot.row,
        hot.col,
        cool.row,
        cool.col,
    )
    return board


def load_board(path: str | Path) -> Board:
    """Read and parse a map file."""
    try:
        text = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise MapFormatError(f"failed to open map file {path}: {e}") from e
    return parse_map(text)


def read_map_lines(path: str | Path) -> list[str]:
    """Payload of every map line with its two-character tag removed."""
    text = Path(path).read_text(encoding="utf-8")
    return [line[2:] for line in text.splitlines() if len(line) >= 2]
