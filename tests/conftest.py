"""Shared fixtures for board, engine and match tests."""

import pytest

from chaser.config import Settings
from chaser.schemas.game import Board, Cell, Character, Position

# Map legend for make_board()
_CELL_CHARS = {
    ".": Cell.EMPTY,
    "#": Cell.WALL,
    "*": Cell.ITEM,
}


def make_board(
    rows: list[str],
    hot: tuple[int, int],
    cool: tuple[int, int],
    max_turns: int = 120,
    turn: int = 0,
) -> Board:
    """Build a board from a picture, e.g. ["...", ".#.", "..."]."""
    grid = [[_CELL_CHARS[ch] for ch in row] for row in rows]
    return Board(
        grid=grid,
        width=len(rows[0]),
        height=len(rows),
        max_turns=max_turns,
        turn=turn,
        hot=Character(name="Hot", position=Position(row=hot[0], col=hot[1])),
        cool=Character(name="Cool", position=Position(row=cool[0], col=cool[1])),
    )


def pos(row: int, col: int) -> Position:
    return Position(row=row, col=col)


def make_settings(**overrides) -> Settings:
    """Loopback settings on ephemeral ports with short deadlines."""
    values = {
        "HOST": "127.0.0.1",
        "HOT_PORT": 0,
        "COOL_PORT": 0,
        "ACCEPT_TIMEOUT": 5.0,
        "RECEIVE_TIMEOUT": 2.0,
        "DUMP_ENABLED": False,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture
def open_board() -> Board:
    """5x5 board with no walls, Hot top-left and Cool bottom-right."""
    return make_board(
        [
            ".....",
            ".....",
            ".....",
            ".....",
            ".....",
        ],
        hot=(0, 0),
        cool=(4, 4),
    )


@pytest.fixture
def center_wall_board() -> Board:
    """3x3 board with a single wall in the middle."""
    return make_board(
        [
            "...",
            ".#.",
            "...",
        ],
        hot=(0, 1),
        cool=(2, 1),
    )


@pytest.fixture
def item_board() -> Board:
    """5x5 board with an item directly above Hot."""
    return make_board(
        [
            ".....",
            ".....",
            ".*...",
            ".....",
            ".....",
        ],
        hot=(3, 1),
        cool=(2, 2),
    )
