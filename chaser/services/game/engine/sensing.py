"""Sensor response construction.

All responses go through ``sense``, which reads terrain and masks any cell the
opponent stands on as ENEMY. Each response kind only differs in which cells it
samples and which slots they land in.
"""

from chaser.schemas.game import Board, Direction, Position, Reading, SensorResponse, Side

from .rules import LOOK_DISTANCE, SEARCH_RANGE, get_cell, move

# Slot 2 carries the Look reading
LOOK_SLOT = 2

# 3x3 neighbourhood in row-major order, slots 1..9. Slot 5 is the sensing
# character's own cell and always reads 0.
CENTER_SLOT = 5
_NEIGHBOURHOOD = [
    (slot, d_row, d_col)
    for slot, (d_row, d_col) in enumerate(
        ((r, c) for r in (-1, 0, 1) for c in (-1, 0, 1)), start=1
    )
    if slot != CENTER_SLOT
]


def sense(board: Board, side: Side, cells: dict[int, Position]) -> SensorResponse:
    """Build a response for ``side`` from a slot -> position map."""
    enemy_pos = board.opponent(side).position
    readings = {
        slot: Reading.ENEMY if pos == enemy_pos else Reading.from_cell(get_cell(board, pos))
        for slot, pos in cells.items()
    }
    return SensorResponse.build(board.game_over, readings)


def surroundings_response(board: Board, side: Side) -> SensorResponse:
    """3x3 neighbourhood reply used for Ready, Walk and Put."""
    center = board.character(side).position
    cells = {slot: center.offset(d_row, d_col) for slot, d_row, d_col in _NEIGHBOURHOOD}
    return sense(board, side, cells)


def look_response(board: Board, side: Side, direction: Direction) -> SensorResponse:
    origin = board.character(side).position
    return sense(board, side, {LOOK_SLOT: move(origin, direction, LOOK_DISTANCE)})


def search_response(board: Board, side: Side, direction: Direction) -> SensorResponse:
    origin = board.character(side).position
    cells = {step: move(origin, direction, step) for step in range(1, SEARCH_RANGE + 1)}
    return sense(board, side, cells)
