"""Board physics: movement, sensing primitives, wall placement and scoring.

Every function takes the Board by reference and mutates it in place where the
rule calls for it. Nothing here touches the network.
"""

import logging
from dataclasses import dataclass
from enum import Enum

from chaser.schemas.game import Board, Cell, Direction, Position, Side

logger = logging.getLogger(__name__)

SEARCH_RANGE = 9
LOOK_DISTANCE = 2


class WalkOutcome(str, Enum):
    MOVED = "moved"
    COLLECTED = "collected"
    CRASHED = "crashed"
    ENCLOSED = "enclosed"

    @property
    def lethal(self) -> bool:
        return self in (WalkOutcome.CRASHED, WalkOutcome.ENCLOSED)


@dataclass(frozen=True)
class MatchResult:
    """Outcome of a finished match. ``winner`` is None on a draw."""

    winner: Side | None
    reason: str

    @property
    def loser(self) -> Side | None:
        return self.winner.opponent if self.winner is not None else None

    @property
    def is_draw(self) -> bool:
        return self.winner is None


def get_cell(board: Board, pos: Position) -> Cell:
    if not board.in_bounds(pos):
        return Cell.WALL
    return board.grid[pos.row][pos.col]


def set_cell(board: Board, pos: Position, cell: Cell) -> None:
    if board.in_bounds(pos):
        board.grid[pos.row][pos.col] = cell


def move(pos: Position, direction: Direction, steps: int = 1) -> Position:
    """Position ``steps`` cells away. Bounds are not checked."""
    d_row, d_col = direction.delta
    return pos.offset(d_row * steps, d_col * steps)


def is_enclosed(board: Board, pos: Position) -> bool:
    return all(get_cell(board, move(pos, d)) == Cell.WALL for d in Direction)


def walk(board: Board, side: Side, direction: Direction) -> WalkOutcome:
    """Move ``side`` one cell.

    Walking into a wall (or off the board) kills the character. Walking onto
    an item collects it. Ending the step with walls on all four sides also
    kills the character. Any death ends the match.
    """
    character = board.character(side)
    target = move(character.position, direction)
    cell = get_cell(board, target)

    if cell == Cell.WALL:
        character.alive = False
        board.game_over = True
        logger.info(
            "%s walked into a wall at (%d,%d)", side.value, target.row, target.col
        )
        return WalkOutcome.CRASHED

    outcome = WalkOutcome.MOVED
    if cell == Cell.ITEM:
        character.items += 1
        set_cell(board, target, Cell.EMPTY)
        outcome = WalkOutcome.COLLECTED
        logger.debug("%s collected an item, total=%d", side.value, character.items)

    character.position = target

    if is_enclosed(board, target):
        character.alive = False
        board.game_over = True
        logger.info(
            "%s is enclosed by walls at (%d,%d)", side.value, target.row, target.col
        )
        return WalkOutcome.ENCLOSED

    return outcome


def look(board: Board, pos: Position, direction: Direction) -> Cell:
    return get_cell(board, move(pos, direction, LOOK_DISTANCE))


def search(board: Board, pos: Position, direction: Direction) -> list[Cell]:
    return [
        get_cell(board, move(pos, direction, step))
        for step in range(1, SEARCH_RANGE + 1)
    ]


def put(board: Board, pos: Position, direction: Direction) -> bool:
    """Place a wall on the adjacent cell if it is empty.

    Returns True if a wall was placed. Items, walls, out-of-bounds targets and
    cells a character stands on are left untouched.
    """
    target = move(pos, direction)
    if get_cell(board, target) != Cell.EMPTY:
        return False
    if target in (board.hot.position, board.cool.position):
        return False
    set_cell(board, target, Cell.WALL)
    return True


def increment_turn(board: Board) -> None:
    board.turn += 1
    if board.turn >= board.max_turns:
        board.game_over = True
        logger.debug("Turn limit reached: %d/%d", board.turn, board.max_turns)


def decide_result(
    hot_alive: bool, cool_alive: bool, hot_items: int, cool_items: int
) -> MatchResult:
    """Pick the winner from the two characters' final state."""
    if not hot_alive and not cool_alive:
        if hot_items > cool_items:
            return MatchResult(Side.HOT, "both died, hot has more items")
        if cool_items > hot_items:
            return MatchResult(Side.COOL, "both died, cool has more items")
        return MatchResult(None, "draw - both died with same items")

    if not hot_alive:
        return MatchResult(Side.COOL, "hot died")
    if not cool_alive:
        return MatchResult(Side.HOT, "cool died")

    if hot_items > cool_items:
        return MatchResult(Side.HOT, "hot has more items")
    if cool_items > hot_items:
        return MatchResult(Side.COOL, "cool has more items")
    return MatchResult(None, "draw")


def get_result(board: Board) -> MatchResult:
    return decide_result(
        board.hot.alive, board.cool.alive, board.hot.items, board.cool.items
    )
