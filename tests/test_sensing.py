"""Tests for sensor responses and action processing."""

from chaser.schemas.game import Board, Cell, Direction, Reading, Side
from chaser.services.game.engine import (
    LookAction,
    PutAction,
    SearchAction,
    WalkAction,
    look_response,
    process_action,
    search_response,
    surroundings_response,
)

from .conftest import make_board, pos


class TestSurroundings:
    """Test the 3x3 neighbourhood response."""

    def test_row_major_with_walls_off_board(self, open_board: Board):
        """Hot in the corner sees off-board walls above and to the left."""
        response = surroundings_response(open_board, Side.HOT)

        assert response.values[0] == 1
        # slots: TL T TR / L C R / BL B BR
        assert response.readings == [
            Reading.WALL, Reading.WALL, Reading.WALL,
            Reading.WALL, Reading.EMPTY, Reading.EMPTY,
            Reading.WALL, Reading.EMPTY, Reading.EMPTY,
        ]

    def test_enemy_masks_terrain(self):
        """An opponent on an item cell reads as enemy, not item."""
        board = make_board(
            [
                "...",
                "..*",
                "...",
            ],
            hot=(1, 1),
            cool=(1, 2),
        )
        response = surroundings_response(board, Side.HOT)

        assert response.readings[5] == Reading.ENEMY

    def test_center_slot_is_zero(self, item_board: Board):
        item_board.cool.position = item_board.hot.position
        response = surroundings_response(item_board, Side.HOT)
        assert response.values[5] == 0

    def test_game_over_clears_flag(self, open_board: Board):
        open_board.game_over = True
        assert surroundings_response(open_board, Side.HOT).game_over


class TestLook:
    """Test the look response."""

    def test_only_slot_two_is_filled(self, center_wall_board: Board):
        """Look reports the cell two steps ahead in slot 2."""
        # Hot at (0,1) looking down two steps lands on Cool at (2,1)
        response = look_response(center_wall_board, Side.HOT, Direction.DOWN)

        assert response.values == (1, 0, 1, 0, 0, 0, 0, 0, 0, 0)

    def test_look_reports_terrain(self, center_wall_board: Board):
        response = look_response(center_wall_board, Side.HOT, Direction.UP)
        assert response.values[2] == int(Cell.WALL)


class TestSearch:
    """Test the search response."""

    def test_each_step_masked_independently(self, item_board: Board):
        """Only the exact cell the opponent stands on reads as enemy."""
        item_board.cool.position = pos(1, 1)
        response = search_response(item_board, Side.HOT, Direction.UP)

        assert response.readings == [
            Reading.ITEM,
            Reading.ENEMY,
            Reading.EMPTY,
            Reading.WALL,
            Reading.WALL,
            Reading.WALL,
            Reading.WALL,
            Reading.WALL,
            Reading.WALL,
        ]


class TestProcessAction:
    """Test applying decoded actions."""

    def test_walk_reports_new_surroundings(self, item_board: Board):
        response = process_action(item_board, Side.HOT, WalkAction(direction=Direction.UP))

        assert item_board.hot.position == pos(2, 1)
        assert item_board.hot.items == 1
        # Cool at (2,2) is now directly to the right
        assert response.readings[5] == Reading.ENEMY
        assert not response.game_over

    def test_fatal_walk_reports_game_over(self, center_wall_board: Board):
        response = process_action(center_wall_board, Side.HOT, WalkAction(direction=Direction.DOWN))

        assert response.game_over
        assert not center_wall_board.hot.alive

    def test_put_reports_new_wall(self, open_board: Board):
        response = process_action(open_board, Side.HOT, PutAction(direction=Direction.RIGHT))

        assert response.readings[5] == Reading.WALL
        assert open_board.grid[0][1] == Cell.WALL

    def test_look_and_search_do_not_mutate(self, item_board: Board):
        before = item_board.model_dump()
        process_action(item_board, Side.HOT, LookAction(direction=Direction.UP))
        process_action(item_board, Side.HOT, SearchAction(direction=Direction.UP))
        assert item_board.model_dump() == before

    def test_second_mover_sees_first_movers_wall(self, open_board: Board):
        """A wall Hot puts is visible to Cool's sensors in the same turn."""
        open_board.cool.position = pos(0, 2)
        process_action(open_board, Side.HOT, PutAction(direction=Direction.RIGHT))

        response = surroundings_response(open_board, Side.COOL)
        assert response.readings[3] == Reading.WALL
