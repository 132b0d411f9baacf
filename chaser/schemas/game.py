from enum import Enum, IntEnum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# Terrain stored in the grid. Values double as wire digits.
class Cell(IntEnum):
    EMPTY = 0
    WALL = 2
    ITEM = 3


# What a sensor reports for one cell: terrain, or the opponent standing on it
class Reading(IntEnum):
    EMPTY = 0
    ENEMY = 1
    WALL = 2
    ITEM = 3

    @classmethod
    def from_cell(cls, cell: Cell) -> "Reading":
        return cls(int(cell))


class Direction(IntEnum):
    UP = 0
    DOWN = 1
    LEFT = 2
    RIGHT = 3

    @property
    def delta(self) -> tuple[int, int]:
        """(row, col) offset of a single step in this direction."""
        return _DIRECTION_DELTAS[self]


_DIRECTION_DELTAS = {
    Direction.UP: (-1, 0),
    Direction.DOWN: (1, 0),
    Direction.LEFT: (0, -1),
    Direction.RIGHT: (0, 1),
}


class Side(str, Enum):
    HOT = "hot"
    COOL = "cool"

    @property
    def opponent(self) -> "Side":
        return Side.COOL if self is Side.HOT else Side.HOT


class Position(BaseModel):
    model_config = ConfigDict(frozen=True)

    row: int
    col: int

    def offset(self, d_row: int, d_col: int) -> "Position":
        return Position(row=self.row + d_row, col=self.col + d_col)


class Character(BaseModel):
    name: str = ""
    position: Position
    items: int = Field(default=0, ge=0)
    alive: bool = True


class Board(BaseModel):
    """Ground-truth match state.

    Owned by a single match and mutated in place by the rule functions in
    chaser.services.game.engine.rules. Cells outside the grid read as walls.
    """

    grid: list[list[Cell]]
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    max_turns: int = Field(..., ge=0)
    turn: int = 0
    game_over: bool = False
    hot: Character
    cool: Character

    @model_validator(mode="after")
    def check_grid_shape(self) -> "Board":
        if len(self.grid) != self.height:
            raise ValueError(f"grid has {len(self.grid)} rows, expected {self.height}")
        for row_index, row in enumerate(self.grid):
            if len(row) != self.width:
                raise ValueError(
                    f"grid row {row_index} has {len(row)} cells, expected {self.width}"
                )
        return self

    def character(self, side: Side) -> Character:
        return self.hot if side is Side.HOT else self.cool

    def opponent(self, side: Side) -> Character:
        return self.character(side.opponent)

    def in_bounds(self, pos: Position) -> bool:
        return 0 <= pos.row < self.height and 0 <= pos.col < self.width


class SensorResponse(BaseModel):
    """The ten-slot reply sent after Ready and after every action.

    Slot 0 is the continuation flag (1 = play continues, 0 = match over),
    slots 1..9 are sensor readings.
    """

    model_config = ConfigDict(frozen=True)

    values: tuple[int, ...] = Field(..., min_length=10, max_length=10)

    @model_validator(mode="after")
    def check_digits(self) -> "SensorResponse":
        for index, value in enumerate(self.values):
            if not 0 <= value <= 3:
                raise ValueError(f"slot {index} holds {value}, expected 0-3")
        return self

    @classmethod
    def build(cls, game_over: bool, readings: dict[int, Reading]) -> "SensorResponse":
        values = [0] * 10
        values[0] = 0 if game_over else 1
        for slot, reading in readings.items():
            values[slot] = int(reading)
        return cls(values=tuple(values))

    @classmethod
    def over(cls) -> "SensorResponse":
        return cls(values=(0,) * 10)

    @property
    def game_over(self) -> bool:
        return self.values[0] == 0

    @property
    def readings(self) -> list[Reading]:
        return [Reading(v) for v in self.values[1:]]
