"""Game action types - the four commands a player can issue on its turn."""

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field

from chaser.schemas.game import Direction


class _BaseAction(BaseModel):
    model_config = ConfigDict(frozen=True)

    direction: Direction


class WalkAction(_BaseAction):
    """Step one cell, collecting an item or dying against a wall."""

    action_type: Literal["walk"] = "walk"


class LookAction(_BaseAction):
    """Sense the cell two steps away."""

    action_type: Literal["look"] = "look"


class SearchAction(_BaseAction):
    """Sense the nine cells in a straight line."""

    action_type: Literal["search"] = "search"


class PutAction(_BaseAction):
    """Turn the adjacent cell into a wall if it is empty."""

    action_type: Literal["put"] = "put"


# Union type for all game actions
GameAction = Annotated[
    WalkAction | LookAction | SearchAction | PutAction,
    Field(discriminator="action_type"),
]

_ACTION_CLASSES: dict[str, type[_BaseAction]] = {
    "walk": WalkAction,
    "look": LookAction,
    "search": SearchAction,
    "put": PutAction,
}


def build_action(action_type: str, direction: Direction) -> GameAction:
    """Build a typed action from its type name and direction.

    Raises:
        ValueError: If action_type is unknown.
    """
    action_cls = _ACTION_CLASSES.get(action_type)
    if action_cls is None:
        raise ValueError(f"Unknown action type: {action_type}")
    return action_cls(direction=direction)
