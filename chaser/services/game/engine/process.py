"""Main entry point for applying a decoded action to the board."""

import logging

from chaser.schemas.game import Board, SensorResponse, Side

from .actions import GameAction, LookAction, PutAction, SearchAction, WalkAction
from .rules import put, walk
from .sensing import look_response, search_response, surroundings_response

logger = logging.getLogger(__name__)


def process_action(board: Board, side: Side, action: GameAction) -> SensorResponse:
    """Apply ``action`` for ``side`` and build the reply it earns.

    Walk and Put mutate the board before sensing, so their replies describe
    the state after the move. Look and Search never mutate.

    Args:
        board: Match state, mutated in place.
        side: The acting side.
        action: A decoded action.

    Returns:
        The sensor response to send back to the acting side.
    """
    character = board.character(side)
    logger.info(
        "Processing action: side=%s, type=%s, direction=%s, turn=%d",
        side.value,
        action.action_type,
        action.direction.name,
        board.turn,
    )

    if isinstance(action, WalkAction):
        outcome = walk(board, side, action.direction)
        if outcome.lethal:
            logger.info("%s (%s) died: %s", character.name, side.value, outcome.value)
        return surroundings_response(board, side)

    if isinstance(action, LookAction):
        return look_response(board, side, action.direction)

    if isinstance(action, SearchAction):
        return search_response(board, side, action.direction)

    if isinstance(action, PutAction):
        placed = put(board, character.position, action.direction)
        logger.debug("%s put toward %s: placed=%s", side.value, action.direction.name, placed)
        return surroundings_response(board, side)

    raise ValueError(f"Unknown action type: {type(action).__name__}")
