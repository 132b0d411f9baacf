"""Game engine module - board rules, sensing and the wire codec.

This module provides:
- Action types for the four player commands
- Board rule functions that mutate a Board in place
- Sensor response builders sharing one opponent-masking routine
- The line codec shared by server and client

Usage:
    from chaser.services.game.engine import decode_action, process_action

    action = decode_action("wk 0")
    response = process_action(board, Side.HOT, action)
    line = encode_response(response)
"""

# Actions
from .actions import (
    GameAction,
    LookAction,
    PutAction,
    SearchAction,
    WalkAction,
    build_action,
)

# Codec
from .codec import (
    ACTION_ACK,
    GAME_OVER,
    READY_ACK,
    READY_PROMPT,
    ActionDecodeError,
    ResponseDecodeError,
    decode_action,
    decode_response,
    encode_action,
    encode_response,
)

# Main processing
from .process import process_action

# Rules
from .rules import (
    MatchResult,
    WalkOutcome,
    decide_result,
    get_cell,
    get_result,
    increment_turn,
    look,
    move,
    put,
    search,
    walk,
)

# Sensing
from .sensing import look_response, search_response, surroundings_response

__all__ = [
    # Actions
    "GameAction",
    "WalkAction",
    "LookAction",
    "SearchAction",
    "PutAction",
    "build_action",
    # Codec
    "READY_PROMPT",
    "READY_ACK",
    "ACTION_ACK",
    "GAME_OVER",
    "ActionDecodeError",
    "ResponseDecodeError",
    "decode_action",
    "decode_response",
    "encode_action",
    "encode_response",
    # Processing
    "process_action",
    # Rules
    "MatchResult",
    "WalkOutcome",
    "decide_result",
    "get_cell",
    "get_result",
    "increment_turn",
    "look",
    "move",
    "put",
    "search",
    "walk",
    # Sensing
    "surroundings_response",
    "look_response",
    "search_response",
]
