"""Game service module.

Provides:
- Map loading (map_loader.py)
- Replay recording (recorder.py)
- Game engine processing (engine/)
"""

# Re-export from engine for convenience
from .engine import (
    GameAction,
    MatchResult,
    decode_action,
    encode_response,
    get_result,
    process_action,
)
from .map_loader import MapFormatError, load_board, parse_map, read_map_lines
from .recorder import DumpRecorder, NullRecorder, Recorder

__all__ = [
    # Map loading
    "MapFormatError",
    "load_board",
    "parse_map",
    "read_map_lines",
    # Recording
    "DumpRecorder",
    "NullRecorder",
    "Recorder",
    # Engine
    "GameAction",
    "MatchResult",
    "decode_action",
    "encode_response",
    "get_result",
    "process_action",
]
