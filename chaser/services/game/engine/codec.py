"""Wire codec for the line protocol.

Server and client share the tables below, so a digit or mnemonic means the
same thing on both ends of the socket.

    action   <mnemonic> <direction-digit>   e.g. "wk 0"
    response ten digits 0-3, no separators  e.g. "1020003000"
"""

from chaser.schemas.game import Direction, SensorResponse

from .actions import GameAction, build_action

RESPONSE_LENGTH = 10

# Control lines
READY_PROMPT = "Ready"
READY_ACK = "gr"
ACTION_ACK = "#"
GAME_OVER = "#"

SERVER_EOL = "\n"
CLIENT_EOL = "\r\n"

# Name lines on these well-known ports are CP932 instead of UTF-8
LEGACY_NAME_PORTS = (40000, 50000)
LEGACY_NAME_ENCODING = "cp932"

ACTION_MNEMONICS: dict[str, str] = {
    "walk": "wk",
    "look": "lk",
    "search": "sc",
    "put": "pt",
}
_MNEMONIC_ACTIONS = {mnemonic: action for action, mnemonic in ACTION_MNEMONICS.items()}

DIRECTION_DIGITS: dict[Direction, str] = {direction: str(int(direction)) for direction in Direction}
_DIGIT_DIRECTIONS = {digit: direction for direction, digit in DIRECTION_DIGITS.items()}


class ActionDecodeError(ValueError):
    """An action line does not match ``<mnemonic> <digit>``."""


class ResponseDecodeError(ValueError):
    """A response line is not ten digits in 0-3."""


def encode_response(response: SensorResponse) -> str:
    return "".join(str(v) for v in response.values) + SERVER_EOL


def decode_response(line: str) -> SensorResponse:
    text = line.strip("\r\n")
    if len(text) != RESPONSE_LENGTH:
        raise ResponseDecodeError(
            f"expected {RESPONSE_LENGTH} characters, got {len(text)}: {text!r}"
        )
    values = []
    for index, char in enumerate(text):
        if char not in "0123":
            raise ResponseDecodeError(f"invalid character {char!r} at position {index}")
        values.append(int(char))
    return SensorResponse(values=tuple(values))


def encode_action(action: GameAction) -> str:
    mnemonic = ACTION_MNEMONICS[action.action_type]
    return f"{mnemonic} {DIRECTION_DIGITS[action.direction]}{CLIENT_EOL}"


def decode_action(line: str) -> GameAction:
    """Parse an action line (already stripped of its terminator).

    Raises:
        ActionDecodeError: If the line is not exactly a known mnemonic and a
            direction digit separated by a single space.
    """
    parts = line.split(" ")
    if len(parts) != 2:
        raise ActionDecodeError(f"invalid command format: {line!r}")

    mnemonic, digit = parts
    action_type = _MNEMONIC_ACTIONS.get(mnemonic)
    if action_type is None:
        raise ActionDecodeError(f"invalid action: {mnemonic!r}")

    direction = _DIGIT_DIRECTIONS.get(digit)
    if direction is None:
        raise ActionDecodeError(f"invalid direction: {digit!r}")

    return build_action(action_type, direction)
