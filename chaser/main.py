import argparse
import asyncio
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from chaser import __version__
from chaser.config import Settings, configure_logging, get_settings
from chaser.schemas.game import Direction
from chaser.services.client import ChaserClient
from chaser.services.game import (
    DumpRecorder,
    MapFormatError,
    NullRecorder,
    Recorder,
    load_board,
    read_map_lines,
)
from chaser.services.match import ConnectionFailure, MatchServer, MatchSummary

logger = logging.getLogger(__name__)

BOT_SEARCH_CYCLE = (Direction.UP, Direction.RIGHT, Direction.DOWN, Direction.LEFT)


def _build_recorder(settings: Settings, map_path: Path) -> Recorder:
    if not settings.DUMP_ENABLED:
        logger.info("Dump: disabled")
        return NullRecorder()
    logger.info("Dump: %s", settings.DUMP_PATH)
    return DumpRecorder(settings.DUMP_PATH, read_map_lines(map_path))


async def serve(map_path: Path, settings: Settings) -> MatchSummary:
    board = load_board(map_path)
    recorder = _build_recorder(settings, map_path)
    server = MatchServer(board, settings, recorder)
    try:
        await server.listen()
    except OSError:
        recorder.close()
        raise
    return await server.run()


async def run_bot(host: str, port: int, name: str) -> None:
    """Search in a fixed cycle until the server says the match is over."""
    async with ChaserClient(host, port, name) as client:
        step = 0
        while True:
            response = await client.ready()
            if response.game_over:
                break
            direction = BOT_SEARCH_CYCLE[step % len(BOT_SEARCH_CYCLE)]
            response = await client.search(direction)
            if response.game_over:
                break
            step += 1
    logger.info("Game finished after %d actions", step)


def main() -> None:
    parser = argparse.ArgumentParser(description="CHaser - two-player pursuit game server")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="mode", required=True)

    serve_p = subparsers.add_parser("serve", help="Run one match on a map file")
    serve_p.add_argument("mapfile", type=Path, help="Path to the map file")
    serve_p.add_argument("-f", "--first-port", type=int, help="Hot (first) player port")
    serve_p.add_argument("-s", "--second-port", type=int, help="Cool (second) player port")
    serve_p.add_argument("-d", "--dump-path", type=str, help="Dump file output path")
    serve_p.add_argument("--no-dump", action="store_true", help="Disable dump output")
    serve_p.add_argument("--debug", action="store_true", help="Verbose logging")

    bot_p = subparsers.add_parser("bot", help="Run the reference search bot")
    bot_p.add_argument("--host", type=str, default="127.0.0.1", help="Server address")
    bot_p.add_argument("--port", type=int, default=2009, help="Server port")
    bot_p.add_argument("--name", type=str, default="searcher", help="Player name")

    args = parser.parse_args()

    if args.mode == "bot":
        configure_logging()
        try:
            asyncio.run(run_bot(args.host, args.port, args.name))
        except ConnectionFailure as e:
            logger.error("Bot error: %s", e)
            sys.exit(1)
        return

    overrides = {}
    if args.first_port is not None:
        overrides["HOT_PORT"] = args.first_port
    if args.second_port is not None:
        overrides["COOL_PORT"] = args.second_port
    if args.dump_path is not None:
        overrides["DUMP_PATH"] = args.dump_path
    if args.no_dump:
        overrides["DUMP_ENABLED"] = False
    if args.debug:
        overrides["DEBUG"] = True
    try:
        settings = Settings(**{**get_settings().model_dump(), **overrides})
    except ValidationError as e:
        logger.error("Invalid settings: %s", e)
        sys.exit(1)

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.mapfile.exists():
        logger.error("Map file not found: %s", args.mapfile)
        sys.exit(1)

    logger.info("=== CHaser Server ===")
    logger.info("Map: %s", args.mapfile)
    logger.info("Hot port: %d", settings.HOT_PORT)
    logger.info("Cool port: %d", settings.COOL_PORT)

    try:
        summary = asyncio.run(serve(args.mapfile, settings))
    except (MapFormatError, OSError) as e:
        logger.error("Failed to start server: %s", e)
        sys.exit(1)

    if not summary.completed:
        logger.error("Match aborted: %s", summary.reason)
        sys.exit(1)
    if summary.winner is None:
        print(f"Draw ({summary.reason}) - {summary.hot_items}:{summary.cool_items}")
    else:
        print(f"{summary.winner_name} ({summary.winner.value}) wins - {summary.reason}")


if __name__ == "__main__":
    main()
