"""Command-line shell for the shooting range controller.

Usage examples:

    python run.py ports
    python run.py --port /dev/ttyACM0 send 3 on
    python run.py targets add 3 25.0 1
    python run.py markers set 1 50
    python run.py --port /dev/ttyACM0 play 1

At startup the configured port is opened; if that fails the shell continues in
simulated mode and commands are logged instead of transmitted.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from shooting_range.core import configio
from shooting_range.core.logger import APP_LOGGER, SessionLogger, configure_file_logging
from shooting_range.core.models import GameTargetInput
from shooting_range.core.session import GameSession
from shooting_range.core.storage import RangeStore, StorageError
from shooting_range.drivers import (
    ConnectError,
    ControlHandle,
    ControllerDriverError,
    list_serial_ports,
)

EXIT_OK = 0
EXIT_ERROR = 1
STATE_WORDS = {"on": True, "true": True, "1": True, "off": False, "false": False, "0": False}


@dataclass
class Runtime:
    config: dict
    store: RangeStore
    control: ControlHandle

    def close(self):
        self.control.disconnect()
        self.store.close()


def open_runtime(cfg: dict, port: Optional[str] = None, connect: bool = True) -> Runtime:
    """Open the database and try the serial port; a failed connect leaves simulated mode."""
    store = RangeStore(cfg["db_path"])
    control = ControlHandle()
    if connect:
        target_port = port or cfg["serial_port"]
        try:
            control.connect(target_port)
        except ConnectError as e:
            APP_LOGGER.warning(f"{e}. Continuing in simulated mode.")
    return Runtime(config=cfg, store=store, control=control)


def parse_state(word: str) -> bool:
    try:
        return STATE_WORDS[word.lower()]
    except KeyError:
        raise argparse.ArgumentTypeError(f"invalid state {word!r}; use on/off") from None


def parse_window(text: str) -> GameTargetInput:
    """Parse ``TARGET_ID:START:END`` into a window."""
    try:
        target_id, start, end = (int(part) for part in text.split(":"))
        return GameTargetInput(target_id=target_id, start_time=start, end_time=end)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"invalid window {text!r}: {e}") from None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="shooting-range", description="Shooting range target controller")
    parser.add_argument("--config", type=Path, default=configio.DEFAULT_PATH, help="Config JSON path")
    parser.add_argument("--port", help="Serial port (overrides config)")
    parser.add_argument("--db", help="Database path (overrides config)")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("ports", help="List available serial ports")

    p_send = sub.add_parser("send", help="Switch one target node")
    p_send.add_argument("node_id", type=int)
    p_send.add_argument("state", type=parse_state)

    p_targets = sub.add_parser("targets", help="Manage targets")
    t_sub = p_targets.add_subparsers(dest="action", required=True)
    t_sub.add_parser("list")
    t_add = t_sub.add_parser("add")
    t_add.add_argument("node_id", type=int)
    t_add.add_argument("distance", type=float)
    t_add.add_argument("image_num", type=int)
    t_del = t_sub.add_parser("delete")
    t_del.add_argument("id", type=int)

    p_markers = sub.add_parser("markers", help="Manage distance markers")
    m_sub = p_markers.add_subparsers(dest="action", required=True)
    m_sub.add_parser("list")
    m_set = m_sub.add_parser("set")
    m_set.add_argument("marker_number", type=int)
    m_set.add_argument("distance", type=float)

    p_games = sub.add_parser("games", help="Manage games")
    g_sub = p_games.add_subparsers(dest="action", required=True)
    g_sub.add_parser("list")
    g_show = g_sub.add_parser("show")
    g_show.add_argument("id", type=int)
    g_add = g_sub.add_parser("add")
    g_add.add_argument("name")
    g_add.add_argument("total_time", type=int)
    g_add.add_argument("windows", nargs="*", type=parse_window, metavar="TARGET_ID:START:END")
    g_del = g_sub.add_parser("delete")
    g_del.add_argument("id", type=int)

    p_play = sub.add_parser("play", help="Run a game against the rig")
    p_play.add_argument("id", type=int)
    return parser


def _print_game(game) -> None:
    print(f"[{game.id}] {game.name} ({game.total_time}s)")
    for gt in game.targets:
        print(f"    node {gt.target.node_id}: {gt.start_time}s - {gt.end_time}s")


def run_command(args: argparse.Namespace, rt: Runtime) -> int:
    if args.command == "send":
        outcome = rt.control.send(args.node_id, args.state)
        print(outcome.value)
    elif args.command == "targets":
        if args.action == "list":
            for t in rt.store.list_targets():
                print(f"[{t.id}] node {t.node_id} at {t.distance}m image {t.image_num}")
        elif args.action == "add":
            t = rt.store.create_target(args.node_id, args.distance, args.image_num)
            print(f"created target {t.id}")
        else:
            rt.store.delete_target(args.id)
    elif args.command == "markers":
        if args.action == "list":
            for m in rt.store.list_distance_markers():
                print(f"marker {m.marker_number}: {m.distance}m")
        else:
            m = rt.store.upsert_distance_marker(args.marker_number, args.distance)
            print(f"marker {m.marker_number}: {m.distance}m")
    elif args.command == "games":
        if args.action == "list":
            for game in rt.store.list_games():
                _print_game(game)
        elif args.action == "show":
            _print_game(rt.store.get_game(args.id))
        elif args.action == "add":
            game = rt.store.create_game(args.name, args.total_time, args.windows)
            print(f"created game {game.id}")
        else:
            rt.store.delete_game(args.id)
    elif args.command == "play":
        game = rt.store.get_game(args.id)
        session_logger = SessionLogger(rt.config["session_dir"], game_name=game.name)
        session = GameSession(rt.control, game, session_logger=session_logger)
        try:
            session.start()
            session.wait()
        except KeyboardInterrupt:
            APP_LOGGER.info("Interrupted, switching all targets off")
        finally:
            session.stop()
            session_logger.close()
    return EXIT_OK


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "ports":
        try:
            ports = list_serial_ports()
        except ControllerDriverError as e:
            print(f"error: {e}", file=sys.stderr)
            return EXIT_ERROR
        for name in ports:
            print(name)
        return EXIT_OK

    cfg = configio.resolve_config(args.config)
    if args.db:
        cfg["db_path"] = args.db
    configure_file_logging(Path(cfg["log_path"]))

    try:
        rt = open_runtime(cfg, port=args.port, connect=args.command in ("send", "play"))
    except StorageError as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    try:
        return run_command(args, rt)
    except (ControllerDriverError, StorageError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return EXIT_ERROR
    finally:
        rt.close()


if __name__ == "__main__":
    sys.exit(main())
