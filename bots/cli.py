"""Player program entry points.

A player is started by the hub as::

    <executable> players myid threshold handsize

Each shipped policy has its own console script taking exactly those four
arguments. ``python -m bots.cli <policy> players myid threshold handsize``
runs any registered policy.
"""

from __future__ import annotations

import logging
import sys
from enum import IntEnum
from typing import BinaryIO, List, NoReturn, Optional, Sequence, TextIO

from engine.config import PlayerSettings, UsageParser, build_settings, configure_logging, decimal
from engine.errors import ConfigError, GameError, MalformedMessage, PeerClosed
from engine.protocol import HANDSHAKE, write_line

from . import POLICY_REGISTRY, make_policy
from .base import CardPolicy
from .player import PlayerEngine

logger = logging.getLogger(__name__)


class PlayerExit(IntEnum):
    NORMAL = 0
    USAGE = 1
    INVALID_PLAYERS = 2
    INVALID_POSITION = 3
    INVALID_THRESHOLD = 4
    INVALID_HAND = 5
    MALFORMED_MESSAGE = 6
    PEER_CLOSED = 7


EXIT_MESSAGES = {
    PlayerExit.USAGE: "Usage: player players myid threshold handsize",
    PlayerExit.INVALID_PLAYERS: "Invalid players",
    PlayerExit.INVALID_POSITION: "Invalid position",
    PlayerExit.INVALID_THRESHOLD: "Invalid threshold",
    PlayerExit.INVALID_HAND: "Invalid hand size",
    PlayerExit.MALFORMED_MESSAGE: "Invalid message",
    PlayerExit.PEER_CLOSED: "EOF",
}

_SETTING_STATUS = {
    "num_players": PlayerExit.INVALID_PLAYERS,
    "player_id": PlayerExit.INVALID_POSITION,
    "threshold": PlayerExit.INVALID_THRESHOLD,
    "hand_size": PlayerExit.INVALID_HAND,
}


def exit_status(error: GameError) -> PlayerExit:
    if isinstance(error, MalformedMessage):
        return PlayerExit.MALFORMED_MESSAGE
    if isinstance(error, PeerClosed):
        return PlayerExit.PEER_CLOSED
    if isinstance(error, ConfigError):
        return _SETTING_STATUS.get(error.setting, PlayerExit.USAGE)
    return PlayerExit.USAGE


def parse_settings(argv: Sequence[str]) -> PlayerSettings:
    parser = UsageParser(prog="player", add_help=False)
    parser.add_argument("players")
    parser.add_argument("myid")
    parser.add_argument("threshold")
    parser.add_argument("handsize")
    args = parser.parse_args(list(argv))
    return build_settings(
        PlayerSettings,
        num_players=decimal(args.players),
        player_id=decimal(args.myid),
        threshold=decimal(args.threshold),
        hand_size=decimal(args.handsize),
    )


def play(
    policy: CardPolicy,
    argv: Sequence[str],
    stdin: BinaryIO,
    stdout: BinaryIO,
    report: Optional[TextIO] = None,
) -> None:
    """Validate arguments, announce readiness, then play until GAMEOVER."""
    settings = parse_settings(argv)
    try:
        stdout.write(HANDSHAKE)
        stdout.flush()
    except BrokenPipeError:
        logger.debug("Hub closed before the handshake")
    engine = PlayerEngine(settings, policy, send=lambda line: write_line(stdout, line), report=report)
    engine.run(stdin)


def run_player(policy: CardPolicy, argv: Sequence[str]) -> int:
    configure_logging()
    try:
        play(policy, argv, sys.stdin.buffer, sys.stdout.buffer, report=sys.stderr)
    except GameError as exc:
        status = exit_status(exc)
        logger.warning("Player stopped: %s", exc)
        print(EXIT_MESSAGES[status], file=sys.stderr)
        return status
    return PlayerExit.NORMAL


def main(argv: Optional[List[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in POLICY_REGISTRY:
        print(f"Usage: python -m bots.cli {{{','.join(POLICY_REGISTRY)}}} players myid threshold handsize", file=sys.stderr)
        return PlayerExit.USAGE
    return run_player(make_policy(args[0]), args[1:])


def lead_high() -> NoReturn:
    sys.exit(run_player(make_policy("lead-high"), sys.argv[1:]))


def threshold_watch() -> NoReturn:
    sys.exit(run_player(make_policy("threshold-watch"), sys.argv[1:]))


def random_player() -> NoReturn:
    sys.exit(run_player(make_policy("random"), sys.argv[1:]))


if __name__ == "__main__":
    sys.exit(main())
