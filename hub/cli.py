"""Command-line entry point for the hub.

Usage::

    trick-hub deck threshold player0 {player1}

Prints each trick as it is played and the final scores, or one diagnostic line
on stderr and a non-zero exit status.
"""

from __future__ import annotations

import argparse
import logging
import sys
from enum import IntEnum
from typing import List, NoReturn, Optional, TextIO

from engine.config import HubSettings, UsageParser, build_settings, configure_logging, decimal
from engine.deck import hand_size_for, load_deck
from engine.errors import (
    ConfigError,
    DeckError,
    GameError,
    InvalidCardChoice,
    MalformedMessage,
    PeerClosed,
    ProcessError,
    SignalReceived,
    UsageError,
)

from .coordinator import Coordinator
from .supervisor import Supervisor

logger = logging.getLogger(__name__)


class HubExit(IntEnum):
    NORMAL = 0
    USAGE = 1
    INVALID_THRESHOLD = 2
    DECK_ERROR = 3
    INSUFFICIENT_CARDS = 4
    PROCESS_ERROR = 5
    PEER_CLOSED = 6
    MALFORMED_MESSAGE = 7
    INVALID_CARD_CHOICE = 8
    SIGNAL_RECEIVED = 9


EXIT_MESSAGES = {
    HubExit.USAGE: "Usage: trick-hub deck threshold player0 {player1}",
    HubExit.INVALID_THRESHOLD: "Invalid threshold",
    HubExit.DECK_ERROR: "Deck error",
    HubExit.INSUFFICIENT_CARDS: "Not enough cards",
    HubExit.PROCESS_ERROR: "Player error",
    HubExit.PEER_CLOSED: "Player EOF",
    HubExit.MALFORMED_MESSAGE: "Invalid message",
    HubExit.INVALID_CARD_CHOICE: "Invalid card choice",
    HubExit.SIGNAL_RECEIVED: "Exit due to signal",
}

_SETTING_STATUS = {
    "threshold": HubExit.INVALID_THRESHOLD,
    "cards": HubExit.INSUFFICIENT_CARDS,
}

_ERROR_STATUS = [
    (UsageError, HubExit.USAGE),
    (DeckError, HubExit.DECK_ERROR),
    (ProcessError, HubExit.PROCESS_ERROR),
    (PeerClosed, HubExit.PEER_CLOSED),
    (MalformedMessage, HubExit.MALFORMED_MESSAGE),
    (InvalidCardChoice, HubExit.INVALID_CARD_CHOICE),
    (SignalReceived, HubExit.SIGNAL_RECEIVED),
]


def exit_status(error: GameError) -> HubExit:
    for kind, status in _ERROR_STATUS:
        if isinstance(error, kind):
            return status
    if isinstance(error, ConfigError):
        return _SETTING_STATUS.get(error.setting, HubExit.USAGE)
    return HubExit.USAGE


def build_parser() -> argparse.ArgumentParser:
    parser = UsageParser(prog="trick-hub", description="Run a trick-taking game between player programs.")
    parser.add_argument("deck", help="Deck file: a card count, then one card per line.")
    parser.add_argument("threshold", help="Diamonds at which a seat's diamonds count in its favour.")
    parser.add_argument("players", nargs="+", help="Player executables, one per seat.")
    return parser


def run_game(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> List[int]:
    args = build_parser().parse_args(argv)
    settings = build_settings(
        HubSettings,
        threshold=decimal(args.threshold),
        deck_path=args.deck,
        executables=args.players,
    )
    deck = load_deck(settings.deck_path)
    if len(deck) < settings.num_players:
        raise ConfigError("cards", f"{len(deck)} cards cannot be dealt to {settings.num_players} players")

    hand_size = hand_size_for(deck, settings.num_players)
    with Supervisor(settings.executables, threshold=settings.threshold, hand_size=hand_size) as supervisor:
        channels = supervisor.start()
        record = Coordinator(deck, channels, settings.threshold, out=out).run()
    return record.scores


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    try:
        run_game(argv)
    except GameError as exc:
        status = exit_status(exc)
        logger.warning("Game aborted: %s", exc)
        print(EXIT_MESSAGES[status], file=sys.stderr)
        return status
    return HubExit.NORMAL


def run() -> NoReturn:
    sys.exit(main())


if __name__ == "__main__":
    run()
