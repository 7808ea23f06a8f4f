"""Line protocol between the hub and its players.

Each message is one ASCII line. Hub to player::

    HAND<n>,<card>,...     once, the player's dealt hand
    NEWROUND<lead>         start of every trick
    PLAYED<seat>,<card>    a play by another seat
    GAMEOVER               last message

Player to hub::

    PLAY<card>

A card is a suit letter followed by exactly one lowercase hex digit.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import BinaryIO, Tuple, Union

from .cards import Card, parse_card
from .errors import MalformedMessage, PeerClosed

logger = logging.getLogger(__name__)

HANDSHAKE = b"@"

_CARD = r"[DCHS][0-9a-f]"
_HAND = re.compile(r"HAND([0-9]+)((?:,%s)+)" % _CARD)
_NEWROUND = re.compile(r"NEWROUND([0-9]+)")
_PLAYED = re.compile(r"PLAYED([0-9]+),(%s)" % _CARD)
_PLAY = re.compile(r"PLAY(%s)" % _CARD)


@dataclass(frozen=True)
class DealtHand:
    cards: Tuple[Card, ...]


@dataclass(frozen=True)
class NewRound:
    lead: int


@dataclass(frozen=True)
class Played:
    player: int
    card: Card


@dataclass(frozen=True)
class GameOver:
    pass


@dataclass(frozen=True)
class Play:
    card: Card


HubMessage = Union[DealtHand, NewRound, Played, GameOver]


def encode(message: Union[HubMessage, Play]) -> str:
    """Render a message as a line, without the terminator."""
    if isinstance(message, DealtHand):
        return f"HAND{len(message.cards)}" + "".join(f",{card.code}" for card in message.cards)
    if isinstance(message, NewRound):
        return f"NEWROUND{message.lead}"
    if isinstance(message, Played):
        return f"PLAYED{message.player},{message.card.code}"
    if isinstance(message, GameOver):
        return "GAMEOVER"
    if isinstance(message, Play):
        return f"PLAY{message.card.code}"
    raise TypeError(f"Not a protocol message: {message!r}")


def _number(text: str) -> int:
    try:
        return int(text)
    except ValueError as exc:
        raise MalformedMessage(f"Number field too long: {len(text)} digits") from exc


def decode_hub_message(line: str) -> HubMessage:
    """Parse one hub-to-player line."""
    match = _HAND.fullmatch(line)
    if match:
        cards = tuple(parse_card(code) for code in match.group(2)[1:].split(","))
        if _number(match.group(1)) != len(cards):
            raise MalformedMessage(f"HAND count {match.group(1)} but {len(cards)} cards sent")
        return DealtHand(cards)
    match = _NEWROUND.fullmatch(line)
    if match:
        return NewRound(_number(match.group(1)))
    match = _PLAYED.fullmatch(line)
    if match:
        return Played(_number(match.group(1)), parse_card(match.group(2)))
    if line == "GAMEOVER":
        return GameOver()
    raise MalformedMessage(f"Unrecognised message: {line!r}")


def decode_play(line: str) -> Play:
    """Parse one player-to-hub line."""
    match = _PLAY.fullmatch(line)
    if not match:
        raise MalformedMessage(f"Bad PLAY message: {line!r}")
    return Play(parse_card(match.group(1)))


def read_line(stream: BinaryIO) -> str:
    """Block until one full line arrives and return it without the terminator.

    End of stream before a terminator, including a trailing partial line,
    raises ``PeerClosed``.
    """
    raw = stream.readline()
    if not raw.endswith(b"\n"):
        raise PeerClosed("Stream closed before a full line was read")
    try:
        return raw[:-1].decode("ascii")
    except UnicodeDecodeError as exc:
        raise MalformedMessage(f"Non-ASCII line: {raw!r}") from exc


def write_line(stream: BinaryIO, line: str) -> bool:
    """Write one line and flush. Returns False if the reader has gone away.

    A closed reader surfaces later as end of stream on the matching read, so
    the broken pipe is not raised here.
    """
    try:
        stream.write(line.encode("ascii") + b"\n")
        stream.flush()
    except BrokenPipeError:
        logger.debug("Dropped %r: peer closed its input", line)
        return False
    return True
