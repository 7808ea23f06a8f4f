"""Deck loading and dealing utilities."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from random import Random
from typing import List, Optional, Sequence, Union

from .cards import MAX_RANK, MIN_RANK, Card, Suit, parse_card
from .errors import DeckError

logger = logging.getLogger(__name__)

_COUNT = re.compile(r"[0-9]+")


def build_deck() -> List[Card]:
    """Return the ordered 64-card deck."""
    return [Card(suit, rank) for suit in Suit for rank in range(MIN_RANK, MAX_RANK + 1)]


def shuffled_deck(seed: Optional[int] = None) -> List[Card]:
    cards = build_deck()
    Random(seed).shuffle(cards)
    return cards


def load_deck(path: Union[str, Path]) -> List[Card]:
    """Read a deck file: a positive card count, then one card per line.

    Lines after the declared count are ignored.
    """
    try:
        text = Path(path).read_text(encoding="ascii")
    except (OSError, UnicodeDecodeError) as exc:
        raise DeckError(f"Cannot read deck {path}: {exc}") from exc

    lines = text.split("\n")
    try:
        count = int(lines[0]) if _COUNT.fullmatch(lines[0]) else 0
    except ValueError:
        count = 0
    if count <= 0:
        raise DeckError(f"Bad card count in {path}: {lines[0][:20]!r}")
    if len(lines) - 1 < count:
        raise DeckError(f"Deck {path} declares {count} cards but is shorter.")

    deck: List[Card] = []
    for number, line in enumerate(lines[1 : count + 1], start=2):
        try:
            deck.append(parse_card(line))
        except ValueError as exc:
            raise DeckError(f"{path}:{number}: {exc}") from exc
    logger.info("Loaded %d cards from %s", len(deck), path)
    return deck


def hand_size_for(deck: Sequence[Card], num_players: int) -> int:
    return len(deck) // num_players


def deal(deck: Sequence[Card], num_players: int) -> List[List[Card]]:
    """Split the deck into contiguous hands; surplus cards stay undealt."""
    if num_players <= 0:
        raise ValueError("At least one player is required.")
    size = hand_size_for(deck, num_players)
    return [list(deck[i * size : (i + 1) * size]) for i in range(num_players)]
