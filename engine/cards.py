"""Card-related data structures and helpers."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple


MIN_RANK = 0
MAX_RANK = 15
HEX_DIGITS = "0123456789abcdef"


class Suit(Enum):
    DIAMONDS = "D"
    CLUBS = "C"
    HEARTS = "H"
    SPADES = "S"

    def __str__(self) -> str:
        return self.value


SUIT_LETTERS = {suit.value: suit for suit in Suit}


@dataclass(frozen=True)
class Card:
    """Immutable representation of a playing card."""

    suit: Suit
    rank: int

    def __post_init__(self) -> None:
        if not MIN_RANK <= self.rank <= MAX_RANK:
            raise ValueError(f"Rank out of range: {self.rank}")

    @property
    def code(self) -> str:
        """Wire form, e.g. ``Sa``."""
        return f"{self.suit.value}{self.rank:x}"

    @property
    def label(self) -> str:
        """Console form, e.g. ``S.a``."""
        return f"{self.suit.value}.{self.rank:x}"

    def __str__(self) -> str:
        return self.code


def parse_card(text: str) -> Card:
    """Parse ``<suit><hexrank>``; the rank must be one lowercase hex digit."""
    if len(text) != 2:
        raise ValueError(f"Bad card: {text!r}")
    suit = SUIT_LETTERS.get(text[0])
    if suit is None or text[1] not in HEX_DIGITS:
        raise ValueError(f"Bad card: {text!r}")
    return Card(suit, HEX_DIGITS.index(text[1]))


@dataclass(frozen=True)
class Slot:
    card: Card
    played: bool = False


class Hand:
    """Fixed-size hand whose slots are marked played instead of removed.

    Slot indices never shift, so an index handed out by a policy stays valid
    for the whole game.
    """

    def __init__(self, cards: Sequence[Card]) -> None:
        self._slots: List[Slot] = [Slot(card) for card in cards]

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[Slot]:
        return iter(self._slots)

    def __getitem__(self, index: int) -> Slot:
        return self._slots[index]

    @property
    def slots(self) -> Tuple[Slot, ...]:
        return tuple(self._slots)

    @property
    def remaining(self) -> int:
        return sum(1 for slot in self._slots if not slot.played)

    def unplayed(self) -> List[Tuple[int, Card]]:
        return [(i, slot.card) for i, slot in enumerate(self._slots) if not slot.played]

    def is_unplayed(self, index: int) -> bool:
        return 0 <= index < len(self._slots) and not self._slots[index].played

    def find(self, card: Card) -> Optional[int]:
        for index, held in self.unplayed():
            if held == card:
                return index
        return None

    def has_suit(self, suit: Suit) -> bool:
        return any(card.suit is suit for _, card in self.unplayed())

    def mark_played(self, index: int) -> Card:
        if not self.is_unplayed(index):
            raise ValueError(f"Slot {index} has no card to play.")
        card = self._slots[index].card
        self._slots[index] = Slot(card, played=True)
        return card


def cards_label(cards: Sequence[Card]) -> str:
    return " ".join(card.label for card in cards)
