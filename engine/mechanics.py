"""Legal move generation."""

from __future__ import annotations

from typing import List

from .cards import Card, Hand
from .trick import Trick


def legal_moves(hand: Hand, trick: Trick) -> List[int]:
    """Return the unplayed slot indices that may be played into the trick."""
    unplayed = hand.unplayed()
    led = trick.led_suit()
    if led is None:
        return [index for index, _ in unplayed]
    following = [index for index, card in unplayed if card.suit is led]
    return following if following else [index for index, _ in unplayed]


def is_legal(hand: Hand, trick: Trick, card: Card) -> bool:
    """True if an unplayed copy of ``card`` may be played into the trick."""
    index = hand.find(card)
    if index is None:
        return False
    led = trick.led_suit()
    if led is None or card.suit is led:
        return True
    return not hand.has_suit(led)
