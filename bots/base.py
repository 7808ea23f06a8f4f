"""Common card policy interfaces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from engine.cards import Card, Slot, Suit


class PolicyError(RuntimeError):
    """Raised when a policy names a slot that holds no playable card."""


@dataclass(frozen=True)
class TableView:
    """Everything a policy may look at when choosing a card."""

    seat: int
    num_players: int
    threshold: int
    leader: int
    hand: Tuple[Slot, ...]
    plays: Tuple[Tuple[int, Card], ...]
    points: Tuple[int, ...]
    diamonds_won: Tuple[int, ...]

    def is_leading(self) -> bool:
        return not self.plays

    def lead_suit(self) -> Optional[Suit]:
        return self.plays[0][1].suit if self.plays else None

    def unplayed(self) -> List[Tuple[int, Card]]:
        return [(i, slot.card) for i, slot in enumerate(self.hand) if not slot.played]

    def legal_indices(self) -> List[int]:
        led = self.lead_suit()
        unplayed = self.unplayed()
        following = [i for i, card in unplayed if card.suit is led]
        return following if following else [i for i, _ in unplayed]

    def highest_of(self, suit: Optional[Suit]) -> Optional[int]:
        """Index of the highest unplayed card of ``suit``, first slot on ties."""
        candidates = [(i, card) for i, card in self.unplayed() if card.suit is suit]
        if not candidates:
            return None
        return max(candidates, key=lambda item: item[1].rank)[0]

    def lowest_of(self, suit: Optional[Suit]) -> Optional[int]:
        """Index of the lowest unplayed card of ``suit``, first slot on ties."""
        candidates = [(i, card) for i, card in self.unplayed() if card.suit is suit]
        if not candidates:
            return None
        return min(candidates, key=lambda item: item[1].rank)[0]

    def diamonds_in_trick(self) -> bool:
        return any(card.suit is Suit.DIAMONDS for _, card in self.plays)


def first_available(view: TableView, preference: Sequence[Suit], *, highest: bool) -> Optional[int]:
    """Walk suits in preference order and pick the highest or lowest card of the first one held."""
    for suit in preference:
        index = view.highest_of(suit) if highest else view.lowest_of(suit)
        if index is not None:
            return index
    return None


class CardPolicy:
    """Base class for card selection policies."""

    name: str = "BasePolicy"

    def choose_card(self, view: TableView) -> int:
        """Return the hand index of an unplayed card to play."""
        legal = view.legal_indices()
        if not legal:
            raise PolicyError("No cards left to play.")
        return legal[0]
