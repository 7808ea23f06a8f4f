"""Trick representation and resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .cards import Card, Suit


class TrickError(RuntimeError):
    """Raised when trick play breaks ordering constraints."""


@dataclass
class Trick:
    leader: int
    num_players: int
    plays: List[Tuple[int, Card]] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not 0 <= self.leader < self.num_players:
            raise TrickError(f"Leader {self.leader} is not a seat.")

    def is_empty(self) -> bool:
        return not self.plays

    def is_full(self) -> bool:
        return len(self.plays) == self.num_players

    def next_player(self) -> int:
        return (self.leader + len(self.plays)) % self.num_players

    def add_play(self, player: int, card: Card) -> None:
        if self.is_full():
            raise TrickError("Trick already complete.")
        expected = self.next_player()
        if player != expected:
            raise TrickError(f"Seat {player} played out of turn; expected seat {expected}.")
        self.plays.append((player, card))

    def led_suit(self) -> Optional[Suit]:
        return self.plays[0][1].suit if self.plays else None

    def cards(self) -> List[Card]:
        return [card for _, card in self.plays]

    def diamonds(self) -> int:
        return sum(1 for _, card in self.plays if card.suit is Suit.DIAMONDS)

    def winning_play(self) -> Tuple[int, Card]:
        """Highest lead-suit card; on equal ranks the earlier play wins."""
        if not self.plays:
            raise TrickError("Cannot determine winner on empty trick.")
        led = self.led_suit()
        winning_player, winning_card = self.plays[0]
        for player, card in self.plays[1:]:
            if card.suit is led and card.rank > winning_card.rank:
                winning_player, winning_card = player, card
        return winning_player, winning_card
