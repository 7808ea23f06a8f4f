"""Trick awards and final scoring."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Tuple

from .trick import Trick, TrickError


class ScoringError(ValueError):
    """Base class for scoring issues."""


def final_score(points: int, diamonds_won: int, threshold: int) -> int:
    """Diamonds count against a seat below the threshold and for it at or above."""
    if diamonds_won < threshold:
        return points - diamonds_won
    return points + diamonds_won


@dataclass
class ScoreBoard:
    num_players: int
    points: List[int] = field(init=False)
    diamonds_won: List[int] = field(init=False)
    tricks_recorded: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        if self.num_players <= 0:
            raise ScoringError("A score board needs at least one seat.")
        self.points = [0] * self.num_players
        self.diamonds_won = [0] * self.num_players

    def record(self, trick: Trick) -> int:
        """Award a completed trick and return the winning seat.

        The winner takes one point and every diamond played into the trick.
        """
        if not trick.is_full():
            raise TrickError("Only a complete trick can be scored.")
        winner, _ = trick.winning_play()
        self.points[winner] += 1
        self.diamonds_won[winner] += trick.diamonds()
        self.tricks_recorded += 1
        return winner

    def final_scores(self, threshold: int) -> List[int]:
        return [
            final_score(points, diamonds, threshold)
            for points, diamonds in zip(self.points, self.diamonds_won)
        ]

    def tallies(self) -> List[Tuple[int, int]]:
        return list(zip(self.points, self.diamonds_won))


def format_scores(scores: List[int]) -> str:
    return " ".join(f"{seat}:{score}" for seat, score in enumerate(scores))
