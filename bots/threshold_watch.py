"""Policy that keeps an eye on how close the table is to the diamond threshold."""

from __future__ import annotations

from engine.cards import Suit

from .base import CardPolicy, PolicyError, TableView, first_available

LEAD_PREFERENCE = (Suit.DIAMONDS, Suit.HEARTS, Suit.SPADES, Suit.CLUBS)
CONTEST_PREFERENCE = (Suit.SPADES, Suit.CLUBS, Suit.HEARTS, Suit.DIAMONDS)
DISCARD_PREFERENCE = (Suit.SPADES, Suit.CLUBS, Suit.DIAMONDS, Suit.HEARTS)

# Seats this many diamonds short of the threshold are treated as close to it.
THRESHOLD_MARGIN = 2


class ThresholdWatchBot(CardPolicy):
    """Lead low; contest tricks carrying diamonds once any seat nears the threshold."""

    name = "ThresholdWatch"

    def choose_card(self, view: TableView) -> int:
        if view.is_leading():
            index = first_available(view, LEAD_PREFERENCE, highest=False)
        elif self._threshold_near(view) and view.diamonds_in_trick():
            index = view.highest_of(view.lead_suit())
            if index is None:
                index = first_available(view, CONTEST_PREFERENCE, highest=False)
        else:
            index = view.lowest_of(view.lead_suit())
            if index is None:
                index = first_available(view, DISCARD_PREFERENCE, highest=True)
        if index is None:
            raise PolicyError("No cards left to play.")
        return index

    @staticmethod
    def _threshold_near(view: TableView) -> bool:
        return any(won >= view.threshold - THRESHOLD_MARGIN for won in view.diamonds_won)
