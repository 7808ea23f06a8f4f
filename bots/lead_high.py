"""Policy that leads strong and sheds diamonds when it cannot follow."""

from __future__ import annotations

from engine.cards import Suit

from .base import CardPolicy, PolicyError, TableView, first_available

LEAD_PREFERENCE = (Suit.SPADES, Suit.CLUBS, Suit.DIAMONDS, Suit.HEARTS)
DISCARD_PREFERENCE = (Suit.DIAMONDS, Suit.HEARTS, Suit.SPADES, Suit.CLUBS)


class LeadHighBot(CardPolicy):
    """Lead the highest card by suit preference; follow as low as possible.

    When void in the lead suit it throws its highest diamond first, handing
    diamonds to whoever is winning the trick.
    """

    name = "LeadHigh"

    def choose_card(self, view: TableView) -> int:
        if view.is_leading():
            index = first_available(view, LEAD_PREFERENCE, highest=True)
        else:
            index = view.lowest_of(view.lead_suit())
            if index is None:
                index = first_available(view, DISCARD_PREFERENCE, highest=True)
        if index is None:
            raise PolicyError("No cards left to play.")
        return index
