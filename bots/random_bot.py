"""Random baseline policy."""

from __future__ import annotations

import random
from typing import Optional

from .base import CardPolicy, PolicyError, TableView


class RandomBot(CardPolicy):
    name = "Random"

    def __init__(self, seed: Optional[int] = None) -> None:
        self._rng = random.Random(seed)

    def choose_card(self, view: TableView) -> int:
        legal = view.legal_indices()
        if not legal:
            raise PolicyError("No cards left to play.")
        return self._rng.choice(legal)
