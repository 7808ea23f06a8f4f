"""In-process arena: the hub's coordinator against local player engines."""

from __future__ import annotations

import argparse
import sys
from collections import deque
from dataclasses import dataclass
from typing import Deque, Iterable, List, Optional, Sequence, TextIO

from engine.cards import Card
from engine.config import PlayerSettings
from engine.deck import hand_size_for, load_deck, shuffled_deck
from engine.errors import PeerClosed
from engine.trick import Trick
from hub.coordinator import Coordinator

from . import POLICY_REGISTRY, make_policy
from .base import CardPolicy
from .player import PlayerEngine


class LocalSeat:
    """Line channel that feeds hub lines straight into a PlayerEngine.

    Lines the engine emits queue up until the coordinator receives them. Once
    the engine has seen GAMEOVER further lines are dropped, as writes to an
    exited player would be.
    """

    def __init__(self, settings: PlayerSettings, policy: CardPolicy) -> None:
        self.outbox: Deque[str] = deque()
        self.sent: List[str] = []
        self.finished = False
        self.engine = PlayerEngine(settings, policy, send=self.outbox.append)

    def send(self, line: str) -> None:
        if self.finished:
            return
        self.sent.append(line)
        self.finished = self.engine.handle_line(line)

    def receive(self) -> str:
        if not self.outbox:
            raise PeerClosed(f"Player {self.engine.seat} has nothing to say")
        return self.outbox.popleft()


@dataclass
class MatchResult:
    scores: List[int]
    points: List[int]
    diamonds_won: List[int]
    winners: List[int]
    tricks: List[Trick]
    mirrored_scores: List[List[int]]


def run_match(
    policies: Sequence[CardPolicy],
    deck: Sequence[Card],
    threshold: int,
    *,
    out: Optional[TextIO] = None,
) -> MatchResult:
    num_players = len(policies)
    hand_size = hand_size_for(deck, num_players)
    seats = []
    for seat, policy in enumerate(policies):
        settings = PlayerSettings(
            num_players=num_players,
            player_id=seat,
            threshold=threshold,
            hand_size=hand_size,
        )
        seats.append(LocalSeat(settings, policy))

    record = Coordinator(deck, seats, threshold, out=out).run()
    return MatchResult(
        scores=record.scores,
        points=record.points,
        diamonds_won=record.diamonds_won,
        winners=record.winners,
        tricks=record.tricks,
        mirrored_scores=[seat.engine.final_scores() for seat in seats],
    )


def main(argv: Iterable[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Run a game between in-process policies.")
    parser.add_argument(
        "--bots",
        nargs="+",
        default=["lead-high", "threshold-watch"],
        choices=POLICY_REGISTRY.keys(),
        help="Policy for each seat, in seat order.",
    )
    parser.add_argument("--threshold", type=int, default=2)
    parser.add_argument("--deck", help="Deck file; a shuffled full deck is used if omitted.")
    parser.add_argument("--seed", type=int, default=42)
    args = parser.parse_args(None if argv is None else list(argv))

    if len(args.bots) < 2:
        parser.error("At least two bots are required.")
    if args.threshold < 2:
        parser.error("Threshold must be at least 2.")
    deck = load_deck(args.deck) if args.deck else shuffled_deck(args.seed)
    if len(deck) < len(args.bots):
        parser.error("Not enough cards for every bot.")

    policies = [make_policy(name, seed=args.seed + seat) for seat, name in enumerate(args.bots)]
    result = run_match(policies, deck, args.threshold, out=sys.stdout)
    for seat, name in enumerate(args.bots):
        print(
            f"{seat} {name}: points={result.points[seat]} "
            f"diamonds={result.diamonds_won[seat]} score={result.scores[seat]}"
        )


if __name__ == "__main__":
    main()
