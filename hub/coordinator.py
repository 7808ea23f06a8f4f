"""Authoritative game flow run by the hub."""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import List, Optional, Protocol, Sequence, TextIO

from engine.cards import Card, Hand, cards_label
from engine.deck import deal, hand_size_for
from engine.errors import InvalidCardChoice
from engine.mechanics import is_legal
from engine.protocol import DealtHand, GameOver, NewRound, Played, decode_play, encode
from engine.scoring import ScoreBoard, format_scores
from engine.trick import Trick

logger = logging.getLogger(__name__)


class PlayerChannel(Protocol):
    """The hub's line connection to one seat."""

    def send(self, line: str) -> None:
        ...

    def receive(self) -> str:
        ...


class CoordinatorPhase(Enum):
    NOT_STARTED = auto()
    DEALING_HAND = auto()
    TRICK_IN_PROGRESS = auto()
    GAME_OVER = auto()


@dataclass
class Seat:
    index: int
    channel: PlayerChannel
    hand: Hand


@dataclass
class GameRecord:
    scores: List[int]
    points: List[int]
    diamonds_won: List[int]
    winners: List[int] = field(default_factory=list)
    tricks: List[Trick] = field(default_factory=list)


class Coordinator:
    """Deal, run every trick, and score one game over connected seats.

    Any malformed reply, closed seat, or illegal card propagates out of
    ``run`` and ends the game; nothing is retried.
    """

    def __init__(
        self,
        deck: Sequence[Card],
        channels: Sequence[PlayerChannel],
        threshold: int,
        out: Optional[TextIO] = None,
    ) -> None:
        if len(deck) < len(channels):
            raise ValueError("Every seat needs at least one card.")
        self.deck = list(deck)
        self.channels = list(channels)
        self.threshold = threshold
        self.out = out if out is not None else sys.stdout
        self.num_players = len(self.channels)
        self.hand_size = hand_size_for(self.deck, self.num_players)
        self.phase = CoordinatorPhase.NOT_STARTED
        self.lead_player = 0
        self.seats: List[Seat] = []
        self.board = ScoreBoard(self.num_players)
        self.trick: Optional[Trick] = None
        self.winners: List[int] = []
        self.history: List[Trick] = []

    def run(self) -> GameRecord:
        self.deal_hands()
        for _ in range(self.hand_size):
            self.play_trick()
        return self.finish()

    def deal_hands(self) -> None:
        self._ensure_phase(CoordinatorPhase.NOT_STARTED)
        self.phase = CoordinatorPhase.DEALING_HAND
        for index, (channel, cards) in enumerate(zip(self.channels, deal(self.deck, self.num_players))):
            self.seats.append(Seat(index=index, channel=channel, hand=Hand(cards)))
            channel.send(encode(DealtHand(tuple(cards))))
        self.phase = CoordinatorPhase.TRICK_IN_PROGRESS

    def play_trick(self) -> int:
        self._ensure_phase(CoordinatorPhase.TRICK_IN_PROGRESS)
        if self.board.tricks_recorded >= self.hand_size:
            raise RuntimeError("Every trick has already been played.")
        self._broadcast(encode(NewRound(self.lead_player)))
        self._print(f"Lead player={self.lead_player}")

        trick = Trick(leader=self.lead_player, num_players=self.num_players)
        self.trick = trick
        while not trick.is_full():
            seat = self.seats[trick.next_player()]
            card = self._collect_play(seat, trick)
            trick.add_play(seat.index, card)
            self._broadcast(encode(Played(seat.index, card)), skip=seat.index)

        self._print("Cards=" + cards_label(trick.cards()))
        winner = self.board.record(trick)
        self.winners.append(winner)
        self.history.append(trick)
        logger.info("Trick %d won by player %d", len(self.winners), winner)
        self.lead_player = winner
        self.trick = None
        return winner

    def finish(self) -> GameRecord:
        self._ensure_phase(CoordinatorPhase.TRICK_IN_PROGRESS)
        self._broadcast(encode(GameOver()))
        self.phase = CoordinatorPhase.GAME_OVER
        scores = self.board.final_scores(self.threshold)
        self._print(format_scores(scores))
        return GameRecord(
            scores=scores,
            points=list(self.board.points),
            diamonds_won=list(self.board.diamonds_won),
            winners=list(self.winners),
            tricks=list(self.history),
        )

    def _collect_play(self, seat: Seat, trick: Trick) -> Card:
        card = decode_play(seat.channel.receive()).card
        if not is_legal(seat.hand, trick, card):
            raise InvalidCardChoice(f"Player {seat.index} may not play {card.code}")
        index = seat.hand.find(card)
        assert index is not None
        return seat.hand.mark_played(index)

    def _broadcast(self, line: str, skip: Optional[int] = None) -> None:
        for seat in self.seats:
            if seat.index != skip:
                seat.channel.send(line)

    def _print(self, text: str) -> None:
        print(text, file=self.out, flush=True)

    def _ensure_phase(self, expected: CoordinatorPhase) -> None:
        if self.phase != expected:
            raise RuntimeError(f"Action not allowed in phase {self.phase}. Expected {expected}.")
