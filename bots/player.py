"""Player-side game state, kept in step with the hub's broadcasts."""

from __future__ import annotations

import logging
from enum import Enum, auto
from typing import BinaryIO, Callable, Optional, TextIO

from engine.cards import Card, Hand, cards_label
from engine.config import PlayerSettings
from engine.errors import MalformedMessage
from engine.protocol import (
    DealtHand,
    GameOver,
    HubMessage,
    NewRound,
    Play,
    Played,
    decode_hub_message,
    encode,
    read_line,
)
from engine.scoring import ScoreBoard
from engine.trick import Trick

from .base import CardPolicy, PolicyError, TableView

logger = logging.getLogger(__name__)


class PlayerPhase(Enum):
    AWAITING_HAND = auto()
    IDLE = auto()
    IN_ROUND = auto()
    ROUND_COMPLETE = auto()
    GAME_OVER = auto()


class PlayerEngine:
    """Mirror the game from one seat and play that seat's cards.

    ``send`` receives each outgoing line (without terminator). ``report``, if
    given, gets one line per resolved trick.
    """

    def __init__(
        self,
        settings: PlayerSettings,
        policy: CardPolicy,
        send: Callable[[str], object],
        report: Optional[TextIO] = None,
    ) -> None:
        self.settings = settings
        self.policy = policy
        self.send = send
        self.report = report
        self.phase = PlayerPhase.AWAITING_HAND
        self.hand: Optional[Hand] = None
        self.trick: Optional[Trick] = None
        self.board = ScoreBoard(settings.num_players)
        self.turns_remaining = settings.hand_size
        self.last_play: Optional[Card] = None

    @property
    def seat(self) -> int:
        return self.settings.player_id

    @property
    def lead_player(self) -> Optional[int]:
        return self.trick.leader if self.trick is not None else None

    @property
    def player_count(self) -> int:
        return len(self.trick.plays) if self.trick is not None else 0

    def run(self, stream: BinaryIO) -> None:
        """Consume hub lines until GAMEOVER; end of stream raises PeerClosed."""
        while self.phase is not PlayerPhase.GAME_OVER:
            self.handle_line(read_line(stream))

    def handle_line(self, line: str) -> bool:
        logger.debug("<- %s", line)
        return self.handle(decode_hub_message(line))

    def handle(self, message: HubMessage) -> bool:
        """Apply one message; returns True once the game is over."""
        if isinstance(message, DealtHand):
            self._on_hand(message)
        elif isinstance(message, NewRound):
            self._on_new_round(message)
        elif isinstance(message, Played):
            self._on_played(message)
        elif isinstance(message, GameOver):
            self.phase = PlayerPhase.GAME_OVER
        else:
            raise MalformedMessage(f"Unexpected message {message!r}")
        return self.phase is PlayerPhase.GAME_OVER

    def view(self) -> TableView:
        assert self.hand is not None and self.trick is not None
        return TableView(
            seat=self.seat,
            num_players=self.settings.num_players,
            threshold=self.settings.threshold,
            leader=self.trick.leader,
            hand=self.hand.slots,
            plays=tuple(self.trick.plays),
            points=tuple(self.board.points),
            diamonds_won=tuple(self.board.diamonds_won),
        )

    def final_scores(self):
        return self.board.final_scores(self.settings.threshold)

    def _on_hand(self, message: DealtHand) -> None:
        self._require(PlayerPhase.AWAITING_HAND, "HAND")
        if len(message.cards) != self.settings.hand_size:
            raise MalformedMessage(
                f"Dealt {len(message.cards)} cards; expected {self.settings.hand_size}"
            )
        self.hand = Hand(message.cards)
        self.phase = PlayerPhase.IDLE

    def _on_new_round(self, message: NewRound) -> None:
        self._require((PlayerPhase.IDLE, PlayerPhase.ROUND_COMPLETE), "NEWROUND")
        if self.turns_remaining == 0:
            raise MalformedMessage("NEWROUND after the last trick")
        if message.lead >= self.settings.num_players:
            raise MalformedMessage(f"Lead player {message.lead} is not a seat")
        self.trick = Trick(leader=message.lead, num_players=self.settings.num_players)
        self.phase = PlayerPhase.IN_ROUND
        if message.lead == self.seat:
            self._play_turn()

    def _on_played(self, message: Played) -> None:
        self._require(PlayerPhase.IN_ROUND, "PLAYED")
        assert self.trick is not None
        expected = self.trick.next_player()
        if message.player != expected or message.player == self.seat:
            raise MalformedMessage(f"PLAYED by seat {message.player}; expected seat {expected}")
        self.trick.add_play(message.player, message.card)
        if self.trick.is_full():
            self._end_of_round()
        elif self.trick.next_player() == self.seat:
            self._play_turn()

    def _play_turn(self) -> None:
        assert self.hand is not None and self.trick is not None
        index = self.policy.choose_card(self.view())
        if not self.hand.is_unplayed(index):
            raise PolicyError(f"{self.policy.name} chose slot {index}, which holds no playable card")
        card = self.hand.mark_played(index)
        line = encode(Play(card))
        logger.debug("-> %s", line)
        self.send(line)
        self.trick.add_play(self.seat, card)
        self.last_play = card
        if self.trick.is_full():
            self._end_of_round()

    def _end_of_round(self) -> None:
        assert self.trick is not None
        if self.report is not None:
            print(
                f"Lead player={self.trick.leader}: {cards_label(self.trick.cards())}",
                file=self.report,
                flush=True,
            )
        winner = self.board.record(self.trick)
        logger.info("Trick won by player %d", winner)
        self.turns_remaining -= 1
        self.phase = PlayerPhase.ROUND_COMPLETE

    def _require(self, allowed, keyword: str) -> None:
        phases = allowed if isinstance(allowed, tuple) else (allowed,)
        if self.phase not in phases:
            raise MalformedMessage(f"{keyword} not expected while {self.phase.name}")
