"""Spawning, handshaking and reaping player processes."""

from __future__ import annotations

import logging
import signal
import subprocess
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from engine.errors import ProcessError, SignalReceived
from engine.protocol import HANDSHAKE, read_line, write_line

logger = logging.getLogger(__name__)

EXIT_GRACE_SECONDS = 2.0


@dataclass
class PlayerProcess:
    """One spawned player and the two pipe ends the hub holds."""

    seat: int
    executable: str
    process: subprocess.Popen

    def send(self, line: str) -> None:
        logger.debug("-> %d %s", self.seat, line)
        if self.process.stdin is not None:
            write_line(self.process.stdin, line)

    def receive(self) -> str:
        assert self.process.stdout is not None
        line = read_line(self.process.stdout)
        logger.debug("<- %d %s", self.seat, line)
        return line

    def is_alive(self) -> bool:
        return self.process.poll() is None

    def kill(self) -> None:
        if self.is_alive():
            self.process.kill()

    def close_pipes(self) -> None:
        for stream in (self.process.stdin, self.process.stdout):
            if stream is None:
                continue
            try:
                stream.close()
            except BrokenPipeError:
                # Unflushed bytes for a reader that already exited.
                pass


class Supervisor:
    """Owns every player process for the lifetime of one game.

    Use as a context manager. Leaving the block with an exception kills every
    child still running; leaving it normally gives each child a short grace
    period to exit after its pipes close. A hangup while the block is active
    kills the children and raises ``SignalReceived``.
    """

    def __init__(self, executables: Sequence[str], *, threshold: int, hand_size: int) -> None:
        self.executables = list(executables)
        self.threshold = threshold
        self.hand_size = hand_size
        self.players: List[PlayerProcess] = []
        self._previous_hup: Any = None
        self._spawning = False
        self._deferred_hangup: Optional[int] = None

    @property
    def num_players(self) -> int:
        return len(self.executables)

    def __enter__(self) -> "Supervisor":
        if hasattr(signal, "SIGHUP"):
            self._previous_hup = signal.signal(signal.SIGHUP, self.on_hangup)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if exc_type is None:
                self.release()
            else:
                self.terminate_all()
        finally:
            if hasattr(signal, "SIGHUP") and self._previous_hup is not None:
                signal.signal(signal.SIGHUP, self._previous_hup)
                self._previous_hup = None

    def start(self) -> List[PlayerProcess]:
        """Spawn each player in seat order and wait for its handshake byte."""
        for seat, executable in enumerate(self.executables):
            player = self._spawn(seat, executable)
            self._await_handshake(player)
        logger.info("All %d players ready", self.num_players)
        return list(self.players)

    def player_args(self, seat: int) -> List[str]:
        return [str(self.num_players), str(seat), str(self.threshold), str(self.hand_size)]

    def _spawn(self, seat: int, executable: str) -> PlayerProcess:
        """Start one player and add it to ``players``.

        A hangup arriving while the child is being created is held back until
        the child is registered, so the hangup handler always sees it.
        """
        self._spawning = True
        try:
            try:
                process = subprocess.Popen(
                    [executable, *self.player_args(seat)],
                    stdin=subprocess.PIPE,
                    stdout=subprocess.PIPE,
                    stderr=subprocess.DEVNULL,
                    close_fds=True,
                )
            except OSError as exc:
                raise ProcessError(f"Cannot start player {seat} ({executable}): {exc}") from exc
            player = PlayerProcess(seat=seat, executable=executable, process=process)
            self.players.append(player)
        finally:
            self._spawning = False
        if self._deferred_hangup is not None:
            self._stop(self._deferred_hangup)
        logger.info("Started player %d (%s) as pid %d", seat, executable, process.pid)
        return player

    def _await_handshake(self, player: PlayerProcess) -> None:
        assert player.process.stdout is not None
        byte = player.process.stdout.read(1)
        if byte != HANDSHAKE:
            raise ProcessError(f"Player {player.seat} sent {byte!r} instead of the handshake")

    def terminate_all(self) -> None:
        """Kill and reap every child that is still running."""
        for player in self.players:
            if player.is_alive():
                logger.warning("Killing player %d (pid %d)", player.seat, player.process.pid)
            player.kill()
        for player in self.players:
            player.close_pipes()
            player.process.wait()

    def release(self) -> None:
        """Close the pipes and reap children after a completed game."""
        for player in self.players:
            player.close_pipes()
        for player in self.players:
            try:
                player.process.wait(timeout=EXIT_GRACE_SECONDS)
            except subprocess.TimeoutExpired:
                logger.warning("Player %d did not exit; killing it", player.seat)
                player.kill()
                player.process.wait()

    def on_hangup(self, signum: int, frame: Optional[Any]) -> None:
        if self._spawning:
            self._deferred_hangup = signum
            return
        self._stop(signum)

    def _stop(self, signum: int) -> None:
        self._deferred_hangup = None
        logger.warning("Received signal %d; stopping all players", signum)
        for player in self.players:
            player.kill()
        raise SignalReceived("Exit due to signal")
