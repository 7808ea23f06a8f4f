"""Failure kinds shared by the hub and the player programs.

Every one of these is fatal: the program that raises it prints one diagnostic
line and exits with the status its own exit table assigns to the kind.
"""

from __future__ import annotations


class GameError(RuntimeError):
    """Base class for fatal game conditions."""


class UsageError(GameError):
    """Raised when a program is invoked with the wrong argument shape."""


class ConfigError(GameError):
    """Raised when a setting is out of range.

    ``setting`` names the offending field so callers can pick an exit status.
    """

    def __init__(self, setting: str, message: str = "") -> None:
        super().__init__(message or f"Invalid {setting}")
        self.setting = setting


class DeckError(ConfigError):
    """Raised when a deck file cannot be read or is badly formed."""

    def __init__(self, message: str = "Deck error") -> None:
        super().__init__("deck", message)


class ProcessError(GameError):
    """Raised when a player cannot be spawned or fails its handshake."""


class PeerClosed(GameError):
    """Raised when a peer's stream ends before a full line arrives."""


class MalformedMessage(GameError):
    """Raised when a line breaks the protocol grammar or a field check."""


class InvalidCardChoice(GameError):
    """Raised when a player names a card it may not play."""


class SignalReceived(GameError):
    """Raised when the hub is interrupted by a hangup signal."""
