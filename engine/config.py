"""Validated settings for the hub and player programs."""

from __future__ import annotations

import argparse
import logging
import os
import re
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator

from .errors import ConfigError, UsageError

MIN_THRESHOLD = 2
MIN_PLAYERS = 2

_DECIMAL = re.compile(r"[+-]?[0-9]+")

SettingsT = TypeVar("SettingsT", bound=BaseModel)


def decimal(text: str) -> Optional[int]:
    """Return the integer spelled by ``text`` or None if it is not plain decimal."""
    if not _DECIMAL.fullmatch(text):
        return None
    try:
        return int(text)
    except ValueError:
        # More digits than int() will convert.
        return None


class HubSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: int = Field(..., ge=MIN_THRESHOLD, description="Diamonds needed to count in a seat's favour.")
    deck_path: Path = Field(..., description="Deck file to deal from.")
    executables: List[str] = Field(..., min_length=1, description="Player programs, one per seat.")

    @property
    def num_players(self) -> int:
        return len(self.executables)


class PlayerSettings(BaseModel):
    model_config = ConfigDict(frozen=True)

    num_players: int = Field(..., ge=MIN_PLAYERS)
    player_id: int = Field(..., ge=0)
    threshold: int = Field(..., ge=MIN_THRESHOLD)
    hand_size: int = Field(..., ge=1)

    @field_validator("player_id")
    @classmethod
    def ensure_seat_exists(cls, value: int, info: ValidationInfo) -> int:
        num_players = info.data.get("num_players")
        if num_players is not None and value >= num_players:
            raise ValueError(f"Seat {value} does not exist in a {num_players}-player game.")
        return value


def build_settings(model: Type[SettingsT], **values) -> SettingsT:
    """Validate ``values`` into ``model``; the first failing field becomes a ConfigError."""
    try:
        return model(**values)
    except ValidationError as exc:
        errors: Sequence[dict] = exc.errors()
        setting = str(errors[0]["loc"][0]) if errors and errors[0]["loc"] else "settings"
        raise ConfigError(setting, errors[0]["msg"] if errors else str(exc)) from exc


LOG_LEVEL_ENV = "TRICKHUB_LOG_LEVEL"


def configure_logging(stream=None) -> None:
    """Send log records to stderr at the level named by ``TRICKHUB_LOG_LEVEL``."""
    name = os.environ.get(LOG_LEVEL_ENV, "ERROR").upper()
    level = logging.getLevelName(name)
    logging.basicConfig(
        level=level if isinstance(level, int) else logging.ERROR,
        format="%(name)s %(levelname)s: %(message)s",
        stream=stream,
    )


class UsageParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad invocations as UsageError."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(message)
