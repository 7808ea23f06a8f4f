"""Core engine package shared by the hub and its players."""

__all__ = [
    "cards",
    "config",
    "deck",
    "errors",
    "mechanics",
    "protocol",
    "scoring",
    "trick",
]
