"""Player programs and card policies."""

from typing import Dict, Optional, Type

from .base import CardPolicy
from .lead_high import LeadHighBot
from .random_bot import RandomBot
from .threshold_watch import ThresholdWatchBot

POLICY_REGISTRY: Dict[str, Type[CardPolicy]] = {
    "lead-high": LeadHighBot,
    "threshold-watch": ThresholdWatchBot,
    "random": RandomBot,
}


def make_policy(name: str, seed: Optional[int] = None) -> CardPolicy:
    policy_type = POLICY_REGISTRY[name]
    if policy_type is RandomBot:
        return RandomBot(seed)
    return policy_type()


__all__ = ["LeadHighBot", "ThresholdWatchBot", "RandomBot", "POLICY_REGISTRY", "make_policy"]
