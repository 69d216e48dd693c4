"""Base types for orphan rules."""

from dataclasses import dataclass
from enum import Enum


class OrphanState(str, Enum):
    EXCLUDED = "excluded"  # on the source's allow-list
    REQUIRED_ELSEWHERE = "required_elsewhere"  # another package depends on it
    RETAINED = "retained"  # the source rule says it is wanted (e.g. exposes a CLI)
    ORPHAN = "orphan"
    NO_SIGNAL = "no_signal"  # the source could not tell; never reported


@dataclass
class Verdict:
    """Outcome of classifying one installed package."""

    state: OrphanState
    rule_id: str = ""
    reason: str = ""  # human-readable, set for ORPHAN
