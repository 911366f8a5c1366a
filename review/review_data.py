"""
Review Data Structures

Value types recorded while sorting contacts: the decision made for a
record and the log entry tying the two together.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict

from parser.record_extractor import InputRecord


class Decision(Enum):
    """Decision made by the reviewer for one contact."""

    KNOWN = auto()        # Reviewer knows this contact
    UNKNOWN = auto()      # Reviewer does not know this contact

    @property
    def display_name(self) -> str:
        """Human-readable name."""
        names = {
            Decision.KNOWN: "Known",
            Decision.UNKNOWN: "Unknown",
        }
        return names.get(self, self.name)


@dataclass(frozen=True)
class DecisionLogEntry:
    """
    A decision attached to exactly one record.
    """
    record: InputRecord
    decision: Decision

    @property
    def is_known(self) -> bool:
        return self.decision == Decision.KNOWN

    def refers_to(self, record: InputRecord) -> bool:
        """Whether this entry was made for the given record."""
        return self.record.source_position == record.source_position

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'record': self.record.to_dict(),
            'decision': self.decision.name,
        }
