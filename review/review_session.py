"""
Review Session

Single-cursor state machine for sorting contacts one at a time.

States:
- not loaded: no records; every operation is a no-op
- ACTIVE:     cursor < number of records; decide/skip/undo allowed
- COMPLETE:   cursor == number of records; read-only until discarded

The log only ever holds decisions. A skip advances the cursor without
writing anything, so `cursor - len(log)` is the number of records skipped
so far. Undo steps the cursor back one record and drops the last log
entry only if that entry belongs to the record it stepped back onto.

Operations never raise on an invalid call. They return False and leave
the session untouched; callers check can_decide / can_undo / is_complete
to decide what to offer the user.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from loguru import logger

from parser.record_extractor import InputRecord
from .review_data import Decision, DecisionLogEntry


@dataclass
class ReviewSession:
    """
    Cursor, records and decision log for one pass over a contacts file.

    Usage:
        session = ReviewSession.start(result.records)
        session.decide(Decision.KNOWN)
        session.skip()
        session.undo()
        print(session.known_count, session.skipped_count)
    """
    records: Tuple[InputRecord, ...] = ()
    cursor: int = 0
    log: List[DecisionLogEntry] = field(default_factory=list)

    @classmethod
    def start(cls, records: Sequence[InputRecord]) -> 'ReviewSession':
        """Create a fresh session over the given records."""
        session = cls(records=tuple(records))
        logger.debug(f"Review session started with {session.total_records} records")
        return session

    # ------------------------------------------------------------------
    # State predicates
    # ------------------------------------------------------------------

    @property
    def total_records(self) -> int:
        return len(self.records)

    @property
    def is_loaded(self) -> bool:
        """Whether the session has any records."""
        return bool(self.records)

    @property
    def is_complete(self) -> bool:
        """Whether every record has been decided or skipped."""
        return self.is_loaded and self.cursor >= self.total_records

    @property
    def is_active(self) -> bool:
        return self.is_loaded and self.cursor < self.total_records

    @property
    def can_decide(self) -> bool:
        return self.is_active

    @property
    def can_skip(self) -> bool:
        return self.is_active

    @property
    def can_undo(self) -> bool:
        """Undo is only offered while reviewing and past the first record."""
        return self.is_active and self.cursor > 0

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def decide(self, decision: Decision) -> bool:
        """
        Record a decision for the current record and advance.

        Args:
            decision: Decision.KNOWN or Decision.UNKNOWN

        Returns:
            True if applied, False if the session is not active
        """
        if not self.can_decide:
            logger.debug(f"Ignored decide({decision.name}): session not active")
            return False

        record = self.records[self.cursor]
        self.log.append(DecisionLogEntry(record=record, decision=decision))
        self._advance()

        logger.debug(
            f"Decided {decision.name} for line {record.source_position} "
            f"({self.cursor}/{self.total_records})"
        )
        return True

    def skip(self) -> bool:
        """
        Advance past the current record without a decision.

        Returns:
            True if applied, False if the session is not active
        """
        if not self.can_skip:
            logger.debug("Ignored skip(): session not active")
            return False

        record = self.records[self.cursor]
        self._advance()

        logger.debug(
            f"Skipped line {record.source_position} "
            f"({self.cursor}/{self.total_records})"
        )
        return True

    def undo(self) -> bool:
        """
        Step back one record, removing its decision if it had one.

        Returns:
            True if applied, False if there is nothing to undo
        """
        if not self.can_undo:
            logger.debug(f"Ignored undo(): cursor={self.cursor}, complete={self.is_complete}")
            return False

        self.cursor -= 1
        record = self.records[self.cursor]

        if self.log and self.log[-1].refers_to(record):
            removed = self.log.pop()
            logger.debug(f"Undid {removed.decision.name} for line {record.source_position}")
        else:
            logger.debug(f"Undid skip of line {record.source_position}")

        return True

    def _advance(self) -> None:
        # Moving past the last index lands on total_records, which is COMPLETE
        self.cursor += 1
        if self.is_complete:
            logger.info(
                f"Review complete: {self.known_count} known, "
                f"{self.unknown_count} unknown, {self.skipped_count} skipped"
            )

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def current_record(self) -> Optional[InputRecord]:
        """Record under the cursor, or None when not active."""
        if not self.is_active:
            return None
        return self.records[self.cursor]

    @property
    def position(self) -> int:
        """1-based position of the current record ("n of N")."""
        return self.cursor + 1

    @property
    def known_count(self) -> int:
        return sum(1 for entry in self.log if entry.is_known)

    @property
    def unknown_count(self) -> int:
        return sum(1 for entry in self.log if entry.decision == Decision.UNKNOWN)

    @property
    def skipped_count(self) -> int:
        return self.cursor - len(self.log)

    @property
    def progress_fraction(self) -> Optional[float]:
        """Fraction shown on the progress bar; only defined while active."""
        if not self.is_active:
            return None
        return (self.cursor + 1) / self.total_records

    @property
    def known_records(self) -> List[InputRecord]:
        return [entry.record for entry in self.log if entry.is_known]

    @property
    def unknown_records(self) -> List[InputRecord]:
        return [entry.record for entry in self.log if entry.decision == Decision.UNKNOWN]

    def get_statistics(self) -> Dict[str, Any]:
        """Get session statistics."""
        progress = self.progress_fraction
        return {
            'total_records': self.total_records,
            'cursor': self.cursor,
            'known_count': self.known_count,
            'unknown_count': self.unknown_count,
            'skipped_count': self.skipped_count,
            'progress': round(progress, 3) if progress is not None else None,
            'is_complete': self.is_complete,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            'records': [r.to_dict() for r in self.records],
            'cursor': self.cursor,
            'log': [entry.to_dict() for entry in self.log],
            'statistics': self.get_statistics(),
        }
