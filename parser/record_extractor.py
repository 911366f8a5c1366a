"""
Record Extractor

Turns the full text of a contacts export into an ordered list of
InputRecord objects.

Pipeline:
1. Split into lines and drop blank ones
2. Tokenize the first remaining line as the header and resolve columns
3. Tokenize every following line and pick out the three resolved fields
4. Strip one stray quote from each end of every value
5. Keep rows that have a first or last name

Failures are returned as an ExtractionError on the result rather than
raised, so the caller can show the message and keep its previous state.
"""

import re
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, Dict, List, Optional, Sequence

from loguru import logger

from .column_resolver import ColumnMapping, missing_roles, resolve_columns
from .tokenizer import tokenize_line


# One quote (single or double) at either end of an already-tokenized value
_EDGE_QUOTES = re.compile(r'^["\']|["\']$')

EMPTY_DOCUMENT_MESSAGE = "The CSV file is empty"
MISSING_COLUMNS_MESSAGE = "Could not find required columns: First Name, Last Name, and Company"
NO_VALID_RECORDS_MESSAGE = "No valid connections found in the CSV"


@dataclass(frozen=True)
class InputRecord:
    """
    One contact row taken from the source document.

    source_position is the index of the row in the blank-filtered line
    list (header = 0), so it stays stable even when rows are dropped.
    """
    first_name: str
    last_name: str
    company: str
    source_position: int

    @property
    def display_name(self) -> str:
        """Name as shown on the review card."""
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'first_name': self.first_name,
            'last_name': self.last_name,
            'company': self.company,
            'source_position': self.source_position,
        }


class ExtractionErrorKind(Enum):
    """Why a document was rejected."""

    EMPTY_DOCUMENT = auto()      # No non-blank lines
    MISSING_COLUMNS = auto()     # Header lacks a required column
    NO_VALID_RECORDS = auto()    # Every data row was dropped


@dataclass
class ExtractionError:
    """A rejected document, with the message to show the user."""
    kind: ExtractionErrorKind
    message: str
    missing_columns: List[str] = field(default_factory=list)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.name,
            'message': self.message,
            'missing_columns': self.missing_columns,
        }


@dataclass
class ExtractionResult:
    """
    Outcome of extracting records from a document.

    Exactly one of `records` (non-empty) or `error` is meaningful.
    """
    records: List[InputRecord] = field(default_factory=list)
    error: Optional[ExtractionError] = None
    header: List[str] = field(default_factory=list)
    columns: Optional[ColumnMapping] = None
    dropped_rows: int = 0

    @property
    def is_success(self) -> bool:
        return self.error is None

    @classmethod
    def failure(
        cls,
        kind: ExtractionErrorKind,
        message: str,
        missing_columns: Optional[List[str]] = None,
        header: Optional[List[str]] = None,
    ) -> 'ExtractionResult':
        return cls(
            error=ExtractionError(kind, message, list(missing_columns or [])),
            header=list(header or []),
        )


def strip_edge_quotes(value: str) -> str:
    """Remove one leading and one trailing ' or " left over after tokenizing."""
    return _EDGE_QUOTES.sub('', value)


def _field_at(values: Sequence[str], index: int) -> str:
    # Short rows leave trailing columns empty
    if 0 <= index < len(values):
        return values[index].strip()
    return ''


def extract_records(text: str) -> ExtractionResult:
    """
    Extract contact records from document text.

    Args:
        text: Fully decoded document text

    Returns:
        ExtractionResult with records on success, or an error
    """
    lines = [line for line in text.split('\n') if line.strip()]

    if not lines:
        logger.warning("Rejected document: no non-blank lines")
        return ExtractionResult.failure(
            ExtractionErrorKind.EMPTY_DOCUMENT, EMPTY_DOCUMENT_MESSAGE
        )

    header = tokenize_line(lines[0])
    columns = resolve_columns(header)

    if columns is None:
        missing = missing_roles(header)
        logger.warning(f"Rejected document: missing columns {missing} in header {header}")
        return ExtractionResult.failure(
            ExtractionErrorKind.MISSING_COLUMNS,
            MISSING_COLUMNS_MESSAGE,
            missing_columns=missing,
            header=header,
        )

    records: List[InputRecord] = []
    dropped = 0

    for position in range(1, len(lines)):
        values = tokenize_line(lines[position])

        first_name = strip_edge_quotes(_field_at(values, columns.first_name))
        last_name = strip_edge_quotes(_field_at(values, columns.last_name))
        company = strip_edge_quotes(_field_at(values, columns.company))

        if not (first_name or last_name):
            dropped += 1
            logger.debug(f"Dropped line {position}: no first or last name")
            continue

        records.append(InputRecord(
            first_name=first_name,
            last_name=last_name,
            company=company,
            source_position=position,
        ))

    if not records:
        logger.warning(f"Rejected document: none of {len(lines) - 1} data rows had a name")
        result = ExtractionResult.failure(
            ExtractionErrorKind.NO_VALID_RECORDS,
            NO_VALID_RECORDS_MESSAGE,
            header=header,
        )
        result.columns = columns
        result.dropped_rows = dropped
        return result

    logger.info(f"Extracted {len(records)} records ({dropped} rows dropped)")

    return ExtractionResult(
        records=records,
        header=header,
        columns=columns,
        dropped_rows=dropped,
    )
