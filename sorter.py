"""
Connection Sorter

Owns the currently loaded contacts file and its review session.

Loading is all-or-nothing: a document that fails extraction leaves the
previously loaded records and session exactly as they were, and only
stores the error for display. reset() discards everything and returns
to the "nothing uploaded" state.
"""

from pathlib import Path
from typing import List, Optional, Union

from loguru import logger

from errors import DocumentReadError
from parser import ExtractionResult, InputRecord, extract_records
from review import Decision, ReviewSession, render_known_contacts
from settings import (
    ACTION_DONT_KNOW,
    ACTION_KNOW,
    ACTION_SKIP,
    ACTION_UNDO,
    SorterConfig,
)

WRONG_TYPE_MESSAGE = "Please upload a CSV file"
UNREADABLE_MESSAGE = "Failed to parse CSV file. Please ensure it's properly formatted."


def read_document(path: Union[str, Path], config: Optional[SorterConfig] = None) -> str:
    """
    Read and decode a contacts file.

    Args:
        path: Path to the uploaded file
        config: Sorter configuration (encoding and accepted extensions)

    Returns:
        Decoded document text

    Raises:
        DocumentReadError: If the file has the wrong extension, cannot be
            read, or cannot be decoded
    """
    config = config or SorterConfig()
    path = Path(path)

    if path.suffix.lower() not in config.accepted_extensions:
        raise DocumentReadError(WRONG_TYPE_MESSAGE)

    try:
        return path.read_bytes().decode(config.encoding)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Could not read {path}: {e}")
        raise DocumentReadError(UNREADABLE_MESSAGE) from e


class ConnectionSorter:
    """
    Upload state plus the active review session.

    Usage:
        sorter = ConnectionSorter()
        if sorter.load_file('connections.csv'):
            sorter.session.decide(Decision.KNOWN)
        else:
            print(sorter.error)
    """

    def __init__(self, config: Optional[SorterConfig] = None):
        """
        Initialize sorter.

        Args:
            config: Sorter configuration
        """
        self.config = config or SorterConfig()
        self.source_name: Optional[str] = None
        self.error: Optional[str] = None
        self.last_result: Optional[ExtractionResult] = None
        self.session = ReviewSession()

    @property
    def records(self) -> List[InputRecord]:
        return list(self.session.records)

    @property
    def has_document(self) -> bool:
        return self.session.is_loaded

    def load_text(self, text: str, source_name: str = '<text>') -> bool:
        """
        Extract records from text and start a new session on success.

        Args:
            text: Decoded document text
            source_name: Name used in logs and the summary

        Returns:
            True if the document was loaded
        """
        result = extract_records(text)
        self.last_result = result

        if not result.is_success:
            self.error = result.error.message
            logger.warning(f"Rejected {source_name}: {self.error}")
            logger.debug(f"Extraction error: {result.error.to_dict()}")
            return False

        self.session = ReviewSession.start(result.records)
        self.source_name = source_name
        self.error = None
        logger.info(f"Loaded {len(result.records)} contacts from {source_name}")
        return True

    def load_file(self, path: Union[str, Path]) -> bool:
        """
        Read, decode and load a contacts file.

        Returns:
            True if the document was loaded
        """
        try:
            text = read_document(path, self.config)
        except DocumentReadError as e:
            return self.accept_error(e)

        return self.load_text(text, source_name=Path(path).name)

    def accept_error(self, exc: Exception) -> bool:
        """
        Record a failure that happened before any text was available.

        The current session is kept as is.

        Returns:
            Always False, so callers can `return sorter.accept_error(e)`
        """
        self.error = exc.message if isinstance(exc, DocumentReadError) else UNREADABLE_MESSAGE
        logger.warning(f"Document not loaded: {exc}")
        return False

    def handle_action(self, action: str) -> bool:
        """
        Apply a named review action to the session.

        Args:
            action: One of know, dont_know, skip, undo

        Returns:
            True if the session changed
        """
        if action == ACTION_KNOW:
            return self.session.decide(Decision.KNOWN)
        if action == ACTION_DONT_KNOW:
            return self.session.decide(Decision.UNKNOWN)
        if action == ACTION_SKIP:
            return self.session.skip()
        if action == ACTION_UNDO:
            return self.session.undo()

        logger.debug(f"Unhandled action: {action}")
        return False

    def export_known(self) -> str:
        """CSV text of the contacts marked as known."""
        return render_known_contacts(self.session)

    def reset(self) -> None:
        """Discard the document, session and error."""
        logger.info("Sorter reset")
        self.source_name = None
        self.error = None
        self.last_result = None
        self.session = ReviewSession()
