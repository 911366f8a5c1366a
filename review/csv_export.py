"""
Known Contacts Export

Renders the contacts marked as known back into delimited text.

Every field is wrapped in double quotes as-is. Quotes inside a value are
not doubled, which matches the files this tool has always produced and
the tokenizer that reads them back.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Iterable, List, Optional, Union

from loguru import logger

from .review_data import DecisionLogEntry
from .review_session import ReviewSession

EXPORT_HEADER = 'First Name,Last Name,Company'
DEFAULT_EXPORT_FILENAME = 'known_contacts.csv'


def _quote(value: str) -> str:
    return f'"{value}"'


def render_known_contacts(
    source: Union[ReviewSession, Iterable[DecisionLogEntry]],
) -> str:
    """
    Render known contacts as CSV text.

    Args:
        source: A ReviewSession or its decision log

    Returns:
        Header line followed by one quoted line per known contact,
        joined with '\\n' and without a trailing newline
    """
    log = source.log if isinstance(source, ReviewSession) else source

    lines = [EXPORT_HEADER]
    for entry in log:
        if not entry.is_known:
            continue
        record = entry.record
        lines.append(','.join(
            _quote(value)
            for value in (record.first_name, record.last_name, record.company)
        ))

    return '\n'.join(lines)


@dataclass
class ExportConfig:
    """Configuration for export."""

    filename: str = DEFAULT_EXPORT_FILENAME
    encoding: str = 'utf-8'
    overwrite: bool = False


class KnownContactsExporter:
    """
    Write the known contacts of a finished session to disk.

    Existing files are never replaced unless overwrite is set; the next
    free name (known_contacts_2.csv, known_contacts_3.csv, ...) is used.

    Usage:
        exporter = KnownContactsExporter()
        path = exporter.export(session, 'out/')
    """

    def __init__(self, config: Optional[ExportConfig] = None):
        """
        Initialize exporter.

        Args:
            config: Export configuration
        """
        self.config = config or ExportConfig()

    def resolve_path(self, output_path: str) -> str:
        """
        Directories get the configured file name appended.

        A path is a directory if it exists as one, ends with a separator,
        or has no file extension.
        """
        output_path = str(output_path)
        is_dir = (
            os.path.isdir(output_path)
            or output_path.endswith(('/', os.sep))
            or not os.path.splitext(output_path)[1]
        )
        if is_dir:
            return os.path.join(output_path, self.config.filename)
        return output_path

    def next_free_path(self, path: str) -> str:
        """path itself, or path with a numeric suffix if it already exists."""
        if self.config.overwrite or not os.path.exists(path):
            return path

        stem, ext = os.path.splitext(path)
        counter = 2
        while os.path.exists(f"{stem}_{counter}{ext}"):
            counter += 1
        return f"{stem}_{counter}{ext}"

    def export(self, session: ReviewSession, output_path: str) -> str:
        """
        Export known contacts.

        Args:
            session: Session whose known contacts to write
            output_path: Output file path or directory

        Returns:
            Path to exported file
        """
        path = self.resolve_path(output_path)
        os.makedirs(os.path.dirname(path) or '.', exist_ok=True)

        free_path = self.next_free_path(path)
        if free_path != path:
            logger.info(f"{path} already exists, writing {free_path} instead")
            path = free_path

        content = render_known_contacts(session)

        with open(path, 'w', encoding=self.config.encoding, newline='') as f:
            f.write(content)

        logger.info(f"Exported {session.known_count} known contacts to {path}")
        return path

    def preview(self, session: ReviewSession, limit: int = 5) -> List[str]:
        """First few lines of the export, header included."""
        return render_known_contacts(session).split('\n')[:limit + 1]
