"""
Contact Review System

This package provides the one-at-a-time review of contacts:
decisions, the cursor-based review session with undo, and export
of the contacts marked as known.
"""

from .review_data import (
    Decision,
    DecisionLogEntry,
)
from .review_session import (
    ReviewSession,
)
from .csv_export import (
    EXPORT_HEADER,
    DEFAULT_EXPORT_FILENAME,
    ExportConfig,
    KnownContactsExporter,
    render_known_contacts,
)

__all__ = [
    'Decision',
    'DecisionLogEntry',
    'ReviewSession',
    'EXPORT_HEADER',
    'DEFAULT_EXPORT_FILENAME',
    'ExportConfig',
    'KnownContactsExporter',
    'render_known_contacts',
]
