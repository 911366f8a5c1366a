"""
Parser Package

This package turns the raw text of a contacts export into records.
It includes:
- Line tokenizing with double-quote spans
- Header column resolution by keyword
- Record extraction with structured failures

Usage:
    from parser import extract_records

    result = extract_records(text)
    if result.is_success:
        for record in result.records:
            print(record.display_name, record.company)
    else:
        print(result.error.message)
"""

from .tokenizer import tokenize_line

from .column_resolver import (
    ColumnMapping,
    REQUIRED_ROLES,
    resolve_columns,
    missing_roles,
)

from .record_extractor import (
    InputRecord,
    ExtractionError,
    ExtractionErrorKind,
    ExtractionResult,
    extract_records,
    strip_edge_quotes,
)

__all__ = [
    # Tokenizer
    'tokenize_line',

    # Column Resolver
    'ColumnMapping',
    'REQUIRED_ROLES',
    'resolve_columns',
    'missing_roles',

    # Record Extractor
    'InputRecord',
    'ExtractionError',
    'ExtractionErrorKind',
    'ExtractionResult',
    'extract_records',
    'strip_edge_quotes',
]
