"""
Line Tokenizer

Splits one line of delimited text into field strings.

Quoting rule:
A double quote toggles an "inside quotes" flag and is never emitted.
Commas inside a quoted span belong to the field; commas outside it
separate fields. There is no escape sequence for a literal quote, so
`"a ""b"" c"` reads as `a b c`. Files exported by the contacts tools we
target never need one.
"""

from typing import List

FIELD_SEPARATOR = ','
QUOTE_CHAR = '"'


def tokenize_line(line: str) -> List[str]:
    """
    Split a single record line into stripped fields.

    Args:
        line: Raw text of one line (no line break)

    Returns:
        List of fields; an empty line yields [''].
    """
    fields: List[str] = []
    current: List[str] = []
    in_quotes = False

    for char in line:
        if char == QUOTE_CHAR:
            in_quotes = not in_quotes
        elif char == FIELD_SEPARATOR and not in_quotes:
            fields.append(''.join(current).strip())
            current = []
        else:
            current.append(char)

    fields.append(''.join(current).strip())
    return fields
