"""
Column Resolver

Maps a header row onto the three columns the sorter needs: first name,
last name and company. Contact exports name these columns inconsistently
("First Name", "first_name", "Given name (first)", "Organization",
"Current Employer", ...), so matching is by keyword rather than by exact
header text.

Matching rules, evaluated per cell in this order:
1. first name  - contains "first" and "name"
2. last name   - contains "last" and "name"
3. company     - contains "company", "organization" or "employer"

A cell is claimed by the first rule it satisfies. Cells are scanned left
to right and a later match for a role replaces an earlier one, so with
two "Company" columns the rightmost is used.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

from loguru import logger


FIRST_NAME_KEYWORDS = ('first', 'name')
LAST_NAME_KEYWORDS = ('last', 'name')
COMPANY_KEYWORDS = ('company', 'organization', 'employer')

# Display names, in the order they are reported when missing
ROLE_FIRST_NAME = 'First Name'
ROLE_LAST_NAME = 'Last Name'
ROLE_COMPANY = 'Company'
REQUIRED_ROLES = (ROLE_FIRST_NAME, ROLE_LAST_NAME, ROLE_COMPANY)


@dataclass(frozen=True)
class ColumnMapping:
    """Zero-based positions of the required columns in a header row."""
    first_name: int
    last_name: int
    company: int

    def to_dict(self) -> dict:
        return {
            'first_name': self.first_name,
            'last_name': self.last_name,
            'company': self.company,
        }


def _normalize_header(header: str) -> str:
    return header.lower().strip()


def _scan_headers(headers: Sequence[str]) -> dict:
    """
    Single left-to-right pass assigning header positions to roles.

    Returns:
        Dict of role display name -> position, only for roles that matched
    """
    found = {}

    for index, header in enumerate(headers):
        normalized = _normalize_header(header)

        if all(k in normalized for k in FIRST_NAME_KEYWORDS):
            found[ROLE_FIRST_NAME] = index
        elif all(k in normalized for k in LAST_NAME_KEYWORDS):
            found[ROLE_LAST_NAME] = index
        elif any(k in normalized for k in COMPANY_KEYWORDS):
            found[ROLE_COMPANY] = index

    return found


def resolve_columns(headers: Sequence[str]) -> Optional[ColumnMapping]:
    """
    Locate the first name, last name and company columns.

    Args:
        headers: Tokenized header row

    Returns:
        ColumnMapping, or None if any of the three roles is not found
    """
    found = _scan_headers(headers)

    if any(role not in found for role in REQUIRED_ROLES):
        logger.debug(f"Unresolved header roles in {list(headers)}: {missing_roles(headers)}")
        return None

    mapping = ColumnMapping(
        first_name=found[ROLE_FIRST_NAME],
        last_name=found[ROLE_LAST_NAME],
        company=found[ROLE_COMPANY],
    )
    logger.debug(f"Resolved columns: {mapping.to_dict()}")
    return mapping


def missing_roles(headers: Sequence[str]) -> List[str]:
    """Display names of required roles with no matching header cell."""
    found = _scan_headers(headers)
    return [role for role in REQUIRED_ROLES if role not in found]
