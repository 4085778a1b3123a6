"""Default row format: name, age, comma-separated list of numbers."""

import re
from typing import Any, Dict, List, Optional

from bulk_ingest.jobs.errors import MappingFailure
from bulk_ingest.mapping.base import ColumnError, MappingStrategy, Row, ValidationResult

NAME_COL = 0
AGE_COL = 1
NUMS_COL = 2

MIN_AGE = 0
MAX_AGE = 150

_LEADING_INT = re.compile(r"^\s*([+-]?[0-9]+)")


def parse_int(value: Any) -> Optional[int]:
    """Parse the leading integer of a cell, or None if there is none.

    Lenient like spreadsheet users expect: " 42", "42 years" and 42.9 all
    give 42.
    """
    if value is None or isinstance(value, bool):
        return None
    match = _LEADING_INT.match(str(value))
    if match is None:
        return None
    return int(match.group(1))


def parse_and_sort(value: Any) -> List[int]:
    """Split on commas, keep the tokens that parse as integers, sort ascending."""
    if value is None:
        raise MappingFailure("Missing number list")
    nums = [parse_int(token.strip()) for token in str(value).split(",")]
    return sorted(n for n in nums if n is not None)


def _cell(row: Row, index: int) -> Any:
    return row[index] if len(row) > index else None


class DefaultMapping(MappingStrategy):
    format_key = "default"

    def validate(self, row: Row) -> ValidationResult:
        errors = []

        name = _cell(row, NAME_COL)
        if not isinstance(name, str) or not name:
            errors.append(ColumnError(NAME_COL, "Name must be a non-empty string"))

        age = parse_int(_cell(row, AGE_COL))
        if age is None or not MIN_AGE <= age <= MAX_AGE:
            errors.append(
                ColumnError(AGE_COL, f"Age must be an integer between {MIN_AGE} and {MAX_AGE}")
            )

        # Malformed tokens in the number list are dropped by map(), not rejected.
        return ValidationResult.from_errors(errors)

    def map(self, row: Row) -> Dict[str, Any]:
        age = parse_int(_cell(row, AGE_COL))
        if age is None:
            raise MappingFailure(f"Age is not an integer: {_cell(row, AGE_COL)!r}")
        return {
            "name": _cell(row, NAME_COL),
            "age": age,
            "nums": parse_and_sort(_cell(row, NUMS_COL)),
        }
