"""Mapping strategy interface and validation result types."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

# A raw row as read from the source table: untyped cells in column order.
Row = Sequence[Any]


@dataclass(frozen=True)
class ColumnError:
    col: int
    message: Optional[str] = None


@dataclass
class ValidationResult:
    valid: bool
    errors: List[ColumnError] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[ColumnError]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)


class MappingStrategy(ABC):
    """Format-specific validator and transformer for source rows.

    To add a format:
    1. Create a new .py file in bulk_ingest/mapping/
    2. Subclass MappingStrategy and set format_key
    3. Implement validate() and map() without side effects
    4. The registry auto-discovers it at startup
    """

    format_key: str = ""

    @abstractmethod
    def validate(self, row: Row) -> ValidationResult:
        """Check a row. Must not depend on map() having been called."""
        ...

    @abstractmethod
    def map(self, row: Row) -> Dict[str, Any]:
        """Transform a valid row into a record. Raises MappingFailure."""
        ...
