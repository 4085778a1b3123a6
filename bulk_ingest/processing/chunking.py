"""Row filtering and chunking for the processing engine."""

from typing import Any, Iterator, List, Sequence, Tuple, TypeVar

T = TypeVar("T")

# Row numbers are 1-based and count the header, so the first data row is 2.
FIRST_DATA_ROW = 2


def is_blank_row(row: Sequence[Any]) -> bool:
    """True for an empty row or one whose cells are all None/whitespace."""
    return all(cell is None or str(cell).strip() == "" for cell in row)


def data_rows(table: Sequence[Sequence[Any]]) -> List[Tuple[int, Sequence[Any]]]:
    """Drop the header and blank rows, then number the survivors from 2.

    Blank rows are not counted, so a row after a dropped blank one gets
    the number of the row before it.
    """
    kept = [row for row in table[1:] if not is_blank_row(row)]
    return list(enumerate(kept, start=FIRST_DATA_ROW))


def iter_chunks(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most size items."""
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start:start + size]
