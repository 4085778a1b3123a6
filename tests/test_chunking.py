import pytest

from bulk_ingest.processing.chunking import data_rows, is_blank_row, iter_chunks


@pytest.mark.parametrize(
    "row, blank",
    [
        ([], True),
        ([None, None], True),
        (["", "  ", None], True),
        (["\t"], True),
        ([None, 0], False),
        (["x"], False),
    ],
)
def test_is_blank_row(row, blank):
    assert is_blank_row(row) is blank


def test_data_rows_drops_header_and_blank_rows():
    table = [
        ["Name", "Age", "Nums"],
        ["John", 30, "1"],
        [None, "", "  "],
        [],
        ["Jane", 25, "2"],
    ]
    rows = data_rows(table)
    assert [number for number, _ in rows] == [2, 3]
    assert rows[0][1] == ["John", 30, "1"]


def test_blank_rows_are_not_counted_in_row_numbers():
    table = [
        ["Name", "Age", "Nums"],
        [None, None, None],
        ["Jane", "abc", "1"],
    ]
    assert data_rows(table) == [(2, ["Jane", "abc", "1"])]


def test_data_rows_of_header_only_table():
    assert data_rows([["Name", "Age", "Nums"]]) == []
    assert data_rows([]) == []


def test_iter_chunks():
    assert list(iter_chunks(list(range(5)), 2)) == [[0, 1], [2, 3], [4]]
    assert list(iter_chunks([], 3)) == []


def test_iter_chunks_rejects_non_positive_size():
    with pytest.raises(ValueError):
        list(iter_chunks([1], 0))
