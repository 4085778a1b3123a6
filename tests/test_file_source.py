import os

import pytest
from openpyxl import Workbook

from bulk_ingest.io.table_reader import read_table
from bulk_ingest.jobs.errors import SourceUnavailable
from bulk_ingest.storage.uploads import LocalFileSource


def _write_workbook(path, rows):
    workbook = Workbook()
    sheet = workbook.active
    for row in rows:
        sheet.append(row)
    workbook.save(path)


def test_read_table_xlsx_keeps_header_and_cell_types(tmp_path):
    path = tmp_path / "people.xlsx"
    _write_workbook(
        path,
        [
            ["Name", "Age", "Nums"],
            ["John", 30, "1,2,3"],
            ["Jane", None, "4"],
        ],
    )

    rows = read_table(str(path))

    assert rows[0] == ["Name", "Age", "Nums"]
    assert rows[1] == ["John", 30, "1,2,3"]
    assert isinstance(rows[1][1], int)
    assert rows[2] == ["Jane", None, "4"]


def test_read_table_csv(tmp_path):
    path = tmp_path / "people.csv"
    path.write_text('Name,Age,Nums\nJohn,30,"5,3"\n,,\n')

    rows = read_table(str(path))

    assert rows == [["Name", "Age", "Nums"], ["John", "30", "5,3"], ["", "", ""]]


def test_read_table_rejects_unknown_extension(tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    with pytest.raises(ValueError):
        read_table(str(path))


def test_local_source_loads_file(tmp_path):
    _write_workbook(tmp_path / "a.xlsx", [["Name"], ["John"]])
    source = LocalFileSource(str(tmp_path))

    assert source.exists("a.xlsx")
    assert source.load("a.xlsx") == [["Name"], ["John"]]


def test_local_source_missing_file(tmp_path):
    source = LocalFileSource(str(tmp_path))
    assert not source.exists("missing.xlsx")
    with pytest.raises(SourceUnavailable, match="missing.xlsx"):
        source.load("missing.xlsx")


def test_local_source_unreadable_file(tmp_path):
    (tmp_path / "broken.xlsx").write_bytes(b"not a workbook")
    source = LocalFileSource(str(tmp_path))
    with pytest.raises(SourceUnavailable):
        source.load("broken.xlsx")


def test_local_source_refuses_paths_outside_upload_dir(tmp_path):
    uploads = tmp_path / "uploads"
    _write_workbook(tmp_path / "secret.xlsx", [["x"]])
    source = LocalFileSource(str(uploads))

    assert not source.exists("../secret.xlsx")
    with pytest.raises(SourceUnavailable):
        source.load("../secret.xlsx")


def test_local_source_delete(tmp_path):
    path = tmp_path / "a.csv"
    path.write_text("Name\nJohn\n")
    source = LocalFileSource(str(tmp_path))

    source.delete("a.csv")
    assert not os.path.exists(path)
    # deleting again is a no-op
    source.delete("a.csv")
