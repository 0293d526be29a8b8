from __future__ import annotations

import io

import pytest
from openpyxl import Workbook

from sales_sync.errors import EmptyInput, HeaderNotFound, InvalidArgument, UnsupportedFormat
from sales_sync.pipeline import build_matrix, ensure_tab, process_upload
from sales_sync.sheets.sync import SheetSynchronizer
from sales_sync.tests.fakes import FakeSheetsClient

SCENARIO_CSV = (
    b"Product Name,Product Category,Total Items Sold\n"
    b'Widget,Tools,"1,200"\n'
    b"Gadget,Tools,800\n"
    b"Thing,,\n"
)

EXPECTED = [
    ["Product Name", "Product Category", "Total Items Sold"],
    ["Widget", "Tools", 1200],
    ["Gadget", "Tools", 800],
    ["", "", ""],
    ["Thing", "Uncategorized", ""],
]


@pytest.fixture
def client():
    return FakeSheetsClient(tabs={"Rockwell": 1})


@pytest.fixture
def synchronizer(client):
    return SheetSynchronizer(client)


def test_build_matrix_scenario():
    assert build_matrix(SCENARIO_CSV, "rockwell.csv") == EXPECTED


def test_build_matrix_is_deterministic():
    assert build_matrix(SCENARIO_CSV, "a.csv") == build_matrix(SCENARIO_CSV, "a.csv")


def test_xlsx_and_csv_agree():
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(["PRODUCT NAME", "product category", "Total Items Sold"])
    sheet.append(["Widget", "Tools", 1200])
    sheet.append(["Gadget", "Tools", 800])
    sheet.append(["Thing", None, None])
    buffer = io.BytesIO()
    workbook.save(buffer)

    matrix = build_matrix(buffer.getvalue(), "rockwell.xlsx")
    assert matrix[1:] == EXPECTED[1:]


def test_process_upload_writes_tab(client, synchronizer):
    summary = process_upload(synchronizer, SCENARIO_CSV, "rockwell.csv", "  Rockwell ")
    assert summary.tab == "Rockwell"
    assert summary.rows_written == 5
    assert summary.data_rows == 3
    assert summary.categories == 2
    assert summary.formatted is True
    assert summary.message == "Uploaded and formatted successfully"
    assert client.values["Rockwell"] == EXPECTED


def test_reupload_is_idempotent(client, synchronizer):
    process_upload(synchronizer, SCENARIO_CSV, "rockwell.csv", "Rockwell")
    once = [list(row) for row in client.values["Rockwell"]]
    process_upload(synchronizer, SCENARIO_CSV, "rockwell.csv", "Rockwell")
    assert client.values["Rockwell"] == once
    assert list(client.tabs) == ["Rockwell"]


def test_missing_header_fails_before_remote_calls(client, synchronizer):
    data = b"Product Name,Product Category,Qty\nWidget,Tools,1\n"
    with pytest.raises(HeaderNotFound) as excinfo:
        process_upload(synchronizer, data, "rockwell.csv", "Rockwell")
    assert excinfo.value.missing == ["Total Items Sold"]
    assert client.calls == []


@pytest.mark.parametrize(
    "file_name, data, error",
    [
        ("rockwell.pdf", SCENARIO_CSV, UnsupportedFormat),
        ("rockwell.csv", b"Product Name,Product Category,Total Items Sold\n", EmptyInput),
    ],
)
def test_input_errors_make_no_remote_calls(client, synchronizer, file_name, data, error):
    with pytest.raises(error):
        process_upload(synchronizer, data, file_name, "Rockwell")
    assert client.calls == []


def test_blank_tab_name_rejected(client, synchronizer):
    with pytest.raises(InvalidArgument):
        process_upload(synchronizer, SCENARIO_CSV, "rockwell.csv", "   ")
    with pytest.raises(InvalidArgument):
        ensure_tab(synchronizer, "")
    assert client.calls == []


def test_format_failure_surfaces_warning(client, synchronizer):
    client.fail_on["format"] = RuntimeError("bad request")
    summary = process_upload(synchronizer, SCENARIO_CSV, "rockwell.csv", "Rockwell")
    assert summary.formatted is False
    assert "bad request" in summary.warning
    assert client.values["Rockwell"] == EXPECTED


def test_ensure_tab_creates_once(client, synchronizer):
    first = ensure_tab(synchronizer, "NewStore")
    second = ensure_tab(synchronizer, " NewStore ")
    assert first.created is True
    assert second.created is False
    assert first.sheet_id == second.sheet_id
    assert client.calls.count("add_tab") == 1
    assert second.message == 'Sheet tab "NewStore" is ready.'
