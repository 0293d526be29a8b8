from __future__ import annotations

import threading

from fastapi.testclient import TestClient

from sales_sync.app import TabLocks, create_app
from sales_sync.sheets.sync import SheetSynchronizer
from sales_sync.tests.fakes import FakeSheetsClient, http_error

CSV = b"Product Name,Product Category,Total Items Sold\nWidget,Tools,5\nGadget,Toys,3\n"


def _client(fake: FakeSheetsClient) -> TestClient:
    return TestClient(create_app(synchronizer=SheetSynchronizer(fake)))


def test_health():
    response = _client(FakeSheetsClient()).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ensure_tab_endpoint():
    fake = FakeSheetsClient()
    http = _client(fake)
    first = http.post("/tabs/ensure", json={"sheetTab": "Greenhills"})
    second = http.post("/tabs/ensure", json={"sheetTab": "Greenhills"})
    assert first.status_code == 200
    assert first.json()["created"] is True
    assert second.json()["created"] is False
    assert list(fake.tabs) == ["Greenhills"]


def test_ensure_tab_requires_name():
    response = _client(FakeSheetsClient()).post("/tabs/ensure", json={"sheetTab": "  "})
    assert response.status_code == 400
    assert "required" in response.json()["message"]


def test_upload_endpoint_uses_store_field():
    fake = FakeSheetsClient(tabs={"Magnolia": 3})
    response = _client(fake).post(
        "/uploads",
        files={"file": ("magnolia.csv", CSV, "text/csv")},
        data={"store": "Magnolia"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["tab"] == "Magnolia"
    assert body["rowsWritten"] == 4
    assert "warning" not in body
    assert fake.values["Magnolia"][1] == ["Widget", "Tools", 5]


def test_upload_rejects_bad_header_with_400():
    fake = FakeSheetsClient()
    response = _client(fake).post(
        "/uploads",
        files={"file": ("x.csv", b"Name,Category,Sold\na,b,1\n", "text/csv")},
        data={"sheetTab": "Fairview"},
    )
    assert response.status_code == 400
    assert response.json()["stage"] == "resolve_headers"
    assert fake.calls == []


def test_upload_remote_failure_is_500():
    fake = FakeSheetsClient()
    fake.fail_on["list_tabs"] = http_error(403)
    response = _client(fake).post(
        "/uploads",
        files={"file": ("x.csv", CSV, "text/csv")},
        data={"sheetTab": "Fairview"},
    )
    assert response.status_code == 500
    assert "Permission denied" in response.json()["message"]


def _enter(locks: TabLocks, tab: str, entered: list) -> None:
    with locks.hold(tab):
        entered.append(tab)


def test_tab_locks_serialize_one_tab_only():
    locks = TabLocks()
    entered: list = []
    with locks.hold("A"):
        other = threading.Thread(target=_enter, args=(locks, "B", entered))
        other.start()
        other.join(timeout=2)
        assert entered == ["B"]

        same = threading.Thread(target=_enter, args=(locks, "A", entered))
        same.start()
        same.join(timeout=0.2)
        assert same.is_alive()
    same.join(timeout=2)
    assert entered == ["B", "A"]


def test_tab_locks_are_dropped_after_use():
    locks = TabLocks()
    for i in range(50):
        with locks.hold(f"tab-{i}"):
            assert len(locks) == 1
    assert len(locks) == 0


def test_uploads_leave_no_locks_behind():
    fake = FakeSheetsClient()
    app = create_app(synchronizer=SheetSynchronizer(fake))
    http = TestClient(app)
    for tab in ("One", "Two", "Three"):
        response = http.post("/uploads", files={"file": ("s.csv", CSV, "text/csv")}, data={"sheetTab": tab})
        assert response.status_code == 200
    assert len(app.state.tab_locks) == 0
