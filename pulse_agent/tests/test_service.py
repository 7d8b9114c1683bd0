# pulse_agent/tests/test_service.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from pulse_agent.tools.pulse.collaborators import InMemoryReportStore, storage_key
from pulse_agent.tools.pulse.config import AppConfig
from pulse_agent.tools.pulse.dto import UploadFile
from pulse_agent.tools.pulse.exceptions import StorageError
from pulse_agent.tools.pulse.service import GENERIC_FAILURE, Collaborators, run_pulse_upload


# ------------------------------ dobles ----------------------------------------


class FakeStorage:
    def __init__(self, fail: bool = False):
        self.objects: Dict[str, bytes] = {}
        self.fail = fail

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        if self.fail:
            raise StorageError("bucket unavailable")
        self.objects[key] = data
        return f"mem://{key}"


class FailingStore:
    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        raise RuntimeError("connection refused: db-internal-7:5432")


class FakeNarrator:
    def __init__(self, reply: str = "Solid week.\n- Food leads\n- Add specials", error: bool = False):
        self.reply = reply
        self.error = error

    def complete(self, system: str, prompt: str) -> str:
        if self.error:
            raise TimeoutError("narrative timeout")
        return self.reply


# ------------------------------ helpers ---------------------------------------


def _csv(name: str, text: str) -> UploadFile:
    return UploadFile(filename=name, data=text.encode("utf-8"), content_type="text/csv")


def _payload(**over) -> Dict[str, Any]:
    base = {"restaurant_name": "Bistro 21", "period": "Nov 2024", "owner_id": "user-1"}
    base.update(over)
    return base


@pytest.fixture
def collab():
    return Collaborators(storage=FakeStorage(), reports=InMemoryReportStore(), narrator=FakeNarrator())


CATEGORY_CSV = "Date,Category,Net Sales,Guests\n2024-11-01,Food,500,20\n2024-11-02,Beverage,300,15\n"


# ------------------------------ camino feliz ----------------------------------


def test_end_to_end_single_file(collab):
    res = run_pulse_upload(_payload(), [_csv("sales nov.csv", CATEGORY_CSV)], collab)
    assert res.ok is True, res.error
    report = res.report

    assert report["restaurant_name"] == "Bistro 21"
    assert report["report_type"] == "sales"
    assert report["status"] == "pending"
    assert report["user_id"] == "user-1"
    assert report["id"]
    assert report["file_url"].startswith("mem://") and report["file_url"].endswith("_sales_nov.csv")

    kpis = report["kpis"]
    assert kpis["net_sales"] == 800.0
    assert kpis["guests"] == 35
    assert kpis["ppa"] == pytest.approx(22.86)
    assert kpis["net_sales_fmt"] == "$800.00"
    assert kpis["available"]["tip_percent"] is False
    assert kpis["tip_percent"] is None

    charts = report["chart_data"]
    assert charts["category_mix"] == [{"name": "Food", "value": 500.0}, {"name": "Beverage", "value": 300.0}]
    assert [p["date"] for p in charts["daily_sales"]] == ["2024-11-01", "2024-11-02"]
    assert charts["sources"][0]["dataset_type"] == "category_rollup"

    assert report["agent"]["available"] is True
    assert report["agent"]["insights"] == ["Food leads", "Add specials"]

    assert res.meta.files_received == 1 and res.meta.files_parsed == 1
    assert len(collab.reports.rows) == 1


def test_declared_report_type_is_kept(collab):
    res = run_pulse_upload(_payload(report_type="performance"), [_csv("a.csv", CATEGORY_CSV)], collab)
    assert res.report["report_type"] == "performance"


def test_labor_and_sales_batch_is_performance(collab):
    files = [
        _csv("daily.csv", "Date,Net Sales,Guests\n2024-11-01,1000,40\n"),
        _csv("labor.csv", "Date,Labor Cost,Labor Hours\n2024-11-01,280,20\n"),
    ]
    res = run_pulse_upload(_payload(), files, collab)
    assert res.ok is True
    assert res.report["report_type"] == "performance"
    assert res.report["kpis"]["labor_percent"] == 28.0
    assert res.report["kpis"]["totals"]["labor_hours"] == 20.0
    assert len(collab.storage.objects) == 2


def test_narrative_failure_still_saves_report(collab):
    collab.narrator = FakeNarrator(error=True)
    res = run_pulse_upload(_payload(), [_csv("a.csv", CATEGORY_CSV)], collab)
    assert res.ok is True
    assert res.report["agent"] == {
        "available": False,
        "summary": "Analysis unavailable.",
        "insights": [],
        "actions": [],
    }


# ------------------------------ archivos malos --------------------------------


def test_bad_file_is_skipped_with_warning(collab):
    files = [_csv("good.csv", CATEGORY_CSV), _csv("junk.csv", "foo,bar\n1,2\n")]
    res = run_pulse_upload(_payload(), files, collab)
    assert res.ok is True
    assert len(res.warnings) == 1 and res.warnings[0].startswith("Skipped junk.csv:")
    assert res.report["warnings"] == res.warnings
    skipped = [s for s in res.report["chart_data"]["sources"] if s["skipped"]]
    assert [s["filename"] for s in skipped] == ["junk.csv"]
    assert res.meta.files_parsed == 1


def test_all_files_unusable(collab):
    res = run_pulse_upload(_payload(), [_csv("junk.csv", "foo,bar\n1,2\n")], collab)
    assert res.ok is False
    assert res.error == "None of the uploaded files could be parsed."
    assert collab.reports.rows == []


def test_strict_mode_rejects_batch(collab):
    cfg = AppConfig(skip_bad_files=False)
    files = [_csv("good.csv", CATEGORY_CSV), _csv("junk.csv", "foo,bar\n1,2\n")]
    res = run_pulse_upload(_payload(), files, collab, app_cfg=cfg)
    assert res.ok is False
    assert "No header row found" in res.error


# ------------------------------ validación ------------------------------------


@pytest.mark.parametrize(
    "files, message",
    [
        ([], "At least one file is required"),
        ([UploadFile(filename="a.csv", data=b"")], "File required and must be under 10MB"),
        ([UploadFile(filename="a.pdf", data=b"%PDF-1.4")], "Only CSV and Excel files allowed"),
    ],
)
def test_file_validation_rejects_before_storage(collab, files, message):
    res = run_pulse_upload(_payload(), files, collab)
    assert res.ok is False
    assert res.error == message
    assert collab.storage.objects == {}


def test_oversized_file_rejected(collab):
    big = UploadFile(filename="big.csv", data=b"x" * (10 * 1024 * 1024 + 1))
    res = run_pulse_upload(_payload(), [big], collab)
    assert res.error == "File required and must be under 10MB"


def test_invalid_request_fields(collab):
    res = run_pulse_upload(_payload(restaurant_name="x" * 101), [_csv("a.csv", CATEGORY_CSV)], collab)
    assert res.ok is False
    assert res.error == "Invalid restaurant name"


# ------------------------------ fallas internas -------------------------------


def test_persistence_failure_is_generic(collab):
    collab.reports = FailingStore()
    res = run_pulse_upload(_payload(), [_csv("a.csv", CATEGORY_CSV)], collab)
    assert res.ok is False
    assert res.error == GENERIC_FAILURE
    assert "db-internal" not in res.error
    assert res.request_id


def test_storage_failure_is_generic(collab):
    collab.storage = FakeStorage(fail=True)
    res = run_pulse_upload(_payload(), [_csv("a.csv", CATEGORY_CSV)], collab)
    assert res.ok is False
    assert res.error == GENERIC_FAILURE
    assert res.request_id


def test_storage_key_is_sanitized():
    assert storage_key("Ventas Nov (final).xlsx", now_ms=1700000000000) == "1700000000000_Ventas_Nov__final_.xlsx"


def test_file_url_skips_unparsed_files(collab):
    files = [_csv("junk.csv", "foo,bar\n1,2\n"), _csv("good.csv", CATEGORY_CSV)]
    res = run_pulse_upload(_payload(), files, collab)
    assert res.ok is True
    assert res.report["file_url"].endswith("_good.csv")
    assert len(collab.storage.objects) == 2
