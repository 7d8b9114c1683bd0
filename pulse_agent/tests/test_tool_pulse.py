# pulse_agent/tests/test_tool_pulse.py
from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import List

import pandas as pd
import pytest

from pulse_agent.tools.pulse.collaborators import InMemoryReportStore, LocalObjectStorage
from pulse_agent.tools.pulse.service import Collaborators
from pulse_agent.tools.tool_pulse import _json_safe, _norm_report_type, run_pulse_report


# ------------------------------ helpers ---------------------------------------


def _write_csv(path: Path, rows: List[List[object]]) -> Path:
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.writer(f)
        w.writerows(rows)
    return path


def _write_xlsx(path: Path, rows: List[List[object]]) -> Path:
    pd.DataFrame(rows).to_excel(path, index=False, header=False)
    return path


class _StaticNarrator:
    def complete(self, system: str, prompt: str) -> str:
        return "Good week overall.\n- Fries sell well\n- Promote burgers"


@pytest.fixture
def collab(tmp_path):
    return Collaborators(
        storage=LocalObjectStorage(tmp_path / "store"),
        reports=InMemoryReportStore(),
        narrator=_StaticNarrator(),
    )


# ------------------------------ tests -----------------------------------------


def test_csv_and_xlsx_batch(tmp_path, collab):
    csv_path = _write_csv(tmp_path / "daily.csv", [
        ["Downtown Bistro"],
        ["Date", "Net Sales", "Guests", "Tips"],
        ["2024-11-01", "$1,000.00", "40", "120"],
        ["2024-11-02", "500", "20", "60"],
    ])
    xlsx_path = _write_xlsx(tmp_path / "items.xlsx", [
        ["Weekly Report", None, None],
        ["Date", "Item", "Net Sales"],
        [datetime(2024, 11, 1, 19, 30), "Burger", 12.5],
        [datetime(2024, 11, 2, 13, 0), "Fries", 7.5],
    ])

    out = run_pulse_report(
        restaurant_name="Bistro",
        period="Nov 2024",
        file_paths=[str(csv_path), str(xlsx_path)],
        collaborators=collab,
    )
    assert out["ok"] is True, out.get("error")
    json.dumps(out)  # JSON-safe

    report = out["report"]
    kpis = report["kpis"]
    # item_sales tiene prioridad para ventas netas; sin guests propios no hay PPA
    assert kpis["sources"]["net_sales"] == "item_sales"
    assert kpis["net_sales"] == 20.0
    assert kpis["guests"] == 60
    assert kpis["ppa"] is None
    assert [p["date"] for p in report["chart_data"]["daily_sales"]] == ["2024-11-01", "2024-11-02"]
    assert report["file_url"].startswith("file://")
    assert len(list((tmp_path / "store").iterdir())) == 2
    assert out["meta"]["files_parsed"] == 2


def test_report_type_synonyms(tmp_path, collab):
    p = _write_csv(tmp_path / "cat.csv", [["Category", "Net Sales"], ["Food", "10"]])
    out = run_pulse_report("Bistro", "Q4", [str(p)], report_type="Revenue", collaborators=collab)
    assert out["ok"] is True
    assert out["report"]["report_type"] == "sales"


def test_missing_file_path(collab):
    out = run_pulse_report("Bistro", "Q4", ["/no/such/file.csv"], collaborators=collab)
    assert out["ok"] is False
    assert "File not found" in out["error"]


def test_unknown_report_type_rejected(tmp_path, collab):
    p = _write_csv(tmp_path / "cat.csv", [["Category", "Net Sales"], ["Food", "10"]])
    out = run_pulse_report("Bistro", "Q4", [str(p)], report_type="weekly", collaborators=collab)
    assert out["ok"] is False
    assert out["error"] == "Invalid report type"


def test_norm_report_type():
    assert _norm_report_type(None) is None
    assert _norm_report_type(" Labour ") == "labor"
    assert _norm_report_type("combined") == "performance"


def test_json_safe_handles_numpy_and_nan():
    import numpy as np

    out = _json_safe({"a": np.int64(3), "b": float("nan"), "c": (np.float64(1.5),)})
    assert out == {"a": 3, "b": None, "c": [1.5]}


def test_default_collaborators_are_per_call():
    from pulse_agent.tools.tool_pulse import default_collaborators

    a, b = default_collaborators(), default_collaborators()
    assert a.reports is not b.reports
    assert a.reports.rows == []
