# pulse_agent/tests/test_parser.py
from __future__ import annotations

import pytest

from pulse_agent.tools.pulse.config import AppConfig
from pulse_agent.tools.pulse.exceptions import EmptyFile, HeaderNotFound, UnreadableFile
from pulse_agent.tools.pulse.loader import load_rows
from pulse_agent.tools.pulse.parser import infer_dataset_type, parse_rows
from pulse_agent.tools.pulse.schema import CanonicalKey as K, DatasetType as D


# ------------------------------ helpers ---------------------------------------


def _parse_csv(text: str, name: str = "report.csv", cfg=None):
    sheet = load_rows(name, text.encode("utf-8"))
    return parse_rows(name, sheet.rows, cfg)


# ------------------------------ tipo de dataset -------------------------------


@pytest.mark.parametrize(
    "keys, expected",
    [
        ({K.LABOR_HOURS}, D.LABOR),
        ({K.LABOR_PERCENT, K.NET_SALES, K.ITEM}, D.LABOR),
        ({K.NET_SALES, K.ITEM, K.CATEGORY, K.DATE}, D.ITEM_SALES),
        ({K.NET_SALES, K.CATEGORY, K.DATE}, D.CATEGORY_ROLLUP),
        ({K.NET_SALES, K.DATE, K.GUESTS}, D.DAILY_SALES),
        ({K.TIPS, K.DATE}, D.TIPS),
        ({K.NET_SALES, K.GUESTS}, D.GENERAL_SALES),
        ({K.DATE, K.ITEM}, D.UNKNOWN),
        (set(), D.UNKNOWN),
    ],
)
def test_dataset_type_decision_table(keys, expected):
    assert infer_dataset_type(frozenset(keys)) is expected


def test_dataset_type_ignores_values():
    a = _parse_csv("Date,Net Sales\n2024-11-01,100\n")
    b = _parse_csv("Date,Net Sales\nfoo,\n2024-11-02,abc\n")
    assert a.dataset_type is b.dataset_type is D.DAILY_SALES


# ------------------------------ métricas --------------------------------------


def test_absent_role_is_none_not_zero():
    pf = _parse_csv("Date,Net Sales\n2024-11-01,100\n2024-11-02,50\n")
    assert pf.metrics.total(K.NET_SALES) == pytest.approx(150.0)
    assert pf.metrics.total(K.GUESTS) is None
    assert pf.metrics.total(K.TIPS) is None


def test_present_role_with_no_values_is_none():
    pf = _parse_csv("Date,Net Sales,Guests\n2024-11-01,100,\n")
    assert pf.metrics.total(K.GUESTS) is None
    assert pf.metrics.total(K.NET_SALES) == pytest.approx(100.0)


def test_currency_text_and_negatives_are_summed():
    pf = _parse_csv('Item,Net Sales\nBurger,"$1,200.00"\nRefund,(200)\nNote,n/a\n')
    assert pf.dataset_type is D.ITEM_SALES
    assert pf.metrics.total(K.NET_SALES) == pytest.approx(1000.0)
    assert pf.metrics.counts[K.NET_SALES] == 2


def test_category_map_and_daily_buckets():
    pf = _parse_csv(
        "Date,Category,Net Sales,Guests,Tips\n"
        "2024-11-01,Food,300,10,30\n"
        "2024-11-01,Beverage,100,,5\n"
        "2024-11-02,Food,200,5,\n"
    )
    assert pf.dataset_type is D.CATEGORY_ROLLUP
    assert pf.metrics.categories == {"Food": 500.0, "Beverage": 100.0}
    day1 = pf.metrics.daily["2024-11-01"]
    assert (day1.sales, day1.guests, day1.tips) == (400.0, 10.0, 35.0)
    assert pf.metrics.daily["2024-11-02"].sales == 200.0


def test_labor_percent_samples_are_collected():
    pf = _parse_csv("Date,Labor %\n2024-11-01,25%\n2024-11-02,35%\n2024-11-03,\n")
    assert pf.dataset_type is D.LABOR
    assert pf.metrics.labor_percent_samples == [25.0, 35.0]


def test_blank_rows_and_title_rows_are_skipped():
    text = (
        "Downtown Bistro\n"
        "Weekly Summary\n"
        "Date,Net Sales,Guests\n"
        ",,\n"
        "2024-11-01,100,4\n"
        "\n"
        "2024-11-02,80,2\n"
    )
    pf = _parse_csv(text)
    assert pf.header_row == 2
    assert pf.row_count == 2
    assert pf.column_roles() == {"Date": "date", "Net Sales": "net_sales", "Guests": "guests"}


def test_sample_rows_are_capped():
    body = "".join(f"2024-11-{(i % 28) + 1:02d},{i}\n" for i in range(60))
    pf = _parse_csv("Date,Net Sales\n" + body)
    assert pf.row_count == 60
    assert len(pf.sample_rows) == AppConfig().sample_rows == 50


def test_rows_without_mapped_values_are_dropped():
    rows = [["Date", "Net Sales", "Notes"], [None, None, "closed"], [float("nan"), "", None]]
    pf = parse_rows("notes.csv", rows)
    assert pf.row_count == 0
    assert pf.metrics.total(K.NET_SALES) is None


# ------------------------------ errores estructurales -------------------------


def test_empty_file_raises():
    with pytest.raises(EmptyFile):
        load_rows("empty.csv", b"\n\n  \n")
    with pytest.raises(EmptyFile):
        parse_rows("empty.csv", [[None, ""], ["", None]])


def test_headerless_file_raises():
    with pytest.raises(HeaderNotFound):
        _parse_csv("foo,bar\n1,2\n")


def test_corrupt_excel_is_unreadable():
    with pytest.raises(UnreadableFile):
        load_rows("broken.xlsx", b"this is not a workbook")


def test_hourly_sales_report_is_not_labor():
    pf = _parse_csv("Hour,Net Sales,Guests\n11,500,20\n12,300,10\n", name="hourly.csv")
    assert pf.dataset_type is D.GENERAL_SALES
    assert K.LABOR_HOURS not in pf.present_keys
    assert pf.metrics.total(K.NET_SALES) == pytest.approx(800.0)
