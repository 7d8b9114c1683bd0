# pulse_agent/tests/test_dto_basic.py
from __future__ import annotations

import pytest
from pulse_agent.tools.pulse.dto import KPIAvailability, KPIValues, NarrativeResult, UploadRequest
from pulse_agent.tools.pulse.exceptions import UploadValidationError
from pulse_agent.tools.pulse.validators import validate_request

def test_request_parses_and_normalizes():
    q = UploadRequest(
        restaurant_name="  Bistro 21 ",
        period=" Nov 2024 ",
        report_type="sales",
        owner_id="user-1",
    )
    assert q.restaurant_name == "Bistro 21"
    assert q.period == "Nov 2024"
    assert q.report_type == "sales"

def test_report_type_is_optional():
    q = UploadRequest(restaurant_name="Bistro", period="Q4")
    assert q.report_type is None

def test_restaurant_name_too_long():
    with pytest.raises(Exception):
        UploadRequest(restaurant_name="x" * 101, period="Q4")  # inválido

@pytest.mark.parametrize(
    "payload, message",
    [
        ({"restaurant_name": "", "period": "Q4"}, "Invalid restaurant name"),
        ({"restaurant_name": "Bistro", "period": ""}, "Invalid period"),
        ({"restaurant_name": "Bistro", "period": "p" * 51}, "Invalid period"),
        ({"restaurant_name": "Bistro", "period": "Q4", "report_type": "weekly"}, "Invalid report type"),
    ],
)
def test_validate_request_user_messages(payload, message):
    with pytest.raises(UploadValidationError) as ei:
        validate_request(payload)
    assert str(ei.value) == message

def test_availability_mirrors_values():
    values = KPIValues(net_sales=0.0, guests=None, ppa=None, tip_percent=12.5, labor_percent=None)
    av = KPIAvailability.from_values(values)
    # cero es disponible; None es desconocido
    assert av.net_sales is True
    assert av.guests is False
    assert av.tip_percent is True

def test_unavailable_narrative():
    n = NarrativeResult.unavailable()
    assert n.available is False
    assert n.insights == [] and n.actions == []
