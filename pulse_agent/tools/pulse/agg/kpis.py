# pulse_agent/tools/pulse/agg/kpis.py
from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Tuple

import numpy as np

from ..dto import KPIAvailability, KPIValues, RawTotals, ResolvedKPISet
from ..schema import (
    GUESTS_PRIORITY,
    LABOR_PRIORITY,
    NET_SALES_PRIORITY,
    SALES_TYPES,
    TIPS_PRIORITY,
    CanonicalKey,
    DatasetType,
)
from .base import groups_with, pick_group
from .charts import build_charts
from .combine import MetricsGroup

logger = logging.getLogger(__name__)


def _round2(value: Optional[float]) -> Optional[float]:
    return None if value is None else round(float(value), 2)


def _round_count(value: Optional[float]) -> Optional[int]:
    return None if value is None else int(round(value))


def _safe_div(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    """None si falta algo o el denominador es 0 (nunca inf)."""
    if numerator is None or denominator is None or denominator == 0:
        return None
    return numerator / denominator


def _ratio_pct(numerator: Optional[float], denominator: Optional[float]) -> Optional[float]:
    ratio = _safe_div(numerator, denominator)
    return None if ratio is None else ratio * 100.0


def _labor_percent(
    groups: Mapping[DatasetType, MetricsGroup],
    net_sales: Optional[float],
    cost_group: Optional[MetricsGroup],
) -> Tuple[Optional[float], Optional[MetricsGroup]]:
    """Promedio de % de labor por fila si existe; si no, labor_cost / net_sales.

    Devuelve también el grupo que aportó el dato.
    """
    samples: List[float] = []
    sample_groups = [
        g for g in groups_with(groups, LABOR_PRIORITY, CanonicalKey.LABOR_PERCENT)
        if g.metrics.labor_percent_samples
    ]
    for group in sample_groups:
        samples.extend(group.metrics.labor_percent_samples)
    if samples:
        return float(np.mean(samples)), sample_groups[0]

    labor_cost = cost_group.total(CanonicalKey.LABOR_COST) if cost_group else None
    return _ratio_pct(labor_cost, net_sales), cost_group


def resolve_kpis(groups: Mapping[DatasetType, MetricsGroup]) -> ResolvedKPISet:
    """Elige, por KPI y según prioridad fija, el grupo fuente y calcula el set final."""
    net_group = pick_group(groups, NET_SALES_PRIORITY, CanonicalKey.NET_SALES)
    net_sales = net_group.total(CanonicalKey.NET_SALES) if net_group else None

    guests_group = pick_group(groups, GUESTS_PRIORITY, CanonicalKey.GUESTS)
    if guests_group is None and net_group is not None and net_group.has(CanonicalKey.GUESTS):
        guests_group = net_group
    guests = guests_group.total(CanonicalKey.GUESTS) if guests_group else None

    # PPA solo con guests del MISMO grupo que aportó las ventas netas
    ppa: Optional[float] = None
    if net_group is not None and net_group.has(CanonicalKey.GUESTS):
        ppa = _safe_div(net_sales, net_group.total(CanonicalKey.GUESTS))

    tips_group = pick_group(groups, TIPS_PRIORITY, CanonicalKey.TIPS)
    tips = tips_group.total(CanonicalKey.TIPS) if tips_group else None
    tip_percent = _ratio_pct(tips, net_sales)

    cost_group = pick_group(groups, LABOR_PRIORITY, CanonicalKey.LABOR_COST, fallback_any=True)
    hours_group = pick_group(groups, LABOR_PRIORITY, CanonicalKey.LABOR_HOURS, fallback_any=True)
    labor_percent, labor_group = _labor_percent(groups, net_sales, cost_group)
    if labor_percent is None:
        labor_group = None

    values = KPIValues(
        net_sales=_round2(net_sales),
        guests=_round_count(guests),
        ppa=_round2(ppa),
        tip_percent=_round2(tip_percent),
        labor_percent=_round2(labor_percent),
    )
    totals = RawTotals(
        tips=_round2(tips),
        labor_cost=_round2(cost_group.total(CanonicalKey.LABOR_COST) if cost_group else None),
        labor_hours=_round2(hours_group.total(CanonicalKey.LABOR_HOURS) if hours_group else None),
    )
    sources = {
        "net_sales": net_group.dataset_type.value if net_group else None,
        "guests": guests_group.dataset_type.value if guests_group else None,
        "tips": tips_group.dataset_type.value if tips_group else None,
        "labor": labor_group.dataset_type.value if labor_group else None,
    }
    charts = build_charts(groups, net_group)

    logger.info("KPIs resueltos: %s (fuentes=%s)", values.model_dump(), sources)
    return ResolvedKPISet(
        values=values,
        available=KPIAvailability.from_values(values),
        totals=totals,
        sources=sources,
        charts=charts,
        charts_available=charts.availability(),
    )


def infer_report_type(groups: Mapping[DatasetType, MetricsGroup]) -> str:
    """'labor' si solo hay labor, 'performance' si hay labor y ventas, si no 'sales'."""
    types = set(groups)
    has_labor = DatasetType.LABOR in types
    has_sales = bool(types & SALES_TYPES)
    if has_labor and has_sales:
        return "performance"
    if has_labor:
        return "labor"
    return "sales"
