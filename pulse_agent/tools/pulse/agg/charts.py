# pulse_agent/tools/pulse/agg/charts.py
from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from ..dto import CategoryPoint, ChartSeries, DailySalesPoint, PPAPoint
from ..schema import CATEGORY_PRIORITY, DAILY_PRIORITY, CanonicalKey, DatasetType
from .base import pick_group
from .combine import MetricsGroup

logger = logging.getLogger(__name__)


def _source_for(
    groups: Mapping[DatasetType, MetricsGroup],
    net_group: Optional[MetricsGroup],
    priority,
    key: CanonicalKey,
) -> Optional[MetricsGroup]:
    """Preferimos el mismo grupo que aportó las ventas netas."""
    if net_group is not None and net_group.has(key):
        return net_group
    return pick_group(groups, priority, key)


def daily_sales_series(group: Optional[MetricsGroup]) -> List[DailySalesPoint]:
    """Ventas por día, orden ascendente por fecha ISO (comparación de strings)."""
    if group is None:
        return []
    return [
        DailySalesPoint(date=day, sales=round(bucket.sales, 2))
        for day, bucket in sorted(group.metrics.daily.items(), key=lambda kv: kv[0])
    ]


def ppa_trend_series(group: Optional[MetricsGroup]) -> List[PPAPoint]:
    """PPA diario; solo días con guests > 0."""
    if group is None:
        return []
    return [
        PPAPoint(date=day, ppa=round(bucket.sales / bucket.guests, 2))
        for day, bucket in sorted(group.metrics.daily.items(), key=lambda kv: kv[0])
        if bucket.guests > 0
    ]


def category_mix_series(group: Optional[MetricsGroup]) -> List[CategoryPoint]:
    """Mix por categoría, descendente por ventas (orden estable)."""
    if group is None:
        return []
    ordered = sorted(group.metrics.categories.items(), key=lambda kv: kv[1], reverse=True)
    return [CategoryPoint(name=name, value=round(value, 2)) for name, value in ordered]


def build_charts(
    groups: Mapping[DatasetType, MetricsGroup],
    net_group: Optional[MetricsGroup],
) -> ChartSeries:
    daily_group = _source_for(groups, net_group, DAILY_PRIORITY, CanonicalKey.DATE)
    category_group = _source_for(groups, net_group, CATEGORY_PRIORITY, CanonicalKey.CATEGORY)
    return ChartSeries(
        daily_sales=daily_sales_series(daily_group),
        ppa_trend=ppa_trend_series(daily_group),
        category_mix=category_mix_series(category_group),
    )
