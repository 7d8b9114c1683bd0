# pulse_agent/tools/pulse/formatters.py
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .agg.combine import MetricsGroup
from .config import AppConfig
from .diagnostics import describe_groups
from .dto import MetaInfo, NarrativeResult, ReportRecord, ResolvedKPISet, SourceFile, UploadRequest
from .i18n import LocaleConfig, add_formatted_fields
from .schema import DatasetType


def build_meta(files_received: int, files_parsed: int, cfg: AppConfig) -> MetaInfo:
    ts = datetime.now(tz=timezone.utc).isoformat(timespec="seconds")
    return MetaInfo(
        files_received=files_received,
        files_parsed=files_parsed,
        generated_at=ts,
        currency=cfg.currency,
        locale=cfg.locale,
    )


def build_kpis_payload(kpis: ResolvedKPISet, cfg: AppConfig) -> Dict[str, Any]:
    """Valores (con *_fmt para UI), disponibilidad, totales crudos y fuentes."""
    loc = LocaleConfig(locale=cfg.locale, currency=cfg.currency)
    values = add_formatted_fields(
        kpis.values.model_dump(),
        currency_fields=("net_sales", "ppa"),
        percent_fields=("tip_percent", "labor_percent"),
        count_fields=("guests",),
        cfg=loc,
    )
    return {
        **values,
        "available": kpis.available.model_dump(),
        "totals": kpis.totals.model_dump(),
        "sources": dict(kpis.sources),
    }


def build_chart_data(
    kpis: ResolvedKPISet,
    groups: Mapping[DatasetType, MetricsGroup],
    sources: Sequence[SourceFile],
) -> Dict[str, Any]:
    charts = kpis.charts.model_dump()
    return {
        **charts,
        "available": kpis.charts_available.model_dump(),
        "datasets": describe_groups(groups),
        "sources": [s.model_dump() for s in sources],
    }


def build_record(
    request: UploadRequest,
    report_type: str,
    kpis: ResolvedKPISet,
    narrative: NarrativeResult,
    groups: Mapping[DatasetType, MetricsGroup],
    sources: Sequence[SourceFile],
    warnings: Optional[List[str]] = None,
    cfg: Optional[AppConfig] = None,
) -> ReportRecord:
    cfg = cfg or AppConfig()
    primary = next((s.storage_ref for s in sources if s.storage_ref and not s.skipped), None)
    return ReportRecord(
        restaurant_name=request.restaurant_name,
        report_type=report_type,
        period=request.period,
        file_url=primary,
        kpis=build_kpis_payload(kpis, cfg),
        agent=narrative,
        chart_data=build_chart_data(kpis, groups, sources),
        user_id=request.owner_id,
        warnings=warnings or [],
    )
