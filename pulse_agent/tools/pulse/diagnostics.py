# pulse_agent/tools/pulse/diagnostics.py
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

from .agg.combine import MetricsGroup
from .dto import SourceFile
from .parser import ParsedFile
from .schema import DatasetType


def describe_parsed(parsed: ParsedFile, storage_ref: Optional[str]) -> SourceFile:
    """Metadatos de un archivo parseado (nombre, referencia, tipo, filas, roles)."""
    return SourceFile(
        filename=parsed.filename,
        storage_ref=storage_ref,
        dataset_type=parsed.dataset_type.value,
        row_count=parsed.row_count,
        columns=parsed.column_roles(),
    )


def describe_skipped(filename: str, storage_ref: Optional[str], reason: str) -> SourceFile:
    return SourceFile(
        filename=filename,
        storage_ref=storage_ref,
        dataset_type=DatasetType.UNKNOWN.value,
        skipped=True,
        reason=reason,
    )


def describe_groups(groups: Mapping[DatasetType, MetricsGroup]) -> List[Dict[str, Any]]:
    """Resumen por grupo combinado, con la muestra acotada de filas para auditoría."""
    out: List[Dict[str, Any]] = []
    for dataset_type, group in groups.items():
        out.append({
            "dataset_type": dataset_type.value,
            "files": list(group.filenames),
            "present_keys": sorted(k.value for k in group.present_keys),
            "categories": len(group.metrics.categories),
            "days": len(group.metrics.daily),
            "sample_rows": [r.as_dict() for r in group.sample_rows],
        })
    return out
