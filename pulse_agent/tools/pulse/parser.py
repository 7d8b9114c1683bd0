# pulse_agent/tools/pulse/parser.py
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, FrozenSet, List, Mapping, Optional, Sequence, Tuple

from .cells import is_blank, normalize_date_cell, normalize_text_cell, parse_numeric
from .config import AppConfig
from .exceptions import EmptyFile
from .headers import ColumnMeta, classify_columns, column_map, detect_header_row
from .schema import (
    DATASET_TYPE_RULES,
    NUMERIC_KEYS,
    SUMMED_KEYS,
    CanonicalKey,
    DatasetType,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizedRow:
    """Registro de negocio de una fila; None = sin valor o sin columna."""
    date: Optional[str] = None
    category: Optional[str] = None
    item: Optional[str] = None
    net_sales: Optional[float] = None
    guests: Optional[float] = None
    tips: Optional[float] = None
    labor_cost: Optional[float] = None
    labor_hours: Optional[float] = None
    labor_percent: Optional[float] = None

    def value(self, key: CanonicalKey) -> Any:
        return getattr(self, key.value)

    def is_empty(self) -> bool:
        return all(v is None for v in asdict(self).values())

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class DailyBucket:
    sales: float = 0.0
    guests: float = 0.0
    tips: float = 0.0


@dataclass
class FileMetrics:
    """Acumulador de un solo dueño (un archivo o un grupo combinado).

    sums/counts solo contienen las métricas cuyo rol está presente: una
    métrica sin columna es None, nunca 0.
    """
    sums: Dict[CanonicalKey, float] = field(default_factory=dict)
    counts: Dict[CanonicalKey, int] = field(default_factory=dict)
    labor_percent_samples: List[float] = field(default_factory=list)
    categories: Dict[str, float] = field(default_factory=dict)
    daily: Dict[str, DailyBucket] = field(default_factory=dict)

    @classmethod
    def for_keys(cls, present: FrozenSet[CanonicalKey]) -> "FileMetrics":
        keys = [k for k in SUMMED_KEYS if k in present]
        return cls(sums={k: 0.0 for k in keys}, counts={k: 0 for k in keys})

    def total(self, key: CanonicalKey) -> Optional[float]:
        if key not in self.sums or self.counts.get(key, 0) == 0:
            return None
        return self.sums[key]

    def accumulate(self, row: NormalizedRow, present: FrozenSet[CanonicalKey]) -> None:
        for key in self.sums:
            v = row.value(key)
            if v is not None:
                self.sums[key] += v
                self.counts[key] += 1

        if row.labor_percent is not None:
            self.labor_percent_samples.append(row.labor_percent)

        if (
            CanonicalKey.CATEGORY in present
            and row.category is not None
            and row.net_sales is not None
        ):
            self.categories[row.category] = self.categories.get(row.category, 0.0) + row.net_sales

        if CanonicalKey.DATE in present and row.date is not None:
            bucket = self.daily.setdefault(row.date, DailyBucket())
            bucket.sales += row.net_sales or 0.0
            bucket.guests += row.guests or 0.0
            bucket.tips += row.tips or 0.0

    def absorb(self, other: "FileMetrics") -> None:
        """Suma `other` dentro de este acumulador (no modifica `other`)."""
        for key, value in other.sums.items():
            self.sums[key] = self.sums.get(key, 0.0) + value
            self.counts[key] = self.counts.get(key, 0) + other.counts.get(key, 0)
        self.labor_percent_samples.extend(other.labor_percent_samples)
        for name, value in other.categories.items():
            self.categories[name] = self.categories.get(name, 0.0) + value
        for day, src in other.daily.items():
            dst = self.daily.setdefault(day, DailyBucket())
            dst.sales += src.sales
            dst.guests += src.guests
            dst.tips += src.tips


@dataclass(frozen=True)
class ParsedFile:
    """Resultado inmutable del parseo de un archivo."""
    filename: str
    header_row: int
    columns: Tuple[ColumnMeta, ...]
    dataset_type: DatasetType
    present_keys: FrozenSet[CanonicalKey]
    metrics: FileMetrics
    sample_rows: Tuple[NormalizedRow, ...]
    row_count: int

    def column_roles(self) -> Dict[str, str]:
        return {c.original: c.role.value for c in self.columns if c.role is not None}


def infer_dataset_type(present: FrozenSet[CanonicalKey]) -> DatasetType:
    """Función pura del conjunto de roles presentes (tabla DATASET_TYPE_RULES)."""
    for predicate, outcome in DATASET_TYPE_RULES:
        if predicate(present):
            return outcome
    return DatasetType.UNKNOWN


def is_meaningful_row(row: Sequence[Any]) -> bool:
    return any(not is_blank(c) for c in row)


def extract_row(row: Sequence[Any], cmap: Mapping[CanonicalKey, int]) -> NormalizedRow:
    def cell(key: CanonicalKey) -> Any:
        idx = cmap.get(key)
        if idx is None or idx >= len(row):
            return None
        return row[idx]

    values: Dict[str, Any] = {k.value: parse_numeric(cell(k)) for k in NUMERIC_KEYS if k in cmap}
    if CanonicalKey.DATE in cmap:
        values["date"] = normalize_date_cell(cell(CanonicalKey.DATE))
    if CanonicalKey.CATEGORY in cmap:
        values["category"] = normalize_text_cell(cell(CanonicalKey.CATEGORY))
    if CanonicalKey.ITEM in cmap:
        values["item"] = normalize_text_cell(cell(CanonicalKey.ITEM))
    return NormalizedRow(**values)


def parse_rows(filename: str, rows: Sequence[Sequence[Any]], cfg: Optional[AppConfig] = None) -> ParsedFile:
    """Clasifica encabezados, recorre las filas de datos y acumula métricas."""
    cfg = cfg or AppConfig()
    if not any(is_meaningful_row(r) for r in rows):
        raise EmptyFile(f"{filename}: file has no data.")

    header_idx = detect_header_row(rows, cfg)
    columns = classify_columns(rows[header_idx])
    cmap = column_map(columns)
    present = frozenset(cmap)
    dataset_type = infer_dataset_type(present)

    metrics = FileMetrics.for_keys(present)
    samples: List[NormalizedRow] = []
    row_count = 0
    for raw in rows[header_idx + 1:]:
        if not is_meaningful_row(raw):
            continue
        nrow = extract_row(raw, cmap)
        if nrow.is_empty():
            continue
        row_count += 1
        metrics.accumulate(nrow, present)
        if len(samples) < cfg.sample_rows:
            samples.append(nrow)

    logger.info(
        "Archivo %s: header=%s, tipo=%s, roles=%s, filas=%s",
        filename, header_idx, dataset_type.value, sorted(k.value for k in present), row_count,
    )
    return ParsedFile(
        filename=filename,
        header_row=header_idx,
        columns=tuple(columns),
        dataset_type=dataset_type,
        present_keys=present,
        metrics=metrics,
        sample_rows=tuple(samples),
        row_count=row_count,
    )
