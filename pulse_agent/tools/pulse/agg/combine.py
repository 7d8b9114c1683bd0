# pulse_agent/tools/pulse/agg/combine.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Sequence, Set, Tuple

from ..config import AppConfig
from ..parser import FileMetrics, NormalizedRow, ParsedFile
from ..schema import CanonicalKey, DatasetType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MetricsGroup:
    """Métricas combinadas de todos los archivos de un mismo tipo de dataset."""
    dataset_type: DatasetType
    metrics: FileMetrics
    present_keys: FrozenSet[CanonicalKey]
    filenames: Tuple[str, ...]
    sample_rows: Tuple[NormalizedRow, ...]

    def has(self, key: CanonicalKey) -> bool:
        return key in self.present_keys

    def total(self, key: CanonicalKey) -> Optional[float]:
        if key not in self.present_keys:
            return None
        return self.metrics.total(key)


GroupMap = Dict[DatasetType, MetricsGroup]


def group_by_type(files: Sequence[ParsedFile]) -> Dict[DatasetType, List[ParsedFile]]:
    """Agrupa por tipo conservando el orden de primera aparición."""
    out: Dict[DatasetType, List[ParsedFile]] = {}
    for f in files:
        out.setdefault(f.dataset_type, []).append(f)
    return out


def combine_group(dataset_type: DatasetType, files: Sequence[ParsedFile], sample_cap: int) -> MetricsGroup:
    """Construye un acumulador nuevo; los FileMetrics de entrada no se tocan."""
    acc = FileMetrics()
    keys: Set[CanonicalKey] = set()
    samples: List[NormalizedRow] = []
    for f in files:
        acc.absorb(f.metrics)
        keys |= f.present_keys
        room = sample_cap - len(samples)
        if room > 0:
            samples.extend(f.sample_rows[:room])
    return MetricsGroup(
        dataset_type=dataset_type,
        metrics=acc,
        present_keys=frozenset(keys),
        filenames=tuple(f.filename for f in files),
        sample_rows=tuple(samples),
    )


def combine_files(files: Sequence[ParsedFile], cfg: Optional[AppConfig] = None) -> GroupMap:
    """Un MetricsGroup por cada tipo de dataset observado en el lote."""
    cfg = cfg or AppConfig()
    groups: GroupMap = {}
    for dataset_type, members in group_by_type(files).items():
        groups[dataset_type] = combine_group(dataset_type, members, cfg.sample_rows)
        logger.info("Grupo %s: %s archivo(s)", dataset_type.value, len(members))
    return groups
