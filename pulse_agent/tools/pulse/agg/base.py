# pulse_agent/tools/pulse/agg/base.py
from __future__ import annotations

from typing import Iterable, List, Mapping, Optional

from ..schema import CanonicalKey, DatasetType
from .combine import MetricsGroup


def pick_group(
    groups: Mapping[DatasetType, MetricsGroup],
    priority: Iterable[DatasetType],
    key: CanonicalKey,
    fallback_any: bool = False,
) -> Optional[MetricsGroup]:
    """Primer grupo (según prioridad) que existe y tiene el rol `key`.

    fallback_any=True: si ninguno de la lista califica, se prueba cualquier
    grupo en orden de aparición.
    """
    order: List[DatasetType] = list(priority)
    for dataset_type in order:
        group = groups.get(dataset_type)
        if group is not None and group.has(key):
            return group
    if fallback_any:
        for dataset_type, group in groups.items():
            if dataset_type not in order and group.has(key):
                return group
    return None


def groups_with(
    groups: Mapping[DatasetType, MetricsGroup],
    priority: Iterable[DatasetType],
    key: CanonicalKey,
) -> List[MetricsGroup]:
    """Todos los grupos con `key`, primero los de la lista de prioridad."""
    order = list(priority)
    head = [groups[t] for t in order if t in groups and groups[t].has(key)]
    tail = [g for t, g in groups.items() if t not in order and g.has(key)]
    return head + tail
