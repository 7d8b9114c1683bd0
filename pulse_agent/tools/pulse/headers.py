# pulse_agent/tools/pulse/headers.py
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Pattern, Sequence, Tuple

from .cells import is_blank, normalize_header
from .config import AppConfig
from .exceptions import HeaderNotFound
from .schema import (
    FALLBACK_SALES_EXCLUDE,
    FALLBACK_SALES_TOKEN,
    GROSS_TOKEN,
    ROLE_RULES,
    CanonicalKey,
    RoleRule,
)

logger = logging.getLogger(__name__)

_COMPILED_RULES: Tuple[Tuple[RoleRule, Tuple[Pattern[str], ...]], ...] = tuple(
    (rule, tuple(re.compile(p) for p in rule.patterns)) for rule in ROLE_RULES
)
_FALLBACK_EXCLUDE = re.compile(FALLBACK_SALES_EXCLUDE)


@dataclass(frozen=True)
class ColumnMeta:
    """Una columna de entrada; se crea una vez por archivo."""
    original: str
    normalized: str
    index: int
    is_gross: bool
    role: Optional[CanonicalKey] = None


def score_header_row(row: Sequence[Any], keywords: Sequence[str]) -> int:
    """Cuántas keywords aparecen como substring de alguna celda."""
    cells = [normalize_header(c) for c in row]
    return sum(1 for kw in keywords if any(kw in c for c in cells))


def detect_header_row(rows: Sequence[Sequence[Any]], cfg: Optional[AppConfig] = None) -> int:
    """Índice de la fila con mayor densidad de keywords (empate -> la primera).

    Protege contra filas de título/metadatos antes del encabezado real.
    """
    cfg = cfg or AppConfig()
    best_idx, best_score = -1, 0
    for idx, row in enumerate(rows[: cfg.header_scan_rows]):
        score = score_header_row(row, cfg.header_keywords)
        if score > best_score:
            best_idx, best_score = idx, score
    if best_idx < 0:
        raise HeaderNotFound(
            f"No header row found in the first {cfg.header_scan_rows} rows."
        )
    return best_idx


def _first_match(
    normalized: Sequence[str],
    gross_flags: Sequence[bool],
    rule: RoleRule,
    patterns: Tuple[Pattern[str], ...],
    assigned: Dict[int, CanonicalKey],
) -> Optional[int]:
    for idx, header in enumerate(normalized):
        if idx in assigned or not header:
            continue
        if gross_flags[idx] and not rule.allow_gross:
            continue
        if any(p.search(header) for p in patterns):
            return idx
    return None


def _fallback_net_sales(
    normalized: Sequence[str],
    gross_flags: Sequence[bool],
    assigned: Dict[int, CanonicalKey],
) -> Optional[int]:
    """Columnas rotuladas solo 'Sales' suelen ser ventas netas en contexto."""
    for idx, header in enumerate(normalized):
        if idx in assigned or gross_flags[idx]:
            continue
        if FALLBACK_SALES_TOKEN in header and not _FALLBACK_EXCLUDE.search(header):
            return idx
    return None


def classify_columns(header_row: Sequence[Any]) -> List[ColumnMeta]:
    """Asigna a cada columna un rol canónico.

    Las reglas se evalúan en orden fijo (ver ROLE_RULES); cada regla toma la
    primera columna libre, de izquierda a derecha, que coincida con alguno de
    sus patrones. Cada rol se asigna a lo sumo a una columna.
    """
    originals = ["" if is_blank(c) else str(c).strip() for c in header_row]
    normalized = [normalize_header(c) for c in header_row]
    gross_flags = [GROSS_TOKEN in h for h in normalized]

    assigned: Dict[int, CanonicalKey] = {}
    for rule, patterns in _COMPILED_RULES:
        idx = _first_match(normalized, gross_flags, rule, patterns, assigned)
        if idx is not None:
            assigned[idx] = rule.key

    if CanonicalKey.NET_SALES not in assigned.values():
        idx = _fallback_net_sales(normalized, gross_flags, assigned)
        if idx is not None:
            logger.debug("net_sales por fallback en columna '%s'", originals[idx])
            assigned[idx] = CanonicalKey.NET_SALES

    return [
        ColumnMeta(
            original=originals[i],
            normalized=normalized[i],
            index=i,
            is_gross=gross_flags[i],
            role=assigned.get(i),
        )
        for i in range(len(header_row))
    ]


def column_map(columns: Sequence[ColumnMeta]) -> Dict[CanonicalKey, int]:
    """Rol -> índice de columna, solo para columnas con rol."""
    return {c.role: c.index for c in columns if c.role is not None}
