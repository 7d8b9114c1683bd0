# pulse_agent/tools/pulse/schema.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Final, FrozenSet, Tuple


class CanonicalKey(str, Enum):
    """Rol semántico de una columna, independiente del texto del encabezado."""
    NET_SALES = "net_sales"
    GUESTS = "guests"
    TIPS = "tips"
    LABOR_COST = "labor_cost"
    LABOR_HOURS = "labor_hours"
    LABOR_PERCENT = "labor_percent"
    DATE = "date"
    CATEGORY = "category"
    ITEM = "item"


class DatasetType(str, Enum):
    """Tipo de reporte que representa un archivo completo."""
    ITEM_SALES = "item_sales"
    CATEGORY_ROLLUP = "category_rollup"
    DAILY_SALES = "daily_sales"
    LABOR = "labor"
    TIPS = "tips"
    GENERAL_SALES = "general_sales"
    UNKNOWN = "unknown"


# Conjuntos útiles
NUMERIC_KEYS: Final[Tuple[CanonicalKey, ...]] = (
    CanonicalKey.NET_SALES,
    CanonicalKey.GUESTS,
    CanonicalKey.TIPS,
    CanonicalKey.LABOR_COST,
    CanonicalKey.LABOR_HOURS,
    CanonicalKey.LABOR_PERCENT,
)
# Métricas que se suman (labor_percent se promedia)
SUMMED_KEYS: Final[Tuple[CanonicalKey, ...]] = NUMERIC_KEYS[:-1]
LABOR_KEYS: Final[FrozenSet[CanonicalKey]] = frozenset(
    {CanonicalKey.LABOR_COST, CanonicalKey.LABOR_HOURS, CanonicalKey.LABOR_PERCENT}
)
SALES_TYPES: Final[FrozenSet[DatasetType]] = frozenset(
    {DatasetType.ITEM_SALES, DatasetType.CATEGORY_ROLLUP, DatasetType.DAILY_SALES, DatasetType.GENERAL_SALES}
)


# —— Reglas de asignación de columnas (orden = prioridad) ——

@dataclass(frozen=True)
class RoleRule:
    key: CanonicalKey
    patterns: Tuple[str, ...]
    allow_gross: bool = False


ROLE_RULES: Final[Tuple[RoleRule, ...]] = (
    RoleRule(CanonicalKey.NET_SALES, (
        r"\bnet sales\b",
        r"\bnet revenue\b",
        r"\bnet total\b",
        r"\bnet amount\b",
        r"\bsales net\b",
        r"^net$",
        r"^(total )?revenue$",
    )),
    RoleRule(CanonicalKey.TIPS, (
        r"\btips?\b(?!\s*(%|percent|pct))",
        r"\bgratuit(y|ies)\b",
        r"\btip amount\b",
    )),
    RoleRule(CanonicalKey.GUESTS, (
        r"\bguests?\b",
        r"\bguest count\b",
        r"\bcovers?\b",
        r"\bpax\b",
    )),
    RoleRule(CanonicalKey.LABOR_COST, (
        r"\blabou?r cost\b(?!\s*(%|percent|pct))",
        r"\blabou?r (\$|dollars|wages)",
        r"\bwages?\b",
        r"\bpayroll\b",
        r"^labou?r$",
    )),
    RoleRule(CanonicalKey.LABOR_HOURS, (
        r"\blabou?r hours?\b",
        r"\bhours worked\b",
        r"\btotal hours\b",
        r"^(labou?r )?hrs$",
    )),
    RoleRule(CanonicalKey.LABOR_PERCENT, (
        r"\blabou?r( cost)? ?(%|percent|pct|ratio)",
        r"^labou?r ?%$",
    )),
    RoleRule(CanonicalKey.DATE, (
        r"\bdate\b",
        r"\bbusiness day\b",
        r"^day$",
    ), allow_gross=True),
    RoleRule(CanonicalKey.CATEGORY, (
        r"\bcategory\b",
        r"\bmenu group\b",
        r"\bmajor group\b",
        r"\bdepartment\b",
    ), allow_gross=True),
    RoleRule(CanonicalKey.ITEM, (
        r"\bitem\b",
        r"\bmenu item\b",
        r"\bitem name\b",
        r"\bproduct\b",
        r"\bdish\b",
    ), allow_gross=True),
)

# Fallback de ventas netas: "sales" sin estas palabras
FALLBACK_SALES_TOKEN: Final[str] = "sales"
FALLBACK_SALES_EXCLUDE: Final[str] = r"tax|discount|void|refund|credit"
GROSS_TOKEN: Final[str] = "gross"


# —— Tabla de decisión de tipo de dataset (primera coincidencia gana) ——

DatasetRule = Tuple[Callable[[FrozenSet[CanonicalKey]], bool], DatasetType]

DATASET_TYPE_RULES: Final[Tuple[DatasetRule, ...]] = (
    (lambda k: bool(k & LABOR_KEYS), DatasetType.LABOR),
    (lambda k: CanonicalKey.NET_SALES in k and CanonicalKey.ITEM in k, DatasetType.ITEM_SALES),
    (lambda k: CanonicalKey.NET_SALES in k and CanonicalKey.CATEGORY in k, DatasetType.CATEGORY_ROLLUP),
    (lambda k: CanonicalKey.NET_SALES in k and CanonicalKey.DATE in k, DatasetType.DAILY_SALES),
    (lambda k: CanonicalKey.TIPS in k and CanonicalKey.NET_SALES not in k, DatasetType.TIPS),
    (lambda k: CanonicalKey.NET_SALES in k, DatasetType.GENERAL_SALES),
    (lambda k: CanonicalKey.TIPS in k, DatasetType.TIPS),
)


# —— Prioridades de resolución de KPIs ——
NET_SALES_PRIORITY: Final[Tuple[DatasetType, ...]] = (
    DatasetType.ITEM_SALES, DatasetType.DAILY_SALES, DatasetType.CATEGORY_ROLLUP, DatasetType.GENERAL_SALES,
)
GUESTS_PRIORITY: Final[Tuple[DatasetType, ...]] = (
    DatasetType.ITEM_SALES, DatasetType.DAILY_SALES, DatasetType.GENERAL_SALES,
)
TIPS_PRIORITY: Final[Tuple[DatasetType, ...]] = (
    DatasetType.TIPS, DatasetType.ITEM_SALES, DatasetType.DAILY_SALES, DatasetType.GENERAL_SALES,
)
LABOR_PRIORITY: Final[Tuple[DatasetType, ...]] = (DatasetType.LABOR,)
DAILY_PRIORITY: Final[Tuple[DatasetType, ...]] = (
    DatasetType.DAILY_SALES, DatasetType.ITEM_SALES, DatasetType.CATEGORY_ROLLUP, DatasetType.GENERAL_SALES,
)
CATEGORY_PRIORITY: Final[Tuple[DatasetType, ...]] = (
    DatasetType.CATEGORY_ROLLUP, DatasetType.ITEM_SALES, DatasetType.DAILY_SALES, DatasetType.GENERAL_SALES,
)
