# pulse_agent/tools/pulse/dto.py
from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .config import MAX_PERIOD_LABEL, MAX_RESTAURANT_NAME

# —— Literales y tipos ——
ReportTypeLiteral = Literal["sales", "labor", "performance"]
StatusLiteral = Literal["pending", "approved"]


class UploadRequest(BaseModel):
    """Contrato de entrada de un upload (campos de texto del formulario)."""
    restaurant_name: str
    period: str
    report_type: Optional[ReportTypeLiteral] = Field(
        default=None, description="Si falta, se infiere de los tipos de dataset."
    )
    owner_id: Optional[str] = None

    @field_validator("restaurant_name")
    @classmethod
    def _validate_restaurant_name(cls, v: str) -> str:
        v = (v or "").strip()
        if not v or len(v) > MAX_RESTAURANT_NAME:
            raise ValueError("Invalid restaurant name")
        return v

    @field_validator("period")
    @classmethod
    def _validate_period(cls, v: str) -> str:
        v = (v or "").strip()
        if not v or len(v) > MAX_PERIOD_LABEL:
            raise ValueError("Invalid period")
        return v


class UploadFile(BaseModel):
    filename: str
    data: bytes = Field(repr=False)
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.data)


class SourceFile(BaseModel):
    """Metadatos por archivo para el bundle de gráficas."""
    filename: str
    storage_ref: Optional[str] = None
    dataset_type: str
    row_count: int = 0
    columns: Dict[str, str] = Field(default_factory=dict)
    skipped: bool = False
    reason: Optional[str] = None


# —— KPIs ——

class KPIValues(BaseModel):
    net_sales: Optional[float] = None
    guests: Optional[int] = None
    ppa: Optional[float] = None
    tip_percent: Optional[float] = None
    labor_percent: Optional[float] = None


class KPIAvailability(BaseModel):
    """Paralelo a KPIValues: distingue 'cero' de 'desconocido'."""
    net_sales: bool = False
    guests: bool = False
    ppa: bool = False
    tip_percent: bool = False
    labor_percent: bool = False

    @classmethod
    def from_values(cls, values: KPIValues) -> "KPIAvailability":
        return cls(**{k: v is not None for k, v in values.model_dump().items()})


class RawTotals(BaseModel):
    tips: Optional[float] = None
    labor_cost: Optional[float] = None
    labor_hours: Optional[float] = None


class DailySalesPoint(BaseModel):
    date: str
    sales: float


class PPAPoint(BaseModel):
    date: str
    ppa: float


class CategoryPoint(BaseModel):
    name: str
    value: float


class ChartAvailability(BaseModel):
    daily_sales: bool = False
    ppa_trend: bool = False
    category_mix: bool = False


class ChartSeries(BaseModel):
    daily_sales: List[DailySalesPoint] = Field(default_factory=list)
    ppa_trend: List[PPAPoint] = Field(default_factory=list)
    category_mix: List[CategoryPoint] = Field(default_factory=list)

    def availability(self) -> ChartAvailability:
        return ChartAvailability(
            daily_sales=bool(self.daily_sales),
            ppa_trend=bool(self.ppa_trend),
            category_mix=bool(self.category_mix),
        )


class ResolvedKPISet(BaseModel):
    """Salida final del resolvedor; se calcula una vez por upload."""
    values: KPIValues
    available: KPIAvailability
    totals: RawTotals = Field(default_factory=RawTotals)
    sources: Dict[str, Optional[str]] = Field(default_factory=dict)
    charts: ChartSeries = Field(default_factory=ChartSeries)
    charts_available: ChartAvailability = Field(default_factory=ChartAvailability)

    model_config = {"frozen": True}


# —— Narrativa ——

class NarrativeResult(BaseModel):
    available: bool
    summary: str
    insights: List[str] = Field(default_factory=list)
    actions: List[str] = Field(default_factory=list)

    @staticmethod
    def unavailable() -> "NarrativeResult":
        return NarrativeResult(
            available=False,
            summary="Analysis unavailable.",
            insights=[],
            actions=[],
        )


# —— Registro persistido ——

class ReportRecord(BaseModel):
    """Registro único por upload (write-once)."""
    restaurant_name: str
    report_type: ReportTypeLiteral
    period: str
    file_url: Optional[str] = None
    kpis: Dict[str, Any]
    agent: NarrativeResult
    chart_data: Dict[str, Any]
    user_id: Optional[str] = None
    status: StatusLiteral = "pending"
    warnings: List[str] = Field(default_factory=list)


class MetaInfo(BaseModel):
    files_received: int
    files_parsed: int
    generated_at: str
    currency: str
    locale: str


class PulseResult(BaseModel):
    """Contrato de salida del servicio: estable y serializable."""
    ok: bool
    report: Optional[Dict[str, Any]] = None
    warnings: List[str] = Field(default_factory=list)
    meta: Optional[MetaInfo] = None
    error: Optional[str] = None
    request_id: Optional[str] = None
