# pulse_agent/tools/pulse/narrative.py
from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .collaborators import NarrativeClient
from .config import AppConfig
from .dto import NarrativeResult, ResolvedKPISet
from .i18n import LocaleConfig, format_count, format_currency, format_percent

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = """You are a restaurant analytics expert. Analyze the provided KPIs and provide:
- A brief 2-3 sentence summary
- 3 key insights (bullet points)
- 3 actionable recommendations (bullet points)

Keep your response concise, data-driven, and actionable.
Only reason about the metrics you are given; do not assume values for missing ones."""

BULLET_MARKERS: Tuple[str, ...] = ("-", "•")

# (campo en KPIValues, etiqueta, formato)
_KPI_LINES: Tuple[Tuple[str, str, str], ...] = (
    ("net_sales", "Net Sales", "currency"),
    ("guests", "Guests", "count"),
    ("ppa", "PPA", "currency"),
    ("tip_percent", "Tip %", "percent"),
    ("labor_percent", "Labor %", "percent"),
)


def system_prompt(cfg: Optional[AppConfig] = None) -> str:
    cfg = cfg or AppConfig()
    return cfg.system_prompt or DEFAULT_SYSTEM_PROMPT


def _format(value: float, fmt: str, loc: LocaleConfig) -> str:
    if fmt == "currency":
        return format_currency(value, loc)
    if fmt == "percent":
        return format_percent(value)
    return format_count(value, loc)


def has_content(kpis: ResolvedKPISet) -> bool:
    available = kpis.available.model_dump()
    return any(available.values()) or bool(kpis.charts.category_mix)


def build_prompt(
    restaurant_name: str,
    period: str,
    kpis: ResolvedKPISet,
    cfg: Optional[AppConfig] = None,
) -> str:
    """Bloque de texto con SOLO los KPIs disponibles y el mix de categorías.

    Un KPI no disponible se omite (nunca se envía como 0). El mix se recorta
    para respetar cfg.prompt_max_chars.
    """
    cfg = cfg or AppConfig()
    loc = LocaleConfig(locale=cfg.locale, currency=cfg.currency)
    values = kpis.values.model_dump()
    available = kpis.available.model_dump()

    lines: List[str] = [f"Analyze these restaurant metrics for {restaurant_name} ({period}):", ""]
    for field, label, fmt in _KPI_LINES:
        if available.get(field):
            lines.append(f"{label}: {_format(values[field], fmt, loc)}")

    prompt = "\n".join(lines)
    mix = kpis.charts.category_mix[: cfg.category_mix_in_prompt]
    if mix:
        block = "\n\nCategory Mix:"
        if len(prompt) + len(block) <= cfg.prompt_max_chars:
            prompt += block
            for point in mix:
                line = f"\n- {point.name}: {format_currency(point.value, loc)}"
                if len(prompt) + len(line) > cfg.prompt_max_chars:
                    break
                prompt += line
    return prompt[: cfg.prompt_max_chars]


def _strip_bullet(line: str) -> str:
    return line[1:].strip()


def parse_response(text: Optional[str]) -> NarrativeResult:
    """Texto plano -> summary (3 primeras líneas), insights y actions (viñetas)."""
    lines = [ln.strip() for ln in (text or "").split("\n") if ln.strip()]
    if not lines:
        return NarrativeResult.unavailable()
    bullets = [_strip_bullet(ln) for ln in lines if ln.startswith(BULLET_MARKERS)]
    return NarrativeResult(
        available=True,
        summary=" ".join(lines[:3]),
        insights=bullets[:3],
        actions=bullets[3:6],
    )


def generate_narrative(
    client: Optional[NarrativeClient],
    restaurant_name: str,
    period: str,
    kpis: ResolvedKPISet,
    cfg: Optional[AppConfig] = None,
) -> NarrativeResult:
    """Llama al colaborador de texto; cualquier falla se degrada a 'unavailable'."""
    cfg = cfg or AppConfig()
    if client is None:
        logger.info("Sin cliente de narrativa configurado; análisis no disponible.")
        return NarrativeResult.unavailable()
    if not has_content(kpis):
        logger.info("Sin KPIs disponibles; se omite la llamada de narrativa.")
        return NarrativeResult.unavailable()

    prompt = build_prompt(restaurant_name, period, kpis, cfg)
    try:
        text = client.complete(system_prompt(cfg), prompt)
    except Exception as exc:
        logger.warning("Falla en la narrativa; se degrada a 'unavailable': %s", exc)
        return NarrativeResult.unavailable()
    return parse_response(text)
