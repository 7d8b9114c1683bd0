# pulse_agent/tools/pulse/i18n.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional


@dataclass(frozen=True)
class LocaleConfig:
    """Configuración mínima de formato (símbolo y separadores)."""
    locale: str = "en-US"
    currency: str = "USD"
    currency_symbol: str = "$"
    decimal_sep: str = "."
    thousand_sep: str = ","


DEFAULT_LOCALE = LocaleConfig()


def _with_separators(s: str, cfg: LocaleConfig) -> str:
    # "{:,.2f}" usa separadores US; se sustituyen si el locale difiere
    if cfg.thousand_sep != "," or cfg.decimal_sep != ".":
        s = s.replace(",", "X").replace(".", cfg.decimal_sep).replace("X", cfg.thousand_sep)
    return s


def format_currency(value: Optional[float], cfg: LocaleConfig = DEFAULT_LOCALE, ndigits: int = 2) -> str:
    """Formatea un float como moneda. Si value es None, devuelve '-'."""
    if value is None:
        return "-"
    q = round(float(value), ndigits)
    sign = "-" if q < 0 else ""
    s = _with_separators(f"{abs(q):,.{ndigits}f}", cfg)
    return f"{sign}{cfg.currency_symbol}{s}"


def format_percent(value: Optional[float], ndigits: int = 2) -> str:
    """Formatea un valor ya expresado en puntos porcentuales: 28.5 -> '28.50%'."""
    if value is None:
        return "-"
    q = round(float(value), ndigits)
    return f"{q:.{ndigits}f}%"


def format_count(value: Optional[float], cfg: LocaleConfig = DEFAULT_LOCALE) -> str:
    if value is None:
        return "-"
    return _with_separators(f"{int(round(value)):,}", cfg)


def add_formatted_fields(
    row: Mapping[str, object],
    currency_fields: Iterable[str],
    percent_fields: Iterable[str],
    count_fields: Iterable[str] = (),
    cfg: LocaleConfig = DEFAULT_LOCALE,
    suffix: str = "_fmt",
) -> Dict[str, object]:
    """Devuelve un nuevo dict con campos formateados añadidos para UI.
    Ej.: 'net_sales' -> 'net_sales_fmt'
    """
    out: Dict[str, object] = dict(row)
    for c in currency_fields:
        v = row.get(c)
        out[f"{c}{suffix}"] = format_currency(v if isinstance(v, (int, float)) else None, cfg=cfg)
    for p in percent_fields:
        v = row.get(p)
        out[f"{p}{suffix}"] = format_percent(v if isinstance(v, (int, float)) else None)
    for n in count_fields:
        v = row.get(n)
        out[f"{n}{suffix}"] = format_count(v if isinstance(v, (int, float)) else None, cfg=cfg)
    return out
