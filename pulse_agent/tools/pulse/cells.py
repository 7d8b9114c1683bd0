# pulse_agent/tools/pulse/cells.py
from __future__ import annotations

import math
import re
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

import numpy as np
import pandas as pd

_SPACES = re.compile(r"[\s_]+")
_NON_ALNUM = re.compile(r"[^a-z0-9]")
# Símbolos de moneda, separadores de miles, porcentaje y espacios
_NUMERIC_NOISE = re.compile(r"[$€£,%\s]")


def is_blank(raw: Any) -> bool:
    """True para None, NaN/NaT y textos vacíos."""
    if raw is None:
        return True
    if isinstance(raw, str):
        return not raw.strip()
    try:
        return bool(pd.isna(raw))
    except (TypeError, ValueError):
        return False


def normalize_header(raw: Any, compact: bool = False) -> str:
    """Minúsculas y espacios/guiones bajos colapsados a un solo espacio.
    compact=True reproduce la variante antigua: solo [a-z0-9], sin espacios.
    """
    text = "" if is_blank(raw) else str(raw)
    text = text.lower()
    if compact:
        return _NON_ALNUM.sub("", text)
    return _SPACES.sub(" ", text).strip()


def parse_numeric(raw: Any) -> Optional[float]:
    """Única fuente de verdad numérica para todas las métricas.

    - Numéricos nativos (int/float/numpy/Decimal) se aceptan tal cual; NaN/inf -> None.
    - Texto: se quitan '$', separadores de miles, '%' y espacios;
      '(123.45)' se interpreta como negativo.
    - Vacío o no parseable -> None. Booleanos y fechas -> None.
    """
    if raw is None or isinstance(raw, (bool, np.bool_)):
        return None
    if isinstance(raw, (int, float, np.integer, np.floating, Decimal)):
        value = float(raw)
        return value if math.isfinite(value) else None
    if not isinstance(raw, str):
        return None

    cleaned = _NUMERIC_NOISE.sub("", raw)
    if not cleaned:
        return None

    negative = False
    if cleaned.startswith("(") and cleaned.endswith(")"):
        negative = True
        cleaned = cleaned[1:-1]
    try:
        value = float(cleaned)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return -value if negative else value


def normalize_text_cell(raw: Any) -> Optional[str]:
    """Texto limpio para categorías / ítems. Floats enteros sin '.0'."""
    if is_blank(raw):
        return None
    if isinstance(raw, np.generic):
        raw = raw.item()
    if isinstance(raw, float) and raw.is_integer():
        return str(int(raw))
    text = str(raw).strip()
    return text or None


def normalize_date_cell(raw: Any) -> Optional[str]:
    """Fecha ISO 'YYYY-MM-DD'.

    Fechas nativas: se toma la parte de calendario (sin conversión de zona).
    Textos: parser general de pandas; si falla, se devuelve el texto tal cual
    para que siga sirviendo como clave de agrupación.
    """
    if is_blank(raw):
        return None
    if isinstance(raw, datetime):  # incluye pd.Timestamp
        return raw.date().isoformat()
    if isinstance(raw, date):
        return raw.isoformat()
    if isinstance(raw, np.datetime64):
        return pd.Timestamp(raw).date().isoformat()
    if not isinstance(raw, str):
        return normalize_text_cell(raw)

    text = raw.strip()
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        parsed = pd.NaT
    if pd.isna(parsed):
        return text
    return parsed.date().isoformat()
