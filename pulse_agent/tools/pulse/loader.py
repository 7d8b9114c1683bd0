# pulse_agent/tools/pulse/loader.py
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from typing import Any, List, Literal

import pandas as pd

from .exceptions import EmptyFile, UnreadableFile

logger = logging.getLogger(__name__)

FormatLiteral = Literal["csv", "excel"]
DataRow = List[Any]


@dataclass(frozen=True)
class SheetRows:
    """Filas crudas de un archivo (primera hoja si es Excel)."""
    filename: str
    fmt: FormatLiteral
    rows: List[DataRow]


def format_hint(filename: str) -> FormatLiteral:
    return "csv" if filename.lower().endswith(".csv") else "excel"


# ------------------------- Helpers de lectura ---------------------------------

def _decode(data: bytes) -> str:
    """UTF-8 (con o sin BOM); si falla, latin-1 que nunca falla."""
    try:
        return data.decode("utf-8-sig")
    except UnicodeDecodeError:
        return data.decode("latin-1")


def _read_csv(data: bytes) -> pd.DataFrame:
    text = _decode(data)
    lines = [ln for ln in text.splitlines() if ln.strip()]
    if not lines:
        raise EmptyFile("CSV file is empty.")
    # Los reportes traen filas de título más cortas que el encabezado;
    # fijamos un ancho máximo para que pandas acepte filas desiguales.
    width = max(ln.count(",") + 1 for ln in lines)
    return pd.read_csv(
        io.StringIO(text),
        header=None,
        names=list(range(width)),
        dtype=object,
        keep_default_na=False,
        skip_blank_lines=True,
        engine="python",
    )


def _read_excel(data: bytes) -> pd.DataFrame:
    # sheet_name=0: solo la primera hoja; el engine (openpyxl/xlrd) lo elige pandas
    return pd.read_excel(io.BytesIO(data), sheet_name=0, header=None, dtype=object)


def _to_rows(df: pd.DataFrame) -> List[DataRow]:
    """DataFrame -> listas de celdas (str | número | fecha | NaN)."""
    if df.empty:
        return []
    return df.to_numpy(dtype=object).tolist()


# -------------------------- API pública ---------------------------------------

def load_rows(filename: str, data: bytes) -> SheetRows:
    """Extrae filas con la misma forma para CSV y hojas de cálculo."""
    fmt = format_hint(filename)
    try:
        df = _read_csv(data) if fmt == "csv" else _read_excel(data)
    except EmptyFile:
        raise
    except pd.errors.EmptyDataError as exc:
        raise EmptyFile(f"{filename}: file is empty.") from exc
    except Exception as exc:
        logger.warning("No se pudo leer %s como %s: %s", filename, fmt, exc)
        raise UnreadableFile(f"{filename}: could not be read as {fmt}.") from exc

    rows = _to_rows(df)
    logger.info("Filas extraídas de %s (%s): %s", filename, fmt, len(rows))
    return SheetRows(filename=filename, fmt=fmt, rows=rows)
