# pulse_agent/tools/tool_pulse.py
from __future__ import annotations

from typing import Optional, Literal, List, Dict, Any
import dataclasses
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from pathlib import Path
import logging
import math

import numpy as np

# === Capa de dominio =========================================================
from .pulse.collaborators import GeminiNarrativeClient, InMemoryReportStore, LocalObjectStorage
from .pulse.config import AppConfig
from .pulse.service import Collaborators, run_pulse_upload
from .pulse.dto import UploadFile

logger = logging.getLogger(__name__)

# Config por defecto
DEFAULT_CFG = AppConfig()


def default_collaborators(cfg: AppConfig = DEFAULT_CFG) -> Collaborators:
    """Colaboradores nuevos por llamada; nada se comparte entre requests."""
    return Collaborators(
        storage=LocalObjectStorage(cfg.storage_dir),
        reports=InMemoryReportStore(),
        narrator=GeminiNarrativeClient(cfg),
    )


# ------------------------------- Helpers -------------------------------------
def _norm_report_type(x: Optional[str]) -> Optional[str]:
    if not x:
        return None
    v = x.lower().strip()
    # Normalizamos parametros
    mapping = {
        "sales": "sales",
        "sale": "sales",
        "revenue": "sales",
        "labor": "labor",
        "labour": "labor",
        "payroll": "labor",
        "performance": "performance",
        "perf": "performance",
        "combined": "performance",
    }
    return mapping.get(v, v)


def _json_safe(obj: Any) -> Any:
    """Convierte recursivamente a tipos JSON-serializables."""
    # escalares especiales
    if isinstance(obj, (date, datetime)):
        return obj.isoformat()
    if isinstance(obj, Decimal):
        return float(obj)
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, float) and (math.isnan(obj) or math.isinf(obj)):
        return None

    # numpy
    if isinstance(obj, np.generic):
        return _json_safe(obj.item())
    if isinstance(obj, np.ndarray):
        return [_json_safe(x) for x in obj.tolist()]

    # estructuras
    if isinstance(obj, dict):
        return {str(k): _json_safe(v) for k, v in obj.items()}
    if isinstance(obj, (list, tuple, set, frozenset)):
        return [_json_safe(v) for v in obj]

    # dataclass
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return _json_safe(dataclasses.asdict(obj))

    # pydantic v2
    model_dump = getattr(obj, "model_dump", None)
    if callable(model_dump):
        return _json_safe(model_dump())

    return obj


def _normalize_result(result_obj: Any) -> Dict[str, Any]:
    """Normaliza y asegura JSON-safe para el payload de salida."""
    if isinstance(result_obj, dict):
        return _json_safe(result_obj)

    model_dump = getattr(result_obj, "model_dump", None)
    if callable(model_dump):
        return _json_safe(model_dump())

    # fallback amable
    return _json_safe({
        "ok": False,
        "report": None,
        "error": f"Unserializable result: {type(result_obj).__name__}",
    })


def _read_files(file_paths: List[str]) -> List[UploadFile]:
    out: List[UploadFile] = []
    for raw in file_paths:
        p = Path(raw).expanduser()
        if not p.is_file():
            raise FileNotFoundError(f"File not found: {raw}")
        out.append(UploadFile(filename=p.name, data=p.read_bytes()))
    return out


def run_pulse_report(
    restaurant_name: str,
    period: str,
    file_paths: List[str],
    report_type: Optional[Literal["sales", "labor", "performance"]] = None,
    owner_id: Optional[str] = None,
    collaborators: Optional[Collaborators] = None,
    app_cfg: Optional[AppConfig] = None,
) -> Dict[str, Any]:
    """Lee archivos locales y corre el pipeline; colaboradores inyectables."""
    cfg = app_cfg or DEFAULT_CFG
    try:
        files = _read_files(file_paths or [])
    except (FileNotFoundError, OSError) as exc:
        return {"ok": False, "report": None, "error": str(exc)}

    payload: Dict[str, Any] = {
        "restaurant_name": restaurant_name,
        "period": period,
        "report_type": _norm_report_type(report_type),
        "owner_id": owner_id,
    }

    try:
        result_obj = run_pulse_upload(
            payload, files, collaborators or default_collaborators(cfg), app_cfg=cfg
        )
        return _normalize_result(result_obj)
    except Exception as exc:
        logger.exception("Fallo inesperado en pulse_report.")
        return {
            "ok": False,
            "report": None,
            "error": f"{type(exc).__name__}: {exc}",
        }


# --------------------------- Tool pública (AFC) -------------------------------
def pulse_report(
    restaurant_name: str,
    period: str,
    file_paths: List[str],
    report_type: Optional[Literal["sales", "labor", "performance"]] = None,
) -> Dict[str, Any]:
    """
    Tool pública AFC-friendly: analiza reportes de ventas/labor (CSV, XLSX, XLS)
    y guarda un reporte con KPIs, gráficas y narrativa.

    Parámetros:
      - restaurant_name: nombre del restaurante (máx. 100 caracteres).
      - period: etiqueta del periodo, p. ej. "Nov 2024" (máx. 50 caracteres).
      - file_paths: rutas locales de los archivos a analizar (uno o varios).
      - report_type: "sales" | "labor" | "performance". Si falta, se infiere.

    Retorna:
      dict JSON-serializable con llaves: ok, report, warnings, meta, error, request_id.
    """
    return run_pulse_report(
        restaurant_name=restaurant_name,
        period=period,
        file_paths=file_paths,
        report_type=report_type,
    )
