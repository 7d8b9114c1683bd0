# pulse_agent/tools/pulse/service.py
from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from .agg.combine import combine_files
from .agg.kpis import infer_report_type, resolve_kpis
from .collaborators import NarrativeClient, ObjectStorage, ReportStore, storage_key
from .config import AppConfig
from .diagnostics import describe_parsed, describe_skipped
from .dto import PulseResult, SourceFile, UploadFile, UploadRequest
from .exceptions import (
    NoUsableFiles,
    PersistenceError,
    PulseError,
    StructuralParseError,
    UploadValidationError,
)
from .formatters import build_meta, build_record
from .loader import load_rows
from .narrative import generate_narrative
from .parser import ParsedFile, parse_rows
from .validators import validate_files, validate_request

logger = logging.getLogger(__name__)

GENERIC_FAILURE = "Upload processing failed. Please try again or contact support if this persists."


@dataclass
class Collaborators:
    """Colaboradores externos de un request (inyectables en tests)."""
    storage: ObjectStorage
    reports: ReportStore
    narrator: Optional[NarrativeClient] = None


@dataclass
class _BatchState:
    parsed: List[ParsedFile] = field(default_factory=list)
    sources: List[SourceFile] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _parse_batch(files: Sequence[UploadFile], storage: ObjectStorage, cfg: AppConfig) -> _BatchState:
    """Guarda y parsea cada archivo en orden (secuencial, sin paralelismo)."""
    state = _BatchState()
    for f in files:
        ref = storage.put(storage_key(f.filename), f.data, f.content_type)
        try:
            sheet = load_rows(f.filename, f.data)
            parsed = parse_rows(f.filename, sheet.rows, cfg)
        except StructuralParseError as exc:
            if not cfg.skip_bad_files:
                raise
            logger.warning("Se omite %s: %s", f.filename, exc)
            state.warnings.append(f"Skipped {f.filename}: {exc}")
            state.sources.append(describe_skipped(f.filename, ref, str(exc)))
            continue
        state.parsed.append(parsed)
        state.sources.append(describe_parsed(parsed, ref))
    return state


def process_upload(
    request: UploadRequest,
    files: Sequence[UploadFile],
    collaborators: Collaborators,
    app_cfg: Optional[AppConfig] = None,
) -> PulseResult:
    """
    Núcleo del pipeline. Orquesta:
    validación -> storage -> filas -> parseo -> combinación -> KPIs -> narrativa -> persistencia.
    Lanza excepciones de dominio; run_pulse_upload las traduce a PulseResult.
    """
    cfg = app_cfg or AppConfig()
    validate_files(files, cfg)

    state = _parse_batch(files, collaborators.storage, cfg)
    if not state.parsed:
        raise NoUsableFiles("None of the uploaded files could be parsed.")

    groups = combine_files(state.parsed, cfg)
    kpis = resolve_kpis(groups)
    report_type = request.report_type or infer_report_type(groups)

    narrative = generate_narrative(
        collaborators.narrator, request.restaurant_name, request.period, kpis, cfg
    )

    record = build_record(
        request, report_type, kpis, narrative, groups, state.sources, state.warnings, cfg
    )
    try:
        stored = collaborators.reports.insert(record.model_dump(mode="json"))
    except PersistenceError:
        raise
    except Exception as exc:
        raise PersistenceError(f"Database insert failed: {exc}") from exc

    logger.info("Reporte guardado: id=%s tipo=%s", stored.get("id"), report_type)
    return PulseResult(
        ok=True,
        report=stored,
        warnings=state.warnings,
        meta=build_meta(len(files), len(state.parsed), cfg),
    )


def run_pulse_upload(
    payload: Union[UploadRequest, Mapping[str, Any]],
    files: Sequence[UploadFile],
    collaborators: Collaborators,
    app_cfg: Optional[AppConfig] = None,
) -> PulseResult:
    """
    Punto de entrada del core: nunca lanza. Errores de validación y de parseo
    vuelven con mensaje para el usuario; el resto, con un mensaje genérico y un
    request_id (el detalle queda solo en el log).
    """
    try:
        request = payload if isinstance(payload, UploadRequest) else validate_request(payload)
        return process_upload(request, files, collaborators, app_cfg)

    except UploadValidationError as ve:
        logger.info("Upload rechazado: %s", ve)
        return PulseResult(ok=False, error=str(ve))
    except StructuralParseError as pe:
        logger.warning("Upload sin archivos utilizables: %s", pe)
        return PulseResult(ok=False, error=str(pe))
    except PulseError:
        request_id = str(uuid.uuid4())
        logger.exception("Error de dominio en pulse service (request_id=%s).", request_id)
        return PulseResult(ok=False, error=GENERIC_FAILURE, request_id=request_id)
    except Exception:
        request_id = str(uuid.uuid4())
        logger.exception("Fallo no controlado en pulse service (request_id=%s).", request_id)
        return PulseResult(ok=False, error=GENERIC_FAILURE, request_id=request_id)
