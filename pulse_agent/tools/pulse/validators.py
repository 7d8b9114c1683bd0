# pulse_agent/tools/pulse/validators.py
from __future__ import annotations

from typing import Any, Dict, Mapping, Sequence

from pydantic import ValidationError

from .config import AppConfig
from .dto import UploadFile, UploadRequest
from .exceptions import UploadValidationError

# Mensajes para el usuario por campo del request
_FIELD_MESSAGES: Dict[str, str] = {
    "restaurant_name": "Invalid restaurant name",
    "period": "Invalid period",
    "report_type": "Invalid report type",
    "owner_id": "Invalid owner",
}


def validate_request(payload: Mapping[str, Any]) -> UploadRequest:
    """Construye el UploadRequest; el primer error se traduce a un mensaje claro."""
    try:
        return UploadRequest(**dict(payload))
    except ValidationError as exc:
        errors = exc.errors()
        field = str(errors[0]["loc"][0]) if errors and errors[0].get("loc") else ""
        raise UploadValidationError(_FIELD_MESSAGES.get(field, "Invalid request")) from exc


def validate_file(f: UploadFile, cfg: AppConfig) -> None:
    if f.size == 0 or f.size > cfg.max_file_bytes:
        mb = cfg.max_file_bytes // (1024 * 1024)
        raise UploadValidationError(f"File required and must be under {mb}MB")
    if not f.filename.lower().endswith(cfg.allowed_extensions):
        raise UploadValidationError("Only CSV and Excel files allowed")


def validate_files(files: Sequence[UploadFile], cfg: AppConfig) -> None:
    """Se rechaza el lote completo antes de parsear cualquier archivo."""
    if not files:
        raise UploadValidationError("At least one file is required")
    for f in files:
        validate_file(f, cfg)
