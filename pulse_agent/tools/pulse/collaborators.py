# pulse_agent/tools/pulse/collaborators.py
from __future__ import annotations

import copy
import logging
import os
import re
import time
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol

from google import genai
from google.genai import types

from .config import AppConfig
from .exceptions import NarrativeError, PersistenceError, StorageError

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


# ----------------------------- Contratos --------------------------------------

class ObjectStorage(Protocol):
    """Guarda bytes bajo una clave y devuelve una referencia recuperable."""
    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str: ...


class ReportStore(Protocol):
    """Inserta el registro del reporte (write-once) y devuelve la fila guardada."""
    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]: ...


class NarrativeClient(Protocol):
    """Servicio opaco de completado de texto."""
    def complete(self, system: str, prompt: str) -> str: ...


def storage_key(filename: str, now_ms: Optional[int] = None) -> str:
    """'<epoch-ms>_<nombre saneado>'."""
    ms = int(time.time() * 1000) if now_ms is None else now_ms
    return f"{ms}_{_UNSAFE_FILENAME_CHARS.sub('_', filename)}"


# -------------------------- Implementaciones locales --------------------------

class LocalObjectStorage:
    """Almacenamiento en disco; la referencia es una URI file://."""
    def __init__(self, root: Optional[Path] = None) -> None:
        self._root = Path(root) if root is not None else AppConfig().storage_dir

    def put(self, key: str, data: bytes, content_type: Optional[str] = None) -> str:
        target = self._root / key
        if target.exists():
            raise StorageError(f"Object already exists: {key}")
        try:
            self._root.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as exc:
            raise StorageError(f"Storage upload failed: {exc}") from exc
        logger.info("Archivo guardado en %s (%s bytes)", target, len(data))
        return target.resolve().as_uri()


class InMemoryReportStore:
    """Store en memoria (dev/tests). Thread-unsafe por simplicidad."""
    def __init__(self) -> None:
        self._rows: List[Dict[str, Any]] = []

    def insert(self, record: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(record, dict):
            raise PersistenceError("Report record must be a mapping.")
        row = copy.deepcopy(record)
        row["id"] = str(uuid.uuid4())
        row["created_at"] = datetime.now(tz=timezone.utc).isoformat(timespec="seconds")
        self._rows.append(row)
        return copy.deepcopy(row)

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._rows]


class GeminiNarrativeClient:
    """Cliente de narrativa sobre google-genai (modelo y temperatura desde AppConfig)."""
    def __init__(self, cfg: Optional[AppConfig] = None, client: Optional[genai.Client] = None) -> None:
        self._cfg = cfg or AppConfig()
        self._client = client

    def _get_client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(api_key=os.getenv("GOOGLE_API_KEY"))
        return self._client

    def complete(self, system: str, prompt: str) -> str:
        try:
            response = self._get_client().models.generate_content(
                model=self._cfg.model,
                contents=prompt,
                config=types.GenerateContentConfig(
                    system_instruction=system,
                    temperature=self._cfg.temperature,
                ),
            )
        except Exception as exc:
            raise NarrativeError(f"Narrative request failed: {exc}") from exc
        return response.text or ""
