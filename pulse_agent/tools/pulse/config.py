# pulse_agent/tools/pulse/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Final, Optional, Tuple

from dotenv import load_dotenv

load_dotenv()

# —— Archivos de entrada ——
MAX_FILE_MB: Final[float] = float(os.getenv("PULSE_MAX_FILE_MB", "10"))
ALLOWED_EXTENSIONS: Final[Tuple[str, ...]] = (".csv", ".xlsx", ".xls")

# —— Inferencia de esquema ——
HEADER_SCAN_ROWS: Final[int] = int(os.getenv("PULSE_HEADER_SCAN_ROWS", "25"))
SAMPLE_ROWS: Final[int] = int(os.getenv("PULSE_SAMPLE_ROWS", "50"))
SKIP_BAD_FILES: Final[bool] = os.getenv("PULSE_SKIP_BAD_FILES", "true").lower() == "true"

# —— Campos del request ——
MAX_RESTAURANT_NAME: Final[int] = 100
MAX_PERIOD_LABEL: Final[int] = 50

# —— Almacenamiento local ——
STORAGE_DIR: Final[Path] = Path(os.getenv("PULSE_STORAGE_DIR", "pulse-data"))

# —— Narrativa (LLM) ——
MODEL: Final[str] = os.getenv("PULSE_MODEL", "gemini-2.5-flash")
TEMPERATURE: Final[float] = float(os.getenv("PULSE_TEMPERATURE", "0.4"))
SYSTEM_PROMPT: Final[Optional[str]] = os.getenv("PULSE_SYSTEM_PROMPT") or None
PROMPT_MAX_CHARS: Final[int] = int(os.getenv("PULSE_PROMPT_MAX_CHARS", "4000"))
CATEGORY_MIX_IN_PROMPT: Final[int] = 10

# —— Localización ——
DEFAULT_LOCALE: Final[str] = os.getenv("PULSE_LOCALE", "en-US")
DEFAULT_CURRENCY: Final[str] = os.getenv("PULSE_CURRENCY", "USD")


@dataclass(frozen=True)
class AppConfig:
    """Snapshot inmutable de configuración consumida por el servicio."""
    max_file_bytes: int = int(MAX_FILE_MB * 1024 * 1024)
    allowed_extensions: Tuple[str, ...] = ALLOWED_EXTENSIONS
    header_scan_rows: int = HEADER_SCAN_ROWS
    sample_rows: int = SAMPLE_ROWS
    skip_bad_files: bool = SKIP_BAD_FILES
    max_restaurant_name: int = MAX_RESTAURANT_NAME
    max_period_label: int = MAX_PERIOD_LABEL
    storage_dir: Path = STORAGE_DIR
    model: str = MODEL
    temperature: float = TEMPERATURE
    system_prompt: Optional[str] = SYSTEM_PROMPT
    prompt_max_chars: int = PROMPT_MAX_CHARS
    category_mix_in_prompt: int = CATEGORY_MIX_IN_PROMPT
    locale: str = DEFAULT_LOCALE
    currency: str = DEFAULT_CURRENCY
    header_keywords: Tuple[str, ...] = field(
        default=("sales", "net", "guest", "cover", "tip", "labor", "category", "item", "date", "revenue", "hours")
    )
