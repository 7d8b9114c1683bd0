# pulse_agent/tools/pulse/exceptions.py
from __future__ import annotations

class PulseError(Exception):
    """Base para errores del dominio del pipeline de reportes."""

class UploadValidationError(PulseError):
    """Request o archivo inválido; el mensaje se muestra al usuario."""

class StructuralParseError(PulseError):
    """El archivo no se pudo interpretar como tabla."""

class UnreadableFile(StructuralParseError):
    """Bytes ilegibles como CSV u hoja de cálculo."""

class EmptyFile(StructuralParseError):
    """El archivo no tiene filas con contenido."""

class HeaderNotFound(StructuralParseError):
    """Ninguna fila candidata parece un encabezado."""

class NoUsableFiles(StructuralParseError):
    """Todos los archivos del lote fallaron al parsearse."""

class NarrativeError(PulseError):
    """Falla del colaborador de narrativa (se degrada, no aborta)."""

class StorageError(PulseError):
    """No se pudo guardar el archivo original."""

class PersistenceError(PulseError):
    """No se pudo persistir el reporte."""
