from __future__ import annotations

from pathlib import Path


class ExtractionError(Exception):
    """Base error for a file that could not be turned into an InvoiceResponse."""

    def __init__(self, message: str, path: Path | str | None = None, cause: str = "") -> None:
        super().__init__(message)
        self.path = Path(path) if path is not None else None
        self.cause = cause


class OpenError(ExtractionError):
    """The file could not be opened (missing, no permission, not a regular file)."""

    def __init__(self, path: Path | str, cause: str) -> None:
        super().__init__(f'Erro ao abrir o arquivo "{path}": {cause}', path, cause)


class ReadError(ExtractionError):
    """The file content could not be read as text."""

    def __init__(self, path: Path | str | None, cause: str) -> None:
        super().__init__(f"Erro ao ler o arquivo: {cause}", path, cause)


class DecodeError(ExtractionError):
    """The XML is malformed or does not match the NFS-e document model."""

    def __init__(self, path: Path | str | None, cause: str) -> None:
        super().__init__(f'Erro ao processar o XML em "{path}": {cause}', path, cause)
