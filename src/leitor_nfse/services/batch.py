"""Batch processing of NFS-e files.

A batch run is all-or-nothing by default: the first file that fails aborts
the run, the remaining paths are never opened and no records are kept.
Partial mode parses every path and keeps the records of the files that
succeeded.
"""

from __future__ import annotations

import enum
import logging
import os
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path

from leitor_nfse.models.nfse import InvoiceDetail
from leitor_nfse.services.exceptions import ExtractionError
from leitor_nfse.services.extractor import parse

logger = logging.getLogger(__name__)

XML_SUFFIX = ".xml"


class BatchStatus(enum.Enum):
    IDLE = "idle"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class FileFailure:
    path: Path
    message: str


@dataclass(frozen=True)
class BatchResult:
    """Outcome of one batch run, handed as-is to the display layer."""

    status: BatchStatus
    paths: tuple[Path, ...] = ()
    records: tuple[InvoiceDetail, ...] = ()
    error: str | None = None
    failures: tuple[FileFailure, ...] = ()

    @classmethod
    def idle(cls) -> BatchResult:
        return cls(status=BatchStatus.IDLE)


def scan_directory(root: Path | str) -> list[Path]:
    """Recursively list regular files ending in exactly ``.xml`` (case-sensitive).

    Symlinked directories are not followed and unreadable directories are
    skipped. Order is sorted by directory, then by file name.
    """
    found: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(root, followlinks=False):
        dirnames.sort()
        found.extend(
            Path(dirpath) / name
            for name in sorted(filenames)
            if os.path.splitext(name)[1] == XML_SUFFIX and (Path(dirpath) / name).is_file()
        )
    return found


def expand_paths(paths: Iterable[Path | str]) -> list[Path]:
    """Replace each directory in *paths* with its scanned XML files, keeping order."""
    expanded: list[Path] = []
    for p in paths:
        p = Path(p)
        if p.is_dir():
            expanded.extend(scan_directory(p))
        else:
            expanded.append(p)
    return expanded


def _failure_message(path: Path, exc: ExtractionError) -> str:
    return f"Erro ao processar {path}: {exc}"


def run_batch(paths: Iterable[Path | str], *, partial: bool = False) -> BatchResult:
    """Parse *paths* in order and flatten their NFS-e records.

    Strict mode (default) returns FAILED with a single message naming the
    first failing file. With ``partial=True`` every file is parsed, failures
    are collected in ``failures`` and the records of the other files are kept.
    """
    path_list = tuple(Path(p) for p in paths)
    records: list[InvoiceDetail] = []
    failures: list[FileFailure] = []

    for path in path_list:
        try:
            response = parse(path)
        except ExtractionError as e:
            message = _failure_message(path, e)
            logger.warning("%s", message)
            if not partial:
                return BatchResult(
                    status=BatchStatus.FAILED,
                    paths=path_list,
                    error=message,
                    failures=(FileFailure(path, message),),
                )
            failures.append(FileFailure(path, message))
            continue
        records.extend(response.details())

    error = None
    if failures:
        error = f"{len(failures)} de {len(path_list)} arquivo(s) com erro"
    logger.info(
        "Batch finished: %d file(s), %d NFS-e, %d failure(s)",
        len(path_list),
        len(records),
        len(failures),
    )
    return BatchResult(
        status=BatchStatus.DONE,
        paths=path_list,
        records=tuple(records),
        error=error,
        failures=tuple(failures),
    )
