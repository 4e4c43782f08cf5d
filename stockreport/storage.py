from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Protocol

from . import config
from .errors import PersistErrorKind, PersistWarning
from .models import ReportRun, get_session
from .pipeline.metadata import ensure_pdf_suffix


logger = logging.getLogger(__name__)

MAX_NAME_ATTEMPTS = 100


class StorageContext(Protocol):
    def check_permission(self) -> bool:
        ...

    def resolve_directory(self, granted: bool) -> Path:
        ...

    def write(self, path: Path, data: bytes) -> None:
        ...


def _can_write(directory: Path) -> bool:
    probe = directory
    while not probe.exists() and probe != probe.parent:
        probe = probe.parent
    return os.access(probe, os.W_OK)


class LocalStorageContext:
    """
    Public download directory when storage access is granted, an
    application-private directory otherwise.
    """

    def __init__(
        self,
        public_dir: Optional[Path] = None,
        private_dir: Optional[Path] = None,
        permission_check: Optional[Callable[[], bool]] = None,
    ) -> None:
        self.public_dir = Path(public_dir) if public_dir else config.DOWNLOAD_DIR
        self.private_dir = Path(private_dir) if private_dir else config.PRIVATE_DIR
        self._permission_check = permission_check

    def check_permission(self) -> bool:
        if self._permission_check is not None:
            return bool(self._permission_check())
        return _can_write(self.public_dir)

    def resolve_directory(self, granted: bool) -> Path:
        return self.public_dir if granted else self.private_dir

    def write(self, path: Path, data: bytes) -> None:
        # "xb" refuses to replace an existing artifact
        try:
            with path.open("xb") as handle:
                handle.write(data)
        except FileExistsError:
            raise
        except OSError:
            if path.exists():
                path.unlink()
            raise


@dataclass
class PersistResult:
    path: Optional[Path] = None
    error_kind: Optional[PersistErrorKind] = None
    detail: str = ""
    warnings: List[PersistWarning] = field(default_factory=list)
    used_fallback: bool = False

    @property
    def ok(self) -> bool:
        return self.path is not None


def _noop_progress(percent: int, message: str) -> None:
    pass


def candidate_names(file_name: str, stamp: Optional[int] = None) -> Iterator[str]:
    """`name.pdf`, then `name_<millis>.pdf`, then `name_<millis>_<n>.pdf`."""
    yield file_name
    stem, dot, ext = file_name.rpartition(".")
    if not dot:
        stem, ext = file_name, "pdf"
    stamp = int(time.time() * 1000) if stamp is None else stamp
    yield f"{stem}_{stamp}.{ext}"
    for n in range(1, MAX_NAME_ATTEMPTS):
        yield f"{stem}_{stamp}_{n}.{ext}"


def persist(
    data: bytes,
    suggested_file_name: str,
    context: StorageContext,
    progress: Optional[Callable[[int, str], None]] = None,
) -> PersistResult:
    report = progress or _noop_progress
    warnings: List[PersistWarning] = []

    granted = context.check_permission()
    if not granted:
        logger.warning("Storage permission denied, using app-specific directory as fallback")
        warnings.append(PersistWarning.PERMISSION_DENIED)
    directory = context.resolve_directory(granted)
    used_fallback = not granted

    try:
        directory.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        logger.warning("Could not create %s: %s", directory, exc)
        return PersistResult(
            error_kind=PersistErrorKind.DIRECTORY_CREATE_FAILED,
            detail=str(exc),
            warnings=warnings,
            used_fallback=used_fallback,
        )

    report(90, "Saving PDF...")
    file_name = ensure_pdf_suffix(suggested_file_name)
    for name in candidate_names(file_name):
        path = directory / name
        try:
            context.write(path, data)
        except FileExistsError:
            logger.info("File already exists, trying next name: %s", path)
            continue
        except OSError as exc:
            logger.warning("Failed to save PDF file %s: %s", path, exc)
            return PersistResult(
                error_kind=PersistErrorKind.WRITE_FAILED,
                detail=str(exc),
                warnings=warnings,
                used_fallback=used_fallback,
            )
        logger.info("Saved %d bytes to %s", len(data), path)
        report(100, "Download complete!")
        return PersistResult(path=path, warnings=warnings, used_fallback=used_fallback)

    return PersistResult(
        error_kind=PersistErrorKind.WRITE_FAILED,
        detail=f"No free file name for {file_name} in {directory}",
        warnings=warnings,
        used_fallback=used_fallback,
    )


def record_run(run: ReportRun) -> ReportRun:
    with get_session() as session:
        session.add(run)
        session.commit()
        session.refresh(run)
    return run
