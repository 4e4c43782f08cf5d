from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Iterable, List, Mapping, Optional

from sqlmodel import select

from ..errors import LayoutInvariantViolation
from ..models import ReportRun, RunStatus, get_session, init_db
from ..storage import PersistResult, StorageContext, persist, record_run
from .assemble import ProgressCallback, render_kind_report
from .budget import plan_page_budget
from .kinds import ReportKind
from .metadata import DocumentMetadata, build_report_filename


Notifier = Callable[[Path, ReportKind], None]

logger = logging.getLogger(__name__)


def export_report(
    rows: Iterable[Mapping[str, Any]],
    kind: ReportKind,
    metadata: DocumentMetadata,
    context: StorageContext,
    progress: Optional[ProgressCallback] = None,
    notifier: Optional[Notifier] = None,
    file_name: Optional[str] = None,
    record: bool = True,
) -> PersistResult:
    """
    Render, save and hand off one report. Every attempt is recorded in the
    export ledger. A layout violation is a configuration bug and is
    re-raised; save failures come back in the result for the caller to
    retry.
    """
    rows = list(rows)
    name = file_name or build_report_filename(
        kind.label, metadata.customer_name, metadata.from_date, metadata.to_date, metadata.unit
    )
    if record:
        init_db()
    logger.info("Export started: %s, %d rows", kind.title, len(rows))

    try:
        data = render_kind_report(rows, kind, metadata, progress=progress)
    except LayoutInvariantViolation as exc:
        logger.exception("Layout error for %s", name)
        if record:
            record_run(
                ReportRun(
                    kind=kind.key,
                    customer_name=metadata.customer_name,
                    file_name=name,
                    status=RunStatus.FAILED,
                    fail_code="LAYOUT_INVALID",
                    fail_detail=str(exc),
                    row_count=len(rows),
                )
            )
        raise

    result = persist(data, name, context, progress=progress)

    if record:
        run = ReportRun(
            kind=kind.key,
            customer_name=metadata.customer_name,
            file_name=result.path.name if result.ok else name,
            path=str(result.path) if result.ok else None,
            used_fallback=result.used_fallback,
            row_count=len(rows),
            page_count=plan_page_budget(len(rows)).total_pages,
        )
        if not result.ok:
            run.status = RunStatus.FAILED
            run.fail_code = result.error_kind.value
            run.fail_detail = result.detail
        record_run(run)

    if result.ok and notifier is not None:
        notifier(result.path, kind)
    return result


def list_runs(limit: int = 20) -> List[ReportRun]:
    init_db()
    with get_session() as session:
        statement = select(ReportRun).order_by(ReportRun.id.desc()).limit(limit)
        return list(session.exec(statement))
