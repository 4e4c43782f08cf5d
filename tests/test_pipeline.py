from __future__ import annotations

import tempfile
import unittest
from datetime import date, datetime
from pathlib import Path

from stockreport import config
from stockreport.errors import LayoutInvariantViolation, PersistErrorKind
from stockreport.models import RunStatus, reset_engine
from stockreport.pipeline.kinds import INWARD, ReportKind
from stockreport.pipeline.metadata import build_metadata, build_report_filename
from stockreport.pipeline.run import export_report, list_runs
from stockreport.storage import LocalStorageContext


class FailingWriteContext(LocalStorageContext):
    def write(self, path: Path, data: bytes) -> None:
        raise OSError(5, "Input/output error")


def _rows(count: int) -> list[dict]:
    return [{"GRN_NO": f"G{i}", "ITEM_NAME": "Cumin 10KG BOX", "QUANTITY": "2"} for i in range(count)]


class ExportPipelineTests(unittest.TestCase):
    def setUp(self) -> None:
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        config.set_out_dir(self.root / "out")
        reset_engine()
        self.metadata = build_metadata(
            INWARD,
            "Acme Traders",
            date(2024, 1, 1),
            date(2024, 1, 31),
            unit="D-39",
            generated_at=datetime(2024, 2, 1, 12, 0),
        )
        self.notified = []

    def tearDown(self) -> None:
        reset_engine()
        self.temp_dir.cleanup()

    def _context(self, granted: bool = True) -> LocalStorageContext:
        return LocalStorageContext(
            public_dir=self.root / "Download",
            permission_check=lambda: granted,
        )

    def _notify(self, path: Path, kind: ReportKind) -> None:
        self.notified.append((path, kind))

    def test_export_writes_named_report_and_records_it(self) -> None:
        progress = []
        result = export_report(
            _rows(5),
            INWARD,
            self.metadata,
            self._context(),
            progress=lambda p, m: progress.append(p),
            notifier=self._notify,
        )
        self.assertTrue(result.ok)
        expected = build_report_filename("Inward", "Acme Traders", date(2024, 1, 1), date(2024, 1, 31), "D-39")
        self.assertEqual(result.path, self.root / "Download" / expected)
        self.assertTrue(result.path.read_bytes().startswith(b"%PDF"))
        self.assertEqual(self.notified, [(result.path, INWARD)])
        self.assertEqual(progress[0], 0)
        self.assertEqual(progress[-1], 100)

        runs = list_runs()
        self.assertEqual(len(runs), 1)
        self.assertEqual(runs[0].status, RunStatus.READY)
        self.assertEqual(runs[0].path, str(result.path))
        self.assertEqual(runs[0].row_count, 5)
        self.assertEqual(runs[0].page_count, 1)

    def test_second_export_does_not_overwrite_first(self) -> None:
        first = export_report(_rows(2), INWARD, self.metadata, self._context())
        second = export_report(_rows(3), INWARD, self.metadata, self._context())
        self.assertNotEqual(first.path, second.path)
        self.assertTrue(first.path.exists())
        self.assertTrue(second.path.exists())
        self.assertEqual(len(list_runs()), 2)

    def test_denied_permission_uses_private_directory(self) -> None:
        result = export_report(_rows(2), INWARD, self.metadata, self._context(granted=False))
        self.assertTrue(result.ok)
        self.assertEqual(result.path.parent, config.PRIVATE_DIR)
        self.assertTrue(list_runs()[0].used_fallback)

    def test_write_failure_is_recorded_and_not_notified(self) -> None:
        context = FailingWriteContext(public_dir=self.root / "Download", permission_check=lambda: True)
        result = export_report(_rows(2), INWARD, self.metadata, context, notifier=self._notify)
        self.assertFalse(result.ok)
        self.assertEqual(result.error_kind, PersistErrorKind.WRITE_FAILED)
        self.assertEqual(self.notified, [])
        run = list_runs()[0]
        self.assertEqual(run.status, RunStatus.FAILED)
        self.assertEqual(run.fail_code, "WRITE_FAILED")
        self.assertIn("Input/output error", run.fail_detail)

    def test_layout_violation_is_recorded_and_raised(self) -> None:
        broken = ReportKind(key="broken", label="Broken", columns=(), date_key="D", quantity_key="Q")
        with self.assertRaises(LayoutInvariantViolation):
            export_report(_rows(2), broken, self.metadata, self._context())
        run = list_runs()[0]
        self.assertEqual(run.status, RunStatus.FAILED)
        self.assertEqual(run.fail_code, "LAYOUT_INVALID")
        self.assertFalse((self.root / "Download").exists())


if __name__ == "__main__":
    unittest.main()
