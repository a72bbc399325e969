import unittest
import shutil
import tempfile
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from sourcebutler.core.session import SourceSession
from sourcebutler.ui_qt.workers.export_worker import ExportWorker
from sourcebutler.ui_qt.workers.scan_worker import ScanWorker


class TestWorkers(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def setUp(self):
        self.base = Path(tempfile.mkdtemp()).resolve()
        self.root = self.base / "proj"
        (self.root / "pkg").mkdir(parents=True)
        (self.root / "pkg" / "mod.py").write_text("VALUE = 1\n", encoding="utf-8")

    def tearDown(self):
        if self.base.exists():
            shutil.rmtree(self.base)

    def _record(self, worker):
        seen = {"progress": [], "status": [], "done": []}
        worker.progress.connect(seen["progress"].append)
        worker.status.connect(seen["status"].append)
        worker.done.connect(lambda ok, res, err: seen["done"].append((ok, res, err)))
        return seen

    def test_scan_then_export_through_signals(self):
        session = SourceSession(str(self.root))
        scan = ScanWorker(session)
        seen = self._record(scan)
        scan.run()  # same thread: signals are delivered directly
        ok, result, err = seen["done"][-1]
        self.assertTrue(ok, err)
        self.assertEqual(result.directories_visited, 2)
        self.assertEqual(seen["progress"][-1], 100.0)
        self.assertTrue(seen["status"][-1].startswith("Scan complete."))

        out = self.base / "out.txt"
        export = ExportWorker(session, str(out), save_config=False)
        seen = self._record(export)
        export.run()
        ok, result, err = seen["done"][-1]
        self.assertTrue(ok, err)
        self.assertEqual(result.processed_count, 1)
        self.assertIn("VALUE = 1", out.read_text(encoding="utf-8"))
        self.assertEqual(seen["progress"], [100.0])

    def test_export_without_scan_reports_failure(self):
        session = SourceSession(str(self.root))
        export = ExportWorker(session, str(self.base / "out.txt"))
        seen = self._record(export)
        export.run()
        ok, result, err = seen["done"][-1]
        self.assertFalse(ok)
        self.assertIsNone(result)
        self.assertIn("Nothing to export", err)


if __name__ == "__main__":
    unittest.main()
