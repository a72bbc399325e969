# sourcebutler/ui_qt/workers/scan_worker.py
from __future__ import annotations
from PySide6.QtCore import QThread, Signal

from sourcebutler.core.session import SourceSession


class ScanWorker(QThread):
    progress = Signal(float)             # percent, snapped to 100 at the end
    status = Signal(str)
    done = Signal(bool, object, str)     # ok, ScanResult | None, err

    def __init__(self, session: SourceSession):
        super().__init__()
        self.session = session

    def run(self):
        st = self.session
        self.status.emit(f"Scanning {st.root}…")
        try:
            result = st.load(progress=self.progress.emit)
        except Exception as e:
            self.status.emit("Scan failed.")
            self.done.emit(False, None, str(e))
            return

        msg = f"Scan complete. {result.directories_visited} folders, {len(result.index)} extensions."
        if result.errors:
            msg += f" {len(result.errors)} folder(s) could not be read."
        self.status.emit(msg)
        self.done.emit(True, result, "")
