# sourcebutler/ui_qt/workers/export_worker.py
from __future__ import annotations
from PySide6.QtCore import QThread, Signal

from sourcebutler.core.output_generator import write_output
from sourcebutler.core.session import SourceSession


class ExportWorker(QThread):
    progress = Signal(float)
    status = Signal(str)
    done = Signal(bool, object, str)     # ok, GenerationResult | None, err

    def __init__(self, session: SourceSession, out_path: str, *, save_config: bool = True):
        super().__init__()
        self.session = session
        self.out_path = out_path
        self.save_config = save_config

    def run(self):
        st = self.session
        if not st.can_export():
            self.done.emit(False, None, "Nothing to export: no folder scanned or no extension selected.")
            return

        def cb(pct: float):
            self.progress.emit(pct)
            self.status.emit(f"Processing files… {pct:.0f}%")

        try:
            result = st.export(progress=cb, save_config=self.save_config)
        except Exception as e:
            self.done.emit(False, None, str(e))
            return

        if not write_output(result.text, self.out_path):
            self.done.emit(False, result, f"Failed to write {self.out_path}")
            return

        self.status.emit(
            f"Processing completed! Processed {result.processed_count} files, skipped {result.skipped_count}."
        )
        self.done.emit(True, result, "")
