# sourcebutler/core/session.py

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from sourcebutler.config import DEFAULT_OUTPUT_FILENAME
from sourcebutler.core.extension_index import ExtensionIndex, ExtensionPanel
from sourcebutler.core.output_generator import GenerationResult, OutputGenerator
from sourcebutler.core.path_filter import PathFilter
from sourcebutler.core.selection_tree import SelectionChanged, SelectionTree
from sourcebutler.core.settings_manager import ConfigStore, Configuration
from sourcebutler.core.tree_scanner import ScanResult, TreeScanner, canonical_path
from sourcebutler.utils.logger import logger

ProgressCallback = Callable[[float], None]


@dataclass(frozen=True)
class ExportSnapshot:
    root: str
    selected_paths: Tuple[str, ...]
    selected_extensions: Tuple[str, ...]


class SourceSession:
    """
    One root folder from scan to export.

    Front ends call ``load`` once, then toggle folders/extensions, then
    ``export``. The extension panel is refreshed after every folder toggle.
    """

    def __init__(
        self,
        root: str,
        *,
        store: Optional[ConfigStore] = None,
        path_filter: Optional[PathFilter] = None,
    ):
        self.root = canonical_path(root)
        self.store = store if store is not None else ConfigStore(self.root)
        if path_filter is None:
            path_filter = PathFilter(excluded_files=[self.default_output_path()])
        self.path_filter = path_filter
        self.scanner = TreeScanner(self.path_filter)
        self.generator = OutputGenerator(self.path_filter)

        self.config: Optional[Configuration] = None
        self.tree = SelectionTree()
        self.index = ExtensionIndex().freeze()
        self.panel = ExtensionPanel(self.index)
        self.scan_errors: List[Tuple[str, str]] = []

    # ---------- scan ----------

    def load(self, progress: Optional[ProgressCallback] = None) -> ScanResult:
        logger.info("Starting configuration load...")
        self.config = self.store.load()
        if self.config is not None:
            validation = self.config.validate(self.path_filter.excluded_folder_names)
            if validation.has_changes:
                logger.info(f"Configuration cleaned: {validation.summary()}")
            logger.info(f"Last root directory: {self.config.last_root_directory}")
            logger.info(f"Selected folders count: {len(self.config.selected_folders)}")
            logger.info(f"Selected extensions count: {len(self.config.selected_extensions)}")

        result = self.scanner.scan(self.root, self.config, progress=progress)
        self.tree = result.tree
        self.index = result.index
        self.scan_errors = result.errors

        seeded = None
        if self.config is not None and self.config.same_root(self.root):
            seeded = self.config.selected_extensions
        self.panel = ExtensionPanel(self.index, seeded)
        self.panel.refresh(self.selected_paths())
        return result

    # ---------- selection ----------

    def selected_paths(self) -> List[str]:
        return self.tree.collect_selected_paths()

    @property
    def selected_extensions(self):
        return self.panel.selected_extensions

    def set_folder_selected(self, folder: Union[int, str], value: bool) -> Optional[SelectionChanged]:
        node = self.tree.node(folder) if isinstance(folder, int) else self.tree.find(canonical_path(folder))
        if node is None:
            logger.warning(f"Unknown folder: {folder}")
            return None
        event = self.tree.set_selected(node.node_id, value)
        if event is not None:
            self.panel.refresh(self.selected_paths())
        return event

    def toggle_extension(self, extension: str) -> bool:
        return self.panel.toggle(extension)

    def can_export(self) -> bool:
        return bool(self.root) and len(self.tree) > 0 and bool(self.panel.selected_extensions)

    # ---------- export ----------

    def snapshot(self) -> ExportSnapshot:
        return ExportSnapshot(
            root=self.root,
            selected_paths=tuple(self.selected_paths()),
            selected_extensions=tuple(sorted(self.panel.selected_extensions)),
        )

    def save_config(self, snapshot: Optional[ExportSnapshot] = None) -> bool:
        snap = snapshot or self.snapshot()
        self.config = Configuration(
            selected_folders=list(snap.selected_paths),
            selected_extensions=list(snap.selected_extensions),
            last_root_directory=snap.root,
        )
        return self.store.save(self.config)

    def export(self, progress: Optional[ProgressCallback] = None, *, save_config: bool = True) -> GenerationResult:
        snap = self.snapshot()
        if save_config:
            self.save_config(snap)
        return self.generator.generate(
            snap.root, snap.selected_paths, snap.selected_extensions, progress=progress
        )

    def default_output_path(self) -> str:
        return os.path.join(self.root, DEFAULT_OUTPUT_FILENAME)
