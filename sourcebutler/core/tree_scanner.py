# sourcebutler/core/tree_scanner.py

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Set, Tuple

from sourcebutler.core.extension_index import ExtensionIndex
from sourcebutler.core.path_filter import PathFilter, file_extension
from sourcebutler.core.selection_tree import SelectionTree
from sourcebutler.core.settings_manager import Configuration
from sourcebutler.utils.logger import logger

ProgressCallback = Callable[[float], None]


def canonical_path(path: str) -> str:
    return os.path.realpath(os.path.abspath(path))


def _child_path(entry: os.DirEntry, parent_path: str) -> str:
    # Children of a canonical parent are canonical unless they are links.
    if entry.is_symlink():
        return canonical_path(entry.path)
    return os.path.join(parent_path, entry.name)


@dataclass
class ScanResult:
    tree: SelectionTree
    index: ExtensionIndex
    errors: List[Tuple[str, str]] = field(default_factory=list)   # (path, message)
    directories_visited: int = 0


class TreeScanner:
    """
    Depth-first, pre-order walk of a root folder.

    Builds the SelectionTree and the ExtensionIndex in one pass. Every real
    folder is entered once; a second route to it (through a link) gets an
    empty placeholder node. Unreadable folders become childless nodes.
    """

    def __init__(self, path_filter: Optional[PathFilter] = None):
        self.path_filter = path_filter or PathFilter()

    # ---------- public API ----------

    def count_directories(self, root_path: str) -> int:
        """Number of folders ``scan`` will enter (same exclusion/visit rules)."""
        root = canonical_path(root_path)
        self.path_filter.bind_root(root)
        visited: Set[str] = set()
        stack = [root]
        total = 0
        while stack:
            path = stack.pop()
            if path in visited:
                continue
            visited.add(path)
            total += 1
            try:
                subdirs, _ = self._list_dir(path)
            except OSError:
                continue
            stack.extend(child for _, child in subdirs)
        return total

    def scan(
        self,
        root_path: str,
        prior_config: Optional[Configuration] = None,
        progress: Optional[ProgressCallback] = None,
    ) -> ScanResult:
        root = canonical_path(root_path)
        total = self.count_directories(root) if progress else 0

        tree = SelectionTree()
        index = ExtensionIndex()
        result = ScanResult(tree=tree, index=index)
        visited: Set[str] = set()
        initial = self._selection_policy(root, prior_config)

        # (name, path, parent id); siblings are pushed reversed so they pop in order
        stack: List[Tuple[str, str, Optional[int]]] = [(os.path.basename(root) or root, root, None)]
        while stack:
            name, path, parent = stack.pop()
            node = tree.add_node(name, path, selected=initial(path), parent=parent)
            if path in visited:
                logger.debug(f"Already visited {path}, adding placeholder")
                continue
            visited.add(path)
            result.directories_visited += 1
            if progress and total:
                progress(min(result.directories_visited * 100.0 / total, 99.0))

            try:
                subdirs, files = self._list_dir(path)
            except OSError as e:
                logger.warning(f"Error scanning {path}: {e}")
                result.errors.append((path, str(e)))
                continue

            for filename in files:
                ext = file_extension(filename)
                if ext:
                    index.add(ext, path)

            stack.extend((child_name, child_path, node.node_id) for child_name, child_path in reversed(subdirs))

        index.freeze()

        if progress:
            progress(100.0)
        logger.info(
            f"Scanned {root}: {result.directories_visited} folders, "
            f"{len(index)} extensions, {len(result.errors)} errors"
        )
        return result

    # ---------- internals ----------

    @staticmethod
    def _selection_policy(root: str, prior_config: Optional[Configuration]) -> Callable[[str], bool]:
        if prior_config is None:
            return lambda path: True
        if not prior_config.same_root(root):
            return lambda path: False
        selected = {canonical_path(p) for p in prior_config.selected_folders}
        return lambda path: path in selected

    def _list_dir(self, path: str) -> Tuple[List[Tuple[str, str]], List[str]]:
        """Return ``([(name, canonical path) of kept subfolders], [file names])``."""
        subdirs: List[Tuple[str, str]] = []
        files: List[str] = []
        with os.scandir(path) as it:
            entries = sorted(it, key=lambda e: e.name.lower())
        for entry in entries:
            try:
                if entry.is_dir():
                    if self.path_filter.skips_folder(entry.name, entry.path):
                        logger.debug(f"Excluding folder: {entry.path}")
                        continue
                    subdirs.append((entry.name, _child_path(entry, path)))
                elif entry.is_file():
                    if self.path_filter.skips_file(entry.path):
                        continue
                    files.append(entry.name)
            except OSError as e:
                logger.warning(f"Cannot stat {entry.path}: {e}")
        return subdirs, files
