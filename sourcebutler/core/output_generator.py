# sourcebutler/core/output_generator.py

from __future__ import annotations

import enum
import os
import tempfile
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional, Set, Tuple

from sourcebutler.core.path_filter import PathFilter, file_extension, normalize_extension
from sourcebutler.utils.encoding_detector import detect_file_encoding
from sourcebutler.utils.logger import logger

ProgressCallback = Callable[[float], None]

BRANCH = "├── "
LAST_BRANCH = "└── "
PIPE_INDENT = "│   "
SPACE_INDENT = "    "


class SkipReason(str, enum.Enum):
    TOO_LARGE = "too large"
    BINARY = "binary"
    READ_ERROR = "read error"


@dataclass
class FileBlock:
    path: str
    text: str = ""
    skip_reason: Optional[SkipReason] = None

    @property
    def skipped(self) -> bool:
        return self.skip_reason is not None


@dataclass
class GenerationResult:
    tree_text: str
    files_text: str
    processed_count: int = 0
    skipped_count: int = 0
    skipped: List[Tuple[str, SkipReason]] = field(default_factory=list)

    @property
    def text(self) -> str:
        return self.tree_text + self.files_text


def write_output(text: str, dest_path: str) -> bool:
    """Write ``text`` atomically (tmp -> replace)."""
    tmp_dir = os.path.dirname(os.path.abspath(dest_path)) or "."
    tmp_path = None
    try:
        with tempfile.NamedTemporaryFile("w", encoding="utf-8", newline="", delete=False, dir=tmp_dir) as tmp:
            tmp_path = tmp.name
            tmp.write(text)
        os.replace(tmp_path, dest_path)
        logger.info(f"Output written to {dest_path}")
        return True
    except OSError as e:
        logger.error(f"Failed to write output {dest_path}: {str(e)}")
        if tmp_path and os.path.exists(tmp_path):
            os.remove(tmp_path)
        return False


class OutputGenerator:
    """Renders the selected tree and concatenates the selected files."""

    def __init__(self, path_filter: Optional[PathFilter] = None):
        self.path_filter = path_filter or PathFilter()

    # ---------- tree ----------

    def render_tree(self, root: str, selected_paths: Iterable[str], selected_extensions: Iterable[str]) -> str:
        root = os.path.realpath(root)
        selected = set(selected_paths)
        extensions = self._normalize(selected_extensions)
        lines: List[str] = [os.path.basename(root) or root]
        # Each real folder is entered once; a second route to it (through a
        # link) is listed but left empty.
        rendered: Set[str] = {root}

        # (name, path, is_dir, indent, is_last)
        stack: List[Tuple[str, str, bool, str, bool]] = []

        def push_children(path: str, indent: str) -> None:
            entries = self._rendered_entries(path, selected, extensions)
            for idx in range(len(entries) - 1, -1, -1):
                name, child_path, is_dir = entries[idx]
                stack.append((name, child_path, is_dir, indent, idx == len(entries) - 1))

        push_children(root, "")
        while stack:
            name, path, is_dir, indent, is_last = stack.pop()
            lines.append(f"{indent}{LAST_BRANCH if is_last else BRANCH}{name}")
            if not is_dir or path in rendered:
                continue
            rendered.add(path)
            push_children(path, indent + (SPACE_INDENT if is_last else PIPE_INDENT))

        return "".join(line + "\n" for line in lines)

    def _rendered_entries(self, path: str, selected: Set[str], extensions: Set[str]) -> List[Tuple[str, str, bool]]:
        items: List[Tuple[str, str, bool]] = []
        try:
            with os.scandir(path) as it:
                entries = list(it)
        except OSError as e:
            logger.warning(f"Cannot list {path} for tree: {e}")
            return items

        for entry in entries:
            try:
                if entry.is_dir():
                    child = os.path.realpath(entry.path) if entry.is_symlink() else entry.path
                    if child in selected:
                        items.append((entry.name, child, True))
                elif entry.is_file():
                    if self._wanted_file(entry, extensions):
                        items.append((entry.name, entry.path, False))
            except OSError as e:
                logger.warning(f"Cannot stat {entry.path}: {e}")

        items.sort(key=lambda item: item[0])
        return items

    # ---------- files ----------

    def collect_output_files(self, selected_paths: Iterable[str], selected_extensions: Iterable[str]) -> List[str]:
        extensions = self._normalize(selected_extensions)
        files: List[str] = []
        for folder in selected_paths:
            try:
                with os.scandir(folder) as it:
                    entries = sorted(it, key=lambda e: e.name)
            except OSError as e:
                logger.warning(f"Cannot list {folder}: {e}")
                continue
            for entry in entries:
                try:
                    if not entry.is_file():
                        continue
                except OSError as e:
                    logger.warning(f"Cannot stat {entry.path}: {e}")
                    continue
                if self._wanted_file(entry, extensions):
                    files.append(entry.path)
        return files

    def emit_file_block(self, path: str) -> FileBlock:
        try:
            size = os.path.getsize(path)
            if self.path_filter.exceeds_max_size(size):
                logger.info(f"Skipping large file: {path}")
                return FileBlock(path, skip_reason=SkipReason.TOO_LARGE)

            if self.path_filter.sniff_binary(path):
                logger.info(f"Skipping binary file: {path}")
                return FileBlock(path, skip_reason=SkipReason.BINARY)

            encoding = detect_file_encoding(path)
            with open(path, "r", encoding=encoding, newline="") as infile:
                content = infile.read()
        except (OSError, UnicodeDecodeError, LookupError) as e:
            logger.error(f"Error processing file {path}: {str(e)}")
            return FileBlock(path, skip_reason=SkipReason.READ_ERROR)

        return FileBlock(path, text=f"\n{path}:\n{content}\n\n")

    # ---------- whole export ----------

    def generate(
        self,
        root: str,
        selected_paths: Iterable[str],
        selected_extensions: Iterable[str],
        progress: Optional[ProgressCallback] = None,
    ) -> GenerationResult:
        # Snapshot: later selection toggles must not leak into this run.
        paths = list(dict.fromkeys(selected_paths))
        extensions = frozenset(self._normalize(selected_extensions))

        logger.info("Generating folder structure...")
        tree_text = self.render_tree(root, paths, extensions)

        files = self.collect_output_files(paths, extensions)
        total = len(files)
        logger.info(f"Found {total} files to process in selected folders.")

        result = GenerationResult(tree_text=tree_text, files_text="")
        chunks: List[str] = []
        for done, path in enumerate(files, start=1):
            block = self.emit_file_block(path)
            if block.skipped:
                result.skipped_count += 1
                result.skipped.append((path, block.skip_reason))
            else:
                result.processed_count += 1
                chunks.append(block.text)
            if progress:
                progress(done * 100.0 / total)

        result.files_text = "".join(chunks)
        logger.info(
            f"Processing completed! Processed {result.processed_count} files, "
            f"skipped {result.skipped_count}."
        )
        return result

    def _wanted_file(self, entry: os.DirEntry, extensions: Set[str]) -> bool:
        return (
            self.path_filter.is_selected_extension(file_extension(entry.name), extensions)
            and not self.path_filter.skips_file(entry.path)
        )

    @staticmethod
    def _normalize(extensions: Iterable[str]) -> Set[str]:
        return {e for e in map(normalize_extension, extensions) if e}
