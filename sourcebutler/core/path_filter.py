# sourcebutler/core/path_filter.py

from __future__ import annotations

import os
from typing import AbstractSet, Iterable, Optional

from pathspec import PathSpec

from sourcebutler.config import (
    BINARY_SNIFF_BYTES,
    EXCLUDED_FOLDER_NAMES_DEFAULT,
    MAX_FILE_BYTES,
)
from sourcebutler.utils.logger import logger


def normalize_extension(ext: str) -> str:
    """Lower-case ``ext`` and make sure it carries the leading dot ('' stays '')."""
    ext = (ext or "").strip().lower()
    if not ext:
        return ""
    if not ext.startswith("."):
        ext = "." + ext
    return ext


def file_extension(filename: str) -> str:
    """Lower-cased extension of ``filename`` including the dot, or ''."""
    return os.path.splitext(filename)[1].lower()


def is_binary(first_bytes: bytes) -> bool:
    return b"\x00" in first_bytes[:BINARY_SNIFF_BYTES]


def sniff_binary(path: str) -> bool:
    """Read the leading bytes of ``path``; unreadable files count as binary."""
    try:
        with open(path, "rb") as f:
            head = f.read(BINARY_SNIFF_BYTES)
    except OSError as e:
        logger.debug(f"Cannot open {path} for binary check, treating as binary: {e}")
        return True
    return is_binary(head)


def exceeds_max_size(byte_length: int) -> bool:
    return byte_length > MAX_FILE_BYTES


class PathFilter:
    """
    Predicates deciding what the scanner and the output generator see.

    The deny-list is matched case-sensitively against a folder's leaf name.
    With ``respect_gitignore`` the root ``.gitignore`` is honoured as well,
    for folders and files alike.
    """

    def __init__(
        self,
        excluded_folder_names: Optional[Iterable[str]] = None,
        *,
        respect_gitignore: bool = False,
        excluded_files: Optional[Iterable[str]] = None,
    ):
        if excluded_folder_names is None:
            excluded_folder_names = EXCLUDED_FOLDER_NAMES_DEFAULT
        self.excluded_folder_names = frozenset(excluded_folder_names)
        self.respect_gitignore = respect_gitignore
        # Exact files never scanned or exported, e.g. the export destination
        self.excluded_files = frozenset(os.path.realpath(p) for p in (excluded_files or ()))
        self._gitignore_spec: Optional[PathSpec] = None
        self._gitignore_root: Optional[str] = None

    def bind_root(self, root: str) -> None:
        """Load ignore rules for ``root`` (no-op unless gitignore is honoured)."""
        self._gitignore_root = root
        self._gitignore_spec = None
        if not self.respect_gitignore:
            return
        gi = os.path.join(root, ".gitignore")
        if not os.path.isfile(gi):
            return
        try:
            with open(gi, "r", encoding="utf-8", errors="ignore") as f:
                self._gitignore_spec = PathSpec.from_lines("gitwildmatch", f)
        except OSError as e:
            logger.warning(f"Failed to read .gitignore in {root}: {e}")

    def is_excluded_folder(self, name: str) -> bool:
        return name in self.excluded_folder_names

    @staticmethod
    def is_selected_extension(ext: str, selected_extensions: AbstractSet[str]) -> bool:
        ext = normalize_extension(ext)
        return bool(ext) and ext in selected_extensions

    def is_ignored(self, path: str, is_dir: bool) -> bool:
        """True when the bound root's .gitignore matches ``path``."""
        if self._gitignore_spec is None or self._gitignore_root is None:
            return False
        rel = os.path.relpath(path, self._gitignore_root)
        if rel == "." or rel.startswith(".."):
            return False
        rel = rel.replace(os.sep, "/")
        if is_dir:
            rel += "/"
        return self._gitignore_spec.match_file(rel)

    def skips_folder(self, name: str, path: str) -> bool:
        return self.is_excluded_folder(name) or self.is_ignored(path, is_dir=True)

    def skips_file(self, path: str) -> bool:
        if self.excluded_files and os.path.realpath(path) in self.excluded_files:
            return True
        return self.is_ignored(path, is_dir=False)

    # Re-exported so callers holding a filter need no extra imports
    is_binary = staticmethod(is_binary)
    sniff_binary = staticmethod(sniff_binary)
    exceeds_max_size = staticmethod(exceeds_max_size)
