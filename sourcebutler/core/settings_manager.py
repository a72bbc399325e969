# sourcebutler/core/settings_manager.py

from __future__ import annotations

import hashlib
import json
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from platformdirs import user_config_dir

from sourcebutler.config import APP_AUTHOR, APP_NAME, CONFIG_FILENAME, EXCLUDED_FOLDER_NAMES_DEFAULT
from sourcebutler.utils.logger import logger


def _project_slug(path: str) -> str:
    norm = os.path.abspath(path)
    tail = Path(norm).name or "project"
    safe_tail = re.sub(r"[^A-Za-z0-9._-]+", "_", tail)[:40] or "project"
    digest = hashlib.sha1(norm.encode("utf-8", errors="ignore")).hexdigest()[:12]
    return f"{safe_tail}-{digest}"


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [v for v in value if isinstance(v, str)]


@dataclass
class ValidationResult:
    removed_folders: List[str] = field(default_factory=list)
    removed_extensions: List[str] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.removed_folders or self.removed_extensions)

    def summary(self) -> str:
        parts = []
        if self.removed_folders:
            parts.append(f"Removed {len(self.removed_folders)} invalid folder(s)")
        if self.removed_extensions:
            parts.append(f"Removed {len(self.removed_extensions)} invalid extension(s)")
        return ", ".join(parts)


@dataclass
class Configuration:
    selected_folders: List[str] = field(default_factory=list)
    selected_extensions: List[str] = field(default_factory=list)
    last_root_directory: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Configuration":
        root = data.get("last_root_directory")
        return cls(
            selected_folders=_str_list(data.get("selected_folders")),
            selected_extensions=_str_list(data.get("selected_extensions")),
            last_root_directory=root if isinstance(root, str) else "",
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_root_directory": self.last_root_directory,
            "selected_folders": list(self.selected_folders),
            "selected_extensions": list(self.selected_extensions),
        }

    def same_root(self, root: str) -> bool:
        if not self.last_root_directory:
            return False
        return os.path.realpath(self.last_root_directory) == os.path.realpath(root)

    def validate(self, excluded_folder_names: Optional[Iterable[str]] = None) -> ValidationResult:
        """Drop folders that vanished or are excluded, and malformed extensions."""
        excluded = set(EXCLUDED_FOLDER_NAMES_DEFAULT if excluded_folder_names is None else excluded_folder_names)
        result = ValidationResult()

        kept_folders = []
        for folder in self.selected_folders:
            if not os.path.isdir(folder) or os.path.basename(folder) in excluded:
                result.removed_folders.append(folder)
            else:
                kept_folders.append(folder)
        self.selected_folders = kept_folders

        kept_exts = []
        for ext in self.selected_extensions:
            if not ext.strip() or not ext.startswith("."):
                result.removed_extensions.append(ext)
            else:
                kept_exts.append(ext)
        self.selected_extensions = kept_exts

        return result


class ConfigStore:
    """
    Loads and saves the configuration record of one root folder.

    The record lives in ``<root>/.sourcebutler-config``; when the root is not
    writable it goes to a per-user fallback folder instead.
    """

    def __init__(self, root: str):
        self.root = os.path.abspath(root)
        self.base_path = Path(self.root) / CONFIG_FILENAME
        slug = _project_slug(self.root)
        self.fallback_dir = Path(user_config_dir(appname=APP_NAME, appauthor=APP_AUTHOR)) / "projects" / slug
        self.fallback_path = self.fallback_dir / CONFIG_FILENAME
        self.storage_path = self.base_path
        self.using_fallback = False
        self.last_error: str | None = None

    def save(self, config: Configuration) -> bool:
        self.last_error = None

        candidates: list[tuple[Path, bool]]
        if self.using_fallback:
            candidates = [(self.fallback_path, False)]
        else:
            candidates = [(self.base_path, True), (self.fallback_path, False)]

        last_exc: Exception | None = None
        for path, is_base in candidates:
            try:
                path.parent.mkdir(parents=True, exist_ok=True)
                with path.open("w", encoding="utf-8") as f:
                    json.dump(config.to_dict(), f, indent=4)
            except OSError as e:
                last_exc = e
                continue

            self.using_fallback = not is_base
            self.storage_path = path
            if is_base:
                logger.info("Configuration saved to %s", path)
            else:
                logger.info("Configuration saved to fallback path %s", path)
            return True

        if last_exc:
            self.last_error = str(last_exc)
            logger.error("Failed to save configuration: %s", last_exc)
        return False

    def load(self) -> Optional[Configuration]:
        """Return the stored record, or None when absent or unreadable."""
        self.last_error = None

        paths: list[tuple[Path, bool]] = [(self.base_path, True), (self.fallback_path, False)]
        if self.using_fallback:
            paths.reverse()

        for path, is_base in paths:
            if not path.exists():
                continue
            try:
                with path.open("r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, ValueError) as e:
                self.last_error = str(e)
                logger.warning("Ignoring unreadable configuration %s: %s", path, e)
                continue
            if not isinstance(data, dict):
                logger.warning("Ignoring malformed configuration %s", path)
                continue

            self.using_fallback = not is_base
            self.storage_path = path
            logger.info("Configuration loaded from %s", path)
            return Configuration.from_dict(data)

        logger.info("No configuration found for %s", self.root)
        return None
