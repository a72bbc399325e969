# sourcebutler/core/extension_index.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Set

from sourcebutler.core.path_filter import normalize_extension


class ExtensionIndex:
    """Extension (".py") -> folders that directly contain such a file."""

    def __init__(self):
        self._map: Dict[str, Set[str]] = {}
        self._frozen = False

    def add(self, extension: str, folder: str) -> None:
        if self._frozen:
            raise RuntimeError("ExtensionIndex is read-only after the scan")
        self._map.setdefault(extension, set()).add(folder)

    def freeze(self) -> "ExtensionIndex":
        self._map = {ext: frozenset(folders) for ext, folders in self._map.items()}
        self._frozen = True
        return self

    def folders_for(self, extension: str) -> FrozenSet[str]:
        return frozenset(self._map.get(normalize_extension(extension), ()))

    def extensions(self) -> List[str]:
        return sorted(self._map)

    def items(self):
        return self._map.items()

    def __contains__(self, extension: str) -> bool:
        return normalize_extension(extension) in self._map

    def __iter__(self) -> Iterator[str]:
        return iter(self._map)

    def __len__(self) -> int:
        return len(self._map)


def compute_displayed_extensions(index: ExtensionIndex, selected_paths: Iterable[str]) -> Dict[str, int]:
    """Extension -> number of selected folders containing it (zero counts dropped)."""
    selected = set(selected_paths)
    shown: Dict[str, int] = {}
    for ext, folders in index.items():
        count = sum(1 for folder in folders if folder in selected)
        if count > 0:
            shown[ext] = count
    return shown


@dataclass
class ExtensionItem:
    extension: str
    selected_folder_count: int
    is_checked: bool = True

    @property
    def display_text(self) -> str:
        return f"{self.extension} ({self.selected_folder_count} selected)"


class ExtensionPanel:
    """
    Keeps the displayed extension list and the selected-extensions set in
    step with the folder selection.

    New extensions show up checked unless the panel was seeded from a saved
    configuration, in which case the saved set decides.
    """

    def __init__(self, index: ExtensionIndex, seeded_extensions: Optional[Iterable[str]] = None):
        self.index = index
        self.items: List[ExtensionItem] = []
        self.selected_extensions: Set[str] = set()
        self._seeded = seeded_extensions is not None
        if seeded_extensions is not None:
            self.selected_extensions = {e for e in map(normalize_extension, seeded_extensions) if e}

    def refresh(self, selected_paths: Iterable[str]) -> Dict[str, int]:
        selected = set(selected_paths)
        shown = compute_displayed_extensions(self.index, selected)
        current = {item.extension: item for item in self.items}

        for item in list(self.items):
            if item.extension in shown:
                continue
            self.items.remove(item)
            if not any(folder in selected for folder in self.index.folders_for(item.extension)):
                self.selected_extensions.discard(item.extension)

        for ext, count in shown.items():
            existing = current.get(ext)
            if existing is not None:
                existing.selected_folder_count = count
                existing.is_checked = ext in self.selected_extensions
                continue
            if not self._seeded:
                self.selected_extensions.add(ext)
            self.items.append(ExtensionItem(
                extension=ext,
                selected_folder_count=count,
                is_checked=ext in self.selected_extensions,
            ))

        self.items.sort(key=lambda item: item.extension)
        return shown

    def toggle(self, extension: str) -> bool:
        """Flip ``extension`` in the selected set; returns the new state."""
        ext = normalize_extension(extension)
        if not ext:
            return False
        if ext in self.selected_extensions:
            self.selected_extensions.discard(ext)
        else:
            self.selected_extensions.add(ext)
        checked = ext in self.selected_extensions
        for item in self.items:
            if item.extension == ext:
                item.is_checked = checked
        return checked

    def item(self, extension: str) -> Optional[ExtensionItem]:
        ext = normalize_extension(extension)
        return next((i for i in self.items if i.extension == ext), None)
