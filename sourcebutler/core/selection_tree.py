# sourcebutler/core/selection_tree.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass
class TreeNode:
    node_id: int
    name: str
    full_path: str
    is_selected: bool = False
    is_expanded: bool = False
    children: List[int] = field(default_factory=list)
    is_directory: bool = True


@dataclass(frozen=True)
class SelectionChanged:
    """Returned by ``set_selected``; describes the user action, not each descendant."""
    node_id: int
    path: str
    selected: bool
    changed_paths: Tuple[str, ...]


class SelectionTree:
    """
    Arena of directory nodes addressed by integer id.

    Parents own the ordered list of their children's ids; nothing points
    back up. Selection cascades strictly top-down.
    """

    def __init__(self):
        self._nodes: List[TreeNode] = []
        self._by_path: Dict[str, int] = {}

    # ---------- building (scanner only) ----------

    def add_node(self, name: str, full_path: str, *, selected: bool, parent: Optional[int] = None) -> TreeNode:
        node = TreeNode(
            node_id=len(self._nodes),
            name=name,
            full_path=full_path,
            is_selected=selected,
            is_expanded=selected,
        )
        self._nodes.append(node)
        # First node for a path wins; link placeholders share the path.
        self._by_path.setdefault(full_path, node.node_id)
        if parent is not None:
            self._nodes[parent].children.append(node.node_id)
        return node

    # ---------- queries ----------

    @property
    def root(self) -> Optional[TreeNode]:
        return self._nodes[0] if self._nodes else None

    def node(self, node_id: int) -> TreeNode:
        return self._nodes[node_id]

    def find(self, path: str) -> Optional[TreeNode]:
        idx = self._by_path.get(path)
        return None if idx is None else self._nodes[idx]

    def children_of(self, node_id: int) -> List[TreeNode]:
        return [self._nodes[c] for c in self._nodes[node_id].children]

    def __len__(self) -> int:
        return len(self._nodes)

    def iter_preorder(self, start: Optional[int] = None) -> Iterator[TreeNode]:
        if not self._nodes:
            return
        stack = [0 if start is None else start]
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            stack.extend(reversed(node.children))

    def collect_selected_paths(self) -> List[str]:
        """Pre-order paths of selected nodes; unselected subtrees are pruned."""
        paths: List[str] = []
        if not self._nodes:
            return paths
        stack = [0]
        while stack:
            node = self._nodes[stack.pop()]
            if not node.is_selected:
                continue
            paths.append(node.full_path)
            stack.extend(reversed(node.children))
        return paths

    # ---------- mutation (selection layer) ----------

    def set_selected(self, node_id: int, value: bool) -> Optional[SelectionChanged]:
        """
        Set ``node_id`` and every descendant to ``value``.

        Returns a single SelectionChanged for the targeted node, or None
        when no flag in the subtree actually changed.
        """
        value = bool(value)
        changed: List[str] = []
        for node in self.iter_preorder(node_id):
            if node.is_selected != value:
                node.is_selected = value
                changed.append(node.full_path)
        if not changed:
            return None
        target = self._nodes[node_id]
        return SelectionChanged(
            node_id=node_id,
            path=target.full_path,
            selected=value,
            changed_paths=tuple(changed),
        )

    def set_expanded(self, node_id: int, value: bool) -> None:
        self._nodes[node_id].is_expanded = bool(value)

    def selection_snapshot(self) -> Dict[str, bool]:
        """Raw per-path flags (first node per path), including pruned ones."""
        return {path: self._nodes[idx].is_selected for path, idx in self._by_path.items()}
