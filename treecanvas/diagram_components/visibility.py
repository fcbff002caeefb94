from typing import Iterable, Iterator, Mapping, Optional, Set, Tuple

from .node import DiagramNode


class VisibilityState:
    def __init__(self) -> None:
        self._collapsed: Set[str] = set()

    @property
    def collapsed(self) -> Set[str]:
        return set(self._collapsed)

    def __len__(self) -> int:
        return len(self._collapsed)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._collapsed

    def toggle(self, node_id: str) -> bool:
        if node_id in self._collapsed:
            self._collapsed.discard(node_id)
            return False
        self._collapsed.add(node_id)
        return True

    def is_collapsed(self, node_id: str) -> bool:
        return node_id in self._collapsed

    def collapse_all(self, roots: Iterable[DiagramNode]) -> None:
        self._collapsed.clear()
        for root in roots:
            for node in root.iter_subtree():
                if node.children:
                    self._collapsed.add(node.id)

    def expand_all(self) -> None:
        self._collapsed.clear()

    def collapse_below_depth(self, roots: Iterable[DiagramNode], max_depth: int) -> None:
        self._collapsed.clear()
        for root in roots:
            for node in root.iter_subtree():
                if node.depth >= max_depth and node.children:
                    self._collapsed.add(node.id)

    def reset(self) -> None:
        self._collapsed.clear()

    def shows_children(self, node: DiagramNode) -> bool:
        return bool(node.children) and node.id not in self._collapsed

    def is_visible(self, node: DiagramNode, index: Mapping[str, DiagramNode]) -> bool:
        parent_id: Optional[str] = node.parent_id
        while parent_id is not None:
            if parent_id in self._collapsed:
                return False
            parent = index.get(parent_id)
            if parent is None:
                return False
            parent_id = parent.parent_id
        return True

    def iter_visible(self, roots: Iterable[DiagramNode]) -> Iterator[DiagramNode]:
        """Pre-order walk that skips the descendants of collapsed nodes."""
        stack = list(reversed(list(roots)))
        while stack:
            node = stack.pop()
            yield node
            if self.shows_children(node):
                stack.extend(reversed(node.children))

    def iter_visible_edges(self, roots: Iterable[DiagramNode]) -> Iterator[Tuple[DiagramNode, DiagramNode]]:
        for node in self.iter_visible(roots):
            if self.shows_children(node):
                for child in node.children:
                    yield node, child
