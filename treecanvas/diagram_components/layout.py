import logging
from dataclasses import dataclass
from time import perf_counter
from typing import Dict, List, Optional, Sequence, Tuple

from .core import DiagramConfig
from .node import DiagramNode
from .visibility import VisibilityState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Bounds:
    min_x: float = 0.0
    min_y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    @property
    def center(self) -> Tuple[float, float]:
        return self.min_x + self.width / 2, self.min_y + self.height / 2

    @property
    def is_empty(self) -> bool:
        return self.width == 0 and self.height == 0

    def grow(self, margin: float) -> "Bounds":
        return Bounds(
            self.min_x - margin,
            self.min_y - margin,
            self.width + 2 * margin,
            self.height + 2 * margin,
        )


class LayoutEngine:
    """Tidy-tree approximation: subtree widths bottom-up, then slots top-down.

    Only nodes reachable through expanded ancestors are touched; hidden nodes keep
    the coordinates of the last layout that saw them.
    """

    def __init__(self, config: Optional[DiagramConfig] = None) -> None:
        self.config = config or DiagramConfig()

    def layout(self, roots: Sequence[DiagramNode], visibility: VisibilityState) -> None:
        if not roots:
            return
        started = perf_counter()
        visible = list(visibility.iter_visible(roots))
        self._measure(visible, visibility)

        spacing = self.config.node_spacing
        total_root_width = sum(root.subtree_width for root in roots) + spacing * (len(roots) - 1)

        stack: List[Tuple[DiagramNode, float]] = []
        cursor = -total_root_width / 2
        for root in roots:
            stack.append((root, cursor))
            cursor += root.subtree_width + spacing
        stack.reverse()

        while stack:
            node, slot_x = stack.pop()
            self._place(node, slot_x)
            if not visibility.shows_children(node):
                continue
            child_slots: List[Tuple[DiagramNode, float]] = []
            child_x = slot_x
            for child in node.children:
                child_slots.append((child, child_x))
                child_x += child.subtree_width + spacing
            stack.extend(reversed(child_slots))

        logger.debug("Laid out %d visible nodes in %.2fms", len(visible), (perf_counter() - started) * 1000)

    def _measure(self, visible: List[DiagramNode], visibility: VisibilityState) -> None:
        node_width = self.config.node_width
        spacing = self.config.node_spacing
        # Reversed pre-order visits every child before its parent.
        for node in reversed(visible):
            if not visibility.shows_children(node):
                node.subtree_width = float(node_width)
                continue
            total = sum(child.subtree_width for child in node.children)
            total += spacing * (len(node.children) - 1)
            node.subtree_width = float(max(node_width, total))

    def _place(self, node: DiagramNode, slot_x: float) -> None:
        node.x = slot_x + (node.subtree_width - self.config.node_width) / 2
        node.y = float(node.depth * self.config.level_height)

    def bounds(self, roots: Sequence[DiagramNode], visibility: VisibilityState) -> Bounds:
        if not roots:
            return Bounds()

        min_x = min_y = float("inf")
        max_x = max_y = float("-inf")
        for node in visibility.iter_visible(roots):
            min_x = min(min_x, node.x)
            min_y = min(min_y, node.y)
            max_x = max(max_x, node.x + self.config.node_width)
            max_y = max(max_y, node.y + self.config.node_height)

        return Bounds(min_x, min_y, max_x - min_x, max_y - min_y).grow(self.config.bounds_margin)

    def count_visible(self, roots: Sequence[DiagramNode], visibility: VisibilityState) -> int:
        return sum(1 for _ in visibility.iter_visible(roots))

    def max_depth(self, roots: Sequence[DiagramNode]) -> int:
        deepest = -1
        for root in roots:
            for node in root.iter_subtree():
                deepest = max(deepest, node.depth)
        return deepest + 1

    def max_level_width(self, roots: Sequence[DiagramNode], visibility: VisibilityState) -> int:
        levels: Dict[int, int] = {}
        for node in visibility.iter_visible(roots):
            levels[node.depth] = levels.get(node.depth, 0) + 1
        return max(levels.values(), default=1)
