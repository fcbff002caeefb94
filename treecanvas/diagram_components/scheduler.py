import logging
from dataclasses import dataclass, field
from enum import Enum
from time import perf_counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from .core import DiagramConfig, NodeKind
from .frames import FrameLoop
from .geometry import Connector, NodeGeometry, elbow_connector, node_geometry
from .layout import Bounds, LayoutEngine
from .node import DiagramNode
from .surface import Surface
from .visibility import VisibilityState

logger = logging.getLogger(__name__)

StatusCallback = Callable[["RenderStatus"], None]


class RenderStrategy(Enum):

    FULL = "full"
    PROGRESSIVE = "progressive"
    PARTIAL = "partial"
    DEFERRED = "deferred"


@dataclass(frozen=True)
class RenderCeilingReached:
    rendered: int
    total: int

    @property
    def message(self) -> str:
        return (
            f"Showing {self.rendered} of {self.total} nodes. "
            "Collapse nodes or raise the visible node limit to see more."
        )


@dataclass
class RenderStatus:
    strategy: RenderStrategy
    generation: int
    rendered: int = 0
    total: int = 0
    progress: float = 0.0
    complete: bool = False
    truncation: Optional[RenderCeilingReached] = None
    notice: Optional[str] = None

    @property
    def truncated(self) -> bool:
        return self.truncation is not None

    @property
    def message(self) -> str:
        if self.truncation is not None:
            return self.truncation.message
        if self.notice:
            return self.notice
        if not self.complete:
            return f"Rendering... {self.progress:.0f}%"
        return f"Rendered {self.rendered} nodes"


@dataclass
class TreeState:
    roots: List[DiagramNode] = field(default_factory=list)
    index: Dict[str, DiagramNode] = field(default_factory=dict)
    total_count: int = 0

    def find(self, node_id: str) -> Optional[DiagramNode]:
        return self.index.get(node_id)

    def reset(self) -> None:
        self.roots = []
        self.index = {}
        self.total_count = 0


class RenderCache:
    def __init__(self, ceiling: int) -> None:
        self.ceiling = ceiling
        self._entries: Dict[str, Any] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._entries

    def get(self, node_id: str) -> Optional[Any]:
        return self._entries.get(node_id)

    def store(self, node: DiagramNode, element: Any, total_count: int) -> bool:
        if node.kind is NodeKind.PLACEHOLDER or total_count >= self.ceiling:
            return False
        self._entries[node.id] = element
        return True

    def evict(self, node_ids: Iterable[str]) -> int:
        evicted = 0
        for node_id in node_ids:
            if self._entries.pop(node_id, None) is not None:
                evicted += 1
        return evicted

    def clear(self) -> None:
        self._entries.clear()


class ProgressiveRender:
    """Resumable render task; each step commits at most one chunk of nodes."""

    def __init__(self, scheduler: "RenderScheduler", generation: int, total: int) -> None:
        self.scheduler = scheduler
        self.generation = generation
        self.total = total
        self.stack: List[DiagramNode] = list(reversed(scheduler.tree.roots))
        self.handle: Optional[int] = None
        self.done = False
        self.cancelled = False
        self.started = perf_counter()

    @property
    def stale(self) -> bool:
        return self.generation != self.scheduler.generation

    def step(self) -> bool:
        scheduler = self.scheduler
        self.handle = None
        if self.stale:
            logger.warning("Discarding stale render chunk from generation %d", self.generation)
            self.cancelled = True
            self.done = True
            return False

        emitted = 0
        limit = scheduler.config.chunk_size
        while self.stack and emitted < limit and not scheduler.at_ceiling():
            node = self.stack.pop()
            if node.id in scheduler.rendered:
                continue
            scheduler.emit_node(node)
            emitted += 1
            if scheduler.visibility.shows_children(node):
                self.stack.extend(reversed(node.children))

        rendered = len(scheduler.rendered)
        status = scheduler.status
        status.rendered = rendered
        status.progress = 30 + min(70 * (rendered / self.total), 69) if self.total else 99

        if self.stack and not scheduler.at_ceiling():
            self.handle = scheduler.frames.request_frame(self.step)
            scheduler.publish()
            return True

        self.done = True
        status.progress = 100.0
        status.complete = True
        if self.stack:
            status.truncation = RenderCeilingReached(rendered, self.total)
            logger.info("Progressive render truncated at %d of %d nodes", rendered, self.total)
        logger.debug(
            "Progressive render finished in %.2fms (%d of %d nodes)",
            (perf_counter() - self.started) * 1000,
            rendered,
            self.total,
        )
        scheduler.publish()
        return False


class RenderScheduler:
    def __init__(
        self,
        surface: Surface,
        *,
        config: Optional[DiagramConfig] = None,
        layout: Optional[LayoutEngine] = None,
        visibility: Optional[VisibilityState] = None,
        frames: Optional[FrameLoop] = None,
        on_status: Optional[StatusCallback] = None,
    ) -> None:
        self.config = config or DiagramConfig()
        self.surface = surface
        self.layout = layout or LayoutEngine(self.config)
        self.visibility = visibility if visibility is not None else VisibilityState()
        self.frames = frames if frames is not None else FrameLoop()
        self.on_status = on_status

        self.tree = TreeState()
        self.cache = RenderCache(self.config.cache_node_ceiling)
        self.rendered: Dict[str, Any] = {}
        self.limit = self.config.visible_node_limit
        self.generation = 0
        self.status = RenderStatus(RenderStrategy.FULL, self.generation, complete=True)
        self.task: Optional[ProgressiveRender] = None
        self._deferred: Optional[int] = None

    @property
    def busy(self) -> bool:
        task_running = self.task is not None and not self.task.done and not self.task.stale
        return task_running or self._deferred is not None

    def attach(self, tree: TreeState) -> None:
        self.supersede()
        self.tree = tree
        self.cache.clear()
        self.rendered.clear()
        self.limit = self.config.visible_node_limit
        self.surface.clear()

    def supersede(self) -> int:
        self.generation += 1
        self._deferred = None
        return self.generation

    def publish(self) -> None:
        if self.on_status is not None:
            self.on_status(self.status)

    def at_ceiling(self) -> bool:
        return self.limit is not None and len(self.rendered) >= self.limit

    def view_box(self) -> Bounds:
        bounds = self.layout.bounds(self.tree.roots, self.visibility)
        if bounds.is_empty:
            return bounds
        return bounds.grow(self.config.view_box_margin)

    def render(self) -> RenderStatus:
        if self.tree.total_count > self.config.progressive_threshold:
            return self.render_progressive()
        return self.render_full()

    def render_full(self) -> RenderStatus:
        started = perf_counter()
        generation = self.supersede()
        self._reset_surface()
        self.status = RenderStatus(RenderStrategy.FULL, generation)

        if not self.tree.roots:
            self.status.complete = True
            self.publish()
            return self.status

        self.layout.layout(self.tree.roots, self.visibility)
        self.surface.set_view_box(self.view_box())
        self.emit_connectors()

        stack = list(reversed(self.tree.roots))
        while stack and not self.at_ceiling():
            node = stack.pop()
            if node.id in self.rendered:
                continue
            self.emit_node(node)
            if self.visibility.shows_children(node):
                stack.extend(reversed(node.children))

        self.status.rendered = len(self.rendered)
        self.status.progress = 100.0
        self.status.complete = True
        if stack:
            total = self.layout.count_visible(self.tree.roots, self.visibility)
            self.status.total = total
            self.status.truncation = RenderCeilingReached(len(self.rendered), total)
            logger.info("Render truncated at %d of %d visible nodes", len(self.rendered), total)
        else:
            self.status.total = len(self.rendered)

        logger.debug("Tree rendered in %.2fms", (perf_counter() - started) * 1000)
        self.publish()
        return self.status

    def render_progressive(self) -> RenderStatus:
        generation = self.supersede()
        self._reset_surface()
        total = self.layout.count_visible(self.tree.roots, self.visibility)
        self.status = RenderStatus(RenderStrategy.PROGRESSIVE, generation, total=total)

        self.layout.layout(self.tree.roots, self.visibility)
        self.surface.set_view_box(self.view_box())
        self.emit_connectors()
        self.status.progress = 30.0

        self.task = ProgressiveRender(self, generation, total)
        self.task.handle = self.frames.request_frame(self.task.step)
        self.publish()
        return self.status

    def render_toggle(self, node_id: str, expanding: bool) -> RenderStatus:
        total = self.tree.total_count
        if self.busy:
            # Partial state from an unfinished render cannot be patched.
            return self.render()
        if total > self.config.full_rerender_threshold:
            return self.render_deferred("Expanding node..." if expanding else "Collapsing node...")
        if total > self.config.partial_render_threshold:
            return self.render_partial(node_id, expanding)
        return self.render_full()

    def render_deferred(self, notice: str) -> RenderStatus:
        generation = self.supersede()
        self.cache.clear()
        self.status = RenderStatus(RenderStrategy.DEFERRED, generation, notice=notice)

        def run() -> None:
            if self._deferred != handle or self.generation != generation:
                return
            self._deferred = None
            self.render()

        handle = self.frames.request_frame(run)
        self._deferred = handle
        self.publish()
        return self.status

    def render_partial(self, node_id: str, expanding: bool) -> RenderStatus:
        node = self.tree.find(node_id)
        generation = self.supersede()
        self.status = RenderStatus(RenderStrategy.PARTIAL, generation)
        if node is None:
            self.status.complete = True
            self.status.rendered = len(self.rendered)
            return self.status

        descendants = [item.id for item in node.iter_descendants()]
        self.cache.evict(descendants)
        removed = [item for item in descendants if self.rendered.pop(item, None) is not None]
        if removed:
            self.surface.remove_nodes(removed)

        self.layout.layout(self.tree.roots, self.visibility)
        self.surface.clear_connectors()
        self.emit_connectors()

        for rendered_id, element in list(self.rendered.items()):
            rendered_node = self.tree.find(rendered_id)
            if rendered_node is not None:
                self.surface.place_node(element, node_geometry(rendered_node, self.config, self.visibility))

        # A node under a collapsed ancestor only changes the collapsed set.
        if (
            expanding
            and self.visibility.shows_children(node)
            and self.visibility.is_visible(node, self.tree.index)
        ):
            stack = list(reversed(node.children))
            while stack and not self.at_ceiling():
                child = stack.pop()
                if child.id in self.rendered:
                    continue
                self.emit_node(child)
                if self.visibility.shows_children(child):
                    stack.extend(reversed(child.children))

        if self.limit is not None:
            self._fill_to_ceiling()

        self.surface.set_view_box(self.view_box())
        self.status.complete = True
        self.status.progress = 100.0
        self._report_coverage()
        logger.debug(
            "Partial render for %s: %d removed, %d rendered",
            node_id,
            len(removed),
            len(self.rendered),
        )
        self.publish()
        return self.status

    def render_more(self, limit: Optional[int]) -> RenderStatus:
        if self.busy:
            self.limit = limit
            return self.status

        self.limit = limit
        self.surface.clear_connectors()
        self.emit_connectors()

        self._fill_to_ceiling()
        self._report_coverage()
        logger.debug("Detail level updated: now showing %d nodes", len(self.rendered))
        self.publish()
        return self.status

    def _fill_to_ceiling(self) -> int:
        """Emit visible nodes missing from the surface, in pre-order, until the ceiling."""
        emitted = 0
        for node in self.visibility.iter_visible(self.tree.roots):
            if self.at_ceiling():
                break
            if node.id not in self.rendered:
                self.emit_node(node)
                emitted += 1
        return emitted

    def _report_coverage(self) -> None:
        rendered = len(self.rendered)
        visible = self.layout.count_visible(self.tree.roots, self.visibility)
        self.status.rendered = rendered
        self.status.total = visible
        if rendered < visible:
            self.status.truncation = RenderCeilingReached(rendered, visible)
        else:
            self.status.truncation = None

    def emit_node(self, node: DiagramNode) -> None:
        geometry = node_geometry(node, self.config, self.visibility)
        element = self.cache.get(node.id)
        if element is None:
            element = self.surface.create_node(geometry)
            self.cache.store(node, element, self.tree.total_count)
        self.surface.place_node(element, geometry)
        self.rendered[node.id] = element

    def emit_connectors(self) -> int:
        batch: List[Connector] = []
        emitted = 0
        size = self.config.connector_batch_size
        for parent, child in self.visibility.iter_visible_edges(self.tree.roots):
            batch.append(elbow_connector(parent, child, self.config))
            if len(batch) >= size:
                self.surface.add_connectors(batch)
                emitted += len(batch)
                batch = []
        if batch:
            self.surface.add_connectors(batch)
            emitted += len(batch)
        return emitted

    def geometries(self) -> List[NodeGeometry]:
        return [
            node_geometry(self.tree.index[node_id], self.config, self.visibility)
            for node_id in self.rendered
            if node_id in self.tree.index
        ]

    def connectors(self) -> Sequence[Connector]:
        return [elbow_connector(parent, child, self.config) for parent, child in self.visibility.iter_visible_edges(self.tree.roots)]

    def reset(self) -> None:
        self.supersede()
        self.tree = TreeState()
        self.cache.clear()
        self.rendered.clear()
        self.task = None
        self.limit = self.config.visible_node_limit
        self.status = RenderStatus(RenderStrategy.FULL, self.generation, complete=True)
        self.surface.clear()

    def _reset_surface(self) -> None:
        self.cache.clear()
        self.rendered.clear()
        self.surface.clear()
