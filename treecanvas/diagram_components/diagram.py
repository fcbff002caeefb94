import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple, Union

from ..errors import ConfigurationError
from ..sources import load_document, parse_document
from .builder import TreeBuilder
from .canvas import CanvasSurface
from .core import DiagramConfig
from .frames import FrameLoop
from .geometry import Connector, NodeGeometry
from .layout import Bounds, LayoutEngine
from .node import DiagramNode
from .scheduler import RenderScheduler, RenderStatus, StatusCallback, TreeState
from .surface import Surface
from .viewport import ZOOM_IN, ZOOM_OUT, Viewport
from .visibility import VisibilityState

logger = logging.getLogger(__name__)


class Diagram:
    """Interactive tree diagram.

    Owns the built tree, the collapsed set, the camera and the render scheduler,
    and turns UI-shell events (toggle, pan, zoom, rebuild) into renders on the
    attached surface. Frame-aligned work runs on ``frames``; call
    ``frames.run_until_idle()`` (or step it yourself) to advance it.
    """

    def __init__(
        self,
        config: Optional[DiagramConfig] = None,
        *,
        surface: Optional[Surface] = None,
        frames: Optional[FrameLoop] = None,
        container_size: Tuple[float, float] = (1280, 720),
        on_status: Optional[StatusCallback] = None,
    ) -> None:
        if config is not None and not isinstance(config, DiagramConfig):
            raise ConfigurationError("config must be a DiagramConfig instance.")
        if surface is not None and not isinstance(surface, Surface):
            raise ConfigurationError("surface must implement the Surface interface.")

        self.config = config or DiagramConfig()
        self.surface = surface if surface is not None else CanvasSurface()
        self.frames = frames if frames is not None else FrameLoop()
        self.visibility = VisibilityState()
        self.layout = LayoutEngine(self.config)
        self.viewport = Viewport(self.config)
        self.on_status = on_status
        self.scheduler = RenderScheduler(
            self.surface,
            config=self.config,
            layout=self.layout,
            visibility=self.visibility,
            frames=self.frames,
            on_status=self._status_changed,
        )

        self.container_size = (0.0, 0.0)
        self.set_container_size(*container_size)

        self._fit_pending = False
        self._pending_pan = (0.0, 0.0)
        self._pan_frame: Optional[int] = None
        self._drag_from: Optional[Tuple[float, float]] = None
        self._pending_notice: Optional[Tuple[int, str]] = None

    # Input

    def rebuild(self, elements: Iterable[Any]) -> RenderStatus:
        builder = TreeBuilder(self.config)
        # A failed build leaves the current tree on screen.
        roots = builder.build(elements)

        self._drop_pending_pan()
        self.visibility.reset()
        self.viewport.reset()
        self.scheduler.attach(TreeState(roots, builder.index, builder.total_count))
        if self.config.auto_collapse_depth is not None:
            self.visibility.collapse_below_depth(roots, self.config.auto_collapse_depth)

        logger.debug("Diagram rebuilt with %d nodes", builder.total_count)
        self._fit_pending = True
        return self.scheduler.render()

    def load(self, document: Union[str, bytes]) -> RenderStatus:
        return self.rebuild(parse_document(document))

    def load_from(self, location: str, *, timeout: float = 30.0) -> RenderStatus:
        return self.rebuild(load_document(location, timeout=timeout))

    def clear(self) -> None:
        self._drop_pending_pan()
        self._drag_from = None
        self._fit_pending = False
        self._pending_notice = None
        self.frames.clear()
        self.scheduler.reset()
        self.visibility.reset()
        self.viewport.reset()
        logger.debug("Diagram cleared")

    # Visibility

    def toggle(self, node_id: str) -> bool:
        node = self.scheduler.tree.find(node_id)
        if node is None or not node.has_children:
            logger.debug("Ignoring toggle for unknown or leaf node %s", node_id)
            return False
        expanding = not self.visibility.toggle(node_id)
        self.scheduler.render_toggle(node_id, expanding)
        return True

    def collapse_all(self) -> RenderStatus:
        self.visibility.collapse_all(self.scheduler.tree.roots)
        return self._render_with_notice("All nodes collapsed")

    def expand_all(self) -> RenderStatus:
        self.visibility.expand_all()
        return self._render_with_notice("All nodes expanded")

    def collapse_below_depth(self, max_depth: int) -> RenderStatus:
        if not isinstance(max_depth, int) or max_depth < 0:
            raise ConfigurationError("max_depth must be a non-negative integer.")
        self.visibility.collapse_below_depth(self.scheduler.tree.roots, max_depth)
        return self.scheduler.render()

    def render(self) -> RenderStatus:
        return self.scheduler.render()

    def render_more(self, limit: Optional[int]) -> RenderStatus:
        if limit is not None and (not isinstance(limit, int) or limit < 1):
            raise ConfigurationError("limit must be a positive integer or None.")
        return self.scheduler.render_more(limit)

    # Camera

    def pan(self, dx: float, dy: float) -> None:
        pending_x, pending_y = self._pending_pan
        self._pending_pan = (pending_x + dx, pending_y + dy)
        if self._pan_frame is None:
            self._pan_frame = self.frames.request_frame(self._apply_pan)

    def begin_drag(self, x: float, y: float) -> None:
        self._drag_from = (x, y)

    def drag_to(self, x: float, y: float) -> None:
        if self._drag_from is None:
            return
        last_x, last_y = self._drag_from
        self._drag_from = (x, y)
        self.pan(x - last_x, y - last_y)

    def end_drag(self) -> None:
        self._drag_from = None
        self.flush_pan()

    def flush_pan(self) -> None:
        if self._pan_frame is not None:
            self.frames.cancel(self._pan_frame)
            self._apply_pan()

    def zoom_at(self, x: float, y: float, direction: int) -> float:
        self.flush_pan()
        return self.viewport.zoom_step(x, y, ZOOM_IN if direction >= 0 else ZOOM_OUT)

    def wheel(self, x: float, y: float, delta_y: float) -> float:
        self.flush_pan()
        return self.viewport.wheel(x, y, delta_y)

    def zoom_in(self) -> float:
        return self._button_zoom(ZOOM_IN)

    def zoom_out(self) -> float:
        return self._button_zoom(ZOOM_OUT)

    def zoom_reset(self) -> float:
        self._drop_pending_pan()
        self.viewport.reset()
        return self.fit()

    def fit(self) -> float:
        self.flush_pan()
        return self.viewport.fit_to_bounds(self.bounds(), self.container_size)

    def set_container_size(self, width: float, height: float) -> None:
        for name, value in (("width", width), ("height", height)):
            if not isinstance(value, (int, float)) or value < 0:
                raise ConfigurationError(f"container {name} must be a non-negative number.")
        self.container_size = (float(width), float(height))

    # Queries

    @property
    def total_node_count(self) -> int:
        return self.scheduler.tree.total_count

    @property
    def rendered_count(self) -> int:
        return len(self.scheduler.rendered)

    @property
    def status(self) -> RenderStatus:
        return self.scheduler.status

    @property
    def roots(self) -> List[DiagramNode]:
        return self.scheduler.tree.roots

    @property
    def busy(self) -> bool:
        return self.scheduler.busy

    def find(self, node_id: str) -> Optional[DiagramNode]:
        return self.scheduler.tree.find(node_id)

    def bounds(self) -> Bounds:
        return self.layout.bounds(self.roots, self.visibility)

    def view_box(self) -> Bounds:
        return self.scheduler.view_box()

    def geometries(self) -> List[NodeGeometry]:
        return self.scheduler.geometries()

    def connectors(self) -> Sequence[Connector]:
        return self.scheduler.connectors()

    def count_visible(self) -> int:
        return self.layout.count_visible(self.roots, self.visibility)

    def max_depth(self) -> int:
        return self.layout.max_depth(self.roots)

    def max_level_width(self) -> int:
        return self.layout.max_level_width(self.roots, self.visibility)

    # Internals

    def _render_with_notice(self, notice: str) -> RenderStatus:
        status = self.scheduler.render()
        if status.complete:
            status.notice = notice
            self.scheduler.publish()
        else:
            # Progress stays visible until the render finishes.
            self._pending_notice = (status.generation, notice)
        return status

    def _button_zoom(self, direction: int) -> float:
        self.flush_pan()
        width, height = self.container_size
        return self.viewport.zoom_step(width / 2, height / 2, direction, button=True)

    def _apply_pan(self) -> None:
        dx, dy = self._pending_pan
        self._pending_pan = (0.0, 0.0)
        self._pan_frame = None
        if dx or dy:
            self.viewport.pan_by(dx, dy)

    def _drop_pending_pan(self) -> None:
        self.frames.cancel(self._pan_frame)
        self._pan_frame = None
        self._pending_pan = (0.0, 0.0)

    def _status_changed(self, status: RenderStatus) -> None:
        if self._pending_notice is not None and status.complete:
            generation, notice = self._pending_notice
            if generation == status.generation:
                status.notice = notice
            self._pending_notice = None
        if self._fit_pending and status.complete and status.generation == self.scheduler.generation:
            self._fit_pending = False
            self.fit()
        if self.on_status is not None:
            self.on_status(status)
