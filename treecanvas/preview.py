from time import sleep
from typing import Optional

from rich.console import Console
from rich.live import Live
from rich.panel import Panel

from .diagram_components.canvas import CanvasSurface
from .diagram_components.diagram import Diagram
from .errors import ConfigurationError


def _canvas_surface(diagram: Diagram) -> CanvasSurface:
    if not isinstance(diagram.surface, CanvasSurface):
        raise ConfigurationError("Terminal preview needs a diagram drawn on a CanvasSurface.")
    return diagram.surface


def diagram_panel(diagram: Diagram, title: Optional[str] = None) -> Panel:
    surface = _canvas_surface(diagram)
    subtitle = f"{diagram.status.message} • zoom {diagram.viewport.zoom:.2f}"
    return Panel(
        surface.render_text(),
        title=title or f"{diagram.total_node_count} nodes",
        subtitle=subtitle,
        border_style="cyan",
        expand=False,
    )


def show(diagram: Diagram, console: Optional[Console] = None, title: Optional[str] = None) -> None:
    console = console or Console()
    diagram.frames.run_until_idle()
    console.print(diagram_panel(diagram, title))


def live_render(
    diagram: Diagram,
    console: Optional[Console] = None,
    *,
    title: Optional[str] = None,
    delay: float = 0.0,
    max_frames: Optional[int] = None,
) -> int:
    """Step the diagram's frame loop under ``rich.live.Live``, redrawing after each frame."""

    _canvas_surface(diagram)
    console = console or Console()
    frames = 0
    with Live(diagram_panel(diagram, title), console=console, refresh_per_second=6) as live:
        while not diagram.frames.idle:
            if max_frames is not None and frames >= max_frames:
                break
            diagram.frames.run_frame()
            frames += 1
            live.update(diagram_panel(diagram, title))
            if delay:
                sleep(delay)
    return frames
