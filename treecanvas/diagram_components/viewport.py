from typing import Optional, Tuple

from .core import DiagramConfig
from .layout import Bounds

ZOOM_IN = 1
ZOOM_OUT = -1


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


class Viewport:
    def __init__(self, config: Optional[DiagramConfig] = None) -> None:
        self.config = config or DiagramConfig()
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    @property
    def pan(self) -> Tuple[float, float]:
        return self.pan_x, self.pan_y

    @property
    def transform(self) -> str:
        return f"translate({self.pan_x:g}px, {self.pan_y:g}px) scale({self.zoom:g})"

    def to_diagram(self, screen_x: float, screen_y: float, zoom: Optional[float] = None) -> Tuple[float, float]:
        scale = self.zoom if zoom is None else zoom
        return (screen_x - self.pan_x) / scale, (screen_y - self.pan_y) / scale

    def to_screen(self, diagram_x: float, diagram_y: float) -> Tuple[float, float]:
        return diagram_x * self.zoom + self.pan_x, diagram_y * self.zoom + self.pan_y

    def step_factor(self, direction: int, *, button: bool = False) -> float:
        # Steps shrink once the view is already far in or far out.
        if direction >= 0:
            step = 0.05 if self.zoom >= 2 else 0.1
        else:
            step = 0.05 if self.zoom <= 0.5 else 0.1
        if button:
            step *= self.config.button_zoom_multiplier
        step = min(step, 0.9)
        return 1 + step if direction >= 0 else 1 - step

    def zoom_at(self, screen_x: float, screen_y: float, factor_delta: float) -> float:
        if factor_delta <= 0:
            raise ValueError("factor_delta must be positive.")
        old_zoom = self.zoom
        new_zoom = _clamp(old_zoom * factor_delta, self.config.min_zoom, self.config.max_zoom)
        diagram_x, diagram_y = self.to_diagram(screen_x, screen_y, old_zoom)
        self.pan_x = screen_x - diagram_x * new_zoom
        self.pan_y = screen_y - diagram_y * new_zoom
        self.zoom = new_zoom
        return new_zoom

    def zoom_step(self, screen_x: float, screen_y: float, direction: int, *, button: bool = False) -> float:
        return self.zoom_at(screen_x, screen_y, self.step_factor(direction, button=button))

    def wheel(self, screen_x: float, screen_y: float, delta_y: float) -> float:
        return self.zoom_step(screen_x, screen_y, ZOOM_IN if delta_y < 0 else ZOOM_OUT)

    def pan_by(self, dx: float, dy: float) -> None:
        self.pan_x += dx
        self.pan_y += dy

    def reset(self) -> None:
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0

    def fit_to_bounds(self, bounds: Bounds, container_size: Tuple[float, float]) -> float:
        container_width, container_height = container_size
        fraction = self.config.fit_fraction
        scales = []
        if bounds.width > 0:
            scales.append(container_width * fraction / bounds.width)
        if bounds.height > 0:
            scales.append(container_height * fraction / bounds.height)
        ideal = min(scales) if scales else 1.0
        # The view box is already centred on the diagram, so no pan is needed.
        self.zoom = _clamp(ideal, self.config.fit_min_zoom, self.config.fit_max_zoom)
        self.pan_x = 0.0
        self.pan_y = 0.0
        return self.zoom
