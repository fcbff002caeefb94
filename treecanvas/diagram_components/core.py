from dataclasses import dataclass, fields, replace as _replace
from enum import Enum
from typing import Optional

from ..errors import ConfigurationError


class NodeKind(Enum):

    ELEMENT = "element"
    TEXT = "text"
    PLACEHOLDER = "placeholder"
    ERROR = "error"


@dataclass
class BoxChars:

    top_left: str = "╭"
    top_right: str = "╮"
    bottom_left: str = "╰"
    bottom_right: str = "╯"

    horizontal: str = "─"
    vertical: str = "│"

    tee_down: str = "┬"
    tee_up: str = "┴"
    tee_right: str = "├"
    tee_left: str = "┤"
    cross: str = "┼"

    collapsed: str = "+"
    expanded: str = "−"

    @classmethod
    def for_style(cls, style: str) -> "BoxChars":
        key = style.lower().strip()
        if key in {"rounded", "round", "modern"}:
            return cls()
        if key in {"square", "line", "box"}:
            return cls(
                top_left="┌",
                top_right="┐",
                bottom_left="└",
                bottom_right="┘",
            )
        if key in {"ascii", "plain"}:
            return cls(
                top_left="+",
                top_right="+",
                bottom_left="+",
                bottom_right="+",
                horizontal="-",
                vertical="|",
                tee_down="+",
                tee_up="+",
                tee_right="+",
                tee_left="+",
                cross="+",
                expanded="-",
            )
        raise ValueError(f"Unknown box style: {style}")


_POSITIVE_INTS = (
    "node_width",
    "node_height",
    "level_height",
    "max_depth",
    "max_children",
    "text_label_limit",
    "chunk_size",
    "connector_batch_size",
)

_NON_NEGATIVE_INTS = (
    "node_spacing",
    "cache_node_ceiling",
    "partial_render_threshold",
    "full_rerender_threshold",
    "progressive_threshold",
    "bounds_margin",
    "view_box_margin",
)


@dataclass(frozen=True)
class DiagramConfig:
    node_width: int = 120
    node_height: int = 40
    level_height: int = 80
    node_spacing: int = 20

    max_depth: int = 100
    max_children: int = 1000
    text_label_limit: int = 50

    cache_node_ceiling: int = 5000
    partial_render_threshold: int = 1000
    full_rerender_threshold: int = 100000
    progressive_threshold: int = 10000
    chunk_size: int = 100
    connector_batch_size: int = 50
    visible_node_limit: Optional[int] = None

    bounds_margin: int = 50
    view_box_margin: int = 100

    min_zoom: float = 0.1
    max_zoom: float = 10.0
    fit_min_zoom: float = 0.5
    fit_max_zoom: float = 2.0
    fit_fraction: float = 0.9
    button_zoom_multiplier: float = 5.0

    auto_collapse_depth: Optional[int] = None

    def __post_init__(self) -> None:
        for name in _POSITIVE_INTS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer.")
            if value < 1:
                raise ConfigurationError(f"{name} must be at least 1.")

        for name in _NON_NEGATIVE_INTS:
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer.")
            if value < 0:
                raise ConfigurationError(f"{name} must not be negative.")

        if self.text_label_limit < 4:
            raise ConfigurationError("text_label_limit must be at least 4 characters.")
        if self.level_height < self.node_height:
            raise ConfigurationError("level_height must be greater than or equal to node_height.")

        for name in ("visible_node_limit", "auto_collapse_depth"):
            value = getattr(self, name)
            if value is None:
                continue
            if not isinstance(value, int) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be an integer when provided.")
            if value < 0:
                raise ConfigurationError(f"{name} must not be negative.")

        for name in (
            "min_zoom",
            "max_zoom",
            "fit_min_zoom",
            "fit_max_zoom",
            "fit_fraction",
            "button_zoom_multiplier",
        ):
            value = getattr(self, name)
            if not isinstance(value, (int, float)) or isinstance(value, bool):
                raise ConfigurationError(f"{name} must be a number.")
            if value <= 0:
                raise ConfigurationError(f"{name} must be positive.")

        if self.min_zoom > self.max_zoom:
            raise ConfigurationError("min_zoom must not exceed max_zoom.")
        if self.fit_min_zoom > self.fit_max_zoom:
            raise ConfigurationError("fit_min_zoom must not exceed fit_max_zoom.")
        if self.fit_fraction > 1:
            raise ConfigurationError("fit_fraction must be within (0, 1].")

    def replace(self, **changes) -> "DiagramConfig":
        known = {item.name for item in fields(self)}
        unknown = sorted(set(changes) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration field(s): {', '.join(unknown)}")
        return _replace(self, **changes)
