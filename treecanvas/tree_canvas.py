from .diagram_components import (
    Bounds,
    BoxChars,
    CanvasSurface,
    Connector,
    Diagram,
    DiagramConfig,
    DiagramNode,
    FrameLoop,
    NodeGeometry,
    NodeKind,
    RecordingSurface,
    RenderCeilingReached,
    RenderStatus,
    RenderStrategy,
    Surface,
)
from .preview import live_render, show
from .sources import load_document, parse_document

__all__ = [
    "Diagram",
    "DiagramConfig",
    "DiagramNode",
    "NodeKind",
    "NodeGeometry",
    "Connector",
    "Bounds",
    "BoxChars",
    "FrameLoop",
    "Surface",
    "RecordingSurface",
    "CanvasSurface",
    "RenderStatus",
    "RenderStrategy",
    "RenderCeilingReached",
    "parse_document",
    "load_document",
    "show",
    "live_render",
]
