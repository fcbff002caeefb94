from .core import BoxChars, DiagramConfig, NodeKind
from .node import DiagramNode
from .builder import TreeBuilder
from .visibility import VisibilityState
from .layout import Bounds, LayoutEngine
from .geometry import Connector, NodeGeometry
from .frames import FrameLoop
from .scheduler import RenderCache, RenderCeilingReached, RenderScheduler, RenderStatus, RenderStrategy, TreeState
from .viewport import Viewport
from .surface import RecordingSurface, Surface
from .canvas import Canvas, CanvasSurface
from .diagram import Diagram

__all__ = [
    "BoxChars",
    "DiagramConfig",
    "NodeKind",
    "DiagramNode",
    "TreeBuilder",
    "VisibilityState",
    "Bounds",
    "LayoutEngine",
    "Connector",
    "NodeGeometry",
    "FrameLoop",
    "RenderCache",
    "RenderCeilingReached",
    "RenderScheduler",
    "RenderStatus",
    "RenderStrategy",
    "TreeState",
    "Viewport",
    "Surface",
    "RecordingSurface",
    "Canvas",
    "CanvasSurface",
    "Diagram",
]
