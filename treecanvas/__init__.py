from .tree_canvas import *
from .errors import *

__version__ = "0.1.0"
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
    "DiagramError",
    "ConfigurationError",
    "LayoutOverflowError",
    "NoRootError",
    "MalformedDocumentError",
    "SourceError",
]
