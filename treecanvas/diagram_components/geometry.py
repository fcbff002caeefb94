from dataclasses import dataclass
from typing import Tuple

from .core import DiagramConfig, NodeKind
from .node import DiagramNode
from .visibility import VisibilityState

Point = Tuple[float, float]


@dataclass(frozen=True)
class NodeGeometry:
    id: str
    kind: NodeKind
    label: str
    x: float
    y: float
    width: float
    height: float
    has_children: bool
    is_collapsed: bool


@dataclass(frozen=True)
class Connector:
    from_id: str
    to_id: str
    points: Tuple[Point, ...]

    def path_data(self) -> str:
        head, *rest = self.points
        commands = [f"M {head[0]:g} {head[1]:g}"]
        commands.extend(f"L {x:g} {y:g}" for x, y in rest)
        return " ".join(commands)


def node_geometry(node: DiagramNode, config: DiagramConfig, visibility: VisibilityState) -> NodeGeometry:
    return NodeGeometry(
        id=node.id,
        kind=node.kind,
        label=node.label,
        x=node.x,
        y=node.y,
        width=config.node_width,
        height=config.node_height,
        has_children=node.has_children,
        is_collapsed=visibility.is_collapsed(node.id),
    )


def elbow_connector(parent: DiagramNode, child: DiagramNode, config: DiagramConfig) -> Connector:
    start_x = parent.x + config.node_width / 2
    start_y = parent.y + config.node_height
    end_x = child.x + config.node_width / 2
    end_y = child.y
    mid_y = start_y + (end_y - start_y) / 2
    return Connector(
        from_id=parent.id,
        to_id=child.id,
        points=((start_x, start_y), (start_x, mid_y), (end_x, mid_y), (end_x, end_y)),
    )
