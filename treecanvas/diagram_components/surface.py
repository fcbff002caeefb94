from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .geometry import Connector, NodeGeometry
from .layout import Bounds


class Surface:
    """Display-surface contract consumed by the render scheduler.

    ``create_node`` materialises a new element for a node; the scheduler may cache
    the returned object and hand it back through ``place_node`` on later renders.
    """

    def create_node(self, geometry: NodeGeometry) -> Any:
        raise NotImplementedError

    def place_node(self, element: Any, geometry: NodeGeometry) -> None:
        raise NotImplementedError

    def remove_nodes(self, node_ids: Iterable[str]) -> None:
        raise NotImplementedError

    def add_connectors(self, connectors: Sequence[Connector]) -> None:
        raise NotImplementedError

    def clear_connectors(self) -> None:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def set_view_box(self, view_box: Bounds) -> None:
        raise NotImplementedError


@dataclass
class NodeElement:
    geometry: NodeGeometry
    serial: int

    def move(self, geometry: NodeGeometry) -> "NodeElement":
        self.geometry = geometry
        return self


class RecordingSurface(Surface):
    def __init__(self) -> None:
        self.nodes: Dict[str, NodeElement] = {}
        self.connector_batches: List[List[Connector]] = []
        self.view_box: Optional[Bounds] = None
        self.created = 0
        self.placed = 0

    @property
    def connectors(self) -> List[Connector]:
        return [connector for batch in self.connector_batches for connector in batch]

    def create_node(self, geometry: NodeGeometry) -> NodeElement:
        self.created += 1
        return NodeElement(geometry=geometry, serial=self.created)

    def place_node(self, element: NodeElement, geometry: NodeGeometry) -> None:
        self.placed += 1
        self.nodes[geometry.id] = element.move(geometry)

    def remove_nodes(self, node_ids: Iterable[str]) -> None:
        for node_id in node_ids:
            self.nodes.pop(node_id, None)

    def add_connectors(self, connectors: Sequence[Connector]) -> None:
        self.connector_batches.append(list(connectors))

    def clear_connectors(self) -> None:
        self.connector_batches.clear()

    def clear(self) -> None:
        self.nodes.clear()
        self.connector_batches.clear()

    def set_view_box(self, view_box: Bounds) -> None:
        self.view_box = view_box
