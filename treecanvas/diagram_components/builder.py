import logging
import uuid
from time import perf_counter
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..errors import NoRootError
from .core import DiagramConfig, NodeKind
from .node import DiagramNode

logger = logging.getLogger(__name__)

DEPTH_LIMIT_LABEL = "Depth limit exceeded"

_ELEMENT = 0
_OMITTED = 1

_WorkItem = Tuple[int, Any, int, Optional[DiagramNode]]


def generate_node_id() -> str:
    return f"node_{uuid.uuid4().hex}"


def is_element(item: Any) -> bool:
    # ElementTree represents comments and processing instructions with callable tags.
    return isinstance(getattr(item, "tag", None), str)


def child_elements(element: Any) -> List[Any]:
    return [child for child in list(element) if is_element(child)]


def element_attributes(element: Any) -> Dict[str, str]:
    attrib = getattr(element, "attrib", None) or {}
    return {str(name): str(value) for name, value in attrib.items()}


def element_text(element: Any) -> str:
    itertext = getattr(element, "itertext", None)
    if itertext is not None:
        return "".join(itertext())
    return getattr(element, "text", None) or ""


def truncate_label(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."


class TreeBuilder:
    """Turns a sequence of ElementTree-style elements into bounded DiagramNode trees.

    The walk uses an explicit work stack, so input nesting never drives Python
    recursion. ``total_count`` counts built element nodes and ``index`` maps every
    generated id (synthetic nodes included) to its node.
    """

    def __init__(
        self,
        config: Optional[DiagramConfig] = None,
        *,
        id_factory: Callable[[], str] = generate_node_id,
    ) -> None:
        self.config = config or DiagramConfig()
        self._new_id = id_factory
        self.total_count = 0
        self.index: Dict[str, DiagramNode] = {}

    def reset(self) -> None:
        self.total_count = 0
        self.index = {}

    def build(self, root_elements: Iterable[Any]) -> List[DiagramNode]:
        elements = [item for item in root_elements if is_element(item)]
        if not elements:
            raise NoRootError("No root element found in document.")

        self.reset()
        started = perf_counter()
        roots: List[DiagramNode] = []

        stack: List[_WorkItem] = [(_ELEMENT, element, 0, None) for element in reversed(elements)]
        while stack:
            item_type, payload, depth, parent = stack.pop()

            if item_type == _OMITTED:
                self._attach(
                    DiagramNode(self._new_id(), NodeKind.PLACEHOLDER, f"... {payload} more items", depth),
                    parent,
                    roots,
                )
                continue

            if depth > self.config.max_depth:
                self._attach(
                    DiagramNode(self._new_id(), NodeKind.ERROR, DEPTH_LIMIT_LABEL, depth),
                    parent,
                    roots,
                )
                continue

            node = self._attach(
                DiagramNode(
                    self._new_id(),
                    NodeKind.ELEMENT,
                    str(payload.tag),
                    depth,
                    attributes=element_attributes(payload),
                ),
                parent,
                roots,
            )
            self.total_count += 1

            children = child_elements(payload)
            if children:
                self._push_children(stack, children, depth + 1, node)
                continue

            text = element_text(payload).strip()
            if text:
                self._attach(
                    DiagramNode(
                        self._new_id(),
                        NodeKind.TEXT,
                        truncate_label(text, self.config.text_label_limit),
                        depth + 1,
                        raw_text=text,
                    ),
                    node,
                    roots,
                )

        logger.debug(
            "Built %d element nodes (%d total) in %.2fms",
            self.total_count,
            len(self.index),
            (perf_counter() - started) * 1000,
        )
        if self.total_count > self.config.progressive_threshold:
            logger.info("Large document detected (%d nodes)", self.total_count)
        return roots

    def _push_children(
        self,
        stack: List[_WorkItem],
        children: Sequence[Any],
        depth: int,
        parent: DiagramNode,
    ) -> None:
        limit = self.config.max_children
        kept = children[:limit]
        omitted = len(children) - len(kept)
        if omitted > 0:
            # Pushed first so it pops after every kept sibling subtree.
            stack.append((_OMITTED, omitted, depth, parent))
        for child in reversed(kept):
            stack.append((_ELEMENT, child, depth, parent))

    def _attach(
        self,
        node: DiagramNode,
        parent: Optional[DiagramNode],
        roots: List[DiagramNode],
    ) -> DiagramNode:
        self.index[node.id] = node
        if parent is None:
            roots.append(node)
        else:
            parent.add_child(node)
        return node
