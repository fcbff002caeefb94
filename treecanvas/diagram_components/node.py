from typing import Dict, Iterator, List, Optional

from .core import NodeKind


class DiagramNode:
    def __init__(
        self,
        node_id: str,
        kind: NodeKind,
        label: str,
        depth: int,
        *,
        parent_id: Optional[str] = None,
        attributes: Optional[Dict[str, str]] = None,
        raw_text: Optional[str] = None,
    ) -> None:
        self.id = node_id
        self.kind = kind
        self.label = label
        self.depth = depth
        self.parent_id = parent_id
        self.attributes: Dict[str, str] = dict(attributes) if attributes else {}
        self.raw_text = raw_text
        self.children: List["DiagramNode"] = []

        self.subtree_width = 0.0
        self.x = 0.0
        self.y = 0.0

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def add_child(self, child: "DiagramNode") -> "DiagramNode":
        child.parent_id = self.id
        self.children.append(child)
        return child

    def iter_subtree(self) -> Iterator["DiagramNode"]:
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def iter_descendants(self) -> Iterator["DiagramNode"]:
        subtree = self.iter_subtree()
        next(subtree)
        yield from subtree

    def __repr__(self) -> str:
        return (
            f"DiagramNode(id={self.id!r}, kind={self.kind.value}, label={self.label!r}, "
            f"depth={self.depth}, children={len(self.children)})"
        )
