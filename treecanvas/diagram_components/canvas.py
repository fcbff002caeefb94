from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, Union

from rich.text import Text
from wcwidth import wcwidth

from ..errors import ConfigurationError, LayoutOverflowError
from .core import BoxChars, NodeKind
from .geometry import Connector, NodeGeometry
from .layout import Bounds
from .surface import Surface

Cell = Tuple[int, int]

KIND_STYLES: Dict[NodeKind, Optional[str]] = {
    NodeKind.ELEMENT: None,
    NodeKind.TEXT: "green",
    NodeKind.PLACEHOLDER: "dim",
    NodeKind.ERROR: "bold red",
}


def char_width(char: str) -> int:
    return max(wcwidth(char), 1)


def display_width(text: str) -> int:
    return sum(char_width(char) for char in text)


def shorten_label(label: str, kind: NodeKind) -> str:
    label = " ".join(label.split())
    limit = 30 if kind is NodeKind.PLACEHOLDER else 10
    if len(label) > limit:
        return label[:limit] + "..."
    return label


def fit_to_width(text: str, width: int) -> str:
    if width <= 0:
        return ""
    if display_width(text) <= width:
        return text
    ellipsis = "…"
    kept: List[str] = []
    used = 0
    for char in text:
        glyph = char_width(char)
        if used + glyph > width - 1:
            break
        kept.append(char)
        used += glyph
    return "".join(kept) + ellipsis


class Canvas:

    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.grid = [[" " for _ in range(width)] for _ in range(height)]
        self.cell_widths = [[1 for _ in range(width)] for _ in range(height)]
        self.styles: Dict[Cell, str] = {}

    def set(self, x: int, y: int, char: str, width: int = 1, style: Optional[str] = None) -> None:
        width = max(width, 1)
        if not (0 <= y < self.height and 0 <= x and x + width <= self.width):
            raise LayoutOverflowError(f"Canvas cell ({x}, {y}) lies outside the {self.width}x{self.height} grid.")
        self.grid[y][x] = char
        self.cell_widths[y][x] = width
        if style:
            self.styles[(x, y)] = style
        else:
            self.styles.pop((x, y), None)
        for i in range(1, width):
            self.grid[y][x + i] = ""
            self.cell_widths[y][x + i] = 0

    def get(self, x: int, y: int) -> str:
        if 0 <= y < self.height and 0 <= x < self.width:
            return self.grid[y][x] or " "
        return " "

    def write(self, x: int, y: int, text: str, style: Optional[str] = None) -> int:
        cursor = x
        for char in text:
            glyph = char_width(char)
            self.set(cursor, y, char, width=glyph, style=style)
            cursor += glyph
        return cursor

    def _lines(self) -> List[List[Tuple[str, Optional[str]]]]:
        lines = []
        for y in range(self.height):
            cells = [
                (self.grid[y][x], self.styles.get((x, y)))
                for x in range(self.width)
                if self.cell_widths[y][x] != 0
            ]
            while cells and cells[-1][0] == " ":
                cells.pop()
            lines.append(cells)
        while lines and not lines[-1]:
            lines.pop()
        return lines

    def render(self) -> str:
        return "\n".join("".join(char for char, _ in line) for line in self._lines())

    def to_text(self) -> Text:
        text = Text()
        for index, line in enumerate(self._lines()):
            if index:
                text.append("\n")
            for char, style in line:
                text.append(char, style=style)
        return text


@dataclass
class TextBox:
    geometry: NodeGeometry
    text: str


class CanvasSurface(Surface):
    """Character-grid display surface; one cell covers ``cell_width`` x ``cell_height`` diagram units."""

    def __init__(
        self,
        *,
        cell_width: int = 10,
        cell_height: int = 10,
        box_style: Union[str, BoxChars] = "rounded",
    ) -> None:
        if not isinstance(cell_width, int) or not isinstance(cell_height, int):
            raise ConfigurationError("cell_width and cell_height must be integers.")
        if cell_width < 1 or cell_height < 1:
            raise ConfigurationError("cell_width and cell_height must be at least 1.")
        if isinstance(box_style, BoxChars):
            self.chars = box_style
        else:
            try:
                self.chars = BoxChars.for_style(box_style)
            except ValueError as exc:
                raise ConfigurationError(str(exc)) from exc

        self.cell_width = cell_width
        self.cell_height = cell_height
        self.boxes: Dict[str, TextBox] = {}
        self.connectors: List[Connector] = []
        self.view_box: Optional[Bounds] = None

    def create_node(self, geometry: NodeGeometry) -> TextBox:
        return TextBox(geometry=geometry, text=shorten_label(geometry.label, geometry.kind))

    def place_node(self, element: TextBox, geometry: NodeGeometry) -> None:
        element.geometry = geometry
        self.boxes[geometry.id] = element

    def remove_nodes(self, node_ids: Iterable[str]) -> None:
        for node_id in node_ids:
            self.boxes.pop(node_id, None)

    def add_connectors(self, connectors: Sequence[Connector]) -> None:
        self.connectors.extend(connectors)

    def clear_connectors(self) -> None:
        self.connectors.clear()

    def clear(self) -> None:
        self.boxes.clear()
        self.connectors.clear()

    def set_view_box(self, view_box: Bounds) -> None:
        self.view_box = view_box

    def _extent(self) -> Optional[Bounds]:
        xs: List[float] = []
        ys: List[float] = []
        for box in self.boxes.values():
            geometry = box.geometry
            xs.extend((geometry.x, geometry.x + geometry.width))
            ys.extend((geometry.y, geometry.y + geometry.height))
        for connector in self.connectors:
            for x, y in connector.points:
                xs.append(x)
                ys.append(y)
        if not xs:
            return None
        return Bounds(min(xs), min(ys), max(xs) - min(xs), max(ys) - min(ys))

    def _cell(self, origin: Bounds, x: float, y: float) -> Cell:
        return (
            int(round((x - origin.min_x) / self.cell_width)),
            int(round((y - origin.min_y) / self.cell_height)),
        )

    def _rasterize(self) -> Optional[Canvas]:
        extent = self._extent()
        if extent is None:
            return None
        columns = int(round(extent.width / self.cell_width)) + 4
        rows = int(round(extent.height / self.cell_height)) + 3
        canvas = Canvas(width=columns, height=rows)

        self._draw_connectors(canvas, extent)
        for box in self.boxes.values():
            self._draw_box(canvas, extent, box)
        return canvas

    def render(self) -> str:
        canvas = self._rasterize()
        return canvas.render() if canvas is not None else ""

    def render_text(self) -> Text:
        canvas = self._rasterize()
        return canvas.to_text() if canvas is not None else Text()

    def _draw_connectors(self, canvas: Canvas, origin: Bounds) -> None:
        dirs: Dict[Cell, Set[str]] = {}

        def link(a: Cell, b: Cell) -> None:
            if b[0] > a[0]:
                forward, backward = "right", "left"
            elif b[0] < a[0]:
                forward, backward = "left", "right"
            elif b[1] > a[1]:
                forward, backward = "down", "up"
            else:
                forward, backward = "up", "down"
            dirs.setdefault(a, set()).add(forward)
            dirs.setdefault(b, set()).add(backward)

        for connector in self.connectors:
            cells = [self._cell(origin, x, y) for x, y in connector.points]
            # The last point is the child's top border; stop one row above it.
            end_x, end_y = cells[-1]
            cells[-1] = (end_x, end_y - 1)
            dirs.setdefault(cells[0], set()).add("up")
            dirs.setdefault(cells[-1], set()).add("down")
            for (x0, y0), (x1, y1) in zip(cells, cells[1:]):
                path = self._walk(x0, y0, x1, y1)
                for a, b in zip(path, path[1:]):
                    link(a, b)

        for (x, y), names in dirs.items():
            if 0 <= y < canvas.height and 0 <= x < canvas.width:
                canvas.set(x, y, self._dirs_to_char(frozenset(names)))

    @staticmethod
    def _walk(x0: int, y0: int, x1: int, y1: int) -> List[Cell]:
        if x0 == x1:
            step = 1 if y1 >= y0 else -1
            return [(x0, y) for y in range(y0, y1 + step, step)]
        step = 1 if x1 >= x0 else -1
        return [(x, y0) for x in range(x0, x1 + step, step)]

    def _dirs_to_char(self, names: FrozenSet[str]) -> str:
        mapping = {
            frozenset({"up", "down"}): self.chars.vertical,
            frozenset({"left", "right"}): self.chars.horizontal,
            frozenset({"down", "right"}): self.chars.top_left,
            frozenset({"down", "left"}): self.chars.top_right,
            frozenset({"up", "right"}): self.chars.bottom_left,
            frozenset({"up", "left"}): self.chars.bottom_right,
            frozenset({"up", "down", "left", "right"}): self.chars.cross,
            frozenset({"up", "left", "right"}): self.chars.tee_up,
            frozenset({"down", "left", "right"}): self.chars.tee_down,
            frozenset({"up", "down", "left"}): self.chars.tee_left,
            frozenset({"up", "down", "right"}): self.chars.tee_right,
            frozenset({"up"}): self.chars.vertical,
            frozenset({"down"}): self.chars.vertical,
            frozenset({"left"}): self.chars.horizontal,
            frozenset({"right"}): self.chars.horizontal,
        }
        return mapping.get(names, self.chars.cross)

    def _draw_box(self, canvas: Canvas, origin: Bounds, box: TextBox) -> None:
        geometry = box.geometry
        x, y = self._cell(origin, geometry.x, geometry.y)
        w = max(int(round(geometry.width / self.cell_width)), 4)
        h = max(int(round(geometry.height / self.cell_height)), 3)
        inner_width = w - 2

        canvas.set(x, y, self.chars.top_left)
        for i in range(1, w - 1):
            canvas.set(x + i, y, self.chars.horizontal)
        canvas.set(x + w - 1, y, self.chars.top_right)

        for row in range(1, h - 1):
            canvas.set(x, y + row, self.chars.vertical)
            for i in range(inner_width):
                canvas.set(x + 1 + i, y + row, " ")
            canvas.set(x + w - 1, y + row, self.chars.vertical)

        if geometry.has_children:
            indicator = self.chars.collapsed if geometry.is_collapsed else self.chars.expanded
            canvas.set(x + w - 2, y + 1, indicator)

        label_room = inner_width - (2 if geometry.has_children else 0)
        label = fit_to_width(box.text, label_room)
        label_y = y + (h - 1) // 2
        start = x + 1 + max((label_room - display_width(label)) // 2, 0)
        canvas.write(start, label_y, label, style=KIND_STYLES.get(geometry.kind))

        canvas.set(x, y + h - 1, self.chars.bottom_left)
        for i in range(1, w - 1):
            canvas.set(x + i, y + h - 1, self.chars.horizontal)
        canvas.set(x + w - 1, y + h - 1, self.chars.bottom_right)
