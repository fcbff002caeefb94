"""Tests for the character-grid surface and the rich preview."""

import pytest
from rich.console import Console
from rich.text import Text

from treecanvas import (
    CanvasSurface,
    ConfigurationError,
    Diagram,
    DiagramConfig,
    LayoutOverflowError,
    NodeKind,
    RecordingSurface,
)
from treecanvas.diagram_components.canvas import Canvas, display_width, fit_to_width, shorten_label
from treecanvas.preview import diagram_panel, live_render, show

from .conftest import USER_DOCUMENT


def _drawn(diagram):
    diagram.frames.run_until_idle()
    return diagram.surface.render()


class TestLabels:
    def test_shorten_label(self):
        assert shorten_label("a" * 40, NodeKind.ELEMENT) == "a" * 10 + "..."
        assert shorten_label("... 500 more items", NodeKind.PLACEHOLDER) == "... 500 more items"
        assert shorten_label("x" * 40, NodeKind.PLACEHOLDER) == "x" * 30 + "..."
        assert shorten_label("two\n  lines", NodeKind.TEXT) == "two lines"

    def test_fit_to_width(self):
        assert fit_to_width("abcdefghij", 5) == "abcd…"
        assert fit_to_width("abc", 5) == "abc"
        assert fit_to_width("abc", 0) == ""

    def test_wide_characters(self):
        assert display_width("日本") == 4
        assert display_width(fit_to_width("日本語テキスト", 5)) <= 5


class TestCanvas:
    def test_write_and_render(self):
        canvas = Canvas(6, 2)
        canvas.write(1, 0, "hi", style="green")
        assert canvas.render() == " hi"
        assert canvas.get(1, 0) == "h"
        assert canvas.get(10, 10) == " "

    def test_out_of_bounds(self):
        with pytest.raises(LayoutOverflowError):
            Canvas(2, 2).set(2, 0, "x")

    def test_styles_reach_rich_text(self):
        canvas = Canvas(4, 1)
        canvas.write(0, 0, "ok", style="bold red")
        text = canvas.to_text()
        assert text.plain == "ok"
        assert str(text.spans[0].style) == "bold red"


class TestCanvasSurface:
    def test_user_document(self):
        diagram = Diagram()
        diagram.load(USER_DOCUMENT)
        drawn = _drawn(diagram)

        for label in ("user", "name", "age", "John", "30"):
            assert label in drawn
        assert "╭" in drawn and "┴" in drawn
        assert drawn.count("−") == 3

    def test_collapsed_indicator(self):
        diagram = Diagram()
        diagram.load(USER_DOCUMENT)
        diagram.toggle(diagram.roots[0].id)
        drawn = _drawn(diagram)

        assert "+" in drawn
        assert "name" not in drawn

    def test_ascii_style(self):
        diagram = Diagram(surface=CanvasSurface(box_style="ascii"))
        diagram.load(USER_DOCUMENT)
        drawn = _drawn(diagram)
        assert "╭" not in drawn
        assert "+" in drawn and "|" in drawn

    def test_invalid_surface_options(self):
        with pytest.raises(ConfigurationError):
            CanvasSurface(box_style="wavy")
        with pytest.raises(ConfigurationError):
            CanvasSurface(cell_width=0)

    def test_empty_surface(self):
        surface = CanvasSurface()
        assert surface.render() == ""
        assert surface.render_text().plain == ""

    def test_render_text_matches_plain_render(self):
        diagram = Diagram()
        diagram.load(USER_DOCUMENT)
        text = diagram.surface.render_text()
        assert isinstance(text, Text)
        assert text.plain == diagram.surface.render()


class TestPreview:
    def test_show(self):
        console = Console(record=True, width=120)
        diagram = Diagram()
        diagram.load(USER_DOCUMENT)
        show(diagram, console)

        output = console.export_text()
        assert "user" in output
        assert "3 nodes" in output

    def test_live_render_steps_frames(self):
        console = Console(record=True, width=200)
        diagram = Diagram(DiagramConfig(progressive_threshold=5, chunk_size=4))
        diagram.load("<root>" + "<item/>" * 10 + "</root>")

        frames = live_render(diagram, console)
        assert frames == 3
        assert diagram.status.complete

    def test_preview_needs_canvas_surface(self):
        diagram = Diagram(surface=RecordingSurface())
        with pytest.raises(ConfigurationError):
            diagram_panel(diagram)
