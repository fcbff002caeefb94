import sys

from rich.console import Console

from treecanvas import Diagram, DiagramConfig, live_render

console = Console()


def make_document(branches: int, leaves: int) -> str:
    parts = ["<inventory>"]
    for branch in range(branches):
        parts.append(f'<warehouse code="w{branch}">')
        parts.extend(f"<sku>{branch}-{leaf}</sku>" for leaf in range(leaves))
        parts.append("</warehouse>")
    parts.append("</inventory>")
    return "".join(parts)


def main() -> None:
    branches = int(sys.argv[1]) if len(sys.argv) > 1 else 40
    config = DiagramConfig(progressive_threshold=200, chunk_size=50, visible_node_limit=600, auto_collapse_depth=1)
    diagram = Diagram(config)
    diagram.load(make_document(branches, 12))

    frames = live_render(diagram, console, title="inventory", delay=0.05)
    console.print(f"[bold green]{diagram.status.message}[/bold green] after {frames} frames")


if __name__ == "__main__":
    main()
