import sys

from rich.console import Console

from treecanvas import Diagram, DiagramError, show

console = Console()


def main() -> None:
    if len(sys.argv) < 2:
        console.print("[yellow]usage: python load_document.py <path-or-url>[/yellow]")
        return

    diagram = Diagram(container_size=(console.width * 10, console.height * 10))
    try:
        diagram.load_from(sys.argv[1])
    except DiagramError as exc:
        console.print(f"[bold red]Could not draw document:[/bold red] {exc}")
        return

    diagram.collapse_below_depth(2)
    show(diagram, console, title=sys.argv[1])
    console.print(f"levels: {diagram.max_depth()}  widest level: {diagram.max_level_width()}")


if __name__ == "__main__":
    main()
