from rich import print
from rich.panel import Panel

from treecanvas import Diagram

DOCUMENT = """
<catalog>
  <book id="bk101">
    <author>Gambardella, Matthew</author>
    <title>XML Developer's Guide</title>
    <price>44.95</price>
  </book>
  <book id="bk102">
    <author>Ralls, Kim</author>
    <title>Midnight Rain</title>
  </book>
</catalog>
"""


def main() -> None:
    diagram = Diagram()
    diagram.load(DOCUMENT)
    print(Panel(diagram.surface.render_text(), title="catalog", border_style="cyan", expand=False))

    first_book = diagram.roots[0].children[0]
    diagram.toggle(first_book.id)
    print(Panel(diagram.surface.render_text(), title="first book collapsed", border_style="magenta", expand=False))


if __name__ == "__main__":
    main()
