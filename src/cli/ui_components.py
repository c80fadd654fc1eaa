"""Componentes de UI para CLI (Rich).

Por qué componentes separados:
- Mantiene la lógica de comandos separada de los detalles visuales.
- La tabla del registro se reutiliza en el listado, la búsqueda por tag y el
  caso "sin coincidencias".
"""

from __future__ import annotations

from typing import Sequence

import typer
from rich.console import Console
from rich.table import Table
from rich.text import Text

from core.domain.models import LinkRecord
from core.registry import all_tags, filter_by_tag


def build_links_table(links: Sequence[LinkRecord], *, title: str | None = None) -> Table:
    """Tabla numerada del registro; los números son argumentos válidos de la CLI."""

    table = Table(title=title, box=None, pad_edge=False, show_header=False)
    table.add_column("#", style="dim", justify="right", no_wrap=True)
    table.add_column("Name", style="bright_green", no_wrap=True)
    table.add_column("Description", style="white")
    table.add_column("To", style="cyan", no_wrap=True)
    table.add_column("By", style="magenta", no_wrap=True)
    table.add_column("Tags", style="yellow")

    for i, link in enumerate(links, start=1):
        table.add_row(
            f"{i}.",
            link.name,
            Text(link.description),
            f"to: {link.to}" if link.to else "",
            f"by @{link.user}",
            Text(f"[{','.join(link.tags)}]") if link.tags else "",
        )
    return table


def print_links(
    console: Console,
    tool: str,
    links: Sequence[LinkRecord],
    *,
    tag: str | None = None,
) -> None:
    tags = all_tags(links)
    if tag:
        links = filter_by_tag(links, tag)
        plural = "s" if "," in tag else ""
        console.print(Text(f"\nResults matching tag{plural} [{tag}]:"))

    console.print()
    console.print(build_links_table(links))
    console.print()

    console.print(Text(f"   Usage: {tool} <name> <name> ..."))
    console.print()
    console.print(Text(f"  Search: {tool} [tag] Available tags: {', '.join(tags)}"))
    console.print()
    console.print(Text(f"Advanced: {tool} --help"))


def confirm(console: Console, message: str) -> bool:
    """Imprime los cambios pendientes y pregunta; Enter equivale a sí."""

    console.print(Text(message))
    return typer.confirm("Proceed?", default=True)
