"""`add-in` command line.

Thin layer: parses arguments into `AppSettings`, wires the GitHub client and
Rich output into the pipeline hooks, and maps errors to exit codes.
"""

from __future__ import annotations

import logging
import sys
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.text import Text

from adapters.gist_client import GistClient
from cli.ui_components import confirm, print_links
from core.config import AppSettings
from core.domain.errors import AddInError, UserCancelledError
from core.domain.models import LinkRecord
from core.registry import parse_registry
from core.services.apply_pipeline import apply_batch
from core.services.batch import PipelineHooks
from core.services.delete_pipeline import delete_batch

TOOL = "add-in"
VERSION = "1.0.0"

app = typer.Typer(add_completion=False, help="Apply gist bundles to new or existing projects.")

_console = Console()
_err_console = Console(stderr=True)


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=_err_console, show_time=False, show_path=False)],
        force=True,
    )


def parse_replace(values: List[str]) -> tuple[tuple[str, str], ...]:
    pairs: list[tuple[str, str]] = []
    for value in values:
        if "=" not in value:
            raise typer.BadParameter("Invalid --replace usage, e.g: --replace term=with")
        term, replacement = value.split("=", 1)
        pairs.append((term, replacement))
    return tuple(pairs)


def split_aliases(aliases: List[str]) -> list[str]:
    """A single `a+b+c` argument means three aliases."""

    if len(aliases) == 1 and "+" in aliases[0]:
        return [a for a in aliases[0].split("+") if a]
    return list(aliases)


def tag_query(first: str) -> str | None:
    if first.startswith("#"):
        return first[1:]
    if first.startswith("[") and first.endswith("]"):
        return first[1:-1]
    return None


def _version_callback(value: bool) -> None:
    if value:
        _console.print(f"Version: {VERSION}")
        raise typer.Exit()


@app.command()
def main(
    aliases: Optional[List[str]] = typer.Argument(None, help="Registry names, indexes, gist ids or URLs."),
    delete: bool = typer.Option(False, "--delete", help="Delete files previously written by the bundles."),
    name: Optional[str] = typer.Option(None, "--name", help="Project name replacing MyApp (default: cwd name)."),
    replace: List[str] = typer.Option([], "--replace", help="Extra replacement, term=with (repeatable)."),
    out: Optional[str] = typer.Option(None, "--out", help="Write into this directory instead."),
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Registry gist id."),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
    force: bool = typer.Option(False, "--force", "-f", "--yes", "-y", help="Do not print or prompt."),
    preserve: bool = typer.Option(False, "--preserve", "-p", help="Never overwrite existing files."),
    ignore_ssl_errors: bool = typer.Option(False, "--ignore-ssl-errors"),
    version: bool = typer.Option(False, "--version", callback=_version_callback, is_eager=True),
) -> None:
    """View, apply or delete gist bundles.

    Without arguments the registry is listed. `#tag` or `[tag1,tag2]` lists
    the bundles carrying those tags.
    """

    configure_logging(verbose)

    overrides: dict[str, object] = {
        "token_replacements": parse_replace(replace),
    }
    if verbose:
        overrides["verbose"] = True
    if force:
        overrides["silent"] = True
        overrides["force_approval"] = True
    if preserve:
        overrides["preserve_existing"] = True
    if ignore_ssl_errors:
        overrides["ignore_tls_errors"] = True
    if source:
        overrides["registry_id"] = source
    if out:
        overrides["output_dir"] = out if out.endswith("/") else out + "/"
    if name is not None:
        if not name.strip():
            raise typer.BadParameter("Missing --name value")
        overrides["project_name"] = name

    settings = AppSettings(**overrides)
    tokens = split_aliases(aliases or [])

    hooks = PipelineHooks(
        confirm=lambda message: confirm(_console, message),
        notify=lambda message: _console.print(Text(message)),
        unmatched=_report_unmatched,
    )

    try:
        with GistClient(settings) as fetcher:
            if not tokens or tag_query(tokens[0]) is not None:
                links = parse_registry(fetcher.fetch_registry(settings.registry_id))
                print_links(_console, TOOL, links, tag=tag_query(tokens[0]) if tokens else None)
                return

            if delete:
                delete_batch(tokens, settings=settings, fetcher=fetcher, hooks=hooks)
            else:
                apply_batch(tokens, settings=settings, fetcher=fetcher, hooks=hooks)
    except UserCancelledError as exc:
        _console.print(Text(str(exc), style="yellow"))
        raise typer.Exit(code=0)
    except AddInError as exc:
        _err_console.print(Text(str(exc), style="red"))
        if verbose:
            _err_console.print_exception()
        raise typer.Exit(code=1)


def _report_unmatched(alias: str, links: list[LinkRecord]) -> None:
    _console.print(Text(f"No match found for '{alias}', available gists:"))
    print_links(_console, TOOL, links)


def run() -> None:
    # Windows terminals default to cp1252.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app(prog_name=TOOL)


if __name__ == "__main__":
    run()
