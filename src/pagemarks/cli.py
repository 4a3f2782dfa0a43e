"""Command-line interface for pagemarks.

Highlights text in local HTML files, restores stored highlights into a
page, and lists or deletes stored annotations.  The store is whichever
backend ``STORE__BACKEND`` selects; use ``STORE__BACKEND=json`` for
annotations that outlive a single command.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from pagemarks.errors import PagemarksError
from pagemarks.render.styles import ANNOTATION_COLORS
from pagemarks.tree.nodes import ElementNode

if TYPE_CHECKING:
    from pagemarks.render.styles import AnnotationColor
    from pagemarks.restore import RestorationReport
    from pagemarks.store.models import Annotation
    from pagemarks.store.protocol import AnnotationStoreProtocol
    from pagemarks.tree.nodes import Document

console = Console()
err_console = Console(stderr=True)


def _build_parser() -> argparse.ArgumentParser:
    """Build argparse parser for pagemarks subcommands."""
    parser = argparse.ArgumentParser(
        prog="pagemarks",
        description="Persistent highlights for HTML pages.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log debug output to console"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # highlight
    hl_p = sub.add_parser("highlight", help="Highlight a text range and store it")
    hl_p.add_argument("file", type=Path, help="HTML file")
    hl_p.add_argument("--url", required=True, help="Page URL the file was saved from")
    hl_p.add_argument(
        "--start", type=int, required=True, help="Start offset in the page text"
    )
    hl_p.add_argument(
        "--end", type=int, required=True, help="End offset in the page text"
    )
    hl_p.add_argument(
        "--color",
        choices=sorted(ANNOTATION_COLORS),
        default="yellow",
        help="Highlight colour (default: yellow)",
    )
    hl_p.add_argument("--note", default=None, help="Note attached to the highlight")

    # restore
    restore_p = sub.add_parser(
        "restore", help="Re-apply stored highlights to an HTML file"
    )
    restore_p.add_argument("file", type=Path, help="HTML file")
    restore_p.add_argument("--url", required=True, help="Page URL")
    restore_p.add_argument(
        "-o",
        "--output",
        type=Path,
        default=None,
        help="Write highlighted HTML here (default: stdout)",
    )

    # list
    list_p = sub.add_parser("list", help="List stored annotations for a page")
    list_p.add_argument("--url", required=True, help="Page URL")

    # delete
    delete_p = sub.add_parser("delete", help="Delete a stored annotation")
    delete_p.add_argument("annotation_id", help="Annotation id (ann_...)")

    return parser


def _page_title(document: Document) -> str:
    for node in document.iter_descendants():
        if isinstance(node, ElementNode) and node.tag == "title":
            return node.text_content.strip()
    return ""


def _format_timestamp(ms: int) -> str:
    return datetime.fromtimestamp(ms / 1000, tz=UTC).strftime("%Y-%m-%d %H:%M")


def _truncate(text: str, width: int = 40) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


async def _cmd_highlight(
    path: Path,
    *,
    url: str,
    start: int,
    end: int,
    color: AnnotationColor = "yellow",
    note: str | None = None,
    store: AnnotationStoreProtocol,
    console: Console | None = None,
) -> Annotation | None:
    """Highlight ``[start, end)`` of the page text and store the annotation."""
    from pagemarks.manager import AnnotationManager
    from pagemarks.tree.text_map import TextMap

    con = console or globals()["console"]
    manager = AnnotationManager.for_html(
        path.read_text(encoding="utf-8"), store, page_url=url
    )
    manager.page_title = _page_title(manager.document)

    selection = TextMap(manager.document.search_root).span(start, end)
    if selection is None:
        con.print(f"[red]Error:[/] range {start}..{end} is outside the page text")
        return None

    annotation = await manager.create_annotation(selection, color, note)
    if annotation is None:
        con.print("[red]Error:[/] selection cannot be anchored, choose another range")
        return None

    con.print(
        f"[green]Created[/] {annotation.id}: "
        f"{escape(repr(_truncate(annotation.highlight_text)))}"
    )
    return annotation


def _report_table(report: RestorationReport) -> Table:
    table = Table(title=f"Restoration: {report.page_id}")
    table.add_column("Annotation", style="cyan")
    table.add_column("Outcome")

    for annotation_id, tier in report.restored.items():
        table.add_row(annotation_id, f"[green]restored[/] ({tier})")
    for annotation_id in report.skipped:
        table.add_row(annotation_id, "already rendered")
    for annotation_id in report.orphaned:
        table.add_row(annotation_id, "[yellow]orphaned[/]")
    for annotation_id, failures in report.render_failed.items():
        reasons = "; ".join(f.reason for f in failures)
        table.add_row(annotation_id, f"[red]render failed[/]: {reasons}")
    return table


async def _cmd_restore(
    path: Path,
    *,
    url: str,
    output: Path | None = None,
    store: AnnotationStoreProtocol,
    console: Console | None = None,
) -> RestorationReport:
    """Restore stored highlights into the HTML file and write the result."""
    from pagemarks.manager import AnnotationManager
    from pagemarks.tree.html_tree import to_html

    con = console or globals()["console"]
    manager = AnnotationManager.for_html(
        path.read_text(encoding="utf-8"), store, page_url=url
    )
    report = await manager.restore_highlights()
    rendered = to_html(manager.document)

    if output is None:
        sys.stdout.write(rendered)
    else:
        output.write_text(rendered, encoding="utf-8")
        con.print(f"Wrote {output}")

    if report.total:
        con.print(_report_table(report))
    else:
        con.print("[yellow]No annotations stored for this page.[/]")
    return report


async def _cmd_list(
    url: str,
    *,
    store: AnnotationStoreProtocol,
    console: Console | None = None,
) -> None:
    """List stored annotations for one page."""
    con = console or globals()["console"]
    annotations = await store.get_annotations_for_url(url)

    if not annotations:
        con.print("[yellow]No annotations found.[/]")
        return

    table = Table(title="Annotations")
    table.add_column("ID", style="cyan")
    table.add_column("Text")
    table.add_column("Colour")
    table.add_column("Note")
    table.add_column("Created")

    for a in sorted(annotations, key=lambda a: a.created_at):
        table.add_row(
            a.id,
            escape(_truncate(a.highlight_text)),
            a.color,
            escape(_truncate(a.note or "")),
            _format_timestamp(a.created_at),
        )

    con.print(table)


async def _cmd_delete(
    annotation_id: str,
    *,
    store: AnnotationStoreProtocol,
    console: Console | None = None,
) -> bool:
    """Delete one stored annotation."""
    con = console or globals()["console"]
    deleted = await store.delete_annotation(annotation_id)
    if deleted:
        con.print(f"[green]Deleted[/] {annotation_id}")
    else:
        con.print(f"[yellow]No annotation with id '{annotation_id}'[/]")
    return deleted


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``pagemarks`` command.

    Usage:
        pagemarks highlight page.html --url https://example.com/a --start 0 --end 5
        pagemarks restore page.html --url https://example.com/a -o out.html
        pagemarks list --url https://example.com/a
        pagemarks delete ann_1700000000000_abc1234
    """
    from pagemarks import setup_logging
    from pagemarks.config import get_settings
    from pagemarks.store.factory import get_annotation_store

    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    setup_logging(get_settings().app.log_dir, verbose=args.verbose)
    store = get_annotation_store()

    async def _run() -> bool:
        match args.command:
            case "highlight":
                created = await _cmd_highlight(
                    args.file,
                    url=args.url,
                    start=args.start,
                    end=args.end,
                    color=args.color,
                    note=args.note,
                    store=store,
                )
                return created is not None
            case "restore":
                # Keep stdout clean for the HTML when no output file is given
                await _cmd_restore(
                    args.file,
                    url=args.url,
                    output=args.output,
                    store=store,
                    console=err_console if args.output is None else None,
                )
                return True
            case "list":
                await _cmd_list(args.url, store=store)
                return True
            case "delete":
                return await _cmd_delete(args.annotation_id, store=store)
        return False

    try:
        ok = asyncio.run(_run())
    except (PagemarksError, OSError) as exc:
        err_console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)

    if not ok:
        sys.exit(1)
