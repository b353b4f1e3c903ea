#!/usr/bin/env python3
"""
PDF Workbench CLI - page-level PDF editing from the terminal.

Usage:
    python -m pdfworkbench <command> [options]

Commands:
    info           Show PDF metadata and page count
    merge          Merge multiple PDFs into one
    split          Extract a page range into a new PDF
    split-all      Split a PDF into single-page files
    reorder        Reorder or reverse pages
    delete         Delete pages
    rotate         Rotate pages
    watermark      Stamp a text watermark on every page
    number         Add page numbers
    images-to-pdf  Build a PDF from images
    to-images      Render pages to a ZIP of PNG/JPEG images
    to-text        Extract the text of every page

Examples:
    pdfworkbench merge a.pdf b.pdf c.pdf -o out/
    pdfworkbench split report.pdf --pages 1-3,7
    pdfworkbench rotate scan.pdf --angle 90 --pages 2,4
    pdfworkbench watermark contract.pdf --text DRAFT --opacity 0.2
    pdfworkbench number thesis.pdf --position top --alignment right
    pdfworkbench images-to-pdf *.jpg --layout standard-portrait
    pdfworkbench to-images slides.pdf --format jpeg
"""

import argparse
import logging
import sys
from pathlib import Path

from pdfworkbench.utils.i18n import _

logger = logging.getLogger("pdfworkbench.cli")


# ---------------------------------------------------------------------------
# Argument helpers
# ---------------------------------------------------------------------------


def _parse_order(text: str) -> list[int]:
    """Parse a 1-based page order such as "3,1,2" into 0-based indices.

    Raises:
        InvalidInput: If an entry is not an integer.
    """
    from pdfworkbench.utils.exceptions import InvalidInput

    order: list[int] = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            order.append(int(part) - 1)
        except ValueError:
            raise InvalidInput(
                _("use a comma-separated list of page numbers like '3,1,2'"),
                field="order",
                value=text,
            ) from None
    return order


class _ProgressPrinter:
    """Print page progress on one terminal line."""

    def __init__(self, label: str) -> None:
        from pdfworkbench.utils.progress_state import ProgressState

        self.label = label
        self.state = ProgressState()

    def __call__(self, event) -> None:
        if not self.state.update(event):
            return
        end = "\n" if event.current >= event.total else ""
        print(f"\r{self.label}: {event} ({self.state.get_percentage()}%)", end=end, file=sys.stderr)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def _add_input(p: argparse.ArgumentParser, help_text: str | None = None) -> None:
    p.add_argument("input", type=Path, help=help_text or _("Input PDF file"))


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with subcommands."""
    p = argparse.ArgumentParser(
        prog="pdfworkbench",
        description="PDF Workbench - local page-level editing for PDF documents.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    p.add_argument("-v", "--verbose", action="store_true", help=_("Verbose logging (DEBUG)"))
    p.add_argument(
        "-o",
        "--output-dir",
        type=Path,
        default=None,
        help=_("Directory for output files (default: settings or current directory)"),
    )
    p.add_argument("--config", type=str, default=None, help=_("Path to a settings JSON file"))
    p.add_argument(
        "--renderer",
        type=str,
        default=None,
        help=_("Rendering backend: pdfium or pdftoppm (default: settings)"),
    )

    sub = p.add_subparsers(dest="command", help=_("Available commands"))

    # --- info ---
    info_p = sub.add_parser("info", help=_("Show PDF metadata and page count"))
    _add_input(info_p)

    # --- merge ---
    merge_p = sub.add_parser("merge", help=_("Merge multiple PDFs into one"))
    merge_p.add_argument("inputs", nargs="+", type=Path, help=_("Input PDF files (in order)"))

    # --- split ---
    split_p = sub.add_parser("split", help=_("Extract a page range into a new PDF"))
    _add_input(split_p)
    split_p.add_argument(
        "--pages",
        type=str,
        required=True,
        help=_("Pages to extract (e.g. '1-3,7' or '10-12')"),
    )

    # --- split-all ---
    split_all_p = sub.add_parser("split-all", help=_("Split a PDF into single-page files"))
    _add_input(split_all_p)

    # --- reorder ---
    reorder_p = sub.add_parser("reorder", help=_("Reorder or reverse pages"))
    _add_input(reorder_p)
    reorder_grp = reorder_p.add_mutually_exclusive_group(required=True)
    reorder_grp.add_argument(
        "--order",
        type=str,
        metavar="ORDER",
        help=_("New page order, every page exactly once (e.g. '3,1,2')"),
    )
    reorder_grp.add_argument("--reverse", action="store_true", help=_("Reverse the page order"))

    # --- delete ---
    delete_p = sub.add_parser("delete", help=_("Remove pages from a PDF"))
    _add_input(delete_p)
    delete_p.add_argument(
        "--pages",
        type=str,
        required=True,
        help=_("Pages to delete (e.g. '3,5,7' or '2-4')"),
    )

    # --- rotate ---
    rotate_p = sub.add_parser("rotate", help=_("Rotate pages in a PDF"))
    _add_input(rotate_p)
    rotate_p.add_argument(
        "--angle",
        type=int,
        required=True,
        help=_("Clockwise rotation in degrees, a multiple of 90 (e.g. 90, 180, -90)"),
    )
    rotate_p.add_argument(
        "--pages",
        type=str,
        default=None,
        help=_("Pages to rotate (e.g. '1,3,5' or '1-5'). Default: all."),
    )

    # --- watermark ---
    watermark_p = sub.add_parser("watermark", help=_("Stamp a text watermark on every page"))
    _add_input(watermark_p)
    watermark_p.add_argument("--text", type=str, default=None, help=_("Watermark text"))
    watermark_p.add_argument("--font-size", type=float, default=None, help=_("Font size in points"))
    watermark_p.add_argument("--opacity", type=float, default=None, help=_("Opacity from 0 to 1"))
    watermark_p.add_argument("--rotation", type=float, default=None, help=_("Rotation in degrees"))
    watermark_p.add_argument("--color", type=str, default=None, help=_("Color as #RRGGBB"))

    # --- number ---
    number_p = sub.add_parser("number", help=_("Add page numbers"))
    _add_input(number_p)
    number_p.add_argument("--position", choices=["top", "bottom"], default=None)
    number_p.add_argument("--alignment", choices=["left", "center", "right"], default=None)
    number_p.add_argument("--font-size", type=float, default=None, help=_("Font size in points"))
    number_p.add_argument("--color", type=str, default=None, help=_("Color as #RRGGBB"))

    # --- images-to-pdf ---
    images_p = sub.add_parser("images-to-pdf", help=_("Build a PDF from images"))
    images_p.add_argument("inputs", nargs="+", type=Path, help=_("Image files (in order)"))
    images_p.add_argument(
        "--layout",
        choices=["fit-to-image", "standard-portrait", "standard-landscape"],
        default=None,
        help=_("Page size policy (default: settings)"),
    )

    # --- to-images ---
    to_images_p = sub.add_parser("to-images", help=_("Render pages to a ZIP of images"))
    _add_input(to_images_p, _("Input PDF or image file"))
    to_images_p.add_argument("--format", choices=["png", "jpeg"], default=None)
    to_images_p.add_argument("--scale", type=float, default=None, help=_("Render scale (2.0 = 144 DPI)"))

    # --- to-text ---
    to_text_p = sub.add_parser("to-text", help=_("Extract the text of every page"))
    _add_input(to_text_p, _("Input PDF or image file"))

    return p


# ---------------------------------------------------------------------------
# Command handlers
# ---------------------------------------------------------------------------


def _pick(value, config, key: str):
    """Explicit flag first, settings file second."""
    return value if value is not None else config.get(key)


def _deliver(ctx, result) -> None:
    path = ctx.sink.deliver(result.data, result.suggested_name)
    print(path)


def _cmd_info(args, ctx) -> int:
    """Handle the 'info' command."""
    from pdfworkbench.services.document import describe
    from pdfworkbench.utils.format_utils import format_file_size

    doc = ctx.workspace.add_path(args.input)
    info = ctx.workspace.run(doc.id, describe)
    print(f"File:       {args.input}")
    print(f"Kind:       {info.kind.value}")
    print(f"Pages:      {info.page_count}")
    print(f"Size:       {format_file_size(info.size_bytes)} ({info.size_bytes:,} bytes)")
    if info.pdf_version:
        print(f"Version:    PDF {info.pdf_version}")
        print(f"Encrypted:  {'Yes' if info.encrypted else 'No'}")
    if info.title:
        print(f"Title:      {info.title}")
    if info.author:
        print(f"Author:     {info.author}")
    if info.creator:
        print(f"Creator:    {info.creator}")
    return 0


def _cmd_merge(args, ctx) -> int:
    """Handle the 'merge' command."""
    from pdfworkbench.services.pdf_operations import merge_documents

    ids = [ctx.workspace.add_path(p).id for p in args.inputs]
    result = ctx.workspace.run_many(ids, merge_documents)
    print(_("Merged {count} files → {pages} pages").format(count=len(ids), pages=result.pages_affected))
    _deliver(ctx, result)
    return 0


def _cmd_split(args, ctx) -> int:
    """Handle the 'split' command."""
    from pdfworkbench.services.pdf_operations import split_document

    doc = ctx.workspace.add_path(args.input)
    result = ctx.workspace.run(doc.id, split_document, args.pages)
    _deliver(ctx, result)
    return 0


def _cmd_split_all(args, ctx) -> int:
    """Handle the 'split-all' command."""
    from pdfworkbench.services.pdf_operations import split_to_singles

    doc = ctx.workspace.add_path(args.input)
    for result in ctx.workspace.run(doc.id, split_to_singles):
        _deliver(ctx, result)
    return 0


def _cmd_reorder(args, ctx) -> int:
    """Handle the 'reorder' command."""
    from pdfworkbench.services.pdf_operations import reorder_pages

    doc = ctx.workspace.add_path(args.input)
    if args.reverse:
        order = list(reversed(range(doc.page_count)))
    else:
        order = _parse_order(args.order)
    result = ctx.workspace.run(doc.id, reorder_pages, order)
    _deliver(ctx, result)
    return 0


def _cmd_delete(args, ctx) -> int:
    """Handle the 'delete' command."""
    from pdfworkbench.services.page_ranges import parse_page_range, resolve_page_indices
    from pdfworkbench.services.pdf_operations import delete_pages

    doc = ctx.workspace.add_path(args.input)
    indices = resolve_page_indices(parse_page_range(args.pages), doc.page_count)
    result = ctx.workspace.run(doc.id, delete_pages, indices)
    print(_("Deleted {count} pages").format(count=result.pages_affected))
    _deliver(ctx, result)
    return 0


def _cmd_rotate(args, ctx) -> int:
    """Handle the 'rotate' command."""
    from pdfworkbench.services.page_ranges import parse_page_range, resolve_page_indices
    from pdfworkbench.services.pdf_operations import rotate_pages

    doc = ctx.workspace.add_path(args.input)
    targets = None
    if args.pages:
        targets = resolve_page_indices(parse_page_range(args.pages), doc.page_count)
    result = ctx.workspace.run(doc.id, rotate_pages, args.angle, targets)
    print(_("Rotated {count} pages").format(count=result.pages_affected))
    _deliver(ctx, result)
    return 0


def _cmd_watermark(args, ctx) -> int:
    """Handle the 'watermark' command."""
    from pdfworkbench.services.page_stamps import WatermarkStyle, apply_watermark

    style = WatermarkStyle(
        font_size=_pick(args.font_size, ctx.config, "watermark.font_size"),
        opacity=_pick(args.opacity, ctx.config, "watermark.opacity"),
        rotation=_pick(args.rotation, ctx.config, "watermark.rotation"),
        color=_pick(args.color, ctx.config, "watermark.color"),
    )
    text = _pick(args.text, ctx.config, "watermark.text")
    doc = ctx.workspace.add_path(args.input)
    result = ctx.workspace.run(doc.id, apply_watermark, text, style)
    _deliver(ctx, result)
    return 0


def _cmd_number(args, ctx) -> int:
    """Handle the 'number' command."""
    from pdfworkbench.services.page_stamps import PaginationStyle, add_page_numbers

    style = PaginationStyle(
        position=_pick(args.position, ctx.config, "page_numbers.position"),
        alignment=_pick(args.alignment, ctx.config, "page_numbers.alignment"),
        font_size=_pick(args.font_size, ctx.config, "page_numbers.font_size"),
        color=_pick(args.color, ctx.config, "page_numbers.color"),
    )
    doc = ctx.workspace.add_path(args.input)
    result = ctx.workspace.run(doc.id, add_page_numbers, style)
    _deliver(ctx, result)
    return 0


def _cmd_images_to_pdf(args, ctx) -> int:
    """Handle the 'images-to-pdf' command."""
    from pdfworkbench.services.image_conversion import images_to_document

    items = []
    for path in args.inputs:
        if not path.is_file():
            print(f"Error: {path} not found", file=sys.stderr)
            return 1
        items.append((path.name, path.read_bytes()))

    layout = _pick(args.layout, ctx.config, "images.layout")
    result = images_to_document(items, layout)
    for failure in result.failures:
        print(f"Warning: {failure}", file=sys.stderr)
    _deliver(ctx, result)
    return 0


def _cmd_to_images(args, ctx) -> int:
    """Handle the 'to-images' command."""
    from pdfworkbench.services.render_operations import rasterize

    doc = ctx.workspace.add_path(args.input)
    result = ctx.workspace.run(
        doc.id,
        rasterize,
        _pick(args.format, ctx.config, "rendering.image_format"),
        _pick(args.scale, ctx.config, "rendering.export_scale"),
        ctx.renderer,
        _ProgressPrinter(_("Rendering")),
    )
    _deliver(ctx, result)
    return 0


def _cmd_to_text(args, ctx) -> int:
    """Handle the 'to-text' command."""
    from pdfworkbench.services.render_operations import extract_text

    doc = ctx.workspace.add_path(args.input)
    result = ctx.workspace.run(doc.id, extract_text, ctx.renderer, _ProgressPrinter(_("Extracting")))
    _deliver(ctx, result)
    return 0


class _Context:
    """Objects shared by the command handlers of one invocation."""

    def __init__(self, args) -> None:
        from pdfworkbench.editor.workspace import Workspace
        from pdfworkbench.services.delivery import FileDelivery
        from pdfworkbench.services.page_renderer import get_renderer
        from pdfworkbench.utils.config_manager import ConfigManager

        self.config = ConfigManager(args.config)
        self.renderer = get_renderer(_pick(args.renderer, self.config, "rendering.renderer"))
        self.workspace = Workspace(renderer=self.renderer)
        output_dir = args.output_dir or self.config.get("output.destination_folder") or "."
        self.sink = FileDelivery(output_dir)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> int:
    """CLI entry point."""
    from pdfworkbench.utils.exceptions import PdfWorkbenchError
    from pdfworkbench.utils.i18n import setup_i18n
    from pdfworkbench.utils.logger import set_verbose

    setup_i18n()

    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    set_verbose(args.verbose)

    handlers = {
        "info": _cmd_info,
        "merge": _cmd_merge,
        "split": _cmd_split,
        "split-all": _cmd_split_all,
        "reorder": _cmd_reorder,
        "delete": _cmd_delete,
        "rotate": _cmd_rotate,
        "watermark": _cmd_watermark,
        "number": _cmd_number,
        "images-to-pdf": _cmd_images_to_pdf,
        "to-images": _cmd_to_images,
        "to-text": _cmd_to_text,
    }

    handler = handlers.get(args.command)
    if handler is None:
        parser.print_help()
        return 2

    try:
        ctx = _Context(args)
        return handler(args, ctx)
    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except PdfWorkbenchError as e:
        logger.debug("Command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
