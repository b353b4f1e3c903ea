"""
PDF Workbench - page-level editing for PDF documents

This package provides a page-transformation engine (merge, split, reorder,
delete, rotate, watermark, paginate, image conversion, rasterizing and
text extraction), an interactive reorder/delete session model and a
command-line interface.
"""

__version__ = "1.0.0"
__license__ = "GPL-3.0"


def main(argv: list[str] | None = None) -> int:
    """Run the command-line interface."""
    from pdfworkbench.cli import main as cli_main

    return cli_main(argv)
