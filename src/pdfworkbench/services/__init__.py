"""
PDF Workbench - Services Package

Document model, structural transformations, streaming render operations
and output delivery.
"""

from pdfworkbench.services.delivery import DeliverySink, FileDelivery
from pdfworkbench.services.document import (
    DocumentInfo,
    DocumentKind,
    SourceDocument,
    describe,
    ingest,
    ingest_path,
    load_image,
    load_pdf,
)
from pdfworkbench.services.image_conversion import ImageLayout, images_to_document
from pdfworkbench.services.page_ranges import parse_page_range, resolve_page_indices
from pdfworkbench.services.page_stamps import (
    PageAlignment,
    PagePosition,
    PaginationStyle,
    WatermarkStyle,
    add_page_numbers,
    apply_watermark,
)
from pdfworkbench.services.pdf_operations import (
    TransformationResult,
    delete_pages,
    merge_documents,
    reorder_pages,
    rotate_pages,
    split_document,
    split_to_singles,
)
from pdfworkbench.services.render_operations import (
    RasterFormat,
    extract_text,
    generate_thumbnails,
    iter_thumbnails,
    rasterize,
)

__all__ = [
    "DeliverySink",
    "FileDelivery",
    "DocumentInfo",
    "DocumentKind",
    "SourceDocument",
    "describe",
    "ingest",
    "ingest_path",
    "load_image",
    "load_pdf",
    "ImageLayout",
    "images_to_document",
    "parse_page_range",
    "resolve_page_indices",
    "PageAlignment",
    "PagePosition",
    "PaginationStyle",
    "WatermarkStyle",
    "add_page_numbers",
    "apply_watermark",
    "TransformationResult",
    "delete_pages",
    "merge_documents",
    "reorder_pages",
    "rotate_pages",
    "split_document",
    "split_to_singles",
    "RasterFormat",
    "extract_text",
    "generate_thumbnails",
    "iter_thumbnails",
    "rasterize",
]
