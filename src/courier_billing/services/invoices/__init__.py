"""Invoice view-model and document rendering exports."""

from .renderer import PAGE_FORMATS, PageMargins, normalize_page_format, render_invoice
from .view import build_invoice_view, invoice_number, project_invoice

__all__ = [
    "PAGE_FORMATS",
    "PageMargins",
    "build_invoice_view",
    "invoice_number",
    "normalize_page_format",
    "project_invoice",
    "render_invoice",
]
