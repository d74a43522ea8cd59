"""
Rendering Context

Responsibilities:
- Measures text with PDF font metrics
- Paginates resume content into positioned blocks (layout engine)
- Renders blocks into a themed visual tree
- Hosts the live HTML preview
- Exports the visual tree to PDF
- Diagnoses layouts and exported PDFs

Owns: Pagination, visual tree, preview and PDF output
Never: Modifies resume content
"""

from folio.contexts.rendering.exceptions import CaptureError, ExportError
from folio.contexts.rendering.exporter import (
    CaptureSurface,
    ExportArtifact,
    PdfCaptureSurface,
    export,
    export_filename,
    export_resume,
)
from folio.contexts.rendering.geometry import PageGeometry
from folio.contexts.rendering.layout_diagnostics import analyze_layout
from folio.contexts.rendering.layout_engine import (
    Block,
    blocks_by_page,
    blocks_to_json,
    layout,
    page_count,
)
from folio.contexts.rendering.preview import PreviewSurface, render_html, share_url
from folio.contexts.rendering.renderer import VisualNode, VisualTree, render

__all__ = [
    # Layout
    "PageGeometry",
    "Block",
    "layout",
    "page_count",
    "blocks_by_page",
    "blocks_to_json",
    "analyze_layout",
    # Rendering and preview
    "VisualNode",
    "VisualTree",
    "render",
    "render_html",
    "PreviewSurface",
    "share_url",
    # Export
    "CaptureSurface",
    "PdfCaptureSurface",
    "ExportArtifact",
    "export",
    "export_filename",
    "export_resume",
    "ExportError",
    "CaptureError",
]
