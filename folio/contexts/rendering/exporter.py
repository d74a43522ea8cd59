"""
Exporter

Captures the rendered pages into a downloadable document. Export draws
from the same visual tree the preview shows (rendered with controls
hidden), one output page per page index in ascending order.

An export is all-or-nothing: any capture failure aborts the whole export
with a single ExportError and no partial bytes are returned.
"""

import io
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from reportlab.lib.colors import HexColor
from reportlab.pdfgen import canvas

from folio.contexts.rendering.exceptions import CaptureError, ExportError
from folio.contexts.rendering.geometry import PageGeometry
from folio.contexts.rendering.layout_engine import Block, layout, page_count
from folio.contexts.rendering.logger import (
    _log_debug,
    _log_info,
    log_export_result,
    log_export_start,
)
from folio.contexts.rendering.measure import ascent, pdf_safe_text
from folio.contexts.rendering.renderer import VisualNode, render
from folio.contexts.templating.resume_data_structure import ResumeData, ResumeTheme
from folio.contexts.templating.template_registry import TemplateDefinition, resolve_template
from folio.utils.pdf_processing import page_count as pdf_page_count
from folio.utils.text_processing import sanitize_filename_stem


PDF_MEDIA_TYPE = "application/pdf"
ROUND_CORNER_RADIUS = 4.0


@dataclass
class ExportArtifact:
    """
    A complete exported document.

    Attributes:
        filename: Sanitized download filename (e.g., "janedoeresume.pdf")
        content: Document bytes
        media_type: MIME type of content
        page_count: Number of pages in the document
    """

    filename: str
    content: bytes
    media_type: str = PDF_MEDIA_TYPE
    page_count: int = 0

    def save(self, directory: Path) -> Path:
        directory = Path(directory)
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / self.filename
        path.write_bytes(self.content)
        return path


def export_filename(title: Optional[str], extension: str = "pdf") -> str:
    """
    Download filename derived from a resume title.

    Characters outside [A-Za-z0-9_] are stripped (whitespace included) and
    the stem is lowercased. An empty result becomes "resume".
    """
    return f"{sanitize_filename_stem(title or '')}.{extension}"


# =============================================================================
# Capture surfaces
# =============================================================================


class CaptureSurface(ABC):
    """
    Destination that turns page nodes into document bytes.

    Lifecycle: begin() once, capture() once per page in ascending page
    order, then finish() for the bytes. abort() releases resources after a
    failure; nothing captured so far is kept.
    """

    media_type: str = PDF_MEDIA_TYPE
    extension: str = "pdf"

    @abstractmethod
    def begin(self, page: PageGeometry, page_total: int) -> None:
        pass

    @abstractmethod
    def capture(self, page_node: VisualNode, index: int) -> None:
        pass

    @abstractmethod
    def finish(self) -> bytes:
        pass

    def abort(self) -> None:
        pass


class PdfCaptureSurface(CaptureSurface):
    """
    Vector capture with reportlab.

    The visual tree uses a top-left origin; PDF uses bottom-left, so every
    y coordinate is flipped against the page height.
    """

    def __init__(self, title: str = "Resume", author: str = ""):
        self.title = title
        self.author = author
        self._buffer: Optional[io.BytesIO] = None
        self._canvas: Optional[canvas.Canvas] = None
        self._page_height = 0.0

    def begin(self, page: PageGeometry, page_total: int) -> None:
        self._buffer = io.BytesIO()
        self._page_height = page.height
        self._canvas = canvas.Canvas(self._buffer, pagesize=(page.width, page.height))
        self._canvas.setTitle(self.title)
        if self.author:
            self._canvas.setAuthor(self.author)

    def capture(self, page_node: VisualNode, index: int) -> None:
        if self._canvas is None:
            raise CaptureError("Capture surface was not started", index)
        for node in page_node.walk():
            self._draw(node)
        self._canvas.showPage()

    def finish(self) -> bytes:
        if self._canvas is None:
            raise CaptureError("Capture surface was not started")
        self._canvas.save()
        content = self._buffer.getvalue()
        self._canvas, self._buffer = None, None
        return content

    def abort(self) -> None:
        self._canvas, self._buffer = None, None

    # -- drawing -----------------------------------------------------------

    def _flip(self, y: float) -> float:
        return self._page_height - y

    def _draw(self, node: VisualNode) -> None:
        c = self._canvas
        style = node.style
        if node.kind == "text":
            self._draw_text(node)
        elif node.kind in ("fill", "rule"):
            c.setFillColor(HexColor(style["color"]))
            bottom = self._flip(node.y + node.height)
            if style.get("shape") == "round":
                radius = min(ROUND_CORNER_RADIUS, node.height / 2)
                c.roundRect(node.x, bottom, node.width, node.height, radius, stroke=0, fill=1)
            else:
                c.rect(node.x, bottom, node.width, node.height, stroke=0, fill=1)
        elif node.kind == "border":
            c.setStrokeColor(HexColor(style["color"]))
            c.setLineWidth(style.get("line_width", 0.75))
            c.roundRect(node.x, self._flip(node.y + node.height), node.width, node.height, ROUND_CORNER_RADIUS, stroke=1, fill=0)
        elif node.kind == "marker":
            c.setFillColor(HexColor(style["color"]))
            if style.get("shape") == "square":
                c.rect(node.x, self._flip(node.y + node.height), node.width, node.height, stroke=0, fill=1)
            else:
                c.circle(node.x + node.width / 2, self._flip(node.y + node.height / 2), node.width / 2, stroke=0, fill=1)

    def _draw_text(self, node: VisualNode) -> None:
        c = self._canvas
        style = node.style
        font, size = style["font"], style["size"]
        baseline = node.y + (node.height - size) / 2 + ascent(font, size)
        y = self._flip(baseline)
        text = pdf_safe_text(node.text)

        c.setFont(font, size)
        c.setFillColor(HexColor(style["color"]))
        align = style.get("align", "left")
        if align == "right":
            c.drawRightString(node.x + node.width, y, text)
        elif align == "center":
            c.drawCentredString(node.x + node.width / 2, y, text)
        else:
            c.drawString(node.x, y, text)


# =============================================================================
# Export
# =============================================================================


def export(
    blocks: List[Block],
    theme: ResumeTheme,
    page: PageGeometry = None,
    title: str = "resume",
    template: TemplateDefinition = None,
    surface: CaptureSurface = None,
) -> ExportArtifact:
    """
    Export laid-out blocks to a document.

    Args:
        blocks: Output of layout()
        theme: Theme to render with
        page: Geometry the blocks were laid out for (US Letter by default)
        title: Resume title, used for the filename and document metadata
        template: Template the blocks were laid out with (defaults to the theme's)
        surface: Capture surface (a fresh PdfCaptureSurface by default)

    Returns:
        ExportArtifact with one page per page index

    Raises:
        ExportError: If any page fails to capture or the produced document
            does not have the expected page count
    """
    page = page or PageGeometry.letter()
    tree = render(blocks, theme, page=page, template=template, interactive=False)
    surface = surface or PdfCaptureSurface(title=title or "Resume")
    filename = export_filename(title, surface.extension)

    try:
        surface.begin(page, tree.page_count)
        for index, page_node in enumerate(tree.pages):
            try:
                surface.capture(page_node, index)
            except Exception as e:
                raise ExportError("Page capture failed", page_index=index, cause=e) from e
            _log_debug(f"  Captured page {index + 1}/{tree.page_count}")
        content = surface.finish()
    except ExportError:
        surface.abort()
        raise
    except Exception as e:
        surface.abort()
        raise ExportError("Export failed", cause=e) from e

    if surface.media_type == PDF_MEDIA_TYPE:
        produced = pdf_page_count(content)
        if produced != tree.page_count:
            raise ExportError(f"Exported PDF has {produced} page(s), expected {tree.page_count}")

    return ExportArtifact(
        filename=filename,
        content=content,
        media_type=surface.media_type,
        page_count=tree.page_count,
    )


def export_resume(
    data: ResumeData,
    template_id: Optional[str] = None,
    title: Optional[str] = None,
    page: PageGeometry = None,
    output_dir: Optional[Path] = None,
    surface: CaptureSurface = None,
) -> ExportArtifact:
    """
    Resolve, lay out and export a resume in one call.

    Orchestration wrapper around layout() and export() that logs the start
    and outcome of the export and optionally writes the file.

    Args:
        data: Resume content; a snapshot is taken, the caller's copy is never touched
        template_id: Template to use (defaults to the theme's template, with fallback)
        title: Resume title (defaults to "<full name> Resume")
        page: Page geometry (US Letter by default)
        output_dir: If given, the artifact is saved there
        surface: Capture surface override

    Raises:
        ExportError: If export fails (nothing is written)
    """
    snapshot = data.snapshot()
    page = page or PageGeometry.letter()
    template = resolve_template(template_id or snapshot.theme.template)
    if title is None:
        title = f"{snapshot.personal_info.full_name} Resume".strip()

    blocks = layout(snapshot, template, page)
    filename = export_filename(title)
    log_export_start(title, filename, page_count(blocks))

    start_time = time.time()
    try:
        artifact = export(blocks, snapshot.theme, page=page, title=title, template=template, surface=surface)
    except ExportError as e:
        log_export_result(filename, error=e, elapsed_time=time.time() - start_time)
        raise
    log_export_result(artifact.filename, artifact=artifact, elapsed_time=time.time() - start_time)

    if output_dir is not None:
        path = artifact.save(output_dir)
        _log_info(f"Saved to: {path}")

    return artifact
