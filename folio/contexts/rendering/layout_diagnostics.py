"""
Layout diagnostics for paginated resumes.

Builds a hierarchical report (Document -> Page -> Column -> Block) over a
layout, and optionally checks an exported PDF against it using character
stream matching.

Detection capabilities:
- Oversized units: atomic units taller than the page content area
- Content below margin: a block extending past the bottom margin
- Empty pages: page indexes with no blocks between the first and last page
- Page count mismatch: exported PDF page count differs from the layout
- Misplaced blocks: a block's first line not found on its page, inside
  the block's horizontal span, in the PDF

Known limitation:
    PDF matching works on normalized character streams (lowercase
    alphanumerics). Two blocks whose first lines normalize to the same
    string cannot be told apart, so a misplaced duplicate may go unnoticed.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from folio.contexts.rendering.geometry import PageGeometry
from folio.contexts.rendering.layout_engine import Block, blocks_by_page, page_count
from folio.utils.pdf_processing import PDFDocument, PdfSource

EPSILON = 1e-6

# Character count for prefix matching
MATCH_LENGTH = 30

# Horizontal slack (points) around a block when matching its text in the PDF
SPAN_SLACK = 1.0


class IssueTemplates:
    """Centralized issue message templates (f-string style)."""

    # Document-level
    PAGE_COUNT_MISMATCH = "Page count mismatch: {actual} (expected {intended})"

    # Page-level
    EMPTY_PAGE = "Page {page} has no content"

    # Column-level
    CONTENT_BELOW_MARGIN = "Band {region} column {column} on page {page} has content below bottom margin"

    # Block-level
    OVERSIZED_UNIT = "'{key}' on page {page} is taller than the page ({height:.1f}pt > {available:.1f}pt)"
    NOT_FOUND_IN_PDF = "'{key}': first line not found on page {page} of the PDF"


# =============================================================================
# Diagnostics Hierarchy
# =============================================================================


@dataclass
class Diagnostics:
    """Base class for hierarchical diagnostics."""

    components: List["Diagnostics"] = field(default_factory=list)

    def get_issues(self) -> List[str]:
        """Generate issues for this level based on field values. Override in subclasses."""
        return []

    def get_inherited_issues(self) -> List[str]:
        """Collect issues from this level and all descendants."""
        all_issues = list(self.get_issues())
        for component in self.components:
            all_issues.extend(component.get_inherited_issues())
        return all_issues

    @property
    def is_valid(self) -> bool:
        """True if no issues at this level or any descendant."""
        return len(self.get_inherited_issues()) == 0


@dataclass
class BlockDiagnostics(Diagnostics):
    """Diagnostics for a single placed block."""

    key: str = ""
    page: int = 0
    height: float = 0.0
    available_height: float = 0.0
    overflow: bool = False
    found_in_pdf: Optional[bool] = None  # None = no PDF checked

    def get_issues(self) -> List[str]:
        issues = []
        if self.overflow:
            issues.append(
                IssueTemplates.OVERSIZED_UNIT.format(
                    key=self.key,
                    page=self.page + 1,
                    height=self.height,
                    available=self.available_height,
                )
            )
        if self.found_in_pdf is False:
            issues.append(IssueTemplates.NOT_FOUND_IN_PDF.format(key=self.key, page=self.page + 1))
        return issues


@dataclass
class ColumnDiagnostics(Diagnostics):
    """Diagnostics for one column of one band on a page."""

    region: int = 0
    column: int = 0
    page: int = 0
    used_height: float = 0.0
    fill_ratio: float = 0.0
    content_below_margin: bool = False

    def get_issues(self) -> List[str]:
        issues = []
        if self.content_below_margin:
            issues.append(
                IssueTemplates.CONTENT_BELOW_MARGIN.format(
                    region=self.region, column=self.column, page=self.page + 1
                )
            )
        return issues


@dataclass
class PageDiagnostics(Diagnostics):
    """Diagnostics for a single page."""

    page: int = 0
    block_count: int = 0

    def get_issues(self) -> List[str]:
        if self.block_count == 0:
            return [IssueTemplates.EMPTY_PAGE.format(page=self.page + 1)]
        return []


@dataclass
class DocumentDiagnostics(Diagnostics):
    """Top-level diagnostics for the entire document."""

    intended_page_count: int = 0
    actual_page_count: Optional[int] = None  # None = no PDF checked

    def get_issues(self) -> List[str]:
        issues = []
        if self.actual_page_count is not None and self.actual_page_count != self.intended_page_count:
            issues.append(
                IssueTemplates.PAGE_COUNT_MISMATCH.format(
                    actual=self.actual_page_count,
                    intended=self.intended_page_count,
                )
            )
        return issues

    @property
    def pages(self) -> List[PageDiagnostics]:
        return [c for c in self.components if isinstance(c, PageDiagnostics)]


# =============================================================================
# Helper Functions
# =============================================================================


def _first_line(block: Block) -> str:
    for fragment in block.fragments:
        if fragment.text.strip():
            return fragment.text[:MATCH_LENGTH]
    return ""


def _block_diagnostics(block: Block, page: PageGeometry, pdf: Optional[PDFDocument]) -> BlockDiagnostics:
    found = None
    if pdf is not None:
        needle = _first_line(block)
        if needle:
            span = (block.x - SPAN_SLACK, block.x + block.width + SPAN_SLACK)
            found = pdf.contains(needle, block.page + 1, span)
    return BlockDiagnostics(
        key=block.key,
        page=block.page,
        height=block.height,
        available_height=page.content_height,
        overflow=block.overflow,
        found_in_pdf=found,
    )


def _column_diagnostics(
    region: int, column: int, page_index: int, blocks: List[Block], page: PageGeometry
) -> ColumnDiagnostics:
    top = min(block.y for block in blocks)
    bottom = max(block.bottom for block in blocks)
    below = any(block.bottom > page.content_bottom + EPSILON and not block.overflow for block in blocks)
    used = bottom - top
    return ColumnDiagnostics(
        region=region,
        column=column,
        page=page_index,
        used_height=round(used, 2),
        fill_ratio=round(used / page.content_height, 3) if page.content_height else 0.0,
        content_below_margin=below,
    )


# =============================================================================
# Main Analysis Function
# =============================================================================


def analyze_layout(
    blocks: List[Block],
    page: PageGeometry = None,
    pdf_source: Optional[PdfSource] = None,
) -> DocumentDiagnostics:
    """
    Analyze a layout, optionally against its exported PDF.

    Args:
        blocks: Output of layout()
        page: Geometry the layout was computed for (US Letter by default)
        pdf_source: Exported PDF path or bytes to cross-check

    Returns:
        DocumentDiagnostics tree. Call .get_inherited_issues() for all issues,
        or .is_valid to check if the layout passes.
    """
    page = page or PageGeometry.letter()
    pdf = PDFDocument(pdf_source) if pdf_source is not None else None

    document = DocumentDiagnostics(
        intended_page_count=page_count(blocks),
        actual_page_count=pdf.page_count if pdf is not None else None,
    )

    for page_index, page_blocks in blocks_by_page(blocks).items():
        page_diagnostics = PageDiagnostics(page=page_index, block_count=len(page_blocks))

        by_column: Dict[Tuple[int, int], List[Block]] = {}
        for block in page_blocks:
            by_column.setdefault((block.region, block.column), []).append(block)

        for (region, column), column_blocks in sorted(by_column.items()):
            column_diagnostics = _column_diagnostics(region, column, page_index, column_blocks, page)
            column_diagnostics.components = [
                _block_diagnostics(block, page, pdf) for block in column_blocks
            ]
            page_diagnostics.components.append(column_diagnostics)

        document.components.append(page_diagnostics)

    return document
