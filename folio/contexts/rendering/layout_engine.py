"""
Layout Engine

Converts a ResumeData snapshot, a TemplateDefinition and a PageGeometry into
an ordered list of positioned Blocks, one per atomic unit, each tagged with
the page and column it lands on.

Pagination rules:
- Atomic units (a heading, one entry, one skill group, one custom item,
  the header) are never split across pages
- Units are packed greedily down each column; a unit that does not fit in
  the space left moves to the next page
- A section heading is kept on the same page as its first entry
- Columns of a split band paginate independently
- A unit taller than a whole page is placed alone on a fresh page and
  flagged as overflow
- Sections with no entries produce no blocks (not even a heading)

Layout is pure and deterministic: the same inputs always yield the same
blocks. It reads nothing from the theme, so cosmetic theme changes never
move content between pages.
"""

import json
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple

from folio.contexts.rendering.composer import Decoration, Fragment, Unit, UnitComposer
from folio.contexts.rendering.geometry import PageGeometry
from folio.contexts.rendering.logger import (
    log_layout_result,
    log_oversized_unit,
    log_section_fault,
    log_unit_fault,
)
from folio.contexts.rendering.measure import TextMeasurer
from folio.contexts.templating.resume_data_structure import ResumeData
from folio.contexts.templating.template_registry import ColumnSpec, TemplateDefinition

EPSILON = 1e-6


@dataclass(frozen=True)
class Block:
    """
    A positioned atomic unit.

    Attributes:
        page: Zero-based page index
        region: Index of the template band the unit belongs to
        column: Column index within the band (0 is the left rail of a split band)
        kind: "header", "contact", "heading", "experience", "education",
            "skills", "achievements" or "custom"
        source_id: Entry id the block renders (section key for headings,
            "<section id>/<index>" for custom items)
        section: Section the block belongs to ("experience", or a custom section id)
        x, y, width, height: Absolute box in points, origin top-left
        fragments, decorations: Content relative to (x, y)
        overflow: True when the unit is taller than the page content area
    """

    page: int
    region: int
    column: int
    kind: str
    source_id: str
    section: str
    x: float
    y: float
    width: float
    height: float
    fragments: Tuple[Fragment, ...] = ()
    decorations: Tuple[Decoration, ...] = ()
    overflow: bool = False

    @property
    def key(self) -> str:
        """Stable render key."""
        return f"{self.kind}:{self.source_id}"

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def text(self) -> str:
        return "\n".join(fragment.text for fragment in self.fragments)

    def to_dict(self) -> dict:
        return {
            "page": self.page,
            "region": self.region,
            "column": self.column,
            "kind": self.kind,
            "source_id": self.source_id,
            "section": self.section,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
            "fragments": [f.to_dict() for f in self.fragments],
            "decorations": [d.to_dict() for d in self.decorations],
            "overflow": self.overflow,
        }


@dataclass
class SectionUnits:
    """One section's units: optional heading, then entries in display order."""

    key: str
    heading: Optional[Unit]
    units: List[Unit] = field(default_factory=list)


@dataclass
class _Cursor:
    page: int
    y: float
    fresh: bool = True  # nothing placed in this column on this page yet
    force_break: bool = False  # previous unit was oversized and must stay alone


class _ColumnPacker:
    """Greedy packing of units down one column across pages."""

    def __init__(self, page: PageGeometry, region: int, column: int, x: float, width: float, start: _Cursor):
        self.page_geometry = page
        self.region = region
        self.column = column
        self.x = x
        self.width = width
        self.cursor = _Cursor(start.page, start.y, start.fresh, start.force_break)
        self.blocks: List[Block] = []

    def _new_page(self) -> None:
        self.cursor = _Cursor(self.cursor.page + 1, self.page_geometry.content_top)

    def place(self, unit: Unit, gap: float, keep_height: Optional[float] = None) -> None:
        """
        Place one unit.

        keep_height is the height that must fit for the unit to stay on this
        page (a heading plus its first entry).
        """
        geometry = self.page_geometry
        needed = unit.height if keep_height is None else keep_height
        cursor = self.cursor

        if cursor.force_break:
            self._new_page()
        elif not cursor.fresh:
            if cursor.y + gap + needed > geometry.content_bottom + EPSILON:
                self._new_page()
        elif cursor.y > geometry.content_top + EPSILON and cursor.y + needed > geometry.content_bottom + EPSILON:
            # Band started part-way down the page
            self._new_page()

        cursor = self.cursor
        top = cursor.y if cursor.fresh else cursor.y + gap
        overflow = unit.height > geometry.content_height + EPSILON
        if overflow:
            log_oversized_unit(unit.kind, unit.source_id, unit.height, geometry.content_height, cursor.page)

        self.blocks.append(
            Block(
                page=cursor.page,
                region=self.region,
                column=self.column,
                kind=unit.kind,
                source_id=unit.source_id,
                section=unit.section,
                x=self.x,
                y=round(top, 2),
                width=self.width,
                height=unit.height,
                fragments=tuple(unit.fragments),
                decorations=tuple(unit.decorations),
                overflow=overflow,
            )
        )
        self.cursor = _Cursor(cursor.page, round(top + unit.height, 2), fresh=False, force_break=overflow)

    def place_section(self, section: SectionUnits, section_gap: float, entry_gap: float) -> None:
        units = section.units
        if section.heading is not None:
            first = units[0].height if units else 0.0
            self.place(section.heading, section_gap, keep_height=section.heading.height + first)
            rest = units
            if units:
                # Heading already reserved room for the first entry
                self.place(units[0], 0.0)
                rest = units[1:]
        else:
            if units:
                self.place(units[0], section_gap)
            rest = units[1:]
        for unit in rest:
            self.place(unit, entry_gap)


class LayoutEngine:
    """Template-driven layout of resume data onto pages."""

    def __init__(self, template: TemplateDefinition, page: PageGeometry = None, measurer: TextMeasurer = None):
        self.template = template
        self.page = page or PageGeometry.letter()
        self.composer = UnitComposer(template, measurer)

    # -- composition -------------------------------------------------------

    def _compose_section(
        self, kind: str, data: ResumeData, width: float, column: ColumnSpec, full_width: bool
    ) -> List[SectionUnits]:
        composer = self.composer
        layout = column.entry_layout

        def with_heading(key: str, title: str, units: List[Unit]) -> List[SectionUnits]:
            units = [unit for unit in units if not unit.is_empty]
            if not units:
                return []
            return [SectionUnits(key, composer.heading(title, key, width, full_width), units)]

        def each(section: str, entries, build: Callable) -> List[Unit]:
            # A faulty entry is dropped on its own
            units = []
            for entry in entries:
                try:
                    units.append(build(entry))
                except Exception as e:
                    log_unit_fault(section, getattr(entry, "id", "?"), e)
            return units

        if kind == "header":
            return [SectionUnits("header", None, [composer.header(data.personal_info, width)])]
        if kind == "contact":
            unit = composer.contact(data.personal_info, width)
            return [] if unit.is_empty else [SectionUnits("contact", None, [unit])]
        if kind == "experience":
            units = each(kind, data.experience, lambda entry: composer.experience(entry, width, layout))
            return with_heading(kind, self.template.title_for(kind), units)
        if kind == "education":
            units = each(kind, data.education, lambda entry: composer.education(entry, width, layout))
            return with_heading(kind, self.template.title_for(kind), units)
        if kind == "skills":
            units = each(kind, data.skills, lambda group: composer.skill_group(group, width))
            return with_heading(kind, self.template.title_for(kind), units)
        if kind == "achievements":
            units = each(kind, data.achievements, lambda entry: composer.achievement(entry, width, layout))
            return with_heading(kind, self.template.title_for(kind), units)
        if kind == "custom":
            sections = []
            for section in data.custom_sections:
                items = [(f"{section.id}/{i}", item) for i, item in enumerate(section.items) if not item.is_empty]
                units = []
                for source_id, item in items:
                    try:
                        units.append(composer.custom_item(item, source_id, section.id, width, layout))
                    except Exception as e:
                        log_unit_fault(section.id, source_id, e)
                title = (section.title or "").strip() or "Additional"
                sections.extend(with_heading(section.id, title, units))
            return sections
        raise ValueError(f"Unknown section kind '{kind}'")

    def compose_column(self, data: ResumeData, column: ColumnSpec, width: float, full_width: bool) -> List[SectionUnits]:
        """Compose every section of a column; a faulty section is logged and skipped."""
        sections = []
        for kind in column.sections:
            try:
                sections.extend(self._compose_section(kind, data, width, column, full_width))
            except Exception as e:
                log_section_fault(kind, e)
        return sections

    # -- packing -----------------------------------------------------------

    def layout(self, data: ResumeData) -> List[Block]:
        started = time.time()
        spacing = self.template.spacing
        section_gap = spacing.get("section_gap", 16)
        entry_gap = spacing.get("entry_gap", 10)

        blocks: List[Block] = []
        start = _Cursor(0, self.page.content_top)

        for region_index, region in enumerate(self.template.regions):
            frames = self.page.column_frames(region.ratios)
            full_width = region.kind == "full"
            ends = []
            for column_index, (column, (x, width)) in enumerate(zip(region.columns, frames)):
                packer = _ColumnPacker(self.page, region_index, column_index, x, width, start)
                for section in self.compose_column(data, column, width, full_width):
                    packer.place_section(section, section_gap, entry_gap)
                blocks.extend(packer.blocks)
                if packer.blocks:
                    ends.append(packer.cursor)

            if ends:
                end = max(ends, key=lambda c: (c.page, c.y))
                # Next band starts below the lowest column, after a section gap
                start = _Cursor(
                    end.page,
                    round(end.y + section_gap, 2),
                    fresh=True,
                    force_break=any(c.force_break and c.page == end.page for c in ends),
                )

        blocks.sort(key=lambda b: (b.page, b.region, b.column, b.y))
        log_layout_result(self.template.id, blocks, time.time() - started)
        return blocks


def layout(data: ResumeData, template: TemplateDefinition, page: PageGeometry = None) -> List[Block]:
    """
    Lay out a resume snapshot.

    Args:
        data: ResumeData snapshot (never mutated)
        template: Resolved TemplateDefinition
        page: Page geometry, US Letter by default

    Returns:
        Blocks ordered by (page, band, column, y)
    """
    return LayoutEngine(template, page).layout(data)


def page_count(blocks: List[Block]) -> int:
    """Number of pages spanned by the blocks (at least 1: an empty resume is one blank page)."""
    if not blocks:
        return 1
    return max(block.page for block in blocks) + 1


def blocks_by_page(blocks: List[Block]) -> Dict[int, List[Block]]:
    pages: Dict[int, List[Block]] = {index: [] for index in range(page_count(blocks))}
    for block in blocks:
        pages[block.page].append(block)
    return pages


def blocks_to_json(blocks: List[Block]) -> str:
    """Canonical JSON of a layout, for parity and determinism checks."""
    return json.dumps([block.to_dict() for block in blocks], sort_keys=True, separators=(",", ":"))
