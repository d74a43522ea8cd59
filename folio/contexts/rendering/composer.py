"""
Unit composition.

Turns each atomic unit of a resume (the header, one heading, one entry,
one skill group, one custom item) into a list of positioned text
fragments and decorations, relative to the unit's own top-left corner.
Heights are final after composition: the layout engine only stacks
composed units, and the renderer only styles them.

Everything a template varies (which fields show, where metadata sits,
bullet shapes, chips vs. lines) is read from the TemplateDefinition.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from folio.contexts.rendering.measure import TextMeasurer
from folio.contexts.templating.defaults import MAX_HEADING_SCALE
from folio.contexts.templating.resume_data_structure import (
    AchievementEntry,
    CustomItem,
    EducationEntry,
    ExperienceEntry,
    PersonalInfo,
    SkillGroup,
)
from folio.contexts.templating.template_registry import TemplateDefinition
from folio.utils.text_processing import join_nonempty
from folio.utils.timestamp import format_date_range, format_month_year

# Horizontal gap between a left field and its right-aligned metadata
PAIR_GAP = 8.0
# Right-aligned metadata wider than this share of the line drops below instead
MAX_META_SHARE = 0.5

CHIP_PAD_X = 6.0
CHIP_PAD_Y = 2.5
CHIP_GAP = 4.0

BOX_PAD = 8.0
BAND_PAD = 18.0
CARD_PAD = 8.0
BORDER_INSET = 12.0
MARKER_WIDTH = 4.0
MARKER_GAP = 8.0


@dataclass(frozen=True)
class Fragment:
    """
    One line of text inside a unit.

    dy is the top of the line box, width the line box width; align says
    where the text sits inside that box.
    """

    text: str
    role: str
    dx: float
    dy: float
    width: float
    align: str = "left"

    def to_dict(self) -> dict:
        return {
            "text": self.text,
            "role": self.role,
            "dx": round(self.dx, 2),
            "dy": round(self.dy, 2),
            "width": round(self.width, 2),
            "align": self.align,
        }


@dataclass(frozen=True)
class Decoration:
    """Non-text mark: rule, fill, border, marker bar or bullet marker."""

    kind: str
    dx: float
    dy: float
    width: float
    height: float
    color: str
    shape: str = "rect"

    def to_dict(self) -> dict:
        return {
            "kind": self.kind,
            "dx": round(self.dx, 2),
            "dy": round(self.dy, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
            "color": self.color,
            "shape": self.shape,
        }


@dataclass
class Unit:
    """A composed atomic unit, not yet placed on a page."""

    kind: str
    source_id: str
    section: str
    height: float
    fragments: List[Fragment] = field(default_factory=list)
    decorations: List[Decoration] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.fragments


def heading_line_height(template: TemplateDefinition) -> float:
    """Heading slot height, reserved at the largest heading scale."""
    style = template.style("heading")
    return round(style.size * MAX_HEADING_SCALE * style.leading, 2)


class UnitBuilder:
    """Vertical cursor over one unit's content box."""

    def __init__(
        self,
        template: TemplateDefinition,
        measurer: TextMeasurer,
        width: float,
        inset_left: float = 0.0,
        inset_right: float = 0.0,
        pad_top: float = 0.0,
    ):
        self.template = template
        self.measurer = measurer
        self.outer_width = width
        self.x0 = inset_left
        self.width = max(width - inset_left - inset_right, 1.0)
        self.y = pad_top
        self.fragments: List[Fragment] = []
        self.decorations: List[Decoration] = []

    # -- measurement -------------------------------------------------------

    def _font(self, role: str) -> Tuple[str, float]:
        style = self.template.style(role)
        scale = MAX_HEADING_SCALE if role == "heading" else 1.0
        return style.font, style.size * scale

    def line_height(self, role: str) -> float:
        if role == "heading":
            return heading_line_height(self.template)
        return self.template.style(role).line_height

    def text_width(self, role: str, text: str) -> float:
        font, size = self._font(role)
        return self.measurer.width(text, font, size)

    # -- content -----------------------------------------------------------

    def gap(self, points: float) -> None:
        self.y += points

    def text(
        self,
        role: str,
        text: Optional[str],
        dx: float = 0.0,
        width: Optional[float] = None,
        align: str = "left",
    ) -> int:
        """Wrap and append text; returns the number of lines added."""
        if not text or not text.strip():
            return 0
        width = self.width - dx if width is None else width
        font, size = self._font(role)
        line_height = self.line_height(role)
        lines = self.measurer.wrap(text, font, size, width)
        for line in lines:
            self.fragments.append(Fragment(line, role, self.x0 + dx, self.y, width, align))
            self.y += line_height
        return len(lines)

    def pair(self, left_role: str, left: str, right_role: str, right: str) -> None:
        """Left text with right-aligned metadata on its first line."""
        if not right:
            self.text(left_role, left)
            return

        right_width = self.text_width(right_role, right)
        if not left or not left.strip():
            self.text(right_role, right, align="right")
            return
        if right_width > self.width * MAX_META_SHARE:
            self.text(left_role, left)
            self.text(right_role, right)
            return

        top = self.y
        self.fragments.append(Fragment(right, right_role, self.x0, top, self.width, "right"))
        self.text(left_role, left, width=self.width - right_width - PAIR_GAP)
        self.y = max(self.y, top + self.line_height(right_role))

    def inline(self, role: str, items: List[str], separator: str, align: str = "left") -> None:
        """
        Flow short items onto lines joined by separator.

        Items are never split across lines unless one is wider than the
        whole line.
        """
        items = [item.strip() for item in items if item and item.strip()]
        if not items:
            return
        lines: List[str] = []
        current = ""
        for item in items:
            candidate = f"{current}{separator}{item}" if current else item
            if self.text_width(role, candidate) <= self.width:
                current = candidate
                continue
            if current:
                lines.append(current)
            if self.text_width(role, item) <= self.width:
                current = item
            else:
                font, size = self._font(role)
                *full, current = self.measurer.wrap(item, font, size, self.width)
                lines.extend(full)
        if current:
            lines.append(current)

        line_height = self.line_height(role)
        for line in lines:
            self.fragments.append(Fragment(line, role, self.x0, self.y, self.width, align))
            self.y += line_height

    def bullets(self, items: Iterable[str]) -> None:
        spec = self.template.bullet
        indent = float(spec.get("indent", 12))
        size = float(spec.get("size", 3.5))
        shape = spec.get("shape", "disc")
        line_height = self.line_height("bullet")

        for item in items:
            if not item or not item.strip():
                continue
            top = self.y
            self.decorations.append(
                Decoration(
                    kind="marker",
                    dx=self.x0 + (indent - size) / 2 - 1,
                    dy=top + (line_height - size) / 2,
                    width=size,
                    height=size,
                    color=spec.get("color", "text"),
                    shape=shape,
                )
            )
            self.text("bullet", item, dx=indent)

    def chips(self, labels: List[str], fill: str) -> None:
        """Flow labels as filled pills, wrapping to new rows."""
        labels = [label for label in labels if label.strip()]
        if not labels:
            return
        text_height = self.line_height("chip")
        chip_height = text_height + 2 * CHIP_PAD_Y
        x = 0.0
        row_top = self.y
        for label in labels:
            chip_width = min(self.text_width("chip", label) + 2 * CHIP_PAD_X, self.width)
            if x > 0 and x + chip_width > self.width:
                x = 0.0
                row_top += chip_height + CHIP_GAP
            self.decorations.append(
                Decoration("fill", self.x0 + x, row_top, chip_width, chip_height, fill, shape="round")
            )
            self.fragments.append(
                Fragment(
                    label,
                    "chip",
                    self.x0 + x + CHIP_PAD_X,
                    row_top + CHIP_PAD_Y,
                    chip_width - 2 * CHIP_PAD_X,
                )
            )
            x += chip_width + CHIP_GAP
        self.y = row_top + chip_height

    def rule(self, color: str, thickness: float, before: float = 2.0) -> None:
        self.y += before
        self.decorations.append(Decoration("rule", self.x0, self.y, self.width, thickness, color))
        self.y += thickness

    # -- finishing -------------------------------------------------------

    def finish(
        self,
        kind: str,
        source_id: str,
        section: str,
        pad_bottom: float = 0.0,
        backdrop: Optional[Tuple[str, str]] = None,
    ) -> Unit:
        """
        Close the unit.

        backdrop is (decoration kind, color role) drawn behind the whole unit
        box, e.g. ("fill", "accent") for a header band.
        """
        # A unit with no text takes no room, padding included
        height = round(self.y + pad_bottom, 2) if self.fragments else 0.0
        decorations = list(self.decorations)
        if backdrop is not None and self.fragments:
            kind_, color = backdrop
            decorations.insert(0, Decoration(kind_, 0.0, 0.0, self.outer_width, height, color))
        return Unit(
            kind=kind,
            source_id=source_id,
            section=section,
            height=height,
            fragments=list(self.fragments),
            decorations=decorations,
        )


class UnitComposer:
    """Composes atomic units for one template and column width."""

    def __init__(self, template: TemplateDefinition, measurer: TextMeasurer = None):
        self.template = template
        self.measurer = measurer or TextMeasurer()

    @property
    def spacing(self):
        return self.template.spacing

    def _builder(self, width: float, **kwargs) -> UnitBuilder:
        return UnitBuilder(self.template, self.measurer, width, **kwargs)

    def _entry_builder(self, width: float) -> Tuple[UnitBuilder, Optional[Tuple[str, str]], float]:
        """Builder for an entry box, honoring card/left-border entry styles."""
        entry = self.template.entry
        if entry.get("card"):
            return (
                self._builder(width, inset_left=CARD_PAD, inset_right=CARD_PAD, pad_top=CARD_PAD),
                ("border", "rule"),
                CARD_PAD,
            )
        if entry.get("border"):
            return self._builder(width, inset_left=BORDER_INSET), ("border-left", "rule"), 0.0
        return self._builder(width), None, 0.0

    # -- header ------------------------------------------------------------

    def header(self, info: PersonalInfo, width: float) -> Unit:
        spec = self.template.header
        align = spec.get("align", "left")
        band = bool(spec.get("band"))
        pad = BAND_PAD if band else 0.0
        b = self._builder(width, inset_left=pad, inset_right=pad, pad_top=pad)

        b.text("name", info.full_name, align=align)

        if spec.get("include_contact", True) and info.contact_items:
            b.gap(4)
            b.inline(
                "contact",
                [value for _, value in info.contact_items],
                spec.get("contact_separator", " | "),
                align=align,
            )

        if info.summary and info.summary.strip():
            style = spec.get("summary_style", "plain")
            b.gap(8)
            if style == "boxed":
                top = b.y
                b.gap(BOX_PAD)
                b.text("summary", info.summary, dx=BOX_PAD, width=b.width - 2 * BOX_PAD)
                b.gap(BOX_PAD)
                b.decorations.append(Decoration("fill", b.x0, top, b.width, b.y - top, "light", shape="round"))
            elif style == "quoted":
                b.text("summary", f"“{info.summary.strip()}”", align=align)
            else:
                b.text("summary", info.summary, align=align)

        if spec.get("bottom_rule") and b.fragments:
            b.rule("rule", 1.0, before=10.0)

        backdrop = ("fill", "accent") if band else None
        return b.finish("header", "personal_info", "header", pad_bottom=pad, backdrop=backdrop)

    def contact(self, info: PersonalInfo, width: float) -> Unit:
        """Standalone contact box for templates that keep contact details in a rail."""
        b = self._builder(width, inset_left=BOX_PAD, inset_right=BOX_PAD, pad_top=BOX_PAD)
        if info.contact_items:
            b.text("heading", self.template.title_for("contact"))
            b.gap(self.spacing.get("heading_after", 6) / 2)
            for _, value in info.contact_items:
                b.text("contact", value)
        backdrop = ("fill", self.template.header.get("contact_fill", "light"))
        return b.finish("contact", "personal_info.contact", "contact", pad_bottom=BOX_PAD, backdrop=backdrop)

    # -- headings ------------------------------------------------------------

    def heading(self, title: str, section: str, width: float, full_width: bool = False) -> Unit:
        spec = self.template.heading
        align = spec.get("full_width_align", spec.get("align", "left")) if full_width else spec.get("align", "left")
        if spec.get("transform") == "upper":
            title = title.upper()

        b = self._builder(width)
        dx = 0.0
        if spec.get("marker"):
            dx = MARKER_WIDTH + MARKER_GAP
            b.decorations.append(
                Decoration("bar", 0.0, 0.0, MARKER_WIDTH, b.line_height("heading"), "accent")
            )
        b.text("heading", title, dx=dx, align=align)

        rule = spec.get("rule", "none")
        if rule and rule != "none":
            b.rule(rule, float(spec.get("rule_width", 1)))
        b.gap(self.spacing.get("heading_after", 6))
        return b.finish("heading", section, section)

    # -- entries -------------------------------------------------------------

    def experience(self, entry: ExperienceEntry, width: float, layout: str) -> Unit:
        b, backdrop, pad = self._entry_builder(width)
        dates = format_date_range(entry.start_date, entry.end_date, current=entry.current)
        if layout == "split":
            b.pair("title", entry.job_title, "meta", dates)
            b.pair("subtitle", entry.company, "meta", entry.location)
        else:
            b.text("title", entry.job_title)
            b.text("subtitle", entry.company)
            b.text("meta", join_nonempty([dates, entry.location]))
        if entry.description.strip():
            b.gap(self.spacing.get("block_gap", 3))
            b.text("body", entry.description)
        if any(a.strip() for a in entry.achievements):
            b.gap(self.spacing.get("block_gap", 3))
            b.bullets(entry.achievements)
        return b.finish("experience", entry.id, "experience", pad_bottom=pad, backdrop=backdrop)

    def education(self, entry: EducationEntry, width: float, layout: str) -> Unit:
        b = self._builder(width)
        ongoing = entry.ongoing and not entry.end_date
        dates = format_date_range(entry.start_date, entry.end_date, current=ongoing)
        degree = join_nonempty([entry.degree, entry.field_of_study], " in ")
        gpa = f"GPA: {entry.gpa}" if entry.gpa else ""
        if layout == "split":
            b.pair("title", degree, "meta", dates)
            b.pair("subtitle", entry.institution, "meta", entry.location)
            b.text("meta", gpa)
        else:
            b.text("title", degree)
            b.text("subtitle", entry.institution)
            b.text("meta", join_nonempty([dates, entry.location]))
            b.text("meta", gpa)
        if entry.description:
            b.gap(self.spacing.get("block_gap", 3))
            b.text("body", entry.description)
        if self.template.education.get("show_achievements", True) and any(a.strip() for a in entry.achievements):
            b.gap(self.spacing.get("block_gap", 3))
            b.bullets(entry.achievements)
        return b.finish("education", entry.id, "education")

    def skill_group(self, group: SkillGroup, width: float) -> Unit:
        spec = self.template.skills
        b = self._builder(width)

        labels = []
        for item in group.items:
            if not item.name.strip():
                continue
            label = item.name.strip()
            if spec.get("show_level", True) and item.level and item.level.value != spec.get("hidden_level"):
                label = f"{label} ({item.level.value})"
            labels.append(label)
        if not labels:
            return b.finish("skills", group.id, "skills")

        if group.category.strip():
            b.text("title", group.category)
            b.gap(self.spacing.get("block_gap", 3))

        display = spec.get("display", "chips")
        if display == "chips":
            b.chips(labels, spec.get("chip_fill", "light"))
        elif display == "inline":
            b.inline("chip", labels, " • ")
        else:
            for label in labels:
                b.text("chip", label)
        return b.finish("skills", group.id, "skills")

    def achievement(self, entry: AchievementEntry, width: float, layout: str) -> Unit:
        b = self._builder(width)
        date = format_month_year(entry.date)
        if layout == "split":
            b.pair("title", entry.title, "meta", date)
            b.text("subtitle", entry.organization)
        else:
            b.text("title", entry.title)
            b.text("subtitle", entry.organization)
            b.text("meta", date)
        if self.template.achievements.get("show_description", True) and entry.description.strip():
            b.gap(self.spacing.get("block_gap", 3))
            b.text("body", entry.description)
        return b.finish("achievements", entry.id, "achievements")

    def custom_item(self, item: CustomItem, source_id: str, section: str, width: float, layout: str) -> Unit:
        b = self._builder(width)
        date = format_month_year(item.date)
        if layout == "split":
            b.pair("title", item.title, "meta", date)
            b.text("subtitle", item.subtitle)
        else:
            b.text("title", item.title)
            b.text("subtitle", item.subtitle)
            b.text("meta", date)
        if item.description:
            if item.title or item.subtitle:
                b.gap(self.spacing.get("block_gap", 3))
            b.text("body", item.description)
        return b.finish("custom", source_id, section)
