"""
Renderer

Turns positioned blocks plus a theme into a visual tree: a document node
holding one page node per page index, each page holding one box per
block, each box holding text, rule, fill, border and marker nodes in
absolute page coordinates (points, origin top-left).

The tree is the single source both the preview host and the exporter
draw from. Rendering is referentially transparent: identical blocks,
theme and template always produce an identical tree.

Theme application:
- font_family: CSS family stack on every text node (display only; PDF
  faces come from the template metrics, switched to the serif faces for
  serif families so glyphs never outgrow the measured lines)
- primary_color: fills every "accent" color role
- heading_size: scales heading glyphs inside the fixed heading slot
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Optional

from folio.contexts.rendering.composer import Decoration, Fragment, heading_line_height
from folio.contexts.rendering.geometry import PageGeometry
from folio.contexts.rendering.layout_engine import Block, page_count
from folio.contexts.rendering.logger import _log_error
from folio.contexts.templating.defaults import (
    DEFAULT_THEME,
    FONT_FAMILY_STACKS,
    HEADING_SCALES,
    SERIF_FONT_FAMILIES,
)
from folio.contexts.templating.resume_data_structure import ResumeTheme
from folio.contexts.templating.template_registry import TemplateDefinition, resolve_template

HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")

# Tint of the accent color used for "accent_light" surfaces
ACCENT_TINT = 0.88

SERIF_FACES = {
    "Helvetica": "Times-Roman",
    "Helvetica-Bold": "Times-Bold",
    "Helvetica-Oblique": "Times-Italic",
    "Helvetica-BoldOblique": "Times-BoldItalic",
}


@dataclass(frozen=True)
class VisualNode:
    """
    One node of the visual tree.

    kind is one of: document, page, box, text, rule, fill, border, marker.
    style holds drawing attributes (color, font, size, align, shape, ...).
    """

    kind: str
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0
    style: Dict[str, Any] = field(default_factory=dict)
    text: str = ""
    key: str = ""
    children: tuple = ()

    def walk(self) -> Iterator["VisualNode"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def to_dict(self) -> dict:
        result = {
            "kind": self.kind,
            "x": round(self.x, 2),
            "y": round(self.y, 2),
            "width": round(self.width, 2),
            "height": round(self.height, 2),
            "style": dict(self.style),
        }
        if self.text:
            result["text"] = self.text
        if self.key:
            result["key"] = self.key
        if self.children:
            result["children"] = [child.to_dict() for child in self.children]
        return result


@dataclass(frozen=True)
class VisualTree:
    """
    Root of a rendered document.

    controls is the only thing interactive mode changes: visual nodes are
    identical whether or not editing controls are shown.
    """

    document: VisualNode
    template_id: str
    controls: bool = True

    @property
    def pages(self) -> List[VisualNode]:
        return list(self.document.children)

    @property
    def page_count(self) -> int:
        return len(self.document.children)

    def texts(self, page: Optional[int] = None) -> List[str]:
        """Text of every text node, in drawing order (optionally for one page)."""
        pages = self.pages if page is None else [self.pages[page]]
        return [node.text for p in pages for node in p.walk() if node.kind == "text"]

    def to_dict(self) -> dict:
        return {
            "template_id": self.template_id,
            "controls": self.controls,
            "document": self.document.to_dict(),
        }


# =============================================================================
# Colors
# =============================================================================


def _hex_to_rgb(color: str):
    value = color.lstrip("#")
    if len(value) == 3:
        value = "".join(c * 2 for c in value)
    return tuple(int(value[i : i + 2], 16) for i in (0, 2, 4))


def tint(color: str, amount: float) -> str:
    """Mix a hex color toward white by amount (0 = unchanged, 1 = white)."""
    try:
        r, g, b = _hex_to_rgb(color)
    except ValueError:
        return color
    mixed = [round(c + (255 - c) * amount) for c in (r, g, b)]
    return "#{:02x}{:02x}{:02x}".format(*mixed)


def color_roles(template: TemplateDefinition, theme: ResumeTheme) -> Dict[str, str]:
    """Concrete color per role: template palette plus theme accent."""
    accent = theme.primary_color if HEX_COLOR.match(theme.primary_color or "") else DEFAULT_THEME["primary_color"]
    roles = dict(template.palette)
    roles["accent"] = accent
    roles["accent_light"] = tint(accent, ACCENT_TINT)
    return roles


# =============================================================================
# Node construction
# =============================================================================


def _face(font: str, theme: ResumeTheme) -> str:
    if theme.font_family.value in SERIF_FONT_FAMILIES:
        return SERIF_FACES.get(font, font)
    return font


def _text_node(
    block: Block, fragment: Fragment, template: TemplateDefinition, theme: ResumeTheme, colors: Dict[str, str]
) -> VisualNode:
    style = template.style(fragment.role)
    size = style.size
    height = style.line_height
    if fragment.role == "heading":
        size = style.size * HEADING_SCALES[theme.heading_size.value]
        height = heading_line_height(template)

    face = _face(style.font, theme)
    return VisualNode(
        kind="text",
        x=block.x + fragment.dx,
        y=block.y + fragment.dy,
        width=fragment.width,
        height=height,
        text=fragment.text,
        style={
            "role": fragment.role,
            "font": face,
            "size": round(size, 2),
            "color": colors.get(style.color, colors["text"]),
            "family": FONT_FAMILY_STACKS[theme.font_family.value],
            "bold": "Bold" in face,
            "italic": "Italic" in face or "Oblique" in face,
            "align": fragment.align,
        },
    )


def _decoration_node(block: Block, decoration: Decoration, colors: Dict[str, str]) -> VisualNode:
    color = colors.get(decoration.color, colors["text"])
    x, y = block.x + decoration.dx, block.y + decoration.dy
    width, height = decoration.width, decoration.height

    if decoration.kind == "border-left":
        return VisualNode(kind="rule", x=x, y=y, width=2.0, height=height, style={"color": color, "shape": "rect"})
    if decoration.kind == "border":
        return VisualNode(
            kind="border", x=x, y=y, width=width, height=height, style={"color": color, "line_width": 0.75}
        )
    if decoration.kind == "marker":
        return VisualNode(
            kind="marker", x=x, y=y, width=width, height=height, style={"color": color, "shape": decoration.shape}
        )
    kind = "rule" if decoration.kind == "rule" else "fill"
    return VisualNode(kind=kind, x=x, y=y, width=width, height=height, style={"color": color, "shape": decoration.shape})


def _box_node(block: Block, template: TemplateDefinition, theme: ResumeTheme, colors: Dict[str, str]) -> VisualNode:
    children = [_decoration_node(block, d, colors) for d in block.decorations]
    children.extend(_text_node(block, f, template, theme, colors) for f in block.fragments)
    return VisualNode(
        kind="box",
        x=block.x,
        y=block.y,
        width=block.width,
        height=block.height,
        key=block.key,
        style={"kind": block.kind, "overflow": block.overflow},
        children=tuple(children),
    )


def render(
    blocks: List[Block],
    theme: ResumeTheme,
    page: PageGeometry = None,
    template: TemplateDefinition = None,
    interactive: bool = True,
) -> VisualTree:
    """
    Render positioned blocks into a visual tree.

    Args:
        blocks: Output of layout()
        theme: Cosmetic theme (font family, primary color, heading size)
        page: Geometry the blocks were laid out for (US Letter by default)
        template: Template the blocks were laid out with; defaults to the
            theme's template, resolved with fallback
        interactive: False hides editing controls; the visual nodes are unchanged

    Returns:
        VisualTree with one page node per page index in ascending order
    """
    page = page or PageGeometry.letter()
    template = template or resolve_template(theme.template)
    colors = color_roles(template, theme)

    page_boxes: List[List[VisualNode]] = [[] for _ in range(page_count(blocks))]
    for block in blocks:
        try:
            page_boxes[block.page].append(_box_node(block, template, theme, colors))
        except Exception as e:
            _log_error(f"Skipping block '{block.key}': {type(e).__name__}: {e}")

    pages = tuple(
        VisualNode(
            kind="page",
            width=page.width,
            height=page.height,
            key=f"page:{index}",
            style={"background": "#ffffff", "index": index},
            children=tuple(boxes),
        )
        for index, boxes in enumerate(page_boxes)
    )
    document = VisualNode(
        kind="document",
        width=page.width,
        height=page.height,
        style={
            "family": FONT_FAMILY_STACKS[theme.font_family.value],
            "accent": theme.primary_color,
            "text": colors["text"],
        },
        children=pages,
    )
    return VisualTree(document=document, template_id=template.id, controls=interactive)


def with_controls(tree: VisualTree, interactive: bool) -> VisualTree:
    """Same tree with editing controls shown or hidden."""
    return replace(tree, controls=interactive)
