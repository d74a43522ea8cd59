"""
Preview host.

Draws the visual tree as an HTML document: absolutely positioned nodes
sized in points, so the preview is a point-for-point image of the
exported pages, scaled down for on-screen display.

PreviewSurface keeps the latest complete render of an editing session.
Every update renders from its own snapshot of the data, and the stored
result is replaced in one assignment, so a reader never sees a layout
from one snapshot paired with a tree from another.
"""

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from folio.contexts.rendering.geometry import PageGeometry
from folio.contexts.rendering.layout_engine import Block, layout
from folio.contexts.rendering.logger import _log_debug
from folio.contexts.rendering.renderer import VisualTree, render, with_controls
from folio.contexts.templating.resume_data_structure import ResumeData, ResumeTheme
from folio.contexts.templating.template_registry import TemplateRegistry, get_registry

HTML_TEMPLATES_PATH = Path(__file__).parent / "html"
PREVIEW_TEMPLATE = "preview.html.jinja"

# On-screen scale of the live preview
PREVIEW_SCALE = 0.75

_env = Environment(
    loader=FileSystemLoader(str(HTML_TEMPLATES_PATH)),
    autoescape=True,
    # Catches silent failures
    undefined=StrictUndefined,
)


def render_html(tree: VisualTree, scale: float = PREVIEW_SCALE, title: str = "Resume preview") -> str:
    """Render a visual tree to a standalone HTML document."""
    template = _env.get_template(PREVIEW_TEMPLATE)
    return template.render(
        title=title,
        document=tree.document,
        pages=tree.pages,
        controls=tree.controls,
        template_id=tree.template_id,
        scale=scale,
    )


def share_url(origin: str, resume_id: str, slug: Optional[str] = None) -> str:
    """Public read-only view URL: {origin}/resume/view/{slug or id}."""
    return f"{origin.rstrip('/')}/resume/view/{slug or resume_id}"


@dataclass(frozen=True)
class PreviewState:
    revision: int
    template_id: str
    theme: ResumeTheme
    blocks: List[Block]
    tree: VisualTree


class PreviewSurface:
    """
    Live preview of one resume.

    update() may be called after every edit; the latest call wins.
    """

    def __init__(self, page: PageGeometry = None, registry: TemplateRegistry = None):
        self.page = page or PageGeometry.letter()
        self.registry = registry or get_registry()
        self._state: Optional[PreviewState] = None
        self._revision = 0
        self._lock = threading.Lock()

    def update(
        self,
        data: ResumeData,
        template_id: Optional[str] = None,
        theme: Optional[ResumeTheme] = None,
    ) -> PreviewState:
        """
        Re-render from a fresh snapshot of data.

        Args:
            data: Current resume content (copied; later edits do not leak in)
            template_id: Template to show (defaults to the theme's template)
            theme: Theme override (defaults to data.theme)
        """
        snapshot = ResumeData.from_json(data.to_json())
        theme = theme or snapshot.theme
        template = self.registry.resolve(template_id or theme.template)

        with self._lock:
            self._revision += 1
            revision = self._revision

        blocks = layout(snapshot, template, self.page)
        tree = render(blocks, theme, page=self.page, template=template, interactive=True)
        state = PreviewState(revision, template.id, theme, blocks, tree)

        with self._lock:
            # A slower, older update must not replace a newer one
            if self._state is None or revision > self._state.revision:
                self._state = state
            else:
                _log_debug(f"Discarding stale preview revision {revision}")
        return state

    @property
    def state(self) -> Optional[PreviewState]:
        return self._state

    @property
    def revision(self) -> int:
        return self._state.revision if self._state else 0

    @property
    def page_count(self) -> int:
        return self._state.tree.page_count if self._state else 0

    def html(self, interactive: bool = True, scale: float = PREVIEW_SCALE) -> str:
        """HTML of the latest render; interactive=False hides editing controls."""
        if self._state is None:
            raise RuntimeError("Nothing to preview yet; call update() first")
        return render_html(with_controls(self._state.tree, interactive), scale=scale)
