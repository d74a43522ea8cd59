"""
Template Registry

Templates are data, not code: each built-in template is a YAML definition
under templates/{template_id}.yaml describing its column bands, section
order, typography, heading style, bullet marker and skill display. The
layout engine and renderer interpret these definitions; neither contains
per-template branches.

Unknown or legacy template ids fail closed to the default template.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv
from omegaconf import OmegaConf

from folio.contexts.templating.defaults import DEFAULT_TEMPLATE_ID
from folio.contexts.templating.logger import log_template_fallback

load_dotenv()
TEMPLATES_PATH = Path(
    os.getenv("FOLIO_TEMPLATES_PATH", Path(__file__).parent / "templates")
)

# Section kinds a template column may list
SECTION_KINDS = ("header", "contact", "experience", "education", "skills", "achievements", "custom")

# Typography roles every template must define
TEXT_ROLES = ("name", "contact", "summary", "heading", "title", "subtitle", "meta", "body", "bullet", "chip")


class TemplateId(str, Enum):
    MODERN = "modern"
    CLASSIC = "classic"
    CREATIVE = "creative"
    EXECUTIVE = "executive"


@dataclass(frozen=True)
class TextStyle:
    """Metric font face, size (pt), line height multiplier and color role of one text role."""

    font: str
    size: float
    leading: float
    color: str

    @property
    def line_height(self) -> float:
        return round(self.size * self.leading, 2)


@dataclass(frozen=True)
class ColumnSpec:
    name: str
    sections: List[str]
    entry_layout: str = "split"  # "split" (meta right-aligned) or "stacked"


@dataclass(frozen=True)
class RegionSpec:
    """
    One vertical band of the page.

    A "full" band has one column spanning the content width. A "split" band
    has two columns sized by `ratios`; column 0 is the left rail.
    """

    kind: str
    columns: List[ColumnSpec]
    ratios: List[float] = field(default_factory=lambda: [1.0])


@dataclass(frozen=True)
class TemplateDefinition:
    """
    Declarative description of one resume template.

    Attributes:
        id, name, description, features: Catalog information for a template picker
        regions: Ordered vertical bands (see RegionSpec)
        typography: TextStyle per role (name, heading, body, ...)
        palette: Fixed color roles (text, muted, light, rule, inverse);
            "accent" always comes from the theme
        section_titles: Heading label per section kind
        header, heading, bullet, skills, education, achievements, entry:
            Style switches read by the composer
        spacing: Vertical gaps in points
    """

    id: str
    name: str
    description: str
    features: List[str]
    order: int
    regions: List[RegionSpec]
    typography: Dict[str, TextStyle]
    palette: Dict[str, str]
    section_titles: Dict[str, str]
    header: Dict[str, Any]
    heading: Dict[str, Any]
    bullet: Dict[str, Any]
    skills: Dict[str, Any]
    education: Dict[str, Any]
    achievements: Dict[str, Any]
    entry: Dict[str, Any]
    spacing: Dict[str, float]

    @property
    def column_count(self) -> int:
        """Columns of the band carrying the experience flow (the template's primary body)."""
        for region in self.regions:
            if any("experience" in column.sections for column in region.columns):
                return len(region.columns)
        return len(self.regions[0].columns)

    def style(self, role: str) -> TextStyle:
        return self.typography[role]

    def title_for(self, kind: str) -> str:
        title = self.section_titles.get(kind, kind.replace("_", " ").title())
        return title.upper() if self.heading.get("transform") == "upper" else title

    def sections(self) -> List[str]:
        """Every section kind placed by this template, in band/column order."""
        return [kind for region in self.regions for column in region.columns for kind in column.sections]

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "features": list(self.features),
            "columns": self.column_count,
        }

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "TemplateDefinition":
        """
        Build a definition from its parsed YAML.

        Raises:
            ValueError: If a region, column, section kind or text role is invalid
        """
        template_id = raw["id"]

        regions = []
        for i, region in enumerate(raw["regions"]):
            kind = region.get("kind", "full")
            columns = [
                ColumnSpec(
                    name=col.get("name", f"column{j}"),
                    sections=list(col["sections"]),
                    entry_layout=col.get("entry_layout", "split"),
                )
                for j, col in enumerate(region["columns"])
            ]
            expected = 1 if kind == "full" else 2
            if len(columns) != expected:
                raise ValueError(
                    f"Template '{template_id}' region {i}: '{kind}' band needs {expected} column(s), got {len(columns)}"
                )
            for col in columns:
                unknown = [s for s in col.sections if s not in SECTION_KINDS]
                if unknown:
                    raise ValueError(f"Template '{template_id}': unknown section kind(s) {unknown}")
            ratios = [float(r) for r in region.get("ratios", [1] * expected)]
            regions.append(RegionSpec(kind=kind, columns=columns, ratios=ratios))

        missing = [role for role in TEXT_ROLES if role not in raw["typography"]]
        if missing:
            raise ValueError(f"Template '{template_id}' is missing typography for {missing}")
        typography = {
            role: TextStyle(
                font=spec["font"],
                size=float(spec["size"]),
                leading=float(spec.get("leading", 1.3)),
                color=spec.get("color", "text"),
            )
            for role, spec in raw["typography"].items()
        }

        return cls(
            id=template_id,
            name=raw.get("name", template_id.title()),
            description=raw.get("description", ""),
            features=list(raw.get("features", [])),
            order=int(raw.get("order", 99)),
            regions=regions,
            typography=typography,
            palette=dict(raw["palette"]),
            section_titles=dict(raw.get("section_titles", {})),
            header=dict(raw.get("header", {})),
            heading=dict(raw.get("heading", {})),
            bullet=dict(raw.get("bullet", {})),
            skills=dict(raw.get("skills", {})),
            education=dict(raw.get("education", {})),
            achievements=dict(raw.get("achievements", {})),
            entry=dict(raw.get("entry", {})),
            spacing={k: float(v) for k, v in raw.get("spacing", {}).items()},
        )


class TemplateRegistry:
    """
    Registry for loading and caching template definitions.

    Definitions are stored in templates/{template_id}.yaml (or the directory
    named by FOLIO_TEMPLATES_PATH) and parsed once per registry.
    """

    def __init__(self, templates_path: Path = None, default_id: str = None):
        """
        Initialize the template registry.

        Args:
            templates_path: Directory of template YAML files. Defaults to
                            FOLIO_TEMPLATES_PATH from environment
            default_id: Fallback template id. Defaults to FOLIO_DEFAULT_TEMPLATE
        """
        if templates_path is None:
            templates_path = TEMPLATES_PATH

        self.templates_path = Path(templates_path)
        self.default_id = default_id or DEFAULT_TEMPLATE_ID
        self._cache: Dict[str, TemplateDefinition] = {}

    def get_template(self, template_id: str) -> TemplateDefinition:
        """
        Get a template definition by id, loading and caching it if necessary.

        Raises:
            FileNotFoundError: If no definition exists for template_id
        """
        if template_id in self._cache:
            return self._cache[template_id]

        template_path = self.get_template_path(template_id)
        if not template_path.exists():
            raise FileNotFoundError(
                f"Template definition not found for '{template_id}' at {template_path}"
            )

        raw = OmegaConf.to_container(OmegaConf.load(template_path), resolve=True)
        definition = TemplateDefinition.from_dict(raw)

        self._cache[template_id] = definition
        return definition

    def resolve(self, template_id: Optional[str]) -> TemplateDefinition:
        """
        Resolve a template id, failing closed to the default template.

        Never raises for an unknown id: unknown, legacy (e.g. "minimal") and
        empty ids all resolve to the default.
        """
        if template_id and self.has_template(template_id):
            return self.get_template(template_id)

        log_template_fallback(str(template_id), self.default_id)
        return self.get_template(self.default_id)

    def has_template(self, template_id: str) -> bool:
        if template_id in self._cache:
            return True
        # Ids are bare names; reject anything that could escape the directory
        if not template_id.replace("_", "").replace("-", "").isalnum():
            return False
        return self.get_template_path(template_id).exists()

    def get_template_path(self, template_id: str) -> Path:
        return self.templates_path / f"{template_id}.yaml"

    def available_ids(self) -> List[str]:
        return sorted(path.stem for path in self.templates_path.glob("*.yaml"))

    def list_templates(self) -> List[TemplateDefinition]:
        """All definitions in catalog display order."""
        definitions = [self.get_template(template_id) for template_id in self.available_ids()]
        return sorted(definitions, key=lambda d: (d.order, d.id))

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, template_id: str) -> bool:
        return template_id in self._cache


_default_registry: Optional[TemplateRegistry] = None


def get_registry() -> TemplateRegistry:
    """Process-wide registry over the packaged templates."""
    global _default_registry
    if _default_registry is None:
        _default_registry = TemplateRegistry()
    return _default_registry


def resolve_template(template_id: Optional[str]) -> TemplateDefinition:
    """Resolve a template id with the process-wide registry (falls back to the default)."""
    return get_registry().resolve(template_id)


def list_templates() -> List[TemplateDefinition]:
    return get_registry().list_templates()
