"""
Templating Context

Responsibilities:
- Manages the resume data model (personal info, ordered collections, theme)
- Migrates legacy resume records to the canonical shape
- Owns the template catalog (column bands, section order, typography)
- Resolves template ids and theme presets

Owns: Resume data representation, template definitions, theme presets
Never: Measures, paginates or draws anything
"""

from folio.contexts.templating.config_resolver import apply_theme_presets, load_theme_presets
from folio.contexts.templating.normalizer import NormalizationResult, normalize_resume
from folio.contexts.templating.resume_data_structure import (
    ResumeData,
    ResumeRecord,
    ResumeTheme,
    reorder,
    reorder_collection,
    replace_field,
    validate_resume,
)
from folio.contexts.templating.template_registry import (
    TemplateDefinition,
    TemplateId,
    TemplateRegistry,
    list_templates,
    resolve_template,
)

__all__ = [
    # Data model and mutations
    "ResumeData",
    "ResumeRecord",
    "ResumeTheme",
    "reorder",
    "reorder_collection",
    "replace_field",
    "validate_resume",
    # Legacy migration
    "normalize_resume",
    "NormalizationResult",
    # Template catalog
    "TemplateDefinition",
    "TemplateId",
    "TemplateRegistry",
    "resolve_template",
    "list_templates",
    # Theme presets
    "apply_theme_presets",
    "load_theme_presets",
]
