"""
Legacy Resume Normalization

One-time migration of stored resume blobs into the canonical shape.

Two incompatible shapes exist in stored records:
- Skills: flat {id, name, category, level: 1-5} vs grouped
  {id, category, items: [{name, level: "Beginner".."Expert"}]}
- Custom sections: flat {id, title, content, type, items: [str]} vs itemized
  {id, title, items: [{title, subtitle, date, description}]}

The grouped and itemized shapes are canonical. Only canonical data reaches
the Rendering context.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List

from folio.contexts.templating.defaults import NUMERIC_SKILL_LEVELS
from folio.contexts.templating.exceptions import InvalidResumeStructureError
from folio.contexts.templating.logger import log_normalization_result
from folio.contexts.templating.resume_data_structure import ResumeData
from folio.utils.text_processing import slugify


@dataclass
class NormalizationResult:
    """
    Result of normalizing a stored resume blob.

    Attributes:
        data: Canonical ResumeData
        migrated: Whether any legacy shape was rewritten
        changes: Human-readable list of the rewrites performed
    """

    data: ResumeData
    migrated: bool = False
    changes: List[str] = field(default_factory=list)


def _is_flat_skill(entry: Dict[str, Any]) -> bool:
    return "items" not in entry and "name" in entry


def _is_flat_custom_section(section: Dict[str, Any]) -> bool:
    items = section.get("items") or []
    return "content" in section or any(isinstance(item, str) for item in items)


def _skill_level_label(level: Any) -> Any:
    """Map a legacy numeric level to its label; labels pass through unchanged."""
    if isinstance(level, bool):
        return None
    if isinstance(level, (int, float)):
        return NUMERIC_SKILL_LEVELS.get(int(level))
    if isinstance(level, str) and level.strip().isdigit():
        return NUMERIC_SKILL_LEVELS.get(int(level.strip()))
    return level


def migrate_skills(skills: List[Dict[str, Any]], changes: List[str]) -> List[Dict[str, Any]]:
    """
    Group flat skills by category, in order of first appearance.

    Canonical groups in the same list are kept where they are. Flat skills
    sharing a category are merged into one group, placed where the first of
    them appeared.
    """
    result: List[Dict[str, Any]] = []
    groups_by_category: Dict[str, Dict[str, Any]] = {}

    for entry in skills:
        if not _is_flat_skill(entry):
            result.append(entry)
            continue

        category = str(entry.get("category") or "other")
        label = category.replace("_", " ").title()
        group = groups_by_category.get(category)
        if group is None:
            group = {"id": f"skills-{slugify(category) or 'other'}", "category": label, "items": []}
            groups_by_category[category] = group
            result.append(group)
            changes.append(f"skills: grouped flat skills under '{label}'")

        group["items"].append(
            {"name": str(entry.get("name", "")), "level": _skill_level_label(entry.get("level"))}
        )

    return result


def migrate_custom_section(section: Dict[str, Any], changes: List[str]) -> Dict[str, Any]:
    """
    Convert a flat custom section into itemized form.

    The free-text `content` becomes a leading description-only item; each
    string in `items` becomes an item with that string as its title.
    """
    items = []
    content = str(section.get("content") or "").strip()
    if content:
        items.append({"title": "", "description": content})

    for item in section.get("items") or []:
        if isinstance(item, str):
            if item.strip():
                items.append({"title": item})
        else:
            items.append(item)

    changes.append(f"custom_sections: itemized '{section.get('title', '')}' ({len(items)} item(s))")
    return {"id": section.get("id"), "title": section.get("title", ""), "items": items}


def normalize_resume_dict(raw: Dict[str, Any]) -> tuple:
    """
    Rewrite legacy shapes in a raw resume dict.

    Args:
        raw: Resume data as loaded from storage (not modified)

    Returns:
        (canonical_dict, changes)

    Raises:
        InvalidResumeStructureError: If raw is not a mapping or a collection is not a list
    """
    if not isinstance(raw, dict):
        raise InvalidResumeStructureError("Resume data must be a mapping")

    data = copy.deepcopy(raw)
    changes: List[str] = []

    skills = data.get("skills")
    if skills is not None:
        if not isinstance(skills, list):
            raise InvalidResumeStructureError("Expected a list for collection 'skills'", "skills")
        if any(isinstance(s, dict) and _is_flat_skill(s) for s in skills):
            data["skills"] = migrate_skills(skills, changes)

    key = "custom_sections" if "custom_sections" in data else "customSections"
    sections = data.get(key)
    if sections is not None:
        if not isinstance(sections, list):
            raise InvalidResumeStructureError("Expected a list for collection 'custom_sections'", key)
        data[key] = [
            migrate_custom_section(s, changes) if isinstance(s, dict) and _is_flat_custom_section(s) else s
            for s in sections
        ]

    return data, changes


def normalize_resume(raw: Dict[str, Any]) -> NormalizationResult:
    """
    Normalize a stored resume blob into canonical ResumeData.

    Already-canonical input passes through unchanged (migrated=False).

    Example:
        >>> result = normalize_resume({"skills": [{"id": "1", "name": "Python",
        ...                                         "category": "technical", "level": 5}]})
        >>> result.data.skills[0].category
        'Technical'
        >>> result.data.skills[0].items[0].level.value
        'Expert'
    """
    canonical, changes = normalize_resume_dict(raw)
    result = NormalizationResult(
        data=ResumeData.from_dict(canonical), migrated=bool(changes), changes=changes
    )
    log_normalization_result(result.migrated, result.changes)
    return result
