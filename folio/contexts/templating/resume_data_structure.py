"""
Resume Data Structure

Defines the canonical in-memory representation of a resume's content for FOLIO.
This structure is the interface between the (external) form layer, storage, and
the Rendering context.

Templating owns:
- The canonical data classes and their JSON/YAML (de)serialization
- Validation invariants (reported, never enforced at render time)
- Whole-field replacement and reorder-by-id operations

Rendering consumes ResumeData snapshots and never mutates them.
"""

import copy
import json
import re
import uuid
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from omegaconf import OmegaConf

from folio.contexts.templating.defaults import DEFAULT_THEME
from folio.contexts.templating.exceptions import InvalidResumeStructureError

COLLECTIONS = ("education", "experience", "skills", "achievements", "custom_sections")

_HEX_COLOR = re.compile(r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")
_FIELD_PATH = re.compile(r"^(?P<head>\w+)(?:\[(?P<entry_id>[^\]]+)\])?(?:\.(?P<attr>\w+))?$")


def new_entry_id() -> str:
    """Opaque unique id for a new collection entry."""
    return uuid.uuid4().hex


class SkillLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"

    @classmethod
    def parse(cls, value: Any) -> Optional["SkillLevel"]:
        """Parse a level label case-insensitively; anything else is None."""
        if value is None or value == "":
            return None
        if isinstance(value, cls):
            return value
        for member in cls:
            if str(value).strip().lower() == member.value.lower():
                return member
        return None


class FontFamily(str, Enum):
    INTER = "inter"
    ROBOTO = "roboto"
    OPENSANS = "opensans"
    POPPINS = "poppins"
    MERRIWEATHER = "merriweather"
    PLAYFAIR = "playfair"


class HeadingSize(str, Enum):
    SM = "sm"
    MD = "md"
    LG = "lg"


# =============================================================================
# Field access helpers
# =============================================================================


def _pick(raw: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """First present, non-None value among keys (snake_case and camelCase spellings)."""
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return default


def _text(raw: Dict[str, Any], *keys: str) -> str:
    value = _pick(raw, *keys, default="")
    return str(value)


def _optional_text(raw: Dict[str, Any], *keys: str) -> Optional[str]:
    value = _pick(raw, *keys)
    if value is None:
        return None
    text = str(value)
    return text if text.strip() else None


def _string_list(raw: Dict[str, Any], key: str, path: str) -> List[str]:
    value = raw.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidResumeStructureError(f"Expected a list of strings for '{key}'", path)
    return [str(item) for item in value]


def _entry_list(raw: Dict[str, Any], key: str) -> List[Dict[str, Any]]:
    value = _pick(raw, key, _camel(key))
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidResumeStructureError(f"Expected a list for collection '{key}'", key)
    for i, entry in enumerate(value):
        if not isinstance(entry, dict):
            raise InvalidResumeStructureError("Expected a mapping", f"{key}[{i}]")
    return value


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _drop_none(d: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in d.items() if v is not None}


# =============================================================================
# Entities
# =============================================================================


@dataclass
class PersonalInfo:
    """
    Singleton personal/contact block of a resume.

    Attributes:
        full_name: Display name
        email, phone, location: Required for persistence, may be empty while editing
        website, linkedin, github: Optional profile URLs
        summary: Optional professional summary paragraph
    """

    full_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    website: Optional[str] = None
    linkedin: Optional[str] = None
    github: Optional[str] = None
    summary: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PersonalInfo":
        full_name = _text(raw, "full_name", "fullName")
        if not full_name:
            # Older records split the name
            full_name = " ".join(
                part for part in (_text(raw, "first_name", "firstName"), _text(raw, "last_name", "lastName")) if part
            )
        return cls(
            full_name=full_name,
            email=_text(raw, "email"),
            phone=_text(raw, "phone"),
            location=_text(raw, "location"),
            website=_optional_text(raw, "website"),
            linkedin=_optional_text(raw, "linkedin"),
            github=_optional_text(raw, "github"),
            summary=_optional_text(raw, "summary"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "full_name": self.full_name,
                "email": self.email,
                "phone": self.phone,
                "location": self.location,
                "website": self.website,
                "linkedin": self.linkedin,
                "github": self.github,
                "summary": self.summary,
            }
        )

    @property
    def contact_items(self) -> List[tuple]:
        """(kind, value) pairs of the contact fields that are present, in display order."""
        pairs = [
            ("email", self.email),
            ("phone", self.phone),
            ("location", self.location),
            ("website", self.website),
            ("linkedin", self.linkedin),
            ("github", self.github),
        ]
        return [(kind, value.strip()) for kind, value in pairs if value and value.strip()]


@dataclass
class EducationEntry:
    """
    One education entry.

    A missing end date means "ongoing" only when `ongoing` is set; otherwise
    the end is unspecified and renders empty.
    """

    id: str
    institution: str = ""
    degree: str = ""
    field_of_study: str = ""
    location: str = ""
    start_date: str = ""
    end_date: Optional[str] = None
    ongoing: bool = False
    gpa: Optional[str] = None
    achievements: List[str] = field(default_factory=list)
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], path: str = "education") -> "EducationEntry":
        return cls(
            id=_text(raw, "id") or new_entry_id(),
            institution=_text(raw, "institution"),
            degree=_text(raw, "degree"),
            field_of_study=_text(raw, "field_of_study", "fieldOfStudy", "field"),
            location=_text(raw, "location"),
            start_date=_text(raw, "start_date", "startDate"),
            end_date=_optional_text(raw, "end_date", "endDate"),
            ongoing=bool(_pick(raw, "ongoing", default=False)),
            gpa=_optional_text(raw, "gpa"),
            achievements=_string_list(raw, "achievements", path),
            description=_optional_text(raw, "description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "institution": self.institution,
                "degree": self.degree,
                "field_of_study": self.field_of_study,
                "location": self.location,
                "start_date": self.start_date,
                "end_date": self.end_date,
                "ongoing": self.ongoing,
                "gpa": self.gpa,
                "achievements": list(self.achievements),
                "description": self.description,
            }
        )


@dataclass
class ExperienceEntry:
    """
    One work experience entry.

    When `current` is true the stored end date is ignored and the entry
    displays "Present".
    """

    id: str
    job_title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: Optional[str] = None
    current: bool = False
    description: str = ""
    achievements: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], path: str = "experience") -> "ExperienceEntry":
        return cls(
            id=_text(raw, "id") or new_entry_id(),
            job_title=_text(raw, "job_title", "jobTitle", "position"),
            company=_text(raw, "company"),
            location=_text(raw, "location"),
            start_date=_text(raw, "start_date", "startDate"),
            end_date=_optional_text(raw, "end_date", "endDate"),
            current=bool(_pick(raw, "current", default=False)),
            description=_text(raw, "description"),
            achievements=_string_list(raw, "achievements", path),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "job_title": self.job_title,
                "company": self.company,
                "location": self.location,
                "start_date": self.start_date,
                "end_date": self.end_date,
                "current": self.current,
                "description": self.description,
                "achievements": list(self.achievements),
            }
        )


@dataclass
class SkillItem:
    name: str
    level: Optional[SkillLevel] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "SkillItem":
        return cls(name=_text(raw, "name"), level=SkillLevel.parse(raw.get("level")))

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none({"name": self.name, "level": self.level.value if self.level else None})


@dataclass
class SkillGroup:
    """A labelled group of skills (e.g., "Languages": Python, Go)."""

    id: str
    category: str = ""
    items: List[SkillItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], path: str = "skills") -> "SkillGroup":
        if "items" not in raw and "name" in raw:
            raise InvalidResumeStructureError(
                "Flat legacy skill entry; run normalize_resume() to migrate it", path
            )
        items = raw.get("items") or []
        if not isinstance(items, list):
            raise InvalidResumeStructureError("Expected a list of skill items", f"{path}.items")
        parsed = []
        for i, item in enumerate(items):
            if isinstance(item, str):
                parsed.append(SkillItem(name=item))
            elif isinstance(item, dict):
                parsed.append(SkillItem.from_dict(item))
            else:
                raise InvalidResumeStructureError("Expected a skill mapping", f"{path}.items[{i}]")
        return cls(id=_text(raw, "id") or new_entry_id(), category=_text(raw, "category"), items=parsed)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "category": self.category, "items": [i.to_dict() for i in self.items]}


@dataclass
class AchievementEntry:
    id: str
    title: str = ""
    date: str = ""
    description: str = ""
    organization: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], path: str = "achievements") -> "AchievementEntry":
        return cls(
            id=_text(raw, "id") or new_entry_id(),
            title=_text(raw, "title"),
            date=_text(raw, "date"),
            description=_text(raw, "description"),
            organization=_optional_text(raw, "organization"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "id": self.id,
                "title": self.title,
                "date": self.date,
                "description": self.description,
                "organization": self.organization,
            }
        )


@dataclass
class CustomItem:
    title: str = ""
    subtitle: Optional[str] = None
    date: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "CustomItem":
        return cls(
            title=_text(raw, "title"),
            subtitle=_optional_text(raw, "subtitle"),
            date=_optional_text(raw, "date"),
            description=_optional_text(raw, "description"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return _drop_none(
            {
                "title": self.title,
                "subtitle": self.subtitle,
                "date": self.date,
                "description": self.description,
            }
        )

    @property
    def is_empty(self) -> bool:
        return not any(((self.title or "").strip(), self.subtitle, self.date, self.description))


@dataclass
class CustomSection:
    """User-defined section (e.g., "Projects", "Volunteering") of generic items."""

    id: str
    title: str = ""
    items: List[CustomItem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any], path: str = "custom_sections") -> "CustomSection":
        items = raw.get("items") or []
        if "content" in raw or any(isinstance(item, str) for item in items):
            raise InvalidResumeStructureError(
                "Flat legacy custom section; run normalize_resume() to migrate it", path
            )
        return cls(
            id=_text(raw, "id") or new_entry_id(),
            title=_text(raw, "title"),
            items=[CustomItem.from_dict(item) for item in items],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "items": [i.to_dict() for i in self.items]}


@dataclass
class ResumeTheme:
    """Cosmetic presentation parameters, orthogonal to template structure."""

    font_family: FontFamily = FontFamily(DEFAULT_THEME["font_family"])
    primary_color: str = DEFAULT_THEME["primary_color"]
    heading_size: HeadingSize = HeadingSize(DEFAULT_THEME["heading_size"])
    template: str = DEFAULT_THEME["template"]

    def __post_init__(self):
        # Plain strings arrive through replace_field(); unknown values fall back to defaults
        if not isinstance(self.font_family, FontFamily):
            value = str(self.font_family)
            self.font_family = FontFamily(value) if value in FontFamily._value2member_map_ else FontFamily.INTER
        if not isinstance(self.heading_size, HeadingSize):
            value = str(self.heading_size)
            self.heading_size = HeadingSize(value) if value in HeadingSize._value2member_map_ else HeadingSize.MD

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ResumeTheme":
        font = str(_pick(raw, "font_family", "fontFamily", default=DEFAULT_THEME["font_family"]))
        size = str(_pick(raw, "heading_size", "headingSize", default=DEFAULT_THEME["heading_size"]))
        return cls(
            font_family=FontFamily(font) if font in FontFamily._value2member_map_ else FontFamily.INTER,
            primary_color=str(_pick(raw, "primary_color", "primaryColor", default=DEFAULT_THEME["primary_color"])),
            heading_size=HeadingSize(size) if size in HeadingSize._value2member_map_ else HeadingSize.MD,
            template=str(_pick(raw, "template", default=DEFAULT_THEME["template"])),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "font_family": self.font_family.value,
            "primary_color": self.primary_color,
            "heading_size": self.heading_size.value,
            "template": self.template,
        }


ENTRY_TYPES = {
    "education": EducationEntry,
    "experience": ExperienceEntry,
    "skills": SkillGroup,
    "achievements": AchievementEntry,
    "custom_sections": CustomSection,
}


@dataclass
class ResumeData:
    """
    Aggregate root of a resume: personal info plus five ordered collections.

    Collection order is the user's display order, not chronology. Every entry
    carries a stable unique id used for reorder-by-id and as a render key.
    """

    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    education: List[EducationEntry] = field(default_factory=list)
    experience: List[ExperienceEntry] = field(default_factory=list)
    skills: List[SkillGroup] = field(default_factory=list)
    achievements: List[AchievementEntry] = field(default_factory=list)
    custom_sections: List[CustomSection] = field(default_factory=list)
    theme: ResumeTheme = field(default_factory=ResumeTheme)

    @classmethod
    def empty(cls) -> "ResumeData":
        """New resume: every collection empty, default theme."""
        return cls()

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ResumeData":
        """
        Build ResumeData from a canonical JSON-compatible dict.

        Accepts snake_case and camelCase keys. Unknown keys are ignored.

        Raises:
            InvalidResumeStructureError: If a collection is not a list of mappings,
                or a legacy skill/custom-section shape is found (see normalize_resume)
        """
        if not isinstance(raw, dict):
            raise InvalidResumeStructureError("Resume data must be a mapping")

        personal = _pick(raw, "personal_info", "personalInfo", default={})
        if not isinstance(personal, dict):
            raise InvalidResumeStructureError("Expected a mapping", "personal_info")

        collections = {}
        for name, entry_type in ENTRY_TYPES.items():
            collections[name] = [
                entry_type.from_dict(entry, path=f"{name}[{i}]")
                for i, entry in enumerate(_entry_list(raw, name))
            ]

        theme = raw.get("theme") or {}
        return cls(
            personal_info=PersonalInfo.from_dict(personal),
            theme=ResumeTheme.from_dict(theme),
            **collections,
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"personal_info": self.personal_info.to_dict()}
        for name in COLLECTIONS:
            result[name] = [entry.to_dict() for entry in getattr(self, name)]
        result["theme"] = self.theme.to_dict()
        return result

    @classmethod
    def from_json(cls, text: str) -> "ResumeData":
        return cls.from_dict(json.loads(text))

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ResumeData":
        """
        Load ResumeData from a YAML file (top-level `data` key optional).

        Raises:
            FileNotFoundError: If yaml_path does not exist
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"YAML file not found: {yaml_path}")

        raw = OmegaConf.to_container(OmegaConf.load(yaml_path), resolve=True)
        return cls.from_dict(raw.get("data", raw))

    def snapshot(self) -> "ResumeData":
        """Independent deep copy, safe to hand to layout/render while editing continues."""
        return copy.deepcopy(self)

    def get_entry(self, collection: str, entry_id: str):
        """Find an entry by id in a collection, or raise KeyError."""
        for entry in getattr(self, collection):
            if entry.id == entry_id:
                return entry
        raise KeyError(f"No entry '{entry_id}' in {collection}")


@dataclass
class ResumeRecord:
    """Stored resume record as persisted by the storage collaborator."""

    id: str
    user_id: str
    title: str
    template: str
    data: ResumeData
    created_at: str = ""
    updated_at: str = ""

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "ResumeRecord":
        data = raw.get("data") or {}
        if isinstance(data, str):
            data = json.loads(data)
        return cls(
            id=_text(raw, "id"),
            user_id=_text(raw, "user_id", "userId"),
            title=_text(raw, "title"),
            template=_text(raw, "template") or DEFAULT_THEME["template"],
            data=ResumeData.from_dict(data),
            created_at=_text(raw, "created_at", "createdAt"),
            updated_at=_text(raw, "updated_at", "updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "title": self.title,
            "template": self.template,
            "data": self.data.to_dict(),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


# =============================================================================
# Validation
# =============================================================================


@dataclass
class ValidationIssue:
    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}"


def validate_resume(data: ResumeData) -> List[ValidationIssue]:
    """
    Check persistence invariants of a resume.

    Returns the list of issues found. Never raises and never blocks rendering:
    an invalid resume can always be laid out and previewed.
    """
    issues = []

    for name in ("full_name", "email", "phone", "location"):
        if not (getattr(data.personal_info, name) or "").strip():
            issues.append(ValidationIssue(f"personal_info.{name}", "Required field is empty"))

    for collection in COLLECTIONS:
        seen = set()
        for i, entry in enumerate(getattr(data, collection)):
            path = f"{collection}[{i}]"
            if not entry.id:
                issues.append(ValidationIssue(path, "Entry has no id"))
            elif entry.id in seen:
                issues.append(ValidationIssue(path, f"Duplicate id '{entry.id}'"))
            seen.add(entry.id)

    for i, entry in enumerate(data.experience):
        if not (entry.start_date or "").strip():
            issues.append(ValidationIssue(f"experience[{i}].start_date", "Start date is required"))
    for i, entry in enumerate(data.education):
        if not (entry.start_date or "").strip():
            issues.append(ValidationIssue(f"education[{i}].start_date", "Start date is required"))
    for i, group in enumerate(data.skills):
        if not group.items:
            issues.append(ValidationIssue(f"skills[{i}].items", "At least one skill is required"))

    if not _HEX_COLOR.match(data.theme.primary_color or ""):
        issues.append(ValidationIssue("theme.primary_color", "Expected a hex color like #2563eb"))

    return issues


# =============================================================================
# Mutations (whole-field replacement only)
# =============================================================================


def reorder(entries: List[Any], ordered_ids: List[str]) -> List[Any]:
    """
    Return entries permuted into the order given by ordered_ids.

    Raises:
        ValueError: If ordered_ids is not exactly a permutation of the entry ids,
            or either side repeats an id
    """
    by_id = {entry.id: entry for entry in entries}
    if len(by_id) != len(entries):
        raise ValueError("Cannot reorder a collection with duplicate ids")
    if len(ordered_ids) != len(entries) or set(ordered_ids) != set(by_id):
        raise ValueError(
            f"Reorder ids must be a permutation of the current ids: {sorted(by_id)}"
        )
    return [by_id[entry_id] for entry_id in ordered_ids]


def reorder_collection(data: ResumeData, collection: str, ordered_ids: List[str]) -> ResumeData:
    """New ResumeData with one collection permuted by id."""
    if collection not in COLLECTIONS:
        raise ValueError(f"Unknown collection '{collection}'. Must be one of {COLLECTIONS}")
    return replace(data, **{collection: reorder(getattr(data, collection), ordered_ids)})


def replace_field(data: ResumeData, path: str, value: Any) -> ResumeData:
    """
    Whole-field replacement returning a new ResumeData.

    Supported paths:
        "personal_info.<field>"          e.g. personal_info.summary
        "theme.<field>"                  e.g. theme.primary_color
        "<collection>"                   replace a whole collection
        "<collection>[<id>].<field>"     e.g. experience[abc123].achievements

    The given snapshot is never mutated. Collections are copied shallowly,
    so untouched entries are shared between the old and new snapshot.

    Raises:
        ValueError: If the path is malformed or names an unknown field
        KeyError: If the entry id is not in the collection
    """
    match = _FIELD_PATH.match(path)
    if not match:
        raise ValueError(f"Malformed field path: {path}")
    head, entry_id, attr = match.group("head"), match.group("entry_id"), match.group("attr")

    if head in ("personal_info", "theme") and entry_id is None and attr:
        target = getattr(data, head)
        _check_attr(target, attr, path)
        return replace(data, **{head: replace(target, **{attr: _coerce_none(target, attr, value)})})

    if head in COLLECTIONS and entry_id is None and attr is None:
        return replace(data, **{head: list(value or [])})

    if head in COLLECTIONS and entry_id is not None and attr:
        entries = list(getattr(data, head))
        for i, entry in enumerate(entries):
            if entry.id == entry_id:
                _check_attr(entry, attr, path)
                if attr == "id":
                    raise ValueError("Entry ids are stable and cannot be replaced")
                entries[i] = replace(entry, **{attr: _coerce_none(entry, attr, value)})
                return replace(data, **{head: entries})
        raise KeyError(f"No entry '{entry_id}' in {head}")

    raise ValueError(f"Unsupported field path: {path}")


def _check_attr(target: Any, attr: str, path: str) -> None:
    if attr not in {f.name for f in fields(target)}:
        raise ValueError(f"Unknown field '{attr}' in path {path}")


def _coerce_none(target: Any, attr: str, value: Any) -> Any:
    """None clears a text field to "" and a list field to []."""
    if value is not None:
        return value
    current = getattr(target, attr)
    if isinstance(current, str):
        return ""
    if isinstance(current, list):
        return []
    return value
