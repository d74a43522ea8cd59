"""Unit tests for legacy resume normalization."""

import copy

import pytest

from folio.contexts.templating import normalize_resume, resolve_template
from folio.contexts.templating.exceptions import InvalidResumeStructureError
from folio.contexts.templating.normalizer import migrate_skills
from folio.contexts.templating.resume_data_structure import SkillLevel


@pytest.mark.unit
def test_flat_skills_are_grouped_by_category(legacy_raw):
    result = normalize_resume(legacy_raw)

    assert result.migrated
    groups = result.data.skills
    assert [g.category for g in groups] == ["Technical", "Languages"]
    assert [g.id for g in groups] == ["skills-technical", "skills-languages"]
    assert [(i.name, i.level) for i in groups[0].items] == [
        ("Python", SkillLevel.EXPERT),
        ("Excel", SkillLevel.INTERMEDIATE),
    ]
    assert groups[1].items[0].level is SkillLevel.ADVANCED


@pytest.mark.unit
def test_flat_custom_section_is_itemized(legacy_raw):
    section = normalize_resume(legacy_raw).data.custom_sections[0]

    assert section.id == "c1"
    assert section.title == "Volunteering"
    assert section.items[0].title == ""
    assert section.items[0].description == "Weekend tutoring for local students."
    assert [item.title for item in section.items[1:]] == ["Food bank driver", "Library board member"]


@pytest.mark.unit
def test_legacy_template_id_is_kept_and_resolves_to_default(legacy_raw):
    data = normalize_resume(legacy_raw).data
    assert data.theme.template == "minimal"
    assert resolve_template(data.theme.template).id == "modern"


@pytest.mark.unit
def test_input_is_not_modified(legacy_raw):
    original = copy.deepcopy(legacy_raw)
    normalize_resume(legacy_raw)
    assert legacy_raw == original


@pytest.mark.unit
def test_canonical_input_passes_through(resume):
    result = normalize_resume(resume.to_dict())
    assert not result.migrated
    assert result.changes == []
    assert result.data == resume


@pytest.mark.unit
def test_canonical_groups_keep_their_position():
    changes = []
    skills = [
        {"id": "g1", "category": "Cloud", "items": [{"name": "AWS"}]},
        {"id": "s1", "name": "Go", "category": "technical", "level": 2},
    ]
    result = migrate_skills(skills, changes)
    assert [g["id"] for g in result] == ["g1", "skills-technical"]
    assert result[1]["items"] == [{"name": "Go", "level": "Beginner"}]
    assert len(changes) == 1


@pytest.mark.unit
def test_malformed_collections_raise():
    with pytest.raises(InvalidResumeStructureError):
        normalize_resume({"skills": "Python, Go"})
    with pytest.raises(InvalidResumeStructureError):
        normalize_resume(["not", "a", "mapping"])
