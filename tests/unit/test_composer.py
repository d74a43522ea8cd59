"""Unit tests for composing atomic units."""

import pytest

from folio.contexts.rendering.composer import UnitComposer, heading_line_height
from folio.contexts.templating import resolve_template
from folio.contexts.templating.resume_data_structure import (
    CustomItem,
    EducationEntry,
    ExperienceEntry,
    PersonalInfo,
    SkillGroup,
    SkillItem,
    SkillLevel,
)

WIDTH = 540.0


def texts(unit):
    return [fragment.text for fragment in unit.fragments]


@pytest.fixture
def composer(modern):
    return UnitComposer(modern)


@pytest.mark.unit
def test_empty_header_has_zero_height(composer):
    unit = composer.header(PersonalInfo(), WIDTH)
    assert unit.kind == "header"
    assert unit.height == 0.0
    assert unit.is_empty


@pytest.mark.unit
def test_header_lists_contact_and_summary(composer, resume):
    unit = composer.header(resume.personal_info, WIDTH)
    joined = " ".join(texts(unit))

    assert texts(unit)[0] == "Jane Doe"
    assert "jane.doe@example.com" in joined
    assert "Platform engineer" in joined
    # Boxed summary in modern
    assert any(d.kind == "fill" and d.color == "light" for d in unit.decorations)


@pytest.mark.unit
def test_heading_reserves_the_largest_slot(composer, modern):
    unit = composer.heading("Education", "education", WIDTH)
    assert unit.fragments[0].dy == 0
    assert unit.height >= heading_line_height(modern)
    assert any(d.kind == "rule" and d.color == "accent" for d in unit.decorations)


@pytest.mark.unit
def test_experience_dates_right_aligned(composer, resume):
    unit = composer.experience(resume.experience[0], WIDTH, "split")
    meta = [f for f in unit.fragments if f.role == "meta"]

    assert meta[0].text == "Mar 2021 - Present"
    assert meta[0].align == "right"
    assert "Senior Platform Engineer" in texts(unit)
    assert sum(1 for d in unit.decorations if d.kind == "marker") == 3


@pytest.mark.unit
def test_current_ignores_end_date(composer):
    entry = ExperienceEntry(id="x", job_title="Dev", start_date="2020-01", end_date="2021-01", current=True)
    assert "Jan 2020 - Present" in texts(composer.experience(entry, WIDTH, "split"))


@pytest.mark.unit
def test_stacked_layout_puts_meta_below(composer, resume):
    unit = composer.experience(resume.experience[1], 300.0, "stacked")
    assert "Jun 2017 - Feb 2021 | Seattle, WA" in texts(unit)
    assert all(f.align == "left" for f in unit.fragments)


@pytest.mark.unit
def test_education_degree_and_gpa(composer, resume):
    unit = composer.education(resume.education[0], WIDTH, "split")
    assert "B.S. in Computer Science" in texts(unit)
    assert "GPA: 3.8" in texts(unit)
    assert "Sep 2013 - Jun 2017" in texts(unit)


@pytest.mark.unit
def test_education_end_date_semantics(composer):
    ongoing = EducationEntry(id="a", degree="PhD", start_date="2022-09", ongoing=True)
    unspecified = EducationEntry(id="b", degree="PhD", start_date="2022-09")

    assert "Sep 2022 - Present" in texts(composer.education(ongoing, WIDTH, "split"))
    assert "Sep 2022" in texts(composer.education(unspecified, WIDTH, "split"))
    assert not any("Present" in t for t in texts(composer.education(unspecified, WIDTH, "split")))


@pytest.mark.unit
def test_skill_chips_hide_intermediate_level(composer, resume):
    unit = composer.skill_group(resume.skills[0], WIDTH)
    labels = [f.text for f in unit.fragments if f.role == "chip"]

    assert labels == ["Python (Expert)", "Go (Advanced)", "SQL"]
    assert sum(1 for d in unit.decorations if d.kind == "fill") == 3
    assert texts(unit)[0] == "Languages"


@pytest.mark.unit
def test_inline_skills_in_executive(resume):
    executive = UnitComposer(resolve_template("executive"))
    unit = executive.skill_group(resume.skills[1], WIDTH)
    assert "Docker • Kubernetes • Airflow" in texts(unit)


@pytest.mark.unit
def test_empty_skill_group_is_empty(composer):
    group = SkillGroup(id="g", category="Tools", items=[SkillItem(name="  ", level=SkillLevel.EXPERT)])
    assert composer.skill_group(group, WIDTH).is_empty


@pytest.mark.unit
def test_custom_item_keeps_its_source_id(composer):
    item = CustomItem(title="tidewater", date="2022-08", description="CDC toolkit")
    unit = composer.custom_item(item, "projects/0", "projects", WIDTH, "split")
    assert unit.source_id == "projects/0"
    assert unit.section == "projects"
    assert "Aug 2022" in texts(unit)


@pytest.mark.unit
def test_classic_contact_box(resume):
    classic = UnitComposer(resolve_template("classic"))
    unit = classic.contact(resume.personal_info, 170.0)
    assert texts(unit)[0] == "Contact"
    assert "Portland, OR" in texts(unit)
    assert unit.decorations[0].kind == "fill"
    assert classic.contact(PersonalInfo(), 170.0).is_empty


@pytest.mark.unit
def test_heights_are_rounded(composer, resume):
    unit = composer.experience(resume.experience[0], WIDTH, "split")
    assert unit.height == round(unit.height, 2)
