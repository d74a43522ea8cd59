"""Unit tests for pagination: the layout engine's ordering and packing properties."""

import copy

import pytest

from folio.contexts.rendering import PageGeometry, blocks_by_page, blocks_to_json, layout, page_count
from folio.contexts.rendering.composer import UnitComposer
from folio.contexts.rendering.layout_engine import EPSILON
from folio.contexts.templating import ResumeData, reorder_collection, replace_field, resolve_template
from folio.contexts.templating.resume_data_structure import (
    ExperienceEntry,
    FontFamily,
    HeadingSize,
    PersonalInfo,
    ResumeTheme,
)

TEMPLATE_IDS = ["modern", "classic", "creative", "executive"]
MARGIN = 36.0


def page_with_content_bottom(content_bottom: float) -> PageGeometry:
    """Letter-width page whose content area ends exactly at content_bottom."""
    return PageGeometry(612.0, content_bottom + MARGIN, MARGIN, MARGIN, MARGIN, MARGIN, 24.0)


TALL_PAGE = page_with_content_bottom(20000.0)


def resume_with_entries(count: int, bullets: int = 2) -> ResumeData:
    return ResumeData(
        personal_info=PersonalInfo(full_name="Pat Lee"),
        experience=[
            ExperienceEntry(
                id=f"e{i}",
                job_title="Engineer",
                company="Acme",
                start_date="2020-01",
                achievements=["Shipped the quarterly roadmap on schedule"] * bullets,
            )
            for i in range(count)
        ],
    )


def find(blocks, source_id, kind=None):
    matches = [b for b in blocks if b.source_id == source_id and (kind is None or b.kind == kind)]
    assert matches, f"no block for {source_id}"
    return matches[0]


# =============================================================================
# Basic shape
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_layout_is_deterministic(resume, template_id):
    template = resolve_template(template_id)
    first = layout(resume, template)
    second = layout(copy.deepcopy(resume), template)
    assert blocks_to_json(first) == blocks_to_json(second)


@pytest.mark.unit
@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_empty_resume_is_one_page_with_empty_header(template_id):
    blocks = layout(ResumeData.empty(), resolve_template(template_id))
    assert [b.kind for b in blocks] == ["header"]
    assert blocks[0].height == 0.0
    assert page_count(blocks) == 1


@pytest.mark.unit
def test_page_count_of_no_blocks():
    assert page_count([]) == 1


@pytest.mark.unit
def test_layout_does_not_mutate_input(resume, modern):
    before = resume.to_json()
    layout(resume, modern)
    assert resume.to_json() == before


@pytest.mark.unit
def test_every_entry_gets_one_block(resume, modern):
    blocks = layout(resume, modern)
    kinds = [b.kind for b in blocks]

    assert kinds.count("header") == 1
    assert kinds.count("experience") == 2
    assert kinds.count("skills") == 2
    assert [b.source_id for b in blocks if b.kind == "heading"] == [
        "experience",
        "education",
        "skills",
        "achievements",
        "projects",
    ]


@pytest.mark.unit
def test_custom_items_are_keyed_by_section_and_index(resume, modern):
    blocks = layout(resume, modern)
    item = find(blocks, "projects/0")
    heading = find(blocks, "projects", kind="heading")

    assert item.kind == "custom"
    assert item.section == "projects"
    assert heading.text == "Projects"
    assert item.key == "custom:projects/0"


@pytest.mark.unit
def test_empty_sections_produce_no_blocks(resume, modern):
    resume.education = []
    resume.custom_sections[0].items = []
    blocks = layout(resume, modern)

    assert not [b for b in blocks if b.section == "education"]
    assert not [b for b in blocks if b.section == "projects"]


@pytest.mark.unit
@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_blocks_are_sorted(resume, template_id):
    blocks = layout(resume, resolve_template(template_id))
    keys = [(b.page, b.region, b.column, b.y) for b in blocks]
    assert keys == sorted(keys)


@pytest.mark.unit
@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_blocks_stay_inside_content_area(template_id):
    page = PageGeometry.letter()
    blocks = layout(resume_with_entries(12), resolve_template(template_id), page)

    for block in blocks:
        assert block.x >= page.margin_left - EPSILON
        assert block.x + block.width <= page.width - page.margin_right + EPSILON
        assert block.y >= page.content_top - EPSILON
        assert block.bottom <= page.content_bottom + EPSILON


# =============================================================================
# Pagination
# =============================================================================


@pytest.mark.unit
@pytest.mark.parametrize("count", [1, 3, 5])
def test_exactly_full_page_then_one_more(count):
    modern = resolve_template("modern")
    tall = layout(resume_with_entries(count + 1), modern, TALL_PAGE)
    page = page_with_content_bottom(find(tall, f"e{count - 1}").bottom)

    fitting = layout(resume_with_entries(count), modern, page)
    assert page_count(fitting) == 1

    spilled = layout(resume_with_entries(count + 1), modern, page)
    assert page_count(spilled) == 2
    last = find(spilled, f"e{count}")
    assert last.page == 1
    assert last.y == page.content_top
    assert all(b.page == 0 for b in spilled if b is not last)


@pytest.mark.unit
def test_heading_is_kept_with_first_entry(resume, modern):
    tall = layout(resume, modern, TALL_PAGE)
    heading = find(tall, "education", kind="heading")
    entry = find(tall, "edu-osu")
    page = page_with_content_bottom(heading.bottom + entry.height / 2)

    blocks = layout(resume, modern, page)
    heading = find(blocks, "education", kind="heading")
    entry = find(blocks, "edu-osu")

    assert heading.page == entry.page == 1
    assert heading.y == page.content_top
    assert entry.y == pytest.approx(heading.bottom)


@pytest.mark.unit
def test_oversized_unit_sits_alone(modern):
    data = resume_with_entries(3)
    data.experience[1].achievements = [f"Bullet number {i}" for i in range(150)]

    blocks = layout(data, modern)
    huge = find(blocks, "e1")
    after = find(blocks, "e2")

    assert huge.overflow
    assert huge.height > PageGeometry.letter().content_height
    assert huge.page == 1
    assert huge.y == PageGeometry.letter().content_top
    assert after.page == 2
    assert not find(blocks, "e0").overflow


@pytest.mark.unit
def test_blocks_by_page_covers_every_page(modern):
    blocks = layout(resume_with_entries(20), modern)
    pages = blocks_by_page(blocks)

    assert list(pages) == list(range(page_count(blocks)))
    assert sum(len(p) for p in pages.values()) == len(blocks)
    assert all(pages[i] for i in pages)


# =============================================================================
# Templates and columns
# =============================================================================


@pytest.mark.unit
def test_classic_rail_is_independent_of_main_column(resume):
    classic = resolve_template("classic")
    base = layout(resume, classic)

    longer = copy.deepcopy(resume)
    longer.experience.extend(resume_with_entries(15).experience)
    grown = layout(longer, classic)

    rail = [b.to_dict() for b in base if b.column == 0]
    assert rail == [b.to_dict() for b in grown if b.column == 0]
    assert page_count(grown) > page_count(base)


@pytest.mark.unit
def test_classic_contact_in_rail(resume):
    blocks = layout(resume, resolve_template("classic"))
    contact = find(blocks, "personal_info.contact")
    header = find(blocks, "personal_info")

    assert (contact.page, contact.column, contact.y) == (0, 0, PageGeometry.letter().content_top)
    assert "jane.doe@example.com" in contact.text
    assert header.column == 1
    assert "jane.doe@example.com" not in header.text


@pytest.mark.unit
def test_two_column_templates_place_sections_in_rail(resume):
    for template_id in ("classic", "creative"):
        blocks = layout(resume, resolve_template(template_id))
        assert {b.column for b in blocks if b.section in ("skills", "education", "achievements")} == {0}
        assert {b.column for b in blocks if b.section == "experience"} == {1}


@pytest.mark.unit
def test_executive_split_band_starts_below_experience(resume):
    blocks = layout(resume, resolve_template("executive"))
    first_band = [b for b in blocks if b.region == 0]
    split_band = [b for b in blocks if b.region == 1]

    last_top = max((b.page, b.bottom) for b in first_band)
    assert min((b.page, b.y) for b in split_band) > last_top
    assert {b.section for b in first_band} == {"header", "experience"}


@pytest.mark.unit
def test_switching_template_keeps_entry_ids(resume):
    entry_kinds = ("experience", "education", "skills", "achievements", "custom")
    expected = None
    for template_id in TEMPLATE_IDS:
        blocks = layout(resume, resolve_template(template_id))
        ids = sorted(b.source_id for b in blocks if b.kind in entry_kinds)
        expected = expected or ids
        assert ids == expected


@pytest.mark.unit
def test_reorder_changes_only_order(resume, modern):
    reordered = reorder_collection(resume, "experience", ["exp-globex", "exp-acme"])
    before = [b for b in layout(resume, modern) if b.kind == "experience"]
    after = [b for b in layout(reordered, modern) if b.kind == "experience"]

    assert [b.source_id for b in after] == ["exp-globex", "exp-acme"]
    assert sorted(b.text for b in before) == sorted(b.text for b in after)


@pytest.mark.unit
@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_theme_never_changes_layout(resume, template_id):
    template = resolve_template(template_id)
    restyled = copy.deepcopy(resume)
    restyled.theme = ResumeTheme(
        font_family=FontFamily.PLAYFAIR, primary_color="#7c3aed", heading_size=HeadingSize.LG, template="classic"
    )

    assert blocks_to_json(layout(resume, template)) == blocks_to_json(layout(restyled, template))


@pytest.mark.unit
def test_faulty_section_is_skipped(resume, modern, monkeypatch):
    def broken(self, entry, width, layout):
        raise RuntimeError("boom")

    monkeypatch.setattr(UnitComposer, "experience", broken)
    blocks = layout(resume, modern)

    assert not [b for b in blocks if b.section == "experience"]
    assert find(blocks, "edu-osu").kind == "education"


@pytest.mark.unit
def test_faulty_entry_leaves_siblings_rendered(modern, monkeypatch):
    original = UnitComposer.experience

    def broken_for_e1(self, entry, width, layout):
        if entry.id == "e1":
            raise RuntimeError("boom")
        return original(self, entry, width, layout)

    monkeypatch.setattr(UnitComposer, "experience", broken_for_e1)
    blocks = layout(resume_with_entries(3), modern)

    experience = [b.source_id for b in blocks if b.kind == "experience"]
    assert experience == ["e0", "e2"]
    assert find(blocks, "experience", kind="heading")


@pytest.mark.unit
def test_entry_with_missing_description_keeps_siblings(modern):
    data = resume_with_entries(2)
    data.experience[1].description = None

    blocks = layout(data, modern)

    assert find(blocks, "e0").kind == "experience"
    assert find(blocks, "experience", kind="heading")


@pytest.mark.unit
def test_cleared_description_still_renders_entry(modern):
    data = replace_field(resume_with_entries(2), "experience[e1].description", None)

    blocks = layout(data, modern)

    assert [b.source_id for b in blocks if b.kind == "experience"] == ["e0", "e1"]


@pytest.mark.unit
def test_current_entry_reads_present(modern):
    data = ResumeData(
        personal_info=PersonalInfo(full_name="Pat Lee"),
        experience=[
            ExperienceEntry(
                id="x",
                job_title="Engineer",
                company="Acme",
                start_date="2022-01",
                end_date="2023-06",
                current=True,
                achievements=["Shipped X"],
            )
        ],
    )
    entry = find(layout(data, modern), "x")

    texts = [f.text for f in entry.fragments]
    assert "Jan 2022 - Present" in texts
    assert [f.text for f in entry.fragments if f.role == "bullet"] == ["Shipped X"]
    assert len([d for d in entry.decorations if d.kind == "marker"]) == 1


@pytest.mark.unit
def test_personal_info_only_is_one_header_block(modern):
    data = ResumeData(personal_info=PersonalInfo(full_name="Pat Lee", email="pat@example.com"))
    blocks = layout(data, modern)

    assert [b.kind for b in blocks] == ["header"]
    assert page_count(blocks) == 1
    assert "Pat Lee" in blocks[0].text
