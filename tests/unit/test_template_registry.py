"""Unit tests for the template registry and template definitions."""

from pathlib import Path

import pytest

from folio.contexts.templating import TemplateId, TemplateRegistry, list_templates, resolve_template
from folio.contexts.templating.template_registry import TEXT_ROLES, TemplateDefinition


@pytest.mark.unit
def test_template_registry_init():
    registry = TemplateRegistry()
    assert registry.templates_path.exists()
    assert registry._cache == {}


@pytest.mark.unit
def test_every_template_id_has_a_definition():
    registry = TemplateRegistry()
    assert registry.available_ids() == sorted(t.value for t in TemplateId)
    for template_id in TemplateId:
        definition = registry.get_template(template_id.value)
        assert definition.id == template_id.value
        assert set(TEXT_ROLES) <= set(definition.typography)


@pytest.mark.unit
def test_template_caching():
    registry = TemplateRegistry()

    template1 = registry.get_template("classic")
    assert registry.is_cached("classic")

    template2 = registry.get_template("classic")
    assert template1 is template2


@pytest.mark.unit
def test_clear_cache():
    registry = TemplateRegistry()
    registry.get_template("modern")
    assert len(registry._cache) == 1

    registry.clear_cache()
    assert len(registry._cache) == 0


@pytest.mark.unit
def test_get_template_not_found():
    registry = TemplateRegistry()
    with pytest.raises(FileNotFoundError):
        registry.get_template("nonexistent")


@pytest.mark.unit
def test_get_template_path():
    path = TemplateRegistry().get_template_path("executive")
    assert isinstance(path, Path)
    assert path.name == "executive.yaml"


@pytest.mark.unit
@pytest.mark.parametrize("template_id", ["minimal", "", None, "../modern", "unknown"])
def test_resolve_fails_closed_to_default(template_id):
    assert resolve_template(template_id).id == "modern"


@pytest.mark.unit
def test_registry_default_can_be_overridden():
    registry = TemplateRegistry(default_id="classic")
    assert registry.resolve("minimal").id == "classic"


@pytest.mark.unit
def test_catalog_display_order():
    catalog = list_templates()
    assert [t.id for t in catalog] == ["modern", "classic", "creative", "executive"]
    assert all(t.name and t.description and t.features for t in catalog)


@pytest.mark.unit
@pytest.mark.parametrize(
    "template_id, columns",
    [("modern", 1), ("classic", 2), ("creative", 2), ("executive", 1)],
)
def test_column_count(template_id, columns):
    assert resolve_template(template_id).column_count == columns


@pytest.mark.unit
def test_section_placement():
    classic = resolve_template("classic")
    assert classic.regions[0].columns[0].sections == ["contact", "skills", "education", "achievements"]
    assert classic.regions[0].columns[1].sections == ["header", "experience", "custom"]

    executive = resolve_template("executive")
    assert [r.kind for r in executive.regions] == ["full", "split"]
    assert executive.regions[0].columns[0].sections == ["header", "experience"]
    assert executive.sections().index("experience") < executive.sections().index("education")


@pytest.mark.unit
def test_templates_differ_in_more_than_palette():
    catalog = {t.id: t for t in list_templates()}
    fonts = {t.style("body").font for t in catalog.values()}
    displays = {t.skills["display"] for t in catalog.values()}
    assert len(fonts) > 1
    assert len(displays) > 1


@pytest.mark.unit
def test_executive_titles_are_upper_case():
    executive = resolve_template("executive")
    assert executive.title_for("skills") == "CORE COMPETENCIES"
    assert executive.title_for("achievements") == "HONORS & AWARDS"


@pytest.mark.unit
def test_from_dict_rejects_bad_definitions():
    raw = TemplateRegistry().get_template("modern")
    base = {
        "id": "broken",
        "palette": raw.palette,
        "typography": {role: {"font": "Helvetica", "size": 10} for role in TEXT_ROLES},
        "regions": [{"kind": "split", "columns": [{"sections": ["header"]}]}],
    }
    with pytest.raises(ValueError):
        TemplateDefinition.from_dict(base)

    base["regions"] = [{"kind": "full", "columns": [{"sections": ["hobbies"]}]}]
    with pytest.raises(ValueError):
        TemplateDefinition.from_dict(base)

    base["regions"] = [{"kind": "full", "columns": [{"sections": ["header"]}]}]
    base["typography"] = {"name": {"font": "Helvetica", "size": 20}}
    with pytest.raises(ValueError):
        TemplateDefinition.from_dict(base)


@pytest.mark.unit
def test_custom_templates_path(tmp_path):
    source = TemplateRegistry().get_template_path("modern")
    (tmp_path / "plain.yaml").write_text(
        source.read_text(encoding="utf-8").replace("id: modern", "id: plain"), encoding="utf-8"
    )
    registry = TemplateRegistry(templates_path=tmp_path, default_id="plain")
    assert registry.available_ids() == ["plain"]
    assert registry.resolve("modern").id == "plain"
