"""
Integration tests for the folio command line - runs each command through
typer's CliRunner against the shared fixtures.
"""

import importlib.util
import json
from pathlib import Path

import pytest
from omegaconf import OmegaConf
from typer.testing import CliRunner

from folio.utils.logger import reset_logger

CLI_PATH = Path(__file__).parents[2] / "scripts" / "folio_cli.py"

runner = CliRunner()


def load_cli():
    spec = importlib.util.spec_from_file_location("folio_cli", CLI_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def cli(tmp_path, monkeypatch):
    module = load_cli()
    monkeypatch.setattr(module, "LOGS_PATH", tmp_path / "logs")
    monkeypatch.setattr(module, "RESULTS_PATH", tmp_path / "results")
    yield module
    # Commands point loguru at the runner's streams
    reset_logger()


@pytest.fixture
def jane(fixtures_path):
    return str(fixtures_path / "jane_doe.yaml")


@pytest.mark.integration
def test_no_command_shows_help(cli):
    result = runner.invoke(cli.app, [])
    assert result.exit_code == 0
    assert "export" in result.output


@pytest.mark.integration
def test_templates_lists_catalog(cli):
    result = runner.invoke(cli.app, ["templates"])

    assert result.exit_code == 0
    for template_id in ("modern", "classic", "creative", "executive"):
        assert template_id in result.output
    assert result.output.index("modern") < result.output.index("executive")


@pytest.mark.integration
def test_layout_summary(cli, jane):
    result = runner.invoke(cli.app, ["layout", jane, "-t", "classic"])

    assert result.exit_code == 0, result.output
    assert "Pages: 1" in result.output
    assert "personal_info.contact" in result.output
    assert "No layout issues" in result.output


@pytest.mark.integration
def test_layout_json(cli, jane):
    result = runner.invoke(cli.app, ["layout", jane, "--json"])

    assert result.exit_code == 0
    assert '"source_id": "exp-acme"' in result.output


@pytest.mark.integration
def test_layout_missing_file(cli, tmp_path):
    result = runner.invoke(cli.app, ["layout", str(tmp_path / "nope.yaml")])
    assert result.exit_code == 1


@pytest.mark.integration
def test_preview_writes_html(cli, jane, tmp_path):
    output = tmp_path / "jane.html"
    result = runner.invoke(cli.app, ["preview", jane, "-o", str(output), "--no-controls"])

    assert result.exit_code == 0, result.output
    html = output.read_text(encoding="utf-8")
    assert "Jane Doe" in html
    assert 'data-controls="true"' not in html


@pytest.mark.integration
def test_preview_defaults_to_results_path(cli, jane, tmp_path):
    result = runner.invoke(cli.app, ["preview", jane, "-p", "colors_warm"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "results" / "jane_doe.html").exists()


@pytest.mark.integration
def test_preview_unknown_preset(cli, jane):
    result = runner.invoke(cli.app, ["preview", jane, "-p", "no_such_preset"])
    assert result.exit_code == 1


@pytest.mark.integration
def test_export_writes_pdf_and_log(cli, jane, tmp_path):
    out_dir = tmp_path / "pdf"
    result = runner.invoke(cli.app, ["export", jane, "-o", str(out_dir), "-t", "creative"])

    assert result.exit_code == 0, result.output
    assert "Export succeeded" in result.output
    assert (out_dir / "janedoeresume.pdf").read_bytes().startswith(b"%PDF")
    assert list((tmp_path / "logs").glob("export_*/render.log"))


@pytest.mark.integration
def test_export_bad_page_size(cli, jane):
    result = runner.invoke(cli.app, ["export", jane, "--page-size", "tabloid"])
    assert result.exit_code == 1


@pytest.mark.integration
def test_migrate_legacy_record(cli, fixtures_path, tmp_path):
    output = tmp_path / "fixed.json"
    result = runner.invoke(cli.app, ["migrate", str(fixtures_path / "legacy_record.json"), "-o", str(output)])

    assert result.exit_code == 0, result.output
    migrated = json.loads(output.read_text(encoding="utf-8"))
    assert [group["category"] for group in migrated["skills"]] == ["Technical", "Languages"]
    assert migrated["theme"]["template"] == "minimal"


@pytest.mark.integration
def test_migrate_to_yaml(cli, fixtures_path, tmp_path):
    output = tmp_path / "fixed.yaml"
    result = runner.invoke(cli.app, ["migrate", str(fixtures_path / "legacy_record.json"), "-o", str(output)])

    assert result.exit_code == 0, result.output
    loaded = OmegaConf.to_container(OmegaConf.load(output))
    assert loaded["custom_sections"][0]["title"] == "Volunteering"


@pytest.mark.integration
def test_analyze(cli, jane, tmp_path):
    job = tmp_path / "job.txt"
    job.write_text("Seeking a Python and Kubernetes engineer with AWS experience.", encoding="utf-8")
    result = runner.invoke(cli.app, ["analyze", jane, str(job)])

    assert result.exit_code == 0, result.output
    assert "Match score: 80/100" in result.output
    assert "AWS" in result.output


@pytest.mark.integration
def test_analyze_missing_job(cli, jane, tmp_path):
    result = runner.invoke(cli.app, ["analyze", jane, str(tmp_path / "job.txt")])
    assert result.exit_code == 1


@pytest.mark.integration
def test_templates_json(cli):
    result = runner.invoke(cli.app, ["templates", "--json"])

    assert result.exit_code == 0
    catalog = json.loads(result.stdout)
    assert [(t["id"], t["columns"]) for t in catalog] == [
        ("modern", 1),
        ("classic", 2),
        ("creative", 2),
        ("executive", 1),
    ]
