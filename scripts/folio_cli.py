#!/usr/bin/env python3
"""
Resume Rendering CLI

Lays out, previews, exports and analyzes resumes stored as YAML or JSON.
Legacy records (flat skills, flat custom sections) are migrated on load.

Commands:
    templates - List the template catalog
    layout    - Paginate a resume and report its blocks and diagnostics
    preview   - Write the HTML preview of a resume
    export    - Export a resume to PDF
    migrate   - Rewrite a legacy resume record in canonical form
    analyze   - Score a resume against a job description (mock provider)

Examples:\n

    folio_cli.py templates                                   # Show available templates

    folio_cli.py layout data/jane.yaml --template classic    # Paginate with classic

    folio_cli.py export data/jane.yaml -p colors_warm        # Export with warm colors

    folio_cli.py analyze data/jane.yaml job.txt              # Keyword match analysis
"""

import asyncio
import json
import os
from pathlib import Path
from typing import List, Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from folio.contexts.assist import GenerationCoordinator, MockTextGenerator
from folio.contexts.assist.logger import setup_assist_logger
from folio.contexts.rendering import (
    ExportError,
    PageGeometry,
    PreviewSurface,
    analyze_layout,
    blocks_by_page,
    export_resume,
    layout,
    page_count,
)
from folio.contexts.rendering.logger import setup_rendering_logger
from folio.contexts.templating import (
    NormalizationResult,
    ResumeData,
    apply_theme_presets,
    list_templates,
    normalize_resume,
    resolve_template,
    validate_resume,
)
from folio.contexts.templating.exceptions import InvalidResumeStructureError, UnknownPresetError
from folio.contexts.templating.logger import setup_templating_logger
from folio.utils.logger import session_log_dir

load_dotenv()
LOGS_PATH = Path(os.getenv("FOLIO_LOGS_PATH", "outs/logs"))
RESULTS_PATH = Path(os.getenv("FOLIO_RESULTS_PATH", "outs/results"))

PAGE_SIZES = {"letter": PageGeometry.letter, "a4": PageGeometry.a4}


app = typer.Typer(
    help="Lay out, preview and export resumes",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


# =============================================================================
# Helpers
# =============================================================================


def load_resume(resume_path: Path) -> NormalizationResult:
    """Load a YAML or JSON resume file (top-level `data` key optional) and normalize it."""
    if not resume_path.exists():
        typer.secho(f"Error: File not found: {resume_path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if resume_path.suffix.lower() == ".json":
        raw = json.loads(resume_path.read_text(encoding="utf-8"))
    else:
        raw = OmegaConf.to_container(OmegaConf.load(resume_path), resolve=True)
    if isinstance(raw, dict) and isinstance(raw.get("data"), dict):
        raw = raw["data"]

    try:
        return normalize_resume(raw)
    except InvalidResumeStructureError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def themed(data: ResumeData, presets: Optional[List[str]]) -> ResumeData:
    """Apply theme presets to the resume's theme, exiting on unknown names."""
    if not presets:
        return data
    try:
        theme = apply_theme_presets(data.theme, presets)
    except UnknownPresetError as e:
        typer.secho(f"Error: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    data.theme = theme
    return data


def page_geometry(page_size: str) -> PageGeometry:
    factory = PAGE_SIZES.get(page_size.lower())
    if factory is None:
        typer.secho(
            f"Error: Unknown page size '{page_size}'. Must be one of {sorted(PAGE_SIZES)}",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)
    return factory()


TemplateOption = Annotated[
    Optional[str],
    typer.Option("--template", "-t", help="Template id (defaults to the resume theme's template)"),
]
PresetOption = Annotated[
    Optional[List[str]],
    typer.Option("--preset", "-p", help="Theme preset to apply (repeatable, e.g. colors_warm)"),
]
PageOption = Annotated[
    str,
    typer.Option("--page-size", help="Page size: letter or a4"),
]


# =============================================================================
# Commands
# =============================================================================


@app.command("templates")
def templates_command(
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the catalog as JSON"),
    ] = False,
):
    """
    List available templates in display order.

    Examples:\n
        $ folio_cli.py templates

        $ folio_cli.py templates --json
    """
    if as_json:
        typer.echo(json.dumps([template.summary() for template in list_templates()], indent=2))
        return

    for template in list_templates():
        typer.secho(f"{template.id}", fg=typer.colors.BLUE, bold=True, nl=False)
        typer.echo(f"  {template.name} ({template.column_count} column)")
        typer.echo(f"    {template.description}")
        if template.features:
            typer.echo(f"    Features: {', '.join(template.features)}")


@app.command("layout")
def layout_command(
    resume_path: Annotated[Path, typer.Argument(help="Resume YAML or JSON file")],
    template_id: TemplateOption = None,
    page_size: PageOption = "letter",
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the blocks as JSON instead of a summary"),
    ] = False,
):
    """
    Paginate a resume and report where each block landed.

    Examples:\n
        $ folio_cli.py layout jane.yaml                    # Summary per page

        $ folio_cli.py layout jane.yaml -t classic --json  # Full block list
    """
    data = load_resume(resume_path).data
    template = resolve_template(template_id or data.theme.template)
    page = page_geometry(page_size)
    blocks = layout(data, template, page)

    if as_json:
        typer.echo(json.dumps([block.to_dict() for block in blocks], indent=2))
        return

    typer.secho(f"\nLayout: {resume_path.name} ({template.id})", fg=typer.colors.BLUE, bold=True)
    typer.echo(f"Pages: {page_count(blocks)}")
    for index, page_blocks in blocks_by_page(blocks).items():
        typer.secho(f"\nPage {index + 1}", bold=True)
        for block in page_blocks:
            marker = " (overflow)" if block.overflow else ""
            typer.echo(
                f"  [{block.region}.{block.column}] {block.kind:<12} y={block.y:7.2f} "
                f"h={block.height:7.2f}  {block.source_id}{marker}"
            )

    diagnostics = analyze_layout(blocks, page)
    issues = diagnostics.get_inherited_issues()
    if issues:
        typer.secho(f"\n✗ {len(issues)} layout issue(s)", fg=typer.colors.YELLOW, bold=True)
        for issue in issues:
            typer.secho(f"  - {issue}", fg=typer.colors.YELLOW)
    else:
        typer.secho("\n✓ No layout issues", fg=typer.colors.GREEN, bold=True)

    validation = validate_resume(data)
    if validation:
        typer.echo(f"\nValidation notes ({len(validation)}):")
        for issue in validation:
            typer.echo(f"  - {issue}")
    typer.echo("")


@app.command("preview")
def preview_command(
    resume_path: Annotated[Path, typer.Argument(help="Resume YAML or JSON file")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="HTML output path (defaults to <results>/<stem>.html)"),
    ] = None,
    template_id: TemplateOption = None,
    presets: PresetOption = None,
    page_size: PageOption = "letter",
    no_controls: Annotated[
        bool,
        typer.Option("--no-controls", help="Hide the editing toolbar (public view)"),
    ] = False,
):
    """
    Write the HTML preview of a resume.

    Examples:\n
        $ folio_cli.py preview jane.yaml -o jane.html

        $ folio_cli.py preview jane.yaml --no-controls -p fonts_serif
    """
    data = themed(load_resume(resume_path).data, presets)
    surface = PreviewSurface(page=page_geometry(page_size))
    state = surface.update(data, template_id=template_id)

    output = output or RESULTS_PATH / f"{resume_path.stem}.html"
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(surface.html(interactive=not no_controls), encoding="utf-8")

    typer.secho(f"✓ Preview written ({state.template_id})", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Pages: {surface.page_count}")
    typer.echo(f"  HTML: {output}")


@app.command("export")
def export_command(
    resume_path: Annotated[Path, typer.Argument(help="Resume YAML or JSON file")],
    output_dir: Annotated[
        Optional[Path],
        typer.Option("--output-dir", "-o", help="Directory for the PDF (defaults to FOLIO_RESULTS_PATH)"),
    ] = None,
    title: Annotated[
        Optional[str],
        typer.Option("--title", help="Resume title used for the filename (defaults to '<name> Resume')"),
    ] = None,
    template_id: TemplateOption = None,
    presets: PresetOption = None,
    page_size: PageOption = "letter",
):
    """
    Export a resume to PDF.

    Logs are written to a timestamped directory under FOLIO_LOGS_PATH.

    Examples:\n
        $ folio_cli.py export jane.yaml                         # Default template

        $ folio_cli.py export jane.yaml -t executive -p colors_slate
    """
    result = load_resume(resume_path)
    data = themed(result.data, presets)
    page = page_geometry(page_size)
    output_dir = output_dir or RESULTS_PATH

    log_dir = session_log_dir(LOGS_PATH, "export")
    log_file = setup_rendering_logger(log_dir, template_id=template_id or data.theme.template)

    typer.secho(f"\nExporting: {resume_path.name}", fg=typer.colors.BLUE, bold=True)
    if result.migrated:
        typer.echo(f"Migrated legacy shapes: {len(result.changes)}")
    typer.echo("")

    try:
        artifact = export_resume(data, template_id=template_id, title=title, page=page, output_dir=output_dir)
    except ExportError as e:
        typer.secho(f"✗ Export failed: {e}", fg=typer.colors.RED, bold=True, err=True)
        typer.echo(f"  Log: {log_file}")
        raise typer.Exit(code=1)

    typer.echo("")
    typer.secho("✓ Export succeeded", fg=typer.colors.GREEN, bold=True)
    typer.echo(f"  Pages: {artifact.page_count}")
    typer.echo(f"  PDF: {output_dir / artifact.filename}")
    typer.echo(f"  Log: {log_file}")
    typer.echo("")


@app.command("migrate")
def migrate_command(
    resume_path: Annotated[Path, typer.Argument(help="Stored resume record (YAML or JSON)")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output path (.json or .yaml; defaults to printing JSON)"),
    ] = None,
    log: Annotated[
        bool,
        typer.Option("--log", help="Write a migration log under FOLIO_LOGS_PATH"),
    ] = False,
):
    """
    Rewrite legacy skill and custom-section shapes into canonical form.

    Examples:\n
        $ folio_cli.py migrate old_record.json                 # Print canonical JSON

        $ folio_cli.py migrate old_record.json -o fixed.yaml   # Write YAML
    """
    if log:
        setup_templating_logger(session_log_dir(LOGS_PATH, "migrate"), phase="migrate")

    result = load_resume(resume_path)

    if result.migrated:
        typer.secho(f"Migrated {len(result.changes)} legacy shape(s):", fg=typer.colors.YELLOW, err=True)
        for change in result.changes:
            typer.echo(f"  - {change}", err=True)
    else:
        typer.secho("Already canonical; nothing to migrate", fg=typer.colors.GREEN, err=True)

    if output is None:
        typer.echo(result.data.to_json(indent=2))
        return

    output.parent.mkdir(parents=True, exist_ok=True)
    if output.suffix.lower() in (".yaml", ".yml"):
        output.write_text(OmegaConf.to_yaml(OmegaConf.create(result.data.to_dict())), encoding="utf-8")
    else:
        output.write_text(result.data.to_json(indent=2), encoding="utf-8")
    typer.echo(f"Saved: {output}", err=True)


@app.command("analyze")
def analyze_command(
    resume_path: Annotated[Path, typer.Argument(help="Resume YAML or JSON file")],
    job_path: Annotated[Path, typer.Argument(help="Plain-text job description")],
    log: Annotated[
        bool,
        typer.Option("--log", help="Write an assist log under FOLIO_LOGS_PATH"),
    ] = False,
):
    """
    Score a resume against a job description with the mock provider.

    Examples:\n
        $ folio_cli.py analyze jane.yaml job.txt
    """
    if not job_path.exists():
        typer.secho(f"Error: File not found: {job_path}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if log:
        setup_assist_logger(session_log_dir(LOGS_PATH, "analyze"), provider=MockTextGenerator.name)

    data = load_resume(resume_path).data
    coordinator = GenerationCoordinator(data, MockTextGenerator())
    analysis = asyncio.run(coordinator.analyze(job_path.read_text(encoding="utf-8")))

    if analysis is None:
        for notification in coordinator.active_notifications:
            typer.secho(f"✗ {notification.title}", fg=typer.colors.RED, bold=True, err=True)
        raise typer.Exit(code=1)

    color = typer.colors.GREEN if analysis.score >= 70 else typer.colors.YELLOW
    typer.secho(f"\nMatch score: {analysis.score}/100", fg=color, bold=True)
    if analysis.strengths:
        typer.echo(f"  Strengths: {', '.join(analysis.strengths)}")
    if analysis.missing_keywords:
        typer.echo(f"  Missing: {', '.join(analysis.missing_keywords)}")
    typer.echo("\nSuggestions:")
    for suggestion in analysis.suggestions:
        typer.echo(f"  - {suggestion}")
    typer.echo("")


if __name__ == "__main__":
    app()
