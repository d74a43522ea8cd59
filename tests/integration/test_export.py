"""
Integration tests for PDF export - lays out, renders and captures real PDFs
and reads them back with PyPDF2 and pdfplumber.
"""

import io

import pytest
from PyPDF2 import PdfReader

from folio.contexts.rendering import (
    CaptureSurface,
    ExportError,
    PageGeometry,
    PdfCaptureSurface,
    analyze_layout,
    export,
    export_filename,
    export_resume,
    layout,
    page_count,
)
from folio.contexts.templating import ResumeData, resolve_template
from folio.contexts.templating.resume_data_structure import ExperienceEntry
from folio.utils.pdf_processing import PDFDocument

TEMPLATE_IDS = ["modern", "classic", "creative", "executive"]


class FailingSurface(CaptureSurface):
    """Captures pages into a real PDF but fails on one page index."""

    def __init__(self, fail_on: int):
        self.fail_on = fail_on
        self.inner = PdfCaptureSurface()
        self.captured = []
        self.aborted = False

    def begin(self, page, page_total):
        self.inner.begin(page, page_total)

    def capture(self, page_node, index):
        if index == self.fail_on:
            raise RuntimeError("canvas lost")
        self.inner.capture(page_node, index)
        self.captured.append(index)

    def finish(self):
        return self.inner.finish()

    def abort(self):
        self.aborted = True
        self.inner.abort()


def long_resume(resume, extra=12):
    resume.experience.extend(
        ExperienceEntry(
            id=f"extra-{i}",
            job_title="Consultant",
            company=f"Client {i}",
            start_date="2010-01",
            end_date="2012-01",
            achievements=["Delivered a reporting pipeline for the finance team"] * 3,
        )
        for i in range(extra)
    )
    return resume


@pytest.mark.integration
@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_pdf_page_count_matches_layout(resume, template_id):
    long_resume(resume)
    template = resolve_template(template_id)
    blocks = layout(resume, template)

    artifact = export(blocks, resume.theme, title="Jane Doe Resume", template=template)
    reader = PdfReader(io.BytesIO(artifact.content))

    assert page_count(blocks) > 1
    assert len(reader.pages) == page_count(blocks) == artifact.page_count
    assert artifact.media_type == "application/pdf"
    assert artifact.content.startswith(b"%PDF")


@pytest.mark.integration
def test_pdf_contains_resume_text(resume):
    artifact = export_resume(resume)
    pdf = PDFDocument(artifact.content)

    assert pdf.contains("Jane Doe", page=1)
    assert pdf.contains("Senior Platform Engineer", page=1)
    assert pdf.contains("Oregon State University", page=1)


@pytest.mark.integration
@pytest.mark.parametrize("template_id", TEMPLATE_IDS)
def test_exported_pdf_matches_layout_diagnostics(resume, template_id):
    template = resolve_template(template_id)
    blocks = layout(resume, template)
    artifact = export(blocks, resume.theme, template=template)

    diagnostics = analyze_layout(blocks, pdf_source=artifact.content)
    assert diagnostics.actual_page_count == diagnostics.intended_page_count
    assert diagnostics.is_valid, diagnostics.get_inherited_issues()


@pytest.mark.integration
def test_export_resume_saves_sanitized_filename(resume, tmp_path):
    artifact = export_resume(resume, template_id="classic", output_dir=tmp_path)

    assert artifact.filename == "janedoeresume.pdf"
    saved = tmp_path / "janedoeresume.pdf"
    assert saved.exists()
    assert saved.read_bytes() == artifact.content


@pytest.mark.integration
def test_export_does_not_touch_input(resume):
    before = resume.to_json()
    export_resume(resume, template_id="executive")
    assert resume.to_json() == before


@pytest.mark.integration
def test_empty_resume_exports_one_page():
    artifact = export_resume(ResumeData.empty())
    assert artifact.page_count == 1
    assert artifact.filename == "resume.pdf"


@pytest.mark.integration
def test_a4_export(resume):
    artifact = export_resume(resume, page=PageGeometry.a4())
    reader = PdfReader(io.BytesIO(artifact.content))
    box = reader.pages[0].mediabox

    assert float(box.width) == pytest.approx(PageGeometry.a4().width)
    assert float(box.height) == pytest.approx(PageGeometry.a4().height)


@pytest.mark.integration
def test_capture_failure_aborts_whole_export(resume, modern, tmp_path):
    long_resume(resume)
    blocks = layout(resume, modern)
    surface = FailingSurface(fail_on=1)

    with pytest.raises(ExportError) as exc_info:
        export(blocks, resume.theme, template=modern, surface=surface)

    assert exc_info.value.page_index == 1
    assert isinstance(exc_info.value.cause, RuntimeError)
    assert surface.captured == [0]
    assert surface.aborted


@pytest.mark.integration
def test_failed_export_writes_nothing(resume, tmp_path):
    long_resume(resume)
    with pytest.raises(ExportError):
        export_resume(resume, output_dir=tmp_path, surface=FailingSurface(fail_on=0))
    assert list(tmp_path.iterdir()) == []


@pytest.mark.integration
@pytest.mark.parametrize(
    "title,expected",
    [
        ("Jane Doe Resume", "janedoeresume.pdf"),
        ("???", "resume.pdf"),
        (None, "resume.pdf"),
        ("Résumé: 2024/Final!", "rsum2024final.pdf"),
    ],
)
def test_export_filename(title, expected):
    assert export_filename(title) == expected


@pytest.mark.integration
def test_classic_rail_text_stays_in_rail(resume):
    classic = resolve_template("classic")
    blocks = layout(resume, classic)
    pdf = PDFDocument(export(blocks, resume.theme, template=classic).content)

    rail = [b for b in blocks if b.column == 0]
    span = (min(b.x for b in rail), max(b.x + b.width for b in rail))
    rail_text = pdf.get_character_stream(1, span)

    assert "oregonstateuniversity" in rail_text
    assert "seniorplatformengineer" not in rail_text
    assert pdf.get_text(1).count("\n") + 1 == len(pdf.get_lines(1))
