"""Unit tests for text measurement and wrapping."""

import pytest

from folio.contexts.rendering.measure import TextMeasurer, pdf_safe_text, text_width

FONT = "Helvetica"
SIZE = 10


@pytest.mark.unit
def test_blank_text_has_no_lines():
    measurer = TextMeasurer()
    assert measurer.wrap("", FONT, SIZE, 200) == []
    assert measurer.wrap("   \n  ", FONT, SIZE, 200) == []
    assert measurer.wrap(None, FONT, SIZE, 200) == []


@pytest.mark.unit
def test_lines_fit_the_width():
    text = "Designed the schema registry used by fourteen product teams across three business units"
    lines = TextMeasurer().wrap(text, FONT, SIZE, 150)

    assert len(lines) > 1
    assert all(text_width(line, FONT, SIZE) <= 150 for line in lines)
    assert " ".join(lines) == text


@pytest.mark.unit
def test_short_text_is_one_line():
    assert TextMeasurer().wrap("Python", FONT, SIZE, 200) == ["Python"]


@pytest.mark.unit
def test_newlines_start_new_lines():
    assert TextMeasurer().wrap("first\n\nsecond", FONT, SIZE, 400) == ["first", "second"]


@pytest.mark.unit
def test_long_words_are_broken():
    word = "x" * 200
    lines = TextMeasurer().wrap(word, FONT, SIZE, 60)

    assert len(lines) > 1
    assert "".join(lines) == word
    assert all(text_width(line, FONT, SIZE) <= 60 for line in lines)


@pytest.mark.unit
def test_wrapping_is_deterministic():
    measurer = TextMeasurer()
    text = "Cut nightly batch runtime from 6 hours to 40 minutes by moving joins into the warehouse"
    assert measurer.wrap(text, FONT, SIZE, 180) == TextMeasurer().wrap(text, FONT, SIZE, 180.0)


@pytest.mark.unit
def test_pdf_safe_text():
    assert pdf_safe_text("Résumé – “quoted”") == "Résumé – “quoted”"
    assert pdf_safe_text("→ 日本") == "? ??"


@pytest.mark.unit
def test_serif_metrics_are_narrower():
    sample = "Professional Experience"
    assert text_width(sample, "Times-Roman", SIZE) < text_width(sample, "Helvetica", SIZE)
