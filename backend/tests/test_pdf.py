"""Tests for worksheet PDF export."""
import pytest

from soroban.models.rule_config import RuleConfig
from soroban.services.pdf import PDF_TYPES, _sanitize_text, get_pdf_service, worksheet_title
from soroban.services.worksheet import generate_worksheet


@pytest.fixture(scope="module")
def worksheet():
    config = RuleConfig(family="brothers", digits=[3, 4], steps=5)
    return generate_worksheet(config, examples_count=12, show_answers=True, seed=7)


class TestGenerateWorksheetPdf:
    @pytest.mark.parametrize("pdf_type", PDF_TYPES)
    def test_renders_pdf_bytes(self, worksheet, pdf_type):
        data = get_pdf_service().generate_worksheet_pdf(worksheet, pdf_type=pdf_type)
        assert data.startswith(b"%PDF")
        assert len(data) > 1000

    def test_full_is_larger_than_student(self, worksheet):
        service = get_pdf_service()
        full = service.generate_worksheet_pdf(worksheet, pdf_type="full")
        student = service.generate_worksheet_pdf(worksheet, pdf_type="student")
        assert len(full) > len(student)

    def test_bad_type(self, worksheet):
        with pytest.raises(ValueError):
            get_pdf_service().generate_worksheet_pdf(worksheet, pdf_type="poster")

    def test_empty_worksheet(self):
        data = get_pdf_service().generate_worksheet_pdf({"examples": []}, pdf_type="student")
        assert data.startswith(b"%PDF")


class TestHelpers:
    def test_sanitize(self):
        assert _sanitize_text("3 − 2 – 1 — 0…") == "3 - 2 - 1 - 0..."
        assert _sanitize_text("") == ""

    def test_title_from_settings(self, worksheet):
        assert worksheet_title(worksheet) == "Brothers: 3, 4"

    def test_title_simple(self):
        assert worksheet_title({"settings": {"family": "simple", "digits": [1, 2]}}) == "Simple practice"

    def test_explicit_title(self):
        assert worksheet_title({"title": "Homework 3"}) == "Homework 3"
