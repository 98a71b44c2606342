import pytest

from resume_matcher.core.config import MIME_DOC, MIME_DOCX, MIME_PDF
from resume_matcher.core.exceptions import ExtractionError
from resume_matcher.services.text_extractor import (
    DOC_NOT_SUPPORTED_TEXT,
    UNSUPPORTED_FORMAT_TEXT,
    extract_text,
)


def test_extract_pdf(resume_pdf):
    result = extract_text(resume_pdf, MIME_PDF)
    assert "Software Engineer at Acme Corp" in result.text
    assert "jane.doe@example.com" in result.text
    assert result.page_count == 1


def test_extract_pdf_counts_pages(make_pdf):
    result = extract_text(make_pdf(["Jane Doe", "Software Engineer"], pages=3), MIME_PDF)
    assert result.page_count == 3
    assert result.text.count("Jane Doe") == 3


def test_extract_docx(resume_docx):
    result = extract_text(resume_docx, MIME_DOCX)
    assert result.text.splitlines()[0] == "Jane Doe"
    assert "Skills: Python, FastAPI, PostgreSQL, Docker" in result.text
    assert result.page_count is None


def test_doc_yields_fixed_explanation():
    assert extract_text(b"\xd0\xcf\x11\xe0 legacy word file", MIME_DOC).text == DOC_NOT_SUPPORTED_TEXT


def test_unknown_type_yields_fixed_explanation():
    assert extract_text(b"plain text", "text/plain").text == UNSUPPORTED_FORMAT_TEXT


@pytest.mark.parametrize("content_type", [MIME_PDF, MIME_DOCX])
def test_corrupt_document_raises(content_type):
    with pytest.raises(ExtractionError) as exc:
        extract_text(b"this is not a real document", content_type)
    assert exc.value.status_code == 400
    assert "Unable to parse resume content" in exc.value.message


def test_pdf_declared_as_docx_raises(resume_pdf):
    with pytest.raises(ExtractionError):
        extract_text(resume_pdf, MIME_DOCX)
