import io
import logging
from dataclasses import dataclass
from typing import Optional

import PyPDF2
import docx

from resume_matcher.core.config import MIME_DOC, MIME_DOCX, MIME_PDF
from resume_matcher.core.exceptions import ExtractionError

logger = logging.getLogger(__name__)

DOC_NOT_SUPPORTED_TEXT = (
    "DOC file format not fully supported. Please convert to DOCX or PDF for better results."
)
UNSUPPORTED_FORMAT_TEXT = "Unsupported file format for text extraction."


@dataclass
class ExtractedText:
    text: str
    page_count: Optional[int] = None


def _extract_pdf(data: bytes) -> ExtractedText:
    reader = PyPDF2.PdfReader(io.BytesIO(data))
    if reader.is_encrypted:
        raise ValueError("PDF is password protected")
    pages = [page.extract_text() or "" for page in reader.pages]
    return ExtractedText(text="\n".join(pages), page_count=len(reader.pages))


def _extract_docx(data: bytes) -> ExtractedText:
    document = docx.Document(io.BytesIO(data))
    return ExtractedText(text="\n".join(p.text for p in document.paragraphs))


def extract_text(data: bytes, content_type: str) -> ExtractedText:
    """
    Extract plain text from resume bytes based on the declared content type.

    Legacy .doc and unknown types yield a fixed explanatory text rather than
    an error. Parse failures raise ExtractionError, never an empty result.
    """
    try:
        if content_type == MIME_PDF:
            result = _extract_pdf(data)
        elif content_type == MIME_DOCX:
            result = _extract_docx(data)
        elif content_type == MIME_DOC:
            return ExtractedText(text=DOC_NOT_SUPPORTED_TEXT)
        else:
            return ExtractedText(text=UNSUPPORTED_FORMAT_TEXT)
    except Exception as e:
        logger.warning(f"Failed to parse {content_type} document: {e}")
        raise ExtractionError() from e

    logger.info(f"Extracted {len(result.text)} chars from {content_type} (pages={result.page_count})")
    return result
