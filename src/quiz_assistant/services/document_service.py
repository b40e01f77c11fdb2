"""
Text extraction for attached PDF documents.
Used by completion backends that cannot ingest PDFs natively.
"""

import io
import logging
from typing import Optional

import pdfplumber

from quiz_assistant.domain.models import PdfAttachment

logger = logging.getLogger(__name__)


def extract_pdf_text(attachment: PdfAttachment, max_chars: Optional[int] = None) -> str:
    """
    Extract the text layer of a PDF.

    Args:
        attachment: Decoded PDF document
        max_chars: Truncate the result to this many characters

    Returns:
        Page texts joined by blank lines (empty if the PDF has no text layer
        or cannot be parsed)
    """
    try:
        with pdfplumber.open(io.BytesIO(attachment.data)) as pdf:
            pages = [page.extract_text() or "" for page in pdf.pages]
    except Exception as e:
        logger.warning(f"Could not extract text from PDF ({attachment.size} bytes): {e}")
        return ""

    text = "\n\n".join(page.strip() for page in pages if page.strip())

    if max_chars is not None and len(text) > max_chars:
        logger.info(f"Truncating extracted PDF text from {len(text)} to {max_chars} characters")
        text = text[:max_chars]

    return text
