"""
Domain models for the Knowledge Quiz Assistant.
Core enumerations and the PDF attachment entity, separate from transport DTOs.
"""

import base64
import binascii
import re
from enum import StrEnum

from pydantic import BaseModel, Field

from quiz_assistant.core.exceptions import DocumentError

PDF_MIME_TYPE = "application/pdf"

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)(?P<params>(?:;[\w.+-]+=[^;,]*)*);base64,(?P<data>.*)$",
    re.DOTALL,
)


class EducationLevel(StrEnum):
    """Audience-maturity tier controlling scoring strictness and tone."""

    PRESCHOOL = "Preschool"
    ELEMENTARY_SCHOOL = "ElementarySchool"
    MIDDLE_SCHOOL = "MiddleSchool"
    HIGH_SCHOOL = "HighSchool"
    COLLEGE = "College"
    GRADUATE = "Graduate"
    PHD = "PhD"

    @property
    def is_lenient(self) -> bool:
        return self in _LENIENT_LEVELS

    @property
    def is_strict(self) -> bool:
        return self in _STRICT_LEVELS


_LENIENT_LEVELS = frozenset(
    {EducationLevel.PRESCHOOL, EducationLevel.ELEMENTARY_SCHOOL, EducationLevel.MIDDLE_SCHOOL}
)
_STRICT_LEVELS = frozenset({EducationLevel.COLLEGE, EducationLevel.GRADUATE, EducationLevel.PHD})


class SupportedLanguage(StrEnum):
    """Languages the flows can answer in."""

    ENGLISH = "English"
    SPANISH = "Spanish"
    FRENCH = "French"
    GERMAN = "German"
    ITALIAN = "Italian"
    PORTUGUESE = "Portuguese"
    DUTCH = "Dutch"
    RUSSIAN = "Russian"
    CHINESE = "Chinese"
    JAPANESE = "Japanese"
    KOREAN = "Korean"
    ARABIC = "Arabic"
    HINDI = "Hindi"


DEFAULT_LANGUAGE = SupportedLanguage.ENGLISH


class PdfAttachment(BaseModel):
    """A decoded PDF document supplied by the user for grounding."""

    mime_type: str = Field(PDF_MIME_TYPE, description="Document MIME type")
    data: bytes = Field(..., description="Raw document bytes")

    @classmethod
    def from_data_uri(cls, uri: str) -> "PdfAttachment":
        """
        Decode a ``data:application/pdf;base64,<data>`` URI.

        Raises:
            DocumentError: if the URI is not a base64 PDF data URI
        """
        match = _DATA_URI_RE.match(uri.strip())
        if not match:
            raise DocumentError("Expected a data URI of the form 'data:application/pdf;base64,<data>'")

        mime_type = match.group("mime").lower()
        if mime_type != PDF_MIME_TYPE:
            raise DocumentError(f"Unsupported document type '{mime_type}', expected {PDF_MIME_TYPE}")

        try:
            data = base64.b64decode(match.group("data"), validate=True)
        except (binascii.Error, ValueError) as e:
            raise DocumentError(f"Document is not valid base64: {e}") from e

        if not data.startswith(b"%PDF"):
            raise DocumentError("Document content is not a PDF")

        return cls(mime_type=mime_type, data=data)

    @property
    def size(self) -> int:
        return len(self.data)

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"
