import base64

import pytest

from quiz_assistant.core.exceptions import DocumentError
from quiz_assistant.domain.models import EducationLevel, PdfAttachment

from .conftest import PDF_BYTES, PDF_DATA_URI


def test_pdf_attachment_decodes_data_uri():
    attachment = PdfAttachment.from_data_uri(PDF_DATA_URI)

    assert attachment.mime_type == "application/pdf"
    assert attachment.data == PDF_BYTES
    assert attachment.size == len(PDF_BYTES)
    assert attachment.to_data_uri() == PDF_DATA_URI


def test_pdf_attachment_accepts_media_type_parameters():
    encoded = base64.b64encode(PDF_BYTES).decode("ascii")
    attachment = PdfAttachment.from_data_uri(f"data:application/pdf;name=notes.pdf;base64,{encoded}")

    assert attachment.data == PDF_BYTES


@pytest.mark.parametrize(
    "uri",
    [
        "not a data uri",
        "data:application/pdf,%PDF-1.4",
        "data:image/png;base64," + base64.b64encode(PDF_BYTES).decode("ascii"),
        "data:application/pdf;base64,@@not-base64@@",
        "data:application/pdf;base64," + base64.b64encode(b"plain text").decode("ascii"),
    ],
)
def test_pdf_attachment_rejects_invalid_uris(uri):
    with pytest.raises(DocumentError):
        PdfAttachment.from_data_uri(uri)


def test_document_error_is_a_value_error():
    assert issubclass(DocumentError, ValueError)


@pytest.mark.parametrize(
    "level, lenient, strict",
    [
        (EducationLevel.PRESCHOOL, True, False),
        (EducationLevel.ELEMENTARY_SCHOOL, True, False),
        (EducationLevel.MIDDLE_SCHOOL, True, False),
        (EducationLevel.HIGH_SCHOOL, False, False),
        (EducationLevel.COLLEGE, False, True),
        (EducationLevel.GRADUATE, False, True),
        (EducationLevel.PHD, False, True),
    ],
)
def test_education_level_tiers(level, lenient, strict):
    assert level.is_lenient is lenient
    assert level.is_strict is strict


def test_education_level_formats_as_value():
    assert f"{EducationLevel.ELEMENTARY_SCHOOL}" == "ElementarySchool"
