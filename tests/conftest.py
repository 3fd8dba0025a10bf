from __future__ import annotations

import fitz
import pytest

from submittal_packet.models import FetchResult, ProjectData, StatusFlags, SubmittalType

TEMPLATE_URL = "https://templates.example.com/Submittal%20Form.pdf"
BASE_URL = "https://docs.example.com/public/"


def pdf_payload(*page_texts: str) -> bytes:
    document = fitz.open()
    for text in page_texts:
        page = document.new_page()
        page.insert_text((72, 72), text)
    payload = document.tobytes()
    document.close()
    return payload


def _add_widget(page, name: str, field_type: int, rect: tuple) -> None:
    widget = fitz.Widget()
    widget.field_name = name
    widget.field_type = field_type
    widget.rect = fitz.Rect(rect)
    if field_type == fitz.PDF_WIDGET_TYPE_CHECKBOX:
        widget.field_value = False
    else:
        widget.field_value = ""
        widget.text_fontsize = 10
    page.add_widget(widget)


def template_payload() -> bytes:
    """A one-page interactive form using a mix of the naming styles vendors use."""
    document = fitz.open()
    page = document.new_page()
    text_fields = ["Project Name", "submittedTo", "Date", "Phone/Email", "prepared_by", "project_number"]
    for i, name in enumerate(text_fields):
        _add_widget(page, name, fitz.PDF_WIDGET_TYPE_TEXT, (200, 80 + 30 * i, 550, 100 + 30 * i))
    # Same name as a text mapping candidate, but a checkbox
    _add_widget(page, "Prepared By", fitz.PDF_WIDGET_TYPE_CHECKBOX, (50, 300, 62, 312))
    for i, name in enumerate(["For Review", "forApproval", "TDS", "warranty"]):
        _add_widget(page, name, fitz.PDF_WIDGET_TYPE_CHECKBOX, (50, 340 + 20 * i, 62, 352 + 20 * i))
    payload = document.tobytes()
    document.close()
    return payload


def png_payload() -> bytes:
    pixmap = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, 40, 20), False)
    pixmap.clear_with(120)
    return pixmap.tobytes("png")


def page_texts(pdf_bytes: bytes) -> list[str]:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as document:
        return [page.get_text() for page in document]


def corner_numbers(pdf_bytes: bytes) -> list[str]:
    """Text stamped in the bottom right corner of each page."""
    numbers = []
    with fitz.open(stream=pdf_bytes, filetype="pdf") as document:
        for page in document:
            width, height = page.rect.width, page.rect.height
            words = [
                w[4]
                for w in page.get_text("words")
                if w[0] >= width - 55 and w[1] >= height - 48 and w[3] <= height - 15
            ]
            numbers.append(" ".join(words))
    return numbers


class FakeFetcher:
    """Serves canned bytes by URL; anything unknown is a 404."""

    def __init__(self, responses: dict[str, bytes] | None = None) -> None:
        self.responses = dict(responses or {})
        self.calls: list[str] = []

    def __call__(self, url: str) -> FetchResult:
        self.calls.append(url)
        content = self.responses.get(url)
        if content is None:
            return FetchResult(url=url, error="HTTP 404 Not Found")
        return FetchResult(url=url, content=content)


@pytest.fixture
def project() -> ProjectData:
    return ProjectData(
        project_name="Oak Street Tower",
        submitted_to="Acme Architects",
        prepared_by="Jordan Lee",
        date="2025-10-01",
        email_address="jordan@example.com",
        phone_number="555-0100",
        product="MAXTERRA Floor Panels",
        project_number="P-2291",
        status=StatusFlags(for_review=True, for_record=True),
        submittal_type=SubmittalType(tds=True, warranty=False, other=True, other_text="Mock-up"),
    )


@pytest.fixture
def project_payload() -> dict:
    return {
        "projectName": "Oak St. Bldg #2",
        "submittedTo": "Acme Architects",
        "preparedBy": "Jordan Lee",
        "date": "2025-10-01",
        "projectNumber": "P-2291",
        "emailAddress": "jordan@example.com",
        "phoneNumber": "555-0100",
        "product": "MAXTERRA Floor Panels",
        "status": {"forReview": True, "forApproval": False, "forRecord": False, "forInformationOnly": True},
        "submittalType": {"tds": True, "msds": True, "other": True, "otherText": "Mock-up"},
    }
