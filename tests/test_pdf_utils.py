from __future__ import annotations

from io import BytesIO

import fitz
import pytest
from PyPDF2 import PdfWriter

from conftest import BASE_URL, TEMPLATE_URL, FakeFetcher, corner_numbers, page_texts, pdf_payload, template_payload
from submittal_packet.errors import PacketGenerationError
from submittal_packet.models import DocumentRequest
from submittal_packet.utils import pdf_utils
from submittal_packet.utils.fetch_utils import BrandImages
from submittal_packet.utils.pdf_utils import build_packet, merge_document, number_pages, packet_filename


def _doc(name: str, url: str, doc_type: str = "TDS") -> DocumentRequest:
    return DocumentRequest(id=name.lower().replace(" ", "-"), name=name, type=doc_type, url=url)


def _writer_bytes(writer: PdfWriter) -> bytes:
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.mark.parametrize(
    ("project_name", "expected"),
    [
        ("Oak St. Bldg #2", "OakStBldg2_Packet.pdf"),
        ("Harbor View", "HarborView_Packet.pdf"),
        ("Café / Lobby (Phase-1)", "CafLobbyPhase1_Packet.pdf"),
    ],
)
def test_packet_filename_strips_non_alphanumerics(project_name: str, expected: str) -> None:
    assert packet_filename(project_name) == expected


def test_merge_document_appends_divider_then_pages_in_order() -> None:
    fetcher = FakeFetcher({BASE_URL + "TDS/Floor%20Panels.pdf": pdf_payload("alpha", "beta", "gamma")})
    writer = PdfWriter()

    next_page, issues = merge_document(
        writer, _doc("Floor Panels TDS", "TDS/Floor Panels.pdf"), 4, BrandImages(fetcher),
        fetcher=fetcher, base_url=BASE_URL,
    )

    texts = page_texts(_writer_bytes(writer))
    assert next_page == 8
    assert issues == []
    assert len(texts) == 4
    assert "Floor Panels TDS" in texts[0] and "Page 4" in texts[0]
    assert ["alpha" in texts[1], "beta" in texts[2], "gamma" in texts[3]] == [True, True, True]


def test_merge_document_adds_error_page_when_fetch_fails() -> None:
    fetcher = FakeFetcher()
    writer = PdfWriter()

    next_page, issues = merge_document(
        writer, _doc("ESR Report", "ESR/report.pdf", "ESR"), 2, BrandImages(fetcher),
        fetcher=fetcher, base_url=BASE_URL,
    )

    texts = page_texts(_writer_bytes(writer))
    assert next_page == 4
    assert len(texts) == 2
    assert "Error: Document could not be loaded" in texts[1]
    assert [(i.document_name, i.message) for i in issues] == [("ESR Report", "Document could not be loaded")]


def test_merge_document_adds_error_page_when_document_is_corrupt() -> None:
    fetcher = FakeFetcher({BASE_URL + "broken.pdf": b"this is not a pdf at all"})
    writer = PdfWriter()

    next_page, issues = merge_document(
        writer, _doc("Broken Guide", "broken.pdf"), 1, BrandImages(fetcher),
        fetcher=fetcher, base_url=BASE_URL,
    )

    texts = page_texts(_writer_bytes(writer))
    assert next_page == 3
    assert len(texts) == 2
    assert "Error: Document processing failed" in texts[1]
    assert issues[0].message == "Document processing failed"


def test_merge_document_replaces_only_the_failed_page(monkeypatch: pytest.MonkeyPatch) -> None:
    original_copy = pdf_utils.copy_source_page

    def flaky_copy(writer, reader, index):
        if index == 1:
            return "PdfReadError: invalid page tree"
        return original_copy(writer, reader, index)

    monkeypatch.setattr(pdf_utils, "copy_source_page", flaky_copy)
    fetcher = FakeFetcher({
        BASE_URL + "a.pdf": pdf_payload("first page", "second page"),
        BASE_URL + "b.pdf": pdf_payload("next document"),
    })
    writer = PdfWriter()
    images = BrandImages(fetcher)

    next_page, issues = merge_document(writer, _doc("Doc A", "a.pdf"), 1, images, fetcher=fetcher, base_url=BASE_URL)
    next_page, _ = merge_document(writer, _doc("Doc B", "b.pdf"), next_page, images, fetcher=fetcher, base_url=BASE_URL)

    texts = page_texts(_writer_bytes(writer))
    assert len(texts) == 5
    assert "first page" in texts[1]
    assert "Doc A" in texts[2] and "Error: Page 2 could not be processed" in texts[2]
    assert "Doc B" in texts[3] and "Page 4" in texts[3]
    assert "next document" in texts[4]
    assert [i.message for i in issues] == ["Page 2 could not be processed"]
    assert next_page == 6


def test_copy_source_page_reports_failure_instead_of_raising() -> None:
    class _BrokenPages:
        def __getitem__(self, index):
            raise ValueError("bad xref")

    class _BrokenReader:
        pages = _BrokenPages()

    writer = PdfWriter()

    error = pdf_utils.copy_source_page(writer, _BrokenReader(), 0)

    assert error == "ValueError: bad xref"
    assert len(writer.pages) == 0


def test_number_pages_stamps_every_page_once() -> None:
    numbered, page_count = number_pages(pdf_payload("first source page", "second source page", "third source page"))

    assert page_count == 3
    assert corner_numbers(numbered) == ["1", "2", "3"]
    texts = page_texts(numbered)
    assert ["first" in texts[0], "second" in texts[1], "third" in texts[2]] == [True, True, True]


def test_numbered_packet_keeps_merged_page_content(project) -> None:
    fetcher = FakeFetcher({BASE_URL + "a.pdf": pdf_payload("alpha", "beta")})

    result = build_packet(
        project, [_doc("Doc A", "a.pdf")], fetcher=fetcher, template_url=TEMPLATE_URL, base_url=BASE_URL
    )

    with fitz.open(stream=result.pdf_bytes, filetype="pdf") as doc:
        assert doc.is_pdf and len(doc) == 4
        texts = [page.get_text() for page in doc]
    assert "Oak Street Tower" in texts[0]
    assert "Doc A" in texts[1]
    assert "alpha" in texts[2] and "beta" in texts[3]
    assert corner_numbers(result.pdf_bytes) == ["1", "2", "3", "4"]


def test_build_packet_page_count_and_numbering(project) -> None:
    fetcher = FakeFetcher({
        TEMPLATE_URL: template_payload(),
        BASE_URL + "TDS/tds.pdf": pdf_payload("tds one", "tds two", "tds three"),
    })
    documents = [
        _doc("Technical Data Sheet", "TDS/tds.pdf"),
        _doc("Warranty", "warranty/missing.pdf", "warranty"),
    ]

    result = build_packet(project, documents, fetcher=fetcher, template_url=TEMPLATE_URL, base_url=BASE_URL)

    texts = page_texts(result.pdf_bytes)
    # template + [divider, 3 pages] + [divider, error page]
    assert result.page_count == len(texts) == 7
    assert "Oak Street Tower" in texts[0]
    assert "Technical Data Sheet" in texts[1] and "Page 2" in texts[1]
    assert "Warranty" in texts[5] and "Page 6" in texts[5]
    assert "Document could not be loaded" in texts[6]
    assert corner_numbers(result.pdf_bytes) == [str(n) for n in range(1, 8)]
    assert [i.document_name for i in result.issues] == ["Warranty"]


def test_build_packet_uses_cover_page_when_template_is_unreachable(project) -> None:
    fetcher = FakeFetcher({BASE_URL + "a.pdf": pdf_payload("only page")})

    result = build_packet(
        project, [_doc("Doc A", "a.pdf")], fetcher=fetcher, template_url=TEMPLATE_URL, base_url=BASE_URL
    )

    texts = page_texts(result.pdf_bytes)
    assert len(texts) == 3
    assert "Status / Action" in texts[0] and "Oak Street Tower" in texts[0]
    assert "only page" in texts[2]
    assert corner_numbers(result.pdf_bytes) == ["1", "2", "3"]
    assert result.issues == []


def test_build_packet_without_documents_is_just_the_cover(project) -> None:
    result = build_packet(project, [], fetcher=FakeFetcher(), template_url=TEMPLATE_URL, base_url=BASE_URL)

    assert result.page_count == 1
    assert corner_numbers(result.pdf_bytes) == ["1"]


def test_build_packet_surfaces_finalize_failures(project, monkeypatch: pytest.MonkeyPatch) -> None:
    def broken_numbering(pdf_bytes):
        raise RuntimeError("stamp failed")

    monkeypatch.setattr(pdf_utils, "number_pages", broken_numbering)

    with pytest.raises(PacketGenerationError, match="stamp failed") as excinfo:
        build_packet(project, [], fetcher=FakeFetcher(), template_url=TEMPLATE_URL, base_url=BASE_URL)

    assert excinfo.value.kind == "generation_failed"
    assert excinfo.value.status_code == 500
