# utils/pdf_utils.py
import functools
import logging
import re
from collections import namedtuple
from io import BytesIO

import fitz  # PyMuPDF
from PyPDF2 import PdfReader

from submittal_packet import config
from submittal_packet.errors import PacketGenerationError
from submittal_packet.models import PacketIssue, PacketResult
from submittal_packet.utils.fetch_utils import BrandImages, fetch_bytes, resolve_document_url
from submittal_packet.utils.form_utils import load_template
from submittal_packet.utils.page_renderers import (
    render_divider_page,
    render_error_page,
)

logger = logging.getLogger(__name__)

PAGE_NUMBER_COLOR = (0.4, 0.4, 0.4)

DOCUMENT_NOT_LOADED = 'Document could not be loaded'
DOCUMENT_PROCESSING_FAILED = 'Document processing failed'

# Accumulator threaded through the page-copy fold
MergeProgress = namedtuple('MergeProgress', ['page_number', 'copied', 'failed'])


def packet_filename(project_name):
    """'Oak St. Bldg #2' -> 'OakStBldg2_Packet.pdf'"""
    return re.sub(r'[^A-Za-z0-9]', '', project_name or '') + config.PACKET_FILENAME_SUFFIX


def page_copy_error_message(index):
    return f"Page {index + 1} could not be processed"


def copy_source_page(writer, reader, index):
    """
    Copy page index of reader onto the end of writer.
    Returns None on success, otherwise a description of the failure.
    """
    try:
        writer.add_page(reader.pages[index])
    except Exception as e:
        return f"{e.__class__.__name__}: {e}"
    return None


def _merge_page(writer, reader, request, issues, progress, index):
    error = copy_source_page(writer, reader, index)
    if error is None:
        return progress._replace(page_number=progress.page_number + 1, copied=progress.copied + 1)

    logger.warning(f"Failed to copy page {index + 1} from {request.name}: {error}")
    message = page_copy_error_message(index)
    render_error_page(writer, request.name, message)
    issues.append(PacketIssue(request.name, message))
    return progress._replace(page_number=progress.page_number + 1, failed=progress.failed + 1)


def open_source_document(content):
    reader = PdfReader(BytesIO(content))
    if reader.is_encrypted:
        # Owner-password-only PDFs open with an empty user password
        reader.decrypt('')
    return reader


def merge_document(writer, request, page_number, brand_images, fetcher=fetch_bytes, base_url=None):
    """
    Append one requested document to the packet.

    Adds a divider page, then every page of the fetched document in source
    order. A document that cannot be fetched gets one error page; a page that
    cannot be copied gets an error page in its place and the remaining pages
    still follow.

    Args:
        writer: PdfWriter holding the packet built so far
        request: DocumentRequest to merge
        page_number: page number the divider will carry
        brand_images: BrandImages for the divider logo
        fetcher: callable url -> FetchResult

    Returns:
        tuple (next page number, list of PacketIssue)
    """
    issues = []
    progress = MergeProgress(page_number, 0, 0)
    try:
        render_divider_page(writer, request.name, request.type, progress.page_number, brand_images)
        progress = progress._replace(page_number=progress.page_number + 1)

        url = resolve_document_url(request.url, base_url)
        result = fetcher(url)
        if not result.ok:
            logger.error(f"Could not load {request.name} from {url}: {result.error}")
            render_error_page(writer, request.name, DOCUMENT_NOT_LOADED)
            issues.append(PacketIssue(request.name, DOCUMENT_NOT_LOADED))
            return progress.page_number + 1, issues

        reader = open_source_document(result.content)
        page_count = len(reader.pages)
        step = functools.partial(_merge_page, writer, reader, request, issues)
        progress = functools.reduce(step, range(page_count), progress)
        logger.info(f"Processed {request.name}: {progress.copied} of {page_count} pages copied, "
                    f"{progress.failed} failed")
        return progress.page_number, issues
    except Exception as e:
        logger.error(f"Error processing {request.name}: {e}")
        render_error_page(writer, request.name, DOCUMENT_PROCESSING_FAILED)
        issues.append(PacketIssue(request.name, DOCUMENT_PROCESSING_FAILED))
        return progress.page_number + 1, issues


def number_pages(pdf_bytes):
    """
    Stamp every page of the finished packet with its 1-based position,
    bottom right.

    Returns:
        tuple (numbered PDF bytes, number of pages stamped)
    """
    doc = fitz.open(stream=pdf_bytes, filetype='pdf')
    try:
        for index, page in enumerate(doc):
            width, height = page.rect.width, page.rect.height
            page.insert_text((width - 50, height - 30), str(index + 1),
                             fontsize=10, fontname='helv', color=PAGE_NUMBER_COLOR)
        page_count = len(doc)
        numbered = doc.tobytes(garbage=3, deflate=True)
    finally:
        doc.close()
    logger.info(f"Numbered {page_count} pages")
    return numbered, page_count


def build_packet(project, documents, fetcher=fetch_bytes, template_url=None, base_url=None):
    """
    Assemble the complete packet: template (or drawn cover page), then for
    each document a divider followed by its pages, then page numbers.

    Document and page failures become error pages inside the packet. Only a
    failure to number or serialize the finished packet raises
    PacketGenerationError.

    Returns a PacketResult.
    """
    logger.info(f"Generating packet for: {project.project_name}")
    logger.info(f"Processing {len(documents)} documents")

    brand_images = BrandImages(fetcher)
    writer = load_template(project, brand_images, fetcher=fetcher, template_url=template_url)

    # Start after template pages
    page_number = len(writer.pages) + 1
    issues = []
    for request in documents:
        logger.info(f"Processing: {request.name}")
        page_number, document_issues = merge_document(
            writer, request, page_number, brand_images, fetcher=fetcher, base_url=base_url
        )
        issues.extend(document_issues)

    try:
        buffer = BytesIO()
        writer.write(buffer)
        pdf_bytes, page_count = number_pages(buffer.getvalue())
    except Exception as e:
        logger.error(f"Error finalizing packet: {e}")
        raise PacketGenerationError(str(e)) from e

    if issues:
        logger.warning(f"Packet contains {len(issues)} error pages:")
        for issue in issues:
            logger.warning(f"  - {issue.document_name}: {issue.message}")
    logger.info(f"Packet generated successfully: {len(pdf_bytes)} bytes, {page_count} pages")
    return PacketResult(pdf_bytes=pdf_bytes, page_count=page_count, issues=issues)
