# utils/page_renderers.py
import logging
from io import BytesIO

from PyPDF2 import PdfReader
from reportlab.lib.colors import Color
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from submittal_packet import config

logger = logging.getLogger(__name__)

# Brand palette
NEXGEN_BLUE = Color(0, 0.637, 0.792)  # #00A3CA
DARK_GRAY = Color(0.13, 0.13, 0.13)
MEDIUM_GRAY = Color(0.27, 0.27, 0.27)
LIGHT_BLUE = Color(0.9, 0.97, 0.98)
BORDER_GRAY = Color(0.7, 0.7, 0.7)
HEADER_GRAY = Color(0.08, 0.08, 0.08)
ORANGE = Color(0.93, 0.39, 0.15)  # #EE6325
CAPTION_GRAY = Color(0.5, 0.5, 0.5)
NUMBER_GRAY = Color(0.4, 0.4, 0.4)
ERROR_RED = Color(0.8, 0.2, 0.2)
ERROR_TEXT = Color(0.6, 0.2, 0.2)
BLACK = Color(0, 0, 0)
WHITE = Color(1, 1, 1)

FONT = 'Helvetica'
BOLD_FONT = 'Helvetica-Bold'

# Cover page form geometry
LABEL_X = 50
VALUE_X = 200
FIELD_HEIGHT = 25
CHECKBOX_SIZE = 12
CHECKBOX_SPACING = 130

# Submittal type checklist rows, in print order: (attribute, label)
SUBMITTAL_TYPE_ROWS = (
    ('tds', 'TDS'),
    ('three_part_specs', '3-Part Specs'),
    ('test_report_icc_esr_5194', 'Test Report ICC-ESR 5194'),
    ('test_report_icc_esl_1645', 'Test Report ICC-ESL 1645'),
    ('fire_assembly', 'Fire Assembly'),
    ('fire_assembly_01', '  Fire Assembly 01'),
    ('fire_assembly_02', '  Fire Assembly 02'),
    ('fire_assembly_03', '  Fire Assembly 03'),
    ('msds', 'Material Safety Data Sheet (MSDS)'),
    ('leed_guide', 'LEED Guide'),
    ('installation_guide', 'Installation Guide'),
    ('warranty', 'Warranty'),
    ('samples', 'Samples'),
    ('other', 'Other'),
)


def render_to_bytes(draw, *args, pagesize=letter):
    """Run draw(c, width, height, *args) on a fresh single-page canvas and return the PDF bytes."""
    buffer = BytesIO()
    c = canvas.Canvas(buffer, pagesize=pagesize)
    width, height = pagesize
    draw(c, width, height, *args)
    c.showPage()
    c.save()
    return buffer.getvalue()


def _as_page(pdf_bytes):
    return PdfReader(BytesIO(pdf_bytes)).pages[0]


def _draw_text(c, text, x, y, size, font=FONT, color=DARK_GRAY):
    c.setFont(font, size)
    c.setFillColor(color)
    c.drawString(x, y, text or '')


def draw_brand_mark(c, logo_bytes, x, y, logo_height, text_x, text_y):
    """
    Draw the logo image with its aspect ratio kept; fall back to the brand
    name in text when there is no image or it cannot be embedded.
    """
    if logo_bytes:
        try:
            image = ImageReader(BytesIO(logo_bytes))
            image_width, image_height = image.getSize()
            logo_width = image_width / image_height * logo_height
            c.drawImage(image, x, y, width=logo_width, height=logo_height, mask='auto')
            return True
        except Exception as e:
            logger.warning(f"Failed to embed logo, using text fallback: {e}")
    _draw_text(c, config.BRAND_NAME, text_x, text_y, 24, font=BOLD_FONT, color=NEXGEN_BLUE)
    return False


def _draw_form_field(c, label, value, y, width):
    field_width = width - VALUE_X - 50
    _draw_text(c, label, LABEL_X, y + 8, 10)

    c.setFillColor(LIGHT_BLUE)
    c.setStrokeColor(BORDER_GRAY)
    c.setLineWidth(0.5)
    c.rect(VALUE_X, y, field_width, FIELD_HEIGHT, stroke=1, fill=1)

    _draw_text(c, value, VALUE_X + 5, y + 8, 10, color=BLACK)

    c.setStrokeColor(BORDER_GRAY)
    c.setLineWidth(0.5)
    c.line(LABEL_X, y, VALUE_X + field_width, y)


def _draw_checkbox(c, label, checked, x, y):
    c.setStrokeColor(BORDER_GRAY)
    c.setLineWidth(1)
    c.rect(x, y, CHECKBOX_SIZE, CHECKBOX_SIZE, stroke=1, fill=0)
    if checked:
        c.setFillColor(NEXGEN_BLUE)
        c.rect(x + 2, y + 2, CHECKBOX_SIZE - 4, CHECKBOX_SIZE - 4, stroke=0, fill=1)
        _draw_text(c, 'X', x + 3, y + 2, 9, font=BOLD_FONT, color=WHITE)
    _draw_text(c, label, x + CHECKBOX_SIZE + 5, y + 2, 9)


def _draw_cover(c, width, height, project, logo_bytes):
    draw_brand_mark(c, logo_bytes, 50, height - 55, 25, 50, height - 50)

    # Section badge (top right)
    c.setFillColor(NEXGEN_BLUE)
    c.rect(width - 150, height - 60, 100, 20, stroke=0, fill=1)
    _draw_text(c, config.SECTION_BADGE, width - 145, height - 54, 10, font=BOLD_FONT, color=WHITE)

    title_y = height - 100
    for i, line in enumerate(config.COVER_TITLE_LINES):
        _draw_text(c, line, LABEL_X, title_y - 15 * i, 12)

    current_y = title_y - 50
    rows = (
        ('Submitted To', project.submitted_to),
        ('Project Name', project.project_name),
        ('Project Number', project.project_number),
        ('Prepared By', project.prepared_by),
        ('Phone/Email', project.phone_email),
        ('Date', project.date),
    )
    for label, value in rows:
        _draw_form_field(c, label, value, current_y, width)
        current_y -= FIELD_HEIGHT
    current_y -= 10

    _draw_text(c, 'Status / Action', LABEL_X, current_y, 10, font=BOLD_FONT)
    current_y -= 20
    status = project.status
    _draw_checkbox(c, 'For Review', status.for_review, VALUE_X, current_y)
    _draw_checkbox(c, 'For Approval', status.for_approval, VALUE_X + CHECKBOX_SPACING, current_y)
    current_y -= 18
    _draw_checkbox(c, 'For Record', status.for_record, VALUE_X, current_y)
    _draw_checkbox(c, 'For Information Only', status.for_information_only, VALUE_X + CHECKBOX_SPACING, current_y)
    current_y -= 30

    _draw_text(c, 'Submittal Type (check all that apply)', LABEL_X, current_y, 10, font=BOLD_FONT)
    current_y -= 20
    submittal_type = project.submittal_type
    for attr, label in SUBMITTAL_TYPE_ROWS:
        if attr == 'other':
            label = f"Other: {submittal_type.other_text}"
        _draw_checkbox(c, label, getattr(submittal_type, attr), VALUE_X, current_y)
        current_y -= 16
    current_y -= 10

    _draw_text(c, 'Product:', LABEL_X, current_y, 10, font=BOLD_FONT)
    _draw_text(c, project.product, VALUE_X, current_y, 10)

    footer_y = 120
    _draw_text(c, config.COMPANY_NAME, LABEL_X, footer_y, 9, font=BOLD_FONT)
    _draw_text(c, config.COMPANY_ADDRESS, LABEL_X, footer_y - 12, 8, color=MEDIUM_GRAY)
    _draw_text(c, config.COMPANY_PHONE, LABEL_X, footer_y - 24, 8, color=MEDIUM_GRAY)
    _draw_text(c, config.SUPPORT_LINE, LABEL_X, footer_y - 36, 8, color=MEDIUM_GRAY)

    c.setFont(FONT, 7)
    c.setFillColor(MEDIUM_GRAY)
    c.drawRightString(width - 50, 50, config.VERSION_STAMP)


def render_cover_page(writer, project, brand_images):
    """
    Draw the submittal cover page from scratch and append it to writer.

    Used when the interactive template is unavailable. Lays out the same
    information the template form carries: brand mark, section badge, title,
    the six project rows, status checkboxes, submittal type checklist,
    product line and company footer.

    Returns the appended page.
    """
    logger.info(f"Rendering cover page for project: {project.project_name}")
    pdf_bytes = render_to_bytes(_draw_cover, project, brand_images.light())
    return writer.add_page(_as_page(pdf_bytes))


def _draw_divider(c, width, height, document_name, page_number, logo_bytes):
    c.setFillColor(BLACK)
    c.rect(0, 0, width, height, stroke=0, fill=1)

    c.setFillColor(HEADER_GRAY)
    c.rect(0, height - 96.75, width, 96.75, stroke=0, fill=1)
    draw_brand_mark(c, logo_bytes, 15, height - 70, 30, 15, height - 55)
    _draw_text(c, 'Package Section Divider', 15, height - 82, 9, color=CAPTION_GRAY)

    c.setFillColor(ORANGE)
    c.rect(0, height - 105.75, width, 9, stroke=0, fill=1)

    c.setFillColor(WHITE)
    c.rect(0, 0, width, height - 105.75, stroke=0, fill=1)

    content_start_y = height - 180
    _draw_text(c, 'Section Divider', 74, content_start_y, 32, color=BLACK)

    name_lines = simpleSplit(document_name, BOLD_FONT, 40, width - 74 - 42) or ['']
    for i, line in enumerate(name_lines):
        _draw_text(c, line, 74, content_start_y - 50 - 46 * i, 40, font=BOLD_FONT, color=BLACK)

    _draw_text(c, f"Page {page_number}", 42, 60, 10, color=NUMBER_GRAY)

    c.setFont(FONT, 9)
    c.setFillColor(MEDIUM_GRAY)
    c.drawRightString(width - 42, 40, config.COPYRIGHT_LINE)

    c.setFillColor(NEXGEN_BLUE)
    c.rect(0, 0, width, 30, stroke=0, fill=1)
    c.setFont(FONT, 9)
    c.setFillColor(WHITE)
    c.drawCentredString(width / 2, 12, config.COPYRIGHT_LINE)


def render_divider_page(writer, document_name, document_type, page_number, brand_images):
    """Append a full-page section divider announcing document_name."""
    logger.info(f"Adding divider for '{document_name}' ({document_type}) at page {page_number}")
    pdf_bytes = render_to_bytes(_draw_divider, document_name, page_number, brand_images.dark())
    return writer.add_page(_as_page(pdf_bytes))


def _draw_error(c, width, height, document_name, error_message):
    _draw_text(c, 'DOCUMENT ERROR', 50, height - 100, 16, font=BOLD_FONT, color=ERROR_RED)
    _draw_text(c, document_name, 50, height - 150, 14, font=BOLD_FONT, color=BLACK)
    _draw_text(c, f"Error: {error_message}", 50, height - 180, 12, color=ERROR_TEXT)
    _draw_text(c, config.SUPPORT_INSTRUCTION, 50, height - 220, 10, color=NUMBER_GRAY)


def render_error_page(writer, document_name, error_message):
    """Append a page explaining that document_name (or part of it) is missing."""
    logger.warning(f"Adding error page for '{document_name}': {error_message}")
    pdf_bytes = render_to_bytes(_draw_error, document_name, error_message)
    return writer.add_page(_as_page(pdf_bytes))
