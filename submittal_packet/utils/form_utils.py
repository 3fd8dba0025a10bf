# utils/form_utils.py
import logging
from collections import namedtuple
from io import BytesIO

import fitz  # PyMuPDF
from PyPDF2 import PdfReader, PdfWriter

from submittal_packet import config
from submittal_packet.utils.fetch_utils import fetch_bytes
from submittal_packet.utils.page_renderers import render_cover_page

logger = logging.getLogger(__name__)

TEXT = 'text'
CHECKBOX = 'checkbox'

WIDGET_TYPES = {
    TEXT: fitz.PDF_WIDGET_TYPE_TEXT,
    CHECKBOX: fitz.PDF_WIDGET_TYPE_CHECKBOX,
}

FieldMapping = namedtuple('FieldMapping', ['field', 'names', 'kind', 'value'])


def build_field_mappings(project):
    """
    Ordered (semantic field, candidate form field names, kind, value) table.
    Template vendors name their fields differently, so each semantic field
    lists every spelling seen in the wild; the first one present wins.
    """
    status = project.status
    submittal = project.submittal_type
    return [
        FieldMapping('submitted_to', ['Submitted To', 'submittedTo', 'submitted_to'], TEXT, project.submitted_to),
        FieldMapping('project_name', ['Project Name', 'projectName', 'project_name'], TEXT, project.project_name),
        FieldMapping('project_number', ['Project Number', 'projectNumber', 'project_number'], TEXT, project.project_number),
        FieldMapping('prepared_by', ['Prepared By', 'preparedBy', 'prepared_by'], TEXT, project.prepared_by),
        FieldMapping('phone_email', ['Phone/Email', 'phoneEmail', 'phone_email', 'PhoneEmail'], TEXT, project.phone_email),
        FieldMapping('date', ['Date', 'date'], TEXT, project.date),

        FieldMapping('for_review', ['For Review', 'forReview', 'for_review'], CHECKBOX, status.for_review),
        FieldMapping('for_approval', ['For Approval', 'forApproval', 'for_approval'], CHECKBOX, status.for_approval),
        FieldMapping('for_record', ['For Record', 'forRecord', 'for_record'], CHECKBOX, status.for_record),
        FieldMapping('for_information_only', ['For Information Only', 'forInformationOnly', 'for_information_only'],
                     CHECKBOX, status.for_information_only),

        FieldMapping('tds', ['TDS', 'tds'], CHECKBOX, submittal.tds),
        FieldMapping('three_part_specs', ['3-Part Specs', '3PartSpecs', 'threePartSpecs'], CHECKBOX, submittal.three_part_specs),
        FieldMapping('test_report_icc_esr_5194', ['Test Report ICC-ESR 5194', 'testReportIccEsr5194'],
                     CHECKBOX, submittal.test_report_icc_esr_5194),
        FieldMapping('test_report_icc_esl_1645', ['Test Report ICC-ESL 1645', 'testReportIccEsl1645'],
                     CHECKBOX, submittal.test_report_icc_esl_1645),
        FieldMapping('fire_assembly', ['Fire Assembly', 'fireAssembly'], CHECKBOX, submittal.fire_assembly),
        FieldMapping('fire_assembly_01', ['Fire Assembly 01', 'fireAssembly01'], CHECKBOX, submittal.fire_assembly_01),
        FieldMapping('fire_assembly_02', ['Fire Assembly 02', 'fireAssembly02'], CHECKBOX, submittal.fire_assembly_02),
        FieldMapping('fire_assembly_03', ['Fire Assembly 03', 'fireAssembly03'], CHECKBOX, submittal.fire_assembly_03),
        FieldMapping('msds', ['MSDS', 'msds', 'Material Safety Data Sheet'], CHECKBOX, submittal.msds),
        FieldMapping('leed_guide', ['LEED Guide', 'leedGuide'], CHECKBOX, submittal.leed_guide),
        FieldMapping('installation_guide', ['Installation Guide', 'installationGuide'], CHECKBOX, submittal.installation_guide),
        FieldMapping('warranty', ['Warranty', 'warranty'], CHECKBOX, submittal.warranty),
        FieldMapping('samples', ['Samples', 'samples'], CHECKBOX, submittal.samples),
        FieldMapping('other', ['Other', 'other'], CHECKBOX, submittal.other),
    ]


def collect_widgets(doc):
    """
    Map each form field name to its (page, widget) pairs across the document.
    A widget can only be updated while its page object is alive, so the page
    travels with it.
    """
    widgets = {}
    for page in doc:
        for widget in page.widgets():
            if widget.field_name:
                widgets.setdefault(widget.field_name.strip(), []).append((page, widget))
    return widgets


def find_field(widgets, names, kind):
    """
    Return (name, [(page, widget), ...]) for the first candidate name that
    exists with the expected widget type, or None. Missing names and type
    mismatches are skipped quietly.
    """
    expected_type = WIDGET_TYPES[kind]
    for name in names:
        candidates = widgets.get(name)
        if not candidates:
            continue
        if all(w.field_type == expected_type for _, w in candidates):
            return name, candidates
        logger.debug(f"Field '{name}' exists but is not a {kind} field; trying next name")
    return None


def _set_widget(widget, kind, value):
    if kind == TEXT:
        widget.field_value = value or ''
    else:
        widget.field_value = (widget.on_state() or True) if value else 'Off'
    widget.update()


def fill_form(doc, project):
    """
    Fill the template's interactive fields with project data, then flatten
    the form into static page content.

    Returns the number of fields that were set.
    """
    widgets = collect_widgets(doc)
    fields_set = 0
    for mapping in build_field_mappings(project):
        match = find_field(widgets, mapping.names, mapping.kind)
        if match is None:
            continue
        name, field_widgets = match
        for _, widget in field_widgets:
            _set_widget(widget, mapping.kind, mapping.value)
        fields_set += 1
        logger.info(f"Set {mapping.kind} field {name} to: {mapping.value}")

    doc.bake(annots=False, widgets=True)
    logger.info(f"Filled {fields_set} form fields and flattened the form")
    return fields_set


def _writer_from_fitz(doc):
    writer = PdfWriter()
    reader = PdfReader(BytesIO(doc.tobytes(garbage=3, deflate=True)))
    for page in reader.pages:
        writer.add_page(page)
    return writer


def _cover_page_writer(project, brand_images):
    writer = PdfWriter()
    render_cover_page(writer, project, brand_images)
    return writer


def load_template(project, brand_images, fetcher=fetch_bytes, template_url=None):
    """
    Start the packet document.

    Fetches the submittal form template, fills and flattens it and returns a
    PdfWriter holding its pages. When the template cannot be fetched or
    parsed, returns a PdfWriter holding a drawn cover page instead. A failure
    while filling keeps the template as it is.
    """
    template_url = template_url or config.TEMPLATE_URL
    logger.info(f"Fetching template PDF from: {template_url}")
    result = fetcher(template_url)
    if not result.ok:
        logger.error(f"Failed to fetch template: {result.error}")
        logger.info("Falling back to custom cover page")
        return _cover_page_writer(project, brand_images)

    try:
        doc = fitz.open(stream=result.content, filetype='pdf')
    except Exception as e:
        logger.error(f"Error loading template PDF: {e}")
        logger.info("Falling back to custom cover page")
        return _cover_page_writer(project, brand_images)

    if not doc.is_pdf:
        doc.close()
        logger.error("Template response is not a PDF document")
        logger.info("Falling back to custom cover page")
        return _cover_page_writer(project, brand_images)

    try:
        widgets = collect_widgets(doc)
        logger.info(f"Template has {sum(len(w) for w in widgets.values())} form widgets in {len(widgets)} fields")
        for name, field_widgets in widgets.items():
            logger.info(f"Field: {name} - Type: {field_widgets[0][1].field_type_string}")

        try:
            fill_form(doc, project)
        except Exception as e:
            logger.warning(f"Error filling form fields: {e}")
            logger.info("Template will be used as-is without filling fields")

        return _writer_from_fitz(doc)
    except Exception as e:
        logger.error(f"Error loading template PDF: {e}")
        logger.info("Falling back to custom cover page")
        return _cover_page_writer(project, brand_images)
    finally:
        doc.close()
