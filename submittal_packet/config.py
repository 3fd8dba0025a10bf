# submittal_packet/config.py
import os

# Remote locations
TEMPLATE_URL = os.environ.get(
    'PACKET_TEMPLATE_URL',
    'https://raw.githubusercontent.com/karthikeyanasha24/pdf-packet-6/main/PDF-TEMPLATE/Submittal%20Form_Floor%20Panels.pdf',
)
DOCUMENT_BASE_URL = os.environ.get(
    'PACKET_DOCUMENT_BASE_URL',
    'https://raw.githubusercontent.com/karthikeyanasha24/pdf-packet-6/main/public/',
)
LOGO_URL = os.environ.get(
    'PACKET_LOGO_URL',
    'https://raw.githubusercontent.com/karthikeyanasha24/pdf-packet-6/main/public/image.png',
)
LOGO_WHITE_URL = os.environ.get(
    'PACKET_LOGO_WHITE_URL',
    'https://raw.githubusercontent.com/karthikeyanasha24/pdf-packet-6/main/public/image-white.png',
)

USER_AGENT = os.environ.get('PACKET_USER_AGENT', 'PDF-Packet-Generator/1.0')


def _optional_float(value):
    if value is None or value.strip() == '':
        return None
    return float(value)


# No timeout unless one is configured explicitly
FETCH_TIMEOUT = _optional_float(os.environ.get('PACKET_FETCH_TIMEOUT'))

# Optional JSON manifest describing the documents offered to the UI
CATALOG_PATH = os.environ.get('PACKET_CATALOG_PATH', '')

PACKET_FILENAME_SUFFIX = '_Packet.pdf'

# Brand text used by the generated pages
BRAND_NAME = 'NEXGEN'
SECTION_BADGE = 'SECTION 06 16 26'
COVER_TITLE_LINES = (
    'MAXTERRA® MgO Non-Combustible Structural',
    'Floor Panels Submittal Form',
)
COMPANY_NAME = 'NEXGEN® Building Products, LLC'
COMPANY_ADDRESS = '1504 Manhattan Ave West, #300 Brandon, FL 34205'
COMPANY_PHONE = '(727) 634-5534'
SUPPORT_LINE = 'Technical Support: support@nexgenbp.com'
VERSION_STAMP = 'Version 1.0 October 2025 © 2025 NEXGEN Building Products'
COPYRIGHT_LINE = '© 2025 NEXGEN Building Products'
SUPPORT_INSTRUCTION = 'Please contact support if this error persists.'
