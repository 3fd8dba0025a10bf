from flask import Flask, request, jsonify, Response
import os
import logging

from submittal_packet import config
from submittal_packet.catalog import DocumentCatalog
from submittal_packet.errors import PacketError, InvalidPacketRequest
from submittal_packet.models import DOCUMENT_TYPE_CONFIG, parse_packet_request
from submittal_packet.utils.fetch_utils import fetch_bytes
from submittal_packet.utils.pdf_utils import build_packet, packet_filename

# Configure logging
logging.basicConfig(level=logging.INFO,
                   format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def generation_failed(details):
    return jsonify({'error': 'Failed to generate packet', 'details': details}), 500


def create_app(catalog=None, fetcher=None):
    """
    Build the packet service.

    Args:
        catalog: DocumentCatalog offered by /api/documents; loaded from
                 PACKET_CATALOG_PATH when omitted
        fetcher: callable url -> FetchResult used for every remote fetch
    """
    app = Flask(__name__)
    app.config['PACKET_CATALOG'] = catalog if catalog is not None else DocumentCatalog.load(config.CATALOG_PATH)
    app.config['PACKET_FETCHER'] = fetcher or fetch_bytes

    logger.info(f"Template URL: {config.TEMPLATE_URL}")
    logger.info(f"Document base URL: {config.DOCUMENT_BASE_URL}")

    @app.get('/')
    def index():
        return Response('PDF Packet Generator', mimetype='text/plain')

    @app.get('/api/documents')
    def api_list_documents():
        """List catalog documents in category priority order."""
        catalog = app.config['PACKET_CATALOG']
        return jsonify({'documents': catalog.to_list()})

    @app.get('/api/document-types')
    def api_document_types():
        return jsonify({
            name: {'color': c.color, 'icon': c.icon, 'priority': c.priority}
            for name, c in DOCUMENT_TYPE_CONFIG.items()
        })

    @app.route('/generate-packet', methods=['POST'])
    def generate_packet():
        try:
            payload = request.get_json(silent=True)
            if payload is None:
                raise InvalidPacketRequest('Request body must be a JSON object')
            project, documents = parse_packet_request(payload)

            result = build_packet(project, documents, fetcher=app.config['PACKET_FETCHER'])
        except PacketError as e:
            logger.error(f"Error generating packet ({e.kind}): {e.message}")
            if e.status_code >= 500:
                return generation_failed(e.message)
            return jsonify(e.to_dict()), e.status_code
        except Exception as e:
            logger.exception("Error generating packet")
            return generation_failed(str(e) or 'Unknown error')

        filename = packet_filename(project.project_name)
        logger.info(f"Returning {filename} ({len(result.pdf_bytes)} bytes, {len(result.issues)} issues)")
        return Response(
            result.pdf_bytes,
            mimetype='application/pdf',
            headers={
                'Content-Disposition': f'attachment; filename="{filename}"',
                'Content-Length': str(len(result.pdf_bytes)),
                'X-Packet-Pages': str(result.page_count),
                'X-Packet-Issues': str(len(result.issues)),
            },
        )

    return app


def main():
    app = create_app()
    # Only use debug mode when running directly
    is_debug = os.environ.get('FLASK_ENV') == 'development'
    port = int(os.environ.get('PORT', 5000))
    app.run(host='localhost', port=port, debug=is_debug)


if __name__ == '__main__':
    main()
