# submittal_packet/catalog.py
import json
import logging
import os

from submittal_packet.models import DOCUMENT_TYPE_CONFIG, DocumentRequest
from submittal_packet.errors import InvalidPacketRequest

logger = logging.getLogger(__name__)


class DocumentCatalog:
    """
    In-memory list of the documents a packet can be built from.

    Loaded once at startup and handed to the app factory, so the routes
    never read ambient module state.
    """

    def __init__(self, documents=None):
        self.documents = list(documents or [])

    def __len__(self):
        return len(self.documents)

    def get(self, doc_id):
        for doc in self.documents:
            if doc.id == doc_id:
                return doc
        return None

    def sorted_documents(self):
        """Documents ordered by category priority, then by name."""
        return sorted(
            self.documents,
            key=lambda d: (DOCUMENT_TYPE_CONFIG[d.type].priority, d.name.lower()),
        )

    def to_list(self):
        items = []
        for doc in self.sorted_documents():
            type_config = DOCUMENT_TYPE_CONFIG[doc.type]
            items.append({
                'id': doc.id,
                'name': doc.name,
                'type': doc.type,
                'url': doc.url,
                'color': type_config.color,
                'icon': type_config.icon,
                'priority': type_config.priority,
            })
        return items

    @classmethod
    def from_entries(cls, entries):
        documents = []
        for i, entry in enumerate(entries):
            try:
                document = DocumentRequest.from_dict(entry, i)
            except InvalidPacketRequest as e:
                logger.warning(f"Skipping catalog entry {i}: {e.message}")
                continue
            # Catalog listings are ordered and colored by category
            if document.type not in DOCUMENT_TYPE_CONFIG:
                logger.warning(f"Skipping catalog entry {i}: unknown document type '{document.type}'")
                continue
            documents.append(document)
        return cls(documents)

    @classmethod
    def load(cls, manifest_path):
        """
        Load the catalog from a JSON manifest (a list of {id, name, type, url}
        objects, or an object with a 'documents' list). Any failure yields an
        empty catalog.
        """
        if not manifest_path:
            logger.info("No catalog manifest configured; starting with an empty catalog")
            return cls()
        if not os.path.exists(manifest_path):
            logger.error(f"Catalog manifest not found: {manifest_path}")
            return cls()
        try:
            with open(manifest_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load catalog manifest {manifest_path}: {e}")
            return cls()

        entries = data.get('documents', []) if isinstance(data, dict) else data
        if not isinstance(entries, list):
            logger.error(f"Catalog manifest {manifest_path} has no document list")
            return cls()

        catalog = cls.from_entries(entries)
        logger.info(f"Documents loaded: {len(catalog)}")
        return catalog
