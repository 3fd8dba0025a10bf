# submittal_packet/models.py
from dataclasses import dataclass, field
from typing import Optional

from submittal_packet.errors import InvalidPacketRequest


@dataclass(frozen=True)
class DocumentTypeConfig:
    color: str
    icon: str
    priority: int


# Category enumeration for DocumentRequest.type. Priority only orders the
# catalog listing; packets are merged in request order.
DOCUMENT_TYPE_CONFIG = {
    'TDS': DocumentTypeConfig(color='blue', icon='📋', priority=1),
    'ESR': DocumentTypeConfig(color='green', icon='✅', priority=2),
    'MSDS': DocumentTypeConfig(color='red', icon='⚠️', priority=8),
    'LEED': DocumentTypeConfig(color='emerald', icon='🌿', priority=6),
    'Installation': DocumentTypeConfig(color='orange', icon='🔧', priority=3),
    'warranty': DocumentTypeConfig(color='purple', icon='🛡️', priority=4),
    'Acoustic': DocumentTypeConfig(color='indigo', icon='🔊', priority=7),
    'PartSpec': DocumentTypeConfig(color='gray', icon='📐', priority=5),
}


def _require_mapping(payload, name):
    if not isinstance(payload, dict):
        raise InvalidPacketRequest(f"'{name}' must be an object")
    return payload


def _require_text(payload, key, context):
    value = payload.get(key)
    if value is None:
        raise InvalidPacketRequest(f"Missing required field '{context}.{key}'")
    if not isinstance(value, str):
        raise InvalidPacketRequest(f"Field '{context}.{key}' must be a string")
    return value


def _optional_text(payload, key, context):
    value = payload.get(key)
    if value is None:
        return ''
    if not isinstance(value, str):
        raise InvalidPacketRequest(f"Field '{context}.{key}' must be a string")
    return value


@dataclass(frozen=True)
class StatusFlags:
    for_review: bool = False
    for_approval: bool = False
    for_record: bool = False
    for_information_only: bool = False

    @classmethod
    def from_dict(cls, payload):
        payload = _require_mapping(payload or {}, 'projectData.status')
        return cls(
            for_review=bool(payload.get('forReview')),
            for_approval=bool(payload.get('forApproval')),
            for_record=bool(payload.get('forRecord')),
            for_information_only=bool(payload.get('forInformationOnly')),
        )


# attribute name -> wire key
SUBMITTAL_TYPE_KEYS = {
    'tds': 'tds',
    'three_part_specs': 'threePartSpecs',
    'test_report_icc_esr_5194': 'testReportIccEsr5194',
    'test_report_icc_esl_1645': 'testReportIccEsl1645',
    'fire_assembly': 'fireAssembly',
    'fire_assembly_01': 'fireAssembly01',
    'fire_assembly_02': 'fireAssembly02',
    'fire_assembly_03': 'fireAssembly03',
    'msds': 'msds',
    'leed_guide': 'leedGuide',
    'installation_guide': 'installationGuide',
    'warranty': 'warranty',
    'samples': 'samples',
    'other': 'other',
}


@dataclass(frozen=True)
class SubmittalType:
    tds: bool = False
    three_part_specs: bool = False
    test_report_icc_esr_5194: bool = False
    test_report_icc_esl_1645: bool = False
    fire_assembly: bool = False
    fire_assembly_01: bool = False
    fire_assembly_02: bool = False
    fire_assembly_03: bool = False
    msds: bool = False
    leed_guide: bool = False
    installation_guide: bool = False
    warranty: bool = False
    samples: bool = False
    other: bool = False
    other_text: str = ''

    @classmethod
    def from_dict(cls, payload):
        payload = _require_mapping(payload or {}, 'projectData.submittalType')
        flags = {attr: bool(payload.get(key)) for attr, key in SUBMITTAL_TYPE_KEYS.items()}
        return cls(other_text=_optional_text(payload, 'otherText', 'projectData.submittalType'), **flags)


@dataclass(frozen=True)
class ProjectData:
    project_name: str
    submitted_to: str
    prepared_by: str
    date: str
    email_address: str
    phone_number: str
    product: str
    project_number: str = ''
    status: StatusFlags = field(default_factory=StatusFlags)
    submittal_type: SubmittalType = field(default_factory=SubmittalType)

    @property
    def phone_email(self):
        return f"{self.phone_number} / {self.email_address}"

    @classmethod
    def from_dict(cls, payload):
        payload = _require_mapping(payload, 'projectData')
        return cls(
            project_name=_require_text(payload, 'projectName', 'projectData'),
            submitted_to=_require_text(payload, 'submittedTo', 'projectData'),
            prepared_by=_require_text(payload, 'preparedBy', 'projectData'),
            date=_require_text(payload, 'date', 'projectData'),
            email_address=_require_text(payload, 'emailAddress', 'projectData'),
            phone_number=_require_text(payload, 'phoneNumber', 'projectData'),
            product=_require_text(payload, 'product', 'projectData'),
            project_number=_optional_text(payload, 'projectNumber', 'projectData'),
            status=StatusFlags.from_dict(payload.get('status')),
            submittal_type=SubmittalType.from_dict(payload.get('submittalType')),
        )


@dataclass(frozen=True)
class DocumentRequest:
    id: str
    name: str
    type: str
    url: str

    @classmethod
    def from_dict(cls, payload, position=0):
        context = f"documents[{position}]"
        payload = _require_mapping(payload, context)
        return cls(
            id=str(payload.get('id', '')),
            name=_require_text(payload, 'name', context),
            type=_require_text(payload, 'type', context),
            url=_require_text(payload, 'url', context),
        )


def parse_packet_request(payload):
    """
    Parse a /generate-packet body into (ProjectData, [DocumentRequest, ...]).
    Document order is preserved; it is the merge order of the packet.
    """
    payload = _require_mapping(payload, 'request body')
    project = ProjectData.from_dict(payload.get('projectData'))
    documents = payload.get('documents', [])
    if not isinstance(documents, list):
        raise InvalidPacketRequest("'documents' must be a list")
    return project, [DocumentRequest.from_dict(doc, i) for i, doc in enumerate(documents)]


@dataclass(frozen=True)
class FetchResult:
    """Outcome of a fetch-by-URL: either content bytes or an error description."""

    url: str
    content: Optional[bytes] = None
    error: Optional[str] = None

    @property
    def ok(self):
        return self.content is not None


@dataclass(frozen=True)
class PacketIssue:
    document_name: str
    message: str


@dataclass
class PacketResult:
    pdf_bytes: bytes
    page_count: int
    issues: list = field(default_factory=list)
