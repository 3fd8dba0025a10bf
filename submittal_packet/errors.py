# submittal_packet/errors.py


class PacketError(Exception):
    """Base class for failures surfaced to the caller of a packet request."""

    kind = 'packet_error'
    status_code = 500

    def __init__(self, message, kind=None):
        super().__init__(message)
        self.message = message
        if kind:
            self.kind = kind

    def to_dict(self):
        return {'error': self.kind, 'details': self.message}


class InvalidPacketRequest(PacketError):
    """The request body could not be parsed into project data and documents."""

    kind = 'invalid_request'
    status_code = 400


class PacketGenerationError(PacketError):
    """The assembled packet could not be finalized or serialized."""

    kind = 'generation_failed'
    status_code = 500
