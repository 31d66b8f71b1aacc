"""Domain exceptions raised by the pure document layer

Use cases translate these into ``libs.result.Error`` codes.
"""


class DocumentError(Exception):
    """Base class for document domain errors"""
    code = "DOCUMENT_ERROR"


class DocumentNotEditableError(DocumentError):
    """Raised when a frozen (non-draft) document is mutated"""
    code = "DOCUMENT_NOT_EDITABLE"


class FinalizeInProgressError(DocumentNotEditableError):
    """Raised when a draft with a reserved sequence number is mutated"""
    code = "FINALIZE_IN_PROGRESS"


class InvalidTransitionError(DocumentError):
    """Raised on a status change the lifecycle does not allow"""
    code = "INVALID_STATUS_TRANSITION"


class IdentifierEncodingError(DocumentError, ValueError):
    """Raised when a field does not fit its slot in the unique identifier"""
    code = "IDENTIFIER_ENCODING_FAILED"
