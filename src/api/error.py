"""HTTP error mapping for use-case errors"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from libs.result import Error

NOT_FOUND_CODES = frozenset({
    "DOCUMENT_NOT_FOUND",
    "CLIENT_NOT_FOUND",
    "REFERENCE_DOCUMENT_NOT_FOUND",
})

CONFLICT_CODES = frozenset({
    "DOCUMENT_NOT_EDITABLE",
    "FINALIZE_IN_PROGRESS",
    "INVALID_STATUS_TRANSITION",
    "ALREADY_SETTLED",
    "TRANSMISSION_NOT_ALLOWED",
    "DOCUMENT_TYPE_LOCKED",
    "CREDIT_NOTE_LINES_LOCKED",
})


def status_for(error: Error) -> int:
    if error.code in NOT_FOUND_CODES:
        return status.HTTP_404_NOT_FOUND
    if error.code in CONFLICT_CODES:
        return status.HTTP_409_CONFLICT
    if error.code == "VALIDATION_FAILED":
        return status.HTTP_422_UNPROCESSABLE_ENTITY
    if error.code == "FISCAL_AUTHORITY_NOT_CONFIGURED":
        return status.HTTP_503_SERVICE_UNAVAILABLE
    return status.HTTP_400_BAD_REQUEST


class ClientError(Exception):
    """Raised by routes to turn a use-case Error into an HTTP response"""

    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code

    @classmethod
    def from_error(cls, error: Error) -> "ClientError":
        return cls(error, status_code=status_for(error))


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    body = {"code": exc.error.code, "message": exc.error.message}
    if exc.error.details:
        body["details"] = exc.error.details
    return JSONResponse(status_code=exc.status_code, content={"error": body})
