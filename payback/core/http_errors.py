"""Mapping of processor errors to HTTP responses."""

from fastapi import HTTPException

from payback.services.processor.errors import (
    CredentialMissing,
    NotFound,
    ProcessorError,
    ProcessorRejected,
    ProcessorUnavailable,
)


def processor_http_exception(exc: ProcessorError | CredentialMissing) -> HTTPException:
    """Map a processor-layer error onto the HTTP status returned to callers."""
    if isinstance(exc, CredentialMissing):
        return HTTPException(status_code=400, detail=exc.message)
    if isinstance(exc, NotFound):
        return HTTPException(status_code=404, detail=exc.message)
    if isinstance(exc, ProcessorRejected):
        return HTTPException(status_code=402, detail=exc.message)
    if isinstance(exc, ProcessorUnavailable):
        return HTTPException(status_code=502, detail=exc.message)
    return HTTPException(status_code=502, detail=exc.message)
