"""Translation of domain exceptions into HTTP errors"""

import logging
from fastapi import HTTPException

from fsa_ledger.domain.exceptions import (
    ConflictError,
    DomainException,
    InvalidArgumentError,
    InvalidStateError,
    LimitExceededError,
    NotFoundError,
    StorageFailureError,
)

logger = logging.getLogger(__name__)

STATUS_CODES = {
    InvalidArgumentError: 422,
    NotFoundError: 404,
    InvalidStateError: 409,
    LimitExceededError: 422,
    ConflictError: 409,
    StorageFailureError: 503,
}


def to_http_exception(error: DomainException, request_id: str) -> HTTPException:
    """Map a domain exception to an HTTPException carrying its structured detail"""
    status_code = STATUS_CODES.get(type(error), 400)

    if isinstance(error, StorageFailureError):
        logger.error(f"Storage failure: {error}", extra={"request_id": request_id})
    else:
        logger.warning(f"Request rejected: {error}", extra={"request_id": request_id, "code": error.code})

    return HTTPException(status_code=status_code, detail=error.to_detail())
