# hydroscan/api/errors.py
from fastapi import HTTPException

from hydroscan.domain.errors import (
    HydroScanError,
    IllegalStateTransition,
    NotFound,
    NotLoggedIn,
    PersistenceFailure,
    ValidationError,
)

STATUS_CODES = (
    (NotLoggedIn, 401),
    (NotFound, 404),
    (IllegalStateTransition, 409),
    (ValidationError, 400),
    (PersistenceFailure, 503),
)


def to_http(e: HydroScanError) -> HTTPException:
    for exc_type, status_code in STATUS_CODES:
        if isinstance(e, exc_type):
            return HTTPException(status_code=status_code, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))
