"""
Shared plumbing for the per-entity services.

Services are the boundary between the domain/sync layers and the API: every
lower-layer error is translated to a ``ServiceError`` here, with the original
kept as ``__cause__``.
"""
from datetime import datetime
from typing import Optional, TypeVar

from fpl_sync.core.errors import (
    DomainError,
    DomainErrorCode,
    ServiceError,
    ServiceErrorCode,
    SyncError,
    SyncErrorCode,
)
from fpl_sync.core.result import Err, Ok, Result

T = TypeVar("T")

_INTEGRATION_SYNC_CODES = {
    SyncErrorCode.FETCH_ERROR,
    SyncErrorCode.VALIDATION_ERROR,
    SyncErrorCode.MAPPING_ERROR,
}


def service_error_from_domain(error: DomainError) -> ServiceError:
    if error.code == DomainErrorCode.NOT_FOUND:
        code = ServiceErrorCode.NOT_FOUND
    elif error.code == DomainErrorCode.VALIDATION_ERROR:
        code = ServiceErrorCode.VALIDATION_ERROR
    else:
        code = ServiceErrorCode.OPERATION_ERROR
    return ServiceError(code, error.message, details=dict(error.details), cause=error)


def service_error_from_sync(error: SyncError) -> ServiceError:
    """Source-side failures are integration errors; store-side ones are operation errors."""
    if error.code in _INTEGRATION_SYNC_CODES:
        code = ServiceErrorCode.INTEGRATION_ERROR
    else:
        code = ServiceErrorCode.OPERATION_ERROR
    return ServiceError(code, error.message, details=dict(error.details), cause=error)


def not_found(what: str, **details) -> ServiceError:
    return ServiceError(ServiceErrorCode.NOT_FOUND, f"{what} not found", details=details)


def require(result: Result[Optional[T], ServiceError], what: str, **details) -> Result[T, ServiceError]:
    """Turn ``Ok(None)`` into NOT_FOUND."""
    if result.is_err():
        return result
    if result.value is None:
        return Err(not_found(what, **details))
    return result


def validate_event_id(event_id: int, max_event_id: int) -> Result[int, ServiceError]:
    if isinstance(event_id, bool) or not isinstance(event_id, int) or not 1 <= event_id <= max_event_id:
        return Err(ServiceError(
            ServiceErrorCode.VALIDATION_ERROR,
            f"Event id must be between 1 and {max_event_id}, got {event_id!r}",
            details={"event_id": event_id},
        ))
    return Ok(event_id)


def validate_positive_id(value: int, name: str) -> Result[int, ServiceError]:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        return Err(ServiceError(
            ServiceErrorCode.VALIDATION_ERROR,
            f"{name} must be a positive integer, got {value!r}",
            details={name: value},
        ))
    return Ok(value)


def validate_change_date(value: str) -> Result[str, ServiceError]:
    """A calendar date written as YYYYMMDD."""
    try:
        parsed = datetime.strptime(value, "%Y%m%d") if len(value) == 8 and value.isdigit() else None
    except (TypeError, ValueError):
        parsed = None
    if parsed is None:
        return Err(ServiceError(
            ServiceErrorCode.VALIDATION_ERROR,
            f"change_date must be a YYYYMMDD date, got {value!r}",
            details={"change_date": value},
        ))
    return Ok(value)


class BaseService:
    """
    Base class for entity services.

    Attributes:
        season: Season every read and sync is scoped to, e.g. "2526"
    """

    def __init__(self, season: str):
        self.season = season
