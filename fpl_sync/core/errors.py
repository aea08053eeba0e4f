"""
Layered error taxonomy.

Errors are exception subclasses so they carry a traceback-friendly ``__cause__``
chain, but they travel inside ``Err`` values and are never raised across a layer
boundary. Each layer wraps the error below it as ``cause`` and adds context
(entity kind, scope, id) to ``details``:

    CacheError / QueryError / DataLayerError
        -> DomainError / SyncError
            -> ServiceError
                -> APIError (only ``code`` and ``message`` leave the process)
"""
from enum import Enum
from typing import Any, Dict, Optional


class CacheErrorCode(str, Enum):
    CONNECTION_ERROR = "CONNECTION_ERROR"
    OPERATION_ERROR = "OPERATION_ERROR"
    SERIALIZATION_ERROR = "SERIALIZATION_ERROR"
    DESERIALIZATION_ERROR = "DESERIALIZATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"


class QueryErrorCode(str, Enum):
    CONNECTION_ERROR = "CONNECTION_ERROR"
    QUERY_ERROR = "QUERY_ERROR"
    CONSTRAINT_ERROR = "CONSTRAINT_ERROR"


class DataLayerErrorCode(str, Enum):
    FETCH_ERROR = "FETCH_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MAPPING_ERROR = "MAPPING_ERROR"


class DomainErrorCode(str, Enum):
    CACHE_ERROR = "CACHE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    NOT_FOUND = "NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"


class SyncErrorCode(str, Enum):
    FETCH_ERROR = "FETCH_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MAPPING_ERROR = "MAPPING_ERROR"
    QUERY_ERROR = "QUERY_ERROR"
    OPERATION_ERROR = "OPERATION_ERROR"


class ServiceErrorCode(str, Enum):
    INTEGRATION_ERROR = "INTEGRATION_ERROR"
    OPERATION_ERROR = "OPERATION_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"


class APIErrorCode(str, Enum):
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    SERVICE_ERROR = "SERVICE_ERROR"


class AppError(Exception):
    """Base class for every error carried inside ``Err``."""

    def __init__(
        self,
        code: Enum,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__

    def root_cause(self) -> BaseException:
        """Walk the ``__cause__`` chain down to the first non-AppError or the last link."""
        current: BaseException = self
        while isinstance(current, AppError) and current.cause is not None:
            current = current.cause
        return current

    def to_dict(self) -> Dict[str, str]:
        return {"code": self.code.value, "message": self.message}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(code={self.code.value}, message={self.message!r})"


class CacheError(AppError):
    code: CacheErrorCode


class QueryError(AppError):
    code: QueryErrorCode


class DataLayerError(AppError):
    code: DataLayerErrorCode


class DomainError(AppError):
    code: DomainErrorCode


class SyncError(AppError):
    code: SyncErrorCode


class ServiceError(AppError):
    code: ServiceErrorCode


class APIError(AppError):
    code: APIErrorCode

    def __init__(
        self,
        code: APIErrorCode,
        message: str,
        status_code: int,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        super().__init__(code, message, details=details, cause=cause)
        self.status_code = status_code
