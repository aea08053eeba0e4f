"""
API error mapping and response envelope.

Successful responses are ``{"data": ...}``; failures are
``{"error": {"code": ..., "message": ...}}``. Only the code and message of an
``APIError`` reach the client; causes and details stay in the logs.

Status mapping:
- VALIDATION_ERROR -> 400
- NOT_FOUND        -> 404
- INTEGRATION_ERROR (source side) -> 502 SERVICE_ERROR
- any other service failure       -> 503 SERVICE_ERROR
"""
import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from fpl_sync.core.errors import APIError, APIErrorCode, ServiceError, ServiceErrorCode
from fpl_sync.core.result import Result

logger = logging.getLogger(__name__)


def api_error_from_service(error: ServiceError) -> APIError:
    if error.code == ServiceErrorCode.VALIDATION_ERROR:
        return APIError(APIErrorCode.VALIDATION_ERROR, error.message, 400, cause=error)
    if error.code == ServiceErrorCode.NOT_FOUND:
        return APIError(APIErrorCode.NOT_FOUND, error.message, 404, cause=error)
    if error.code == ServiceErrorCode.INTEGRATION_ERROR:
        return APIError(APIErrorCode.SERVICE_ERROR, "Upstream data source failed", 502, cause=error)
    return APIError(APIErrorCode.SERVICE_ERROR, "Service temporarily unavailable", 503, cause=error)


def respond(result: Result[Any, ServiceError]) -> dict:
    """Unwrap a service result into the response envelope, raising ``APIError`` on failure."""
    if result.is_err():
        raise api_error_from_service(result.error)
    return {"data": jsonable_encoder(result.value)}


def error_body(error: APIError) -> dict:
    return {"error": error.to_dict()}


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    root = exc.root_cause()
    log = logger.warning if exc.status_code < 500 else logger.error
    log(
        f"{request.method} {request.url.path} -> {exc.status_code} {exc.code.value}: "
        f"{exc.cause.message if isinstance(exc.cause, ServiceError) else exc.message}",
        extra={"status_code": exc.status_code, "root_cause": type(root).__name__},
    )
    return JSONResponse(status_code=exc.status_code, content=error_body(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in exc.errors())
    error = APIError(APIErrorCode.VALIDATION_ERROR, f"Invalid request parameters: {fields}", 400)
    return JSONResponse(status_code=400, content=error_body(error))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
