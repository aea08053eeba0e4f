"""
HTTP transport for the public Fantasy Premier League API.

All timeouts, retries and circuit breaking for the FPL API live here; the
layers above never retry. Every call returns ``Ok(json)`` or
``Err(DataLayerError)`` with code FETCH_ERROR (transport, status, open
circuit) or VALIDATION_ERROR (body is not JSON).

Endpoints:
- /bootstrap-static/                       events, teams, elements
- /fixtures/[?event={id}]                  fixtures
- /event/{id}/live/                        live element stats
- /leagues-classic/{id}/standings/?page_standings={page}
"""
import logging
from typing import Any, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from fpl_sync.core.circuit_breaker import CircuitBreaker, CircuitBreakerConfig, CircuitBreakerOpenError
from fpl_sync.core.errors import DataLayerError, DataLayerErrorCode
from fpl_sync.core.metrics import fpl_api_requests_failure_total, fpl_api_requests_success_total
from fpl_sync.core.result import Err, Ok, Result

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


def _is_retryable(error: BaseException) -> bool:
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in RETRYABLE_STATUS_CODES
    return isinstance(error, httpx.TransportError)


def _endpoint_label(path: str) -> str:
    """Collapse ids so metrics labels stay low-cardinality."""
    parts = [("{id}" if p.isdigit() else p) for p in path.split("?")[0].strip("/").split("/")]
    return "/" + "/".join(parts) + "/"


def create_fpl_breaker() -> CircuitBreaker:
    return CircuitBreaker(
        name="fpl_api",
        config=CircuitBreakerConfig(),
        failure_exceptions=(httpx.HTTPError,),
    )


class FplClient:
    """
    Async FPL API client.

    Usage:
        client = FplClient(base_url=settings.FPL_API_BASE_URL)
        result = await client.get_bootstrap_static()
        await client.aclose()
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        user_agent: Optional[str] = None,
        max_retries: int = 3,
        retry_wait_multiplier: float = 1.0,
        http_client: Optional[httpx.AsyncClient] = None,
        breaker: Optional[CircuitBreaker] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(1, max_retries)
        self.retry_wait_multiplier = retry_wait_multiplier
        self.breaker = breaker or create_fpl_breaker()
        self._owns_client = http_client is None
        self.http = http_client or httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            headers={"User-Agent": user_agent} if user_agent else None,
            follow_redirects=True,
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self.http.aclose()

    # ========================================================================
    # Endpoints
    # ========================================================================

    async def get_bootstrap_static(self) -> Result[Any, DataLayerError]:
        return await self.get_json("/bootstrap-static/")

    async def get_fixtures(self, event_id: Optional[int] = None) -> Result[Any, DataLayerError]:
        path = "/fixtures/" if event_id is None else f"/fixtures/?event={event_id}"
        return await self.get_json(path)

    async def get_event_live(self, event_id: int) -> Result[Any, DataLayerError]:
        return await self.get_json(f"/event/{event_id}/live/")

    async def get_classic_league_standings(self, league_id: int, page: int = 1) -> Result[Any, DataLayerError]:
        return await self.get_json(f"/leagues-classic/{league_id}/standings/?page_standings={page}")

    # ========================================================================
    # Transport
    # ========================================================================

    async def get_json(self, path: str) -> Result[Any, DataLayerError]:
        endpoint = _endpoint_label(path)
        try:
            response = await self.breaker.call(self._get_with_retry, path)
        except CircuitBreakerOpenError as e:
            return Err(self._fetch_error(path, endpoint, "circuit_open", str(e), e))
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            return Err(self._fetch_error(
                path, endpoint, f"http_{status}", f"FPL API returned {status} for {path}", e,
                status_code=status,
            ))
        except httpx.HTTPError as e:
            return Err(self._fetch_error(
                path, endpoint, type(e).__name__, f"FPL API request failed for {path}: {e}", e
            ))

        try:
            payload = response.json()
        except ValueError as e:
            fpl_api_requests_failure_total.labels(endpoint=endpoint, error_type="invalid_json").inc()
            return Err(DataLayerError(
                DataLayerErrorCode.VALIDATION_ERROR,
                f"FPL API returned a non-JSON body for {path}",
                details={"path": path},
                cause=e,
            ))

        fpl_api_requests_success_total.labels(endpoint=endpoint).inc()
        return Ok(payload)

    async def _get_with_retry(self, path: str) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_wait_multiplier, min=0, max=10),
            retry=retry_if_exception(_is_retryable),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                if attempt.retry_state.attempt_number > 1:
                    logger.warning(f"Retrying FPL request {path} (attempt {attempt.retry_state.attempt_number})")
                response = await self.http.get(path)
                response.raise_for_status()
        return response

    def _fetch_error(
        self,
        path: str,
        endpoint: str,
        error_type: str,
        message: str,
        cause: BaseException,
        status_code: Optional[int] = None,
    ) -> DataLayerError:
        fpl_api_requests_failure_total.labels(endpoint=endpoint, error_type=error_type).inc()
        logger.error(message, extra={"path": path, "error_type": error_type})
        details: dict[str, Any] = {"path": path}
        if status_code is not None:
            details["status_code"] = status_code
        return DataLayerError(DataLayerErrorCode.FETCH_ERROR, message, details=details, cause=cause)
