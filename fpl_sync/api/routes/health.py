"""Health check routes."""
import logging
from typing import Dict

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from fpl_sync.api.dependencies import get_container
from fpl_sync.container import Container
from fpl_sync.core.circuit_breaker import get_breaker_state
from fpl_sync.core.redis import check_redis

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(container: Container = Depends(get_container)) -> Dict:
    """Liveness check."""
    return {
        "status": "healthy",
        "version": container.settings.APP_VERSION,
    }


@router.get("/api/health")
async def api_health(container: Container = Depends(get_container)):
    """Detailed health check with component-level status."""
    components: Dict[str, Dict] = {}
    all_healthy = True

    session = container.session_factory()
    try:
        session.execute(text("SELECT 1"))
        components["database"] = {"status": "connected"}
    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        components["database"] = {"status": "unhealthy", "error": type(e).__name__}
        all_healthy = False
    finally:
        session.close()

    if await check_redis(container.redis):
        components["redis"] = {"status": "connected"}
    else:
        components["redis"] = {"status": "unhealthy"}
        all_healthy = False

    breaker_state = get_breaker_state(container.fpl_client.breaker)
    components["fpl_api"] = {"circuit_breaker": breaker_state}
    if breaker_state == "open":
        all_healthy = False

    body = {
        "status": "healthy" if all_healthy else "degraded",
        "version": container.settings.APP_VERSION,
        "season": container.season,
        "components": components,
    }
    return JSONResponse(status_code=200 if all_healthy else 503, content=body)
