"""
Health check endpoints.
"""

import time

from fastapi import APIRouter, Depends

from src.api.dependencies import get_llm, get_session
from src.application.dto.responses import HealthResponse, ProviderHealthResponse
from src.application.ledger_session import LedgerSession

router = APIRouter(prefix="/api/health", tags=["health"])

# Track startup time
_start_time = time.time()


@router.get("", response_model=HealthResponse)
async def health_check(
    session: LedgerSession = Depends(get_session),
) -> HealthResponse:
    """
    Basic health check.

    Returns service status, uptime and a key-value store probe.
    """
    store_name = session.store.__class__.__name__
    try:
        start = time.time()
        await session.store.keys()
        storage = ProviderHealthResponse(
            name=store_name,
            available=True,
            latency_ms=(time.time() - start) * 1000,
        )
    except Exception as e:
        storage = ProviderHealthResponse(name=store_name, available=False, error=str(e))

    return HealthResponse(
        status="healthy" if storage.available else "unhealthy",
        uptime_seconds=time.time() - _start_time,
        storage=storage,
    )


@router.get("/llm", response_model=HealthResponse)
async def llm_health() -> HealthResponse:
    """
    LLM provider health check.

    Tests LLM connectivity and response time.
    """
    try:
        llm = get_llm()
        start = time.time()
        health_result = await llm.check_health()
        latency = (time.time() - start) * 1000

        llm_status = ProviderHealthResponse(
            name=f"{health_result.provider}:{health_result.model or 'unknown'}",
            available=health_result.available,
            latency_ms=latency,
            error=health_result.error,
        )

    except Exception as e:
        llm_status = ProviderHealthResponse(
            name="unknown",
            available=False,
            error=str(e),
        )

    return HealthResponse(
        status="healthy" if llm_status.available else "degraded",
        uptime_seconds=time.time() - _start_time,
        llm=llm_status,
    )
