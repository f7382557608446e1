"""Health check endpoints."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from cds_gateway.api.deps import Hooks, Libraries
from cds_gateway.utils.time import format_datetime, utc_now

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str


class ComponentCheck(BaseModel):
    """Load status of one content repository."""

    loaded: int
    status: str


class ReadinessResponse(BaseModel):
    """Readiness check response."""

    status: str
    timestamp: str
    checks: dict[str, ComponentCheck]


def _component(count: int) -> ComponentCheck:
    return ComponentCheck(loaded=count, status="ok" if count > 0 else "fail")


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Health check",
    description="Liveness probe; always ok while the process is running",
)
async def health_check() -> HealthResponse:
    """Check if the service is alive.

    Returns:
        Health status response
    """
    return HealthResponse(status="ok", timestamp=format_datetime(utc_now()))


@router.get(
    "/ready",
    response_model=ReadinessResponse,
    summary="Readiness check",
    description="Returns 200 once libraries and hooks are loaded, 503 otherwise",
    responses={503: {"model": ReadinessResponse}},
)
async def readiness_check(libraries: Libraries, hooks: Hooks) -> JSONResponse:
    """Check if the service is ready to execute hooks.

    Ready means at least one library and at least one hook are loaded.

    Args:
        libraries: Library repository
        hooks: Hook repository

    Returns:
        Readiness status with per-repository counts
    """
    library_count = len(libraries.get().all())
    hook_count = len(hooks.all())
    is_ready = library_count > 0 and hook_count > 0

    body = ReadinessResponse(
        status="ready" if is_ready else "not_ready",
        timestamp=format_datetime(utc_now()),
        checks={
            "libraries": _component(library_count),
            "hooks": _component(hook_count),
        },
    )
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content=body.model_dump(),
    )
