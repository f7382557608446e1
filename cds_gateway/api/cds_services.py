"""CDS Hooks discovery endpoints."""

from typing import Any

from fastapi import APIRouter, HTTPException, status

from cds_gateway.api.deps import Hooks

router = APIRouter()


@router.get(
    "",
    summary="CDS Hooks discovery",
    description="Lists the CDS services this gateway offers",
)
async def discover_services(hooks: Hooks) -> dict[str, Any]:
    """Return the CDS Hooks discovery document."""
    return hooks.discovery()


@router.get(
    "/{hook_id}",
    summary="Get CDS service",
    description="Discovery entry for a single CDS service",
)
async def get_service(hook_id: str, hooks: Hooks) -> dict[str, Any]:
    """Return one service's discovery entry.

    Raises:
        HTTPException: 404 if no hook has this id
    """
    hook = hooks.find(hook_id)
    if hook is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Service not found: {hook_id}",
        )
    return hook.discovery()
