"""API router aggregating all endpoints."""

from fastapi import APIRouter

from cds_gateway.api import cds_services, health, library

api_router = APIRouter()

# Liveness and readiness probes
api_router.include_router(
    health.router,
    tags=["health"],
)

# Library lookup
api_router.include_router(
    library.router,
    prefix="/api/library",
    tags=["library"],
)

# CDS Hooks discovery
api_router.include_router(
    cds_services.router,
    prefix="/cds-services",
    tags=["cds-services"],
)
