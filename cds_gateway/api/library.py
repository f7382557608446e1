"""Library lookup endpoints.

Read-only access to the compiled libraries currently loaded. Every request
first gives the repository a chance to pick up changes on disk.
"""

from typing import Any

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel

from cds_gateway.api.deps import LibraryStoreDep
from cds_gateway.libraries.models import ResolveResult
from cds_gateway.libraries.versions import version_key

router = APIRouter()


class LibrarySummary(BaseModel):
    """Identifier of a loaded library."""

    id: str
    version: str
    content_hash: str


class LibraryListResponse(BaseModel):
    """All loaded libraries."""

    libraries: list[LibrarySummary]


def _document_or_404(result: ResolveResult) -> dict[str, Any]:
    if not result.found:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=result.reason,
        )
    return result.document.to_json()


@router.get(
    "",
    response_model=LibraryListResponse,
    summary="List libraries",
    description="Every loaded library id and version",
)
async def list_libraries(store: LibraryStoreDep) -> LibraryListResponse:
    """List loaded libraries ordered by id, then version precedence."""
    documents = sorted(store.all(), key=lambda d: (d.id, version_key(d.version)))
    return LibraryListResponse(
        libraries=[
            LibrarySummary(id=d.id, version=d.version, content_hash=d.content_hash)
            for d in documents
        ]
    )


@router.get(
    "/{library_id}",
    summary="Get latest library version",
    description="ELM JSON of the highest version of a library",
)
async def get_latest_library(library_id: str, store: LibraryStoreDep) -> dict[str, Any]:
    """Return the latest version of a library.

    Args:
        library_id: Library identifier
        store: Live library store

    Returns:
        The library's ELM JSON

    Raises:
        HTTPException: 404 if the library is not loaded
    """
    return _document_or_404(store.resolve_latest(library_id))


@router.get(
    "/{library_id}/version/{version}",
    summary="Get library version",
    description="ELM JSON of a specific library version",
)
async def get_library_version(
    library_id: str,
    version: str,
    store: LibraryStoreDep,
) -> dict[str, Any]:
    """Return an exact library version.

    Raises:
        HTTPException: 404 if the version is not loaded
    """
    return _document_or_404(store.resolve(library_id, version))
