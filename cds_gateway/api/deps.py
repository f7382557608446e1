"""FastAPI dependency injection utilities."""

from typing import Annotated

from fastapi import Depends, Request

from cds_gateway.hooks.repository import HookRepository
from cds_gateway.libraries.repository import LibraryRepository
from cds_gateway.libraries.store import LibraryStore


def get_library_repository(request: Request) -> LibraryRepository:
    """Return the library repository attached at startup."""
    return request.app.state.libraries


def get_hook_repository(request: Request) -> HookRepository:
    """Return the hook repository attached at startup."""
    return request.app.state.hooks


def get_library_store(
    repository: Annotated[LibraryRepository, Depends(get_library_repository)],
) -> LibraryStore:
    """Reload libraries if they changed on disk, then return the live store.

    The staleness check is throttled inside the repository, so this is
    safe to run on every request.

    Args:
        repository: Library repository

    Returns:
        The store published after the check
    """
    repository.check_and_reload_if_needed()
    return repository.get()


# Type aliases for cleaner dependency injection
Libraries = Annotated[LibraryRepository, Depends(get_library_repository)]
LibraryStoreDep = Annotated[LibraryStore, Depends(get_library_store)]
Hooks = Annotated[HookRepository, Depends(get_hook_repository)]
