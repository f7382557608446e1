"""Versioned library repository with lazy hot-reload.

Libraries are pre-compiled rule definitions (ELM JSON) loaded from a
directory tree and resolved by id and semantic version.
"""

from cds_gateway.libraries.loader import (
    LibraryParseError,
    iter_documents,
    latest_mtime,
    load_directory,
)
from cds_gateway.libraries.models import LibraryDocument, LoadResult, ResolveResult
from cds_gateway.libraries.repository import LibraryRepository, RepositoryState
from cds_gateway.libraries.store import LibraryStore
from cds_gateway.libraries.versions import latest_version, normalize_version

__all__ = [
    "LibraryDocument",
    "LibraryParseError",
    "LibraryRepository",
    "LibraryStore",
    "LoadResult",
    "RepositoryState",
    "ResolveResult",
    "iter_documents",
    "latest_mtime",
    "latest_version",
    "load_directory",
    "normalize_version",
]
