"""In-memory versioned library store."""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from cds_gateway.libraries.models import LibraryDocument, ResolveResult
from cds_gateway.libraries.versions import latest_version, normalize_version

logger = logging.getLogger(__name__)


class LibraryStore:
    """Two-level mapping of library id -> version -> document.

    The first document added for a given (id, version) is kept. A later
    document with the same key and different content is reported as a
    conflict and discarded.

    Once a store has been published by the repository it is treated as
    immutable; reloads build a new store instead.
    """

    def __init__(self, documents: Iterable[LibraryDocument] = ()) -> None:
        self._store: dict[str, dict[str, LibraryDocument]] = {}
        self.conflicts: list[tuple[str, str]] = []

        for document in documents:
            self.add(document)

    def add(self, document: LibraryDocument) -> bool:
        """Add a document to the store.

        Args:
            document: Document to index

        Returns:
            True if the document was stored, False if its key was taken
        """
        versions = self._store.setdefault(document.id, {})
        existing = versions.get(document.version)

        if existing is None:
            versions[document.version] = document
            return True

        if not existing.content_equals(document):
            self.conflicts.append(document.key)
            logger.warning(
                f"Multiple copies of {document.id}:{document.version} found "
                f"with differences in content. Keeping {existing.path or 'first copy'}, "
                f"ignoring {document.path or 'later copy'}.",
                extra={
                    "library_id": document.id,
                    "library_version": document.version,
                },
            )

        return False

    def add_json(self, data: Any, path: Path | None = None) -> bool:
        """Add a raw JSON payload; payloads without an identifier are ignored."""
        document = LibraryDocument.from_json(data, path)
        if document is None:
            return False
        return self.add(document)

    def all(self) -> list[LibraryDocument]:
        """Return every stored document, one per (id, version)."""
        return [
            document
            for versions in self._store.values()
            for document in versions.values()
        ]

    def ids(self) -> list[str]:
        """Return the ids of all libraries with at least one version."""
        return [library_id for library_id, versions in self._store.items() if versions]

    def versions(self, library_id: str) -> list[str]:
        """Return the stored versions of a library."""
        return list(self._store.get(library_id, {}))

    def resolve(self, library_id: str, version: str | None = None) -> ResolveResult:
        """Look up a library by exact version, or the latest when version is None.

        Args:
            library_id: Library identifier
            version: Version string, normalized before lookup

        Returns:
            ResolveResult holding the document or the reason for the miss
        """
        if version is None:
            return self.resolve_latest(library_id)

        key = normalize_version(version)
        document = self._store.get(library_id, {}).get(key)
        if document is None:
            reason = f'Failed to resolve library "{library_id}" with version "{version}"'
            logger.info(reason)
            return ResolveResult.miss(reason)

        return ResolveResult.hit(document)

    def resolve_latest(self, library_id: str) -> ResolveResult:
        """Look up the highest version of a library by semantic precedence."""
        versions = self._store.get(library_id)
        latest = latest_version(versions) if versions else None

        if latest is None:
            reason = f'Failed to resolve latest version of library "{library_id}"'
            logger.info(reason)
            return ResolveResult.miss(reason)

        return ResolveResult.hit(versions[latest])

    def __len__(self) -> int:
        return sum(len(versions) for versions in self._store.values())

    def __contains__(self, library_id: object) -> bool:
        return isinstance(library_id, str) and bool(self._store.get(library_id))
