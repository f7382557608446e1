"""Library document and result models."""

import copy
import hashlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from cds_gateway.libraries.versions import normalize_version


def compute_content_hash(data: Any) -> str:
    """Compute SHA256 hash of a document's canonical JSON serialization.

    Two payloads hash the same exactly when they are deep-equal JSON values.

    Args:
        data: Parsed JSON payload

    Returns:
        SHA256 hex digest
    """
    content_str = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(content_str.encode("utf-8")).hexdigest()


def _extract_identifier(data: Any) -> dict | None:
    """Find the identifier block of an ELM or bare document."""
    if not isinstance(data, dict):
        return None

    library = data.get("library")
    if isinstance(library, dict) and isinstance(library.get("identifier"), dict):
        return library["identifier"]

    identifier = data.get("identifier")
    if isinstance(identifier, dict):
        return identifier

    return None


@dataclass(frozen=True)
class LibraryDocument:
    """One versioned rule-definition payload.

    ``source`` is shared with every reader of a published store and must be
    treated as read-only; ``content_hash`` is computed from it once. Use
    ``to_json()`` for a copy that callers may modify.
    """

    id: str
    version: str
    source: dict = field(repr=False, compare=False)
    path: Optional[Path] = field(default=None, compare=False)
    content_hash: str = field(default="", repr=False)

    @classmethod
    def from_json(cls, data: Any, path: Path | None = None) -> "LibraryDocument | None":
        """Create a document from a parsed JSON payload.

        Args:
            data: Parsed JSON content
            path: File the payload was read from

        Returns:
            LibraryDocument, or None if the payload carries no identifier id
        """
        identifier = _extract_identifier(data)
        if identifier is None:
            return None

        library_id = identifier.get("id")
        if not isinstance(library_id, str) or not library_id:
            return None

        return cls(
            id=library_id,
            version=normalize_version(identifier.get("version")),
            source=data,
            path=path,
            content_hash=compute_content_hash(data),
        )

    @property
    def key(self) -> tuple[str, str]:
        return (self.id, self.version)

    def content_equals(self, other: "LibraryDocument") -> bool:
        """Check whether two documents have identical content."""
        return self.content_hash == other.content_hash

    def to_json(self) -> dict:
        """Return a deep copy of the payload."""
        return copy.deepcopy(self.source)

    def summary(self) -> dict[str, str]:
        """Short description used by listings and reload logs."""
        return {"id": self.id, "version": self.version}


@dataclass(frozen=True)
class ResolveResult:
    """Outcome of a library lookup."""

    document: Optional[LibraryDocument] = None
    reason: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.document is not None

    @classmethod
    def hit(cls, document: LibraryDocument) -> "ResolveResult":
        return cls(document=document)

    @classmethod
    def miss(cls, reason: str) -> "ResolveResult":
        return cls(reason=reason)


@dataclass
class LoadResult:
    """Outcome of loading a directory tree."""

    root: Path
    documents: list[LibraryDocument] = field(default_factory=list)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, root: Path, reason: str) -> "LoadResult":
        return cls(root=root, error=reason)
