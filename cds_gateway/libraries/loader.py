"""Directory loader for library JSON files."""

import json
from collections.abc import Iterable, Iterator
from pathlib import Path
from typing import Any

from cds_gateway.libraries.models import LibraryDocument, LoadResult
from cds_gateway.libraries.store import LibraryStore

LIBRARY_FILE_SUFFIX = ".json"


class LibraryParseError(Exception):
    """Raised when a library file cannot be parsed."""

    def __init__(self, path: Path, message: str) -> None:
        super().__init__(f"Failed to parse library file {path}: {message}")
        self.path = path


def is_library_file(path: Path) -> bool:
    """Check whether a file name carries the library file extension."""
    return path.name.endswith(LIBRARY_FILE_SUFFIX)


def iter_library_files(root: Path) -> Iterator[Path]:
    """Walk a directory tree and yield library files in sorted order.

    Symlinked directories are not descended into.

    Args:
        root: Directory to walk

    Yields:
        Paths of files ending in the library file extension
    """
    pending = [root]
    while pending:
        directory = pending.pop()
        subdirectories = []

        for entry in sorted(directory.iterdir()):
            if entry.is_dir():
                if not entry.is_symlink():
                    subdirectories.append(entry)
            elif entry.is_file() and is_library_file(entry):
                yield entry

        # Reverse so the stack pops subdirectories in name order
        pending.extend(reversed(subdirectories))


def read_library_file(path: Path) -> Any:
    """Read and parse one library file.

    Raises:
        LibraryParseError: If the content is not valid JSON
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise LibraryParseError(path, str(e)) from e


def iter_documents(root: Path) -> Iterator[LibraryDocument]:
    """Lazily parse every library file under root.

    Payloads without an identifier id are skipped.

    Raises:
        LibraryParseError: On the first malformed file
        OSError: If the tree cannot be read
    """
    for path in iter_library_files(root):
        document = LibraryDocument.from_json(read_library_file(path), path)
        if document is not None:
            yield document


def load_directory(root: Path | str) -> LoadResult:
    """Load every library document found under a directory.

    Args:
        root: Directory tree to load

    Returns:
        LoadResult with the parsed documents, or an error reason. Nothing is
        loaded when any file fails to parse.
    """
    root = Path(root)
    if not root.is_dir():
        return LoadResult.failure(
            root,
            f"Failed to load local repository at: {root}. Not a valid folder path.",
        )

    try:
        documents = list(iter_documents(root))
    except LibraryParseError as e:
        return LoadResult.failure(root, str(e))
    except OSError as e:
        return LoadResult.failure(root, f"Failed to read local repository at: {root}: {e}")

    return LoadResult(root=root, documents=documents)


def build_store(documents: Iterable[LibraryDocument]) -> LibraryStore:
    """Bulk insert documents into a new, unpublished store."""
    return LibraryStore(documents)


def latest_mtime(root: Path) -> float:
    """Get the most recent modification time under a directory tree.

    Covers the directories themselves, so that deleted or renamed files
    are noticed, and every library file the loader would read.

    Args:
        root: Directory tree to scan

    Returns:
        Latest modification time in seconds since the epoch

    Raises:
        OSError: If any entry cannot be read
    """
    latest = root.stat().st_mtime
    pending = [root]
    while pending:
        directory = pending.pop()
        for entry in directory.iterdir():
            if entry.is_dir():
                latest = max(latest, entry.stat().st_mtime)
                if not entry.is_symlink():
                    pending.append(entry)
            elif entry.is_file() and is_library_file(entry):
                latest = max(latest, entry.stat().st_mtime)
    return latest
