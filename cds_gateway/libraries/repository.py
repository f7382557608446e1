"""Library repository handle with lazy hot-reload.

The repository owns the currently published LibraryStore. Reloads build a
replacement store off to the side and swap it in under a lock, so readers
holding the previous store keep a complete, consistent view and a failed
reload never disturbs the live store.

Staleness is checked lazily: request handlers call
``check_and_reload_if_needed()`` and the check itself is throttled to one
filesystem scan per ``check_interval`` seconds.
"""

import logging
import threading
import time
from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from cds_gateway.libraries.loader import build_store, latest_mtime, load_directory
from cds_gateway.libraries.models import LoadResult
from cds_gateway.libraries.store import LibraryStore

logger = logging.getLogger(__name__)

DEFAULT_CHECK_INTERVAL_SECONDS = 1.0


class RepositoryState(str, Enum):
    """Lifecycle of the repository handle."""

    UNINITIALIZED = "uninitialized"
    LOADED = "loaded"


def _iso(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()


class LibraryRepository:
    """Process-wide handle on the published library store."""

    def __init__(
        self,
        check_interval: float = DEFAULT_CHECK_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.check_interval = check_interval
        self._clock = clock
        self._lock = threading.Lock()

        self._store = LibraryStore()
        self.root: Path | None = None
        self.state = RepositoryState.UNINITIALIZED
        self.last_load_time = 0.0
        self.last_check_time: float | None = None
        self._last_attempt_time = 0.0
        self.scan_count = 0

    def get(self) -> LibraryStore:
        """Return the currently published store."""
        return self._store

    def _publish(self, store: LibraryStore, load_time: float) -> None:
        with self._lock:
            self._store = store
            self.last_load_time = load_time
            self.state = RepositoryState.LOADED

    def reset(self) -> None:
        """Discard all loaded documents by publishing an empty store."""
        with self._lock:
            self._store = LibraryStore()

    def load(self, path: Path | str) -> LoadResult:
        """Load a library tree and publish it.

        The path becomes the root watched by the staleness check. If loading
        fails, the previously published store stays live.

        Args:
            path: Directory tree holding library JSON files

        Returns:
            LoadResult describing what was loaded or why it failed
        """
        root = Path(path)
        if not root.is_dir():
            result = LoadResult.failure(
                root,
                f"Failed to load local repository at: {root}. Not a valid folder path.",
            )
            logger.error(result.error)
            return result

        self.root = root
        # Stamp before walking so edits made during the walk look stale next time
        started = self._clock()
        self._last_attempt_time = started

        result = load_directory(root)
        if not result.ok:
            logger.error(f"{result.error}. Keeping {len(self._store)} previously loaded libraries.")
            return result

        store = build_store(result.documents)
        self._publish(store, started)
        logger.info(f"Loaded {len(store)} libraries from {root}")
        return result

    def check_and_reload_if_needed(self) -> bool:
        """Reload the library tree if it changed since the last load.

        At most one filesystem scan happens per check interval. Errors are
        logged, never raised.

        Returns:
            True if a new store was published
        """
        if self.root is None:
            return False

        now = self._clock()
        if (
            self.last_check_time is not None
            and now - self.last_check_time < self.check_interval
        ):
            return False
        self.last_check_time = now

        try:
            latest = latest_mtime(self.root)
        except OSError as e:
            logger.error(f"Error checking modification time of {self.root}: {e}")
            return False
        finally:
            self.scan_count += 1

        if latest <= self._last_attempt_time:
            return False

        logger.info(f"Libraries changed (mod: {_iso(latest)}), reloading...")
        result = self.load(self.root)
        if not result.ok:
            return False

        documents = self._store.all()
        logger.info(f"Reloaded {len(documents)} libraries")
        for document in documents:
            logger.info(f"  - {document.id}:{document.version}")
        return True
