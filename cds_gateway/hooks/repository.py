"""Hook definition repository."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from cds_gateway.hooks.models import HookDefinition
from cds_gateway.libraries.loader import iter_library_files

logger = logging.getLogger(__name__)


@dataclass
class HookLoadResult:
    """Outcome of loading hook definitions."""

    root: Path
    loaded: int = 0
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class HookRepository:
    """In-memory collection of CDS Hooks service definitions, keyed by id."""

    def __init__(self) -> None:
        self._hooks: dict[str, HookDefinition] = {}

    def add(self, hook: HookDefinition) -> bool:
        """Add a hook; the first definition for an id wins."""
        if hook.id in self._hooks:
            logger.warning(f"Duplicate hook id {hook.id} found. Only the first will be loaded.")
            return False
        self._hooks[hook.id] = hook
        return True

    def load(self, path: Path | str) -> HookLoadResult:
        """Load every hook JSON file under a directory tree.

        Invalid or unreadable files are logged and skipped.

        Args:
            path: Directory holding hook definition files

        Returns:
            HookLoadResult with the number loaded and per-file errors
        """
        root = Path(path)
        result = HookLoadResult(root=root)

        if not root.is_dir():
            message = f"Failed to load hooks at: {root}. Not a valid folder path."
            logger.error(message)
            result.errors.append(message)
            return result

        staged = HookRepository()
        try:
            for hook_file in iter_library_files(root):
                try:
                    hook = HookDefinition.model_validate(
                        json.loads(hook_file.read_text(encoding="utf-8"))
                    )
                except (OSError, json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
                    message = f"Invalid hook definition {hook_file}: {e}"
                    logger.error(message)
                    result.errors.append(message)
                    continue

                staged.add(hook)
        except OSError as e:
            # Hooks read before the walk failed are still published
            message = f"Failed to read hooks at: {root}: {e}"
            logger.error(message)
            result.errors.append(message)

        self._hooks = staged._hooks
        result.loaded = len(self._hooks)
        logger.info(f"Loaded {result.loaded} hooks from {root}")
        return result

    def reset(self) -> None:
        """Discard all loaded hooks."""
        self._hooks = {}

    def all(self) -> list[HookDefinition]:
        """Return every loaded hook."""
        return list(self._hooks.values())

    def find(self, hook_id: str) -> HookDefinition | None:
        """Look up a hook by id."""
        return self._hooks.get(hook_id)

    def discovery(self) -> dict[str, Any]:
        """Build the CDS Hooks discovery response."""
        return {"services": [hook.discovery() for hook in self._hooks.values()]}
