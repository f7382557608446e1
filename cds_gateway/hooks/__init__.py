"""CDS Hooks service definitions bound to libraries."""

from cds_gateway.hooks.models import HookDefinition
from cds_gateway.hooks.repository import HookLoadResult, HookRepository

__all__ = [
    "HookDefinition",
    "HookLoadResult",
    "HookRepository",
]
