"""Pydantic models for CDS Hooks service definitions."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class LibraryReference(BaseModel):
    """Library a hook executes, by id and optional version."""

    id: str
    version: str | None = None


class CqlConfig(BaseModel):
    """Execution settings for a hook."""

    library: LibraryReference

    model_config = ConfigDict(extra="allow")


class HookConfig(BaseModel):
    """Private gateway configuration stored under ``_config``."""

    cql: CqlConfig

    model_config = ConfigDict(extra="allow")


class HookDefinition(BaseModel):
    """A CDS Hooks service bound to a library."""

    id: str = Field(..., min_length=1)
    hook: str
    title: str | None = None
    description: str = ""
    prefetch: dict[str, str] = Field(default_factory=dict)
    config: HookConfig = Field(..., alias="_config")

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    def discovery(self) -> dict[str, Any]:
        """Public discovery entry, without the private ``_config`` block."""
        return self.model_dump(exclude={"config"}, exclude_none=True)
