"""Semantic version handling for library identifiers.

Version strings are normalized once, when a document is ingested, so that
textually different spellings of the same version ("1.0", "v1.0.0",
"1.0.0") land on a single store key. Strings that are not semantic versions
are kept verbatim: they can still be resolved exactly, but always rank below
any semantic version when picking the latest.
"""

from collections.abc import Iterable
from typing import Any

from semver import Version


def parse_version(raw: str) -> Version | None:
    """Parse a version string leniently.

    Accepts an optional leading ``v`` and a missing minor/patch component.

    Args:
        raw: Version string as found in the document

    Returns:
        Parsed Version, or None if the string is not a semantic version
    """
    text = raw.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    if not text:
        return None

    try:
        return Version.parse(text, optional_minor_and_patch=True)
    except (ValueError, TypeError):
        return None


def normalize_version(raw: Any) -> str:
    """Return the canonical store key for a version string.

    Args:
        raw: Version value from the document identifier (may be None)

    Returns:
        Canonical MAJOR.MINOR.PATCH[-pre][+build] string, or the input
        unchanged when it does not parse
    """
    if raw is None:
        return ""
    text = str(raw)
    parsed = parse_version(text)
    if parsed is None:
        return text
    return str(parsed)


def version_key(version: str) -> tuple:
    """Sort key ordering versions by semantic version precedence."""
    parsed = parse_version(version)
    if parsed is None:
        return (False, version)
    # Build metadata does not take part in precedence; the raw string
    # only breaks ties so the ordering stays total.
    return (True, parsed, version)


def latest_version(versions: Iterable[str]) -> str | None:
    """Pick the highest version, or None for an empty iterable."""
    return max(versions, key=version_key, default=None)
