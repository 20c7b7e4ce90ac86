"""Version allocation for orchestrator versions.

Version tokens are a fixed prefix followed by a decimal counter. The
counter keeps the zero padding of the token it was incremented from, so
``v000009`` becomes ``v000010`` and ``v9`` becomes ``v10``.

Tags:
    orcpublish, versioning, monotonic
"""

from __future__ import annotations

import re

from orcpublish.core.errors import VersionFormatError
from orcpublish.core.logging import get_logger

logger = get_logger(__name__)

INITIAL_VERSION = "v1"

_VERSION_RE = re.compile(r"^(?P<prefix>\D*)(?P<number>\d+)$")


def generate_new_version() -> str:
    """Return the initial version token."""
    return INITIAL_VERSION


def increase_version(old_version: str) -> str:
    """Increment the numeric suffix of *old_version*.

    Raises:
        VersionFormatError: *old_version* has no numeric suffix.
    """
    match = _VERSION_RE.match(old_version.strip()) if old_version else None
    if match is None:
        raise VersionFormatError(old_version)
    prefix = match.group("prefix")
    digits = match.group("number")
    return f"{prefix}{int(digits) + 1:0{len(digits)}d}"


def version_number(version: str) -> int:
    """Numeric part of a version token, for ordering."""
    match = _VERSION_RE.match(version.strip())
    if match is None:
        raise VersionFormatError(version)
    return int(match.group("number"))


class VersionAllocator:
    """Compute the next version for an orchestrator.

    ``fallback_to_initial`` controls what happens when the previous token
    cannot be incremented: ``True`` (default) logs a warning and starts
    again from :data:`INITIAL_VERSION`; ``False`` re-raises
    :class:`VersionFormatError`.
    """

    def __init__(self, *, fallback_to_initial: bool = True) -> None:
        self.fallback_to_initial = fallback_to_initial

    def next_version(self, previous: str | None) -> str:
        if not previous:
            return generate_new_version()
        try:
            return increase_version(previous)
        except VersionFormatError:
            if not self.fallback_to_initial:
                raise
            logger.warning("version_format_fallback", previous=previous, version=INITIAL_VERSION)
            return generate_new_version()
