"""Environment label helpers.

Labels travel with every import request as plain strings. A label is either
a bare environment value (``"dev"``, ``"prod"``) or a ``key=value`` pair
(``"env=dev"``); only the environment value matters for validity and
provider selection.
"""

from __future__ import annotations

from collections.abc import Iterable

DEV_ENV = "dev"
PROD_ENV = "prod"
ENV_LABEL_KEY = "env"


def normalize_labels(labels: Iterable[str] | None) -> frozenset[str]:
    """Lower-case, strip and de-duplicate labels; ``env=x`` becomes ``x``."""
    result: set[str] = set()
    for label in labels or ():
        value = label.strip().lower()
        if not value:
            continue
        key, sep, rest = value.partition("=")
        if sep and key.strip() == ENV_LABEL_KEY:
            value = rest.strip()
        result.add(value)
    return frozenset(result)


def is_dev_env(labels: Iterable[str] | None) -> bool:
    """True when the label set classifies the request as development."""
    return DEV_ENV in normalize_labels(labels)
