"""Provider registry — ``(standard, label predicate) → provider``.

Bindings are checked in registration order; the first whose standard
matches and whose predicate accepts the request's label set wins. A
registry is an ordinary object passed to the dispatcher, not module
state, so tests and services each build their own.

Example::

    registry = IntegrationRegistry()
    registry.register("import", workflow_dev_provider, when=dev_only, name="workflow-dev")
    registry.register("import", workflow_prod_provider, when=non_dev, name="workflow-prod")
    provider = registry.resolve("import", ["dev"])

Tags:
    orcpublish, integration, registry, provider-lookup
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from orcpublish.core.errors import IntegrationDispatchError
from orcpublish.core.labels import DEV_ENV, normalize_labels
from orcpublish.core.logging import get_logger
from orcpublish.integration.protocol import DevelopmentOperationProvider

logger = get_logger(__name__)

LabelPredicate = Callable[[frozenset[str]], bool]


def any_env(labels: frozenset[str]) -> bool:
    return True


def dev_only(labels: frozenset[str]) -> bool:
    return DEV_ENV in labels


def non_dev(labels: frozenset[str]) -> bool:
    return DEV_ENV not in labels


def has_label(label: str) -> LabelPredicate:
    """Predicate accepting label sets that contain *label*."""
    wanted = label.strip().lower()

    def _predicate(labels: frozenset[str]) -> bool:
        return wanted in labels

    return _predicate


@dataclass(frozen=True, slots=True)
class ProviderBinding:
    standard: str
    predicate: LabelPredicate
    provider: DevelopmentOperationProvider
    name: str


class IntegrationRegistry:
    """Ordered provider bindings."""

    def __init__(self) -> None:
        self._bindings: list[ProviderBinding] = []

    def register(
        self,
        standard: str,
        provider: DevelopmentOperationProvider,
        *,
        when: LabelPredicate = any_env,
        name: str | None = None,
    ) -> ProviderBinding:
        binding = ProviderBinding(
            standard=standard,
            predicate=when,
            provider=provider,
            name=name or type(provider).__name__,
        )
        self._bindings.append(binding)
        logger.debug("provider_registered", standard=standard, name=binding.name)
        return binding

    def resolve(self, standard: str, labels: Iterable[str] | None) -> DevelopmentOperationProvider:
        """Provider for *standard* under *labels*.

        Raises:
            IntegrationDispatchError: No binding accepts the request.
        """
        label_set = normalize_labels(labels)
        for binding in self._bindings:
            if binding.standard == standard and binding.predicate(label_set):
                logger.debug("provider_resolved", standard=standard, name=binding.name, labels=sorted(label_set))
                return binding.provider
        raise IntegrationDispatchError(
            f"No development operation provider for standard {standard!r} and labels {sorted(label_set)}"
        )

    def bindings(self, standard: str | None = None) -> list[ProviderBinding]:
        return [b for b in self._bindings if standard is None or b.standard == standard]

    def __len__(self) -> int:
        return len(self._bindings)
