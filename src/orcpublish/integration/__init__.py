"""Downstream integration: provider contract, registry, dispatcher, HTTP adapter."""

from orcpublish.integration.dispatcher import IntegrationDispatcher
from orcpublish.integration.http import HttpImportProvider
from orcpublish.integration.loopback import LoopbackImportProvider
from orcpublish.integration.protocol import (
    IMPORT_STANDARD,
    DevelopmentOperationProvider,
    ImportRequestRef,
    OrchestratorHandle,
    OrchestratorManager,
    RefJobContentResponse,
)
from orcpublish.integration.registry import (
    IntegrationRegistry,
    ProviderBinding,
    any_env,
    dev_only,
    has_label,
    non_dev,
)

__all__ = [
    "IMPORT_STANDARD",
    "DevelopmentOperationProvider",
    "HttpImportProvider",
    "ImportRequestRef",
    "IntegrationDispatcher",
    "IntegrationRegistry",
    "LoopbackImportProvider",
    "OrchestratorHandle",
    "OrchestratorManager",
    "ProviderBinding",
    "RefJobContentResponse",
    "any_env",
    "dev_only",
    "has_label",
    "non_dev",
]
