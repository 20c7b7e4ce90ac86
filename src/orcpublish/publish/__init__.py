"""Import pipeline: requests, identity resolution, coordinator, project sync."""

from orcpublish.publish.coordinator import ImportCoordinator, ImportStage
from orcpublish.publish.identity import (
    DEFAULT_MODE,
    DEFAULT_WAY,
    IdentityDecision,
    IdentityOutcome,
    IdentityResolver,
)
from orcpublish.publish.requests import ImportRequest, ImportResult
from orcpublish.publish.sync import HttpProjectSender, ProjectImportNotice, ProjectSender

__all__ = [
    "DEFAULT_MODE",
    "DEFAULT_WAY",
    "HttpProjectSender",
    "IdentityDecision",
    "IdentityOutcome",
    "IdentityResolver",
    "ImportCoordinator",
    "ImportRequest",
    "ImportResult",
    "ImportStage",
    "ProjectImportNotice",
    "ProjectSender",
]
