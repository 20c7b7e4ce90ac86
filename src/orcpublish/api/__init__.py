"""FastAPI surface of the import pipeline."""

from orcpublish.api.app import create_app

__all__ = ["create_app"]
