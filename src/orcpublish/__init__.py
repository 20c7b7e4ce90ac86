"""
orcpublish - import and publish pipeline for workflow orchestrators.

A package (metadata JSON + flow archive) is fetched from a blob store,
matched against the orchestrator catalog, given a new version and a
context id, handed to the downstream system that owns the flow, and
committed as one catalog transaction.

Packages
--------
core         errors, logging, settings, labels, versioning
catalog      SQLAlchemy catalog of orchestrators and versions
packaging    blob store adapters, fetcher, metadata importer, writer
context      context-id allocation
integration  provider protocol, registry, dispatcher
publish      identity resolution and the import coordinator
ops          typed operation functions for API and CLI
api          FastAPI application
cli          typer command line
"""

__version__ = "0.1.0"
