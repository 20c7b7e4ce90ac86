"""Pydantic request/response schemas of the API."""
