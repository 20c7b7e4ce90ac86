"""Workspace identity carried by every import request."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Workspace:
    id: int | None
    name: str
