"""Errors raised by the data-access layer."""

from __future__ import annotations


class RecordNotFoundError(Exception):
    """Row is missing or belongs to another user."""

    def __init__(self, resource: str = "Resource", record_id: int | None = None):
        self.resource = resource
        self.record_id = record_id
        super().__init__(f"{resource} not found")
