# src/things3_query/errors.py

"""Exceptions surfaced to callers of the query layer."""

from __future__ import annotations


class Things3QueryError(Exception):
    """Base class for every error raised by this package."""


class StoreUnavailable(Things3QueryError):
    """The host database cannot be opened or queried. Never retried internally."""


class MalformedCriteria(Things3QueryError, ValueError):
    """
    Caller-supplied criteria failed validation.

    Raised before any store access. `field` names the offending input
    (e.g. "end", "date", "identifier").
    """

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field
        self.message = message
