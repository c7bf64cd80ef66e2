"""
Exceptions raised by the dashboard services.

Every failure is non-fatal: handlers turn them into a notification-style JSON
error and the operator may retry.
"""

from __future__ import annotations

from http import HTTPStatus


class DashboardError(Exception):
    """Base class for errors surfaced to the operator."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str, *, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class RetrievalError(DashboardError):
    """A read against the database failed; the previous view stays as it was."""

    status = HTTPStatus.SERVICE_UNAVAILABLE


class WriteError(DashboardError):
    """An insert/update/delete (or storage upload) failed."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR


class NotFoundError(DashboardError):
    status = HTTPStatus.NOT_FOUND


class ConflictError(DashboardError):
    """The till is not in the state the action requires."""

    status = HTTPStatus.CONFLICT
