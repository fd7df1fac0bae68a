"""Shared error type for external collaborators (finance, email)."""

from __future__ import annotations


class CollaboratorUnavailable(Exception):
    """Raised when a collaborator is not configured or a call to it failed.

    Handlers turn this into a friendly degraded-service reply; it is never
    shown to the user as a raw error.
    """
