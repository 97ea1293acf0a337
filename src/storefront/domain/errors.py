"""Domain error taxonomy.

Validation, not-found and conflict errors surface to the caller unchanged.
Remote failures carry the platform's error code when one was reported.
"""

from __future__ import annotations


class CommerceError(RuntimeError):
    """Base class for domain failures."""


class NotFoundError(CommerceError):
    """A referenced local record does not exist."""


class ConflictError(CommerceError):
    """The operation would violate a uniqueness rule (e.g. a second current order)."""


class UnprocessableStateError(CommerceError):
    """Records exist but are not in a state that allows the operation."""


class ValidationFailure(CommerceError):
    """Caller supplied references or values that cannot be accepted."""


class RemoteServiceFailure(CommerceError):
    """The remote platform failed, timed out, or answered with an unusable payload."""

    def __init__(self, message: str, *, code: str | None = None, status: int | None = None):
        super().__init__(message)
        self.code = code
        self.status = status

    @property
    def is_version_conflict(self) -> bool:
        return self.code == "VERSION_MISMATCH"


class TransitionRejected(CommerceError):
    """Reserved for fulfillment edges that are refused; invalid edges are currently ignored."""


class MissingParentError(CommerceError):
    """A remote catalog object references a parent absent from the snapshot or mirror."""


class PersistenceFailure(CommerceError):
    """A storage write failed for a single row group."""
