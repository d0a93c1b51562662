"""Domain exceptions for the account-deletion workflow.

Each exception is one kind of the deletion error taxonomy. Collaborator
errors (identity provider, document store) are remapped to these at the
stage boundary; the presentation layer maps them to HTTP responses in
exception handlers. ``message`` is the short user-facing text; provider
codes and other diagnostics go in ``details``.
"""

from typing import Any


class PurgeException(Exception):
    """Base exception for all account-deletion errors.

    Attributes:
        message: Short, actionable user-facing description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. stage, provider reason).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: User-facing error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the response body for this error (no internal details)."""
        return {"error": self.error_code, "message": self.message}


class NotAuthenticatedException(PurgeException):
    """Raised when there is no active session to delete."""

    def __init__(self) -> None:
        super().__init__(
            "You need to be logged in to delete your account.",
            "NOT_AUTHENTICATED",
        )


class InvalidCredentialException(PurgeException):
    """Raised when the supplied password does not prove the account."""

    def __init__(self, reason: str | None = None) -> None:
        """Initialize with the provider reason, if any.

        Args:
            reason: Provider error code kept for logs (never shown to the user).
        """
        super().__init__(
            "Wrong password, try again.",
            "INVALID_CREDENTIAL",
            {"reason": reason} if reason else {},
        )


class StaleSessionException(PurgeException):
    """Raised when the session is too old for a destructive action."""

    def __init__(self, reason: str | None = None) -> None:
        super().__init__(
            "Please log out and back in before deleting your account.",
            "STALE_SESSION",
            {"reason": reason} if reason else {},
        )


class PartialFailureException(PurgeException):
    """Raised when a query or batch commit fails during the data purge.

    The credential is still valid. If ``batches_committed`` is non-zero,
    some data is already gone; re-running the purge is safe.
    """

    def __init__(
        self,
        stage: str,
        batches_committed: int = 0,
        batches_total: int = 0,
        reason: str | None = None,
    ) -> None:
        """Initialize with the failing stage and batch progress.

        Args:
            stage: PurgeStage value that failed.
            batches_committed: Batches committed before the failure.
            batches_total: Batches the plan was split into (0 if planning failed).
            reason: Collaborator error description for logs.
        """
        details: dict[str, Any] = {
            "stage": stage,
            "batches_committed": batches_committed,
            "batches_total": batches_total,
        }
        if reason:
            details["reason"] = reason
        super().__init__(
            "Account deletion failed. Your login is unchanged; please try again.",
            "PARTIAL_FAILURE",
            details,
        )

    @property
    def stage(self) -> str:
        return self.details["stage"]


class RevocationFailedException(PurgeException):
    """Raised when data was purged but the identity could not be deleted.

    Kept distinct from PartialFailureException so support can finish the
    identity removal by hand when the user cannot retry.
    """

    def __init__(self, identity_id: str, reason: str | None = None) -> None:
        """Initialize with the identity left behind.

        Args:
            identity_id: Identity whose data is gone but whose login remains.
            reason: Mapped provider failure (e.g. stale_session).
        """
        details: dict[str, Any] = {"identity_id": identity_id}
        if reason:
            details["reason"] = reason
        super().__init__(
            "Your data was removed but your login could not be deleted. Please contact support.",
            "REVOCATION_FAILED",
            details,
        )
