"""Domain enumerations for the account-deletion workflow."""

from enum import Enum


class PurgeStage(str, Enum):
    """Stage of the data purge, reported when the cascade fails.

    Planning stages run in declaration order; COMMIT covers the batch writes.
    """

    PROFILE = "profile"
    NOTIFICATIONS = "notifications"
    FOLLOW_REQUESTS = "follow_requests"
    DIRECT_THREADS = "direct_threads"
    GROUPS = "groups"
    COMMIT = "commit"

    @classmethod
    def planning_stages(cls) -> list["PurgeStage"]:
        """Return the read-then-stage stages in execution order."""
        return [stage for stage in cls if stage is not cls.COMMIT]


class MutationKind(str, Enum):
    """Kind of write staged against the document store."""

    DELETE = "delete"
    FIELD_UPDATE = "field_update"


class CredentialFailureKind(str, Enum):
    """Outcome class of a failed reauthentication or identity deletion."""

    INVALID_CREDENTIAL = "invalid_credential"
    STALE_SESSION = "stale_session"


class DeletionStatus(str, Enum):
    """Terminal status of a completed deletion."""

    DELETED = "deleted"
