"""Application services: the three stages of account deletion."""

from account_purge.application.services.cascade_executor import CascadeExecutor
from account_purge.application.services.cascade_planner import (
    CascadeLayout,
    CascadePlanner,
)
from account_purge.application.services.credential_gate import CredentialGate
from account_purge.application.services.identity_revoker import IdentityRevoker

__all__ = [
    "CascadeExecutor",
    "CascadeLayout",
    "CascadePlanner",
    "CredentialGate",
    "IdentityRevoker",
]
