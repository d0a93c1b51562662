"""Identity provider error codes mapped to the deletion taxonomy.

An explicit table rather than exception inheritance, so every provider code
the workflow knows about is listed in one place. Codes are the Identity
Toolkit ``error.message`` prefixes (the part before any `` : `` detail).
"""

from account_purge.domain.enums import CredentialFailureKind

IDENTITY_ERROR_KINDS: dict[str, CredentialFailureKind] = {
    # Wrong or unusable password
    "INVALID_PASSWORD": CredentialFailureKind.INVALID_CREDENTIAL,
    "INVALID_LOGIN_CREDENTIALS": CredentialFailureKind.INVALID_CREDENTIAL,
    "INVALID_CREDENTIAL": CredentialFailureKind.INVALID_CREDENTIAL,
    "MISSING_PASSWORD": CredentialFailureKind.INVALID_CREDENTIAL,
    "EMAIL_NOT_FOUND": CredentialFailureKind.INVALID_CREDENTIAL,
    "USER_NOT_FOUND": CredentialFailureKind.INVALID_CREDENTIAL,
    "IDENTITY_MISMATCH": CredentialFailureKind.INVALID_CREDENTIAL,
    # Session must be re-established before a destructive action
    "CREDENTIAL_TOO_OLD_LOGIN_AGAIN": CredentialFailureKind.STALE_SESSION,
    "REQUIRES_RECENT_LOGIN": CredentialFailureKind.STALE_SESSION,
    "TOKEN_EXPIRED": CredentialFailureKind.STALE_SESSION,
    "INVALID_ID_TOKEN": CredentialFailureKind.STALE_SESSION,
    "USER_DISABLED": CredentialFailureKind.STALE_SESSION,
    "TOO_MANY_ATTEMPTS_TRY_LATER": CredentialFailureKind.STALE_SESSION,
}

# Unknown codes (including transport failures) force a fresh login.
DEFAULT_FAILURE_KIND = CredentialFailureKind.STALE_SESSION


def normalize_provider_code(raw: str) -> str:
    """Return the bare provider code from an Identity Toolkit message.

    The REST API sometimes appends detail: ``"TOO_MANY_ATTEMPTS_TRY_LATER :
    Access to this account has been temporarily disabled..."``.
    """
    return raw.split(" : ", 1)[0].split(":", 1)[0].strip().upper()


def classify_identity_error(code: str) -> CredentialFailureKind:
    """Map a provider error code to a credential failure kind."""
    return IDENTITY_ERROR_KINDS.get(normalize_provider_code(code), DEFAULT_FAILURE_KIND)
