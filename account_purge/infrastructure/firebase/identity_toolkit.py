"""Firebase Authentication over the Identity Toolkit REST API (implements IIdentityProvider).

Reauthentication is a password sign-in for the session's email; self-deletion
posts the freshly issued ID token to ``accounts:delete``. Error responses
carry a code in ``error.message`` (e.g. ``INVALID_PASSWORD``,
``CREDENTIAL_TOO_OLD_LOGIN_AGAIN``) which is raised as IdentityProviderError
for the workflow's mapping table.
"""

from __future__ import annotations

import logging

import httpx

from account_purge.application.dtos.account_deletion import ReauthResult
from account_purge.application.interfaces.services import IdentityProviderError

logger = logging.getLogger(__name__)

_BASE = "https://identitytoolkit.googleapis.com/v1"

# Used when the provider is unreachable or answers without a code.
NETWORK_ERROR_CODE = "NETWORK_REQUEST_FAILED"
UNKNOWN_ERROR_CODE = "UNKNOWN_ERROR"


def _error_code(resp: httpx.Response) -> str:
    try:
        return resp.json()["error"]["message"] or UNKNOWN_ERROR_CODE
    except (ValueError, KeyError, TypeError):
        return UNKNOWN_ERROR_CODE


class FirebaseIdentityProvider:
    """Identity provider backed by Firebase Authentication."""

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str = _BASE,
    ) -> None:
        self._api_key = api_key
        self._http = http_client
        self._base_url = base_url.rstrip("/")

    async def _post(self, method: str, body: dict) -> dict:
        url = f"{self._base_url}/accounts:{method}"
        try:
            resp = await self._http.post(url, params={"key": self._api_key}, json=body)
        except httpx.HTTPError as e:
            logger.warning("Identity Toolkit %s unreachable: %s", method, e.__class__.__name__)
            raise IdentityProviderError(NETWORK_ERROR_CODE) from e
        if resp.status_code != 200:
            raise IdentityProviderError(_error_code(resp))
        if not resp.content:
            return {}
        try:
            return resp.json()
        except ValueError:
            logger.warning("Identity Toolkit %s returned a non-JSON body", method)
            raise IdentityProviderError(UNKNOWN_ERROR_CODE) from None

    async def reauthenticate(self, email: str, password: str) -> ReauthResult:
        """Sign in with email/password and return the identity and fresh ID token."""
        out = await self._post(
            "signInWithPassword",
            {"email": email, "password": password, "returnSecureToken": True},
        )
        try:
            return ReauthResult(uid=out["localId"], id_token=out["idToken"])
        except KeyError:
            raise IdentityProviderError(UNKNOWN_ERROR_CODE) from None

    async def delete_current_identity(self, id_token: str) -> None:
        """Delete the account the ID token was issued to."""
        await self._post("delete", {"idToken": id_token})
