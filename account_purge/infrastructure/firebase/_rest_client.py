"""Thin Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Queries and collection listings page through results until exhausted.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

import httpx
from google.auth.exceptions import GoogleAuthError

from account_purge.application.interfaces.services import DocumentStoreError
from account_purge.infrastructure.firebase._rest_encoding import (
    decode_fields,
    encode_value,
    relative_path,
)

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"
_DEFAULT_PAGE_SIZE = 300


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


class FirestoreError(DocumentStoreError):
    """Non-success response (or transport failure) from the Firestore REST API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


def _error_message(resp: httpx.Response) -> str:
    try:
        err = resp.json().get("error", {})
        return f"{err.get('status', resp.status_code)}: {err.get('message', '')}".strip()
    except (ValueError, AttributeError):
        return f"HTTP {resp.status_code}"


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    params: dict | None = None,
    access_token: str | None = None,
) -> Any:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    try:
        resp = await client.request(
            method, url, headers=headers, json=body, params=params
        )
    except httpx.HTTPError as e:
        raise FirestoreError(f"{method} {url} failed: {e.__class__.__name__}") from e
    if resp.status_code == 404:
        return None
    if resp.status_code not in (200, 204):
        raise FirestoreError(_error_message(resp), resp.status_code)
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


class DocumentSnapshot:
    """Snapshot of a document (id, path relative to the database root, data)."""

    def __init__(self, path: str, data: dict):
        self.path = path
        self.id = path.rsplit("/", 1)[-1]
        self._data = data

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self.path = path

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        out = await self._client.request(f"{_BASE}/{self._client.document_name(self.path)}")
        if not out:
            return None
        return DocumentSnapshot(self.path, decode_fields(out.get("fields")))


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "array-contains": "ARRAY_CONTAINS",
}


class _Query:
    """Single-filter query over one collection, paged by document name."""

    def __init__(
        self,
        client: "FirestoreRESTClient",
        collection_path: str,
        *,
        where_field: str,
        where_op: str,
        where_value: Any,
    ):
        self._client = client
        self._collection_path = collection_path
        self._where_field = where_field
        self._where_op = _OP_MAP.get(where_op, where_op)
        self._where_value = where_value
        self._page_size = client.page_size

    def _structured_query(self, start_after: str | None) -> dict[str, Any]:
        collection_id = self._collection_path.rpartition("/")[2]
        structured: dict[str, Any] = {
            "from": [{"collectionId": collection_id}],
            "where": {
                "fieldFilter": {
                    "field": {"fieldPath": self._where_field},
                    "op": self._where_op,
                    "value": encode_value(self._where_value),
                }
            },
            "orderBy": [{"field": {"fieldPath": "__name__"}, "direction": "ASCENDING"}],
            "limit": self._page_size,
        }
        if start_after is not None:
            structured["startAt"] = {
                "values": [{"referenceValue": start_after}],
                "before": False,
            }
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query page by page and yield every matching document."""
        parent, _, _ = self._collection_path.rpartition("/")
        url = f"{_BASE}/{self._client.document_name(parent)}:runQuery"
        start_after: str | None = None
        while True:
            resp = await self._client.request(
                url,
                method="POST",
                body={"structuredQuery": self._structured_query(start_after)},
            )
            items = resp if isinstance(resp, list) else ([resp] if resp else [])
            docs = [item["document"] for item in items if "document" in item]
            for doc in docs:
                yield DocumentSnapshot(
                    relative_path(doc["name"], self._client.documents_root),
                    decode_fields(doc.get("fields")),
                )
            if len(docs) < self._page_size:
                return
            start_after = docs[-1]["name"]


class CollectionReference:
    """Reference to a (sub)collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self.path = path.strip("/")

    def where(self, field: str, op: str, value: Any) -> _Query:
        """Start a query with a filter; call .stream() to run it."""
        return _Query(
            self._client,
            self.path,
            where_field=field,
            where_op=op,
            where_value=value,
        )

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """List every document in the collection (shallow), following page tokens."""
        url = f"{_BASE}/{self._client.document_name(self.path)}"
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": self._client.page_size}
            if page_token:
                params["pageToken"] = page_token
            out = await self._client.request(url, params=params)
            if not out:
                return
            for doc in out.get("documents", []):
                yield DocumentSnapshot(
                    relative_path(doc["name"], self._client.documents_root),
                    decode_fields(doc.get("fields")),
                )
            page_token = out.get("nextPageToken")
            if not page_token:
                return


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin)."""

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        page_size: int = _DEFAULT_PAGE_SIZE,
        timeout: float = 30.0,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self.documents_root = f"projects/{project_id}/databases/(default)/documents"
        self.page_size = page_size
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=timeout)
        self._owns_http = http_client is None

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str | None:
        """Return a valid access token; refreshes in thread pool to avoid blocking.

        Without credentials (e.g. a local test double) requests go out
        unauthenticated.

        Raises:
            FirestoreError: The service account token could not be refreshed.
        """
        if self._credentials is None:
            return None
        try:
            return await asyncio.to_thread(_get_access_token, self._credentials)
        except GoogleAuthError as e:
            raise FirestoreError(f"token refresh failed: {e.__class__.__name__}") from e

    async def request(
        self,
        url: str,
        method: str = "GET",
        body: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        return await _request_async(
            self._http,
            url,
            method=method,
            body=body,
            params=params,
            access_token=await self.get_token(),
        )

    def document_name(self, path: str) -> str:
        """Full resource name for a path relative to the database root."""
        path = path.strip("/")
        return f"{self.documents_root}/{path}" if path else self.documents_root

    def collection(self, collection_path: str) -> CollectionReference:
        return CollectionReference(self, collection_path)

    def document(self, document_path: str) -> DocumentReference:
        return DocumentReference(self, document_path)

    async def commit(self, writes: list[dict]) -> None:
        """Apply REST Write objects atomically (documents:commit).

        Raises:
            FirestoreError: The commit was rejected; none of the writes applied.
        """
        if not writes:
            return
        db_name = self.documents_root.rsplit("/documents", 1)[0]
        await self.request(
            f"{_BASE}/{db_name}/documents:commit",
            method="POST",
            body={"writes": writes},
        )
