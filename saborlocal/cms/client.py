from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import DEFAULT_SANITY_CONFIG, SanityConfig

logger = logging.getLogger(__name__)


class SanityError(Exception):
    """Raised when a Sanity query or mutation fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class SanityClient:
    """
    Thin synchronous wrapper over the Sanity HTTP API.

    ``fetch`` runs GROQ queries against ``/data/query`` and returns the
    ``result`` member. ``mutate`` sends a single transaction to
    ``/data/mutate`` and returns the affected documents.
    """

    def __init__(
        self,
        config: SanityConfig = DEFAULT_SANITY_CONFIG,
        token: str | None = None,
        use_cdn: bool | None = None,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.config = config
        self.token = config.read_token if token is None else token
        self.use_cdn = config.use_cdn if use_cdn is None else use_cdn
        self._http = http_client or httpx.Client(timeout=config.timeout)

    @property
    def base_url(self) -> str:
        # The CDN never serves authenticated requests
        host = "apicdn.sanity.io" if self.use_cdn and not self.token else "api.sanity.io"
        return f"https://{self.config.project_id}.{host}/v{self.config.api_version}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _post(self, path: str, payload: dict[str, Any], params: dict[str, str] | None = None) -> dict:
        if not self.config.project_id:
            raise SanityError("Missing Sanity project id")

        url = f"{self.base_url}{path}"
        try:
            response = self._http.post(url, json=payload, params=params, headers=self._headers())
        except httpx.HTTPError as exc:
            raise SanityError(f"Sanity request failed: {exc}") from exc

        if response.status_code >= 400:
            try:
                detail = response.json().get("error", {})
                message = detail.get("description") or detail.get("message") or response.text
            except ValueError:
                message = response.text
            raise SanityError(
                f"Sanity returned {response.status_code}: {message}",
                status_code=response.status_code,
            )
        return response.json()

    def fetch(self, query: str, params: dict[str, Any] | None = None) -> Any:
        body = self._post(
            f"/data/query/{self.config.dataset}",
            {"query": query, "params": params or {}},
        )
        return body.get("result")

    def mutate(self, mutations: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not mutations:
            return []
        body = self._post(
            f"/data/mutate/{self.config.dataset}",
            {"mutations": mutations},
            params={"returnIds": "true", "returnDocuments": "true", "visibility": "sync"},
        )
        logger.debug("Sanity transaction %s committed", body.get("transactionId"))
        return [r.get("document") or {"_id": r.get("id")} for r in body.get("results", [])]

    def create(self, document: dict[str, Any]) -> dict[str, Any]:
        return self.mutate([{"create": document}])[0]

    def create_or_replace(self, document: dict[str, Any]) -> dict[str, Any]:
        return self.mutate([{"createOrReplace": document}])[0]

    def create_if_not_exists(self, document: dict[str, Any]) -> dict[str, Any]:
        return self.mutate([{"createIfNotExists": document}])[0]

    def patch(
        self,
        document_id: str,
        set: dict[str, Any] | None = None,
        unset: list[str] | None = None,
    ) -> dict[str, Any]:
        return self.mutate([patch_mutation(document_id, set=set, unset=unset)])[0]

    def delete(self, document_id: str) -> str:
        self.mutate([{"delete": {"id": document_id}}])
        return document_id


def patch_mutation(
    document_id: str,
    set: dict[str, Any] | None = None,
    unset: list[str] | None = None,
) -> dict[str, Any]:
    """Build a ``patch`` mutation. ``None`` values in ``set`` become unsets."""
    to_set = {k: v for k, v in (set or {}).items() if v is not None}
    to_unset = list(unset or []) + [k for k, v in (set or {}).items() if v is None]

    patch: dict[str, Any] = {"id": document_id}
    if to_set:
        patch["set"] = to_set
    if to_unset:
        patch["unset"] = sorted(dict.fromkeys(to_unset))
    return {"patch": patch}


_read_client: SanityClient | None = None
_write_client: SanityClient | None = None


def get_read_client() -> SanityClient:
    """Return the shared public client, creating it on first call."""
    global _read_client
    if _read_client is None:
        _read_client = SanityClient()
    return _read_client


def get_write_client() -> SanityClient:
    """Return the shared admin client. Always bypasses the CDN."""
    global _write_client
    if _write_client is None:
        _write_client = SanityClient(
            token=DEFAULT_SANITY_CONFIG.write_token or DEFAULT_SANITY_CONFIG.read_token,
            use_cdn=False,
        )
    return _write_client
