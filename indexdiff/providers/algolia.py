"""Algolia-backed index service client for indexdiff."""

from __future__ import annotations

import json
from typing import Any, AsyncIterator, Callable, Iterable

from algoliasearch.search.client import SearchClient

from ..config import DEFAULT_PAGE_SIZE, Account, require_credentials
from ..errors import ConfigError, RemoteError
from ..text import Messages


class AlgoliaIndexClient:
    """Async wrapper around the search client of one Algolia application."""

    def __init__(self, account: Account, *, client: Any | None = None) -> None:
        require_credentials(account)
        self.account = account
        if client is None:
            client = SearchClient(account.app_id, account.api_key)
        self._client = client

    async def list_indices(self) -> list[dict[str, Any]]:
        """Return name, entries, dataSize, fileSize and updatedAt for every index."""

        try:
            response = await self._client.list_indices_with_http_info()
            payload = _decode_payload(response)
        except Exception as exc:
            raise RemoteError(_format_algolia_error(exc)) from exc
        return [
            {
                "name": item.get("name"),
                "entries": item.get("entries", 0),
                "dataSize": item.get("dataSize", 0),
                "fileSize": item.get("fileSize", 0),
                "updatedAt": item.get("updatedAt"),
            }
            for item in payload.get("items") or []
        ]

    async def browse_page(
        self,
        index_name: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
        cursor: str | None = None,
    ) -> tuple[list[dict[str, Any]], str | None]:
        params: dict[str, Any] = {
            "hitsPerPage": page_size,
            "attributesToRetrieve": ["*"],
            "distinct": False,
        }
        if cursor:
            params["cursor"] = cursor
        try:
            response = await self._client.browse_with_http_info(
                index_name=index_name,
                browse_params=params,
            )
            payload = _decode_payload(response)
        except Exception as exc:
            raise RemoteError(_format_algolia_error(exc)) from exc
        hits = [dict(hit) for hit in payload.get("hits") or []]
        return hits, payload.get("cursor") or None

    async def stream_all_records(
        self,
        index_name: str,
        *,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> AsyncIterator[dict[str, Any]]:
        """Yield every record of *index_name*, one browse page at a time.

        The stream ends when a page comes back without a cursor. A failing
        page raises :class:`RemoteError` and terminates the stream.
        """

        cursor: str | None = None
        while True:
            hits, cursor = await self.browse_page(
                index_name,
                page_size=page_size,
                cursor=cursor,
            )
            for hit in hits:
                yield hit
            if not cursor:
                return

    async def close(self) -> None:
        close = getattr(self._client, "close", None)
        if close is not None:
            await close()


ClientFactory = Callable[[Account], AlgoliaIndexClient]


class ClientRegistry:
    """Lazily created, memoized clients keyed by account name."""

    def __init__(
        self,
        accounts: Iterable[Account],
        *,
        factory: ClientFactory | None = None,
    ) -> None:
        self._accounts = {account.name: account for account in accounts}
        self._factory = factory or AlgoliaIndexClient
        self._clients: dict[str, AlgoliaIndexClient] = {}

    @property
    def account_names(self) -> tuple[str, ...]:
        return tuple(self._accounts)

    def get(self, account_name: str) -> AlgoliaIndexClient:
        client = self._clients.get(account_name)
        if client is not None:
            return client
        account = self._accounts.get(account_name)
        if account is None:
            raise ConfigError(
                Messages.ERROR_ACCOUNT_UNKNOWN.format(
                    account=account_name,
                    allowed=", ".join(self._accounts),
                )
            )
        client = self._factory(require_credentials(account))
        self._clients[account_name] = client
        return client

    async def aclose(self) -> None:
        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.close()


def _decode_payload(response: Any) -> dict[str, Any]:
    raw = getattr(response, "raw_data", None)
    if raw is None:
        raise ValueError("empty response body")
    payload = json.loads(raw)
    if not isinstance(payload, dict):
        raise ValueError("unexpected response body")
    return payload


def _format_algolia_error(exc: Exception) -> str:
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    return f"{Messages.ERROR_ALGOLIA_PREFIX}{message}"
