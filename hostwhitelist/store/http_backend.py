"""ChefServerDataBagStore — data bag items fetched over HTTP with httpx.

Endpoint: ``GET {base_url}/data/{data_bag}/{item_id}`` returning the item as
JSON. This is the data bag read endpoint of a configuration server (or of a
local zero-auth server used in development and CI).

Request signing is not implemented: only static headers (e.g. a gateway
token) are sent. Point base_url at an endpoint that accepts them.

Error mapping:
  - 404                                        → DataBagItemNotFound
  - any other non-2xx status                   → DataBagStoreUnavailable
  - httpx.RequestError (connect, timeout, bad
    content encoding, too many redirects)      → DataBagStoreUnavailable
  - body is not valid JSON                     → DataBagStoreUnavailable
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional
from urllib.parse import quote

import httpx

from hostwhitelist.constants import DEFAULT_HTTP_TIMEOUT_S
from hostwhitelist.store.protocol import (
    DataBagItemNotFound,
    DataBagStoreUnavailable,
    validate_names,
)
from hostwhitelist.utils.logger import get_logger

logger = get_logger(__name__)


class ChefServerDataBagStore:
    """Synchronous HTTP DataBagStore.

    Usage:
        store = ChefServerDataBagStore("https://chef.example.com/organizations/acme")
        item = store.fetch_item("whitelist", "my_whitelist")
        store.close()

    A caller-supplied httpx.Client (e.g. one built on httpx.MockTransport in
    tests) is used as-is and is not closed by close().
    """

    def __init__(
        self,
        base_url: str,
        timeout_s: float = DEFAULT_HTTP_TIMEOUT_S,
        headers: Optional[Mapping[str, str]] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._timeout_s = timeout_s
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_s),
            headers={"Accept": "application/json", **dict(headers or {})},
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    def item_url(self, data_bag: str, item_id: str) -> str:
        return f"{self._base_url}/data/{quote(data_bag, safe='')}/{quote(item_id, safe='')}"

    def fetch_item(self, data_bag: str, item_id: str) -> Mapping[str, Any]:
        validate_names(data_bag, item_id)
        url = self.item_url(data_bag, item_id)

        try:
            response = self._client.get(url)
        except httpx.RequestError as exc:
            raise DataBagStoreUnavailable(
                data_bag, item_id, f"{type(exc).__name__}: {exc}"
            ) from exc

        if response.status_code == 404:
            raise DataBagItemNotFound(data_bag, item_id, "HTTP 404")
        if not response.is_success:
            raise DataBagStoreUnavailable(
                data_bag, item_id, f"HTTP {response.status_code}"
            )

        try:
            item = response.json()
        except ValueError as exc:
            raise DataBagStoreUnavailable(
                data_bag, item_id, f"response is not valid JSON: {exc}"
            ) from exc

        logger.debug(
            "Data bag item fetched",
            data_bag=data_bag,
            item_id=item_id,
            status=response.status_code,
        )
        return item

    def close(self) -> None:
        """Close the underlying httpx.Client if this store created it."""
        if self._owns_client:
            self._client.close()
