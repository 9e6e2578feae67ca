"""Remote client for the disk pools API."""

from __future__ import annotations

import dataclasses

import httpx

from reconciler.transport import HttpClientConfig, HttpResourceClient

API_VERSION = "2021-08-01"


class DiskPoolsClient(HttpResourceClient):
    """
    Thin facade over HttpResourceClient pinned to the disk pools API version.

    Example:
        client = DiskPoolsClient(HttpClientConfig(
            api_version=API_VERSION,
            headers={"Authorization": f"Bearer {token}"},
        ))
    """

    def __init__(
        self,
        config: HttpClientConfig | None = None,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        if config is None:
            config = HttpClientConfig(api_version=API_VERSION)
        elif config.api_version != API_VERSION:
            config = dataclasses.replace(config, api_version=API_VERSION)
        super().__init__(config, http_client=http_client)
