"""
IPFS Cluster REST API client.
"""

from dataclasses import dataclass
import json
import logging
from typing import Any

import httpx

from w3storage.config import CAR_MEDIA_TYPE

from .errors import ClusterAddError, ClusterStatusError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Blob:
    """Uploaded bytes tagged with a media type."""

    data: bytes
    type: str = ""

    @property
    def size(self) -> int:
        return len(self.data)


def _cid_string(value: Any) -> str:
    # Older cluster releases encode CIDs as {"/": "<cid>"}
    if isinstance(value, dict):
        return value["/"]
    return str(value)


class ClusterClient:
    """
    Minimal client for the IPFS Cluster REST API.

    Only the two calls needed to ingest a CAR are implemented: ``add`` and
    ``status``. Each call is a single attempt; there is no retry.
    """

    def __init__(
        self,
        url: str,
        basic_auth_token: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the cluster client.

        Args:
            url: Base URL of the cluster REST API
            basic_auth_token: Optional base64 basic auth credentials
            client: Optional shared HTTP client (created if None)

        """
        self.url = url.rstrip("/")
        self._headers: dict[str, str] = {}
        if basic_auth_token:
            self._headers["Authorization"] = f"Basic {basic_auth_token}"
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def add(
        self,
        blob: Blob,
        metadata: dict[str, str] | None = None,
        local: bool = False,
    ) -> dict[str, Any]:
        """
        Add content to the cluster.

        A blob typed ``application/car`` is imported as a CAR (``format=car``)
        rather than chunked as a file.

        Args:
            blob: The content to add
            metadata: Pin metadata, sent as ``meta-<key>`` parameters
            local: Add on the receiving peer only; replication to the other
                allocated peers then happens asynchronously

        Returns:
            ``{"cid": str, "name": str, "size": int}``

        Raises:
            ClusterAddError: on transport failure or a non-2xx response

        """
        params: dict[str, str] = {"stream-channels": "false"}
        if blob.type == CAR_MEDIA_TYPE:
            params["format"] = "car"
        if local:
            params["local"] = "true"
        for key, value in (metadata or {}).items():
            params[f"meta-{key}"] = value

        files = {"file": ("blob", blob.data, blob.type or "application/octet-stream")}
        try:
            response = await self._client.post(
                f"{self.url}/add", params=params, files=files, headers=self._headers
            )
        except httpx.HTTPError as e:
            raise ClusterAddError(f"cluster add request failed: {e}") from e

        if response.is_error:
            raise ClusterAddError(
                f"cluster add failed: {response.status_code} {response.text}"
            )

        try:
            data = response.json()
        except json.JSONDecodeError:
            # streamed responses are newline delimited JSON
            lines = [line for line in response.text.splitlines() if line.strip()]
            if not lines:
                raise ClusterAddError("cluster add returned an empty response")
            try:
                data = [json.loads(line) for line in lines]
            except json.JSONDecodeError as e:
                raise ClusterAddError(f"unreadable cluster add response: {e}") from e

        try:
            added = data[0] if isinstance(data, list) else data
            result = {
                "cid": _cid_string(added["cid"]),
                "name": added.get("name", ""),
                "size": added.get("size", blob.size),
            }
        except (IndexError, KeyError, TypeError, AttributeError) as e:
            raise ClusterAddError(f"unexpected cluster add response: {data!r}") from e

        logger.info(
            f"Added {blob.size} bytes to cluster as {result['cid']} (local={local})"
        )
        return result

    async def status(self, cid: str) -> dict[str, Any]:
        """
        Get the pin status of a CID across cluster peers.

        Returns:
            ``{"cid": str, "peerMap": {peer_id: {"peerName": str, "status": str}}}``

        Raises:
            ClusterStatusError: on transport failure or a non-2xx response

        """
        try:
            response = await self._client.get(
                f"{self.url}/pins/{cid}", headers=self._headers
            )
        except httpx.HTTPError as e:
            raise ClusterStatusError(f"cluster status request failed: {e}") from e

        if response.is_error:
            raise ClusterStatusError(
                f"cluster status failed: {response.status_code} {response.text}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ClusterStatusError(f"unreadable cluster status response: {e}") from e

        try:
            peer_map = {
                peer_id: {
                    "peerName": info.get("peername"),
                    "status": info.get("status", ""),
                    "error": info.get("error", ""),
                }
                for peer_id, info in (data.get("peer_map") or {}).items()
            }
            status_cid = _cid_string(data.get("cid", cid))
        except (AttributeError, KeyError, TypeError) as e:
            raise ClusterStatusError(
                f"unexpected cluster status response: {data!r}"
            ) from e
        return {"cid": status_cid, "peerMap": peer_map}
