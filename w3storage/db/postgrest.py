"""
PostgREST (Supabase) database client.
"""

from datetime import datetime
import logging
from typing import Any

import httpx

from .client import DBClient
from .errors import DBError
from .models import AuthContext, AuthToken, Content, ImportCarInput, Upload, User

logger = logging.getLogger(__name__)


class PostgrestDBClient(DBClient):
    """
    Database client calling PostgREST stored procedures over HTTP.

    Expects ``import_car`` and ``update_content_dag_size`` functions and an
    ``auth_key`` table exposed by the endpoint.
    """

    def __init__(
        self,
        endpoint: str,
        token: str,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self._headers = {
            "apikey": token,
            "Authorization": f"Bearer {token}",
        }
        self._client = client or httpx.AsyncClient()
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            response = await self._client.request(
                method, f"{self.endpoint}/{path}", headers=self._headers, **kwargs
            )
        except httpx.HTTPError as e:
            raise DBError(f"{method} {path} failed: {e}") from e

        if response.is_error:
            try:
                message = response.json().get("message", response.text)
            except ValueError:
                message = response.text
            raise DBError(f"{method} {path} failed: {response.status_code} {message}")

        if not response.content:
            return None
        return response.json()

    async def import_car(self, data: ImportCarInput) -> Upload:
        payload = {
            "data": {
                "user_id": data.user,
                "auth_key_id": data.auth_token,
                "content_cid": data.cid,
                "name": data.name,
                "dag_size": data.dag_size,
                "pins": [pin.to_dict() for pin in data.pins],
            }
        }
        row = await self._request("POST", "rpc/import_car", json=payload)
        if not row:
            raise DBError("import_car returned no upload")
        return _upload_from_row(row)

    async def update_content_dag_size(self, content_id: str, dag_size: int) -> None:
        await self._request(
            "POST",
            "rpc/update_content_dag_size",
            json={"content_id": content_id, "dag_size": dag_size},
        )
        logger.debug(f"Updated DAG size of content {content_id} to {dag_size}")

    async def get_auth_context(self, secret: str) -> AuthContext | None:
        rows = await self._request(
            "GET",
            "auth_key",
            params={
                "select": "id,name,user:user_id(id,issuer,name)",
                "secret": f"eq.{secret}",
                "deleted_at": "is.null",
            },
        )
        if not rows:
            return None
        row = rows[0]
        user = row["user"]
        return AuthContext(
            user=User(
                id=str(user["id"]),
                issuer=user.get("issuer") or "",
                name=user.get("name") or "",
            ),
            auth_token=AuthToken(id=str(row["id"]), name=row.get("name") or ""),
        )


def _upload_from_row(row: dict[str, Any]) -> Upload:
    content = row["content"]
    created = row.get("inserted_at")
    return Upload(
        id=str(row["id"]),
        user_id=str(row["user_id"]),
        name=row.get("name"),
        auth_token_id=row.get("auth_key_id"),
        created=datetime.fromisoformat(created) if created else None,
        content=Content(
            id=str(content.get("id", content["cid"])),
            cid=content["cid"],
            dag_size=content.get("dag_size"),
        ),
    )
