"""
In-memory database client.
"""

from datetime import datetime, timezone
import itertools
import logging

from w3storage.cluster.pin import Pin

from .client import DBClient
from .errors import DBError
from .models import AuthContext, AuthToken, Content, ImportCarInput, Upload, User

logger = logging.getLogger(__name__)


class MemoryDBClient(DBClient):
    """In-memory database client implementation."""

    def __init__(self) -> None:
        """Initialize the empty in-memory database."""
        self._ids = itertools.count(1)
        self._users: dict[str, User] = {}
        self._auth_tokens: dict[str, tuple[str, AuthToken]] = {}  # secret -> (user, token)
        self._contents: dict[str, Content] = {}  # cid -> content
        self._uploads: dict[tuple[str, str], Upload] = {}  # (user, content) -> upload

    def _next_id(self) -> str:
        return str(next(self._ids))

    def create_user(self, issuer: str = "", name: str = "") -> User:
        user = User(id=self._next_id(), issuer=issuer, name=name)
        self._users[user.id] = user
        return user

    def create_auth_token(self, user_id: str, secret: str, name: str = "") -> AuthToken:
        if user_id not in self._users:
            raise DBError("user not found")
        token = AuthToken(id=self._next_id(), name=name)
        self._auth_tokens[secret] = (user_id, token)
        return token

    async def get_auth_context(self, secret: str) -> AuthContext | None:
        entry = self._auth_tokens.get(secret)
        if entry is None:
            return None
        user_id, token = entry
        return AuthContext(user=self._users[user_id], auth_token=token)

    async def import_car(self, data: ImportCarInput) -> Upload:
        if data.user not in self._users:
            raise DBError("user not found")

        content = self._contents.get(data.cid)
        if content is None:
            content = Content(id=self._next_id(), cid=data.cid, dag_size=data.dag_size)
            self._contents[data.cid] = content
            logger.debug(f"Created content {content.id} for {data.cid}")

        for pin in data.pins:
            self._upsert_pin(content, pin)

        key = (data.user, content.id)
        upload = self._uploads.get(key)
        if upload is None:
            upload = Upload(
                id=self._next_id(),
                user_id=data.user,
                content=content,
                name=data.name,
                auth_token_id=data.auth_token,
                created=datetime.now(timezone.utc),
            )
            self._uploads[key] = upload
        return upload

    @staticmethod
    def _upsert_pin(content: Content, pin: Pin) -> None:
        for i, existing in enumerate(content.pins):
            if existing.location.peer_id == pin.location.peer_id:
                content.pins[i] = pin
                return
        content.pins.append(pin)

    async def update_content_dag_size(self, content_id: str, dag_size: int) -> None:
        for content in self._contents.values():
            if content.id == content_id:
                content.dag_size = dag_size
                return
        raise DBError(f"content not found: {content_id}")

    def get_content(self, cid: str) -> Content | None:
        return self._contents.get(cid)

    def uploads(self) -> list[Upload]:
        return list(self._uploads.values())
