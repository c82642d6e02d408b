"""
Records exchanged with the database layer.
"""

from dataclasses import dataclass, field
from datetime import datetime

from w3storage.cluster.pin import Pin


@dataclass(frozen=True)
class User:
    id: str
    issuer: str = ""
    name: str = ""


@dataclass(frozen=True)
class AuthToken:
    id: str
    name: str = ""


@dataclass(frozen=True)
class AuthContext:
    """The authenticated caller of a request."""

    user: User
    auth_token: AuthToken | None = None


@dataclass
class Content:
    id: str
    cid: str
    dag_size: int | None = None
    pins: list[Pin] = field(default_factory=list)


@dataclass
class Upload:
    id: str
    user_id: str
    content: Content
    name: str | None = None
    auth_token_id: str | None = None
    created: datetime | None = None


@dataclass(frozen=True)
class ImportCarInput:
    """Input to the idempotent "import CAR" mutation."""

    user: str
    cid: str
    name: str
    pins: list[Pin]
    auth_token: str | None = None
    dag_size: int | None = None
