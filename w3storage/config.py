"""
Service configuration constants and defaults.
"""

from dataclasses import dataclass, fields
import os
from typing import Any

from w3storage.exceptions import ValidationError

# Upstream IPFS gateway exposing the /api/v0/dag/export endpoint
GATEWAY = "http://127.0.0.1:8080"

# Default IPFS Cluster REST API endpoint
CLUSTER_API_URL = "http://127.0.0.1:9094"

# Uploads above this size are added with local=true; replication to other
# cluster nodes happens asynchronously via bitswap (2.5 MiB)
LOCAL_ADD_THRESHOLD = int(1024 * 1024 * 2.5)

# Partial CARs are chunked at ~10MB, so anything below this is probably a
# complete DAG and worth sizing (9 MiB)
DAG_SIZE_CALC_LIMIT = 1024 * 1024 * 9

# One year, the max max-age value
CAR_CACHE_MAX_AGE = 31536000

# Maximum number of responses held by the in-process response cache
DEFAULT_CACHE_SIZE = 1024

CAR_MEDIA_TYPE = "application/car"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8787


@dataclass
class ApiConfig:
    """Runtime configuration for the HTTP API."""

    gateway_url: str = GATEWAY
    cluster_api_url: str = CLUSTER_API_URL
    cluster_basic_auth_token: str | None = None
    database_url: str | None = None
    database_token: str | None = None
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cache_size: int = DEFAULT_CACHE_SIZE
    local_add_threshold: int = LOCAL_ADD_THRESHOLD
    dag_size_calc_limit: int = DAG_SIZE_CALC_LIMIT

    @classmethod
    def from_dict(cls, config: dict[str, Any]) -> "ApiConfig":
        """Create ApiConfig from dictionary, ignoring unknown keys."""
        return cls(**{k: v for k, v in config.items() if k in cls.__annotations__})

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ApiConfig":
        """
        Create ApiConfig from environment variables.

        Recognised variables: GATEWAY_URL, CLUSTER_API_URL,
        CLUSTER_BASIC_AUTH_TOKEN, DATABASE_URL, DATABASE_TOKEN, HOST, PORT.

        Raises:
            ValidationError: if PORT is not an integer

        """
        env = os.environ if environ is None else environ
        config: dict[str, Any] = {}
        for name in (
            "gateway_url",
            "cluster_api_url",
            "cluster_basic_auth_token",
            "database_url",
            "database_token",
            "host",
        ):
            value = env.get(name.upper())
            if value:
                config[name] = value
        if env.get("PORT"):
            try:
                config["port"] = int(env["PORT"])
            except ValueError as e:
                raise ValidationError(
                    f"PORT must be an integer, got {env['PORT']!r}"
                ) from e
        return cls.from_dict(config)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
