"""
Collaborators shared by the request handlers.
"""

from dataclasses import dataclass, field

import httpx

from w3storage.car.codecs import CodecRegistry, default_registry
from w3storage.cluster.client import ClusterClient
from w3storage.config import ApiConfig
from w3storage.db.client import DBClient

from .background import BackgroundTasks
from .cache import ResponseCache


@dataclass
class Env:
    config: ApiConfig
    cluster: ClusterClient
    db: DBClient
    http: httpx.AsyncClient
    tasks: BackgroundTasks
    cache: ResponseCache
    codecs: CodecRegistry = field(default_factory=default_registry)
