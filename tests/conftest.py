from typing import Any

import httpx
import pytest

from w3storage.api.app import create_app
from w3storage.api.background import BackgroundTasks
from w3storage.api.cache import ResponseCache
from w3storage.api.env import Env
from w3storage.car.codecs import default_registry
from w3storage.car.reader import CarBlockReader
from w3storage.config import ApiConfig
from w3storage.db.memory import MemoryDBClient

GATEWAY_URL = "http://gateway.test"
TEST_TOKEN = "test-secret-token"


class FakeCluster:
    """Records add/status calls; the CID of an add is the CAR's first root."""

    def __init__(self) -> None:
        self.added: list[dict[str, Any]] = []
        self.status_calls: list[str] = []
        self.peer_map: dict[str, dict[str, str]] = {
            "12D3KooWPeer0001": {"peerName": "cluster-peer-1", "status": "pinned"},
            "12D3KooWPeer0002": {"peerName": "cluster-peer-2", "status": "pinning"},
        }

    async def add(self, blob, metadata=None, local=False):
        self.added.append({"blob": blob, "metadata": metadata, "local": local})
        roots = CarBlockReader.from_bytes(blob.data).get_roots()
        return {"cid": str(roots[0]), "name": "blob", "size": blob.size}

    async def status(self, cid):
        self.status_calls.append(cid)
        return {"cid": cid, "peerMap": self.peer_map}


class FakeGateway:
    """Serves DAG exports from a dict of CID -> CAR bytes and counts requests."""

    def __init__(self) -> None:
        self.cars: dict[str, bytes] = {}
        self.requests: list[httpx.Request] = []
        self.unreachable = False

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.unreachable:
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.path != "/api/v0/dag/export":
            return httpx.Response(404, text="404 page not found")
        cid = request.url.params.get("arg")
        if cid not in self.cars:
            return httpx.Response(
                500,
                json={"Message": f"block not found: {cid}", "Code": 0},
                headers={"X-Upstream": "gateway"},
            )
        return httpx.Response(
            200,
            content=self.cars[cid],
            headers={"Content-Type": "application/vnd.ipld.car", "X-Upstream": "gateway"},
        )


@pytest.fixture
def db():
    db = MemoryDBClient()
    user = db.create_user(issuer="did:ethr:0xtest", name="test")
    db.create_auth_token(user.id, TEST_TOKEN, name="test")
    return db


@pytest.fixture
def auth_headers():
    return {"Authorization": f"Bearer {TEST_TOKEN}"}


@pytest.fixture
def cluster():
    return FakeCluster()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def tasks(nursery):
    tasks = BackgroundTasks()
    await nursery.start(tasks.run)
    yield tasks
    await tasks.aclose()


@pytest.fixture
async def env(db, cluster, gateway, tasks):
    async with httpx.AsyncClient(transport=httpx.MockTransport(gateway.handler)) as http:
        yield Env(
            config=ApiConfig(gateway_url=GATEWAY_URL),
            cluster=cluster,
            db=db,
            http=http,
            tasks=tasks,
            cache=ResponseCache(),
            codecs=default_registry(),
        )


@pytest.fixture
async def client(env):
    app = create_app(env)
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app), base_url="http://testserver"
    ) as client:
        yield client
