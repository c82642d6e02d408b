"""
CAR retrieval and ingest handlers.

``GET /car/{cid}`` proxies a DAG export from the IPFS gateway and caches it,
``HEAD /car/{cid}`` reports its size, and ``POST /car`` pins an uploaded CAR
on the cluster and records it in the database.
"""

from collections.abc import AsyncIterator
from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response, StreamingResponse
import httpx
from multiformats import CID
import trio

from w3storage.car.byte_counter import size_of
from w3storage.car.dag_size import get_car_dag_size
from w3storage.cluster.client import Blob
from w3storage.cluster.pin import pins_from_peer_map
from w3storage.config import CAR_CACHE_MAX_AGE, CAR_MEDIA_TYPE
from w3storage.db.models import AuthContext, ImportCarInput

from .auth import require_auth
from .env import Env
from .errors import InvalidCIDError, NoPinningPeersError, UpstreamFetchError

logger = logging.getLogger(__name__)

router = APIRouter()

# Headers describing the upstream connection or an encoding httpx has undone
_DROPPED_UPSTREAM_HEADERS = {
    "connection",
    "content-encoding",
    "content-length",
    "keep-alive",
    "transfer-encoding",
}


def get_env(request: Request) -> Env:
    return request.app.state.env


def parse_cid(cid: str) -> CID:
    try:
        return CID.decode(cid)
    except Exception as e:
        raise InvalidCIDError(f"invalid CID: {cid}") from e


def car_response_headers(cid: str) -> dict[str, str]:
    return {
        "Content-Type": CAR_MEDIA_TYPE,
        "Cache-Control": f"public, max-age={CAR_CACHE_MAX_AGE}",
        # without the content-disposition, firefox describes them as DMS files.
        "Content-Disposition": f'attachment; filename="{cid}.car"',
        "Strict-Transport-Security": "max-age=31536000; includeSubDomains; preload",
    }


async def _stream_and_cache(
    env: Env,
    url: str,
    upstream: httpx.Response,
    headers: dict[str, str],
) -> AsyncIterator[bytes]:
    chunks = []
    try:
        async for chunk in upstream.aiter_bytes():
            chunks.append(chunk)
            yield chunk
    finally:
        await upstream.aclose()

    # only a fully streamed body is cached
    env.tasks.submit(
        env.cache.put,
        url,
        200,
        list(headers.items()),
        b"".join(chunks),
        name=f"cache-put:{url}",
    )


async def _replay(body: bytes) -> AsyncIterator[bytes]:
    yield body


async def fetch_car(env: Env, url: str, cid: str) -> Response:
    """
    Serve the CAR export of ``cid``, from cache when possible.

    Upstream errors are returned unchanged and never cached.

    Raises:
        UpstreamFetchError: if the gateway cannot be reached

    """
    cached = await env.cache.match(url)
    if cached is not None:
        logger.debug(f"Cache hit: {url}")
        # replayed as a stream so the headers match the original response
        return StreamingResponse(
            _replay(cached.body),
            status_code=cached.status_code,
            headers=dict(cached.headers),
        )

    # gateway does not support `carversion` yet. using it now means we can
    # skip the cache if it is supported in the future
    upstream_request = env.http.build_request(
        "POST",
        f"{env.config.gateway_url.rstrip('/')}/api/v0/dag/export",
        params={"arg": cid, "carversion": "1"},
    )
    try:
        upstream = await env.http.send(upstream_request, stream=True)
    except httpx.HTTPError as e:
        raise UpstreamFetchError(f"gateway request failed: {e}") from e

    if not upstream.is_success:
        try:
            body = await upstream.aread()
        finally:
            await upstream.aclose()
        logger.info(f"Gateway returned {upstream.status_code} for {cid}")
        return Response(
            content=body,
            status_code=upstream.status_code,
            headers={
                key: value
                for key, value in upstream.headers.items()
                if key.lower() not in _DROPPED_UPSTREAM_HEADERS
            },
        )

    headers = car_response_headers(cid)
    return StreamingResponse(
        _stream_and_cache(env, url, upstream, headers), headers=headers
    )


async def _iter_body(response: Response) -> AsyncIterator[bytes]:
    if isinstance(response, StreamingResponse):
        async for chunk in response.body_iterator:
            yield chunk if isinstance(chunk, bytes) else str(chunk).encode()
    else:
        yield response.body


@router.get("/car/{cid}")
async def car_get(request: Request, cid: str) -> Response:
    parse_cid(cid)
    return await fetch_car(get_env(request), str(request.url), cid)


@router.head("/car/{cid}")
async def car_head(request: Request, cid: str) -> Response:
    """
    Size of a CAR export, found by consuming the GET response.

    A HEAD response is never cached itself, but running the GET flow caches
    the export for subsequent requests.
    """
    parse_cid(cid)
    response = await fetch_car(get_env(request), str(request.url), cid)
    size = await size_of(_iter_body(response))
    headers = dict(response.headers)
    headers["content-length"] = str(size)
    # skip the body, it's a HEAD.
    return Response(status_code=response.status_code, headers=headers)


async def update_dag_size(env: Env, content_id: str, car: bytes) -> None:
    try:
        dag_size = await trio.to_thread.run_sync(get_car_dag_size, car, env.codecs)
    except Exception as e:
        logger.error(f"could not determine DAG size: {e!r}")
        return
    await env.db.update_content_dag_size(content_id, dag_size)
    logger.info(f"Recorded DAG size {dag_size} for content {content_id}")


async def ingest_car(env: Env, auth: AuthContext, blob: Blob, name: str) -> str:
    """
    Pin an uploaded CAR and record it.

    Returns as soon as the upload is recorded; the DAG size of small
    (probably complete) CARs is computed afterwards in the background.

    Raises:
        ClusterAddError: if the cluster rejects the content
        ClusterStatusError: if the pin status cannot be read
        NoPinningPeersError: if no cluster peer is pinning the content
        DBError: if the upload cannot be recorded

    """
    added = await env.cluster.add(
        blob,
        metadata={"size": str(blob.size)},
        # waiting for blocks to be sent to other cluster nodes can take a long
        # time for large uploads
        local=blob.size > env.config.local_add_threshold,
    )
    cid = added["cid"]

    status = await env.cluster.status(cid)
    pins = pins_from_peer_map(status["peerMap"])
    if not pins:
        raise NoPinningPeersError(f"not pinning on any node: {cid}")

    upload = await env.db.import_car(
        ImportCarInput(
            user=auth.user.id,
            auth_token=auth.auth_token.id if auth.auth_token else None,
            cid=cid,
            name=name,
            pins=pins,
        )
    )

    # Partial CARs are chunked at ~10MB so anything less than this is
    # probably complete.
    if (
        upload.content.dag_size is None
        and blob.size < env.config.dag_size_calc_limit
    ):
        env.tasks.submit(
            update_dag_size,
            env,
            upload.content.id,
            blob.data,
            name=f"dag-size:{cid}",
        )

    return cid


@router.post("/car")
async def car_post(
    request: Request, auth: AuthContext = Depends(require_auth)
) -> JSONResponse:
    name = request.headers.get("x-name")
    if not name:
        name = f"Upload at {datetime.now(timezone.utc).isoformat()}"

    data = await request.body()
    # the media type makes the cluster import it as a CAR rather than a file
    blob = Blob(data=data, type=CAR_MEDIA_TYPE)

    cid = await ingest_car(get_env(request), auth, blob, name)
    return JSONResponse({"cid": cid})


@router.put("/car")
async def car_put(request: Request) -> Response:
    return Response(f"{request.method} /car no can has", status_code=501)
