import argparse
import logging
from pathlib import Path
import sys

import httpx
from hypercorn.config import Config as HypercornConfig
import hypercorn.trio
import trio

from w3storage.api.app import create_app
from w3storage.api.background import BackgroundTasks
from w3storage.api.cache import ResponseCache
from w3storage.api.env import Env
from w3storage.car.dag_size import get_car_dag_size
from w3storage.car.writer import encode_car, make_cid
from w3storage.cluster.client import ClusterClient
from w3storage.config import ApiConfig
from w3storage.db.client import DBClient
from w3storage.db.memory import MemoryDBClient
from w3storage.db.postgrest import PostgrestDBClient
from w3storage.exceptions import W3StorageError
from w3storage.utils.logging import setup_logging

logger = logging.getLogger("w3storage.cli")


def create_db(config: ApiConfig, http: httpx.AsyncClient) -> DBClient:
    if config.database_url:
        return PostgrestDBClient(
            config.database_url, config.database_token or "", client=http
        )
    logger.warning("DATABASE_URL not set, using an in-memory database")
    return MemoryDBClient()


async def run_server(config: ApiConfig) -> None:
    async with httpx.AsyncClient(timeout=None) as http:
        tasks = BackgroundTasks()
        env = Env(
            config=config,
            cluster=ClusterClient(
                config.cluster_api_url,
                basic_auth_token=config.cluster_basic_auth_token,
                client=http,
            ),
            db=create_db(config, http),
            http=http,
            tasks=tasks,
            cache=ResponseCache(max_size=config.cache_size),
        )
        app = create_app(env)

        hypercorn_config = HypercornConfig()
        hypercorn_config.bind = [f"{config.host}:{config.port}"]

        async with trio.open_nursery() as nursery:
            await nursery.start(tasks.run)
            logger.info(f"Serving on http://{config.host}:{config.port}")
            try:
                await hypercorn.trio.serve(app, hypercorn_config)
            finally:
                await tasks.aclose()


def dag_size(path: Path) -> int:
    size = get_car_dag_size(path.read_bytes())
    print(size)
    return size


def pack(path: Path, output: Path) -> None:
    data = path.read_bytes()
    cid = make_cid(data)
    output.write_bytes(encode_car([cid], [(cid, data)]))
    print(cid)


def main() -> int:
    """Main function with argument parsing."""
    parser = argparse.ArgumentParser(
        description="CAR upload and retrieval API for IPFS Cluster backed storage.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  w3storage-api serve                      # Serve on 127.0.0.1:8787
  w3storage-api serve --port 9000          # Serve on port 9000
  w3storage-api dag-size upload.car        # Print the DAG size of a CAR
  w3storage-api pack hello.txt hello.car   # Wrap a file as a single block CAR

Configuration is read from the environment: GATEWAY_URL, CLUSTER_API_URL,
CLUSTER_BASIC_AUTH_TOKEN, DATABASE_URL, DATABASE_TOKEN, HOST, PORT.
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Interface to bind")
    serve_parser.add_argument("--port", "-p", type=int, help="Port to listen on")

    size_parser = subparsers.add_parser("dag-size", help="Print the DAG size of a CAR")
    size_parser.add_argument("car", type=Path, help="Path to a CAR file")

    pack_parser = subparsers.add_parser("pack", help="Wrap a file as a raw block CAR")
    pack_parser.add_argument("input", type=Path, help="File to pack")
    pack_parser.add_argument("output", type=Path, help="CAR file to write")

    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        return 1

    setup_logging()

    try:
        if args.command == "serve":
            config = ApiConfig.from_env()
            if args.host:
                config.host = args.host
            if args.port:
                config.port = args.port
            trio.run(run_server, config)
        elif args.command == "dag-size":
            dag_size(args.car)
        elif args.command == "pack":
            pack(args.input, args.output)
    except KeyboardInterrupt:
        return 0
    except (OSError, W3StorageError) as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
