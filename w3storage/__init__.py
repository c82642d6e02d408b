"""
w3storage: CAR ingest, retrieval and DAG sizing for IPFS Cluster backed storage.
"""

from w3storage.car import (
    CarBlockReader,
    compute_dag_size,
    get_car_dag_size,
)
from w3storage.exceptions import W3StorageError

__all__ = [
    "CarBlockReader",
    "compute_dag_size",
    "get_car_dag_size",
    "W3StorageError",
]
