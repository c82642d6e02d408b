"""
IPFS Cluster pinning client.
"""

from .client import Blob, ClusterClient
from .errors import ClusterAddError, ClusterError, ClusterStatusError
from .pin import Pin, PinLocation, PinStatus, pins_from_peer_map, to_pin_status

__all__ = [
    "Blob",
    "ClusterClient",
    "Pin",
    "PinLocation",
    "PinStatus",
    "pins_from_peer_map",
    "to_pin_status",
    # Errors
    "ClusterError",
    "ClusterAddError",
    "ClusterStatusError",
]
