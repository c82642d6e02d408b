"""
Pin records and cluster status mapping.
"""

from dataclasses import dataclass
from enum import Enum


class PinStatus(str, Enum):
    """Pin status as recorded in the database."""

    QUEUED = "PinQueued"
    PINNING = "Pinning"
    PINNED = "Pinned"
    ERROR = "PinError"


# IPFS Cluster tracker status -> recorded pin status
_CLUSTER_STATUS_MAP = {
    "pin_queued": PinStatus.QUEUED,
    "unpin_queued": PinStatus.QUEUED,
    "pinning": PinStatus.PINNING,
    "unpinning": PinStatus.PINNING,
    "pinned": PinStatus.PINNED,
    "cluster_error": PinStatus.ERROR,
    "pin_error": PinStatus.ERROR,
    "unpin_error": PinStatus.ERROR,
}


def to_pin_status(status: str) -> PinStatus:
    """
    Map a cluster tracker status to a :class:`PinStatus`.

    Statuses with no direct equivalent (``remote``, ``unpinned``,
    ``undefined``, ``sharded``) mean the peer has not pinned the content yet,
    so they are recorded as queued.
    """
    return _CLUSTER_STATUS_MAP.get(status, PinStatus.QUEUED)


@dataclass(frozen=True)
class PinLocation:
    """A cluster peer holding (or about to hold) a pin."""

    peer_id: str
    peer_name: str | None = None


@dataclass(frozen=True)
class Pin:
    status: PinStatus
    location: PinLocation

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status.value,
            "location": {
                "peerId": self.location.peer_id,
                "peerName": self.location.peer_name,
            },
        }


def pins_from_peer_map(peer_map: dict[str, dict[str, str]]) -> list[Pin]:
    """Build one pin per peer in a cluster status peer map."""
    return [
        Pin(
            status=to_pin_status(info.get("status", "")),
            location=PinLocation(peer_id=peer_id, peer_name=info.get("peerName")),
        )
        for peer_id, info in peer_map.items()
    ]
