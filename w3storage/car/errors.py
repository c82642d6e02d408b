"""
CAR and DAG traversal errors.
"""

from w3storage.exceptions import W3StorageError


class CarError(W3StorageError):
    """Base exception for CAR errors."""

    pass


class MalformedArchiveError(CarError):
    """Raised when a buffer is not a valid CARv1 encoding."""

    pass


class MissingBlockError(CarError):
    """Raised when a linked block is not present in the archive."""

    def __init__(self, cid: object) -> None:
        super().__init__(f"missing block for {cid}")
        self.cid = cid


class UnsupportedCodecError(CarError):
    """Raised when no decoder is registered for a CID's codec."""

    def __init__(self, code: int) -> None:
        super().__init__(f"missing decoder for {code:#x}")
        self.code = code


class DagCycleError(CarError):
    """Raised by cycle-safe traversal when a block links back to an ancestor."""

    pass


class BlockDecodingError(CarError):
    """Raised when a block's bytes cannot be decoded with its codec."""

    pass
