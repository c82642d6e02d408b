"""
CID helpers.
"""

from multiformats import CID


def canonical_cid(cid: CID) -> CID:
    """
    Give a decoded CID its canonical string form.

    Binary CIDs carry no multibase; CIDv1 is shown in base32 (``bafy...``) and
    CIDv0 keeps base58btc (``Qm...``).
    """
    if cid.version == 1:
        return cid.set(base="base32")
    return cid


def decode_cid(data: bytes) -> CID:
    """Decode a binary CID into its canonical form."""
    return canonical_cid(CID.decode(data))
