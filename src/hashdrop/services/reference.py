from __future__ import annotations

"""Recognize IPFS content references in arbitrary text.

Accepted forms:
  - a base58 multihash (``Qm...``)
  - a CID, v0 or multibase-encoded v1 (``bafy...``)
  - an IPFS path ``/ipfs/<cid>[/sub/path]``
  - a bare ``<cid>/sub/path`` (valid once rooted at ``/ipfs/``)

Nothing here touches the network.
"""

import re

import base58
from multiformats import CID, multihash

IPFS_PREFIX = "/ipfs/"

_PATH_PATTERN = re.compile(r"^/(ip[fn]s)/([^/?#]+)")


def is_multihash(text: str) -> bool:
    try:
        multihash.unwrap(base58.b58decode(text))
    except Exception:
        return False
    return True


def is_cid(text: str) -> bool:
    try:
        CID.decode(text)
    except Exception:
        return False
    return True


def is_ipfs_path(text: str) -> bool:
    m = _PATH_PATTERN.match(text)
    if m is None or m.group(1) != "ipfs":
        return False
    return is_cid(m.group(2))


def is_content_reference(text: str) -> bool:
    """Return True if `text` plausibly names IPFS content. Never raises."""
    if not isinstance(text, str) or not text:
        return False
    return (
        is_multihash(text)
        or is_cid(text)
        or is_ipfs_path(text)
        or is_ipfs_path(IPFS_PREFIX + text)
    )
