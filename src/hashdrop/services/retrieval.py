from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class RetrievedFile:
    path: str  # relative to the fetch root, "/"-separated
    content: bytes


class RetrievalError(Exception):
    """The IPFS client failed; the underlying error is kept as `cause`."""

    def __init__(self, reference: str, cause: Optional[BaseException] = None):
        super().__init__(f"could not retrieve {reference}: {cause}")
        self.reference = reference
        self.cause = cause


def fetch(api, reference: str) -> List[RetrievedFile]:
    """Retrieve `reference` through `api.get`, keeping the client's order."""
    try:
        entries = api.get(reference)
        return [RetrievedFile(path=str(e["path"]), content=bytes(e["content"])) for e in entries]
    except Exception as e:
        raise RetrievalError(reference, e) from e
