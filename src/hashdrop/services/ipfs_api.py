from __future__ import annotations

import io
import json
import tarfile
import urllib.parse
import urllib.request
from typing import Any, Dict, List, Optional

from hashdrop.core.logging import get_logger

ID_TIMEOUT = 5.0

_log = get_logger("hashdrop.ipfs")


def _post(url: str, timeout: Optional[float] = None) -> bytes:
    # The Kubo RPC API only accepts POST.
    req = urllib.request.Request(
        url,
        data=b"",
        headers={"User-Agent": "hashdrop/1.0"},
        method="POST",
    )
    if timeout is None:
        resp = urllib.request.urlopen(req)
    else:
        resp = urllib.request.urlopen(req, timeout=timeout)
    with resp:
        return resp.read()


def entries_from_tar(data: bytes) -> List[Dict[str, Any]]:
    """Decode a `get` tar stream into ``[{"path", "content"}]``.

    Only regular files are returned, in archive order. When the archive root
    is a directory its name is stripped, so paths are relative to the fetched
    directory; a single-file archive keeps the member name.
    """
    entries: List[Dict[str, Any]] = []
    root: Optional[str] = None
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:") as tf:
        for i, member in enumerate(tf):
            name = member.name.strip("/")
            if i == 0 and member.isdir():
                root = name
                continue
            if not member.isfile():
                continue
            if root is not None and name.startswith(root + "/"):
                name = name[len(root) + 1 :]
            f = tf.extractfile(member)
            content = f.read() if f is not None else b""
            entries.append({"path": name, "content": content})
    return entries


class IpfsApi:
    """Minimal client for a Kubo node's HTTP RPC API."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")

    def _url(self, command: str, arg: Optional[str] = None) -> str:
        url = f"{self.base_url}/api/v0/{command}"
        if arg is not None:
            url += "?" + urllib.parse.urlencode({"arg": arg})
        return url

    def id(self) -> Dict[str, Any]:
        raw = _post(self._url("id"), timeout=ID_TIMEOUT)
        return json.loads(raw.decode("utf-8", errors="replace"))

    def get(self, reference: str) -> List[Dict[str, Any]]:
        # No timeout: large content may legitimately take a long time.
        raw = _post(self._url("get", reference))
        return entries_from_tar(raw)


class IpfsNode:
    """Connection holder; `api` stays None until the node answered `/api/v0/id`."""

    def __init__(self, base_url: str):
        self.base_url = base_url
        self.api: Optional[IpfsApi] = None

    @property
    def connected(self) -> bool:
        return self.api is not None

    def connect(self) -> bool:
        """Ask the node for its id and keep the client if it answers. Never raises."""
        api = IpfsApi(self.base_url)
        try:
            info = api.id()
        except Exception as e:
            _log.info("IPFS node at %s not reachable: %s", self.base_url, e)
            return False
        _log.info("Connected to IPFS node %s at %s", info.get("ID", "?"), self.base_url)
        self.api = api
        return True
