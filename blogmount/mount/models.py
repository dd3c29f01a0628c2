from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import httpx


@dataclass(frozen=True)
class InboundRequest:
    """A request that routing already matched to the mount."""

    method: str
    mount_relative_path: str
    query_string: str = ""
    headers: httpx.Headers = field(default_factory=httpx.Headers)
    body: Optional[bytes] = None
    client_host: Optional[str] = None


@dataclass(frozen=True)
class UpstreamRequest:
    method: str
    url: str
    headers: httpx.Headers
    body: Optional[bytes] = None


@dataclass
class UpstreamResponse:
    status_code: int
    headers: httpx.Headers
    body: bytes
    url: str = ""

    @property
    def content_type(self) -> str:
        return self.headers.get("content-type", "")


@dataclass
class OutboundResponse:
    """What the HTTP layer emits; headers may repeat (e.g. ``set-cookie``)."""

    status_code: int
    headers: List[Tuple[str, str]] = field(default_factory=list)
    body: bytes = b""

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.headers:
            if key.lower() == name:
                return value
        return None
