import logging
from email.message import Message
from typing import List, Optional, Tuple

from blogmount.mount.classifier import ContentKind
from blogmount.mount.config import MountConfig
from blogmount.mount.models import OutboundResponse, UpstreamResponse
from blogmount.mount.rewrite import RewriteEngine

logger = logging.getLogger("uvicorn.error")

# Hop-by-hop headers that should NOT be forwarded (RFC 2616)
HOP_BY_HOP_HEADERS = {
    "connection",
    "keep-alive",
    "proxy-authenticate",
    "proxy-authorization",
    "te",
    "trailers",
    "transfer-encoding",
    "upgrade",
}

# The body is fully buffered and already decoded by the client, so neither the
# origin's encoding nor its length describe what we send.
BUFFERED_BODY_HEADERS = {"content-encoding", "content-length"}


def body_charset(content_type: str, default: str = "utf-8") -> str:
    if not content_type:
        return default
    message = Message()
    message["content-type"] = content_type
    return message.get_content_charset() or default


def decode_text(body: bytes, content_type: str) -> Optional[Tuple[str, str]]:
    """Return ``(text, charset)`` or ``None`` when the body cannot be decoded."""
    charset = body_charset(content_type)
    try:
        return body.decode(charset), charset
    except (UnicodeDecodeError, LookupError):
        return None


class ResponseAssembler:
    def __init__(self, config: MountConfig, engine: RewriteEngine):
        self.config = config
        self.engine = engine

    def _passthrough_headers(self, upstream: UpstreamResponse) -> List[Tuple[str, str]]:
        headers = []
        for name, value in upstream.headers.multi_items():
            name_lower = name.lower()
            if name_lower in HOP_BY_HOP_HEADERS or name_lower in BUFFERED_BODY_HEADERS:
                continue
            if name_lower == "location":
                value = self.engine.rewrite_location(value)
            headers.append((name_lower, value))
        return headers

    def _text_headers(self, upstream: UpstreamResponse) -> List[Tuple[str, str]]:
        headers = []
        content_type = upstream.headers.get("content-type")
        if content_type:
            headers.append(("content-type", content_type))
        headers.append(
            (
                "cache-control",
                upstream.headers.get("cache-control")
                or f"public, max-age={self.config.default_cache_ttl}",
            )
        )
        headers.append(("x-proxy-cache", "MISS"))
        headers.append(("x-powered-by", self.config.proxy_identity))
        location = upstream.headers.get("location")
        if location:
            headers.append(("location", self.engine.rewrite_location(location)))
        return headers

    def rewrite_body(self, upstream: UpstreamResponse) -> bytes:
        decoded = decode_text(upstream.body, upstream.content_type)
        if decoded is None:
            logger.warning(
                f"[Proxy] Cannot decode {upstream.content_type!r} body from {upstream.url}; passing it through unchanged"
            )
            return upstream.body
        text, charset = decoded
        rewritten = self.engine.rewrite(text)
        logger.debug(
            f"[Proxy] Rewrote {len(text)} -> {len(rewritten)} characters for {upstream.url}"
        )
        return rewritten.encode(charset)

    def assemble(self, kind: ContentKind, upstream: UpstreamResponse) -> OutboundResponse:
        if kind is ContentKind.BINARY:
            return OutboundResponse(
                status_code=upstream.status_code,
                headers=self._passthrough_headers(upstream),
                body=upstream.body,
            )

        body = upstream.body
        if kind is ContentKind.REWRITABLE_TEXT:
            body = self.rewrite_body(upstream)
        return OutboundResponse(
            status_code=upstream.status_code,
            headers=self._text_headers(upstream),
            body=body,
        )
