import logging
from urllib.parse import urlparse

import httpx

from blogmount.mount.config import MountConfig
from blogmount.mount.errors import (
    UpstreamTimeout,
    UpstreamTooManyRedirects,
    UpstreamUnreachable,
)
from blogmount.mount.models import InboundRequest, UpstreamRequest, UpstreamResponse
from blogmount.mount.paths import build_upstream_url

logger = logging.getLogger("uvicorn.error")

DEFAULT_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"
DEFAULT_ACCEPT_LANGUAGE = "en-US,en;q=0.5"

BODYLESS_METHODS = {"GET", "HEAD"}


def prepare_headers(inbound: InboundRequest, config: MountConfig) -> httpx.Headers:
    """
    Build the headers sent to the origin.

    Only a fixed set of inbound headers is propagated. ``Host`` is always the
    origin host because origins commonly route virtual hosts by it.
    """
    incoming = inbound.headers
    headers = httpx.Headers()
    headers["host"] = config.origin_host
    headers["user-agent"] = incoming.get("user-agent") or config.default_user_agent
    headers["accept"] = incoming.get("accept") or DEFAULT_ACCEPT
    headers["accept-language"] = (
        incoming.get("accept-language") or DEFAULT_ACCEPT_LANGUAGE
    )

    # X-Forwarded-For: append client IP to whatever chain arrived
    existing_xff = incoming.get("x-forwarded-for", "")
    client_ip = inbound.client_host or ""
    xff = f"{existing_xff}, {client_ip}".strip(", ")
    if xff:
        headers["x-forwarded-for"] = xff

    headers["x-forwarded-proto"] = "https"
    headers["x-forwarded-host"] = (
        incoming.get("host") or urlparse(config.site_base_url).netloc
    )

    if inbound.method.upper() not in BODYLESS_METHODS:
        content_type = incoming.get("content-type")
        if content_type:
            headers["content-type"] = content_type

    return headers


def build_upstream_request(
    inbound: InboundRequest, config: MountConfig
) -> UpstreamRequest:
    method = inbound.method.upper()
    body = None
    if method not in BODYLESS_METHODS:
        body = inbound.body or b""
    return UpstreamRequest(
        method=method,
        url=build_upstream_url(inbound.mount_relative_path, inbound.query_string, config),
        headers=prepare_headers(inbound, config),
        body=body,
    )


class UpstreamClient:
    """
    Issues one request to the origin and buffers the full response body.

    A fresh ``httpx.AsyncClient`` is opened per call so nothing is shared
    between requests. Every transport failure surfaces as an ``UpstreamError``.
    """

    def __init__(self, config: MountConfig):
        self.config = config

    async def fetch(self, upstream_request: UpstreamRequest) -> UpstreamResponse:
        config = self.config
        try:
            async with httpx.AsyncClient(
                timeout=httpx.Timeout(config.upstream_timeout),
                follow_redirects=config.follow_redirects,
                max_redirects=config.max_redirects,
            ) as client:
                response = await client.request(
                    method=upstream_request.method,
                    url=upstream_request.url,
                    headers=upstream_request.headers,
                    content=upstream_request.body,
                )
                return UpstreamResponse(
                    status_code=response.status_code,
                    headers=httpx.Headers(response.headers),
                    body=response.content,
                    url=upstream_request.url,
                )
        except httpx.TimeoutException as e:
            raise UpstreamTimeout(
                f"Origin did not answer within {config.upstream_timeout}s", cause=e
            ) from e
        except httpx.TooManyRedirects as e:
            raise UpstreamTooManyRedirects(
                f"Origin exceeded {config.max_redirects} redirects", cause=e
            ) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise UpstreamUnreachable(f"Cannot reach origin: {e}", cause=e) from e
