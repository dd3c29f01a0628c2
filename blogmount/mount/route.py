import asyncio
import logging
from functools import lru_cache

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from blogmount.mount.config import MountConfig
from blogmount.mount.models import InboundRequest, OutboundResponse
from blogmount.mount.paths import translate
from blogmount.mount.pipeline import MountProxy
from blogmount.mount.upstream import BODYLESS_METHODS
from blogmount.utils import client_label

logger = logging.getLogger("uvicorn.error")

PROXY_METHODS = ["GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS"]
DISCONNECT_POLL_INTERVAL = 0.5
# nginx convention for "client closed request"
CLIENT_CLOSED_REQUEST = 499


@lru_cache(maxsize=1)
def get_mount_proxy() -> MountProxy:
    """The process-wide proxy, built from the environment on first use."""
    return MountProxy(MountConfig.from_env())


def raw_request_path(request: Request) -> str:
    """The path as the client sent it, percent-escapes intact."""
    raw_path = request.scope.get("raw_path")
    if raw_path:
        return raw_path.split(b"?", 1)[0].decode("latin-1")
    return request.url.path


async def build_inbound_request(request: Request, config: MountConfig) -> InboundRequest:
    method = request.method.upper()
    body = None
    if method not in BODYLESS_METHODS:
        body = await request.body()
    return InboundRequest(
        method=method,
        mount_relative_path=translate(raw_request_path(request), config),
        query_string=str(request.url.query),
        # Starlette decodes header values as latin-1
        headers=httpx.Headers(list(request.headers.items()), encoding="latin-1"),
        body=body,
        client_host=request.client.host if request.client else None,
    )


def to_response(outbound: OutboundResponse) -> Response:
    response = Response(content=outbound.body, status_code=outbound.status_code)
    for name, value in outbound.headers:
        response.headers.append(name, value)
    return response


async def cancel_on_disconnect(request: Request, task: "asyncio.Task") -> bool:
    """Cancel ``task`` once the client goes away. Returns True if it did."""
    while not task.done():
        if await request.is_disconnected():
            task.cancel()
            return True
        await asyncio.sleep(DISCONNECT_POLL_INTERVAL)
    return False


async def forward_to_origin(request: Request, proxy: MountProxy) -> Response:
    """
    Translate the request, run the proxy pipeline and emit its result.

    The pipeline runs as a task so that a client disconnect aborts the
    in-flight upstream call instead of letting it run to completion.
    """
    inbound = await build_inbound_request(request, proxy.config)
    logger.debug(
        f"[Proxy] {inbound.method} {request.url.path} from {client_label(inbound.client_host)}"
    )

    task = asyncio.create_task(proxy.handle(inbound))
    watcher = asyncio.create_task(cancel_on_disconnect(request, task))
    try:
        outbound = await task
    except asyncio.CancelledError:
        if watcher.done() and not watcher.cancelled() and watcher.result():
            logger.info(
                f"[Proxy] Client disconnected, cancelled upstream call for {request.url.path}"
            )
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        raise
    finally:
        if not watcher.done():
            watcher.cancel()
    return to_response(outbound)


async def proxy_all(request: Request, proxy: MountProxy = Depends(get_mount_proxy)):
    """Catch-all route that proxies everything under the mount to the origin."""
    return await forward_to_origin(request, proxy)


def build_router(config: MountConfig) -> APIRouter:
    """Register the catch-all for every inbound prefix routed to the mount."""
    router = APIRouter()
    for prefix in config.route_prefixes:
        router.add_api_route(prefix, proxy_all, methods=PROXY_METHODS)
        router.add_api_route(prefix + "/{path:path}", proxy_all, methods=PROXY_METHODS)
    return router
