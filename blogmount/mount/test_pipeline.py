import asyncio

import httpx
import pytest
from httpx import AsyncClient, ConnectTimeout
from unittest.mock import AsyncMock, patch

from blogmount.mount.errors import UpstreamUnreachable
from blogmount.mount.models import InboundRequest
from blogmount.mount.pipeline import MountProxy

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


class StubClient:
    """Upstream client returning a canned response or raising."""

    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    async def fetch(self, upstream_request):
        self.requests.append(upstream_request)
        if self.error is not None:
            raise self.error
        return self.response


def make_inbound(path="/", method="GET", query=""):
    return InboundRequest(method=method, mount_relative_path=path, query_string=query)


class TestMountProxyHandle:
    @pytest.mark.asyncio
    async def test_html_is_rewritten(self, mount_config, upstream_response):
        client = StubClient(
            upstream_response(
                headers={"content-type": "text/html"},
                body=b'<a href="https://blog.example.com/post">',
            )
        )
        outbound = await MountProxy(mount_config, client).handle(make_inbound("/post"))

        assert outbound.status_code == 200
        assert b'href="https://example.com/blog/post"' in outbound.body
        assert client.requests[0].url == "https://blog.example.com/post"

    @pytest.mark.asyncio
    async def test_png_passes_through(self, mount_config, upstream_response):
        client = StubClient(
            upstream_response(headers={"content-type": "image/png"}, body=PNG_BYTES)
        )
        outbound = await MountProxy(mount_config, client).handle(
            make_inbound("/wp-content/uploads/a.png")
        )
        assert outbound.body == PNG_BYTES

    @pytest.mark.asyncio
    async def test_mislabelled_png_passes_through(self, mount_config, upstream_response):
        client = StubClient(
            upstream_response(headers={"content-type": "text/html"}, body=PNG_BYTES)
        )
        outbound = await MountProxy(mount_config, client).handle(make_inbound("/a.png"))
        assert outbound.body == PNG_BYTES

    @pytest.mark.asyncio
    async def test_upstream_failure_gives_fallback(self, mount_config):
        client = StubClient(error=UpstreamUnreachable("dns"))
        outbound = await MountProxy(mount_config, client).handle(
            make_inbound("/about/", query="x=1")
        )
        assert outbound.status_code == 503
        assert b'href="https://blog.example.com/about/?x=1"' in outbound.body

    @pytest.mark.asyncio
    async def test_unexpected_fault_gives_fallback(self, mount_config):
        client = StubClient(error=KeyError("bug"))
        outbound = await MountProxy(mount_config, client).handle(make_inbound("/"))
        assert outbound.status_code == 503

    @pytest.mark.asyncio
    async def test_origin_error_status_forwarded(self, mount_config, upstream_response):
        client = StubClient(
            upstream_response(
                status_code=404, headers={"content-type": "text/html"}, body=b"<h1>Not found</h1>"
            )
        )
        outbound = await MountProxy(mount_config, client).handle(make_inbound("/missing/"))
        assert outbound.status_code == 404
        assert outbound.body == b"<h1>Not found</h1>"

    @pytest.mark.asyncio
    async def test_timeout_through_real_client(self, mount_config):
        """A timeout from httpx ends in the fallback page and never escapes."""
        with patch.object(AsyncClient, "request", new_callable=AsyncMock) as mock_client:
            mock_client.side_effect = ConnectTimeout("Request timed out")
            outbound = await MountProxy(mount_config).handle(make_inbound("/slow/"))

        assert outbound.status_code == 503
        assert b'href="https://blog.example.com/slow/"' in outbound.body
        assert b"too long to respond" in outbound.body

    @pytest.mark.asyncio
    async def test_real_client_redirect_location(self, mount_config):
        response = httpx.Response(
            301,
            headers={"location": "https://blog.example.com/x", "content-type": "text/html"},
            content=b"",
        )
        with patch.object(AsyncClient, "request", new_callable=AsyncMock) as mock_client:
            mock_client.return_value = response
            outbound = await MountProxy(mount_config).handle(make_inbound("/old-x/"))

        assert outbound.status_code == 301
        assert outbound.header("location") == "https://example.com/blog/x"

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, mount_config):
        started = asyncio.Event()

        class HangingClient:
            async def fetch(self, upstream_request):
                started.set()
                await asyncio.sleep(3600)

        task = asyncio.create_task(
            MountProxy(mount_config, HangingClient()).handle(make_inbound("/"))
        )
        await started.wait()
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
