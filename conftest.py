# Ensure tests import the package from this checkout first, even when an
# installed copy of blog-mount-proxy is on the path.
import os
import sys

import httpx
import pytest

SERVICE_ROOT = os.path.dirname(__file__)
if SERVICE_ROOT not in sys.path:
    sys.path.insert(0, SERVICE_ROOT)

from blogmount.mount.config import MountConfig  # noqa: E402
from blogmount.mount.models import UpstreamResponse  # noqa: E402

TEST_ORIGIN_BASE_URL = "https://blog.example.com"
TEST_SITE_BASE_URL = "https://example.com"


@pytest.fixture
def mount_config():
    """Mount /blog of example.com onto blog.example.com."""
    return MountConfig(
        mount_prefix="/blog",
        origin_base_url=TEST_ORIGIN_BASE_URL,
        site_base_url=TEST_SITE_BASE_URL,
    )


@pytest.fixture
def upstream_response():
    """Factory for buffered origin responses."""

    def _create(status_code=200, headers=None, body=b"", url=TEST_ORIGIN_BASE_URL + "/"):
        return UpstreamResponse(
            status_code=status_code,
            headers=httpx.Headers(headers or {}),
            body=body,
            url=url,
        )

    return _create
