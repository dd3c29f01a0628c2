import html
from typing import Optional

from blogmount.mount.config import MountConfig
from blogmount.mount.errors import UpstreamError
from blogmount.mount.models import OutboundResponse
from blogmount.mount.paths import build_upstream_url

ERROR_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Blog Temporarily Unavailable</title>
  <style>
    body {{ font-family: Arial, sans-serif; text-align: center; padding: 50px; }}
    .error {{ color: #666; }}
  </style>
</head>
<body>
  <h1>Blog Temporarily Unavailable</h1>
  <p class="error">{reason}</p>
  <p><a href="{origin_url}">Visit our blog directly</a></p>
</body>
</html>
"""

REASONS = {
    "timeout": "The blog is taking too long to respond. Please try again later.",
    "too_many_redirects": "The blog is redirecting in a loop. Please try again later.",
}
DEFAULT_REASON = (
    "We're experiencing technical difficulties. Please try again later."
)


def build_error_response(
    error: Optional[BaseException],
    mount_relative_path: str,
    config: MountConfig,
    query_string: str = "",
) -> OutboundResponse:
    """Fallback page used for every upstream failure. Never raises."""
    kind = error.kind if isinstance(error, UpstreamError) else None
    origin_url = build_upstream_url(mount_relative_path or "/", query_string, config)
    page = ERROR_PAGE_TEMPLATE.format(
        reason=html.escape(REASONS.get(kind, DEFAULT_REASON)),
        origin_url=html.escape(origin_url, quote=True),
    )
    return OutboundResponse(
        status_code=config.fallback_status_code,
        headers=[
            ("content-type", "text/html; charset=utf-8"),
            ("cache-control", "no-store"),
            ("x-powered-by", config.proxy_identity),
        ],
        body=page.encode("utf-8"),
    )
