"""Errors raised by the mount proxy core."""

from typing import Optional


class ConfigurationError(ValueError):
    """Raised at startup when the mount configuration is unusable."""


class UpstreamError(Exception):
    """
    Base class for failures talking to the origin.

    Only subclasses of this error ever leave the upstream client; the
    pipeline converts them into the fallback page.
    """

    kind = "upstream_error"

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.cause = cause


class UpstreamUnreachable(UpstreamError):
    """Network, DNS or connection failure."""

    kind = "unreachable"


class UpstreamTimeout(UpstreamError):
    kind = "timeout"


class UpstreamTooManyRedirects(UpstreamError):
    kind = "too_many_redirects"
