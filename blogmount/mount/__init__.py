"""
Mounts a third-party blog origin under a path prefix of the primary site.

Requests below the prefix are translated to origin URLs, fetched, and the
HTML/CSS that comes back is rewritten so every link stays under the mount:

    GET https://example.com/blog/hello-world/
        -> GET https://blog.example.com/hello-world/
        <- <a href="https://blog.example.com/about/">  becomes
           <a href="https://example.com/blog/about/">

Binary assets pass through untouched; origin failures produce a fallback page.
"""

from .config import MountConfig
from .errors import (
    ConfigurationError,
    UpstreamError,
    UpstreamTimeout,
    UpstreamTooManyRedirects,
    UpstreamUnreachable,
)
from .pipeline import MountProxy

__all__ = [
    "MountConfig",
    "MountProxy",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamTimeout",
    "UpstreamTooManyRedirects",
    "UpstreamUnreachable",
]
