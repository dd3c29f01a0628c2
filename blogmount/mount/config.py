"""
Process-wide mount configuration.

The values are read from the environment once (see ``blogmount.vars``) and
frozen into a ``MountConfig`` that every proxy component receives explicitly.
"""

from dataclasses import dataclass, field
from typing import Tuple
from urllib.parse import urlparse

from blogmount import vars as env
from blogmount.mount.errors import ConfigurationError


def normalize_prefix(prefix: str) -> str:
    """Return ``prefix`` with a leading slash and no trailing slash."""
    prefix = (prefix or "").strip().rstrip("/")
    if prefix and not prefix.startswith("/"):
        prefix = "/" + prefix
    return prefix


def _to_int(name: str, value) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def _to_float(name: str, value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e


@dataclass(frozen=True)
class MountConfig:
    mount_prefix: str = "/blog"
    origin_base_url: str = "https://blog.example.com"
    site_base_url: str = "https://example.com"
    origin_host: str = ""
    route_prefixes: Tuple[str, ...] = field(default_factory=tuple)
    default_cache_ttl: int = 300
    upstream_timeout: float = 30.0
    max_redirects: int = 5
    follow_redirects: bool = True
    fallback_status_code: int = 503
    proxy_identity: str = "Blog-Mount-Proxy"
    default_user_agent: str = "Blog-Mount-Proxy/1.0"

    def __post_init__(self):
        mount_prefix = normalize_prefix(self.mount_prefix)
        if not mount_prefix:
            raise ConfigurationError("MOUNT_PREFIX must not be empty")

        origin_base_url = (self.origin_base_url or "").strip().rstrip("/")
        parsed = urlparse(origin_base_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigurationError(
                f"ORIGIN_BASE_URL must be an absolute http(s) URL, got {self.origin_base_url!r}"
            )

        site_base_url = (self.site_base_url or "").strip().rstrip("/")
        if not urlparse(site_base_url).netloc:
            raise ConfigurationError(
                f"SITE_BASE_URL must be an absolute URL, got {self.site_base_url!r}"
            )

        if self.fallback_status_code not in (502, 503):
            raise ConfigurationError(
                f"FALLBACK_STATUS_CODE must be 502 or 503, got {self.fallback_status_code}"
            )
        if self.max_redirects < 0:
            raise ConfigurationError("UPSTREAM_MAX_REDIRECTS must not be negative")
        if self.upstream_timeout <= 0:
            raise ConfigurationError("UPSTREAM_TIMEOUT must be positive")

        # Longest first so that /api/apps/blog wins over /apps/blog style overlaps
        route_prefixes = {normalize_prefix(p) for p in self.route_prefixes if p}
        route_prefixes.add(mount_prefix)
        route_prefixes.discard("")

        object.__setattr__(self, "mount_prefix", mount_prefix)
        object.__setattr__(self, "origin_base_url", origin_base_url)
        object.__setattr__(self, "site_base_url", site_base_url)
        object.__setattr__(self, "origin_host", self.origin_host or parsed.netloc)
        object.__setattr__(
            self,
            "route_prefixes",
            tuple(sorted(route_prefixes, key=lambda p: (-len(p), p))),
        )

    @property
    def mounted_base_url(self) -> str:
        """Public absolute URL of the mount, e.g. ``https://example.com/blog``."""
        return f"{self.site_base_url}{self.mount_prefix}"

    @classmethod
    def from_env(cls) -> "MountConfig":
        return cls(
            mount_prefix=env.MOUNT_PREFIX,
            origin_base_url=env.ORIGIN_BASE_URL,
            site_base_url=env.SITE_BASE_URL,
            origin_host=env.ORIGIN_HOST,
            route_prefixes=tuple(env.ROUTE_PREFIXES),
            default_cache_ttl=_to_int("DEFAULT_CACHE_TTL", env.DEFAULT_CACHE_TTL),
            upstream_timeout=_to_float("UPSTREAM_TIMEOUT", env.UPSTREAM_TIMEOUT),
            max_redirects=_to_int("UPSTREAM_MAX_REDIRECTS", env.UPSTREAM_MAX_REDIRECTS),
            follow_redirects=env.UPSTREAM_FOLLOW_REDIRECTS,
            fallback_status_code=_to_int(
                "FALLBACK_STATUS_CODE", env.FALLBACK_STATUS_CODE
            ),
            proxy_identity=env.PROXY_IDENTITY,
            default_user_agent=env.DEFAULT_USER_AGENT,
        )
