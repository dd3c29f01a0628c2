import os

SERVICE_NAME = os.getenv("SERVICE_NAME", "blog-mount-proxy")

MOUNT_PREFIX = os.environ.get("MOUNT_PREFIX", "/blog")
ORIGIN_BASE_URL = os.environ.get("ORIGIN_BASE_URL", "https://blog.example.com")
# Defaults to the netloc of ORIGIN_BASE_URL when empty
ORIGIN_HOST = os.environ.get("ORIGIN_HOST", "")
SITE_BASE_URL = os.environ.get("SITE_BASE_URL", "https://example.com")
ROUTE_PREFIXES = [
    p.strip() for p in os.environ.get("ROUTE_PREFIXES", "").split(",") if p.strip()
]

DEFAULT_CACHE_TTL = os.environ.get("DEFAULT_CACHE_TTL", "300")
UPSTREAM_TIMEOUT = os.environ.get("UPSTREAM_TIMEOUT", "30")
UPSTREAM_MAX_REDIRECTS = os.environ.get("UPSTREAM_MAX_REDIRECTS", "5")
UPSTREAM_FOLLOW_REDIRECTS = (
    os.environ.get("UPSTREAM_FOLLOW_REDIRECTS", "true").lower() == "true"
)
FALLBACK_STATUS_CODE = os.environ.get("FALLBACK_STATUS_CODE", "503")

PROXY_IDENTITY = os.environ.get("PROXY_IDENTITY", "Blog-Mount-Proxy")
DEFAULT_USER_AGENT = os.environ.get("DEFAULT_USER_AGENT", "Blog-Mount-Proxy/1.0")

CORS_ALLOW_ORIGINS = [
    o.strip() for o in os.environ.get("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()
]

WEBHOOK_SECRET = os.environ.get("WEBHOOK_SECRET", "")

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
