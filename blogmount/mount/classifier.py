import enum
import posixpath
from urllib.parse import urlsplit


class ContentKind(str, enum.Enum):
    BINARY = "binary"
    REWRITABLE_TEXT = "rewritable_text"
    OPAQUE_TEXT = "opaque_text"


BINARY_CONTENT_TYPE_PREFIXES = ("image/", "font/", "application/octet-stream")
REWRITABLE_CONTENT_TYPES = ("text/html", "text/css")

# Some origins mislabel assets, so the extension is checked as well
BINARY_EXTENSIONS = {
    "jpg",
    "jpeg",
    "png",
    "gif",
    "svg",
    "ico",
    "woff",
    "woff2",
    "ttf",
    "eot",
    "pdf",
}


def path_extension(path: str) -> str:
    """Lower-cased extension of the path component, without the dot."""
    path = urlsplit(path).path
    _, ext = posixpath.splitext(path)
    return ext[1:].lower()


def classify(content_type: str, upstream_path: str) -> ContentKind:
    content_type = (content_type or "").strip().lower()
    if content_type.startswith(BINARY_CONTENT_TYPE_PREFIXES):
        return ContentKind.BINARY
    if path_extension(upstream_path) in BINARY_EXTENSIONS:
        return ContentKind.BINARY
    if any(t in content_type for t in REWRITABLE_CONTENT_TYPES):
        return ContentKind.REWRITABLE_TEXT
    return ContentKind.OPAQUE_TEXT
