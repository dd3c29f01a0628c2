from blogmount.mount.config import MountConfig


def translate(raw_path: str, config: MountConfig) -> str:
    """
    Strip the mount prefix from an inbound path.

    Routing has already matched one of the configured prefixes, so the
    prefix is not validated here. The origin always receives at least ``/``.
    """
    path = raw_path
    for prefix in config.route_prefixes:
        if path.startswith(prefix):
            path = path[len(prefix):]
            break
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    return path


def build_upstream_url(
    mount_relative_path: str, query_string: str, config: MountConfig
) -> str:
    """Origin URL for a mount-relative path; the query string is passed through as-is."""
    url = f"{config.origin_base_url}{mount_relative_path}"
    if query_string:
        url = f"{url}?{query_string}"
    return url
