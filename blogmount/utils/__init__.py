def client_label(host: str | None) -> str:
    """Client address for log lines."""
    return host or "unknown"
