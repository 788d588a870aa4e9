from urllib.parse import urlparse

from app.core.config import get_settings
from app.core.errors import BadRequestError, ForbiddenError


class HostNotAllowedError(ForbiddenError):
    pass


class UnsafeUrlError(BadRequestError):
    pass


def host_matches_suffix(host: str, suffixes: list[str]) -> bool:
    host = host.lower().rstrip(".")
    for suffix in suffixes:
        if host == suffix or host.endswith("." + suffix):
            return True
    return False


def assert_allowed_url(url: str, allowlist: list[str] | None = None) -> str:
    """Validate an image URL for proxying and return its lowercased host."""
    if allowlist is None:
        allowlist = get_settings().image_proxy_allowed_host_list

    try:
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        parsed.port  # raises ValueError on a malformed port
    except ValueError as exc:
        raise UnsafeUrlError("Invalid url") from exc
    if parsed.scheme not in {"http", "https"}:
        raise UnsafeUrlError("Only http/https URLs are supported")
    if not host:
        raise UnsafeUrlError("URL host is missing")

    if not host_matches_suffix(host, allowlist):
        raise HostNotAllowedError(f"Host not in allowlist: {host}")
    return host
