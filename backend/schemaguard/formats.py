"""Custom string formats registered on every engine instance."""

from urllib.parse import urlsplit

from jsonschema import FormatChecker

# scheme -> ports accepted for it (None means no explicit port)
ALLOWED_URL_PORTS = {
    "http": {None, 80},
    "https": {None, 443},
}


def is_http_url(value: object) -> bool:
    """Accept http(s) URLs on standard ports whose host has a top-level label.

    The URL is parsed structurally instead of being matched against one large
    regular expression, which is prone to catastrophic backtracking.
    """
    if not isinstance(value, str):
        return True

    try:
        parts = urlsplit(value)
        port = parts.port
    except ValueError:
        return False

    if parts.scheme not in ALLOWED_URL_PORTS or port not in ALLOWED_URL_PORTS[parts.scheme]:
        return False

    hostname = parts.hostname
    if not hostname or any(ch.isspace() for ch in parts.netloc):
        return False

    labels = hostname.split(".")
    return len(labels) > 1 and labels[1].strip() != ""


def build_format_checker() -> FormatChecker:
    """All formats jsonschema knows about, plus `http-url`."""
    checker = FormatChecker()
    checker.checks("http-url")(is_http_url)
    return checker
