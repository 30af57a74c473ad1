"""Scrubbing of credentials from URLs before they are logged."""

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


REDACTED_VALUE = "[REDACTED]"

# Query parameters that carry credentials on Last.fm style APIs
SECRET_QUERY_PARAMS = frozenset({"api_key", "api_sig", "sk", "token", "password"})


def redact_url(url: str) -> str:
    """Return url with userinfo and secret query parameters masked.

    >>> redact_url("https://ws.audioscrobbler.com/2.0/?method=track.getInfo&api_key=abc")
    'https://ws.audioscrobbler.com/2.0/?method=track.getInfo&api_key=[REDACTED]'
    """
    parts = urlsplit(url)

    netloc = parts.netloc
    if "@" in netloc:
        host = netloc.rsplit("@", 1)[1]
        netloc = f"{REDACTED_VALUE}@{host}"

    query = parts.query
    if query:
        pairs = [
            (key, REDACTED_VALUE if key.lower() in SECRET_QUERY_PARAMS else value)
            for key, value in parse_qsl(query, keep_blank_values=True)
        ]
        query = urlencode(pairs, safe="[]")

    if netloc == parts.netloc and query == parts.query:
        return url
    return urlunsplit(parts._replace(netloc=netloc, query=query))
