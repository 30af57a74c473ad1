"""Parser for Last.fm track.getInfo XML responses."""

from xml.etree.ElementTree import ParseError

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from src.lastfm.constants import (
    LFM_STATUS_FAILED,
    MIN_RESPONSE_BYTES,
    REASON_API_ERROR,
    REASON_EMPTY_BODY,
    REASON_INVALID_PLAYCOUNT,
    REASON_MALFORMED,
    REASON_MISSING_PLAYCOUNT,
    XML_ERROR,
    XML_PLAYCOUNT,
    XML_ROOT,
    XML_TRACK,
)
from src.sorter.errors import LookupUnavailableError


def parse_playcount(body: bytes) -> int:
    """Extract the play count from a track.getInfo response.

    Expects ``<lfm status="ok"><track>...<playcount>N</playcount>...``.

    Args:
        body: Raw response body.

    Returns:
        Non-negative play count.

    Raises:
        LookupUnavailableError: If the body is empty, malformed, reports an
            API error, or has no usable playcount.
    """
    if len(body.strip()) < MIN_RESPONSE_BYTES:
        raise LookupUnavailableError(
            "Last.fm returned an empty page", reason=REASON_EMPTY_BODY
        )

    try:
        root = DefusedET.fromstring(body)
    except (ParseError, DefusedXmlException) as e:
        msg = f"Invalid XML in Last.fm response: {e}"
        raise LookupUnavailableError(msg, reason=REASON_MALFORMED) from e

    if root.tag != XML_ROOT:
        msg = f"Unexpected root element <{root.tag}>"
        raise LookupUnavailableError(msg, reason=REASON_MALFORMED)

    if root.get("status") == LFM_STATUS_FAILED:
        error = root.find(XML_ERROR)
        code = error.get("code") if error is not None else None
        text = (error.text or "").strip() if error is not None else ""
        msg = f"Last.fm error {code or '?'}: {text or 'unknown error'}"
        raise LookupUnavailableError(msg, reason=REASON_API_ERROR)

    playcount = root.find(f"{XML_TRACK}/{XML_PLAYCOUNT}")
    if playcount is None or not (playcount.text or "").strip():
        raise LookupUnavailableError(
            "Response has no track playcount", reason=REASON_MISSING_PLAYCOUNT
        )

    text = playcount.text.strip()
    if not (text.isascii() and text.isdigit()):
        msg = f"Playcount is not a non-negative integer: {text!r}"
        raise LookupUnavailableError(msg, reason=REASON_INVALID_PLAYCOUNT)

    return int(text)
