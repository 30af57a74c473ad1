"""Constants for the Last.fm metadata source."""

# Last.fm web service
LASTFM_DEFAULT_ENDPOINT = "https://ws.audioscrobbler.com/2.0/"
LASTFM_METHOD_TRACK_INFO = "track.getInfo"

# Response bodies shorter than this are treated as empty pages
MIN_RESPONSE_BYTES = 10

# XML element names in track.getInfo responses
XML_ROOT = "lfm"
XML_TRACK = "track"
XML_PLAYCOUNT = "playcount"
XML_ERROR = "error"
LFM_STATUS_FAILED = "failed"

# Machine-readable reasons attached to LookupUnavailableError
REASON_TRANSPORT = "transport_error"
REASON_HTTP_STATUS = "http_status"
REASON_EMPTY_BODY = "empty_body"
REASON_MALFORMED = "malformed_response"
REASON_API_ERROR = "api_error"
REASON_MISSING_PLAYCOUNT = "missing_playcount"
REASON_INVALID_PLAYCOUNT = "invalid_playcount"
