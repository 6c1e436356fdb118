# video_id_utils.py
import re

from error_handler import ScrapeError

VIDEO_ID_LENGTH = 11

# watch?v=, youtu.be/, /embed/, /v/, /e/ and /<user>/<...>/ forms
YOUTUBE_URL_RE = re.compile(
    r'(?:youtube\.com/(?:[^/]+/.+/|(?:v|e(?:mbed)?)/|.*[?&]v=)|youtu\.be/)([^"&?/\s]{11})',
    re.I,
)
VIDEO_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")


def retrieve_video_id(value: str) -> str:
    """
    Return the 11-character video ID from a bare ID or a YouTube URL.

    Any 11-character string is taken as an ID unchanged.
    Raises ScrapeError (validation) when no ID can be found.
    """
    if value is not None and len(value) == VIDEO_ID_LENGTH:
        return value
    match = YOUTUBE_URL_RE.search(value or "")
    if match:
        return match.group(1)
    raise ScrapeError.validation("Impossible to retrieve Youtube video ID.")


def is_valid_video_id(value: str) -> bool:
    """Strict format check used by the HTTP layer."""
    return bool(value) and VIDEO_ID_RE.match(value) is not None


def watch_url(video_id: str) -> str:
    return f"https://www.youtube.com/watch?v={video_id}"
