"""
media.py: Media type and data-URL helpers.

The browser client reads files with FileReader.readAsDataURL(), so
payloads usually arrive as "data:video/mp4;base64,AAAA...". Older clients
(and curl users) send bare base64; those get a default MIME for their
media type.
"""

import base64
import mimetypes
from pathlib import Path

_MEDIA_TYPES = ("image", "video", "audio")

_DEFAULT_MIME = {
    "image": "image/jpeg",
    "video": "video/mp4",
    "audio": "audio/mpeg",
}


def normalize_media_type(value: str | None) -> str:
    """
    Map "video", "video/mp4", "VIDEO" etc. to one of image/video/audio.

    Anything unrecognised is treated as an image, which is what the
    model prompt assumes when no type is given.
    """
    if not value:
        return "image"
    head = value.strip().lower().split("/", 1)[0]
    return head if head in _MEDIA_TYPES else "image"


def to_data_url(media_b64: str, media_type: str) -> str:
    """Return `media_b64` as a data: URL, prefixing a default MIME if needed."""
    if media_b64.startswith("data:"):
        return media_b64
    mime = _DEFAULT_MIME.get(media_type, _DEFAULT_MIME["image"])
    return f"data:{mime};base64,{media_b64}"


def split_data_url(data_url: str) -> tuple[str, str]:
    """
    Split "data:<mime>;base64,<payload>" into (mime, payload).

    Bare base64 (no data: prefix) comes back as ("application/octet-stream", input).
    """
    if not data_url.startswith("data:") or "," not in data_url:
        return "application/octet-stream", data_url
    header, payload = data_url.split(",", 1)
    mime = header[len("data:"):].split(";", 1)[0] or "application/octet-stream"
    return mime, payload


def encode_file(path: str | Path) -> tuple[str, str]:
    """
    Read a file from disk and encode it the way the browser client does.

    Returns:
        (data_url, media_type); media_type derived from the guessed MIME.
    """
    path = Path(path)
    mime, _ = mimetypes.guess_type(path.name)
    mime = mime or "application/octet-stream"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}", normalize_media_type(mime)
