import base64
import binascii
import io
import re
from urllib.parse import unquote_to_bytes

from PIL import Image, UnidentifiedImageError

from docgen.exceptions import AssetUnavailable

_DATA_URL = re.compile(r"^data:(?P<mime>[\w/+.-]+)?(?P<b64>;base64)?,(?P<data>.*)$", re.S)


def fit_within(width: float, height: float, max_width: float, max_height: float) -> tuple[float, float]:
    """Scale (width, height) into the box, preserving aspect ratio."""
    if width <= 0 or height <= 0:
        return 0.0, 0.0
    scale = min(max_width / width, max_height / height)
    return width * scale, height * scale


def decode_image(data: bytes) -> Image.Image:
    try:
        img = Image.open(io.BytesIO(data))
        img.load()
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise AssetUnavailable("Image could not be decoded", original_error=exc)
    if img.mode not in ("RGB", "RGBA", "L"):
        img = img.convert("RGBA")
    return img


def decode_data_url(value: str) -> bytes:
    """Bytes from a ``data:`` URL, or from bare base64 as stored by signature pads."""
    m = _DATA_URL.match(value.strip())
    try:
        if m is None:
            return base64.b64decode(value, validate=False)
        if m.group("b64"):
            return base64.b64decode(m.group("data"))
        return unquote_to_bytes(m.group("data"))
    except (binascii.Error, ValueError) as exc:
        raise AssetUnavailable("Malformed data URL", original_error=exc)


def parse_hex_color(value: str | None, default: tuple[int, int, int]) -> tuple[int, int, int]:
    if not value:
        return default
    raw = value.strip().lstrip("#")
    if len(raw) == 3:
        raw = "".join(c * 2 for c in raw)
    if len(raw) != 6:
        return default
    try:
        return int(raw[0:2], 16), int(raw[2:4], 16), int(raw[4:6], 16)
    except ValueError:
        return default
