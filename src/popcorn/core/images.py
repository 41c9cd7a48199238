from __future__ import annotations

import base64
from io import BytesIO
from typing import Literal

from PIL import Image

type ImageFormatType = Literal["png", "jpeg", "webp"]


def to_data_url(data: bytes, format: ImageFormatType = "png") -> str:
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:image/{format};base64,{encoded}"


def decode_data_url(data_url: str) -> bytes:
    """Return the raw bytes of a base64 ``data:`` URL."""
    header, sep, payload = data_url.partition(",")
    if not sep or not header.startswith("data:") or not header.endswith(";base64"):
        raise ValueError("Not a base64 data URL")
    return base64.b64decode(payload)


def open_data_url(data_url: str) -> Image.Image:
    return Image.open(BytesIO(decode_data_url(data_url)))


def make_thumbnail(data_url: str, max_width: int = 320) -> bytes:
    """Downscale a screenshot data URL to a PNG thumbnail."""
    img = open_data_url(data_url)
    if img.width > max_width:
        ratio = max_width / img.width
        img = img.resize((max_width, max(1, int(img.height * ratio))), Image.Resampling.LANCZOS)
    buffer = BytesIO()
    img.save(buffer, format="PNG", optimize=True)
    return buffer.getvalue()
