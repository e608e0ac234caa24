from __future__ import annotations

import base64
from io import BytesIO

from PIL import Image, UnidentifiedImageError

from archfolio.config import settings


def data_uri(content: bytes, mime: str) -> str:
    return f"data:{mime};base64,{base64.b64encode(content).decode('ascii')}"


def make_local_preview(content: bytes, content_type: str | None = None, max_px: int | None = None) -> str:
    """
    Build an ephemeral preview reference for a just-selected file.

    Images are thumbnailed so the preview stays small; anything Pillow can't
    decode (or refuses as oversized) is passed through as-is under its declared
    content type.
    """
    max_px = max_px or settings.preview_max_px
    try:
        with Image.open(BytesIO(content)) as img:
            img.thumbnail((max_px, max_px), Image.Resampling.LANCZOS)
            buf = BytesIO()
            img.convert("RGB").save(buf, format="JPEG", quality=80)
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return data_uri(content, content_type or "application/octet-stream")
    return data_uri(buf.getvalue(), "image/jpeg")
