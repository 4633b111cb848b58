"""
Purpose:
- Turn an uploaded photo or a camera frame into the base64 JPEG the gateway expects.
- Gateway wants bare base64 (no "data:image/jpeg;base64," prefix).
"""

from __future__ import annotations
import base64
from io import BytesIO
from pathlib import Path
from typing import Union
from PIL import Image, ImageOps

ImageSource = Union[Image.Image, bytes, str, Path]

def strip_data_url(value: str) -> str:
    """
    "data:image/png;base64,AAAA" -> "AAAA"; bare base64 passes through.
    """
    if value.startswith("data:") and "," in value:
        return value.split(",", 1)[1]
    return value

def _open(source: ImageSource) -> Image.Image:
    if isinstance(source, Image.Image):
        return source
    if isinstance(source, (bytes, bytearray)):
        return Image.open(BytesIO(source))
    return Image.open(Path(source))

def encode_jpeg_base64(source: ImageSource, quality: int = 80) -> str:
    img = _open(source)
    # phone photos carry rotation in EXIF; bake it in before re-encoding
    img = ImageOps.exif_transpose(img).convert("RGB")
    buf = BytesIO()
    img.save(buf, format="JPEG", quality=quality)
    return base64.b64encode(buf.getvalue()).decode("ascii")
