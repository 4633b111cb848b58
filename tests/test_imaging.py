"""Tests for photo/frame preparation before upload."""

import base64
from io import BytesIO

from PIL import Image

from metlens.client.imaging import encode_jpeg_base64, strip_data_url


def _decode(b64: str) -> Image.Image:
    return Image.open(BytesIO(base64.b64decode(b64)))


def test_strip_data_url_prefix():
    assert strip_data_url("data:image/jpeg;base64,AAAA") == "AAAA"
    assert strip_data_url("data:image/png;base64,QUJD") == "QUJD"


def test_strip_data_url_leaves_bare_base64():
    assert strip_data_url("AAAA") == "AAAA"


def test_encode_pil_image_as_jpeg():
    out = encode_jpeg_base64(Image.new("RGB", (32, 16), "blue"))
    img = _decode(out)
    assert img.format == "JPEG"
    assert img.size == (32, 16)
    assert not out.startswith("data:")


def test_encode_png_bytes_with_alpha():
    buf = BytesIO()
    Image.new("RGBA", (10, 10), (255, 0, 0, 128)).save(buf, format="PNG")

    img = _decode(encode_jpeg_base64(buf.getvalue()))
    assert img.format == "JPEG"
    assert img.mode == "RGB"


def test_encode_from_path(tmp_path):
    path = tmp_path / "photo.png"
    Image.new("RGB", (5, 7), "green").save(path)
    assert _decode(encode_jpeg_base64(path)).size == (5, 7)


def test_exif_rotation_is_applied():
    img = Image.new("RGB", (20, 10), "white")
    exif = Image.Exif()
    exif[0x0112] = 6  # orientation: rotate 90 CW
    buf = BytesIO()
    img.save(buf, format="JPEG", exif=exif)

    assert _decode(encode_jpeg_base64(buf.getvalue())).size == (10, 20)
