import base64
from io import BytesIO

from PIL import Image

from archfolio.assets.preview import make_local_preview


def _png(size):
    buf = BytesIO()
    Image.new("RGB", size, (200, 10, 10)).save(buf, format="PNG")
    return buf.getvalue()


def test_images_are_thumbnailed_to_a_jpeg_data_uri():
    preview = make_local_preview(_png((1600, 800)), "image/png", max_px=64)
    header, payload = preview.split(",", 1)
    assert header == "data:image/jpeg;base64"
    with Image.open(BytesIO(base64.b64decode(payload))) as img:
        assert max(img.size) <= 64


def test_undecodable_bytes_pass_through():
    preview = make_local_preview(b"%PDF-1.7", "application/pdf")
    assert preview == "data:application/pdf;base64," + base64.b64encode(b"%PDF-1.7").decode()


def test_oversized_image_header_passes_through(huge_png):
    preview = make_local_preview(huge_png, "image/png")
    assert preview == "data:image/png;base64," + base64.b64encode(huge_png).decode()
