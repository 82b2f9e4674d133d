import io

import pytest
from PIL import Image


@pytest.fixture
def make_image():
    """Factory returning encoded bytes of a solid test image."""

    def _make(size=(800, 600), format="JPEG", mode="RGB"):
        buffer = io.BytesIO()
        Image.new(mode, size).save(buffer, format=format)
        return buffer.getvalue()

    return _make


def open_image(data: bytes) -> Image.Image:
    img = Image.open(io.BytesIO(data))
    img.load()
    return img


@pytest.fixture
def decode():
    return open_image
