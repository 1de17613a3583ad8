import io
import struct
from typing import List, Tuple

import pytest
from PIL import Image

from iconsmith.app.config.app_config import RenderingConfig
from iconsmith.app.services.imaging.image_engine import Rasterizer
from iconsmith.app.services.imaging.image_models import SourceImage
from iconsmith.app.services.imaging.plane_renderer import PlaneRenderer

SVG_DOCUMENT = b'<svg xmlns="http://www.w3.org/2000/svg" width="100" height="50"></svg>'


class FakeRasterizer(Rasterizer):
    """Rasterizer stand-in that renders a solid blue rectangle of the requested density."""

    def __init__(self, natural_size: Tuple[int, int] = (100, 50)) -> None:
        self._natural_size = natural_size
        self.densities: List[float] = []

    def natural_size(self, data: bytes) -> Tuple[int, int]:
        if b"<svg" not in data:
            raise ValueError("not an SVG document")
        return self._natural_size

    def rasterize(self, data: bytes, density: float) -> Image.Image:
        self.densities.append(density)
        scale = density / 72.0
        width = max(1, round(self._natural_size[0] * scale))
        height = max(1, round(self._natural_size[1] * scale))
        return Image.new("RGBA", (width, height), (0, 0, 255, 255))


def encode_png(image: Image.Image) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def make_png(width: int, height: int, color=(255, 0, 0, 255), mode: str = "RGBA") -> bytes:
    return encode_png(Image.new(mode, (width, height), color[: len(mode)]))


def read_ico_directory(data: bytes) -> List[Tuple[int, int, int, int, int]]:
    """Parse an ICO header and return (width, height, bpp, size, offset) per entry."""
    reserved, icon_type, count = struct.unpack_from("<HHH", data, 0)
    assert reserved == 0
    assert icon_type == 1
    entries = []
    for index in range(count):
        width, height, _, _, _, bpp, size, offset = struct.unpack_from("<BBBBHHII", data, 6 + 16 * index)
        entries.append((width or 256, height or 256, bpp, size, offset))
    return entries


@pytest.fixture
def png_factory():
    """Factory building solid-colour PNG bytes."""
    return make_png


@pytest.fixture
def ico_directory():
    """Parser returning the directory entries of ICO bytes."""
    return read_ico_directory


@pytest.fixture
def red_png_512():
    """512x512 fully opaque red PNG."""
    return make_png(512, 512)


@pytest.fixture
def raster_source(red_png_512):
    return SourceImage(data=red_png_512, width=512, height=512, format="png", channels=4)


@pytest.fixture
def fake_rasterizer():
    return FakeRasterizer()


@pytest.fixture
def vector_source():
    return SourceImage(data=SVG_DOCUMENT, width=100, height=50, format="svg", channels=4)


@pytest.fixture
def renderer(fake_rasterizer):
    """PlaneRenderer with the fake rasterizer; executor shut down after the test."""
    plane_renderer = PlaneRenderer(config=RenderingConfig(max_workers=2), rasterizer=fake_rasterizer)
    yield plane_renderer
    plane_renderer.shutdown()
