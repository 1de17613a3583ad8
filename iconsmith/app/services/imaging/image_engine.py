"""Image engine capabilities used by the plane renderer.

The renderer only talks to a Rasterizer (vector sources) and a Compositor
(everything raster), so the pipeline can run against a fake engine in tests.
Default implementations are backed by cairosvg and Pillow.
"""
import io
import logging
from abc import ABC, abstractmethod
from typing import Optional, Tuple

import numpy as np
from PIL import Image, ImageCms, ImageColor, ImageOps

from iconsmith.app.services.imaging.image_models import SourceImage

logger = logging.getLogger(__name__)

TRANSPARENT = (0, 0, 0, 0)
BASE_DENSITY = 72.0
WIDE_INTEGER_MODES = ("I", "I;16", "I;16L", "I;16B", "I;16N")
# Colour spaces an embedded ICC profile can be applied from, keyed by image mode
ICC_COLOR_SPACES = {"RGB": "RGB", "RGBA": "RGB", "CMYK": "CMYK"}
SRGB_PROFILE = ImageCms.createProfile("sRGB")


class Rasterizer(ABC):
    """Turns vector documents into RGBA images.

    Data that is not a readable vector document must raise ValueError or
    SyntaxError (which covers XML parse errors); any other exception is treated
    as an environment failure and propagated as is.
    """

    @abstractmethod
    def natural_size(self, data: bytes) -> Tuple[int, int]:
        """Return the document's natural pixel size; raise if data is not a vector document."""

    @abstractmethod
    def rasterize(self, data: bytes, density: float) -> Image.Image:
        """Rasterize the document at the given density (72 DPI renders the natural size)."""


class CairoSvgRasterizer(Rasterizer):
    """SVG rasterizer backed by cairosvg."""

    def natural_size(self, data: bytes) -> Tuple[int, int]:
        image = self._render(data, scale=1.0)
        return image.size

    def rasterize(self, data: bytes, density: float) -> Image.Image:
        return self._render(data, scale=density / BASE_DENSITY)

    def _render(self, data: bytes, scale: float) -> Image.Image:
        # cairosvg needs the native cairo library, only load it once a vector is actually seen
        import cairosvg

        png_bytes = cairosvg.svg2png(bytestring=data, scale=scale)
        return Image.open(io.BytesIO(png_bytes)).convert("RGBA")


class Compositor(ABC):
    """Raster operations of the plane pipeline."""

    @abstractmethod
    def decode(self, source: SourceImage) -> Image.Image:
        """Decode a raster source into an RGBA image."""

    @abstractmethod
    def fit(self, image: Image.Image, width: int, height: int, resample: Image.Resampling) -> Image.Image:
        """Contain-fit image into width x height, padding with full transparency."""

    @abstractmethod
    def blank_canvas(self, width: int, height: int, background: Optional[str], transparent: bool) -> Image.Image:
        """Create the canvas a plane is composited onto."""

    @abstractmethod
    def composite(self, canvas: Image.Image, content: Image.Image, offset: int) -> Image.Image:
        """Draw content over canvas with its top-left corner at (offset, offset)."""

    @abstractmethod
    def rotate(self, image: Image.Image) -> Image.Image:
        """Rotate image 90 degrees clockwise."""

    @abstractmethod
    def encode_png(self, image: Image.Image) -> bytes:
        """Encode image as PNG."""

    @abstractmethod
    def to_raw(self, image: Image.Image) -> Tuple[bytes, int]:
        """Return (RGBA sRGB pixel bytes, channel count)."""


class PillowCompositor(Compositor):
    def decode(self, source: SourceImage) -> Image.Image:
        with Image.open(io.BytesIO(source.data)) as image:
            image.load()
            icc_profile = image.info.get("icc_profile")
            if image.mode in WIDE_INTEGER_MODES or image.mode == "F":
                image = self._to_8bit(image)
            elif icc_profile:
                image = self._to_srgb(image, icc_profile)
            return image.convert("RGBA")

    def _to_8bit(self, image: Image.Image) -> Image.Image:
        """Scale 16/32-bit integer (0..65535) or float (0..1) grayscale down to L."""
        samples = np.asarray(image)
        if image.mode == "F":
            scaled = np.rint(np.clip(samples, 0.0, 1.0) * 255.0)
        else:
            scaled = np.clip(samples.astype(np.int64), 0, 65535) >> 8
        return Image.fromarray(scaled.astype(np.uint8))

    def _to_srgb(self, image: Image.Image, icc_profile: bytes) -> Image.Image:
        profile = ImageCms.ImageCmsProfile(io.BytesIO(icc_profile))
        color_space = profile.profile.xcolor_space.strip()
        if ICC_COLOR_SPACES.get(image.mode) != color_space:
            logger.debug(f"Skipping {color_space} ICC profile for {image.mode} image")
            return image

        output_mode = "RGB" if image.mode == "CMYK" else image.mode
        logger.debug(f"Converting {image.mode} image from embedded {color_space} profile to sRGB")
        return ImageCms.profileToProfile(image, profile, SRGB_PROFILE, outputMode=output_mode)

    def fit(self, image: Image.Image, width: int, height: int, resample: Image.Resampling) -> Image.Image:
        if image.mode != "RGBA":
            image = image.convert("RGBA")
        return ImageOps.pad(image, (width, height), method=resample, color=TRANSPARENT)

    def blank_canvas(self, width: int, height: int, background: Optional[str], transparent: bool) -> Image.Image:
        if not background or background == "transparent":
            return Image.new("RGBA", (width, height), TRANSPARENT)

        fill = ImageColor.getrgb(background)[:3]
        canvas = Image.new("RGB", (width, height), fill)
        if transparent:
            canvas = canvas.convert("RGBA")
        return canvas

    def composite(self, canvas: Image.Image, content: Image.Image, offset: int) -> Image.Image:
        if canvas.mode == "RGBA":
            canvas.alpha_composite(content, dest=(offset, offset))
        else:
            canvas.paste(content, (offset, offset), content)
        return canvas

    def rotate(self, image: Image.Image) -> Image.Image:
        return image.transpose(Image.Transpose.ROTATE_270)

    def encode_png(self, image: Image.Image) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()

    def to_raw(self, image: Image.Image) -> Tuple[bytes, int]:
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return rgba.tobytes(), 4
