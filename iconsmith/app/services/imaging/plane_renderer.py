import asyncio
import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import Optional, Sequence, Union

from PIL import Image

from iconsmith.app.config.app_config import RenderingConfig
from iconsmith.app.services.imaging.image_engine import (
    CairoSvgRasterizer,
    Compositor,
    PillowCompositor,
    Rasterizer,
)
from iconsmith.app.services.imaging.image_errors import IconGenerationError, RenderError
from iconsmith.app.services.imaging.image_models import (
    EncodedPlane,
    PlaneOutput,
    PlaneSpec,
    RawPlane,
    SourceImage,
)
from iconsmith.app.services.imaging.source_selector import select_best_source
from iconsmith.app.utils.svg_density import svg_density

logger = logging.getLogger(__name__)


def plane_offset(spec: PlaneSpec) -> int:
    """Inner padding in pixels, rounding halves up."""
    return math.floor(max(spec.width, spec.height) * spec.offset_percent / 100 + 0.5) or 0


class PlaneRenderer:
    """Renders a single icon plane from a set of source images.

    Picks the best source for the plane's inner area, contain-fits it, composites it
    onto a transparent or coloured canvas at the configured offset, optionally
    rotates it, and returns either PNG bytes or raw RGBA pixels for container packing.
    Engine work runs on a dedicated thread pool so the event loop stays responsive.

    Attributes:
        rasterizer: Vector rasterization capability.
        compositor: Raster decode/resize/composite/encode capability.
    """

    def __init__(
        self,
        config: Optional[RenderingConfig] = None,
        rasterizer: Optional[Rasterizer] = None,
        compositor: Optional[Compositor] = None,
    ) -> None:
        self._config = config or RenderingConfig()
        self.rasterizer: Rasterizer = rasterizer or CairoSvgRasterizer()
        self.compositor: Compositor = compositor or PillowCompositor()
        self._executor = ThreadPoolExecutor(max_workers=self._config.max_workers, thread_name_prefix="PlaneRender")

    async def render(
        self,
        sources: Sequence[SourceImage],
        spec: PlaneSpec,
        name: str,
        output: PlaneOutput = PlaneOutput.ENCODED,
    ) -> Union[EncodedPlane, RawPlane]:
        """Render one plane.

        Args:
            sources: Candidate source images; the best one for this plane is selected.
            spec: Plane size and rendering options.
            name: Name given to the produced plane.
            output: ENCODED for a PNG plane, RAW for uncompressed RGBA pixels.

        Returns:
            EncodedPlane or RawPlane depending on output.

        Raises:
            EmptySourceListError: If sources is empty.
            RenderError: If the image engine fails.
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.render_sync, sources, spec, name, output)

    def render_sync(
        self,
        sources: Sequence[SourceImage],
        spec: PlaneSpec,
        name: str,
        output: PlaneOutput = PlaneOutput.ENCODED,
    ) -> Union[EncodedPlane, RawPlane]:
        offset = plane_offset(spec)
        inner_width = spec.width - offset * 2
        inner_height = spec.height - offset * 2
        if inner_width <= 0 or inner_height <= 0:
            logger.error(f"Offset {spec.offset_percent}% leaves no content area in {spec.width}x{spec.height} plane")
            raise RenderError(f"Offset {spec.offset_percent}% leaves no room for content in {spec.width}x{spec.height}")

        source = select_best_source(sources, inner_width, inner_height)

        try:
            content = self._resize(source, inner_width, inner_height, spec.pixel_art)
            canvas = self.compositor.blank_canvas(spec.width, spec.height, spec.background, spec.transparent)
            canvas = self.compositor.composite(canvas, content, offset)
            if spec.rotate:
                canvas = self.compositor.rotate(canvas)

            if output is PlaneOutput.RAW:
                data, channels = self.compositor.to_raw(canvas)
                plane = RawPlane(
                    name=name,
                    data=data,
                    width=canvas.width,
                    height=canvas.height,
                    channels=channels,
                    row_stride=canvas.width * channels,
                )
            else:
                plane = EncodedPlane(
                    name=name, data=self.compositor.encode_png(canvas), width=canvas.width, height=canvas.height
                )
        except IconGenerationError:
            raise
        except Exception as e:
            logger.error(f"Failed to render {name} ({spec.width}x{spec.height}): {e}")
            raise RenderError(f"Failed to render {name}: {e}") from e

        logger.debug(f"Rendered {output.value} plane {name} ({spec.width}x{spec.height}, offset={offset})")
        return plane

    def _resize(self, source: SourceImage, width: int, height: int, pixel_art: bool) -> Image.Image:
        if source.is_vector:
            density = svg_density(
                source.width,
                source.height,
                width,
                height,
                density=self._config.default_svg_density,
                max_density=self._config.max_svg_density,
            )
            image = self.rasterizer.rasterize(source.data, density or self._config.default_svg_density)
            return self.compositor.fit(image, width, height, Image.Resampling.LANCZOS)

        upscale = width >= source.width and height >= source.height
        resample = Image.Resampling.NEAREST if pixel_art and upscale else Image.Resampling.LANCZOS
        return self.compositor.fit(self.compositor.decode(source), width, height, resample)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)
        logger.debug("PlaneRenderer executor shut down")
