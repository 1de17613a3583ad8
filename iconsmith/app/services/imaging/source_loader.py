import asyncio
import io
import logging
import os
from pathlib import Path
from typing import List, Optional, Sequence, Union

from PIL import Image, UnidentifiedImageError

from iconsmith.app.services.imaging.image_engine import CairoSvgRasterizer, Rasterizer
from iconsmith.app.services.imaging.image_errors import (
    EmptySourceListError,
    InvalidSourceError,
    InvalidSourceTypeError,
)
from iconsmith.app.services.imaging.image_models import VECTOR_FORMAT, SourceImage
from iconsmith.app.utils.task_fanout import SchedulingPolicy, run_all

logger = logging.getLogger(__name__)

Buffer = Union[bytes, bytearray, memoryview]
SingleSource = Union[Buffer, str, os.PathLike]
SourceInput = Union[SingleSource, Sequence[SingleSource]]

BUFFER_TYPES = (bytes, bytearray, memoryview)
PATH_TYPES = (str, os.PathLike)
LIST_TYPES = (list, tuple)


class SourceLoader:
    """Turns buffers, paths, or a flat list of either into decoded source images.

    Raster data is identified with Pillow; data Pillow cannot identify is tried as
    a vector document through the rasterizer before being rejected.
    """

    def __init__(self, rasterizer: Optional[Rasterizer] = None, policy: SchedulingPolicy = SchedulingPolicy.CONCURRENT) -> None:
        self._rasterizer = rasterizer or CairoSvgRasterizer()
        self._policy = policy

    async def load_sources(self, source: SourceInput) -> List[SourceImage]:
        """Load every image described by source, preserving input order.

        Args:
            source: A buffer, a file path, or a flat list of buffers and paths.

        Returns:
            Decoded source images.

        Raises:
            InvalidSourceError: If a buffer cannot be decoded as an image.
            EmptySourceListError: If an empty list is given.
            InvalidSourceTypeError: If the input is of another type or a list is nested.
        """
        loop = asyncio.get_running_loop()
        if isinstance(source, BUFFER_TYPES):
            return [await loop.run_in_executor(None, self.decode, bytes(source))]

        if isinstance(source, PATH_TYPES):
            data = await loop.run_in_executor(None, Path(source).read_bytes)
            logger.debug(f"Read {len(data)} bytes from {source}")
            return await self.load_sources(data)

        if isinstance(source, LIST_TYPES) and not any(isinstance(item, LIST_TYPES) for item in source):
            if not source:
                raise EmptySourceListError("No source provided")
            loaded = await run_all([lambda item=item: self.load_sources(item) for item in source], self._policy)
            return [image for images in loaded for image in images]

        logger.error(f"Invalid source type provided: {type(source).__name__}")
        raise InvalidSourceTypeError("Invalid source type provided")

    def decode(self, data: bytes) -> SourceImage:
        try:
            with Image.open(io.BytesIO(data)) as image:
                return SourceImage(
                    data=data,
                    width=image.width,
                    height=image.height,
                    format=(image.format or "").lower(),
                    channels=len(image.getbands()),
                )
        except UnidentifiedImageError:
            pass

        try:
            width, height = self._rasterizer.natural_size(data)
        except (ValueError, SyntaxError) as e:
            logger.error(f"Invalid image buffer ({len(data)} bytes): {e}")
            raise InvalidSourceError("Invalid image buffer") from e

        return SourceImage(data=data, width=width, height=height, format=VECTOR_FORMAT, channels=4)
