"""Multi-resolution ICO container writer.

Layout (all little-endian):
    ICONDIR        6 bytes   reserved=0, type=1, count
    ICONDIRENTRY  16 bytes   one per plane
    image data               per plane: BITMAPINFOHEADER + bottom-up BGRA rows
"""
import logging
import struct
from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from iconsmith.app.services.imaging.image_errors import EncodeError
from iconsmith.app.services.imaging.image_models import RawPlane

logger = logging.getLogger(__name__)

HEADER_SIZE = 6
DIRECTORY_ENTRY_SIZE = 16
BITMAP_HEADER_SIZE = 40
BIT_DEPTH = 32
CHANNELS = 4
MAX_DIMENSION = 256
ICON_TYPE = 1
BI_RGB = 0


@dataclass(frozen=True)
class IconDirectoryEntry:
    width: int
    height: int
    bit_depth: int
    byte_size: int
    byte_offset: int

    def pack(self) -> bytes:
        # A single byte cannot hold 256; the format stores it as 0
        return struct.pack(
            "<BBBBHHII",
            0 if self.width == MAX_DIMENSION else self.width,
            0 if self.height == MAX_DIMENSION else self.height,
            0,
            0,
            1,
            self.bit_depth,
            self.byte_size,
            self.byte_offset,
        )


def _validate(plane: RawPlane) -> None:
    if plane.channels != CHANNELS:
        raise EncodeError(f"Plane {plane.name} has {plane.channels} channels, ICO planes must be RGBA")
    if not (1 <= plane.width <= MAX_DIMENSION and 1 <= plane.height <= MAX_DIMENSION):
        raise EncodeError(f"Plane {plane.name} is {plane.width}x{plane.height}, ICO planes must be 1..256 pixels")
    if plane.row_stride < plane.width * CHANNELS:
        raise EncodeError(f"Plane {plane.name} row stride {plane.row_stride} is shorter than a row")
    if len(plane.data) < plane.row_stride * plane.height:
        raise EncodeError(f"Plane {plane.name} has {len(plane.data)} bytes, expected {plane.row_stride * plane.height}")


def _bitmap_header(plane: RawPlane) -> bytes:
    return struct.pack(
        "<IiiHHIIiiII",
        BITMAP_HEADER_SIZE,
        plane.width,
        plane.height * 2,  # XOR bitmap plus the (absent) AND mask
        1,
        BIT_DEPTH,
        BI_RGB,
        plane.width * plane.height * CHANNELS,
        0,
        0,
        0,
        0,
    )


def _bitmap_pixels(plane: RawPlane) -> bytes:
    rows = np.frombuffer(plane.data, dtype=np.uint8, count=plane.row_stride * plane.height)
    rows = rows.reshape(plane.height, plane.row_stride)[:, : plane.width * CHANNELS]
    rgba = rows.reshape(plane.height, plane.width, CHANNELS)
    return np.ascontiguousarray(rgba[::-1, :, [2, 1, 0, 3]]).tobytes()


def encode_ico(planes: Sequence[RawPlane]) -> bytes:
    """Pack raw RGBA planes into a single ICO file, keeping the supplied order.

    Args:
        planes: Raw planes, each 1..256 pixels per side with 4 channels.

    Returns:
        The complete ICO file contents.

    Raises:
        EncodeError: If no planes are given or a plane is not packable.
    """
    if not planes:
        logger.error("Cannot encode an ICO container without planes")
        raise EncodeError("No planes to encode")

    for plane in planes:
        try:
            _validate(plane)
        except EncodeError as e:
            logger.error(str(e))
            raise

    entries: List[bytes] = []
    images: List[bytes] = []
    offset = HEADER_SIZE + DIRECTORY_ENTRY_SIZE * len(planes)

    for plane in planes:
        image = _bitmap_header(plane) + _bitmap_pixels(plane)
        entry = IconDirectoryEntry(
            width=plane.width,
            height=plane.height,
            bit_depth=BIT_DEPTH,
            byte_size=len(image),
            byte_offset=offset,
        )
        entries.append(entry.pack())
        images.append(image)
        offset += len(image)

    header = struct.pack("<HHH", 0, ICON_TYPE, len(planes))
    logger.debug(f"Encoded ICO with {len(planes)} planes ({offset} bytes)")
    return header + b"".join(entries) + b"".join(images)
