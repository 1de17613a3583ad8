from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

VECTOR_FORMAT = "svg"


class SourceImage(BaseModel):
    """Decoded source image shared read-only across every plane of one request.

    Attributes:
        data: Original encoded bytes of the image.
        width: Natural pixel width.
        height: Natural pixel height.
        format: Lower-case format tag reported by the decoder ("png", "svg", ...).
        channels: Number of colour channels, including alpha.
    """

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(repr=False)
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    format: str
    channels: int = Field(default=4, ge=1, le=4)

    @property
    def is_vector(self) -> bool:
        return self.format == VECTOR_FORMAT

    @property
    def side(self) -> int:
        return max(self.width, self.height)


class PlaneSpec(BaseModel):
    """Rendering parameters of a single icon plane."""

    model_config = ConfigDict(frozen=True)

    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)
    offset_percent: float = Field(default=0, ge=0, lt=100, description="Inner padding as % of the larger side")
    pixel_art: bool = False
    background: Optional[str] = None
    transparent: bool = False
    rotate: bool = False


class PlaneOutput(Enum):
    ENCODED = "encoded"
    RAW = "raw"


class EncodedPlane(BaseModel):
    """A rendered plane encoded as a standalone PNG."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: bytes = Field(repr=False)
    width: int
    height: int


class RawPlane(BaseModel):
    """A rendered plane as uncompressed, top-down, row-major pixel bytes."""

    model_config = ConfigDict(frozen=True)

    name: str
    data: bytes = Field(repr=False)
    width: int
    height: int
    channels: int = 4
    row_stride: int


class FaviconArtifact(BaseModel):
    """Named output unit handed back to the platform layer."""

    model_config = ConfigDict(frozen=True)

    name: str
    contents: Union[bytes, RawPlane] = Field(repr=False)


class IconSize(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)


class IconOptions(BaseModel):
    """Per-artifact icon options as supplied by a platform definition.

    ``background`` may be a colour string, or a boolean placeholder left by a
    platform table; only strings survive flattening into plane specs.
    """

    sizes: List[IconSize]
    offset: float = Field(default=0, ge=0, lt=100)
    pixel_art: bool = False
    background: Union[str, bool, None] = None
    transparent: bool = False
    rotate: bool = False
    purpose: Literal["any", "maskable"] = "any"


def as_string(value: object) -> Optional[str]:
    return value if isinstance(value, str) else None


def flatten_icon_options(options: IconOptions) -> List[PlaneSpec]:
    """Expand icon options into one plane spec per requested size, in order."""
    return [
        PlaneSpec(
            width=size.width,
            height=size.height,
            offset_percent=options.offset or 0,
            pixel_art=options.pixel_art,
            background=as_string(options.background),
            transparent=options.transparent,
            rotate=options.rotate,
        )
        for size in options.sizes
    ]


def transparent_icon(width: int, height: Optional[int] = None) -> IconOptions:
    return IconOptions(
        sizes=[IconSize(width=width, height=height or width)],
        offset=0,
        background=False,
        transparent=True,
        rotate=False,
    )


def opaque_icon(width: int, height: Optional[int] = None) -> IconOptions:
    return IconOptions(
        sizes=[IconSize(width=width, height=height or width)],
        offset=0,
        background=True,
        transparent=False,
        rotate=False,
    )


def maskable(options: IconOptions) -> IconOptions:
    """Mark icon options as rendered from the maskable source set."""
    return options.model_copy(update={"purpose": "maskable"})
