class IconGenerationError(Exception):
    """Base class for every failure raised by the icon generation pipeline.

    All subclasses are fatal for the artifact being produced; callers should not
    retry without changing their inputs.
    """


class InvalidSourceError(IconGenerationError):
    """A supplied buffer or file could not be decoded as an image."""


class EmptySourceListError(IconGenerationError):
    """A list of sources contained no elements."""


class InvalidSourceTypeError(IconGenerationError):
    """A source was neither a buffer, a path, nor a flat list of those."""


class RenderError(IconGenerationError):
    """Decode, resize, rasterize or composite failure inside the image engine."""


class EncodeError(IconGenerationError):
    """Container packing received inconsistent planes or failed to pack them."""
