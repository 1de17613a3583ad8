from typing import Optional

DEFAULT_DENSITY = 72.0
MAX_DENSITY = 100000.0


def svg_density(
    source_width: Optional[int],
    source_height: Optional[int],
    target_width: int,
    target_height: int,
    density: Optional[float] = None,
    max_density: float = MAX_DENSITY,
) -> Optional[float]:
    """Compute the DPI at which a vector source must be rasterized to cover a target size.

    The result never drops below the source's own density, so vectors are only ever
    rasterized at or above their natural size and then fitted down.

    Args:
        source_width: Natural width of the vector document in pixels.
        source_height: Natural height of the vector document in pixels.
        target_width: Width the rasterized image must cover.
        target_height: Height the rasterized image must cover.
        density: Density of the natural size (72 DPI when unknown).
        max_density: Upper clamp for the returned density.

    Returns:
        Density in DPI, or None when the natural size is unknown.
    """
    if not source_width or not source_height:
        return None

    current = density or DEFAULT_DENSITY
    required = max(
        1.0,
        current,
        current * target_width / source_width,
        current * target_height / source_height,
    )
    return min(required, max_density)
