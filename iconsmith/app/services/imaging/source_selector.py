import logging
from typing import Sequence, Tuple

from iconsmith.app.services.imaging.image_errors import EmptySourceListError
from iconsmith.app.services.imaging.image_models import SourceImage

logger = logging.getLogger(__name__)


def source_rank(source: SourceImage, target_side: int) -> Tuple[int, int, int]:
    """Ranking key of a candidate source; lower tuples win.

    Compared lexicographically: vectors before rasters, then sources large enough
    to be downscaled before ones that need upscaling, then closest larger side.
    """
    return (
        0 if source.is_vector else 1,
        0 if source.side >= target_side else 1,
        abs(source.side - target_side),
    )


def select_best_source(sources: Sequence[SourceImage], width: int, height: int) -> SourceImage:
    """Pick the source best suited to render a width x height image.

    Ties keep the first candidate in input order.

    Raises:
        EmptySourceListError: If sources is empty.
    """
    if not sources:
        raise EmptySourceListError("No source provided")

    target_side = max(width, height)
    best = min(sources, key=lambda source: source_rank(source, target_side))
    logger.debug(f"Selected {best.format} {best.width}x{best.height} source for {width}x{height}")
    return best
