import pytest

from iconsmith.app.services.imaging.image_errors import EmptySourceListError
from iconsmith.app.services.imaging.image_models import SourceImage
from iconsmith.app.services.imaging.source_selector import select_best_source, source_rank


def make_source(width, height, fmt="png", tag=b"x"):
    return SourceImage(data=tag, width=width, height=height, format=fmt, channels=4)


def test_prefers_vector_over_raster():
    """Test a vector beats a raster even when the raster matches the size exactly."""
    raster = make_source(64, 64)
    vector = make_source(16, 16, fmt="svg")

    assert select_best_source([raster, vector], 64, 64) is vector


def test_prefers_downscale_over_upscale():
    """Test a larger source wins over a closer smaller one."""
    small = make_source(60, 60)
    large = make_source(512, 512)

    assert select_best_source([small, large], 64, 64) is large


def test_prefers_closest_larger_size():
    """Test the closest of several downscalable sources wins."""
    sources = [make_source(1024, 1024), make_source(128, 128), make_source(256, 256)]

    assert select_best_source(sources, 100, 100) is sources[1]


def test_closest_upscale_when_all_smaller():
    """Test the largest of several too-small sources wins."""
    sources = [make_source(16, 16), make_source(48, 48), make_source(32, 32)]

    assert select_best_source(sources, 64, 64) is sources[1]


def test_uses_larger_dimension_of_source_and_target():
    """Test ranking compares the larger side of both source and target."""
    wide = make_source(200, 20)
    square = make_source(150, 150)

    assert select_best_source([square, wide], 180, 90) is wide


def test_tie_keeps_first_candidate():
    """Test equal ranks resolve to the first source in input order."""
    first = make_source(64, 64, tag=b"first")
    second = make_source(64, 64, tag=b"second")

    assert select_best_source([first, second], 32, 32) is first
    assert select_best_source([second, first], 32, 32) is second


def test_selection_is_deterministic():
    """Test repeated selection returns the same source."""
    sources = [make_source(16, 16), make_source(300, 100), make_source(128, 128, fmt="svg")]

    picks = {id(select_best_source(sources, 48, 48)) for _ in range(10)}

    assert picks == {id(sources[2])}


def test_rank_is_lexicographic():
    """Test an exact-size upscale candidate still loses to any downscale candidate."""
    assert source_rank(make_source(63, 63), 64) > source_rank(make_source(4096, 4096), 64)


def test_empty_sources_raise():
    with pytest.raises(EmptySourceListError):
        select_best_source([], 16, 16)
