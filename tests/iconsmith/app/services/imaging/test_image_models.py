import pytest
from pydantic import ValidationError

from iconsmith.app.services.imaging.image_models import (
    IconOptions,
    IconSize,
    PlaneSpec,
    SourceImage,
    as_string,
    flatten_icon_options,
    maskable,
    opaque_icon,
    transparent_icon,
)


def test_flatten_icon_options_expands_sizes_in_order():
    """Test each size becomes one plane spec carrying the shared options."""
    options = IconOptions(
        sizes=[IconSize(width=16, height=16), IconSize(width=32, height=24)],
        offset=15,
        pixel_art=True,
        background="#fff",
        transparent=True,
        rotate=True,
    )

    specs = flatten_icon_options(options)

    assert [(spec.width, spec.height) for spec in specs] == [(16, 16), (32, 24)]
    assert all(spec.offset_percent == 15 for spec in specs)
    assert all(spec.pixel_art and spec.transparent and spec.rotate for spec in specs)
    assert all(spec.background == "#fff" for spec in specs)


@pytest.mark.parametrize("background", [True, False, None])
def test_non_string_background_flattens_to_none(background):
    options = IconOptions(sizes=[IconSize(width=16, height=16)], background=background)

    assert flatten_icon_options(options)[0].background is None


def test_as_string():
    assert as_string("red") == "red"
    assert as_string(True) is None
    assert as_string(3) is None


def test_icon_option_builders():
    transparent = transparent_icon(48)
    opaque = opaque_icon(180, 120)

    assert [(s.width, s.height) for s in transparent.sizes] == [(48, 48)]
    assert transparent.transparent is True
    assert [(s.width, s.height) for s in opaque.sizes] == [(180, 120)]
    assert opaque.transparent is False
    assert maskable(transparent).purpose == "maskable"
    assert transparent.purpose == "any"


@pytest.mark.parametrize(
    "fields",
    [
        {"width": 0, "height": 16},
        {"width": 16, "height": -1},
        {"width": 16, "height": 16, "offset_percent": 100},
        {"width": 16, "height": 16, "offset_percent": -5},
    ],
)
def test_plane_spec_validation(fields):
    with pytest.raises(ValidationError):
        PlaneSpec(**fields)


def test_plane_spec_is_immutable():
    spec = PlaneSpec(width=16, height=16)

    with pytest.raises(ValidationError):
        spec.width = 32


def test_source_image_properties():
    vector = SourceImage(data=b"<svg/>", width=10, height=40, format="svg")
    raster = SourceImage(data=b"png", width=10, height=40, format="png")

    assert vector.is_vector and not raster.is_vector
    assert vector.side == 40
