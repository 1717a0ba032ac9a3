import pytest

from docview.plugin_api import Rectangle
from docview.recolor import (
    RGBA,
    ImageSurface,
    RecolorSettings,
    colorumax,
    recolor,
)

BLACK = RGBA(0.0, 0.0, 0.0)
WHITE = RGBA(1.0, 1.0, 1.0)


def _surface(*pixels):
    surface = ImageSurface(len(pixels), 1)
    for x, bgra in enumerate(pixels):
        surface.set_pixel(x, 0, bgra)
    return surface


def test_parse_hex_forms():
    assert RGBA.parse("#FF0000") == RGBA(1.0, 0.0, 0.0, 1.0)
    assert RGBA.parse("#f00") == RGBA(1.0, 0.0, 0.0, 1.0)
    assert RGBA.parse("#000000") == BLACK
    assert RGBA.parse("#FFFFFF") == WHITE
    assert RGBA.parse("#ffffffffffff") == WHITE


def test_parse_functional_forms():
    assert RGBA.parse("rgb(255, 0, 0)") == RGBA(1.0, 0.0, 0.0, 1.0)
    assert RGBA.parse("rgba(0,0,255,0.5)") == RGBA(0.0, 0.0, 1.0, 0.5)
    assert RGBA.parse("rgb(100%, 0%, 100%)") == RGBA(1.0, 0.0, 1.0, 1.0)


@pytest.mark.parametrize("text", ["", "#12", "#GGGGGG", "red-ish", "rgb(1,2)", "rgba(1,2,3)"])
def test_parse_invalid(text):
    with pytest.raises(ValueError):
        RGBA.parse(text)


def test_surface_pixel_round_trip():
    surface = ImageSurface(3, 2)
    surface.set_pixel(2, 1, (1, 2, 3, 4))
    assert surface.pixel(2, 1) == (1, 2, 3, 4)
    assert surface.pixel(0, 0) == (0, 0, 0, 0)
    assert len(surface.data) == 3 * 2 * 4


def test_surface_out_of_range():
    surface = ImageSurface(2, 2)
    with pytest.raises(IndexError):
        surface.pixel(2, 0)
    with pytest.raises(ValueError):
        surface.set_pixel(0, 0, (1, 2, 3))


def test_default_settings_colors():
    settings = RecolorSettings()
    assert settings.light == RGBA.parse("#000000")
    assert settings.dark == RGBA.parse("#FFFFFF")
    assert settings.hue is True
    assert settings.reverse_video is False


def test_fast_formula():
    assert RecolorSettings(light=WHITE, dark=BLACK).fast_formula() is True
    coloured = RecolorSettings(light=RGBA(1.0, 0.9, 0.8), dark=BLACK)
    assert coloured.fast_formula() is False
    coloured.hue = False
    assert coloured.fast_formula() is True
    translucent = RecolorSettings(hue=False, light=RGBA(1, 1, 1, 0.5), dark=BLACK)
    assert translucent.fast_formula() is False


def test_colorumax_grey_is_zero():
    assert colorumax((0.0, 0.0, 0.0), 0.5, 0.0, 1.0) == 0.0


def test_colorumax_reaches_cube_boundary():
    rgb = (0.2, 0.7, 0.4)
    lightness = 0.30 * rgb[0] + 0.59 * rgb[1] + 0.11 * rgb[2]
    h = tuple(c - lightness for c in rgb)
    u = colorumax(h, lightness, 0.0, 1.0)
    edge = [lightness + u * c for c in h]
    assert all(-1e-9 <= c <= 1 + 1e-9 for c in edge)
    assert any(abs(c) < 1e-9 or abs(c - 1) < 1e-9 for c in edge)


def test_default_recolor_inverts_black_and_white():
    surface = _surface((255, 255, 255, 255), (0, 0, 0, 255))
    recolor(surface, RecolorSettings())
    assert surface.pixel(0, 0) == (0, 0, 0, 255)
    assert surface.pixel(1, 0) == (255, 255, 255, 255)


def test_hue_recolor_with_black_to_white_is_identity():
    pixels = [(10, 200, 60, 255), (255, 0, 0, 255), (128, 128, 128, 255)]
    surface = _surface(*pixels)
    recolor(surface, RecolorSettings(hue=True, light=WHITE, dark=BLACK))
    assert [surface.pixel(x, 0) for x in range(3)] == pixels


def test_no_hue_recolor_maps_grey_to_grey():
    surface = _surface((128, 128, 128, 255), (0, 0, 0, 0))
    recolor(surface, RecolorSettings(hue=False, light=WHITE, dark=BLACK))
    assert surface.pixel(0, 0) == (128, 128, 128, 255)
    assert surface.pixel(1, 0) == (0, 0, 0, 255)


def test_no_hue_recolor_swapped_colors():
    surface = _surface((255, 255, 255, 255), (0, 0, 0, 255))
    recolor(surface, RecolorSettings(hue=False, light=BLACK, dark=WHITE))
    assert surface.pixel(0, 0) == (0, 0, 0, 255)
    assert surface.pixel(1, 0) == (255, 255, 255, 255)


def test_reverse_video_keeps_images():
    surface = _surface((255, 255, 255, 0), (255, 255, 255, 255))
    settings = RecolorSettings(reverse_video=True)
    recolor(surface, settings, [Rectangle(0, 0, 0, 0)])
    assert surface.pixel(0, 0) == (255, 255, 255, 255)
    assert surface.pixel(1, 0) == (0, 0, 0, 255)


def test_rectangles_ignored_without_reverse_video():
    surface = _surface((255, 255, 255, 255))
    recolor(surface, RecolorSettings(), [Rectangle(0, 0, 5, 5)])
    assert surface.pixel(0, 0) == (0, 0, 0, 255)


def test_slow_formula_with_opaque_colours_keeps_alpha_opaque():
    settings = RecolorSettings(light=RGBA(1.0, 0.9, 0.7), dark=RGBA(0.1, 0.0, 0.2))
    assert settings.fast_formula() is False
    surface = _surface((10, 200, 60, 255), (255, 255, 255, 255), (0, 0, 0, 255))
    recolor(surface, settings)
    for x in range(3):
        assert surface.pixel(x, 0)[3] == 255
        assert all(0 <= channel <= 255 for channel in surface.pixel(x, 0))