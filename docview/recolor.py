"""Recolouring of rendered page images between a dark and a light colour."""

from __future__ import annotations

import math
import re
import sys
from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from docview.plugin_api import Rectangle

_EPSILON = sys.float_info.epsilon
_DOUBLE_MAX = sys.float_info.max

# Weights for computing lightness from red, green and blue; they sum to one.
_WEIGHTS = (0.30, 0.59, 0.11)

_FUNCTIONAL = re.compile(
    r"^(rgba?)\(\s*([^,()]+)\s*,\s*([^,()]+)\s*,\s*([^,()]+)\s*(?:,\s*([^,()]+)\s*)?\)$",
    re.IGNORECASE,
)


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return min(high, max(low, value))


def _parse_channel(text: str) -> float:
    text = text.strip()
    if text.endswith("%"):
        return _clamp(float(text[:-1]) / 100.0)
    return _clamp(float(text) / 255.0)


@dataclass(frozen=True)
class RGBA:
    """A colour with red, green, blue and alpha channels in [0, 1]."""

    red: float = 0.0
    green: float = 0.0
    blue: float = 0.0
    alpha: float = 1.0

    @classmethod
    def parse(cls, text: str) -> "RGBA":
        """Parse ``#rgb``-style hex colours and ``rgb()``/``rgba()`` notation."""
        if text is None:
            raise ValueError("no colour given")
        spec = text.strip()
        if spec.startswith("#"):
            digits = spec[1:]
            if len(digits) not in (3, 6, 9, 12) or not all(
                ch in "0123456789abcdefABCDEF" for ch in digits
            ):
                raise ValueError(f"invalid colour: {text!r}")
            width = len(digits) // 3
            top = 16**width - 1
            red, green, blue = (
                int(digits[i * width:(i + 1) * width], 16) / top for i in range(3)
            )
            return cls(red, green, blue, 1.0)

        match = _FUNCTIONAL.match(spec)
        if match is None:
            raise ValueError(f"invalid colour: {text!r}")
        kind, red, green, blue, alpha = match.groups()
        if (kind.lower() == "rgba") != (alpha is not None):
            raise ValueError(f"invalid colour: {text!r}")
        try:
            channels = [_parse_channel(part) for part in (red, green, blue)]
            opacity = _clamp(float(alpha)) if alpha is not None else 1.0
        except ValueError:
            raise ValueError(f"invalid colour: {text!r}") from None
        return cls(*channels, opacity)


@dataclass
class ImageSurface:
    """A 32-bit image in blue, green, red, alpha byte order."""

    width: int
    height: int
    stride: int = 0
    data: bytearray = field(default_factory=bytearray)

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError("surface dimensions must not be negative")
        if self.stride == 0:
            self.stride = self.width * 4
        if self.stride < self.width * 4:
            raise ValueError("stride is smaller than a row of pixels")
        size = self.stride * self.height
        if not self.data:
            self.data = bytearray(size)
        elif len(self.data) < size:
            raise ValueError("pixel data is smaller than the surface")
        else:
            self.data = bytearray(self.data)

    def _offset(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside the surface")
        return y * self.stride + x * 4

    def pixel(self, x: int, y: int) -> tuple[int, int, int, int]:
        """Return the (blue, green, red, alpha) bytes of a pixel."""
        offset = self._offset(x, y)
        b, g, r, a = self.data[offset:offset + 4]
        return (b, g, r, a)

    def set_pixel(self, x: int, y: int, bgra: Sequence[int]) -> None:
        """Set a pixel from (blue, green, red, alpha) bytes."""
        values = bytes(bgra)
        if len(values) != 4:
            raise ValueError("a pixel has exactly four channels")
        offset = self._offset(x, y)
        self.data[offset:offset + 4] = values


@dataclass
class RecolorSettings:
    """How pages are recoloured."""

    hue: bool = True
    reverse_video: bool = False
    light: RGBA = field(default_factory=lambda: RGBA(0.0, 0.0, 0.0))
    dark: RGBA = field(default_factory=lambda: RGBA(1.0, 1.0, 1.0))

    def fast_formula(self) -> bool:
        """Return True if the simpler opaque-grey formulas give the same result."""
        dark, light = self.dark, self.light
        greys = (
            abs(dark.red - dark.blue) < _EPSILON
            and abs(dark.red - dark.green) < _EPSILON
            and abs(light.red - light.blue) < _EPSILON
            and abs(light.red - light.green) < _EPSILON
        )
        opaque = dark.alpha >= 1.0 - _EPSILON and light.alpha >= 1.0 - _EPSILON
        return (not self.hue or greys) and opaque


def colorumax(h: Sequence[float], lightness: float, l1: float, l2: float) -> float:
    """Return the largest saturation for hue ``h`` at ``lightness``.

    The lightness is assumed to lie in [l1, l2]; the result is forced to
    zero at both ends of that interval.
    """
    if all(abs(component) <= _EPSILON for component in h):
        return 0.0

    span = l2 - l1
    lv = (lightness - l1) / span if span != 0 else None
    u = _DOUBLE_MAX
    v = _DOUBLE_MAX
    for component in h:
        if component > _EPSILON:
            u = min(abs((1 - lightness) / component), u)
            if lv is not None:
                v = min(abs((1 - lv) / component), v)
        elif component < -_EPSILON:
            u = min(abs(lightness / component), u)
            if lv is not None:
                v = min(abs(lv / component), v)

    if lv is None:
        return u
    v = abs(span) * v
    return min(u, v)


def _to_byte(value: float) -> int:
    scaled = 255.0 * value
    rounded = math.floor(scaled + 0.5) if scaled >= 0 else -math.floor(-scaled + 0.5)
    return int(min(255, max(0, rounded)))


def recolor(
    surface: ImageSurface,
    settings: RecolorSettings,
    image_rectangles: Optional[Iterable[Rectangle]] = None,
) -> None:
    """Recolour ``surface`` in place.

    In reverse-video mode, pixels inside any of ``image_rectangles`` keep
    their colour and are only made opaque.
    """
    a = _WEIGHTS
    dark = settings.dark
    light = settings.light

    l1 = a[0] * dark.red + a[1] * dark.green + a[2] * dark.blue
    l2 = a[0] * light.red + a[1] * light.green + a[2] * light.blue
    negalpha1 = 1.0 - dark.alpha
    negalpha2 = 1.0 - light.alpha

    diff = (light.red - dark.red, light.green - dark.green, light.blue - dark.blue)
    dark_rgb = (dark.red, dark.green, dark.blue)
    light_rgb = (light.red, light.green, light.blue)
    h1 = tuple(c * dark.alpha - l1 for c in dark_rgb)
    h2 = tuple(c * light.alpha - l2 for c in light_rgb)

    fast = settings.fast_formula()
    rectangles: Optional[list[Rectangle]] = None
    if settings.reverse_video and image_rectangles is not None:
        rectangles = list(image_rectangles)

    data = surface.data
    for y in range(surface.height):
        row = y * surface.stride
        for x in range(surface.width):
            offset = row + x * 4
            if rectangles is not None and any(r.contains(x, y) for r in rectangles):
                data[offset + 3] = 255
                continue

            rgb = (data[offset + 2] / 255.0, data[offset + 1] / 255.0, data[offset] / 255.0)
            lightness = a[0] * rgb[0] + a[1] * rgb[1] + a[2] * rgb[2]

            if settings.hue:
                h = (rgb[0] - lightness, rgb[1] - lightness, rgb[2] - lightness)
                u = colorumax(h, lightness, 0.0, 1.0)
                s = 1.0 / u if abs(u) > _EPSILON else 0.0
                lightness = lightness * (l2 - l1) + l1
                su = s * colorumax(h, lightness, l1, l2)
                base = [lightness + su * component for component in h]
                if fast:
                    out = base
                    alpha = 1.0
                else:
                    tr1 = 1.0 - max(rgb)
                    tr2 = min(rgb)
                    alpha = 1.0 - tr1 * negalpha1 - tr2 * negalpha2
                    out = [
                        _clamp(tr1 * h1[k] + tr2 * h2[k] + base[k]) for k in range(3)
                    ]
            elif fast:
                out = [lightness * diff[k] + dark_rgb[k] for k in range(3)]
                alpha = 1.0
            else:
                f1 = 1.0 - (1.0 - max(rgb)) * negalpha1
                f2 = min(rgb) * negalpha2
                alpha = f1 - f2
                out = [
                    lightness * diff[k] - f2 * light_rgb[k] + f1 * dark_rgb[k]
                    for k in range(3)
                ]

            data[offset + 3] = _to_byte(alpha)
            data[offset + 2] = _to_byte(out[0])
            data[offset + 1] = _to_byte(out[1])
            data[offset] = _to_byte(out[2])