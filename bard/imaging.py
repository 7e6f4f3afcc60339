"""Fixed-size images and the colour values they hold."""

from __future__ import annotations

import colorsys
from dataclasses import dataclass
from typing import Generic, Iterator, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RGB:
    """A colour as red, green and blue components in the range 0 to 1."""

    red: float
    green: float
    blue: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.red, self.green, self.blue))

    def to_hsv(self) -> HSV:
        """Return the same colour as hue, saturation and value."""
        return HSV(*colorsys.rgb_to_hsv(self.red, self.green, self.blue))


@dataclass(frozen=True)
class HSV:
    """A colour as hue, saturation and value, each in the range 0 to 1."""

    hue: float
    saturation: float
    value: float

    def __iter__(self) -> Iterator[float]:
        return iter((self.hue, self.saturation, self.value))

    def to_rgb(self) -> RGB:
        """Return the same colour as red, green and blue."""
        return RGB(*colorsys.hsv_to_rgb(self.hue, self.saturation, self.value))


class Image(Generic[T]):
    """A width by height grid of pixels, stored row by row."""

    def __init__(self, width: int, height: int) -> None:
        if width < 0 or height < 0:
            raise ValueError(f"image size must not be negative: {width}x{height}")
        self.width = width
        self.height = height
        self._pixels: list[T | None] = [None] * (width * height)

    def _index(self, x: int, y: int) -> int:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"pixel ({x}, {y}) is outside a {self.width}x{self.height} image")
        return x + y * self.width

    def get_pixel(self, x: int, y: int) -> T:
        """Return the pixel at column ``x`` and row ``y``."""
        value = self._pixels[self._index(x, y)]
        if value is None:
            raise IndexError(f"pixel ({x}, {y}) has not been set")
        return value

    def set_pixel(self, x: int, y: int, value: T) -> None:
        """Store ``value`` at column ``x`` and row ``y``."""
        self._pixels[self._index(x, y)] = value