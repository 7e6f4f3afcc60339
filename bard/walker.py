"""Find round dots by walking outward in rings from points on a grid."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass

from PIL import Image as PILImage

log = logging.getLogger(__name__)

WHITE = (255, 255, 255, 255)
RED = (255, 0, 0, 255)
MAGENTA = (255, 0, 255, 255)

BASE_VECTORS: tuple[tuple[float, float], ...] = (
    (1.0, 0.0),
    (0.75, 0.75),
    (0.0, 1.0),
    (-0.75, 0.75),
    (-1.0, 0.0),
    (-0.75, -0.75),
    (0.0, -1.0),
    (0.75, -0.75),
)

MAX_SIZE = 25
MIN_SIZE = 4
GRID_GAP = 5
TOLERANCE = 30.0

Colour = tuple[float, float, float]
Point = tuple[float, float]


@dataclass(frozen=True)
class DotDescription:
    """A dot found in an image: its centre and the ring distance that bounds it."""

    pos: Point
    size: int


def _inside(image: PILImage.Image, x: int, y: int) -> bool:
    width, height = image.size
    return 0 <= x < width and 0 <= y < height


def put_protected(image: PILImage.Image, x: int, y: int, pixel) -> None:
    """Set the pixel at (x, y), ignoring points outside the image."""
    if not _inside(image, x, y):
        return
    image.putpixel((x, y), tuple(pixel[: len(image.getbands())]))


def get_protected(image: PILImage.Image, x: int, y: int):
    """Return the pixel at (x, y), or white for points outside the image."""
    if not _inside(image, x, y):
        return WHITE
    return image.getpixel((x, y))


def convert_rgba(pixel) -> Colour:
    """Return the red, green and blue of a pixel as floats on a 0 to 255 scale."""
    red, green, blue = pixel[:3]
    return float(red), float(green), float(blue)


def _lerp(start: Colour, end: Colour, t: float) -> Colour:
    return tuple(a * (1.0 - t) + b * t for a, b in zip(start, end))  # type: ignore[return-value]


def match_ring(
    image: PILImage.Image, center: Point, reference_colour: Colour, distance: int
) -> tuple[Point, int, Colour]:
    """Sample eight points ``distance`` from ``center`` and compare them with a colour.

    The ring is turned by ``distance`` radians. Returns the mean of the centre
    and the matching points, the number of matches, and the mean of the
    reference colour and the matching colours.
    """
    tolerance = TOLERANCE * TOLERANCE
    cos_a, sin_a = math.cos(distance), math.sin(distance)
    cx, cy = center
    colour_sum = list(reference_colour)
    centre_x, centre_y = cx, cy
    matches = 0
    for vx, vy in BASE_VECTORS:
        ox = vx * cos_a - vy * sin_a
        oy = vx * sin_a + vy * cos_a
        check_x = cx + ox * distance
        check_y = cy + oy * distance

        new_colour = convert_rgba(get_protected(image, int(check_x), int(check_y)))
        mag_sqrd = sum((r - n) ** 2 for r, n in zip(reference_colour, new_colour))
        if mag_sqrd < tolerance:
            matches += 1
            colour_sum = [s + n for s, n in zip(colour_sum, new_colour)]
            centre_x += check_x
            centre_y += check_y

    divisor = 1.0 + matches
    average_colour = tuple(s / divisor for s in colour_sum)
    return (centre_x / divisor, centre_y / divisor), matches, average_colour  # type: ignore[return-value]


def _walk(image: PILImage.Image, x: int, y: int) -> tuple[DotDescription | None, int]:
    center: Point = (float(x), float(y))
    reference_colour = convert_rgba(get_protected(image, x, y))
    is_dot = False
    dot_size = 0
    successful_tests = 0
    total_tests = 1
    inner_distance = 1
    outer_distance = MAX_SIZE
    growing = True
    tests = 0

    while inner_distance < outer_distance:
        if growing:
            match_center, matches, average_colour = match_ring(
                image, center, reference_colour, inner_distance
            )
            successful_tests += matches
            total_tests += len(BASE_VECTORS)
            if matches < 4:
                is_dot = True
                dot_size = inner_distance
                break
            if inner_distance > MIN_SIZE:
                growing = False
            center = match_center
            reference_colour = _lerp(
                reference_colour, average_colour, successful_tests / total_tests
            )
            inner_distance += 2
        else:
            _, matches, _ = match_ring(image, center, reference_colour, outer_distance)
            if outer_distance == MAX_SIZE and matches > 5:
                break
            if matches < 2:
                growing = True
            outer_distance -= 2
        tests += len(BASE_VECTORS)

    if inner_distance > outer_distance:
        is_dot = True
        dot_size = inner_distance
    if dot_size < MIN_SIZE:
        is_dot = False
    return (DotDescription(pos=center, size=dot_size) if is_dot else None), tests


def match_dots(image: PILImage.Image, out_image: PILImage.Image) -> list[DotDescription]:
    """Search a grid of start points for dots, marking each found centre in magenta."""
    width, height = image.size
    dots: list[DotDescription] = []
    test_tally = 0
    location_tally = 0
    for x in range(0, width, GRID_GAP):
        for y in range(0, height, GRID_GAP):
            location_tally += 1
            dot, tests = _walk(image, x, y)
            test_tally += tests
            if dot is not None:
                put_protected(out_image, int(dot.pos[0]), int(dot.pos[1]), MAGENTA)
                dots.append(dot)
    log.info("Total checks done %d over %d locations", test_tally, location_tally)
    return dots