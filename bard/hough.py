"""Find round dots in a picture by voting for circle centres along colour edges."""

from __future__ import annotations

import argparse
import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from PIL import Image as PILImage
from PIL import ImageFilter

log = logging.getLogger(__name__)

SMOOTH = (1.0, 2.0, 1.0)
DIFFERENCE = (-1.0, 0.0, 1.0)
EDGE_THRESHOLD = 0.25
RADII = tuple(range(4, 15))
RADIUS_DEPTH = 5
MAX_CHROMA = 128.0
DEFAULT_IMAGE = "test_images/full_whiteboard_s4.png"
DEFAULT_OUTPUT = "out.bmp"
_I32_MAX = 2**31 - 1


@dataclass(frozen=True)
class Edge:
    """An edge pixel and the unit direction of its colour gradient."""

    direction: tuple[float, float]
    location: tuple[int, int]


@dataclass(frozen=True)
class Circle:
    """A detected circle: centre, radius and the votes its centre received."""

    x: int
    y: int
    r: int
    votes: int


def laplacian(image1, image2) -> np.ndarray:
    """Compare two luma-alpha images pixel by pixel.

    A pixel is marked where the first image's luma exceeds the second's by
    just enough that the halved, offset difference equals 129.
    """
    first = np.frombuffer(bytes(image1), dtype=np.uint8)
    second = np.frombuffer(bytes(image2), dtype=np.uint8)
    if len(first) % 2 or len(second) % 2:
        raise ValueError("luma-alpha images must hold an even number of bytes")
    count = min(len(first), len(second))
    luma1 = first[0:count:2].astype(np.int32)
    luma2 = second[0:count:2].astype(np.int32)
    return (luma1 - luma2 + 255) // 2 == 129


def _filter_axis(values: np.ndarray, kernel: Sequence[float], axis: int) -> np.ndarray:
    length = values.shape[axis]
    offset = len(kernel) // 2
    positions = np.arange(length)
    shape = [1, 1]
    shape[axis] = length

    windows = []
    missing = np.zeros(length, dtype=np.float32)
    for tap in range(len(kernel)):
        source = positions + tap - offset
        valid = (source >= 0) & (source < length)
        missing += ~valid
        windows.append((source, valid))

    # Taps falling off the image are replaced by the centre pixel, unweighted.
    result = values * missing.reshape(shape)
    for weight, (source, valid) in zip(kernel, windows):
        shifted = np.take(values, np.clip(source, 0, max(length - 1, 0)), axis=axis)
        result += np.where(valid.reshape(shape), shifted * np.float32(weight), np.float32(0))
    return result


def convolute(image, width: int, height: int, x_kernel, y_kernel) -> np.ndarray:
    """Apply a separable filter: ``x_kernel`` along rows, then ``y_kernel`` along columns."""
    if len(x_kernel) != len(y_kernel):
        raise ValueError("both kernels must have the same length")
    if len(x_kernel) % 2 != 1:
        raise ValueError("kernel length must be odd")
    values = np.asarray(image, dtype=np.float32)
    if values.size != width * height:
        raise ValueError(f"expected {width * height} values, got {values.size}")
    grid = values.reshape(height, width)
    intermediate = _filter_axis(grid, x_kernel, axis=1)
    return _filter_axis(intermediate, y_kernel, axis=0).reshape(-1)


def write_vote(votes, width: int, height: int, x: int, y: int) -> None:
    """Add one vote at (x, y) if that point lies inside the map."""
    if 0 <= x < width and 0 <= y < height:
        index = x + y * width
        votes[index] = (int(votes[index]) + 1) % 256


def _add_votes(counts: np.ndarray, points: np.ndarray, weight: int, width: int, height: int) -> None:
    xs, ys = points[:, 0], points[:, 1]
    inside = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
    np.add.at(counts, xs[inside] + ys[inside] * width, weight)


def hough_vote(edges: Sequence[Edge], width: int, height: int, radius: int) -> np.ndarray:
    """Vote for circle centres ``radius`` away from each edge, on both sides.

    The near side gets a 3x3 block of single votes; the far side the same
    block with a double vote in the middle. Counts wrap at 256.
    """
    counts = np.zeros(width * height, dtype=np.int64)
    if edges:
        directions = np.array([edge.direction for edge in edges], dtype=np.float32)
        locations = np.array([edge.location for edge in edges], dtype=np.int64)
        offsets = np.trunc(directions * np.float32(radius)).astype(np.int64)
        near = locations - offsets
        far = near + offsets * 2
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                shift = np.array([dx, dy], dtype=np.int64)
                _add_votes(counts, near + shift, 1, width, height)
                _add_votes(counts, far + shift, 2 if dx == dy == 0 else 1, width, height)
    return (counts % 256).astype(np.uint8)


def find_edges(red, green, blue, width: int, height: int, threshold: float = EDGE_THRESHOLD) -> list[Edge]:
    """Return pixels whose combined colour gradient exceeds ``threshold``, column by column."""
    rdy = convolute(red, width, height, SMOOTH, DIFFERENCE)
    rdx = convolute(red, width, height, DIFFERENCE, SMOOTH)
    gdy = convolute(green, width, height, SMOOTH, DIFFERENCE)
    gdx = convolute(green, width, height, DIFFERENCE, SMOOTH)
    # The vertical term for blue is measured on the red channel.
    bdy = convolute(red, width, height, SMOOTH, DIFFERENCE)
    bdx = convolute(blue, width, height, DIFFERENCE, SMOOTH)

    dx = np.sqrt(rdx * rdx + gdx * gdx + bdx * bdx)
    dy = np.sqrt(rdy * rdy + gdy * gdy + bdy * bdy)
    magnitude = np.sqrt(dx * dx + dy * dy)
    strong = (magnitude > np.float32(threshold)).reshape(height, width)

    edges = []
    for x, y in zip(*np.nonzero(strong.T)):
        index = int(x) + int(y) * width
        norm = magnitude[index]
        edges.append(
            Edge(
                direction=(float(dx[index] / norm), float(dy[index] / norm)),
                location=(int(x), int(y)),
            )
        )
    return edges


def detect_circles(vote_maps, radii, width: int, height: int) -> list[Circle]:
    """Pick circles whose centre vote is a strict local peak over a quiet neighbourhood."""
    radii = list(radii)
    if len(vote_maps) != len(radii):
        raise ValueError("need exactly one vote map per radius")
    if not radii:
        return []
    stack = np.stack(
        [np.asarray(votes, dtype=np.uint8).reshape(height, width) for votes in vote_maps]
    ).astype(np.int64)
    depth = len(radii)

    circles: list[Circle] = []
    for z, r in enumerate(radii):
        vote_thresh = 30 + int(np.float32(r) * np.float32(1.6))
        acc_thresh = 13 - int(np.float32(r) * np.float32(0.2))
        vote_sum, vote_high, vote_low = 0, 0, _I32_MAX
        acc_sum, acc_high, acc_low = 0, 0, _I32_MAX
        samples = acc_samples = passed = 0

        layer = stack[z]
        xs, ys = np.nonzero(layer.T > vote_thresh)
        for x, y in zip(xs.tolist(), ys.tolist()):
            votes = int(layer[y, x])
            samples += 1
            x0, x1 = max(x - r, 0), min(x + r, width - 1) + 1
            y0, y1 = max(y - r, 0), min(y + r, height - 1) + 1
            z0, z1 = max(z - RADIUS_DEPTH, 0), min(z + RADIUS_DEPTH, depth - 1) + 1
            block = stack[z0:z1, y0:y1, x0:x1]
            acc = (int(block.sum()) - votes) // (block.size - 1)

            off_z = (np.arange(z0, z1) - z)[:, None, None]
            off_y = (np.arange(y0, y1) - y)[None, :, None]
            off_x = (np.arange(x0, x1) - x)[None, None, :]
            later = (off_x > 0) | ((off_x == 0) & (off_y > 0)) | (
                (off_x == 0) & (off_y == 0) & (off_z > 0)
            )
            is_highest = not (block > votes).any() and not ((block == votes) & later).any()

            if is_highest:
                if acc > acc_thresh:
                    continue
                passed += 1
                circles.append(Circle(x, y, r, votes))
                acc_sum += acc
                acc_low = min(acc_low, acc)
                acc_high = max(acc_high, acc)
                acc_samples += 1
            vote_sum += votes
            vote_low = min(vote_low, votes)
            vote_high = max(vote_high, votes)

        log.info("================== Radius %d =================", r)
        log.info(
            "%d votes h %d, l %d, a %d > %d",
            samples, vote_high, vote_low, vote_sum // samples if samples else -1, vote_thresh,
        )
        log.info(
            "%d accs  h %d, l %d, a %d < %d",
            acc_samples, acc_high, acc_low, acc_sum // acc_samples if acc_samples else -1, acc_thresh,
        )
        log.info("Passed %d", passed)
    return circles


_RGB_TO_XYZ = np.array(
    [
        [0.4124564, 0.3575761, 0.1804375],
        [0.2126729, 0.7151522, 0.0721750],
        [0.0193339, 0.1191920, 0.9503041],
    ]
)
_XYZ_TO_RGB = np.linalg.inv(_RGB_TO_XYZ)
_WHITE = _RGB_TO_XYZ @ np.ones(3)
_DELTA = 6 / 29


def _lab_forward(t: np.ndarray) -> np.ndarray:
    return np.where(t > _DELTA**3, np.cbrt(t), t / (3 * _DELTA**2) + 4 / 29)


def _lab_inverse(t: np.ndarray) -> np.ndarray:
    return np.where(t > _DELTA, t**3, 3 * _DELTA**2 * (t - 4 / 29))


def _dot_colour(rgb) -> tuple[int, int, int]:
    """Fully saturate a colour in LCh space and snap its hue to 30 degree steps."""
    encoded = np.array(rgb[:3], dtype=float) / 255
    linear = np.where(encoded <= 0.04045, encoded / 12.92, ((encoded + 0.055) / 1.055) ** 2.4)
    fx, fy, fz = _lab_forward((_RGB_TO_XYZ @ linear) / _WHITE)
    lightness, a, b = 116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz)

    chroma = math.hypot(a, b)
    chroma += MAX_CHROMA - chroma
    hue = math.degrees(math.atan2(b, a))
    if hue <= -180:
        hue += 360
    hue = math.radians(int(hue / 30) * 30)
    a, b = chroma * math.cos(hue), chroma * math.sin(hue)

    fy = (lightness + 16) / 116
    f = np.array([fy + a / 500, fy, fy - b / 200])
    linear = np.clip(_XYZ_TO_RGB @ (_lab_inverse(f) * _WHITE), 0.0, 1.0)
    encoded = np.where(linear <= 0.0031308, linear * 12.92, 1.055 * linear ** (1 / 2.4) - 0.055)
    red, green, blue = (int(round(c * 255)) for c in np.clip(encoded, 0.0, 1.0))
    return red, green, blue


def _paint_circles(pixels: np.ndarray, blurred: PILImage.Image, circles: Sequence[Circle]) -> None:
    height, width = pixels.shape[:2]
    for circle in circles:
        fill = _dot_colour(blurred.getpixel((circle.x, circle.y)))
        pixels[0, 0] = fill
        span = np.arange(-circle.r, circle.r)
        off_y, off_x = np.meshgrid(span, span, indexing="ij")
        inside = (off_x * off_x + off_y * off_y < circle.r * circle.r) & ~(
            (off_x == 0) & (off_y == 0)
        )
        xs = off_x[inside] + circle.x
        ys = off_y[inside] + circle.y
        keep = (xs >= 0) & (xs < width) & (ys >= 0) & (ys < height)
        pixels[ys[keep], xs[keep]] = fill


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Mark the round dots found in a picture.")
    parser.add_argument("image", nargs="?", default=DEFAULT_IMAGE)
    parser.add_argument("--output", default=DEFAULT_OUTPUT)
    parser.add_argument("--verbose", action="store_true", help="log statistics per radius")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING, format="%(message)s")

    try:
        source = PILImage.open(args.image).convert("RGBA")
    except OSError as exc:
        parser.error(f"could not read {args.image}: {exc}")
    blurred = source.filter(ImageFilter.GaussianBlur(2.0))
    width, height = source.size
    channels = np.asarray(source, dtype=np.float32) / np.float32(255)
    red, green, blue = (channels[:, :, i].reshape(-1) for i in range(3))

    edges = find_edges(red, green, blue, width, height)
    vote_maps = [hough_vote(edges, width, height, radius) for radius in RADII]
    circles = detect_circles(vote_maps, RADII, width, height)

    pixels = (channels[:, :, :3] * np.float32(255)).astype(np.uint8)
    _paint_circles(pixels, blurred, circles)
    PILImage.fromarray(pixels).save(args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())