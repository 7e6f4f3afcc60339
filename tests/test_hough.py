import numpy as np
import pytest

from bard.hough import (
    DIFFERENCE,
    SMOOTH,
    Circle,
    Edge,
    convolute,
    detect_circles,
    find_edges,
    hough_vote,
    laplacian,
    write_vote,
)


def test_laplacian_marks_the_129_level():
    result = laplacian(bytes([5, 255, 7, 255, 9, 255]), bytes([2, 255, 7, 255, 9, 255]))
    assert result.tolist() == [True, False, False]


def test_laplacian_of_identical_images_marks_nothing():
    data = bytes([10, 255, 200, 255, 0, 0])
    assert not laplacian(data, data).any()


def test_laplacian_rejects_odd_length():
    with pytest.raises(ValueError):
        laplacian(bytes([1, 2, 3]), bytes([1, 2, 3]))


def test_convolute_with_unit_kernel_is_identity():
    image = np.arange(12, dtype=np.float32)
    assert np.array_equal(convolute(image, 4, 3, [1.0], [1.0]), image)


def test_convolute_is_linear():
    rng = np.random.default_rng(1)
    image = rng.random(30, dtype=np.float32)
    once = convolute(image, 6, 5, DIFFERENCE, SMOOTH)
    doubled = convolute(image * 2, 6, 5, DIFFERENCE, SMOOTH)
    assert np.allclose(doubled, once * 2)


def test_convolute_of_zeros_is_zero():
    assert not convolute(np.zeros(20), 5, 4, SMOOTH, DIFFERENCE).any()


def test_convolute_axes_commute_under_transpose():
    rng = np.random.default_rng(2)
    image = rng.random((4, 7), dtype=np.float32)
    direct = convolute(image.reshape(-1), 7, 4, DIFFERENCE, SMOOTH).reshape(4, 7)
    swapped = convolute(image.T.reshape(-1), 4, 7, SMOOTH, DIFFERENCE).reshape(7, 4)
    assert np.allclose(direct, swapped.T, atol=1e-5)


def test_difference_of_constant_image_vanishes_inside():
    image = np.full(25, 0.5, dtype=np.float32)
    result = convolute(image, 5, 5, DIFFERENCE, SMOOTH).reshape(5, 5)
    assert not result[1:4, 1:4].any()


def test_convolute_rejects_even_kernel():
    with pytest.raises(ValueError):
        convolute(np.zeros(4), 2, 2, [1.0, 1.0], [1.0, 1.0])


def test_convolute_rejects_wrong_size():
    with pytest.raises(ValueError):
        convolute(np.zeros(5), 2, 2, SMOOTH, SMOOTH)


def test_write_vote_inside_and_outside():
    votes = np.zeros(12, dtype=np.uint8)
    write_vote(votes, 4, 3, 1, 2)
    write_vote(votes, 4, 3, 4, 0)
    write_vote(votes, 4, 3, 0, -1)
    assert votes[1 + 2 * 4] == 1
    assert int(votes.sum()) == 1


def test_hough_vote_single_edge():
    edge = Edge(direction=(1.0, 0.0), location=(10, 10))
    votes = hough_vote([edge], 30, 30, 3)
    assert votes[13 + 10 * 30] == 2
    assert votes[7 + 10 * 30] == 1
    assert int(votes.max()) == 2
    assert int(votes.sum()) == 19


def test_hough_vote_without_edges_is_empty():
    votes = hough_vote([], 8, 6, 4)
    assert votes.shape == (48,)
    assert not votes.any()


def test_hough_vote_clips_at_border():
    inner = hough_vote([Edge((1.0, 0.0), (10, 10))], 30, 30, 0)
    border = hough_vote([Edge((1.0, 0.0), (0, 0))], 30, 30, 0)
    assert int(border.sum()) < int(inner.sum())


def test_find_edges_on_uniform_image_is_empty():
    channel = np.full(48, 0.3, dtype=np.float32)
    assert find_edges(channel, channel, channel, 8, 6) == []


def test_find_edges_on_step():
    grid = np.zeros((6, 10), dtype=np.float32)
    grid[:, 5:] = 1.0
    channel = grid.reshape(-1)
    edges = find_edges(channel, channel, channel, 10, 6)
    locations = [edge.location for edge in edges]
    xs = {x for x, _ in locations}
    assert {4, 5} <= xs
    assert min(xs) >= 4
    assert locations == sorted(locations)
    for edge in edges:
        dx, dy = edge.direction
        assert dx >= 0 and dy >= 0
        assert dx * dx + dy * dy == pytest.approx(1.0, abs=1e-5)


def test_detect_circles_on_empty_maps():
    assert detect_circles([np.zeros(100, dtype=np.uint8)], [4], 10, 10) == []


def test_detect_circles_finds_single_peak():
    votes = np.zeros((20, 20), dtype=np.uint8)
    votes[9, 6] = 100
    assert detect_circles([votes.reshape(-1)], [4], 20, 20) == [Circle(6, 9, 4, 100)]


def test_detect_circles_keeps_rightmost_of_tied_peaks():
    votes = np.zeros((20, 20), dtype=np.uint8)
    votes[5, 5] = 100
    votes[5, 7] = 100
    assert detect_circles([votes.reshape(-1)], [4], 20, 20) == [Circle(7, 5, 4, 100)]


def test_detect_circles_ignores_busy_neighbourhood():
    votes = np.full((20, 20), 50, dtype=np.uint8)
    votes[10, 10] = 100
    assert detect_circles([votes.reshape(-1)], [4], 20, 20) == []


def test_detect_circles_needs_a_map_per_radius():
    with pytest.raises(ValueError):
        detect_circles([np.zeros(4, dtype=np.uint8)], [4, 5], 2, 2)