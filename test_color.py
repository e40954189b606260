"""
Tests for color distance, saturation and the hex codec.

Usage:
    pytest test_color.py
"""

import numpy as np
import pytest

from knitpattern.processors.color import (
    color_distance_sq,
    color_distance_sq_matrix,
    hex_to_rgb,
    parse_seed_colors,
    rgb_to_hex,
    saturation,
)


def test_distance_weights_channels_by_luminance():
    assert color_distance_sq((0, 0, 0), (10, 0, 0)) == pytest.approx(30.0)
    assert color_distance_sq((0, 0, 0), (0, 10, 0)) == pytest.approx(59.0)
    assert color_distance_sq((0, 0, 0), (0, 0, 10)) == pytest.approx(11.0)


def test_distance_is_symmetric_and_zero_on_equal():
    a = (12, 200, 77)
    b = (250, 3, 128)
    assert color_distance_sq(a, a) == 0
    assert color_distance_sq(a, b) == pytest.approx(color_distance_sq(b, a))


def test_distance_reads_only_rgb_of_pixel_rows():
    assert color_distance_sq((1, 2, 3, 40, 50), (1, 2, 3, 0, 0)) == 0


def test_distance_matrix_matches_scalar():
    colors = np.array([[0, 0, 0, 5, 5], [255, 128, 7, 1, 2], [9, 9, 9, 0, 0]])
    centers = np.array([[255, 0, 0], [0, 255, 0]])

    matrix = color_distance_sq_matrix(colors, centers)

    assert matrix.shape == (3, 2)
    for i, c in enumerate(colors):
        for j, center in enumerate(centers):
            assert matrix[i, j] == pytest.approx(color_distance_sq(c, center))


def test_saturation():
    sat = saturation(np.array([[255, 0, 0], [10, 10, 10], [100, 200, 151]]))
    assert sat == pytest.approx([1.0, 0.0, 100 / 255])


def test_rgb_to_hex_is_uppercase_and_padded():
    assert rgb_to_hex((255, 0, 171)) == "#FF00AB"
    assert rgb_to_hex((0, 0, 0)) == "#000000"
    assert rgb_to_hex((1, 2, 3)) == "#010203"


def test_hex_to_rgb_accepts_optional_hash_and_any_case():
    assert hex_to_rgb("#ff00ab") == (255, 0, 171)
    assert hex_to_rgb("FF00AB") == (255, 0, 171)
    assert hex_to_rgb(" #010203 ") == (1, 2, 3)


def test_hex_round_trip():
    for rgb in [(0, 0, 0), (255, 255, 255), (200, 30, 30), (18, 52, 86)]:
        assert hex_to_rgb(rgb_to_hex(rgb)) == rgb


@pytest.mark.parametrize("bad", ["", "#", "#FFF", "GGGGGG", "#1234567", "12 456", None])
def test_hex_to_rgb_rejects_malformed(bad):
    with pytest.raises(ValueError):
        hex_to_rgb(bad)


def test_parse_seed_colors_splits_and_keeps_order():
    colors = parse_seed_colors(["#FF0000, 00ff00", "#0000FF"])
    assert colors == [(255, 0, 0), (0, 255, 0), (0, 0, 255)]


def test_parse_seed_colors_single_string_and_empty():
    assert parse_seed_colors("#C81E1E") == [(200, 30, 30)]
    assert parse_seed_colors("") == []
    assert parse_seed_colors([]) == []


def test_parse_seed_colors_rejects_bad_entry():
    with pytest.raises(ValueError):
        parse_seed_colors(["#FF0000", "red"])
