"""Tests for splitting images into planes and packing them back."""

import numpy as np
import pytest

from entropymap.codec import (
    ARGB32, GRAYSCALE8, GRAYSCALE16, RGB32, Image,
    decompose, image_from_array, image_to_array, recombine, recombine_grayscale, recombine_rgb, reduce_to_8bit,
)
from entropymap.plane import PixelPlane


def random_rgb32(shape, seed=0):
    rng = np.random.default_rng(seed)
    rgb = rng.integers(0, 1 << 24, size=shape, dtype=np.uint32)
    return Image(rgb | np.uint32(0xff000000), RGB32)


def test_decompose_grayscale_gives_one_plane():
    pixels = np.arange(12, dtype=np.uint8).reshape(3, 4)
    planes = decompose(Image(pixels, GRAYSCALE8))

    assert len(planes) == 1
    assert np.array_equal(planes[0].array, pixels)


def test_decompose_reads_channel_bytes_unscaled():
    image = Image(np.array([[0xff123456, 0xff00ff80]], dtype=np.uint32), RGB32)
    red, green, blue = decompose(image)

    assert red.array.tolist() == [[0x12, 0x00]]
    assert green.array.tolist() == [[0x34, 0xff]]
    assert blue.array.tolist() == [[0x56, 0x80]]


def test_decompose_recombine_round_trip_is_exact():
    image = random_rgb32((7, 5))
    result = recombine(decompose(image), image.format)

    assert result.format == RGB32
    assert np.array_equal(result.pixels, image.pixels)


def test_recombine_grayscale_reads_back_as_opaque_gray():
    plane = PixelPlane(2, 1, [0x00, 0x7f])
    image = recombine_grayscale(plane)

    assert image.format == GRAYSCALE8
    assert image.to_argb32().tolist() == [[0xff000000, 0xff7f7f7f]]


def test_recombine_rgb_sets_full_opacity():
    red = PixelPlane(1, 1, [1])
    green = PixelPlane(1, 1, [2])
    blue = PixelPlane(1, 1, [3])

    image = recombine_rgb(red, green, blue, ARGB32)

    assert image.format == ARGB32
    assert image.pixels.tolist() == [[0xff010203]]


def test_recombine_rejects_mismatched_planes():
    with pytest.raises(AssertionError):
        recombine_rgb(PixelPlane(2, 2), PixelPlane(2, 3), PixelPlane(2, 2))


def test_grayscale16_rounds_to_nearest_8_bit_value_and_widens_back():
    pixels = np.array([[0x0000, 0x0080, 0x0081, 0x01ff, 0xffff]], dtype=np.uint16)
    (plane,) = decompose(Image(pixels, GRAYSCALE16))

    assert plane.array.tolist() == [[0, 0, 1, 2, 255]]
    assert recombine([plane], GRAYSCALE16).pixels.tolist() == [[0, 0, 257, 514, 0xffff]]


def test_reduce_to_8bit_inverts_widening():
    values = np.arange(256, dtype=np.uint16)

    assert np.array_equal(reduce_to_8bit(values * 257), values)


def test_grayscale16_packed_view_uses_rounded_value():
    image = Image(np.array([[0x01ff]], dtype=np.uint16), GRAYSCALE16)

    assert image.to_argb32().tolist() == [[0xff020202]]


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        Image(np.zeros((2, 2)), "CMYK")


def test_array_conversion_round_trips():
    rng = np.random.default_rng(3)
    rgb = rng.integers(0, 256, size=(4, 6, 3), dtype=np.uint8)
    rgba = rng.integers(0, 256, size=(4, 6, 4), dtype=np.uint8)
    gray = rng.integers(0, 256, size=(4, 6), dtype=np.uint8)

    assert image_from_array(rgb).format == RGB32
    assert image_from_array(rgba).format == ARGB32
    assert image_from_array(gray).format == GRAYSCALE8
    assert np.array_equal(image_to_array(image_from_array(rgb)), rgb)
    assert np.array_equal(image_to_array(image_from_array(rgba)), rgba)
    assert np.array_equal(image_to_array(image_from_array(gray)), gray)


def test_image_from_array_rejects_unsupported_layouts():
    with pytest.raises(ValueError):
        image_from_array(np.zeros((4, 4, 2), dtype=np.uint8))
    with pytest.raises(ValueError):
        image_from_array(np.zeros((4, 4, 3), dtype=np.float32))
    with pytest.raises(ValueError):
        image_from_array(np.zeros((4, 4), dtype=np.float64))
