# entropymap/codec.py
from collections import namedtuple

import numpy as np

from entropymap.plane import PixelPlane

GRAYSCALE8 = "Grayscale8"
GRAYSCALE16 = "Grayscale16"
RGB32 = "RGB32"
ARGB32 = "ARGB32"

GRAYSCALE_FORMATS = (GRAYSCALE8, GRAYSCALE16)
COLOR_FORMATS = (RGB32, ARGB32)

_FORMAT_DTYPES = {
    GRAYSCALE8: np.uint8,
    GRAYSCALE16: np.uint16,
    RGB32: np.uint32,
    ARGB32: np.uint32,
}

OPAQUE = np.uint32(0xff000000)


def reduce_to_8bit(samples):
    """
    Scale 16-bit samples to 8 bits as round(v / 257), the inverse of widening with v * 257.
    """
    samples = np.asarray(samples, dtype=np.uint32)
    return ((samples + 128) // 257).astype(np.uint8)


class Image(namedtuple("Image", ["pixels", "format"])):
    """
    A decoded image buffer: a 2D array plus its pixel format.

    Grayscale formats hold one sample per pixel, the 32-bit formats hold
    packed 0xAARRGGBB values.
    """
    __slots__ = ()

    def __new__(cls, pixels, format):
        if format not in _FORMAT_DTYPES:
            raise ValueError(f"Unsupported image format: {format}")
        pixels = np.ascontiguousarray(pixels, dtype=_FORMAT_DTYPES[format])
        assert pixels.ndim == 2, f"image buffer must be 2D, got shape {pixels.shape}"
        return super().__new__(cls, pixels, format)

    @property
    def width(self):
        return self.pixels.shape[1]

    @property
    def height(self):
        return self.pixels.shape[0]

    @property
    def is_grayscale(self):
        return self.format in GRAYSCALE_FORMATS

    def to_argb32(self):
        """
        Return the packed 0xAARRGGBB view of the image. Gray value v becomes (v, v, v), fully opaque.
        """
        if self.format == GRAYSCALE8:
            v = self.pixels.astype(np.uint32)
            return OPAQUE | (v << 16) | (v << 8) | v
        if self.format == GRAYSCALE16:
            v = reduce_to_8bit(self.pixels).astype(np.uint32)
            return OPAQUE | (v << 16) | (v << 8) | v
        if self.format == RGB32:
            return self.pixels | OPAQUE
        return self.pixels.copy()


def decompose(image):
    """
    Split an image into one plane (grayscale) or three planes (R, G, B).

    Channel bytes are read straight from the packed pixels, no scaling is applied.
    16-bit grayscale is reduced to 8 bits with reduce_to_8bit.
    """
    if image.format == GRAYSCALE8:
        return [PixelPlane.from_array(image.pixels)]
    if image.format == GRAYSCALE16:
        return [PixelPlane.from_array(reduce_to_8bit(image.pixels))]

    argb = image.pixels
    red = PixelPlane.from_array((argb >> 16) & 0xff)
    green = PixelPlane.from_array((argb >> 8) & 0xff)
    blue = PixelPlane.from_array(argb & 0xff)
    return [red, green, blue]


def recombine_grayscale(plane, format=GRAYSCALE8):
    """
    Build a grayscale image from a single plane.
    """
    if format == GRAYSCALE16:
        return Image(plane.array.astype(np.uint16) * 257, GRAYSCALE16)
    return Image(plane.array.copy(), GRAYSCALE8)


def recombine_rgb(red, green, blue, format=RGB32):
    """
    Pack three planes into a fully opaque 32-bit image. The planes must have the same dimensions.
    """
    assert red.shape == green.shape == blue.shape, \
        f"channel planes differ in size: {red.shape}, {green.shape}, {blue.shape}"
    r = red.array.astype(np.uint32)
    g = green.array.astype(np.uint32)
    b = blue.array.astype(np.uint32)
    return Image(OPAQUE | (r << 16) | (g << 8) | b, format)


def recombine(planes, format=None):
    """
    Turn one or three planes back into an image.

    With no format given, one plane becomes Grayscale8 and three planes become RGB32.
    """
    if len(planes) == 1:
        return recombine_grayscale(planes[0], format or GRAYSCALE8)
    assert len(planes) == 3, f"expected 1 or 3 planes, got {len(planes)}"
    return recombine_rgb(*planes, format=format or RGB32)


def image_from_array(array):
    """
    Wrap an (H, W), (H, W, 3) or (H, W, 4) array in RGB(A) channel order as an Image.
    """
    array = np.asarray(array)
    if array.ndim == 2:
        if array.dtype == np.uint8:
            return Image(array, GRAYSCALE8)
        if array.dtype == np.uint16:
            return Image(array, GRAYSCALE16)
        raise ValueError(f"Unsupported grayscale dtype: {array.dtype}")

    if array.ndim != 3 or array.shape[2] not in (3, 4):
        raise ValueError(f"Unsupported image shape: {array.shape}")
    if array.dtype != np.uint8:
        raise ValueError(f"Color images must be uint8, got {array.dtype}")

    channels = array.astype(np.uint32)
    packed = (channels[..., 0] << 16) | (channels[..., 1] << 8) | channels[..., 2]
    if array.shape[2] == 4:
        return Image(packed | (channels[..., 3] << 24), ARGB32)
    return Image(packed | OPAQUE, RGB32)


def image_to_array(image):
    """
    Inverse of image_from_array: grayscale images come back 2D, RGB32 as (H, W, 3), ARGB32 as (H, W, 4).
    """
    if image.is_grayscale:
        return image.pixels.copy()

    argb = image.pixels
    channels = [(argb >> 16) & 0xff, (argb >> 8) & 0xff, argb & 0xff]
    if image.format == ARGB32:
        channels.append((argb >> 24) & 0xff)
    return np.stack(channels, axis=-1).astype(np.uint8)
