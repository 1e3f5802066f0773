# entropymap/plane.py
import numpy as np


class PixelPlane:
    """
    A single-channel height x width buffer of uint8 samples.

    Row r occupies pixels[r*width : r*width + width]. A plane is owned by one
    stage at a time; hand it to the next stage with take() rather than copying.
    """

    def __init__(self, width, height, pixels=None):
        self.width = max(0, int(width))
        self.height = max(0, int(height))
        size = self.width * self.height
        if pixels is None:
            self.pixels = np.zeros(size, dtype=np.uint8)
        else:
            pixels = np.ascontiguousarray(pixels, dtype=np.uint8).reshape(-1)
            assert pixels.size == size, f"{pixels.size} samples do not fill a {self.width}x{self.height} plane"
            self.pixels = pixels

    @classmethod
    def from_array(cls, array):
        """
        Copy a 2D array into a new plane.
        """
        array = np.asarray(array)
        assert array.ndim == 2, f"expected a 2D array, got shape {array.shape}"
        height, width = array.shape
        return cls(width, height, np.array(array, dtype=np.uint8, copy=True))

    @property
    def array(self):
        # 2D view over the same buffer
        return self.pixels.reshape(self.height, self.width)

    @property
    def shape(self):
        return (self.height, self.width)

    def row(self, y):
        """
        Return a writable view of row y, with y clamped into [0, height-1].
        """
        if self.height == 0:
            return self.pixels[:0]
        y = min(max(int(y), 0), self.height - 1)
        start = y * self.width
        return self.pixels[start:start + self.width]

    def take(self):
        """
        Move the buffer into a new plane and leave this one empty.
        """
        moved = PixelPlane.__new__(PixelPlane)
        moved.width, moved.height, moved.pixels = self.width, self.height, self.pixels
        self.width, self.height = 0, 0
        self.pixels = np.zeros(0, dtype=np.uint8)
        return moved

    def __copy__(self):
        raise TypeError("PixelPlane cannot be copied; use take() to move it")

    def __deepcopy__(self, memo):
        raise TypeError("PixelPlane cannot be copied; use take() to move it")

    def __repr__(self):
        return f"PixelPlane(width={self.width}, height={self.height})"
