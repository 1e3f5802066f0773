# entropymap/utils.py
import os
import re

import cv2 as cv
import matplotlib.pyplot as plt
import numpy as np
import seaborn as sns
import tifffile as tiff

from entropymap.codec import GRAYSCALE16, image_from_array, image_to_array, reduce_to_8bit

IMAGE_EXTENSIONS = (".bmp", ".gif", ".jpg", ".jpeg", ".png", ".tif", ".tiff")
TIFF_EXTENSIONS = (".tif", ".tiff")
# formats OpenCV reads but cannot always write; their entropy maps are saved as PNG
READ_ONLY_EXTENSIONS = (".gif",)


def sorted_nicely(l):
    """Sort the given iterable in human order."""
    convert = lambda text: int(text) if text.isdigit() else text
    alphanum_key = lambda key: [ convert(c) for c in re.split('([0-9]+)', key) ]
    return sorted(l, key=alphanum_key)


def is_image_file(path):
    return os.path.splitext(path)[1].lower() in IMAGE_EXTENSIONS


def output_name(name):
    """
    Name of the file an entropy map of `name` is saved under.
    """
    base, ext = os.path.splitext(name)
    if ext.lower() in READ_ONLY_EXTENSIONS:
        return base + ".png"
    return name


def get_image_pairs(input_path, output_path):
    """
    Pair every input image with the path its entropy map is written to.

    A single file maps to output_path as given. A folder maps each image inside,
    in natural order, to a file of the same name in the output folder.
    """
    if not os.path.isdir(input_path):
        return [(input_path, output_path)]

    os.makedirs(output_path, exist_ok=True)
    names = sorted_nicely([n for n in os.listdir(input_path) if is_image_file(n)])
    return [(os.path.join(input_path, n), os.path.join(output_path, output_name(n))) for n in names]


def load_image(image_path):
    """
    Load an image from the given path as an Image.

    TIFF files are read with tifffile, everything else with OpenCV. 16-bit
    grayscale stays 16-bit, 16-bit color is scaled to 8 bits the same way the
    grayscale planes are. Any other data type is normalized to the range [0, 255].
    """
    if image_path.lower().endswith(TIFF_EXTENSIONS):
        array = tiff.imread(image_path)
    else:
        array = cv.imread(image_path, cv.IMREAD_UNCHANGED)
        if array is not None and array.ndim == 3:
            code = cv.COLOR_BGRA2RGBA if array.shape[2] == 4 else cv.COLOR_BGR2RGB
            array = cv.cvtColor(array, code)
    if array is None:
        raise ValueError(f"Image at {image_path} could not be loaded.")

    # drop a trailing singleton channel axis
    if array.ndim == 3 and array.shape[2] == 1:
        array = array[:, :, 0]
    if array.ndim == 3 and array.dtype == np.uint16:
        array = reduce_to_8bit(array)
    elif array.dtype not in (np.uint8, np.uint16):
        array = cv.normalize(array, None, 0, 255, cv.NORM_MINMAX).astype('uint8')

    try:
        return image_from_array(array)
    except ValueError as e:
        raise ValueError(f"Image at {image_path} has an unsupported layout: {e}") from e


def save_image(image, image_path):
    """
    Save an Image to the given path, using tifffile for TIFF and OpenCV otherwise.
    """
    array = image_to_array(image)
    if image_path.lower().endswith(TIFF_EXTENSIONS):
        tiff.imwrite(image_path, array)
        return

    if array.ndim == 3:
        code = cv.COLOR_RGBA2BGRA if array.shape[2] == 4 else cv.COLOR_RGB2BGR
        array = cv.cvtColor(array, code)
    try:
        ok = cv.imwrite(image_path, array)
    except cv.error as e:
        raise ValueError(f"Image could not be saved to {image_path}: {e}") from e
    if not ok:
        raise ValueError(f"Image could not be saved to {image_path}.")


def _display_array(image):
    array = image_to_array(image)
    if image.format == GRAYSCALE16:
        array = reduce_to_8bit(array)
    return array


def plot_entropy_image(image, entropy_image, title="Local entropy"):
    """
    Show an image next to its entropy map.
    """
    fig, axes = plt.subplots(1, 2, figsize=(10, 5))
    for ax, img, label in zip(axes, (image, entropy_image), ("Original", title)):
        if img.is_grayscale:
            ax.imshow(_display_array(img), cmap='gray', vmin=0, vmax=255)
        else:
            ax.imshow(_display_array(img))
        ax.set_title(label)
        ax.axis('off')
    plt.tight_layout()
    plt.show()
    return fig


def plot_entropy_histogram(entropy_image, title="Entropy score distribution"):
    """
    Plot the distribution of entropy scores, one series per channel for color images.
    """
    plt.figure(figsize=(4, 4))
    array = _display_array(entropy_image)
    if array.ndim == 2:
        ax = sns.histplot(x=array.ravel(), bins=64, color='gray')
    else:
        data = {name: array[:, :, i].ravel() for i, name in enumerate(("red", "green", "blue"))}
        ax = sns.histplot(data=data, bins=64, element='step', fill=False,
                          palette={"red": "red", "green": "green", "blue": "blue"})
    ax.set_title(title)
    ax.set_xlabel("Entropy score")
    ax.set_ylabel("Pixels")
    sns.despine()
    plt.show()
    return ax
