# renderer/image.py
import logging
import math
from pathlib import Path
from typing import Union

import numpy as np
from numba import njit
from PIL import Image

logger = logging.getLogger(__name__)

# Upper bound applied before scaling to 256 so a full-intensity channel maps to 255.
INTENSITY_MAX = 0.999


class ImageWriteError(RuntimeError):
    """Raised when a rendered image cannot be persisted."""


def linear_to_byte(c: float) -> int:
    """
    Gamma-correct (gamma 2) and quantize one linear channel value to [0, 255].
    """
    if not c > 0:
        return 0
    g = math.sqrt(c)
    return int(256 * min(max(g, 0.0), INTENSITY_MAX))


@njit
def quantize_kernel(linear_image, output_image):
    """
    Per-pixel gamma correction and quantization of a (H, W, 3) linear image
    into a preallocated uint8 buffer of the same shape.
    """
    height, width, channels = linear_image.shape
    for y in range(height):
        for x in range(width):
            for k in range(channels):
                c = linear_image[y, x, k]
                # NaN and non-positive values fall through to 0
                if c > 0.0:
                    g = math.sqrt(c)
                    if g > INTENSITY_MAX:
                        g = INTENSITY_MAX
                    output_image[y, x, k] = int(256.0 * g)
                else:
                    output_image[y, x, k] = 0


def quantize(image: np.ndarray) -> np.ndarray:
    """
    Convert an averaged linear image of shape (H, W, 3) into 8-bit values.
    """
    linear = np.ascontiguousarray(image, dtype=np.float64)
    if linear.ndim != 3 or linear.shape[2] != 3:
        raise ValueError(f"Expected an image of shape (H, W, 3), got {linear.shape}")
    output = np.zeros(linear.shape, dtype=np.uint8)
    quantize_kernel(linear, output)
    return output


def write_ppm(path: Union[str, Path], pixels: np.ndarray, binary: bool = False) -> None:
    """
    Write 8-bit pixels of shape (H, W, 3) as a PPM file.

    The text form (P3) carries one "r g b" line per pixel in row-major order;
    the binary form (P6) carries the raw bytes.
    """
    height, width = pixels.shape[0], pixels.shape[1]
    tag = "P6" if binary else "P3"
    header = f"{tag}\n{width} {height}\n255\n"
    try:
        if binary:
            with open(path, "wb") as f:
                f.write(header.encode("ascii"))
                f.write(np.ascontiguousarray(pixels, dtype=np.uint8).tobytes())
        else:
            lines = [header]
            for r, g, b in pixels.reshape(-1, 3):
                lines.append(f"{r} {g} {b}\n")
            with open(path, "w") as f:
                f.writelines(lines)
    except OSError as e:
        raise ImageWriteError(f"Cannot write image to {path}: {e}") from e


def save_image(path: Union[str, Path], image: np.ndarray, binary: bool = False) -> Path:
    """
    Quantize an averaged linear image and persist it. .ppm files are written
    directly, any other suffix is handed to Pillow.
    """
    path = Path(path)
    pixels = quantize(image)
    if path.suffix.lower() in (".ppm", ""):
        write_ppm(path, pixels, binary=binary)
    else:
        try:
            Image.fromarray(pixels).save(path)
        except (OSError, ValueError) as e:
            raise ImageWriteError(f"Cannot write image to {path}: {e}") from e
    logger.info("Wrote %dx%d image to %s", pixels.shape[1], pixels.shape[0], path)
    return path
