import numpy as np
from PIL import Image

def vec(list):
    """Handy shorthand to make a single-precision float array."""
    return np.array(list, dtype=np.float32)

def normalize(v):
    """Return a unit vector in the direction of the vector v."""
    return v / np.linalg.norm(v)

def rgb(r, g, b):
    """Make a float color from 8-bit channel values."""
    return vec([r, g, b]) / 255.0


def to_srgb(img):
    img_clip = np.clip(img, 0, 1)
    return np.where(img > 0.0031308, (1.055 * img_clip**(1/2.4) - 0.055), 12.92 * img_clip)

def to_srgb8(img):
    return np.clip(np.round(255.0 * to_srgb(img)), 0, 255).astype(np.uint8)

def to_rgb8(img):
    """Scale a [0,1] float image to bytes without any gamma encoding."""
    return np.clip(np.round(255.0 * np.asarray(img)), 0, 255).astype(np.uint8)

def to_pil_image(img8):
    """Wrap an (ny, nx, 3) uint8 buffer in a PIL image for the host application.

    Empty buffers have no PIL representation and come back as None.
    """
    if img8.size == 0:
        return None
    return Image.fromarray(img8)
