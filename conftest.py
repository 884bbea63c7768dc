from io import BytesIO

import numpy as np
import pytest
from PIL import Image as PILImage

from models.image import Image


def encode_png(pixels: np.ndarray) -> bytes:
    buffer = BytesIO()
    PILImage.fromarray(pixels).save(buffer, format="PNG")
    return buffer.getvalue()


def decode_png(data: bytes) -> PILImage.Image:
    pil = PILImage.open(BytesIO(data))
    pil.load()
    return pil


def solid(width: int, height: int, color=(255, 255, 255)) -> np.ndarray:
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[:, :] = color
    return pixels


@pytest.fixture
def document_pixels() -> np.ndarray:
    """
    700x500 white page with noisy "photos" in a few cells of a 7x5 grid
    (cells are 100x100).
    """
    rng = np.random.default_rng(0)
    pixels = solid(700, 500)
    for col, row in [(0, 0), (3, 1), (6, 4), (2, 3)]:
        noise = rng.integers(0, 256, size=(100, 100, 3), dtype=np.uint8)
        pixels[row * 100:(row + 1) * 100, col * 100:(col + 1) * 100] = noise
    return pixels


@pytest.fixture
def document(document_pixels) -> Image:
    return Image(pixels=document_pixels)


@pytest.fixture
def document_png(document_pixels) -> bytes:
    return encode_png(document_pixels)
