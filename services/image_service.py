from __future__ import annotations

from pathlib import Path
from typing import Union
import numpy as np
import cv2
from PIL import Image as PILImage
from models.image import Image
from models.region import Region
from models.errors import RegionExtractionError
from repositories.image_repository import ImageRepository


class ImageService:
    """I/O and pixel helpers. No layout logic, no OCR imports."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: str | Path, keep_alpha: bool = False) -> Image:
        """Load a single image from disk into an Image object."""
        return self.image_repository.load(path, keep_alpha=keep_alpha)

    def decode(self, data: bytes, keep_alpha: bool = False) -> Image:
        return self.image_repository.decode(data, keep_alpha=keep_alpha)

    def get_image_dimensions(self, img: Image):
        return self.image_repository.retrieve_image_dimensions(img)

    @staticmethod
    def luminance(img_pixels: np.ndarray) -> np.ndarray:
        """
        Per-pixel luminance round(0.299R + 0.587G + 0.114B) as int64,
        rounding halves up.
        """
        rgb = img_pixels[:, :, :3].astype(np.float64)
        lum = 0.299 * rgb[:, :, 0] + 0.587 * rgb[:, :, 1] + 0.114 * rgb[:, :, 2]
        return np.floor(lum + 0.5).astype(np.int64)

    def crop_region(self, img: Image, region: Region) -> np.ndarray:
        """
        Copy the pixels under *region*.

        Raises:
            RegionExtractionError: if the rectangle is empty, out of bounds
                or has non-integer coordinates.
        """
        try:
            return self.image_repository.crop(img, region.x, region.y, region.width, region.height)
        except (ValueError, TypeError) as e:
            raise RegionExtractionError(f"Bad region {region}: {e}") from e

    def thumbnail(self, img: Image, region: Region, width: int, height: int) -> np.ndarray:
        """Crop *region* and cover-resize it to (width, height)."""
        pixels = self.crop_region(img, region)
        try:
            return self.image_repository.cover(pixels, width, height)
        except (cv2.error, ValueError, ZeroDivisionError) as e:
            raise RegionExtractionError(f"Could not resize region {region}: {e}") from e

    def resize(self, img: Image, width: int, height: int) -> Image:
        """Return a *new* Image resized to exactly (width, height)."""
        return self.create_image(self.image_repository.resize(img.pixels, width, height), img.path)

    def to_pil_image(self, img: Image) -> PILImage.Image:
        """
        Convert Image.pixels → PIL Image object.
        Ensures the NumPy array is C-contiguous.
        """
        np_img = img.pixels
        if not np_img.flags['C_CONTIGUOUS']:
            np_img = np.ascontiguousarray(np_img)

        return PILImage.fromarray(np_img)

    def encode_png(self, pil_image: PILImage.Image) -> bytes:
        return self.image_repository.encode_png(pil_image)

    def save_bytes(self, data: bytes, path: Union[str, Path]) -> None:
        self.image_repository.save_bytes(data, path)
