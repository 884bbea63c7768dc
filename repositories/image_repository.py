from io import BytesIO
from pathlib import Path
from typing import Union
import math
import numpy as np
import cv2
from PIL import Image as PILImage
from models.image import Image


class ImageRepository:
    """
    Handles decoding, encoding and pixel copies for Image entities.
    Every method returns new arrays; input pixels are never written to.
    """

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> Image:
        if path is None:
            return Image(pixels)
        return Image(pixels=pixels, path=Path(path))

    @staticmethod
    def _to_rgb(arr: np.ndarray, keep_alpha: bool) -> np.ndarray:
        if arr.ndim == 2:
            return cv2.cvtColor(arr, cv2.COLOR_GRAY2RGB)
        if arr.shape[2] == 4:
            if keep_alpha:
                return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
            return cv2.cvtColor(arr, cv2.COLOR_BGRA2RGB)
        return arr[:, :, ::-1].copy()

    def decode(self, data: bytes, keep_alpha: bool = False) -> Image:
        """Decode raw bytes (PNG/JPEG/...) into an RGB or RGBA Image."""
        buf = np.frombuffer(data, dtype=np.uint8)
        flags = cv2.IMREAD_UNCHANGED if keep_alpha else cv2.IMREAD_COLOR
        arr = cv2.imdecode(buf, flags) if buf.size else None
        if arr is None:
            raise ValueError("Bytes could not be decoded as an image")
        return Image(pixels=self._to_rgb(arr, keep_alpha))

    def load(self, path: Union[str, Path], keep_alpha: bool = False) -> Image:
        path = Path(path)
        flags = cv2.IMREAD_UNCHANGED if keep_alpha else cv2.IMREAD_COLOR
        arr = cv2.imread(str(path), flags)
        if arr is None:
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        return Image(pixels=self._to_rgb(arr, keep_alpha), path=path)

    @staticmethod
    def retrieve_image_dimensions(img: Image):
        return img.pixels.shape[:2]

    @staticmethod
    def crop(img: Image, x: int, y: int, width: int, height: int) -> np.ndarray:
        img_h, img_w = img.pixels.shape[:2]
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid crop size {width}x{height}")
        if x < 0 or y < 0 or x + width > img_w or y + height > img_h:
            raise ValueError(
                f"Crop ({x},{y},{width},{height}) outside image {img_w}x{img_h}"
            )
        return img.pixels[y:y + height, x:x + width].copy()

    @staticmethod
    def cover(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
        """
        Scale *pixels* so they fill (width, height) completely, then centre-crop
        the overflow. Aspect ratio is preserved; nothing is letterboxed.
        """
        src_h, src_w = pixels.shape[:2]
        scale = max(width / src_w, height / src_h)
        new_w = max(width, math.ceil(src_w * scale))
        new_h = max(height, math.ceil(src_h * scale))
        interpolation = cv2.INTER_AREA if scale < 1 else cv2.INTER_LINEAR
        resized = cv2.resize(pixels, (new_w, new_h), interpolation=interpolation)
        left = (new_w - width) // 2
        top = (new_h - height) // 2
        return resized[top:top + height, left:left + width].copy()

    @staticmethod
    def resize(pixels: np.ndarray, width: int, height: int) -> np.ndarray:
        src_h, src_w = pixels.shape[:2]
        interpolation = cv2.INTER_AREA if width * height < src_w * src_h else cv2.INTER_LINEAR
        return cv2.resize(pixels, (width, height), interpolation=interpolation)

    @staticmethod
    def encode_png(pil_image: PILImage.Image) -> bytes:
        buffer = BytesIO()
        pil_image.save(buffer, format="PNG")
        return buffer.getvalue()

    @staticmethod
    def save_bytes(data: bytes, path: Union[str, Path]) -> None:
        Path(path).write_bytes(data)
