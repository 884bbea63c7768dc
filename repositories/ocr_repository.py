from io import BytesIO
from PIL import Image as PILImage
from models.ocr_engine import OcrEngine


class OcrRepository:
    """
    Thin wrapper around OcrEngine that provides raw text detection on encoded bytes.
    """

    def __init__(self):
        self.engine = OcrEngine()  # Singleton is handled inside

    def detect_text(self, data: bytes) -> str:
        with PILImage.open(BytesIO(data)) as pil_image:
            return self.engine.detect_text(pil_image.convert("RGB"))
