from __future__ import annotations
import os
import logging

import pytesseract
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class OcrEngine:
    """
    Singleton wrapper around the Tesseract binary (through pytesseract).

    Resolves the binary path and language once per process and exposes
    a single text-detection call.
    """

    _instance: OcrEngine | None = None  # Class-level cache for singleton

    def __new__(cls, *args, **kwargs):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._init_engine(*args, **kwargs)
        return cls._instance

    def _init_engine(self, tesseract_cmd: str = None, lang: str = None):
        """
        Args:
            tesseract_cmd (str): Path to the tesseract executable. Defaults to env var.
            lang (str): Tesseract language codes, e.g. "spa+eng". Defaults to env var.
        """
        tesseract_cmd = tesseract_cmd or os.getenv("TESSERACT_CMD")
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.lang = lang or os.getenv("OCR_LANG", "spa+eng")
        self.timeout = int(os.getenv("OCR_TIMEOUT", "60"))
        logger.info(f"OcrEngine ready (lang={self.lang}, cmd={pytesseract.pytesseract.tesseract_cmd})")

    def detect_text(self, pil_image) -> str:
        return pytesseract.image_to_string(pil_image, lang=self.lang, timeout=self.timeout)
