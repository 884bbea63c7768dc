import logging

from models.errors import TextExtractionError
from repositories.ocr_repository import OcrRepository

logger = logging.getLogger(__name__)


class OcrService:
    """
    Business logic layer for text extraction.
    Never raises: an OCR failure is reported as empty text.
    """

    def __init__(self, repository: OcrRepository = None):
        self._repository = repository

    @property
    def repository(self) -> OcrRepository:
        # Created on first use so the server can start without tesseract installed
        if self._repository is None:
            self._repository = OcrRepository()
        return self._repository

    def _detect(self, data: bytes) -> str:
        try:
            return self.repository.detect_text(data)
        except Exception as e:
            raise TextExtractionError(f"OCR failed: {e}") from e

    def extract_text(self, data: bytes) -> str:
        if not data:
            return ""
        try:
            text = self._detect(data)
        except TextExtractionError as e:
            logger.warning(f"{e} - continuing with empty text")
            return ""
        return (text or "").strip()
