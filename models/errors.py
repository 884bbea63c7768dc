class ProcessingError(Exception):
    """Base class for anything that fails a recomposition request."""


class AssetUnavailableError(ProcessingError):
    """Source document or background template could not be fetched/decoded."""


class RegionExtractionError(ProcessingError):
    """A single region could not be cropped/resized. Recovered by skipping it."""


class TextExtractionError(ProcessingError):
    """OCR failed. Recovered by continuing with empty text."""


class EncodingError(ProcessingError):
    """The final canvas could not be serialised."""


class OutputWriteError(ProcessingError):
    """The finished poster could not be written to the public directory."""
