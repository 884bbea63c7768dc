# pipeline/genealogy_pipeline.py
import os
import uuid
import logging
from dataclasses import replace
from datetime import datetime, timezone
from typing import List

from dotenv import load_dotenv

from models.grid_spec import GridSpec
from models.layout_config import LayoutConfig
from models.errors import AssetUnavailableError, OutputWriteError
from repositories.asset_repository import AssetRepository
from services.asset_service import AssetService
from services.image_service import ImageService
from services.ocr_service import OcrService
from services.region_scanner_service import RegionScannerService
from services.composite_builder_service import CompositeBuilderService

# ------------------------------------------------------------------
# env‑vars
load_dotenv()
REMOTE_BASE = os.getenv("REMOTE_BASE", "https://web-production-75681.up.railway.app")
AGV_PATH = os.getenv("AGV_PATH", "/agv")
SOURCE_URL_FIELDS = [f.strip() for f in os.getenv("SOURCE_URL_FIELDS", "FILE,DOCUMENT").split(",") if f.strip()]
BOT_NAME = os.getenv("BOT_NAME", "@CONSULTA_PE_BOT")

GRID_SPEC = GridSpec(
    columns=int(os.getenv("GRID_COLS", "7")),
    rows=int(os.getenv("GRID_ROWS", "5")),
    variance_threshold=float(os.getenv("THUMB_MIN_VARIANCE", "800")),
)
LAYOUT = replace(
    LayoutConfig(),
    output_width=int(os.getenv("OUTPUT_WIDTH", "1080")),
    output_height=int(os.getenv("OUTPUT_HEIGHT", "1920")),
    max_thumbnails=int(os.getenv("MAX_THUMBNAILS", "30")),
    font_path=os.getenv("FONT_PATH", "DejaVuSans.ttf") or None,
)

logger = logging.getLogger(__name__)


def resolve_source_url(payload: dict, fields: List[str] = SOURCE_URL_FIELDS) -> str:
    """
    Pick the document URL out of the upstream response. Upstream has used
    both ``urls.FILE`` and ``urls.DOCUMENT``; *fields* are tried in order.
    """
    if not isinstance(payload, dict):
        raise AssetUnavailableError(f"Upstream response is not a JSON object: {type(payload).__name__}")
    urls = payload.get("urls") or {}
    if not isinstance(urls, dict):
        raise AssetUnavailableError(f"Upstream urls is not an object: {urls!r}")
    for field in fields:
        if isinstance(urls.get(field), str) and urls[field]:
            return urls[field]
    raise AssetUnavailableError(f"Upstream response has none of urls.{'/'.join(fields)}")


def process_dni(
    dni: str,
    base_url: str,
    *,
    asset_repository: AssetRepository = AssetRepository(),
    asset_service: AssetService = AssetService(),
    image_service: ImageService = ImageService(),
    ocr_service: OcrService = OcrService(),
    scanner_service: RegionScannerService = RegionScannerService(),
    builder_service: CompositeBuilderService = CompositeBuilderService(LAYOUT),
    grid_spec: GridSpec = GRID_SPEC,
    remote_base: str = REMOTE_BASE,
    agv_path: str = AGV_PATH,
    bot_name: str = BOT_NAME,
) -> dict:
    """
    Full request flow for one DNI:
        • ask upstream for the document URL and download it
        • OCR the document (empty text on failure)
        • scan the grid for salient regions and build the composite
        • save the PNG under the public dir and return its URL
    Any ProcessingError propagates; nothing is saved in that case.
    """
    agv_url = f"{remote_base}{agv_path}"
    logger.info(f"Querying {agv_url} for DNI {dni}")
    payload = asset_repository.fetch_json(agv_url, params={"dni": dni})
    source_url = resolve_source_url(payload)

    document_bytes = asset_repository.fetch_bytes(source_url)
    ocr_text = ocr_service.extract_text(document_bytes)

    try:
        document = image_service.decode(document_bytes)
    except ValueError as e:
        raise AssetUnavailableError(f"Document at {source_url} is not an image: {e}") from e

    regions = scanner_service.scan(document, grid_spec)
    logger.info(f"DNI {dni}: {len(regions)} candidate regions, {len(ocr_text)} chars of OCR text")

    png = builder_service.build(
        document, ocr_text, regions, dni,
        background=asset_service.background(),
        logo=asset_service.logo(),
    )

    out_name = f"agv_rebrand_{dni}_{uuid.uuid4()}.png"
    try:
        image_service.save_bytes(png, asset_service.output_path(out_name))
    except OSError as e:
        raise OutputWriteError(f"Could not save {out_name}: {e}") from e

    return {
        "bot": bot_name,
        "date": datetime.now(timezone.utc).isoformat(),
        "fields": {"dni": dni},
        "message": ocr_text or f"Image processed for DNI {dni}",
        "urls": {"FILE": f"{base_url.rstrip('/')}/public/{out_name}"},
    }
