from __future__ import annotations

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image as PILImage, ImageDraw, ImageFont

from models.image import Image
from models.region import Region
from models.layout_config import LayoutConfig
from models.errors import AssetUnavailableError, EncodingError, RegionExtractionError
from services.image_service import ImageService

logger = logging.getLogger(__name__)


def wrap_line(line: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """
    Greedy word wrap. A break happens when appending the next word would make
    the line wider than *max_width*; a single word wider than that still gets
    its own line.
    """
    wrapped: List[str] = []
    current = ""
    for word in line.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            wrapped.append(current)
            current = word
        else:
            current = candidate
    if current:
        wrapped.append(current)
    return wrapped


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> List[str]:
    """Wrap every non-blank input line; blank lines are dropped."""
    lines: List[str] = []
    for raw in text.splitlines():
        if raw.strip():
            lines.extend(wrap_line(raw, max_width, measure))
    return lines


class CompositeBuilderService:
    """
    Assembles the final poster:
        background → logo → title → thumbnail grid → OCR text → footer.

    *   Pure function of its inputs; the caller's Image objects are not touched.
    *   Decoration failures (logo, fonts, single regions) are logged and skipped.
    *   Only a missing canvas or a failed PNG encode aborts the build.
    """

    def __init__(self, config: LayoutConfig = None, image_service: ImageService = None):
        self.config = config or LayoutConfig()
        self.image_service = image_service or ImageService()
        self._fonts: Dict[Tuple[Optional[str], int], ImageFont.ImageFont] = {}

    # ─── Fonts ─────────────────────────────────────────────────────
    def _font(self, path: Optional[str], size: int):
        key = (path, size)
        if key not in self._fonts:
            font = None
            if path:
                try:
                    font = ImageFont.truetype(path, size)
                except OSError as e:
                    logger.warning(f"Font {path} unavailable ({e}); using default font")
            self._fonts[key] = font or ImageFont.load_default(size=size)
        return self._fonts[key]

    # ─── Layers ────────────────────────────────────────────────────
    def _create_canvas(self, config: LayoutConfig, background: Optional[Image]) -> PILImage.Image:
        if background is not None:
            try:
                fitted = self.image_service.resize(background, *config.size)
                return self.image_service.to_pil_image(fitted).convert("RGB")
            except Exception as e:
                logger.warning(f"Background template unusable ({e}); using solid color")
        try:
            return PILImage.new("RGB", config.size, config.background_color)
        except (ValueError, TypeError) as e:
            raise AssetUnavailableError(f"Could not create {config.size} canvas: {e}") from e

    def _paste_logo(self, canvas: PILImage.Image, logo: Optional[Image], config: LayoutConfig) -> None:
        if logo is None:
            return
        try:
            logo_h = max(1, round(logo.height * config.logo_width / logo.width))
            resized = self.image_service.resize(logo, config.logo_width, logo_h)
            pil_logo = self.image_service.to_pil_image(resized)
            x = config.output_width - config.logo_width - config.logo_right_margin
            mask = pil_logo if pil_logo.mode == "RGBA" else None
            canvas.paste(pil_logo, (x, config.logo_top), mask)
        except Exception as e:
            logger.warning(f"Skipping logo: {e}")

    def _paste_thumbnails(self,
                          canvas: PILImage.Image,
                          source: Image,
                          regions: Sequence[Region],
                          config: LayoutConfig) -> int:
        cell_w, cell_h = config.thumb_width, config.thumb_height
        placed = 0
        for i, region in enumerate(regions[:config.max_thumbnails]):
            try:
                thumb = self.image_service.thumbnail(source, region, cell_w, cell_h)
                canvas.paste(PILImage.fromarray(thumb[:, :, :3]), config.thumb_position(i))
            except (RegionExtractionError, ValueError) as e:
                logger.warning(f"Skipping region {i}: {e}")
                continue
            placed += 1
        return placed

    def _draw_text_columns(self, draw: ImageDraw.ImageDraw, text: str, font, config: LayoutConfig) -> int:
        """
        Flow wrapped lines down the text columns. Returns how many lines were
        drawn; anything that does not fit in the last column is dropped.
        """
        col_w = config.text_column_width
        lines = wrap_text(text, col_w, lambda s: draw.textlength(s, font=font))
        col, y, drawn = 0, config.text_top, 0
        for line in lines:
            if y + config.line_height > config.text_bottom:
                col += 1
                y = config.text_top
                if col >= config.text_columns:
                    logger.info(f"OCR text truncated: {len(lines) - drawn} lines dropped")
                    break
            x = config.text_x + col * (col_w + config.text_column_gap)
            draw.text((x, y), line, font=font, fill=config.text_color)
            y += config.line_height
            drawn += 1
        return drawn

    def _encode(self, canvas: PILImage.Image) -> bytes:
        try:
            return self.image_service.encode_png(canvas)
        except (OSError, ValueError) as e:
            raise EncodingError(f"Could not encode PNG: {e}") from e

    # ─── Public API ────────────────────────────────────────────────
    def build(self,
              source: Image,
              text: str,
              regions: Sequence[Region],
              label: str,
              config: LayoutConfig = None,
              background: Optional[Image] = None,
              logo: Optional[Image] = None) -> bytes:
        """
        Args:
            source: decoded document image the regions refer to.
            text: OCR text; may be empty.
            regions: ranked regions from the scanner.
            label: identifier shown in the title.
            config: layout override; defaults to the service's config.
            background: cached template, or None for the solid-color canvas.
            logo: optional decoration pasted top-right.

        Returns:
            PNG bytes of a config.output_width × config.output_height image.
        """
        config = config or self.config
        canvas = self._create_canvas(config, background)
        draw = ImageDraw.Draw(canvas)

        self._paste_logo(canvas, logo, config)

        title_font = self._font(config.font_path, config.title_font_size)
        draw.text((config.title_x, config.title_y),
                  config.title_template.format(label=label),
                  font=title_font, fill=config.text_color)

        placed = self._paste_thumbnails(canvas, source, regions, config)

        body_font = self._font(config.font_path, config.body_font_size)
        drawn = self._draw_text_columns(draw, text or "", body_font, config)

        heading_font = self._font(config.font_path, config.heading_font_size)
        draw.text((config.text_x, config.output_height - config.footer_heading_offset),
                  config.footer_heading, font=heading_font, fill=config.text_color)
        draw.text((config.text_x, config.output_height - config.footer_note_offset),
                  config.footer_note, font=body_font, fill=config.text_color)

        logger.info(f"Composite built: {placed}/{len(regions)} thumbnails, {drawn} text lines")
        return self._encode(canvas)
