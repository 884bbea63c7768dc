from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class LayoutConfig:
    """
    Value-object holding every pixel offset, size and count the composite
    builder uses. Derived values (thumbnail cell size, text column width)
    are exposed as properties so tuning the base numbers stays consistent.
    """
    # ── Canvas ───────────────────────────────────────────────────────
    output_width:  int = 1080
    output_height: int = 1920
    background_color: Tuple[int, int, int] = (9, 34, 48)     # #092230

    # ── Fonts ────────────────────────────────────────────────────────
    font_path: str | None = None
    title_font_size:   int = 64
    heading_font_size: int = 32
    body_font_size:    int = 16
    text_color: Tuple[int, int, int] = (255, 255, 255)

    # ── Title ────────────────────────────────────────────────────────
    title_template: str = "ÁRBOL GENEALÓGICO - {label}"
    title_x: int = 48
    title_y: int = 40

    # ── Thumbnail grid ───────────────────────────────────────────────
    split_ratio:      float = 0.52     # share of the width given to text
    thumbs_top:       int = 150
    thumbs_right_margin: int = 48
    thumb_columns:    int = 3
    thumb_gap:        int = 12
    thumb_aspect:     float = 1.05     # cell height / cell width
    max_thumbnails:   int = 30

    # ── OCR text ─────────────────────────────────────────────────────
    text_x:           int = 48
    text_top:         int = 150
    text_columns:     int = 2
    text_column_gap:  int = 24
    line_height:      int = 26
    text_bottom_margin: int = 300

    # ── Logo ─────────────────────────────────────────────────────────
    logo_width:        int = 220
    logo_right_margin: int = 36
    logo_top:          int = 30

    # ── Footer ───────────────────────────────────────────────────────
    footer_heading: str = "Consulta PE • Información reconstruida"
    footer_note:    str = "Generado automáticamente. No es documento oficial."
    footer_heading_offset: int = 140   # from the bottom edge
    footer_note_offset:    int = 100

    @property
    def size(self) -> Tuple[int, int]:
        return self.output_width, self.output_height

    @property
    def thumbs_x(self) -> int:
        return int(self.output_width * self.split_ratio) + 16

    @property
    def thumb_width(self) -> int:
        area = self.output_width - self.thumbs_x - self.thumbs_right_margin
        return (area - (self.thumb_columns - 1) * self.thumb_gap) // self.thumb_columns

    @property
    def thumb_height(self) -> int:
        return int(self.thumb_width * self.thumb_aspect)

    def thumb_position(self, index: int) -> Tuple[int, int]:
        """Top-left corner of the *index*-th thumbnail cell."""
        col = index % self.thumb_columns
        row = index // self.thumb_columns
        x = self.thumbs_x + col * (self.thumb_width + self.thumb_gap)
        y = self.thumbs_top + row * (self.thumb_height + self.thumb_gap)
        return x, y

    @property
    def text_width(self) -> int:
        return int(self.output_width * self.split_ratio) - 96

    @property
    def text_column_width(self) -> int:
        return (self.text_width - self.text_column_gap) // self.text_columns

    @property
    def text_bottom(self) -> int:
        return self.output_height - self.text_bottom_margin
