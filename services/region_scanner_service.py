import logging
from typing import List

import numpy as np

from models.image import Image
from models.region import Region
from models.grid_spec import GridSpec
from services.image_service import ImageService

logger = logging.getLogger(__name__)


class RegionScannerService:
    """
    Guesses which cells of a fixed grid hold a photograph.

    • Splits the image into columns × rows cells of floor(W/columns) ×
      floor(H/rows) pixels; the right/bottom remainder strip is ignored.
    • Scores each cell by population variance of its luminance.
    • Keeps cells at or above the threshold, highest variance first.
      Ties keep row-major cell order.
    """

    def __init__(self, image_service: ImageService = None):
        self.image_service = image_service or ImageService()

    @staticmethod
    def _cell_variances(lum: np.ndarray, grid: GridSpec, cell_w: int, cell_h: int) -> np.ndarray:
        """
        Returns (rows, columns) float64 variances, computed as
        mean(L²) - mean(L)² over each cell.
        """
        used = lum[:grid.rows * cell_h, :grid.columns * cell_w]
        cells = used.reshape(grid.rows, cell_h, grid.columns, cell_w)
        n = cell_w * cell_h
        sums = cells.sum(axis=(1, 3))
        sums_sq = (cells * cells).sum(axis=(1, 3))
        mean = sums / n
        return sums_sq / n - mean * mean

    def scan(self, img: Image, grid: GridSpec) -> List[Region]:
        height, width = self.image_service.get_image_dimensions(img)
        cell_w = width // grid.columns
        cell_h = height // grid.rows
        if cell_w == 0 or cell_h == 0:
            logger.debug(f"Image {width}x{height} too small for a {grid.columns}x{grid.rows} grid")
            return []

        variances = self._cell_variances(self.image_service.luminance(img.pixels), grid, cell_w, cell_h)

        candidates: List[Region] = []
        for row in range(grid.rows):
            for col in range(grid.columns):
                variance = float(variances[row, col])
                if variance >= grid.variance_threshold:
                    candidates.append(
                        Region(x=col * cell_w, y=row * cell_h,
                               width=cell_w, height=cell_h, variance=variance)
                    )

        # sorted() is stable, so equal variances stay in row-major order
        return sorted(candidates, key=lambda r: r.variance, reverse=True)
