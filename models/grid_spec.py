from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class GridSpec:
    """
    Value-object describing how the source image is partitioned for the
    saliency scan. Presets seen in practice: 7×5, 7×7 and 5×9.
    """
    columns: int = 7
    rows: int = 5
    variance_threshold: float = 800.0

    def __post_init__(self):
        if self.columns < 1 or self.rows < 1:
            raise ValueError(
                f"Grid needs at least one column and one row, got {self.columns}x{self.rows}"
            )
