from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True)
class Region:
    """
    Rectangle in source-image pixel coordinates plus the luminance
    variance it was scored with. Produced by the region scanner only.
    """
    x: int
    y: int
    width: int
    height: int
    variance: float
