"""HIM (heightmap) decoder.

A HIM file holds the height samples of one terrain chunk:

- width, height: sample counts per axis (65 x 65 for a regular chunk)
- grid_count: number of grid cells per patch
- scale: vertical scale factor for the samples
- width * height float samples, row by row
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Union

import numpy as np
from construct import Struct, Int32sl, Float32l

from ..errors import TerrainLayoutError
from ..io import BinaryCursor
from .base import load_file

logger = logging.getLogger(__name__)

HIM_HEADER = Struct(
    "width" / Int32sl,
    "height" / Int32sl,
    "grid_count" / Int32sl,
    "scale" / Float32l,
)


@dataclass(frozen=True)
class HeightGrid:
    """Decoded heightmap of one chunk."""
    width: int
    height: int
    grid_count: int
    scale: float
    heights: np.ndarray  # (height, width) float32, read-only

    @property
    def min_height(self) -> float:
        return float(self.heights.min()) if self.heights.size else float('nan')

    @property
    def max_height(self) -> float:
        return float(self.heights.max()) if self.heights.size else float('nan')

    def sample(self, x: int, y: int) -> float:
        return float(self.heights[y, x])


def read_him(cursor: BinaryCursor) -> HeightGrid:
    """Decode a heightmap from a cursor."""
    header = cursor.read_struct(HIM_HEADER)
    if header.width < 0 or header.height < 0:
        raise TerrainLayoutError(f"Negative heightmap size {header.width}x{header.height}")

    heights = cursor.read_array(np.float32, header.width * header.height)
    heights = heights.reshape(header.height, header.width)
    heights.setflags(write=False)

    if not cursor.at_end():
        logger.debug(f"Ignoring {cursor.remaining} trailing bytes in heightmap")

    return HeightGrid(
        width=header.width,
        height=header.height,
        grid_count=header.grid_count,
        scale=header.scale,
        heights=heights,
    )


def load_him(path: Union[str, Path]) -> HeightGrid:
    return load_file(path, read_him)
