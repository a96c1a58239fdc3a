"""Grayscale heightmap image of an assembled terrain."""
import logging
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image

from ..terrain.assembly import Terrain

logger = logging.getLogger(__name__)


def stitch_heights(terrain: Terrain) -> np.ndarray:
    """Combine chunk heightmaps into one array, sharing edge samples.

    Chunks are assumed to share the heightmap size of the first chunk.
    """
    first = terrain.chunks[0].height_grid
    step_x, step_y = first.width - 1, first.height - 1
    rows, columns = terrain.index.rows, terrain.index.columns

    heights = np.zeros((rows * step_y + 1, columns * step_x + 1), dtype=np.float32)
    for chunk in terrain.chunks:
        gx, gy = chunk.grid_position
        grid = chunk.height_grid
        if (grid.width, grid.height) != (first.width, first.height):
            raise ValueError(f"{chunk.name} heightmap is {grid.width}x{grid.height}, "
                             f"expected {first.width}x{first.height}")
        y0, x0 = gy * step_y, gx * step_x
        heights[y0:y0 + grid.height, x0:x0 + grid.width] = grid.heights
    return heights


def heightmap_image(terrain: Terrain) -> Image.Image:
    """Normalize the stitched heights into an 8-bit image."""
    heights = stitch_heights(terrain)
    low, high = float(heights.min()), float(heights.max())
    span = high - low
    if span == 0:
        normalized = np.zeros_like(heights)
    else:
        normalized = (heights - low) / span
    return Image.fromarray((normalized * 255).astype(np.uint8))


def save_heightmap(terrain: Terrain, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    heightmap_image(terrain).save(path)
    logger.info(f"Wrote heightmap {path}")
