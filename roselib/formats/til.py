"""TIL (tile map) decoder.

Each chunk carries a width x height grid of tile entries. An entry points
into the zone tile table through ``tile_id``; the other fields are editor
brush bookkeeping.
"""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from construct import Struct, Int32sl, Int8ul

from ..errors import TerrainLayoutError
from ..io import BinaryCursor
from .base import load_file

logger = logging.getLogger(__name__)

TIL_HEADER = Struct(
    "width" / Int32sl,
    "height" / Int32sl,
)

TIL_ENTRY = Struct(
    "brush" / Int8ul,
    "tile_index" / Int8ul,
    "tile_set" / Int8ul,
    "tile_id" / Int32sl,
)


@dataclass(frozen=True)
class TileEntry:
    brush: int
    tile_index: int
    tile_set: int
    tile_id: int


@dataclass(frozen=True)
class TileGrid:
    """Decoded tile map; ``tiles`` is row-major."""
    width: int
    height: int
    tiles: List[TileEntry]

    def tile_at(self, x: int, y: int) -> TileEntry:
        return self.tiles[y * self.width + x]


def read_til(cursor: BinaryCursor) -> TileGrid:
    """Decode a tile map from a cursor."""
    header = cursor.read_struct(TIL_HEADER)
    if header.width < 0 or header.height < 0:
        raise TerrainLayoutError(f"Negative tile map size {header.width}x{header.height}")

    tiles = []
    for _ in range(header.width * header.height):
        entry = cursor.read_struct(TIL_ENTRY)
        tiles.append(TileEntry(
            brush=entry.brush,
            tile_index=entry.tile_index,
            tile_set=entry.tile_set,
            tile_id=entry.tile_id,
        ))

    return TileGrid(width=header.width, height=header.height, tiles=tiles)


def load_til(path: Union[str, Path]) -> TileGrid:
    return load_file(path, read_til)
