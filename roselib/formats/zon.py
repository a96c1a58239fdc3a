"""ZON (zone) decoder, limited to the terrain texture and tile tables.

The zone file starts with a ``(type, offset)`` block table like IFO. Block 2
lists texture paths and block 3 the tile definitions that TIL entries point
into. Other blocks (zone info, event points, economy) are skipped.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union

from construct import Struct, Int32sl

from ..errors import InvalidTileIndexError
from ..io import BinaryCursor
from .base import load_file

logger = logging.getLogger(__name__)

BLOCK_TEXTURES = 2
BLOCK_TILES = 3

ZONE_TILE = Struct(
    "layer1" / Int32sl,
    "layer2" / Int32sl,
    "offset1" / Int32sl,
    "offset2" / Int32sl,
    "blending" / Int32sl,
    "rotation" / Int32sl,
    "tile_type" / Int32sl,
)


@dataclass(frozen=True)
class ZoneTile:
    layer1: int
    layer2: int
    offset1: int
    offset2: int
    blending: bool
    rotation: int
    tile_type: int


@dataclass
class ZoneFile:
    textures: List[str] = field(default_factory=list)
    tiles: List[ZoneTile] = field(default_factory=list)

    def tile(self, tile_id: int) -> ZoneTile:
        if not 0 <= tile_id < len(self.tiles):
            raise InvalidTileIndexError(
                f"Tile id {tile_id} outside zone tile table of {len(self.tiles)}"
            )
        return self.tiles[tile_id]

    def texture(self, index: int) -> str:
        if not 0 <= index < len(self.textures):
            raise InvalidTileIndexError(
                f"Texture index {index} outside zone texture table of {len(self.textures)}"
            )
        return self.textures[index]

    def tile_textures(self, tile_id: int) -> Tuple[str, Optional[str]]:
        """Texture paths bound by a tile: the base layer and, when blended, the overlay."""
        tile = self.tile(tile_id)
        base = self.texture(tile.layer1 + tile.offset1)
        overlay = self.texture(tile.layer2 + tile.offset2) if tile.blending else None
        return base, overlay


def read_zon(cursor: BinaryCursor) -> ZoneFile:
    """Decode the texture and tile tables of a zone file."""
    zone = ZoneFile()
    block_count = cursor.read_i32()
    blocks = [(cursor.read_i32(), cursor.read_i32()) for _ in range(block_count)]

    for block_type, offset in blocks:
        if block_type == BLOCK_TEXTURES:
            cursor.seek(offset)
            count = cursor.read_i32()
            zone.textures = [cursor.read_length_prefixed_string('u8') for _ in range(count)]
        elif block_type == BLOCK_TILES:
            cursor.seek(offset)
            count = cursor.read_i32()
            for _ in range(count):
                record = cursor.read_struct(ZONE_TILE)
                zone.tiles.append(ZoneTile(
                    layer1=record.layer1,
                    layer2=record.layer2,
                    offset1=record.offset1,
                    offset2=record.offset2,
                    blending=record.blending != 0,
                    rotation=record.rotation,
                    tile_type=record.tile_type,
                ))
        else:
            logger.debug(f"Skipping ZON block type {block_type}")

    return zone


def load_zon(path: Union[str, Path]) -> ZoneFile:
    return load_file(path, read_zon)
