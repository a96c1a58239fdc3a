"""IFO (object placement) decoder.

An IFO file describes everything placed on one terrain chunk. It starts with
a block table of ``(type, offset)`` pairs; every block of a known object type
holds a count followed by placement records:

- name (u8 length-prefixed string)
- warp_id, event_id (i16)
- object_type, object_id (i32)
- map_x, map_y (i32): chunk-local grid position
- rotation (quaternion x, y, z, w)
- position, scale (vec3)

NPC, sound and effect blocks append extra fields after the common record.
Blocks of other types (economy data, water patches, ...) are skipped.
"""
import logging
from dataclasses import dataclass, field
from enum import IntEnum
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

from construct import Struct, Int16sl, Int32sl, Float32l, Array

from ..io import BinaryCursor
from .base import load_file

logger = logging.getLogger(__name__)


class BlockType(IntEnum):
    """IFO block identifiers."""
    ECONOMY = 0
    DECORATION = 1
    NPC = 2
    BUILDING = 3
    SOUND = 4
    EFFECT = 5
    ANIMATION = 6
    WATER_PATCH = 7
    MONSTER_SPAWN = 8
    OCEAN = 9
    WARP = 10
    COLLISION = 11
    EVENT = 12


OBJECT_BLOCKS = {
    BlockType.DECORATION,
    BlockType.NPC,
    BlockType.BUILDING,
    BlockType.SOUND,
    BlockType.EFFECT,
    BlockType.ANIMATION,
    BlockType.WARP,
    BlockType.COLLISION,
    BlockType.EVENT,
}

# Everything after the name string
OBJECT_RECORD = Struct(
    "warp_id" / Int16sl,
    "event_id" / Int16sl,
    "object_type" / Int32sl,
    "object_id" / Int32sl,
    "map_x" / Int32sl,
    "map_y" / Int32sl,
    "rotation" / Array(4, Float32l),
    "position" / Array(3, Float32l),
    "scale" / Array(3, Float32l),
)


@dataclass
class ObjectPlacement:
    """A single placed object; vectors are in source engine axes."""
    block_type: BlockType
    name: str
    warp_id: int
    event_id: int
    object_type: int
    object_id: int
    map_position: Tuple[int, int]
    rotation: Tuple[float, float, float, float]  # (x, y, z, w)
    position: Tuple[float, float, float]
    scale: Tuple[float, float, float]
    extra: Dict[str, object] = field(default_factory=dict)


@dataclass
class PlacementInfo:
    """Decoded IFO file."""
    objects: List[ObjectPlacement] = field(default_factory=list)
    skipped_blocks: List[int] = field(default_factory=list)

    def by_type(self, block_type: BlockType) -> List[ObjectPlacement]:
        return [o for o in self.objects if o.block_type == block_type]


def _read_object(cursor: BinaryCursor, block_type: BlockType) -> ObjectPlacement:
    name = cursor.read_length_prefixed_string('u8')
    record = cursor.read_struct(OBJECT_RECORD)

    extra: Dict[str, object] = {}
    if block_type == BlockType.NPC:
        extra['ai_id'] = cursor.read_i32()
        extra['con_file'] = cursor.read_length_prefixed_string('u8')
    elif block_type == BlockType.SOUND:
        extra['path'] = cursor.read_length_prefixed_string('u8')
        extra['range'] = cursor.read_i32()
        extra['interval'] = cursor.read_i32()
    elif block_type == BlockType.EFFECT:
        extra['path'] = cursor.read_length_prefixed_string('u8')

    return ObjectPlacement(
        block_type=block_type,
        name=name,
        warp_id=record.warp_id,
        event_id=record.event_id,
        object_type=record.object_type,
        object_id=record.object_id,
        map_position=(record.map_x, record.map_y),
        rotation=tuple(record.rotation),
        position=tuple(record.position),
        scale=tuple(record.scale),
        extra=extra,
    )


def read_ifo(cursor: BinaryCursor) -> PlacementInfo:
    """Decode placement metadata from a cursor."""
    info = PlacementInfo()
    block_count = cursor.read_i32()
    blocks = [(cursor.read_i32(), cursor.read_i32()) for _ in range(block_count)]

    for type_id, offset in blocks:
        try:
            block_type: Optional[BlockType] = BlockType(type_id)
        except ValueError:
            block_type = None

        if block_type not in OBJECT_BLOCKS:
            logger.debug(f"Skipping IFO block type {type_id} at offset {offset}")
            info.skipped_blocks.append(type_id)
            continue

        cursor.seek(offset)
        count = cursor.read_i32()
        for _ in range(count):
            info.objects.append(_read_object(cursor, block_type))

    logger.debug(f"Decoded {len(info.objects)} placed objects")
    return info


def load_ifo(path: Union[str, Path]) -> PlacementInfo:
    return load_file(path, read_ifo)
