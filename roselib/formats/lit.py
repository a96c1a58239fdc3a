"""LIT (lightmap) decoder and encoder.

Pre-baked lighting for map objects. Each object lists the parts that were
baked and where each part sits inside a shared lightmap texture.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Union

from ..io import BinaryCursor, BinaryWriter
from .base import load_file

logger = logging.getLogger(__name__)


@dataclass
class LightmapPart:
    name: str
    id: int
    filename: str
    lightmap_index: int
    pixels_per_part: int
    parts_per_width: int
    part_position: int


@dataclass
class LightmapObject:
    id: int
    parts: List[LightmapPart] = field(default_factory=list)


@dataclass
class Lightmap:
    objects: List[LightmapObject] = field(default_factory=list)
    filenames: List[str] = field(default_factory=list)


def read_lit(cursor: BinaryCursor) -> Lightmap:
    lightmap = Lightmap()

    object_count = cursor.read_i32()
    for _ in range(object_count):
        part_count = cursor.read_i32()
        obj = LightmapObject(id=cursor.read_i32())
        for _ in range(part_count):
            obj.parts.append(LightmapPart(
                name=cursor.read_length_prefixed_string('u8'),
                id=cursor.read_i32(),
                filename=cursor.read_length_prefixed_string('u8'),
                lightmap_index=cursor.read_i32(),
                pixels_per_part=cursor.read_i32(),
                parts_per_width=cursor.read_i32(),
                part_position=cursor.read_i32(),
            ))
        lightmap.objects.append(obj)

    file_count = cursor.read_i32()
    lightmap.filenames = [cursor.read_length_prefixed_string('u8') for _ in range(file_count)]
    return lightmap


def load_lit(path: Union[str, Path]) -> Lightmap:
    return load_file(path, read_lit)


def encode_lit(lightmap: Lightmap) -> bytes:
    writer = BinaryWriter()
    writer.write_i32(len(lightmap.objects))
    for obj in lightmap.objects:
        writer.write_i32(len(obj.parts))
        writer.write_i32(obj.id)
        for part in obj.parts:
            writer.write_length_prefixed_string(part.name, 'u8')
            writer.write_i32(part.id)
            writer.write_length_prefixed_string(part.filename, 'u8')
            writer.write_i32(part.lightmap_index)
            writer.write_i32(part.pixels_per_part)
            writer.write_i32(part.parts_per_width)
            writer.write_i32(part.part_position)

    writer.write_i32(len(lightmap.filenames))
    for filename in lightmap.filenames:
        writer.write_length_prefixed_string(filename, 'u8')
    return writer.getvalue()
