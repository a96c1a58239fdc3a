"""ZMS (static and skinned mesh) decoder and encoder.

Layout of ZMS0007 / ZMS0008:
- identifier (cstring)
- format (i32): vertex attribute bitmask, see ``VertexFormat``
- bounding box min, max (vec3 each)
- bone table: count (i16) + skeleton bone index per entry (i16)
- vertex count (i16)
- one stream per enabled attribute, each holding every vertex, in the
  order of ``ATTRIBUTE_ORDER``; bone weights and bone indices share one
  stream (4 x f32 weights followed by 4 x i16 indices per vertex)
- triangle count (i16) + index triples (3 x i16)
- materials: count (i16) + i16 entries
- strips: count (i16) + i16 entries
- pool (i16), ZMS0008 only
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from enum import IntFlag
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union

import numpy as np

from ..errors import InvalidMagicError
from ..io import BinaryCursor, BinaryWriter
from .base import load_file, resolve_version, parse_version_suffix

logger = logging.getLogger(__name__)

ZMS_MAGIC = 'ZMS'
ZMS_VERSIONS = (7, 8)


class VertexFormat(IntFlag):
    """Vertex attribute bitmask."""
    NONE = 0
    POSITION = 1 << 1
    NORMAL = 1 << 2
    COLOR = 1 << 3
    BONE_WEIGHT = 1 << 4
    BONE_INDEX = 1 << 5
    TANGENT = 1 << 6
    UV1 = 1 << 7
    UV2 = 1 << 8
    UV3 = 1 << 9
    UV4 = 1 << 10

    BONES = BONE_WEIGHT | BONE_INDEX


# (channel name, flag, dtype, components) in stream order
ATTRIBUTE_ORDER = (
    ('position', VertexFormat.POSITION, np.float32, 3),
    ('normal', VertexFormat.NORMAL, np.float32, 3),
    ('color', VertexFormat.COLOR, np.float32, 4),
    ('bones', VertexFormat.BONES, None, 0),
    ('tangent', VertexFormat.TANGENT, np.float32, 3),
    ('uv1', VertexFormat.UV1, np.float32, 2),
    ('uv2', VertexFormat.UV2, np.float32, 2),
    ('uv3', VertexFormat.UV3, np.float32, 2),
    ('uv4', VertexFormat.UV4, np.float32, 2),
)

BONE_STREAM_DTYPE = np.dtype([
    ('weights', '<f4', (4,)),
    ('indices', '<i2', (4,)),
])


def attribute_enabled(fmt: int, flag: VertexFormat) -> bool:
    """Check a flag; bones need both the weight and the index bit."""
    return (fmt & flag) == flag


@dataclass
class MeshFile:
    """Decoded ZMS mesh.

    ``channels`` holds one numpy array per enabled attribute, in stream
    order. Vectors are in source engine axes.
    """
    identifier: str
    version: int
    format: int
    bounding_box: Tuple[Tuple[float, float, float], Tuple[float, float, float]]
    bones: List[int] = field(default_factory=list)
    vertex_count: int = 0
    channels: Dict[str, np.ndarray] = field(default_factory=OrderedDict)
    indices: np.ndarray = field(default_factory=lambda: np.zeros((0, 3), dtype=np.int16))
    materials: List[int] = field(default_factory=list)
    strips: List[int] = field(default_factory=list)
    pool: int = 0
    warnings: List[str] = field(default_factory=list)

    def enabled(self, flag: VertexFormat) -> bool:
        return attribute_enabled(self.format, flag)

    def channel(self, name: str) -> Optional[np.ndarray]:
        return self.channels.get(name)

    def vertex(self, i: int) -> Dict[str, tuple]:
        """Return the fields of vertex ``i``; only enabled fields appear."""
        record = OrderedDict()
        for name, array in self.channels.items():
            record[name] = tuple(array[i].tolist())
        return record

    def vertex_records(self) -> List[Dict[str, tuple]]:
        return [self.vertex(i) for i in range(self.vertex_count)]


def _read_channels(cursor: BinaryCursor, fmt: int, count: int) -> Dict[str, np.ndarray]:
    channels: Dict[str, np.ndarray] = OrderedDict()
    for name, flag, dtype, components in ATTRIBUTE_ORDER:
        if not attribute_enabled(fmt, flag):
            continue
        if name == 'bones':
            raw = cursor.read(count * BONE_STREAM_DTYPE.itemsize)
            stream = np.frombuffer(raw, dtype=BONE_STREAM_DTYPE, count=count)
            channels['bone_weights'] = stream['weights'].astype(np.float32)
            channels['bone_indices'] = stream['indices'].astype(np.int16)
        else:
            channels[name] = cursor.read_array(dtype, count, components)
    return channels


def _read_i16_list(cursor: BinaryCursor) -> List[int]:
    count = cursor.read_i16()
    return [cursor.read_i16() for _ in range(count)]


def read_zms(cursor: BinaryCursor, strict: bool = False) -> MeshFile:
    """Decode a mesh from a cursor.

    Args:
        cursor: Cursor positioned at the identifier
        strict: Raise on unknown versions instead of warning
    """
    identifier = cursor.read_cstring()
    if not identifier.startswith(ZMS_MAGIC):
        raise InvalidMagicError(ZMS_MAGIC, identifier)

    warnings: List[str] = []
    version = resolve_version(
        'ZMS', parse_version_suffix(identifier, ZMS_MAGIC), ZMS_VERSIONS, strict, warnings
    )

    fmt = cursor.read_i32()
    bbox_min = cursor.read_vector3()
    bbox_max = cursor.read_vector3()
    bones = _read_i16_list(cursor)

    vertex_count = cursor.read_i16()
    channels = _read_channels(cursor, fmt, vertex_count)

    index_count = cursor.read_i16()
    indices = cursor.read_array(np.int16, index_count, 3).reshape(index_count, 3)

    materials = _read_i16_list(cursor)
    strips = _read_i16_list(cursor)
    pool = cursor.read_i16() if version >= 8 else 0

    logger.debug(
        f"Decoded {identifier}: format={fmt:#x}, {vertex_count} vertices, "
        f"{index_count} triangles"
    )

    return MeshFile(
        identifier=identifier,
        version=version,
        format=fmt,
        bounding_box=(bbox_min, bbox_max),
        bones=bones,
        vertex_count=vertex_count,
        channels=channels,
        indices=indices,
        materials=materials,
        strips=strips,
        pool=pool,
        warnings=warnings,
    )


def load_zms(path: Union[str, Path], strict: bool = False) -> MeshFile:
    return load_file(path, read_zms, strict=strict)


def encode_zms(mesh: MeshFile) -> bytes:
    """Encode a mesh with its own identifier and attribute bitmask."""
    writer = BinaryWriter()
    writer.write_cstring(mesh.identifier)
    writer.write_i32(mesh.format)
    writer.write_floats(mesh.bounding_box[0])
    writer.write_floats(mesh.bounding_box[1])

    writer.write_i16(len(mesh.bones))
    for bone in mesh.bones:
        writer.write_i16(bone)

    writer.write_i16(mesh.vertex_count)
    for name, flag, dtype, _ in ATTRIBUTE_ORDER:
        if not mesh.enabled(flag):
            continue
        if name == 'bones':
            stream = np.zeros(mesh.vertex_count, dtype=BONE_STREAM_DTYPE)
            stream['weights'] = mesh.channels['bone_weights']
            stream['indices'] = mesh.channels['bone_indices']
            writer.write(stream.tobytes())
        else:
            writer.write_array(mesh.channels[name], dtype)

    writer.write_i16(len(mesh.indices))
    writer.write_array(mesh.indices, np.int16)

    for values in (mesh.materials, mesh.strips):
        writer.write_i16(len(values))
        for value in values:
            writer.write_i16(value)

    if mesh.version >= 8:
        writer.write_i16(mesh.pool)

    return writer.getvalue()
