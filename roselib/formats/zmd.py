"""ZMD (skeleton) decoder.

Layout:
- identifier: 7 bytes, 'ZMD0002' or 'ZMD0003'
- bone count (i32), then per bone: parent (i32), name (cstring),
  position (vec3), rotation (quaternion w, x, y, z)
- dummy count (i32), then per dummy: name (cstring), parent (i32),
  position (vec3) and, from ZMD0003 on, rotation (w, x, y, z)
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Tuple, Union

from ..errors import InvalidMagicError
from ..io import BinaryCursor
from .base import load_file, resolve_version, parse_version_suffix

logger = logging.getLogger(__name__)

ZMD_MAGIC = 'ZMD'
ZMD_IDENTIFIER_SIZE = 7
ZMD_VERSIONS = (2, 3)

IDENTITY_ROTATION = (0.0, 0.0, 0.0, 1.0)


@dataclass
class BoneRecord:
    """Bone as stored in the file; vectors are in source engine axes."""
    name: str
    parent: int
    position: Tuple[float, float, float]
    rotation: Tuple[float, float, float, float]  # (x, y, z, w)


@dataclass
class SkeletonFile:
    identifier: str
    version: int
    bones: List[BoneRecord] = field(default_factory=list)
    dummies: List[BoneRecord] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def read_zmd(cursor: BinaryCursor, strict: bool = False) -> SkeletonFile:
    """Decode a skeleton from a cursor.

    Args:
        cursor: Cursor positioned at the identifier
        strict: Raise on unknown versions instead of warning
    """
    identifier = cursor.read_fixed_string(ZMD_IDENTIFIER_SIZE)
    if not identifier.startswith(ZMD_MAGIC):
        raise InvalidMagicError(ZMD_MAGIC, identifier)

    skeleton = SkeletonFile(identifier=identifier, version=0)
    skeleton.version = resolve_version(
        'ZMD', parse_version_suffix(identifier, ZMD_MAGIC), ZMD_VERSIONS,
        strict, skeleton.warnings
    )

    bone_count = cursor.read_i32()
    for i in range(bone_count):
        parent = cursor.read_i32()
        name = cursor.read_cstring()
        position = cursor.read_vector3()
        rotation = cursor.read_quaternion_wxyz()
        skeleton.bones.append(BoneRecord(name, parent, position, rotation))

    dummy_count = cursor.read_i32()
    for _ in range(dummy_count):
        name = cursor.read_cstring()
        parent = cursor.read_i32()
        position = cursor.read_vector3()
        if skeleton.version >= 3:
            rotation = cursor.read_quaternion_wxyz()
        else:
            rotation = IDENTITY_ROTATION
        skeleton.dummies.append(BoneRecord(name, parent, position, rotation))

    logger.debug(
        f"Decoded {identifier} with {len(skeleton.bones)} bones "
        f"and {len(skeleton.dummies)} dummies"
    )
    return skeleton


def load_zmd(path: Union[str, Path], strict: bool = False) -> SkeletonFile:
    return load_file(path, read_zmd, strict=strict)
