"""Skeleton reconstruction from decoded ZMD records."""
import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from .errors import MalformedSkeletonError
from .formats.zmd import BoneRecord, SkeletonFile
from .transform import compose_matrix, transform_position, transform_rotation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RestTransform:
    """Bone transform relative to its parent, in target axes."""
    rotation: Tuple[float, float, float, float]  # (x, y, z, w)
    translation: Tuple[float, float, float]

    def matrix(self) -> np.ndarray:
        return compose_matrix(self.rotation, self.translation)


@dataclass(frozen=True)
class Bone:
    name: str
    parent: Optional[int]
    rest: RestTransform
    is_dummy: bool = False


@dataclass
class Skeleton:
    bones: List[Bone] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.bones)

    def find(self, name: str) -> Optional[int]:
        for i, bone in enumerate(self.bones):
            if bone.name == name:
                return i
        return None

    def rest_matrix(self, index: int) -> np.ndarray:
        return self.bones[index].rest.matrix()

    def global_matrix(self, index: int) -> np.ndarray:
        """Compose rest matrices from the root down to ``index``."""
        matrix = self.rest_matrix(index)
        parent = self.bones[index].parent
        while parent is not None:
            matrix = self.rest_matrix(parent) @ matrix
            parent = self.bones[parent].parent
        return matrix


class SkeletonBuilder:
    """Turns decoded bone records into a parent-indexed hierarchy."""

    def build(self, skeleton_file: SkeletonFile, include_dummies: bool = True) -> Skeleton:
        """Build the skeleton; dummies follow the real bones.

        Raises:
            MalformedSkeletonError: A parent index does not precede its bone
        """
        skeleton = Skeleton()
        for i, record in enumerate(skeleton_file.bones):
            if i == 0:
                parent = None
            else:
                parent = record.parent
                if not 0 <= parent < i:
                    raise MalformedSkeletonError(
                        f"Bone {i} ({record.name}) has parent {parent}; "
                        f"parents must precede their children"
                    )
            skeleton.bones.append(self._bone(record, parent))

        if include_dummies:
            bone_count = len(skeleton_file.bones)
            for record in skeleton_file.dummies:
                if not 0 <= record.parent < bone_count:
                    raise MalformedSkeletonError(
                        f"Dummy {record.name} references missing bone {record.parent}"
                    )
                skeleton.bones.append(self._bone(record, record.parent, is_dummy=True))

        logger.debug(f"Built skeleton with {len(skeleton)} bones")
        return skeleton

    @staticmethod
    def _bone(record: BoneRecord, parent: Optional[int], is_dummy: bool = False) -> Bone:
        rest = RestTransform(
            rotation=transform_rotation(record.rotation),
            translation=transform_position(record.position),
        )
        return Bone(name=record.name, parent=parent, rest=rest, is_dummy=is_dummy)
