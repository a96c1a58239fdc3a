"""Mesh reconstruction from decoded ZMS files.

Geometry is collected with an accumulator in the style of editor surface
tools: per-vertex attributes are set first and ``add_vertex`` (the position)
commits them, so position must always be the last call for a vertex.
"""
import logging
from collections import OrderedDict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Union

import numpy as np

from .config import ConversionSettings
from .errors import MalformedMeshError
from .formats.zms import MeshFile
from .host import LocalFileSystem
from .transform import transform_positions

logger = logging.getLogger(__name__)

CHANNEL_DTYPES = {
    'normal': np.float32,
    'color': np.float32,
    'bone_indices': np.int32,
    'bone_weights': np.float32,
    'tangent': np.float32,
    'uv1': np.float32,
    'uv2': np.float32,
    'position': np.float32,
}

CHANNEL_COMPONENTS = {
    'normal': 3,
    'color': 4,
    'bone_indices': 4,
    'bone_weights': 4,
    'tangent': 3,
    'uv1': 2,
    'uv2': 2,
    'position': 3,
}


@dataclass
class Material:
    name: str
    textures: List[Path] = field(default_factory=list)


@dataclass
class MeshGeometry:
    """Renderable vertex/index buffers in target axes.

    ``channels`` keeps the order in which attributes were declared, and
    ``indices`` holds triangles already in target winding. ``surface_count``
    is the number of material face groups in the source mesh.
    """
    name: str
    channels: Dict[str, np.ndarray]
    indices: np.ndarray  # (triangles, 3) uint32
    surface_count: int = 1
    material: Optional[Material] = None

    @property
    def vertex_count(self) -> int:
        position = self.channels.get('position')
        return 0 if position is None else len(position)

    def vertex(self, i: int) -> Dict[str, tuple]:
        return OrderedDict((name, tuple(array[i].tolist())) for name, array in self.channels.items())


class MeshAccumulator:
    """Collects vertex attributes and triangle indices.

    Channels can be declared up front; otherwise the first vertex declares
    them. Declared channels exist on the committed geometry even when no
    vertex was added.
    """

    def __init__(self, channels: Optional[Sequence[str]] = None):
        self._pending: Dict[str, Sequence[float]] = OrderedDict()
        self._channels: Dict[str, list] = OrderedDict((name, []) for name in channels or ())
        self._indices: List[int] = []
        self._vertex_count = 0

    def _set(self, name: str, value: Sequence[float]) -> None:
        self._pending[name] = value

    def set_normal(self, normal: Sequence[float]) -> None:
        self._set('normal', normal)

    def set_color(self, color: Sequence[float]) -> None:
        self._set('color', color)

    def set_bones(self, bones: Sequence[int]) -> None:
        self._set('bone_indices', bones)

    def set_weights(self, weights: Sequence[float]) -> None:
        self._set('bone_weights', weights)

    def set_tangent(self, tangent: Sequence[float]) -> None:
        self._set('tangent', tangent)

    def set_uv(self, uv: Sequence[float]) -> None:
        self._set('uv1', uv)

    def set_uv2(self, uv: Sequence[float]) -> None:
        self._set('uv2', uv)

    def add_vertex(self, position: Sequence[float]) -> None:
        """Commit the pending attributes together with ``position``."""
        self._pending['position'] = position
        if self._vertex_count == 0 and not self._channels:
            for name in self._pending:
                self._channels[name] = []
        elif self._pending.keys() != self._channels.keys():
            raise MalformedMeshError(
                f"Vertex {self._vertex_count} sets {list(self._pending)}, "
                f"expected {list(self._channels)}"
            )

        for name, value in self._pending.items():
            self._channels[name].append(tuple(value))
        self._pending = OrderedDict()
        self._vertex_count += 1

    def add_index(self, index: int) -> None:
        self._indices.append(index)

    def commit(self, name: str) -> MeshGeometry:
        if self._pending:
            raise MalformedMeshError(f"Attributes {list(self._pending)} set without a position")
        if len(self._indices) % 3:
            raise MalformedMeshError(f"Index count {len(self._indices)} is not a multiple of 3")

        channels = OrderedDict(
            (channel, np.asarray(values, dtype=CHANNEL_DTYPES[channel])
             .reshape(len(values), CHANNEL_COMPONENTS[channel]))
            for channel, values in self._channels.items()
        )
        indices = np.asarray(self._indices, dtype=np.uint32).reshape(-1, 3)
        return MeshGeometry(name=name, channels=channels, indices=indices)


def find_texture(source_path: Union[str, Path], extensions: Sequence[str],
                 file_exists: Callable[[Path], bool]) -> Optional[Path]:
    """Find a texture named like ``source_path`` with one of ``extensions``.

    Extensions are tried in order, each in lower then upper case.
    """
    source_path = Path(source_path)
    for extension in extensions:
        for variant in (extension.lower(), extension.upper()):
            candidate = source_path.with_suffix(variant)
            if file_exists(candidate):
                return candidate
    return None


class MeshBuilder:
    """Turns a decoded mesh into renderable geometry."""

    def __init__(self, settings: Optional[ConversionSettings] = None,
                 file_exists: Optional[Callable[[Path], bool]] = None):
        self.settings = settings or ConversionSettings()
        self.file_exists = file_exists or LocalFileSystem().file_exists

    def build(self, mesh_file: MeshFile, source_path: Optional[Union[str, Path]] = None,
              name: Optional[str] = None) -> MeshGeometry:
        """Build geometry, attaching a texture material when one is found.

        Args:
            mesh_file: Decoded mesh
            source_path: Path of the ZMS file, used to locate its texture
            name: Geometry name; defaults to the source file stem
        """
        if name is None:
            name = Path(source_path).stem if source_path else 'Mesh'

        position = mesh_file.channel('position')
        if position is None:
            raise MalformedMeshError(f"Mesh {name} has no position stream")

        positions = transform_positions(position)
        normals = mesh_file.channel('normal')
        if normals is not None:
            normals = transform_positions(normals)
        tangents = mesh_file.channel('tangent')
        if tangents is not None and self.settings.transform_tangents:
            tangents = transform_positions(tangents)
        colors = mesh_file.channel('color')
        weights = mesh_file.channel('bone_weights')
        bones = self._skeleton_bone_indices(mesh_file, name)
        uv1 = mesh_file.channel('uv1')
        uv2 = mesh_file.channel('uv2')

        declared = [
            channel for channel, values in (
                ('normal', normals), ('color', colors), ('bone_indices', bones),
                ('bone_weights', bones), ('tangent', tangents), ('uv1', uv1), ('uv2', uv2),
            ) if values is not None
        ]
        accumulator = MeshAccumulator(declared + ['position'])
        for i in range(mesh_file.vertex_count):
            if normals is not None:
                accumulator.set_normal(normals[i])
            if colors is not None:
                accumulator.set_color(colors[i])
            if bones is not None:
                accumulator.set_bones(bones[i])
                accumulator.set_weights(weights[i])
            if tangents is not None:
                accumulator.set_tangent(tangents[i])
            if uv1 is not None:
                accumulator.set_uv(uv1[i])
            if uv2 is not None:
                accumulator.set_uv2(uv2[i])
            accumulator.add_vertex(positions[i])

        for x, y, z in mesh_file.indices.tolist():
            if max(x, y, z) >= mesh_file.vertex_count or min(x, y, z) < 0:
                raise MalformedMeshError(f"Triangle ({x}, {y}, {z}) references a missing vertex")
            accumulator.add_index(z)
            accumulator.add_index(y)
            accumulator.add_index(x)

        geometry = accumulator.commit(name)
        geometry.surface_count = max(1, len(mesh_file.materials))
        if geometry.surface_count == 1 and source_path is not None:
            texture = find_texture(source_path, self.settings.texture_extensions, self.file_exists)
            if texture is not None:
                geometry.material = Material(name=f"{name}_material", textures=[texture])
            else:
                logger.debug(f"No texture found for {source_path}")
        elif source_path is not None:
            logger.debug(f"Mesh {name} has {geometry.surface_count} surfaces, skipping texture lookup")

        logger.debug(
            f"Built mesh {name}: {geometry.vertex_count} vertices, "
            f"{len(geometry.indices)} triangles, channels {list(geometry.channels)}"
        )
        return geometry

    @staticmethod
    def _skeleton_bone_indices(mesh_file: MeshFile, name: str) -> Optional[np.ndarray]:
        """Map per-vertex bone slots through the mesh bone table."""
        local = mesh_file.channel('bone_indices')
        if local is None:
            return None
        if not mesh_file.bones:
            return local.astype(np.int32)

        table = np.asarray(mesh_file.bones, dtype=np.int32)
        if local.size and (local.min() < 0 or local.max() >= len(table)):
            raise MalformedMeshError(
                f"Mesh {name} references bone slot outside its table of {len(table)}"
            )
        return table[local]
