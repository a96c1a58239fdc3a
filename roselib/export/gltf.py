"""glTF 2.0 export of terrain and mesh geometry."""
import base64
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

import numpy as np
from pygltflib import (
    GLTF2, Accessor, Asset, Attributes, Buffer, BufferView, Image, Material, Mesh, Node,
    PbrMetallicRoughness, Primitive, Scene, Texture, TextureInfo,
)

from .. import __version__
from ..mesh import MeshGeometry
from ..terrain.assembly import Terrain

logger = logging.getLogger(__name__)

ARRAY_BUFFER = 34962
ELEMENT_ARRAY_BUFFER = 34963
FLOAT = 5126
UNSIGNED_INT = 5125

ACCESSOR_TYPES = {1: "SCALAR", 2: "VEC2", 3: "VEC3", 4: "VEC4"}

GLTF_ATTRIBUTES = {
    'position': 'POSITION',
    'normal': 'NORMAL',
    'color': 'COLOR_0',
    'uv1': 'TEXCOORD_0',
    'uv2': 'TEXCOORD_1',
}


class GltfBuilder:
    """Collects binary data and accessors into a single embedded buffer."""

    def __init__(self):
        self.gltf = GLTF2(asset=Asset(version="2.0", generator=f"roselib {__version__}"))
        self._data = bytearray()

    def _add_view(self, data: bytes, target: int) -> int:
        # Accessor offsets must be 4-byte aligned
        self._data.extend(b'\0' * (-len(self._data) % 4))
        self.gltf.bufferViews.append(BufferView(
            buffer=0, byteOffset=len(self._data), byteLength=len(data), target=target,
        ))
        self._data.extend(data)
        return len(self.gltf.bufferViews) - 1

    def add_attribute(self, array: np.ndarray, with_bounds: bool = False) -> int:
        array = np.ascontiguousarray(array, dtype=np.float32)
        components = 1 if array.ndim == 1 else array.shape[1]
        view = self._add_view(array.tobytes(), ARRAY_BUFFER)
        accessor = Accessor(
            bufferView=view, componentType=FLOAT, count=len(array),
            type=ACCESSOR_TYPES[components],
        )
        if with_bounds and len(array):
            accessor.min = array.min(axis=0).tolist()
            accessor.max = array.max(axis=0).tolist()
        self.gltf.accessors.append(accessor)
        return len(self.gltf.accessors) - 1

    def add_indices(self, indices: np.ndarray) -> int:
        flat = np.ascontiguousarray(indices, dtype=np.uint32).reshape(-1)
        view = self._add_view(flat.tobytes(), ELEMENT_ARRAY_BUFFER)
        self.gltf.accessors.append(Accessor(
            bufferView=view, componentType=UNSIGNED_INT, count=len(flat), type="SCALAR",
        ))
        return len(self.gltf.accessors) - 1

    def add_primitive(self, channels: Dict[str, np.ndarray], indices: np.ndarray,
                      material: Optional[int] = None) -> Primitive:
        attributes = {}
        for name, array in channels.items():
            key = GLTF_ATTRIBUTES.get(name)
            if key is not None:
                attributes[key] = self.add_attribute(array, with_bounds=(key == 'POSITION'))
        return Primitive(attributes=Attributes(**attributes),
                         indices=self.add_indices(indices), material=material)

    def add_texture_material(self, name: str, texture_path: Path) -> int:
        self.gltf.images.append(Image(uri=texture_path.name))
        self.gltf.textures.append(Texture(source=len(self.gltf.images) - 1))
        self.gltf.materials.append(Material(
            name=name,
            pbrMetallicRoughness=PbrMetallicRoughness(
                baseColorTexture=TextureInfo(index=len(self.gltf.textures) - 1),
            ),
        ))
        return len(self.gltf.materials) - 1

    def add_mesh_node(self, name: str, primitives: List[Primitive],
                      translation: Optional[List[float]] = None) -> int:
        self.gltf.meshes.append(Mesh(name=name, primitives=primitives))
        node = Node(name=name, mesh=len(self.gltf.meshes) - 1)
        if translation is not None:
            node.translation = list(translation)
        self.gltf.nodes.append(node)
        return len(self.gltf.nodes) - 1

    def finish(self, root_nodes: List[int]) -> GLTF2:
        encoded = base64.b64encode(bytes(self._data)).decode('ascii')
        self.gltf.buffers = [Buffer(
            uri=f"data:application/octet-stream;base64,{encoded}",
            byteLength=len(self._data),
        )]
        self.gltf.scenes = [Scene(nodes=root_nodes)]
        self.gltf.scene = 0
        return self.gltf


def mesh_to_gltf(geometry: MeshGeometry) -> GLTF2:
    builder = GltfBuilder()
    material = None
    if geometry.material is not None and geometry.material.textures:
        material = builder.add_texture_material(geometry.material.name, geometry.material.textures[0])
    primitive = builder.add_primitive(geometry.channels, geometry.indices, material)
    node = builder.add_mesh_node(geometry.name, [primitive])
    return builder.finish([node])


def terrain_to_gltf(terrain: Terrain) -> GLTF2:
    """One node per chunk, one primitive per tile."""
    builder = GltfBuilder()
    nodes = []
    for chunk in terrain.chunks:
        primitives = [
            builder.add_primitive({'position': tile.positions}, tile.indices)
            for tile in chunk.tiles
        ]
        nodes.append(builder.add_mesh_node(chunk.name, primitives, list(chunk.origin)))
    return builder.finish(nodes)


def save_gltf(gltf: GLTF2, path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    gltf.save(str(path))
    logger.info(f"Wrote {path}")
