"""Scene graph composite handed to the host."""
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, List, Optional, Sequence, Tuple

from .config import ConversionSettings
from .formats.ifo import ObjectPlacement
from .mesh import MeshGeometry
from .skeleton import Skeleton
from .terrain.assembly import Terrain, TerrainChunk
from .transform import transform_position, transform_rotation

logger = logging.getLogger(__name__)

IDENTITY = ((0.0, 0.0, 0.0, 1.0), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0))


@dataclass
class NodeTransform:
    rotation: tuple = IDENTITY[0]     # (x, y, z, w)
    translation: tuple = IDENTITY[1]
    scale: tuple = IDENTITY[2]


@dataclass
class SceneNode:
    name: str
    transform: NodeTransform = field(default_factory=NodeTransform)
    children: List['SceneNode'] = field(default_factory=list)
    payload: Any = None

    def add(self, child: 'SceneNode') -> 'SceneNode':
        self.children.append(child)
        return child

    def child(self, name: str) -> Optional['SceneNode']:
        for node in self.children:
            if node.name == name:
                return node
        return None

    def walk(self) -> Iterator['SceneNode']:
        yield self
        for node in self.children:
            yield from node.walk()


def placement_node(placement: ObjectPlacement,
                   origin: Tuple[float, float, float] = (0.0, 0.0, 0.0),
                   unit_scale: float = 1.0) -> SceneNode:
    """Scene node for an IFO object, converted to target axes.

    IFO positions are world coordinates in file units. They are scaled by
    ``unit_scale`` and made relative to ``origin``, the world position of the
    chunk the object belongs to.
    """
    world = transform_position(tuple(v * unit_scale for v in placement.position))
    return SceneNode(
        name=placement.name or f"Object_{placement.object_id}",
        transform=NodeTransform(
            rotation=transform_rotation(placement.rotation),
            translation=tuple(w - o for w, o in zip(world, origin)),
            scale=transform_position(placement.scale),
        ),
        payload=placement,
    )


def chunk_node(chunk: TerrainChunk, settings: Optional[ConversionSettings] = None) -> SceneNode:
    """Chunk node at the chunk origin, with tile and object children.

    Object translations are local to the chunk node.
    """
    settings = settings or ConversionSettings()
    size = settings.chunk_world_size
    world_origin = (chunk.coordinate.x * size, 0.0, chunk.coordinate.y * size)

    node = SceneNode(name=chunk.name, transform=NodeTransform(translation=chunk.origin), payload=chunk)
    for tile in chunk.tiles:
        node.add(SceneNode(name=f"Tile_{tile.tile_x}_{tile.tile_y}", payload=tile))

    objects = node.add(SceneNode(name='Objects'))
    for placement in chunk.placements.objects:
        objects.add(placement_node(placement, world_origin, settings.placement_scale))
    return node


def terrain_node(terrain: Terrain) -> SceneNode:
    node = SceneNode(name='Terrain', payload=terrain)
    for chunk in terrain.chunks:
        node.add(chunk_node(chunk, terrain.settings))
    return node


def build_scene(name: str = 'Root', terrain: Optional[Terrain] = None,
                skeleton: Optional[Skeleton] = None,
                meshes: Sequence[MeshGeometry] = ()) -> SceneNode:
    """Assemble a root node with Terrain, Skeleton and Meshes children.

    Children are only added for the parts that were supplied.
    """
    root = SceneNode(name=name)
    if terrain is not None:
        root.add(terrain_node(terrain))
    if skeleton is not None:
        root.add(SceneNode(name='Skeleton', payload=skeleton))
    if meshes:
        mesh_root = root.add(SceneNode(name='Meshes'))
        for mesh in meshes:
            mesh_root.add(SceneNode(name=mesh.name, payload=mesh))

    logger.debug(f"Built scene {name} with {sum(1 for _ in root.walk())} nodes")
    return root
