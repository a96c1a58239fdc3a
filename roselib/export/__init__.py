"""Exporters for reconstructed geometry."""
from .obj import write_obj
from .gltf import mesh_to_gltf, terrain_to_gltf, save_gltf
from .heightmap import stitch_heights, heightmap_image, save_heightmap

__all__ = [
    'write_obj',
    'mesh_to_gltf',
    'terrain_to_gltf',
    'save_gltf',
    'stitch_heights',
    'heightmap_image',
    'save_heightmap',
]
