"""Readers and scene builders for ROSE Online client assets."""
__version__ = '0.1.0'

from .config import ConversionSettings
from .errors import RoseError
from .host import HostFileSystem, LocalFileSystem
from .mesh import MeshBuilder, MeshGeometry
from .scene import SceneNode, build_scene
from .skeleton import Skeleton, SkeletonBuilder
from .terrain import Terrain, TerrainAssembler

__all__ = [
    '__version__',
    'ConversionSettings',
    'RoseError',
    'HostFileSystem',
    'LocalFileSystem',
    'MeshBuilder',
    'MeshGeometry',
    'SceneNode',
    'build_scene',
    'Skeleton',
    'SkeletonBuilder',
    'Terrain',
    'TerrainAssembler',
]
