"""Decoders for ROSE client file formats."""
from .him import HeightGrid, read_him, load_him
from .til import TileGrid, TileEntry, read_til, load_til
from .ifo import BlockType, ObjectPlacement, PlacementInfo, read_ifo, load_ifo
from .zmd import BoneRecord, SkeletonFile, read_zmd, load_zmd
from .zms import VertexFormat, MeshFile, read_zms, load_zms, encode_zms
from .zon import ZoneTile, ZoneFile, read_zon, load_zon
from .lit import Lightmap, LightmapObject, LightmapPart, read_lit, load_lit, encode_lit
from .idx import VfsIndex, VfsTable, VfsFileEntry, read_idx, load_idx

__all__ = [
    'HeightGrid', 'read_him', 'load_him',
    'TileGrid', 'TileEntry', 'read_til', 'load_til',
    'BlockType', 'ObjectPlacement', 'PlacementInfo', 'read_ifo', 'load_ifo',
    'BoneRecord', 'SkeletonFile', 'read_zmd', 'load_zmd',
    'VertexFormat', 'MeshFile', 'read_zms', 'load_zms', 'encode_zms',
    'ZoneTile', 'ZoneFile', 'read_zon', 'load_zon',
    'Lightmap', 'LightmapObject', 'LightmapPart', 'read_lit', 'load_lit', 'encode_lit',
    'VfsIndex', 'VfsTable', 'VfsFileEntry', 'read_idx', 'load_idx',
]
