"""Terrain discovery and chunk assembly."""
from .discovery import (
    ChunkBounds,
    ChunkCoordinate,
    ChunkFileKind,
    ChunkFileSet,
    ChunkIndex,
    classify_chunk_files,
    discover_chunk_bounds,
    scan_terrain_directory,
)
from .assembly import (
    Terrain,
    TerrainAssembler,
    TerrainChunk,
    TerrainTile,
    grid_indices,
    tile_counts,
)

__all__ = [
    'ChunkBounds',
    'ChunkCoordinate',
    'ChunkFileKind',
    'ChunkFileSet',
    'ChunkIndex',
    'classify_chunk_files',
    'discover_chunk_bounds',
    'scan_terrain_directory',
    'Terrain',
    'TerrainAssembler',
    'TerrainChunk',
    'TerrainTile',
    'grid_indices',
    'tile_counts',
]
