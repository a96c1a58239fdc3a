"""Terrain chunk assembly.

Every chunk's heightmap is cut into ``tile_size x tile_size`` vertex tiles.
Tile origins advance by ``tile_size - 1`` so neighbouring tiles share their
edge row/column; a 65 x 65 heightmap with tile size 5 gives 16 x 16 tiles,
matching the 16 x 16 tile map of the chunk.
"""
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import List, Optional, Tuple, Union

import numpy as np

from ..config import ConversionSettings
from ..errors import TerrainLayoutError
from ..formats.him import HeightGrid, load_him
from ..formats.ifo import PlacementInfo, load_ifo
from ..formats.til import TileEntry, TileGrid, load_til
from ..formats.zon import ZoneFile
from ..host import HostFileSystem, LocalFileSystem
from ..transform import transform_positions
from .discovery import ChunkCoordinate, ChunkFileSet, ChunkIndex, scan_terrain_directory

logger = logging.getLogger(__name__)


@dataclass
class TerrainTile:
    """One re-triangulated tile; positions are chunk-local."""
    tile_x: int
    tile_y: int
    positions: np.ndarray  # (tile_size * tile_size, 3) float32
    indices: np.ndarray    # (triangles, 3) uint32
    tile: Optional[TileEntry] = None
    textures: Optional[Tuple[str, Optional[str]]] = None


@dataclass
class TerrainChunk:
    coordinate: ChunkCoordinate
    grid_position: Tuple[int, int]
    origin: Tuple[float, float, float]
    height_grid: HeightGrid
    tile_grid: TileGrid
    placements: PlacementInfo
    tile_columns: int
    tile_rows: int
    tiles: List[TerrainTile] = field(default_factory=list)

    @property
    def name(self) -> str:
        return f"Chunk_{self.coordinate}"

    def tile(self, tile_x: int, tile_y: int) -> TerrainTile:
        return self.tiles[tile_y * self.tile_columns + tile_x]

    def world_positions(self, tile: TerrainTile) -> np.ndarray:
        return tile.positions + np.asarray(self.origin, dtype=np.float32)


@dataclass
class Terrain:
    index: ChunkIndex
    chunks: List[TerrainChunk]
    settings: ConversionSettings

    def chunk(self, x: int, y: int) -> TerrainChunk:
        return self.chunks[y * self.index.columns + x]


@lru_cache(maxsize=None)
def grid_indices(size: int) -> np.ndarray:
    """Two triangles per quad over a ``size x size`` vertex window."""
    triangles = []
    for row in range(size - 1):
        for col in range(size - 1):
            i = row * size + col
            triangles.append((i, i + 1, i + size))
            triangles.append((i + 1, i + size + 1, i + size))
    indices = np.array(triangles, dtype=np.uint32).reshape(-1, 3)
    indices.setflags(write=False)
    return indices


def tile_counts(width: int, height: int, tile_size: int) -> Tuple[int, int]:
    """Tiles per axis for a heightmap; the seam row/column is shared."""
    stride = tile_size - 1
    if width < 2 or height < 2:
        raise TerrainLayoutError(f"Heightmap {width}x{height} is too small to tile")
    if (width - 1) % stride or (height - 1) % stride:
        raise TerrainLayoutError(
            f"Heightmap {width}x{height} cannot be split into tiles of {tile_size} vertices"
        )
    return (width - 1) // stride, (height - 1) // stride


def chunk_vertex_grid(height_grid: HeightGrid, chunk_world_size: float,
                      height_scale: float) -> np.ndarray:
    """Chunk-local vertex positions shaped (height, width, 3), target axes."""
    xs = np.arange(height_grid.width, dtype=np.float32) * np.float32(
        chunk_world_size / (height_grid.width - 1))
    ys = np.arange(height_grid.height, dtype=np.float32) * np.float32(
        chunk_world_size / (height_grid.height - 1))
    gx, gy = np.meshgrid(xs, ys)
    heights = height_grid.heights / np.float32(height_scale)

    # Source axes are (x, y, up); swap into (x, up, y)
    source = np.stack([gx, gy, heights.astype(np.float32)], axis=-1).reshape(-1, 3)
    return transform_positions(source).reshape(height_grid.height, height_grid.width, 3)


class TerrainAssembler:
    """Builds terrain chunks from a map directory.

    The assembler holds no per-terrain state; one instance can assemble
    any number of maps.
    """

    def __init__(self, settings: Optional[ConversionSettings] = None,
                 filesystem: Optional[HostFileSystem] = None,
                 zone: Optional[ZoneFile] = None):
        self.settings = settings or ConversionSettings()
        self.filesystem = filesystem or LocalFileSystem()
        self.zone = zone

    def scan(self, directory: Union[str, Path]) -> ChunkIndex:
        index = scan_terrain_directory(directory, self.filesystem)
        if index is None:
            raise TerrainLayoutError(f"No terrain chunks found in {directory}")
        return index

    def assemble(self, directory: Union[str, Path]) -> Terrain:
        """Discover, validate and build every chunk of a map.

        Raises:
            MissingChunkFileError: A chunk lacks a file; nothing is built
            RoseError: Any chunk failed to decode or tile
        """
        index = self.scan(directory)
        index.require_complete()
        chunks = self.assemble_index(index)
        logger.info(f"Assembled {len(chunks)} terrain chunks from {directory}")
        return Terrain(index=index, chunks=chunks, settings=self.settings)

    def assemble_index(self, index: ChunkIndex) -> List[TerrainChunk]:
        file_sets = list(index)
        if self.settings.max_workers <= 1:
            return [self.assemble_chunk(file_set) for file_set in file_sets]

        chunks = []
        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            future_to_chunk = {
                executor.submit(self.assemble_chunk, file_set): file_set
                for file_set in file_sets
            }
            for future in as_completed(future_to_chunk):
                file_set = future_to_chunk[future]
                try:
                    chunks.append(future.result())
                except Exception:
                    logger.error(f"Failed to assemble chunk {file_set.coordinate}")
                    for pending in future_to_chunk:
                        pending.cancel()
                    raise

        chunks.sort(key=lambda c: (c.grid_position[1], c.grid_position[0]))
        return chunks

    def assemble_chunk(self, file_set: ChunkFileSet) -> TerrainChunk:
        """Decode and tile a single chunk."""
        logger.debug(f"Assembling chunk {file_set.coordinate}")
        height_grid = load_him(file_set.height_path)
        tile_grid = load_til(file_set.tile_path)
        placements = load_ifo(file_set.metadata_path)

        gx, gy = file_set.grid_position
        size = self.settings.chunk_world_size
        columns, rows = tile_counts(height_grid.width, height_grid.height, self.settings.tile_size)

        chunk = TerrainChunk(
            coordinate=file_set.coordinate,
            grid_position=(gx, gy),
            origin=(gx * size, 0.0, gy * size),
            height_grid=height_grid,
            tile_grid=tile_grid,
            placements=placements,
            tile_columns=columns,
            tile_rows=rows,
        )
        chunk.tiles = self.build_tiles(height_grid, tile_grid)
        return chunk

    def build_tiles(self, height_grid: HeightGrid,
                    tile_grid: Optional[TileGrid] = None) -> List[TerrainTile]:
        """Cut a heightmap into tiles, row by row."""
        tile_size = self.settings.tile_size
        stride = tile_size - 1
        columns, rows = tile_counts(height_grid.width, height_grid.height, tile_size)

        scale = self.settings.height_scale or height_grid.scale
        if scale == 0:
            raise TerrainLayoutError("Heightmap scale is zero; set height_scale explicitly")

        vertices = chunk_vertex_grid(height_grid, self.settings.chunk_world_size, scale)
        indices = grid_indices(tile_size)

        use_tile_map = tile_grid is not None and (tile_grid.width, tile_grid.height) == (columns, rows)
        if tile_grid is not None and not use_tile_map:
            logger.debug(
                f"Tile map {tile_grid.width}x{tile_grid.height} does not match "
                f"{columns}x{rows} tiles, skipping texture lookup"
            )

        tiles = []
        for ty in range(rows):
            for tx in range(columns):
                y0, x0 = ty * stride, tx * stride
                window = vertices[y0:y0 + tile_size, x0:x0 + tile_size]
                tile = TerrainTile(
                    tile_x=tx,
                    tile_y=ty,
                    positions=np.ascontiguousarray(window.reshape(-1, 3)),
                    indices=indices,
                )
                if use_tile_map:
                    tile.tile = tile_grid.tile_at(tx, ty)
                    if self.zone is not None:
                        tile.textures = self.zone.tile_textures(tile.tile.tile_id)
                tiles.append(tile)
        return tiles
