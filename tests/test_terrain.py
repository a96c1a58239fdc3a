"""
Tests for terrain chunk discovery and assembly
"""
from pathlib import Path

import numpy as np
import pytest

from builders import create_him, create_zon, write_chunk
from roselib.config import ConversionSettings
from roselib.errors import (
    InvalidTileIndexError, MissingChunkFileError, TerrainLayoutError, TruncatedInputError,
)
from roselib.formats import read_him, read_zon
from roselib.host import DirEntry, HostFileSystem
from roselib.io import BinaryCursor
from roselib.terrain import (
    ChunkBounds, ChunkCoordinate, ChunkFileKind, TerrainAssembler,
    classify_chunk_files, discover_chunk_bounds, grid_indices, scan_terrain_directory,
    tile_counts,
)
import roselib.terrain.assembly as assembly


def entry(name: str, is_dir: bool = False) -> DirEntry:
    return DirEntry(name=name, path=Path('/maps/junon') / name, is_dir=is_dir)


class MemoryFileSystem(HostFileSystem):
    """Host file system serving a fixed listing"""

    def __init__(self, entries):
        self.entries = entries

    def list_dir(self, directory):
        return list(self.entries)

    def file_exists(self, path):
        return any(e.path == Path(path) for e in self.entries)


class TestDiscovery:
    """Test the two discovery passes"""

    def test_coordinate_parsing(self):
        assert ChunkCoordinate.parse('33_34') == ChunkCoordinate(33, 34)
        assert ChunkCoordinate.parse('-1_2') == ChunkCoordinate(-1, 2)
        assert ChunkCoordinate.parse('33_34_extra') is None
        assert ChunkCoordinate.parse('notes') is None

    def test_bounds_from_folders(self):
        """Test non-zero-based chunk folders give a normalized grid"""
        entries = [entry('33_33', True), entry('34_33', True), entry('notes.txt')]
        bounds = discover_chunk_bounds(entries)

        assert bounds == ChunkBounds(33, 33, 34, 33)
        assert (bounds.columns, bounds.rows) == (2, 1)
        assert bounds.normalize(ChunkCoordinate(34, 33)) == (1, 0)

    def test_bounds_from_files_only(self):
        entries = [entry('10_20.HIM'), entry('12_21.til'), entry('readme.HIM')]
        assert discover_chunk_bounds(entries) == ChunkBounds(10, 20, 12, 21)

    def test_no_chunks(self):
        assert discover_chunk_bounds([entry('notes.txt'), entry('lightmaps', True)]) is None

    def test_classification(self):
        """Test chunk files land in their normalized cells with absolute paths"""
        entries = [
            entry('33_33', True), entry('34_33', True),
            entry('33_33.HIM'), entry('33_33.TIL'), entry('33_33.IFO'),
            entry('34_33.him'), entry('34_33.MOV'),
        ]
        index = classify_chunk_files(entries, discover_chunk_bounds(entries))

        first = index.cell(0, 0)
        assert first.coordinate == ChunkCoordinate(33, 33)
        assert first.height_path == Path('/maps/junon/33_33.HIM')
        assert first.height_path.is_absolute()
        assert first.missing_kinds() == []

        second = index.cell(1, 0)
        assert second.grid_position == (1, 0)
        assert second.missing_kinds() == [ChunkFileKind.TILE, ChunkFileKind.METADATA]

    def test_require_complete(self):
        entries = [entry('33_33.HIM'), entry('33_33.TIL')]
        index = classify_chunk_files(entries, discover_chunk_bounds(entries))
        with pytest.raises(MissingChunkFileError) as excinfo:
            index.require_complete()
        assert excinfo.value.coord == (33, 33)
        assert excinfo.value.kind == 'IFO'

    def test_missing_path_accessor(self):
        entries = [entry('5_5.HIM')]
        index = classify_chunk_files(entries, discover_chunk_bounds(entries))
        with pytest.raises(MissingChunkFileError):
            index.cell(0, 0).tile_path

    def test_host_file_system(self):
        """Test discovery only goes through the host interface"""
        fs = MemoryFileSystem([entry('7_8.HIM'), entry('7_8.TIL'), entry('7_8.IFO')])
        index = scan_terrain_directory('/maps/junon', fs)
        assert (index.columns, index.rows) == (1, 1)
        assert index.cell(0, 0).metadata_path == Path('/maps/junon/7_8.IFO')

    def test_scan_disk(self, map_dir):
        index = scan_terrain_directory(map_dir)
        assert (index.columns, index.rows) == (2, 1)
        assert index.cell(1, 0).coordinate == ChunkCoordinate(34, 33)


class TestTiling:
    """Test heightmap re-tiling"""

    def test_tile_counts(self):
        assert tile_counts(65, 65, 5) == (16, 16)
        assert tile_counts(5, 9, 5) == (1, 2)

    def test_indivisible_heightmap(self):
        with pytest.raises(TerrainLayoutError):
            tile_counts(64, 64, 5)

    def test_grid_winding(self):
        """Test two triangles per quad with a consistent winding"""
        indices = grid_indices(5)
        assert indices.shape == (32, 3)
        assert indices[0].tolist() == [0, 1, 5]
        assert indices[1].tolist() == [1, 6, 5]
        assert indices.max() == 24

    def test_seams_are_shared(self):
        """Test neighbouring tiles hold bit-identical edge vertices"""
        rng = np.random.default_rng(3)
        heights = rng.uniform(0.0, 100.0, 65 * 65).tolist()
        grid = read_him(BinaryCursor(create_him(65, 65, heights)))
        tiles = TerrainAssembler().build_tiles(grid)

        assert len(tiles) == 256
        left = tiles[0].positions.reshape(5, 5, 3)
        right = tiles[1].positions.reshape(5, 5, 3)
        below = tiles[16].positions.reshape(5, 5, 3)
        assert np.array_equal(left[:, 4], right[:, 0])
        assert np.array_equal(left[4, :], below[0, :])

    def test_vertex_positions(self):
        """Test grid spacing, axis swap and height scale"""
        heights = [0.0] * (65 * 65)
        heights[1] = 8.0        # column 1, row 0
        heights[65] = 4.0       # column 0, row 1
        grid = read_him(BinaryCursor(create_him(65, 65, heights, scale=2.0)))
        tile = TerrainAssembler().build_tiles(grid)[0]

        assert tile.positions[1].tolist() == [2.5, 4.0, 0.0]
        assert tile.positions[5].tolist() == [0.0, 2.0, 2.5]

    def test_height_scale_override(self):
        heights = [10.0] * 25
        grid = read_him(BinaryCursor(create_him(5, 5, heights, scale=1.0)))
        assembler = TerrainAssembler(ConversionSettings(height_scale=5.0))
        tile = assembler.build_tiles(grid)[0]
        assert np.all(tile.positions[:, 1] == 2.0)

    def test_zero_scale(self):
        grid = read_him(BinaryCursor(create_him(5, 5, scale=0.0)))
        with pytest.raises(TerrainLayoutError):
            TerrainAssembler().build_tiles(grid)


class TestAssembly:
    """Test building whole maps"""

    def test_assemble_map(self, map_dir):
        terrain = TerrainAssembler().assemble(map_dir)

        assert len(terrain.chunks) == 2
        chunk = terrain.chunk(1, 0)
        assert chunk.name == 'Chunk_34_33'
        assert chunk.origin == (160.0, 0.0, 0.0)
        assert (chunk.tile_columns, chunk.tile_rows) == (16, 16)
        assert len(chunk.tiles) == 256
        assert chunk.tile(3, 2).tile.tile_id == 0
        assert chunk.placements.objects[0].name == 'tree'

    def test_chunk_edges_meet(self, map_dir):
        """Test the last column of one chunk meets the first of the next in world space"""
        terrain = TerrainAssembler().assemble(map_dir)
        left, right = terrain.chunk(0, 0), terrain.chunk(1, 0)
        edge = left.world_positions(left.tile(15, 0)).reshape(5, 5, 3)[:, 4]
        start = right.world_positions(right.tile(0, 0)).reshape(5, 5, 3)[:, 0]
        assert np.allclose(edge[:, [0, 2]], start[:, [0, 2]])

    def test_missing_file_fails_before_geometry(self, tmp_path, monkeypatch):
        """Test an incomplete chunk is reported before any file is decoded"""
        write_chunk(tmp_path, 33, 33, size=5)
        write_chunk(tmp_path, 34, 33, size=5, kinds=('HIM', 'TIL'))

        decoded = []
        monkeypatch.setattr(assembly, 'load_him', lambda path: decoded.append(path))

        with pytest.raises(MissingChunkFileError) as excinfo:
            TerrainAssembler().assemble(tmp_path)
        assert excinfo.value.coord == (34, 33)
        assert excinfo.value.kind == 'IFO'
        assert decoded == []

    def test_empty_directory(self, tmp_path):
        with pytest.raises(TerrainLayoutError):
            TerrainAssembler().assemble(tmp_path)

    def test_threaded_assembly_keeps_grid_order(self, tmp_path):
        for x in (0, 1):
            for y in (0, 1):
                write_chunk(tmp_path, x, y, size=9)
        settings = ConversionSettings(max_workers=4)
        terrain = TerrainAssembler(settings).assemble(tmp_path)

        assert [c.grid_position for c in terrain.chunks] == [(0, 0), (1, 0), (0, 1), (1, 1)]
        assert all(len(c.tiles) == 4 for c in terrain.chunks)

    @pytest.mark.parametrize('workers', [1, 4])
    def test_malformed_chunk_aborts_terrain(self, tmp_path, workers):
        """Test one truncated heightmap fails the whole map on any worker count"""
        for x in (0, 1):
            for y in (0, 1):
                write_chunk(tmp_path, x, y, size=9)
        him = tmp_path / '1_0.HIM'
        him.write_bytes(him.read_bytes()[:12])

        settings = ConversionSettings(max_workers=workers)
        with pytest.raises(TruncatedInputError):
            TerrainAssembler(settings).assemble(tmp_path)

    def test_zone_textures(self, tmp_path):
        write_chunk(tmp_path, 1, 1, tile_ids=[1] * 256)
        zone = read_zon(BinaryCursor(create_zon(
            ['grass.dds', 'rock.dds'],
            [(0, 0, 0, 0, 0, 0, 0), (0, 1, 0, 0, 1, 0, 0)],
        )))
        terrain = TerrainAssembler(zone=zone).assemble(tmp_path)
        assert terrain.chunks[0].tile(0, 0).textures == ('grass.dds', 'rock.dds')

    def test_invalid_tile_index(self, tmp_path):
        write_chunk(tmp_path, 1, 1, tile_ids=[5] * 256)
        zone = read_zon(BinaryCursor(create_zon(['grass.dds'], [(0, 0, 0, 0, 0, 0, 0)])))
        with pytest.raises(InvalidTileIndexError):
            TerrainAssembler(zone=zone).assemble(tmp_path)
