"""Discovery of terrain chunk files in a map directory.

A ROSE map directory holds one ``<x>_<y>`` folder per chunk (lightmaps)
next to the chunk files themselves, e.g. ``33_33.HIM``, ``33_33.TIL`` and
``33_33.IFO``. Chunk coordinates are not zero based, so discovery runs in
two passes:

1. ``discover_chunk_bounds`` finds the coordinate range.
2. ``classify_chunk_files`` files every chunk file into a dense grid indexed
   by ``coordinate - minimum``.
"""
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, Union

from ..errors import MissingChunkFileError
from ..host import DirEntry, HostFileSystem, LocalFileSystem

logger = logging.getLogger(__name__)

COORDINATE_PATTERN = re.compile(r'^(-?\d+)_(-?\d+)$')


class ChunkFileKind(Enum):
    """Files making up one terrain chunk."""
    HEIGHT = 'him'
    TILE = 'til'
    METADATA = 'ifo'


EXTENSION_KINDS = {'.' + kind.value: kind for kind in ChunkFileKind}


@dataclass(frozen=True, order=True)
class ChunkCoordinate:
    x: int
    y: int

    @classmethod
    def parse(cls, name: str) -> Optional['ChunkCoordinate']:
        """Parse '<x>_<y>'; returns None for any other name."""
        match = COORDINATE_PATTERN.match(name)
        if not match:
            return None
        return cls(int(match.group(1)), int(match.group(2)))

    def __str__(self) -> str:
        return f"{self.x}_{self.y}"


@dataclass(frozen=True)
class ChunkBounds:
    """Inclusive coordinate range of the discovered chunks."""
    min_x: int
    min_y: int
    max_x: int
    max_y: int

    @property
    def columns(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def rows(self) -> int:
        return self.max_y - self.min_y + 1

    def normalize(self, coord: ChunkCoordinate) -> Tuple[int, int]:
        return coord.x - self.min_x, coord.y - self.min_y

    def denormalize(self, x: int, y: int) -> ChunkCoordinate:
        return ChunkCoordinate(x + self.min_x, y + self.min_y)


@dataclass
class ChunkFileSet:
    """Paths of the files belonging to one chunk."""
    coordinate: ChunkCoordinate
    grid_position: Tuple[int, int]
    paths: Dict[ChunkFileKind, Path] = field(default_factory=dict)

    @property
    def height_path(self) -> Path:
        return self._require(ChunkFileKind.HEIGHT)

    @property
    def tile_path(self) -> Path:
        return self._require(ChunkFileKind.TILE)

    @property
    def metadata_path(self) -> Path:
        return self._require(ChunkFileKind.METADATA)

    def missing_kinds(self) -> List[ChunkFileKind]:
        return [kind for kind in ChunkFileKind if kind not in self.paths]

    def _require(self, kind: ChunkFileKind) -> Path:
        if kind not in self.paths:
            raise MissingChunkFileError((self.coordinate.x, self.coordinate.y), kind.value.upper())
        return self.paths[kind]


@dataclass
class ChunkIndex:
    """Dense grid of chunk file sets, ``cells[y][x]`` in normalized space."""
    bounds: ChunkBounds
    cells: List[List[ChunkFileSet]]

    @property
    def rows(self) -> int:
        return self.bounds.rows

    @property
    def columns(self) -> int:
        return self.bounds.columns

    def cell(self, x: int, y: int) -> ChunkFileSet:
        return self.cells[y][x]

    def __iter__(self) -> Iterator[ChunkFileSet]:
        for row in self.cells:
            yield from row

    def require_complete(self) -> None:
        """Raise MissingChunkFileError for the first incomplete chunk."""
        for file_set in self:
            missing = file_set.missing_kinds()
            if missing:
                coord = file_set.coordinate
                raise MissingChunkFileError((coord.x, coord.y), missing[0].value.upper())


def _file_coordinate(entry: DirEntry) -> Optional[Tuple[ChunkCoordinate, ChunkFileKind]]:
    path = Path(entry.name)
    kind = EXTENSION_KINDS.get(path.suffix.lower())
    if kind is None:
        return None
    coord = ChunkCoordinate.parse(path.stem)
    if coord is None:
        return None
    return coord, kind


def discover_chunk_bounds(entries: Iterable[DirEntry]) -> Optional[ChunkBounds]:
    """First pass: coordinate range over chunk folders and chunk files.

    Entries whose names are not chunk coordinates are ignored. Returns None
    when nothing matched.
    """
    xs: List[int] = []
    ys: List[int] = []
    for entry in entries:
        if entry.is_dir:
            coord = ChunkCoordinate.parse(entry.name)
        else:
            parsed = _file_coordinate(entry)
            coord = parsed[0] if parsed else None
        if coord is None:
            continue
        xs.append(coord.x)
        ys.append(coord.y)

    if not xs:
        return None
    return ChunkBounds(min_x=min(xs), min_y=min(ys), max_x=max(xs), max_y=max(ys))


def classify_chunk_files(entries: Iterable[DirEntry], bounds: ChunkBounds) -> ChunkIndex:
    """Second pass: file each chunk file into its normalized grid cell."""
    cells = [
        [ChunkFileSet(bounds.denormalize(x, y), (x, y)) for x in range(bounds.columns)]
        for y in range(bounds.rows)
    ]

    for entry in entries:
        if entry.is_dir:
            continue
        parsed = _file_coordinate(entry)
        if parsed is None:
            continue
        coord, kind = parsed
        x, y = bounds.normalize(coord)
        if not (0 <= x < bounds.columns and 0 <= y < bounds.rows):
            logger.warning(f"Ignoring {entry.name}: outside discovered chunk range")
            continue
        file_set = cells[y][x]
        if kind in file_set.paths:
            logger.warning(f"Duplicate {kind.value.upper()} file for chunk {coord}: {entry.name}")
            continue
        file_set.paths[kind] = Path(entry.path).absolute()

    return ChunkIndex(bounds=bounds, cells=cells)


def scan_terrain_directory(directory: Union[str, Path],
                           filesystem: Optional[HostFileSystem] = None) -> Optional[ChunkIndex]:
    """List ``directory`` once and run both discovery passes over it."""
    filesystem = filesystem or LocalFileSystem()
    entries = filesystem.list_dir(directory)
    bounds = discover_chunk_bounds(entries)
    if bounds is None:
        logger.warning(f"No terrain chunks found in {directory}")
        return None

    index = classify_chunk_files(entries, bounds)
    logger.info(
        f"Discovered {index.columns}x{index.rows} chunk grid in {directory} "
        f"(origin {bounds.min_x}_{bounds.min_y})"
    )
    return index
