"""IDX (virtual file system index) decoder.

The client ships its assets packed into ``.vfs`` blobs described by a single
``.idx`` index. The index header lists each file system by name together with
the offset of its file table.
"""
import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import List, Union

from ..io import BinaryCursor
from .base import load_file

logger = logging.getLogger(__name__)


@dataclass
class VfsFileEntry:
    path: str
    offset: int
    size: int
    block_size: int
    is_deleted: bool
    is_compressed: bool
    is_encrypted: bool
    version: int
    checksum: int


@dataclass
class VfsTable:
    filename: str
    files: List[VfsFileEntry] = field(default_factory=list)


@dataclass
class VfsIndex:
    base_version: int
    current_version: int
    file_systems: List[VfsTable] = field(default_factory=list)

    def find(self, path: str):
        """Look up an entry by its client path, ignoring case and separators."""
        wanted = normalize_vfs_path(path)
        for vfs in self.file_systems:
            for entry in vfs.files:
                if normalize_vfs_path(entry.path) == wanted:
                    return vfs, entry
        return None


def normalize_vfs_path(path: str) -> str:
    return str(PurePosixPath(path.replace('\\', '/'))).upper()


def read_idx(cursor: BinaryCursor) -> VfsIndex:
    index = VfsIndex(base_version=cursor.read_i32(), current_version=cursor.read_i32())

    vfs_count = cursor.read_i32()
    headers = []
    for _ in range(vfs_count):
        filename = cursor.read_length_prefixed_string('u16')
        headers.append((filename, cursor.read_i32()))

    for filename, offset in headers:
        cursor.seek(offset)
        table = VfsTable(filename=filename)

        file_count = cursor.read_i32()
        _delete_count = cursor.read_i32()
        _start_offset = cursor.read_i32()
        for _ in range(file_count):
            table.files.append(VfsFileEntry(
                path=normalize_vfs_path(cursor.read_length_prefixed_string('u16')),
                offset=cursor.read_i32(),
                size=cursor.read_i32(),
                block_size=cursor.read_i32(),
                is_deleted=cursor.read_bool(),
                is_compressed=cursor.read_bool(),
                is_encrypted=cursor.read_bool(),
                version=cursor.read_i32(),
                checksum=cursor.read_i32(),
            ))
        index.file_systems.append(table)
        logger.debug(f"{filename}: {len(table.files)} entries")

    return index


def load_idx(path: Union[str, Path]) -> VfsIndex:
    return load_file(path, read_idx)
