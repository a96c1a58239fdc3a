"""Filesystem capabilities the converter needs from its host.

Editors embedding roselib can supply their own implementation (for example
one backed by a virtual file system); ``LocalFileSystem`` covers plain disk
access.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from .errors import UnreadableFileError


@dataclass(frozen=True)
class DirEntry:
    name: str
    path: Path
    is_dir: bool


class HostFileSystem:
    """Interface for directory listing and existence checks."""

    def list_dir(self, directory: Union[str, Path]) -> List[DirEntry]:
        raise NotImplementedError("Host file systems must implement list_dir")

    def file_exists(self, path: Union[str, Path]) -> bool:
        raise NotImplementedError("Host file systems must implement file_exists")


class LocalFileSystem(HostFileSystem):
    """Host file system backed by the local disk."""

    def list_dir(self, directory: Union[str, Path]) -> List[DirEntry]:
        directory = Path(directory)
        try:
            with os.scandir(directory) as it:
                entries = [
                    DirEntry(name=e.name, path=directory / e.name, is_dir=e.is_dir())
                    for e in it
                ]
        except OSError as e:
            raise UnreadableFileError(directory, e.strerror or str(e)) from e
        return sorted(entries, key=lambda e: e.name)

    def file_exists(self, path: Union[str, Path]) -> bool:
        return os.path.isfile(path)
