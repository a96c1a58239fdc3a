"""Reading and writing ROSE binary data types."""
from pathlib import Path
from typing import Union

from .reader import BinaryCursor, decode_text
from .writer import BinaryWriter
from ..errors import UnreadableFileError


def open_cursor(path: Union[str, Path]) -> BinaryCursor:
    """Read a whole file into a BinaryCursor.

    The file handle is closed before returning, on success and on error.
    """
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise UnreadableFileError(path, e.strerror or str(e)) from e
    return BinaryCursor(data, name=str(path))


__all__ = [
    'BinaryCursor',
    'BinaryWriter',
    'decode_text',
    'open_cursor',
]
