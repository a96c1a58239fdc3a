"""Helpers shared by the format decoders."""
import logging
from pathlib import Path
from typing import Callable, Iterable, List, TypeVar, Union

from ..errors import UnsupportedVersionError
from ..io import BinaryCursor, open_cursor

logger = logging.getLogger(__name__)

T = TypeVar('T')


def resolve_version(format_name: str, version: int, known_versions: Iterable[int],
                    strict: bool, warnings: List[str]) -> int:
    """Map a file version onto a known layout.

    Unknown versions raise in strict mode; otherwise the nearest known
    layout is chosen (newer wins a tie), and a warning is logged and
    recorded.
    """
    known = sorted(known_versions)
    if version in known:
        return version

    fallback = min(known, key=lambda v: (abs(v - version), -v))
    error = UnsupportedVersionError(format_name, version, fallback)
    if strict:
        raise error

    logger.warning(str(error))
    warnings.append(str(error))
    return fallback


def load_file(path: Union[str, Path], read: Callable[..., T], **kwargs) -> T:
    """Open ``path`` and decode it with ``read(cursor, **kwargs)``."""
    cursor = open_cursor(path)
    logger.debug(f"Decoding {path} ({len(cursor)} bytes)")
    return read(cursor, **kwargs)


def parse_version_suffix(identifier: str, prefix: str) -> int:
    """Return the numeric part of identifiers such as 'ZMS0008'."""
    digits = identifier[len(prefix):]
    return int(digits) if digits.isdigit() else -1


__all__ = ['BinaryCursor', 'resolve_version', 'load_file', 'parse_version_suffix']
