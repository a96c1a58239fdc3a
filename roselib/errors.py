"""Exception hierarchy for ROSE asset decoding and reconstruction."""
from typing import Tuple


class RoseError(Exception):
    """Base exception for all roselib failures."""
    pass


class TruncatedInputError(RoseError):
    """Raised when a stream holds fewer bytes than a read requests."""

    def __init__(self, offset: int, requested: int, available: int):
        self.offset = offset
        self.requested = requested
        self.available = available
        super().__init__(
            f"Truncated input at offset {offset}: "
            f"requested {requested} bytes, {available} available"
        )


class InvalidMagicError(RoseError):
    """Raised when a file header signature does not match its format."""

    def __init__(self, expected: str, found: str):
        self.expected = expected
        self.found = found
        super().__init__(f"Invalid magic: expected {expected}, found {found!r}")


class UnsupportedVersionError(RoseError):
    """Raised (in strict mode) for a version outside the known range.

    In the default lenient mode decoders log this condition and carry on
    with the nearest known layout instead of raising.
    """

    def __init__(self, format_name: str, version: int, fallback: int):
        self.format_name = format_name
        self.version = version
        self.fallback = fallback
        super().__init__(
            f"Unsupported {format_name} version {version}, "
            f"decoding with version {fallback} layout"
        )


class MissingChunkFileError(RoseError):
    """Raised when a terrain chunk lacks one of its required files."""

    def __init__(self, coord: Tuple[int, int], kind: str):
        self.coord = coord
        self.kind = kind
        super().__init__(f"Chunk {coord[0]}_{coord[1]} is missing its {kind} file")


class MalformedSkeletonError(RoseError):
    """Raised when a bone references a parent that does not precede it."""
    pass


class UnreadableFileError(RoseError):
    """Raised when a file cannot be opened or read."""

    def __init__(self, path, reason: str):
        self.path = path
        super().__init__(f"Cannot read {path}: {reason}")


class TerrainLayoutError(RoseError):
    """Raised when a heightmap cannot be re-tiled with the configured tile size."""
    pass


class InvalidTileIndexError(RoseError):
    """Raised when a tile map entry points outside the zone tile table."""
    pass


class MalformedMeshError(RoseError):
    """Raised when mesh data cannot be turned into renderable geometry."""
    pass
