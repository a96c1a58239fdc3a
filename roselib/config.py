"""Conversion settings shared by the terrain, skeleton and mesh builders."""
import json
import logging
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Optional, Tuple, Union, Dict, Any

logger = logging.getLogger(__name__)

# Vertices per tile edge; adjacent tiles share one row/column
DEFAULT_TILE_SIZE = 5
# Width of one terrain chunk in world units (64 grid cells of 2.5m)
DEFAULT_CHUNK_WORLD_SIZE = 160.0
# Texture extensions tried next to a model file, in order of preference
DEFAULT_TEXTURE_EXTENSIONS = ('.png', '.dds')
# IFO object positions are stored in centimetres
DEFAULT_PLACEMENT_SCALE = 0.01


@dataclass
class ConversionSettings:
    """Tunable constants for reconstruction.

    Attributes:
        tile_size: Vertices per tile edge (>= 2)
        chunk_world_size: World units between adjacent chunk origins
        height_scale: Divisor for height samples; None uses the HIM header scale
        strict_versions: Raise UnsupportedVersionError instead of warning
        transform_tangents: Apply the axis swap to mesh tangents
        texture_extensions: Texture extensions to try, most preferred first
        max_workers: Threads used to assemble terrain chunks
        placement_scale: Factor from IFO object positions to world units
    """
    tile_size: int = DEFAULT_TILE_SIZE
    chunk_world_size: float = DEFAULT_CHUNK_WORLD_SIZE
    height_scale: Optional[float] = None
    strict_versions: bool = False
    transform_tangents: bool = True
    texture_extensions: Tuple[str, ...] = field(default=DEFAULT_TEXTURE_EXTENSIONS)
    max_workers: int = 1
    placement_scale: float = DEFAULT_PLACEMENT_SCALE

    def __post_init__(self):
        if self.tile_size < 2:
            raise ValueError(f"tile_size must be >= 2, got {self.tile_size}")
        if self.chunk_world_size <= 0:
            raise ValueError(f"chunk_world_size must be positive, got {self.chunk_world_size}")
        if self.height_scale is not None and self.height_scale == 0:
            raise ValueError("height_scale must not be zero")
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.placement_scale <= 0:
            raise ValueError(f"placement_scale must be positive, got {self.placement_scale}")
        self.texture_extensions = tuple(self.texture_extensions)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConversionSettings':
        """Build settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            logger.warning(f"Ignoring unknown settings: {', '.join(sorted(unknown))}")
        return cls(**{k: v for k, v in data.items() if k in known})

    @classmethod
    def from_json(cls, path: Union[str, Path]) -> 'ConversionSettings':
        with open(path, 'r', encoding='utf-8') as f:
            return cls.from_dict(json.load(f))

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['texture_extensions'] = list(self.texture_extensions)
        return data
