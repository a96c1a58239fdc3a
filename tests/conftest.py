"""Shared fixtures for roselib tests."""
import random

import pytest

from builders import create_ifo, create_ifo_object, write_chunk
from roselib.formats.ifo import BlockType


@pytest.fixture
def map_dir(tmp_path):
    """A 1x2 map: chunks 33_33 and 34_33 plus their lightmap folders

    Each chunk holds a tree 10m east, 20m north and 5m up from the chunk
    corner, stored in world centimetres like the client files.
    """
    directory = tmp_path / "map"
    directory.mkdir()
    rng = random.Random(7)
    for x in (33, 34):
        (directory / f"{x}_33").mkdir()
        heights = [rng.uniform(0.0, 50.0) for _ in range(65 * 65)]
        ifo = create_ifo([
            (BlockType.DECORATION, [create_ifo_object(
                'tree', 3, position=((x * 160 + 10.0) * 100, (33 * 160 + 20.0) * 100, 500.0),
            )]),
        ])
        write_chunk(directory, x, 33, heights=heights, ifo=ifo)
    (directory / "notes.txt").write_text("not a chunk")
    return directory
