"""Helpers that build ROSE binary files in memory."""
import struct
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple


def u8_string(s: str) -> bytes:
    raw = s.encode('utf-8')
    return struct.pack('<B', len(raw)) + raw


def u16_string(s: str) -> bytes:
    raw = s.encode('utf-8')
    return struct.pack('<H', len(raw)) + raw


def create_him(width: int, height: int, heights: Optional[Sequence[float]] = None,
               scale: float = 1.0, grid_count: int = 4) -> bytes:
    """Create a heightmap; samples default to 0.0"""
    if heights is None:
        heights = [0.0] * (width * height)
    return struct.pack('<iiif', width, height, grid_count, scale) + \
        struct.pack(f'<{len(heights)}f', *heights)


def create_til(width: int, height: int, tile_ids: Optional[Sequence[int]] = None) -> bytes:
    """Create a tile map; every entry points at tile 0 unless given"""
    if tile_ids is None:
        tile_ids = [0] * (width * height)
    data = struct.pack('<ii', width, height)
    for i, tile_id in enumerate(tile_ids):
        data += struct.pack('<BBBi', 1, i % 256, 0, tile_id)
    return data


def create_ifo_object(name: str = 'obj', object_id: int = 1,
                      position=(0.0, 0.0, 0.0), rotation=(0.0, 0.0, 0.0, 1.0),
                      scale=(1.0, 1.0, 1.0), map_position=(0, 0),
                      warp_id: int = 0, event_id: int = 0, object_type: int = 1) -> bytes:
    """Create the common part of a placement record (rotation as x, y, z, w)"""
    return u8_string(name) + struct.pack(
        '<hhiiii4f3f3f',
        warp_id, event_id, object_type, object_id,
        map_position[0], map_position[1],
        *rotation, *position, *scale
    )


def create_block_file(blocks: List[Tuple[int, bytes]]) -> bytes:
    """Create a file with a (type, offset) block table, as IFO and ZON use"""
    header_size = 4 + 8 * len(blocks)
    table = struct.pack('<i', len(blocks))
    body = b''
    for block_type, data in blocks:
        table += struct.pack('<ii', block_type, header_size + len(body))
        body += data
    return table + body


def create_ifo(blocks: Iterable[Tuple[int, List[bytes]]] = ()) -> bytes:
    """Create an IFO file from (block type, records) pairs"""
    return create_block_file([
        (block_type, struct.pack('<i', len(records)) + b''.join(records))
        for block_type, records in blocks
    ])


def create_zmd(bones: Sequence[Tuple[int, str, tuple, tuple]],
               dummies: Sequence[Tuple[str, int, tuple, tuple]] = (),
               identifier: str = 'ZMD0003') -> bytes:
    """Create a skeleton; rotations are given as (w, x, y, z)"""
    data = identifier.encode('ascii')
    data += struct.pack('<i', len(bones))
    for parent, name, position, rotation in bones:
        data += struct.pack('<i', parent) + name.encode('utf-8') + b'\0'
        data += struct.pack('<3f4f', *position, *rotation)

    data += struct.pack('<i', len(dummies))
    for name, parent, position, rotation in dummies:
        data += name.encode('utf-8') + b'\0' + struct.pack('<i3f', parent, *position)
        if identifier >= 'ZMD0003':
            data += struct.pack('<4f', *rotation)
    return data


def create_zms(fmt: int, positions: Sequence[tuple], triangles: Sequence[tuple],
               uv1: Optional[Sequence[tuple]] = None,
               normals: Optional[Sequence[tuple]] = None,
               bone_streams: Optional[Sequence[Tuple[tuple, tuple]]] = None,
               bone_table: Sequence[int] = (),
               identifier: str = 'ZMS0008', materials: Sequence[int] = (),
               strips: Sequence[int] = (), pool: int = 0) -> bytes:
    """Create a mesh with planar attribute streams.

    Only the streams enabled in ``fmt`` should be passed.
    """
    data = identifier.encode('ascii') + b'\0'
    data += struct.pack('<i6f', fmt, 0, 0, 0, 1, 1, 1)
    data += struct.pack('<h', len(bone_table)) + b''.join(struct.pack('<h', b) for b in bone_table)

    data += struct.pack('<h', len(positions))
    data += b''.join(struct.pack('<3f', *p) for p in positions)
    if normals is not None:
        data += b''.join(struct.pack('<3f', *n) for n in normals)
    if bone_streams is not None:
        data += b''.join(struct.pack('<4f4h', *w, *i) for w, i in bone_streams)
    if uv1 is not None:
        data += b''.join(struct.pack('<2f', *uv) for uv in uv1)

    data += struct.pack('<h', len(triangles))
    data += b''.join(struct.pack('<3h', *t) for t in triangles)
    data += struct.pack('<h', len(materials)) + b''.join(struct.pack('<h', m) for m in materials)
    data += struct.pack('<h', len(strips)) + b''.join(struct.pack('<h', s) for s in strips)
    if identifier.endswith('8'):
        data += struct.pack('<h', pool)
    return data


def create_zon(textures: Sequence[str], tiles: Sequence[tuple]) -> bytes:
    """Create a zone file with texture (2) and tile (3) blocks.

    Tiles are (layer1, layer2, offset1, offset2, blending, rotation, tile_type).
    """
    texture_block = struct.pack('<i', len(textures)) + b''.join(u8_string(t) for t in textures)
    tile_block = struct.pack('<i', len(tiles)) + b''.join(struct.pack('<7i', *t) for t in tiles)
    return create_block_file([(0, b'\0' * 8), (2, texture_block), (3, tile_block)])


def create_idx(tables: Sequence[Tuple[str, Sequence[Tuple[str, int, int]]]],
               base_version: int = 1, current_version: int = 2) -> bytes:
    """Create a VFS index from (vfs name, [(path, offset, size)]) tables"""
    header_size = 12 + sum(2 + len(name.encode('utf-8')) + 4 for name, _ in tables)
    header = struct.pack('<iii', base_version, current_version, len(tables))
    body = b''
    for name, files in tables:
        header += u16_string(name) + struct.pack('<i', header_size + len(body))
        body += struct.pack('<iii', len(files), 0, 0)
        for path, offset, size in files:
            body += u16_string(path) + struct.pack('<iii???ii', offset, size, 0, False, False, False, 1, 0)
    return header + body


def write_chunk(directory: Path, x: int, y: int, size: int = 65,
                heights: Optional[Sequence[float]] = None,
                kinds: Sequence[str] = ('HIM', 'TIL', 'IFO'),
                tile_ids: Optional[Sequence[int]] = None,
                ifo: Optional[bytes] = None) -> None:
    """Write the files of one terrain chunk into ``directory``"""
    stem = directory / f"{x}_{y}"
    if 'HIM' in kinds:
        stem.with_suffix('.HIM').write_bytes(create_him(size, size, heights))
    if 'TIL' in kinds:
        stem.with_suffix('.TIL').write_bytes(create_til(16, 16, tile_ids))
    if 'IFO' in kinds:
        stem.with_suffix('.IFO').write_bytes(ifo if ifo is not None else create_ifo())
