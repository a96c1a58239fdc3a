"""Wavefront OBJ export of reconstructed meshes."""
from typing import TextIO

from .. import __version__
from ..errors import MalformedMeshError
from ..mesh import MeshGeometry


def write_obj(geometry: MeshGeometry, stream: TextIO) -> None:
    """Write positions, UVs, normals and faces of ``geometry``.

    V is flipped because OBJ puts the texture origin bottom-left.
    """
    position = geometry.channels.get('position')
    if position is None:
        raise MalformedMeshError(f"Mesh {geometry.name} has no position channel")

    stream.write(f"# Exported using roselib v{__version__}\n")
    stream.write(f"o {geometry.name}\n")

    for x, y, z in position.tolist():
        stream.write(f"v {x} {y} {z}\n")

    uv = geometry.channels.get('uv1')
    if uv is not None:
        for u, v in uv.tolist():
            stream.write(f"vt {u} {1.0 - v}\n")

    normal = geometry.channels.get('normal')
    if normal is not None:
        for x, y, z in normal.tolist():
            stream.write(f"vn {x} {y} {z}\n")

    for face in geometry.indices.tolist():
        refs = []
        for i in face:
            i += 1
            if uv is not None and normal is not None:
                refs.append(f"{i}/{i}/{i}")
            elif uv is not None:
                refs.append(f"{i}/{i}")
            elif normal is not None:
                refs.append(f"{i}//{i}")
            else:
                refs.append(str(i))
        stream.write(f"f {' '.join(refs)}\n")
