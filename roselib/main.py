"""rose-conv command line interface."""
import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Any, Dict, Optional

from .config import ConversionSettings
from .errors import RoseError
from .export import save_gltf, save_heightmap, mesh_to_gltf, terrain_to_gltf, write_obj
from .formats import load_idx, load_lit, load_zmd, load_zms, load_zon
from .mesh import MeshBuilder
from .skeleton import Skeleton, SkeletonBuilder
from .terrain import TerrainAssembler
from .utils.logging import setup_logging, shutdown_logging

logger = logging.getLogger(__name__)


def load_settings(args: argparse.Namespace) -> ConversionSettings:
    """Settings from --config, overridden by explicit flags."""
    data: Dict[str, Any] = {}
    if args.config:
        data.update(ConversionSettings.from_json(args.config).to_dict())
    if getattr(args, 'tile_size', None) is not None:
        data['tile_size'] = args.tile_size
    if getattr(args, 'workers', None) is not None:
        data['max_workers'] = args.workers
    if getattr(args, 'strict', False):
        data['strict_versions'] = True
    return ConversionSettings.from_dict(data)


def write_json(data: Any, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(data, f, indent=2)
    logger.info(f"Results written to {path}")


def skeleton_to_dict(skeleton: Skeleton) -> Dict[str, Any]:
    return {
        'bones': [
            {
                'name': bone.name,
                'parent': bone.parent,
                'dummy': bone.is_dummy,
                'rotation': list(bone.rest.rotation),
                'translation': list(bone.rest.translation),
            }
            for bone in skeleton.bones
        ]
    }


def run_terrain(args: argparse.Namespace, settings: ConversionSettings) -> None:
    zone = load_zon(args.zone) if args.zone else None
    terrain = TerrainAssembler(settings, zone=zone).assemble(args.directory)

    name = Path(args.directory).name
    save_gltf(terrain_to_gltf(terrain), args.out_dir / f"{name}.gltf")
    if args.heightmap:
        save_heightmap(terrain, args.out_dir / f"{name}_height.png")


def run_mesh(args: argparse.Namespace, settings: ConversionSettings) -> None:
    source = Path(args.file)
    geometry = MeshBuilder(settings).build(load_zms(source, settings.strict_versions), source)

    if args.format == 'obj':
        path = args.out_dir / f"{source.stem}.obj"
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w', encoding='utf-8') as f:
            write_obj(geometry, f)
        logger.info(f"Wrote {path}")
    else:
        save_gltf(mesh_to_gltf(geometry), args.out_dir / f"{source.stem}.gltf")


def run_skeleton(args: argparse.Namespace, settings: ConversionSettings) -> None:
    source = Path(args.file)
    skeleton = SkeletonBuilder().build(load_zmd(source, settings.strict_versions),
                                       include_dummies=not args.no_dummies)
    write_json(skeleton_to_dict(skeleton), args.out_dir / f"{source.stem}_skeleton.json")


def run_lightmap(args: argparse.Namespace, settings: ConversionSettings) -> None:
    source = Path(args.file)
    write_json(asdict(load_lit(source)), args.out_dir / f"{source.stem}_lightmap.json")


def run_vfs_index(args: argparse.Namespace, settings: ConversionSettings) -> None:
    source = Path(args.file)
    index = load_idx(source)
    if args.find:
        match = index.find(args.find)
        if match is None:
            logger.warning(f"{args.find} not found in {source}")
        else:
            vfs, entry = match
            logger.info(f"{entry.path} in {vfs.filename} at {entry.offset} ({entry.size} bytes)")
        return
    write_json(asdict(index), args.out_dir / f"{source.stem}_index.json")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='rose-conv',
        description='Convert ROSE Online client files into scenes and exports'
    )
    parser.add_argument('--config', help='JSON file with conversion settings')
    parser.add_argument('--log-dir', default='logs', help='Log directory')
    parser.add_argument('--out-dir', default='output', type=Path,
                        help='Output directory')
    parser.add_argument('--strict', action='store_true',
                        help='Fail on unknown format versions')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable verbose logging')

    commands = parser.add_subparsers(dest='command', required=True)

    terrain = commands.add_parser('terrain', help='Assemble a map directory into glTF')
    terrain.add_argument('directory', help='Directory holding x_y chunk files')
    terrain.add_argument('--zone', help='ZON file used to resolve tile textures')
    terrain.add_argument('--tile-size', type=int, help='Vertices per tile edge')
    terrain.add_argument('--workers', type=int, help='Threads used to build chunks')
    terrain.add_argument('--heightmap', action='store_true',
                         help='Also write a grayscale heightmap PNG')
    terrain.set_defaults(handler=run_terrain)

    mesh = commands.add_parser('mesh', help='Convert a ZMS mesh')
    mesh.add_argument('file', help='ZMS file')
    mesh.add_argument('--format', choices=('obj', 'gltf'), default='obj')
    mesh.set_defaults(handler=run_mesh)

    skeleton = commands.add_parser('skeleton', help='Dump a ZMD skeleton as JSON')
    skeleton.add_argument('file', help='ZMD file')
    skeleton.add_argument('--no-dummies', action='store_true',
                          help='Leave dummy attachment points out')
    skeleton.set_defaults(handler=run_skeleton)

    lightmap = commands.add_parser('lightmap', help='Dump a LIT lightmap as JSON')
    lightmap.add_argument('file', help='LIT file')
    lightmap.set_defaults(handler=run_lightmap)

    vfs = commands.add_parser('vfs-index', help='List or search a VFS index')
    vfs.add_argument('file', help='IDX file')
    vfs.add_argument('--find', help='Client path to look up')
    vfs.set_defaults(handler=run_vfs_index)

    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)

    session = setup_logging(args.log_dir, args.command, verbose=args.verbose)
    try:
        return run_command(args)
    finally:
        if session.warnings.total:
            logger.info(f"{session.warnings.total} warnings or errors logged, see {session.log_file}")
        shutdown_logging()


def run_command(args: argparse.Namespace) -> int:
    try:
        settings = load_settings(args)
    except (OSError, ValueError, TypeError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        args.handler(args, settings)
        logger.info("Processing complete")
    except RoseError as e:
        logger.error(f"Processing failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
