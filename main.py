#!/usr/bin/env python3
"""
AnimLib - Main Entry Point

Command-line front end for exporting poses and combining animation clips
of glTF models.

Usage:
    python main.py list hero.glb --animations extra.glb
    python main.py export hero.glb --clip Wave --time 0.5 --name wave_pose
    python main.py combine hero.glb Walk Run --export-time 1.2
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from src.animlib import GltfLoadError, MalformedTrackError, Session
from src.animlib.config.settings import DEFAULT_PREVIEW_TIME, EXPORT_DIR


logger = logging.getLogger(__name__)


def _open_session(args: argparse.Namespace) -> Session:
    session = Session()
    session.load_model(args.model)
    for path in args.animations or []:
        session.import_animations(path)
    return session


def _deliver(session: Session, args: argparse.Namespace) -> None:
    if args.stdout:
        sys.stdout.write(session.export_text)
        return
    path = session.save_export(Path(args.output))
    print(f"Exported pose to {path}")


def _cmd_list(args: argparse.Namespace) -> int:
    session = _open_session(args)
    skeleton = session.skeleton
    print(f"Model: {session.export_name}")
    print(f"Bones: {skeleton.bone_count}")
    for bone in skeleton.bones():
        depth = 0
        parent = bone.parent
        while parent is not None and parent is not skeleton.root:
            depth += 1
            parent = parent.parent
        print(f"  {'  ' * depth}{bone.name}")
    print(f"Animations: {len(session.clips)}")
    for clip in session.clips:
        print(f"  {clip.name}  {clip.duration:.3f}s  {len(clip.tracks)} tracks")
    return 0


def _cmd_export(args: argparse.Namespace) -> int:
    session = _open_session(args)
    if args.clip:
        session.export_clip_pose(args.clip, args.time, args.name)
    else:
        session.export_pose(args.name)
    _deliver(session, args)
    return 0


def _cmd_combine(args: argparse.Namespace) -> int:
    session = _open_session(args)
    for name in args.clips:
        session.add_to_combination(name)

    combined = session.combine()
    if combined is None:
        print("Select at least two animations to combine.", file=sys.stderr)
        return 1

    print(f"Combined {len(args.clips)} animations into '{combined.name}': "
          f"{combined.duration:.3f}s, {len(combined.tracks)} tracks")

    if args.export_time is not None:
        session.export_clip_pose(combined, args.export_time, args.name)
        _deliver(session, args)
    return 0


def _add_model_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("model", help="Path to the .glb/.gltf model with the skeleton.")
    parser.add_argument(
        "--animations",
        action="append",
        metavar="FILE",
        help="Additional .glb/.gltf file whose animations are imported (repeatable).",
    )


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--name", help="Export name (defaults to the model file name).")
    parser.add_argument(
        "--output",
        default=str(EXPORT_DIR),
        help="Directory the <NAME>.js file is written to.",
    )
    parser.add_argument("--stdout", action="store_true", help="Print the export instead of writing a file.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Export bone poses and combine animation clips of glTF models.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    list_parser = subparsers.add_parser("list", help="Show the bones and animations of a model.")
    _add_model_arguments(list_parser)
    list_parser.set_defaults(handler=_cmd_list)

    export_parser = subparsers.add_parser("export", help="Export a pose as an animation script.")
    _add_model_arguments(export_parser)
    export_parser.add_argument("--clip", help="Animation to sample (bind pose when omitted).")
    export_parser.add_argument(
        "--time",
        type=float,
        default=DEFAULT_PREVIEW_TIME,
        help="Seconds into the animation to sample.",
    )
    _add_output_arguments(export_parser)
    export_parser.set_defaults(handler=_cmd_export)

    combine_parser = subparsers.add_parser("combine", help="Join animations end to end.")
    _add_model_arguments(combine_parser)
    combine_parser.add_argument("clips", nargs="+", help="Animation names, in playback order.")
    combine_parser.add_argument(
        "--export-time",
        type=float,
        help="Also export the combined animation's pose at this time.",
    )
    _add_output_arguments(combine_parser)
    combine_parser.set_defaults(handler=_cmd_combine)

    return parser


def cli(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.handler(args)
    except (GltfLoadError, MalformedTrackError, KeyError) as e:
        logger.error("%s", e)
        return 1


def main(argv: Sequence[str] | None = None) -> int:
    """CLI-compatible entry point."""

    return cli(argv)


if __name__ == "__main__":
    raise SystemExit(cli())
