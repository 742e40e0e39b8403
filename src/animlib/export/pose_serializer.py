"""
Pose Serializer

Writes the current bone rotations of a skeleton as an animation script
for the external playback runtime.

The generated text has this shape::

    export const POSE1 = (ref) => {

        let animations = []

        animations.push(["Arm", "rotation", "x", Math.PI/2, "+"]);

        ref.animations.push(animations);

        if(ref.pending === false){
            ref.pending = true;
            ref.animate();
        }

    }

The runtime queues each pushed list and only starts consuming when it is
idle, so ``animate()`` is triggered at most once per pending queue.
"""

import logging
from pathlib import Path
from typing import List, NamedTuple, Optional

from ..animation.skeleton import Skeleton
from ..config.settings import (
    EXPORT_AXES,
    EXPORT_DIR,
    EXPORT_FILE_EXTENSION,
    EXPORT_INDENT,
    EXPORT_PROPERTY,
)
from .quantizer import NonFiniteAngleError, is_zero, quantize

logger = logging.getLogger(__name__)


class PoseInstruction(NamedTuple):
    """One exported axis rotation."""
    bone_name: str
    axis: str
    value: str   # Quantized value or fraction label, sign included
    sign: str    # "+" or "-", from the raw value


def export_identifier(export_name: str) -> str:
    """Name of the exported constant."""
    return export_name.upper()


def export_file_name(export_name: str) -> str:
    """File name the export is delivered as, e.g. ``POSE1.js``."""
    return f"{export_identifier(export_name)}{EXPORT_FILE_EXTENSION}"


def pose_instructions(skeleton: Skeleton) -> List[PoseInstruction]:
    """
    Collect one instruction per non-zero bone rotation axis.

    Bones are visited depth-first; axes in x, y, z order.
    """
    instructions = []
    for node in skeleton.traverse():
        if not node.is_bone:
            continue

        for axis, raw in zip(EXPORT_AXES, node.rotation):
            raw = float(raw)
            if is_zero(raw):
                continue
            try:
                value = quantize(raw)
            except NonFiniteAngleError:
                logger.warning("Skipping %s.rotation.%s: non-finite value %r", node.name, axis, raw)
                continue
            sign = "+" if raw >= 0 else "-"
            instructions.append(PoseInstruction(node.name, axis, value, sign))

    return instructions


def render_instruction(instruction: PoseInstruction) -> str:
    return (
        f'animations.push(["{instruction.bone_name}", "{EXPORT_PROPERTY}", '
        f'"{instruction.axis}", {instruction.value}, "{instruction.sign}"]);'
    )


def export_pose(skeleton: Optional[Skeleton], export_name: str) -> str:
    """
    Serialize the skeleton's current pose.

    Args:
        skeleton: Posed skeleton (None yields an empty string)
        export_name: Name of the exported constant, upper-cased in the output

    Returns:
        The complete script text
    """
    if skeleton is None:
        return ""

    indent = EXPORT_INDENT
    lines = [
        f"export const {export_identifier(export_name)} = (ref) => {{",
        "",
        f"{indent}let animations = []",
        "",
    ]
    lines.extend(indent + render_instruction(instruction) for instruction in pose_instructions(skeleton))
    lines.extend([
        "",
        f"{indent}ref.animations.push(animations);",
        "",
        f"{indent}if(ref.pending === false){{",
        f"{indent}{indent}ref.pending = true;",
        f"{indent}{indent}ref.animate();",
        f"{indent}}}",
        "",
        "}",
    ])
    return "\n".join(lines) + "\n"


def write_export(text: str, export_name: str, directory: Optional[Path] = None) -> Path:
    """
    Save export text as ``<EXPORT_NAME>.js``.

    Args:
        text: Script text from export_pose
        export_name: Export name (file name is derived from it)
        directory: Target directory, created if missing (default EXPORT_DIR)

    Returns:
        Path of the written file
    """
    directory = Path(directory) if directory is not None else EXPORT_DIR
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_file_name(export_name)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote pose export: %s", path)
    return path
