"""Pose export: angle quantization and script generation."""

from .quantizer import NonFiniteAngleError, is_zero, quantize
from .pose_serializer import (
    PoseInstruction,
    export_file_name,
    export_identifier,
    export_pose,
    pose_instructions,
    write_export,
)

__all__ = [
    'NonFiniteAngleError',
    'is_zero',
    'quantize',
    'PoseInstruction',
    'export_file_name',
    'export_identifier',
    'export_pose',
    'pose_instructions',
    'write_export',
]
