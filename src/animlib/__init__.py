"""
AnimLib - glTF Pose Exporter and Clip Combiner

Loads skinned glTF models and their animation clips, joins clips end to
end, and exports bone rotations as scripts for a playback runtime.
"""

# Configuration
from .config.settings import *

# Animation
from .animation import (
    AnimationController,
    Bone,
    Clip,
    InterpolationType,
    MalformedTrackError,
    Skeleton,
    Track,
    TrackKind,
    combine_clips,
)

# Export
from .export import NonFiniteAngleError, export_pose, quantize, write_export

# Loaders
from .loaders import GltfLoader, GltfLoadError, LoadedModel

# Session
from .core.session import Session

__version__ = "0.1.0"
__all__ = [
    # Config (exported via *)
    # Animation
    "AnimationController",
    "Bone",
    "Clip",
    "InterpolationType",
    "MalformedTrackError",
    "Skeleton",
    "Track",
    "TrackKind",
    "combine_clips",
    # Export
    "NonFiniteAngleError",
    "export_pose",
    "quantize",
    "write_export",
    # Loaders
    "GltfLoader",
    "GltfLoadError",
    "LoadedModel",
    # Session
    "Session",
]
