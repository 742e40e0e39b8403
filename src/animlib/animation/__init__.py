"""
Animation System

Skeletons, keyframe tracks, clips, playback and clip combination.
"""

from .skeleton import Bone, Skeleton
from .animation import Clip, InterpolationType, MalformedTrackError, Track, TrackKind, rotation_track
from .animation_controller import AnimationController
from .combiner import combine_clips

__all__ = [
    'Bone',
    'Skeleton',
    'Clip',
    'Track',
    'TrackKind',
    'InterpolationType',
    'MalformedTrackError',
    'rotation_track',
    'AnimationController',
    'combine_clips',
]
