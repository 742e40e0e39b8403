"""
Clip Combiner

Concatenates clips end to end into a single clip.
"""

import logging
from typing import List, Optional, Sequence

from ..config.settings import COMBINED_CLIP_NAME, MIN_CLIPS_TO_COMBINE
from .animation import Clip, Track

logger = logging.getLogger(__name__)


def combine_clips(
    clips: Sequence[Clip],
    minimum_count: int = MIN_CLIPS_TO_COMBINE,
    name: str = COMBINED_CLIP_NAME,
) -> Optional[Clip]:
    """
    Stitch clips together in the given order.

    Each clip's tracks are copied with their times shifted by the summed
    duration of the clips before it. Tracks aimed at the same node and
    property in different clips stay separate; they never overlap in time.

    Args:
        clips: Clips to join, in playback order
        minimum_count: Fewest clips accepted (never below two)
        name: Name of the resulting clip

    Returns:
        The combined clip, or None when too few clips were given
    """
    required = max(MIN_CLIPS_TO_COMBINE, minimum_count)
    if len(clips) < required:
        logger.info("Combine skipped: %d clip(s) selected, need at least %d", len(clips), required)
        return None

    time_offset = 0.0
    tracks: List[Track] = []

    for clip in clips:
        for track in clip.tracks:
            tracks.append(track.shifted(time_offset))
        time_offset += clip.duration

    combined = Clip(name=name, duration=time_offset, tracks=tuple(tracks))
    logger.info(
        "Combined %s into '%s' (%.2fs, %d tracks)",
        ", ".join(clip.name for clip in clips), combined.name, combined.duration, len(tracks),
    )
    return combined
