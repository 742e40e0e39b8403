"""
Animation Controller

Manages clip playback and writes sampled values onto skeleton nodes.
"""

import logging
from typing import Optional

from pyrr import Vector3

from ..config.settings import DEFAULT_LOOP, DEFAULT_PLAYBACK_SPEED
from .animation import Clip, TrackKind
from .skeleton import Skeleton

logger = logging.getLogger(__name__)


class AnimationController:
    """
    Controls animation playback for a skeleton.

    Manages:
    - Current clip and playback time
    - Play/pause/loop states
    - Applying clip data to skeleton nodes
    """

    def __init__(self, skeleton: Skeleton):
        """
        Initialize animation controller.

        Args:
            skeleton: Skeleton to animate
        """
        self.skeleton = skeleton
        self.current_clip: Optional[Clip] = None
        self.current_time: float = 0.0
        self.is_playing: bool = False
        self.loop: bool = DEFAULT_LOOP
        self.playback_speed: float = DEFAULT_PLAYBACK_SPEED

    def play(self, clip: Clip, loop: bool = DEFAULT_LOOP):
        """
        Start playing a clip from its beginning.

        Any clip already playing is stopped first, and the first frame
        is applied immediately.

        Args:
            clip: Clip to play
            loop: Whether to loop the clip
        """
        self.stop()
        self.current_clip = clip
        self.current_time = 0.0
        self.is_playing = True
        self.loop = loop
        self._apply_clip_to_skeleton(clip, 0.0)

    def pause(self):
        """Pause playback."""
        self.is_playing = False

    def resume(self):
        """Resume playback."""
        if self.current_clip is not None:
            self.is_playing = True

    def stop(self):
        """Stop playback and reset to bind pose."""
        self.is_playing = False
        self.current_clip = None
        self.current_time = 0.0
        self.skeleton.reset_pose()

    def update(self, delta_time: float):
        """
        Advance playback.

        Args:
            delta_time: Time elapsed since last frame (seconds)
        """
        if not self.is_playing or self.current_clip is None:
            return

        clip = self.current_clip
        self.current_time += delta_time * self.playback_speed

        # Handle looping
        if self.current_time >= clip.duration:
            if self.loop and clip.duration > 0.0:
                self.current_time = self.current_time % clip.duration
            else:
                self.current_time = clip.duration
                self.is_playing = False

        self._apply_clip_to_skeleton(clip, self.current_time)

    def seek(self, time: float):
        """Jump to ``time`` in the current clip without changing play state."""
        if self.current_clip is None:
            return
        self.current_time = min(max(time, 0.0), self.current_clip.duration)
        self._apply_clip_to_skeleton(self.current_clip, self.current_time)

    def _apply_clip_to_skeleton(self, clip: Clip, time: float):
        """
        Write the clip's sampled values onto matching nodes.

        Tracks naming nodes missing from the skeleton are ignored.
        """
        for (node_name, kind), value in clip.sample_all(time).items():
            node = self.skeleton.find_node(node_name)
            if node is None:
                logger.debug("No node named '%s' for track %s", node_name, kind.tag)
                continue

            if kind == TrackKind.ROTATION:
                node.set_rotation_from_quaternion(value)
            elif kind == TrackKind.POSITION:
                node.position = Vector3(value)
            elif kind == TrackKind.SCALE:
                node.scale = Vector3(value)

    def __repr__(self):
        clip_name = self.current_clip.name if self.current_clip else "None"
        return f"AnimationController(clip='{clip_name}', time={self.current_time:.2f}s, playing={self.is_playing})"
