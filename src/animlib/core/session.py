"""
Session

Holds the loaded skeleton, the available clips, the clip combination being
assembled and the last pose export. Operator actions go through here.
"""

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..animation import AnimationController, Clip, Skeleton, combine_clips
from ..config.settings import DEFAULT_PREVIEW_TIME
from ..export import export_pose, write_export
from ..loaders import GltfLoader, model_stem

logger = logging.getLogger(__name__)

ClipRef = Union[Clip, str]


class Session:
    """
    Single-operator editing session.

    Lifecycle:
    - load_model() replaces the skeleton and clip set
    - import_animations() appends clips
    - combine() appends a "combined" clip and clears the selection
    - export_pose() replaces the export text
    """

    def __init__(self, loader: Optional[GltfLoader] = None):
        self.loader = loader if loader is not None else GltfLoader()
        self.skeleton: Optional[Skeleton] = None
        self.controller: Optional[AnimationController] = None
        self.clips: List[Clip] = []
        self.combination: List[Clip] = []
        self.selected_clip: Optional[Clip] = None
        self.export_name: str = ""
        self.export_text: str = ""

    # ------------------------------------------------------------------
    # Import
    # ------------------------------------------------------------------

    def register(self, skeleton: Skeleton, clips: Sequence[Clip] = (), name: str = ""):
        """
        Make ``skeleton`` and ``clips`` the session's model.

        Previous clips, selection and export text are discarded.
        """
        self.skeleton = skeleton
        self.controller = AnimationController(skeleton)
        self.clips = list(clips)
        self.combination = []
        self.selected_clip = self.clips[0] if self.clips else None
        self.export_name = name or skeleton.name
        self.export_text = ""

    def load_model(self, filepath) -> Skeleton:
        """
        Load a model file; its file name becomes the export name.

        Raises:
            GltfLoadError: If the file cannot be read
        """
        model = self.loader.load(filepath)
        self.register(model.skeleton, model.clips, model_stem(filepath))
        return model.skeleton

    def import_animations(self, filepath) -> List[Clip]:
        """Append the clips of another model file to the available set."""
        clips = self.loader.load_animations(filepath)
        self.clips.extend(clips)
        logger.info("Imported %d animation(s) from %s", len(clips), filepath)
        return clips

    # ------------------------------------------------------------------
    # Clips
    # ------------------------------------------------------------------

    def find_clip(self, name: str) -> Clip:
        """
        Look up an available clip by name; the most recent one wins.

        Raises:
            KeyError: If no clip has that name
        """
        for clip in reversed(self.clips):
            if clip.name == name:
                return clip
        raise KeyError(f"No animation named '{name}'. Available: {self.clip_names()}")

    def clip_names(self) -> List[str]:
        return [clip.name for clip in self.clips]

    def _resolve(self, clip: ClipRef) -> Clip:
        return self.find_clip(clip) if isinstance(clip, str) else clip

    def add_to_combination(self, clip: ClipRef) -> List[Clip]:
        """Append a clip to the combination; the same clip may be added twice."""
        self.combination.append(self._resolve(clip))
        return self.combination

    def clear_combination(self):
        self.combination = []

    def combine(self) -> Optional[Clip]:
        """
        Combine the selected clips in selection order.

        Returns:
            The new clip (also appended to the available set), or None when
            fewer than two clips are selected
        """
        combined = combine_clips(self.combination)
        if combined is None:
            return None

        self.clips.append(combined)
        self.combination = []
        return combined

    # ------------------------------------------------------------------
    # Playback and export
    # ------------------------------------------------------------------

    def play(self, clip: ClipRef, time: float = 0.0) -> Optional[Clip]:
        """
        Stop whatever is playing and play ``clip`` from ``time``.

        ``time`` is clamped to the clip, so the last frame is reachable.

        Returns:
            The clip now playing, or None without a loaded model
        """
        if self.controller is None:
            logger.info("Play skipped: no model loaded")
            return None

        clip = self._resolve(clip)
        self.controller.play(clip)
        if time > 0.0:
            self.controller.seek(time)
        self.selected_clip = clip
        return clip

    def update(self, delta_time: float):
        """Advance playback by one frame."""
        if self.controller is not None:
            self.controller.update(delta_time)

    def export_pose(self, name: Optional[str] = None) -> str:
        """
        Export the skeleton's current pose.

        Without a loaded skeleton nothing happens and the previous export
        is kept.

        Args:
            name: Export name (defaults to the model name)

        Returns:
            The export text, or "" when no skeleton is loaded
        """
        if self.skeleton is None:
            logger.info("Export skipped: no model loaded")
            return ""

        if name:
            self.export_name = name
        self.export_text = export_pose(self.skeleton, self.export_name)
        return self.export_text

    def export_clip_pose(self, clip: Optional[ClipRef] = None, time: float = DEFAULT_PREVIEW_TIME,
                         name: Optional[str] = None) -> str:
        """
        Play a clip for ``time`` seconds and export the resulting pose.

        Args:
            clip: Clip to sample (defaults to the selected clip)
            time: Seconds to advance before exporting
            name: Export name
        """
        clip = clip if clip is not None else self.selected_clip
        if self.skeleton is None or clip is None:
            logger.info("Export skipped: no model or animation selected")
            return ""

        self.play(clip, time)
        return self.export_pose(name)

    def save_export(self, directory: Optional[Path] = None) -> Optional[Path]:
        """
        Write the current export as ``<EXPORT_NAME>.js``.

        Returns:
            Path written, or None if nothing has been exported
        """
        if not self.export_text:
            return None
        return write_export(self.export_text, self.export_name, directory)

    def __repr__(self):
        return f"Session(model='{self.export_name}', clips={len(self.clips)}, combination={len(self.combination)})"
