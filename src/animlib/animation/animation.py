"""
Animation

Keyframe tracks and clips.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

from ..core.rotation_utils import normalize_quaternion, slerp

# Slack allowed between a clip's duration and its last keyframe
DURATION_EPSILON = 1e-6


class MalformedTrackError(ValueError):
    """Raised when track or clip data is inconsistent."""


class InterpolationType(Enum):
    """Animation interpolation types."""
    LINEAR = "LINEAR"
    STEP = "STEP"
    CUBICSPLINE = "CUBICSPLINE"  # Sampled as linear over the keyed values


class TrackKind(Enum):
    """
    Animated property of a node.

    Each kind carries its property tag and the number of floats per sample.
    """
    POSITION = ("position", 3)
    ROTATION = ("rotation", 4)  # Quaternion (x, y, z, w)
    SCALE = ("scale", 3)

    def __init__(self, tag: str, width: int):
        self.tag = tag
        self.width = width

    @classmethod
    def from_tag(cls, tag: str) -> 'TrackKind':
        for kind in cls:
            if kind.tag == tag:
                return kind
        raise ValueError(f"Unknown track property: {tag}")


def _frozen_array(data) -> np.ndarray:
    array = np.array(data, dtype=np.float64).reshape(-1)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class Track:
    """
    Time series for one (node, property) pair.

    ``values`` is flat and channel-major: sample ``i`` occupies
    ``values[i * width:(i + 1) * width]``.
    """

    target_name: str
    kind: TrackKind
    times: np.ndarray
    values: np.ndarray
    interpolation: InterpolationType = InterpolationType.LINEAR

    def __post_init__(self):
        times = _frozen_array(self.times)
        values = _frozen_array(self.values)

        if len(values) != len(times) * self.kind.width:
            raise MalformedTrackError(
                f"Track '{self.name}' has {len(times)} times but {len(values)} values "
                f"(expected {len(times) * self.kind.width})"
            )
        if len(times) > 1 and np.any(np.diff(times) < 0.0):
            raise MalformedTrackError(f"Track '{self.name}' times are not non-decreasing")

        object.__setattr__(self, 'times', times)
        object.__setattr__(self, 'values', values)

    @property
    def name(self) -> str:
        """Binding name, e.g. ``Arm.rotation``."""
        return f"{self.target_name}.{self.kind.tag}"

    @property
    def sample_count(self) -> int:
        return len(self.times)

    @property
    def start_time(self) -> float:
        return float(self.times[0]) if len(self.times) else 0.0

    @property
    def end_time(self) -> float:
        return float(self.times[-1]) if len(self.times) else 0.0

    def value_at(self, index: int) -> np.ndarray:
        """Value of the sample at ``index``."""
        width = self.kind.width
        return np.array(self.values[index * width:(index + 1) * width])

    def shifted(self, offset: float) -> 'Track':
        """
        Copy of this track with every time moved forward by ``offset``.

        Values are copied verbatim; target, kind and interpolation are kept.
        """
        return Track(
            target_name=self.target_name,
            kind=self.kind,
            times=self.times + offset,
            values=self.values.copy(),
            interpolation=self.interpolation,
        )

    def sample(self, time: float) -> Optional[np.ndarray]:
        """
        Sample the track at a given time.

        Args:
            time: Time in seconds

        Returns:
            Interpolated value at this time, None for an empty track
        """
        count = len(self.times)
        if count == 0:
            return None

        # Clamp time to track range
        if time <= self.times[0]:
            return self.value_at(0)
        if time >= self.times[-1]:
            return self.value_at(count - 1)

        i = int(np.searchsorted(self.times, time, side='right')) - 1
        t0 = self.times[i]
        t1 = self.times[i + 1]
        v0 = self.value_at(i)
        v1 = self.value_at(i + 1)

        if self.interpolation == InterpolationType.STEP or t1 <= t0:
            return v0

        alpha = float((time - t0) / (t1 - t0))
        if self.kind == TrackKind.ROTATION:
            return slerp(v0, v1, alpha)
        return v0 * (1.0 - alpha) + v1 * alpha

    def __repr__(self):
        return f"Track(name='{self.name}', samples={self.sample_count})"


@dataclass(frozen=True, eq=False)
class Clip:
    """
    Named, immutable bundle of tracks.

    ``duration`` must cover the last keyframe of every track.
    """

    name: str
    duration: float
    tracks: Tuple[Track, ...] = field(default_factory=tuple)

    def __post_init__(self):
        tracks = tuple(self.tracks)
        duration = float(self.duration)
        latest = max((track.end_time for track in tracks), default=0.0)
        if duration + DURATION_EPSILON < latest:
            raise MalformedTrackError(
                f"Clip '{self.name}' duration {duration:.4f}s is shorter than its last keyframe at {latest:.4f}s"
            )
        object.__setattr__(self, 'tracks', tracks)
        object.__setattr__(self, 'duration', duration)

    @classmethod
    def from_tracks(cls, name: str, tracks: Iterable[Track]) -> 'Clip':
        """Build a clip whose duration is its latest keyframe time."""
        tracks = tuple(tracks)
        duration = max((track.end_time for track in tracks), default=0.0)
        return cls(name=name, duration=duration, tracks=tracks)

    def target_names(self) -> Sequence[str]:
        """Distinct track targets, in track order."""
        return list(dict.fromkeys(track.target_name for track in self.tracks))

    def sample_all(self, time: float) -> Dict[Tuple[str, TrackKind], np.ndarray]:
        """
        Sample the tracks that drive the pose at a given time.

        Returns:
            Dictionary mapping (target_name, kind) -> value
        """
        results = {}
        for track in self.active_tracks(time):
            value = track.sample(time)
            if value is not None:
                results[(track.target_name, track.kind)] = value
        return results

    def active_tracks(self, time: float) -> Iterable[Track]:
        """
        Tracks that drive the pose at ``time``.

        For each (target, kind), the last track whose first keyframe is at
        or before ``time`` is used; before any track starts, the earliest.
        """
        started: Dict[Tuple[str, TrackKind], Track] = {}
        pending: Dict[Tuple[str, TrackKind], Track] = {}
        for track in self.tracks:
            key = (track.target_name, track.kind)
            if track.start_time <= time:
                current = started.get(key)
                if current is None or track.start_time >= current.start_time:
                    started[key] = track
            else:
                current = pending.get(key)
                if current is None or track.start_time < current.start_time:
                    pending[key] = track

        for key, track in pending.items():
            started.setdefault(key, track)
        return list(started.values())

    def __repr__(self):
        return f"Clip(name='{self.name}', duration={self.duration:.2f}s, tracks={len(self.tracks)})"


def rotation_track(target_name: str, times, quaternions, interpolation=InterpolationType.LINEAR) -> Track:
    """Convenience constructor for a rotation track from (x, y, z, w) rows."""
    rows = [normalize_quaternion(q) for q in quaternions]
    return Track(target_name, TrackKind.ROTATION, times, np.concatenate(rows) if rows else [], interpolation)
