"""
GLTF/GLB Loader

Loads the node hierarchy and animation clips of GLTF and GLB models.
"""

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set

import numpy as np
import pygltflib

from ..animation import (
    Bone, Clip, InterpolationType, MalformedTrackError, Skeleton, Track, TrackKind,
)
from ..config.settings import MODEL_EXTENSIONS
from ..core.rotation_utils import decompose_matrix, quaternion_to_euler_xyz

logger = logging.getLogger(__name__)

COMPONENT_DTYPES = {
    5120: np.int8,     # BYTE
    5121: np.uint8,    # UNSIGNED_BYTE
    5122: np.int16,    # SHORT
    5123: np.uint16,   # UNSIGNED_SHORT
    5125: np.uint32,   # UNSIGNED_INT
    5126: np.float32,  # FLOAT
}

COMPONENT_COUNTS = {
    'SCALAR': 1,
    'VEC2': 2,
    'VEC3': 3,
    'VEC4': 4,
    'MAT2': 4,
    'MAT3': 9,
    'MAT4': 16,
}

# Divisors for normalized integer accessors
NORMALIZED_DIVISORS = {
    5120: 127.0,
    5121: 255.0,
    5122: 32767.0,
    5123: 65535.0,
}

TARGET_PATHS = {
    "translation": TrackKind.POSITION,
    "rotation": TrackKind.ROTATION,
    "scale": TrackKind.SCALE,
}


class GltfLoadError(RuntimeError):
    """Raised when a GLTF/GLB file cannot be read."""


@dataclass
class LoadedModel:
    """Skeleton and clips read from one model file."""

    name: str
    skeleton: Skeleton
    clips: List[Clip] = field(default_factory=list)


def model_stem(filepath) -> str:
    """File name with a model extension removed (``hero.glb`` -> ``hero``)."""
    name = Path(filepath).name
    for extension in MODEL_EXTENSIONS:
        if name.lower().endswith(extension):
            return name[:-len(extension)]
    return name


# Characters a playback runtime reserves in property paths
_RESERVED_NAME_CHARS = re.compile(r"[\[\]\.:\/]")


def sanitize_node_name(name: str) -> str:
    """Node name as the playback runtime binds it: whitespace to "_", path characters removed."""
    return _RESERVED_NAME_CHARS.sub("", re.sub(r"\s", "_", name))


def node_name(gltf: pygltflib.GLTF2, node_idx: int) -> str:
    node = gltf.nodes[node_idx]
    return sanitize_node_name(node.name) if node.name else f"Node_{node_idx}"


class GltfLoader:
    """
    Loads GLTF/GLB models into skeletons and clips.
    """

    def load(self, filepath) -> LoadedModel:
        """
        Load a GLTF or GLB model.

        Args:
            filepath: Path to .gltf or .glb file

        Returns:
            LoadedModel with skeleton and clips

        Raises:
            GltfLoadError: If the file is missing or cannot be parsed
        """
        filepath = Path(filepath)
        logger.info("Loading model: %s", filepath)

        if not filepath.exists():
            raise GltfLoadError(f"Model file not found: {filepath}")

        try:
            gltf = pygltflib.GLTF2().load(str(filepath))
        except Exception as e:
            raise GltfLoadError(f"Failed to parse {filepath}: {e}") from e
        if gltf is None:
            raise GltfLoadError(f"Failed to parse {filepath}")

        return self.load_gltf(gltf, model_stem(filepath))

    def load_bytes(self, data: bytes, name: str) -> LoadedModel:
        """
        Load a model from an in-memory GLB buffer.

        Args:
            data: Binary GLB contents
            name: Model name (used as the default export name)
        """
        try:
            gltf = pygltflib.GLTF2.load_from_bytes(data)
        except Exception as e:
            raise GltfLoadError(f"Failed to parse model buffer '{name}': {e}") from e
        return self.load_gltf(gltf, model_stem(name))

    def load_gltf(self, gltf: pygltflib.GLTF2, name: str) -> LoadedModel:
        """
        Build skeleton and clips from parsed GLTF data.

        Args:
            gltf: Parsed GLTF document
            name: Model name
        """
        skeleton = self._load_skeleton(gltf, name)
        logger.info("  Loaded skeleton with %d bones", skeleton.bone_count)

        clips = []
        if gltf.animations:
            clips = self._load_animations(gltf)
            logger.info("  Loaded %d animations", len(clips))

        return LoadedModel(name=name, skeleton=skeleton, clips=clips)

    def load_animations(self, filepath) -> List[Clip]:
        """Load only the clips of a model file."""
        return self.load(filepath).clips

    def _joint_indices(self, gltf: pygltflib.GLTF2) -> Set[int]:
        """Node indices referenced by any skin."""
        joints: Set[int] = set()
        for skin in gltf.skins or []:
            joints.update(skin.joints or [])
        return joints

    def _root_nodes(self, gltf: pygltflib.GLTF2) -> List[int]:
        """Root node indices of the default scene, or all parentless nodes."""
        if gltf.scenes:
            scene_idx = gltf.scene if gltf.scene is not None else 0
            scene = gltf.scenes[scene_idx]
            if scene.nodes:
                return list(scene.nodes)

        children = set()
        for node in gltf.nodes or []:
            children.update(node.children or [])
        return [idx for idx in range(len(gltf.nodes or [])) if idx not in children]

    def _load_skeleton(self, gltf: pygltflib.GLTF2, name: str) -> Skeleton:
        """
        Build the node hierarchy, flagging skin joints as bones.

        Args:
            gltf: GLTF data
            name: Skeleton name

        Returns:
            Skeleton mirroring the scene graph
        """
        skeleton = Skeleton(name)
        joint_indices = self._joint_indices(gltf)

        stack = [(idx, None) for idx in reversed(self._root_nodes(gltf))]
        visited: Set[int] = set()
        while stack:
            node_idx, parent = stack.pop()
            if node_idx in visited:
                logger.warning("  Node %d appears more than once in the hierarchy; skipped", node_idx)
                continue
            visited.add(node_idx)

            bone = self._create_bone(gltf, node_idx, node_idx in joint_indices)
            skeleton.add_node(bone, parent)

            children = gltf.nodes[node_idx].children or []
            stack.extend((child_idx, bone) for child_idx in reversed(children))

        return skeleton

    def _create_bone(self, gltf: pygltflib.GLTF2, node_idx: int, is_bone: bool) -> Bone:
        """Create a node from its GLTF transform (matrix or TRS)."""
        node = gltf.nodes[node_idx]

        if node.matrix is not None and len(node.matrix) == 16:
            translation, quat, scale = decompose_matrix(node.matrix)
        else:
            translation = node.translation if node.translation is not None else [0.0, 0.0, 0.0]
            quat = node.rotation if node.rotation is not None else [0.0, 0.0, 0.0, 1.0]
            scale = node.scale if node.scale is not None else [1.0, 1.0, 1.0]

        return Bone(
            name=node_name(gltf, node_idx),
            index=node_idx,
            is_bone=is_bone,
            position=translation,
            rotation=quaternion_to_euler_xyz(quat),
            scale=scale,
        )

    def _get_accessor_data(self, gltf: pygltflib.GLTF2, accessor_idx: int) -> Optional[np.ndarray]:
        """
        Get data from an accessor.

        Args:
            gltf: GLTF data
            accessor_idx: Accessor index

        Returns:
            Flat float64 array, or None when the accessor has no buffer view
        """
        accessor = gltf.accessors[accessor_idx]
        if accessor.bufferView is None:
            return None

        buffer_view = gltf.bufferViews[accessor.bufferView]
        buffer = gltf.buffers[buffer_view.buffer]

        # Get buffer data
        if buffer.uri:
            # External or data-URI buffer
            buffer_data = gltf.get_data_from_buffer_uri(buffer.uri)
        else:
            # Embedded buffer (GLB)
            buffer_data = gltf.binary_blob()

        if buffer_data is None:
            return None

        dtype = np.dtype(COMPONENT_DTYPES[accessor.componentType])
        component_count = COMPONENT_COUNTS[accessor.type]
        element_size = dtype.itemsize * component_count

        offset = (buffer_view.byteOffset or 0) + (accessor.byteOffset or 0)
        stride = buffer_view.byteStride or 0

        # Extract data
        if stride == 0 or stride == element_size:
            # Tightly packed
            data = bytes(buffer_data[offset:offset + accessor.count * element_size])
        else:
            # Strided data
            chunks = bytearray()
            for i in range(accessor.count):
                element_offset = offset + i * stride
                chunks.extend(buffer_data[element_offset:element_offset + element_size])
            data = bytes(chunks)

        array = np.frombuffer(data, dtype=dtype.newbyteorder('<')).astype(np.float64)

        if accessor.normalized and accessor.componentType in NORMALIZED_DIVISORS:
            array = np.maximum(array / NORMALIZED_DIVISORS[accessor.componentType], -1.0)

        return array

    def _load_animations(self, gltf: pygltflib.GLTF2) -> List[Clip]:
        """
        Load animations from GLTF.

        Returns:
            Clips in file order (names may repeat)
        """
        clips = []

        for anim_idx, gltf_anim in enumerate(gltf.animations):
            anim_name = gltf_anim.name if gltf_anim.name else f"Animation_{anim_idx}"
            tracks = []

            for channel in gltf_anim.channels:
                track = self._load_channel(gltf, gltf_anim, channel, anim_name)
                if track is not None:
                    tracks.append(track)

            clips.append(Clip.from_tracks(anim_name, tracks))

        return clips

    def _load_channel(self, gltf: pygltflib.GLTF2, gltf_anim, channel, anim_name: str) -> Optional[Track]:
        """Convert one animation channel into a track."""
        sampler = gltf_anim.samplers[channel.sampler]
        target_path = channel.target.path

        if channel.target.node is None:
            logger.warning("  Skipping channel without target node in '%s'", anim_name)
            return None

        target_name = node_name(gltf, channel.target.node)
        kind = TARGET_PATHS.get(target_path)
        if kind is None:
            logger.warning("  Skipping unsupported animation target path '%s' on %s", target_path, target_name)
            return None

        interp_str = sampler.interpolation if sampler.interpolation else "LINEAR"
        try:
            interpolation = InterpolationType(interp_str)
        except ValueError:
            interpolation = InterpolationType.LINEAR

        # Load keyframe data
        times = self._get_accessor_data(gltf, sampler.input)
        values = self._get_accessor_data(gltf, sampler.output)

        if times is None or values is None:
            raise GltfLoadError(f"Missing keyframe data for channel {target_name}.{target_path} in '{anim_name}'")

        if interpolation == InterpolationType.CUBICSPLINE:
            # Outputs are (in-tangent, value, out-tangent) triples; keep the values
            if len(values) != len(times) * 3 * kind.width:
                raise MalformedTrackError(
                    f"Cubic spline channel {target_name}.{target_path} has {len(values)} values for {len(times)} keys"
                )
            values = values.reshape(len(times), 3, kind.width)[:, 1, :].reshape(-1)

        return Track(
            target_name=target_name,
            kind=kind,
            times=times,
            values=values,
            interpolation=interpolation,
        )
