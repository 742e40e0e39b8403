"""
Pytest configuration and fixtures for animlib tests

Builds small glTF documents in memory so no binary fixtures are needed.
"""

import base64
import math
import os
import sys

import numpy as np
import pygltflib
import pytest

# Add project root to path so "src.animlib" imports resolve
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from src.animlib.animation import Bone, Clip, Skeleton, Track, TrackKind, rotation_track


def x_rotation(angle):
    """Quaternion (x, y, z, w) for a rotation about the X axis."""
    return [math.sin(angle / 2.0), 0.0, 0.0, math.cos(angle / 2.0)]


def z_rotation(angle):
    """Quaternion (x, y, z, w) for a rotation about the Z axis."""
    return [0.0, 0.0, math.sin(angle / 2.0), math.cos(angle / 2.0)]


def make_clip(name, duration, target="Arm", times=None, angles=None):
    """Clip with one X-rotation track on ``target``."""
    times = times if times is not None else [0.0, duration]
    angles = angles if angles is not None else [0.0] * len(times)
    track = rotation_track(target, times, [x_rotation(a) for a in angles])
    return Clip(name, duration, (track,))


def make_position_clip(name, duration, target="Hips"):
    track = Track(target, TrackKind.POSITION, [0.0, duration], [0.0, 0.0, 0.0, 0.0, 1.0, 0.0])
    return Clip(name, duration, (track,))


class GltfBuilder:
    """Accumulates float32 accessors into a single data-URI buffer."""

    def __init__(self):
        self.blob = bytearray()
        self.accessors = []
        self.buffer_views = []

    def add(self, values, accessor_type):
        data = np.asarray(values, dtype='<f4').tobytes()
        offset = len(self.blob)
        self.blob.extend(data)
        self.buffer_views.append(pygltflib.BufferView(buffer=0, byteOffset=offset, byteLength=len(data)))
        width = {"SCALAR": 1, "VEC3": 3, "VEC4": 4}[accessor_type]
        self.accessors.append(pygltflib.Accessor(
            bufferView=len(self.buffer_views) - 1,
            componentType=pygltflib.FLOAT,
            count=len(values) // width,
            type=accessor_type,
        ))
        return len(self.accessors) - 1

    def buffer(self):
        uri = "data:application/octet-stream;base64," + base64.b64encode(bytes(self.blob)).decode("ascii")
        return pygltflib.Buffer(byteLength=len(self.blob), uri=uri)


def build_character_gltf():
    """
    Armature (group) -> Hips (bone) -> Arm (bone), plus a Mesh node.

    Animations:
    - "Wave": Arm rotates 0 -> pi/2 about X over 1s; Hips moves up
    - "Idle": Arm held at pi/4 about Z for 2s (STEP)
    """
    builder = GltfBuilder()

    wave_times = builder.add([0.0, 1.0], "SCALAR")
    wave_rot = builder.add(x_rotation(0.0) + x_rotation(math.pi / 2), "VEC4")
    wave_pos = builder.add([0.0, 0.0, 0.0, 0.0, 1.0, 0.0], "VEC3")
    idle_times = builder.add([0.0, 2.0], "SCALAR")
    idle_rot = builder.add(z_rotation(math.pi / 4) + z_rotation(math.pi / 4), "VEC4")

    nodes = [
        pygltflib.Node(name="Armature", children=[1, 3]),
        pygltflib.Node(name="Hips", children=[2], translation=[0.0, 1.0, 0.0]),
        pygltflib.Node(name="Arm", rotation=x_rotation(math.pi / 6)),
        pygltflib.Node(name="Body", mesh=None),
    ]

    animations = [
        pygltflib.Animation(
            name="Wave",
            samplers=[
                pygltflib.AnimationSampler(input=wave_times, output=wave_rot, interpolation="LINEAR"),
                pygltflib.AnimationSampler(input=wave_times, output=wave_pos, interpolation="LINEAR"),
            ],
            channels=[
                pygltflib.AnimationChannel(sampler=0, target=pygltflib.AnimationChannelTarget(node=2, path="rotation")),
                pygltflib.AnimationChannel(sampler=1, target=pygltflib.AnimationChannelTarget(node=1, path="translation")),
            ],
        ),
        pygltflib.Animation(
            name="Idle",
            samplers=[pygltflib.AnimationSampler(input=idle_times, output=idle_rot, interpolation="STEP")],
            channels=[
                pygltflib.AnimationChannel(sampler=0, target=pygltflib.AnimationChannelTarget(node=2, path="rotation")),
            ],
        ),
    ]

    return pygltflib.GLTF2(
        scene=0,
        scenes=[pygltflib.Scene(nodes=[0])],
        nodes=nodes,
        skins=[pygltflib.Skin(joints=[1, 2])],
        animations=animations,
        accessors=builder.accessors,
        bufferViews=builder.buffer_views,
        buffers=[builder.buffer()],
    )


@pytest.fixture
def character_gltf():
    return build_character_gltf()


@pytest.fixture
def character_file(tmp_path):
    """The character document saved as hero.gltf."""
    path = tmp_path / "hero.gltf"
    build_character_gltf().save(str(path))
    return path


@pytest.fixture
def arm_skeleton():
    """Group root with a single bone "Arm" at rest."""
    skeleton = Skeleton("rig")
    armature = skeleton.add_node(Bone("Armature", is_bone=False))
    skeleton.add_node(Bone("Arm"), armature)
    return skeleton
