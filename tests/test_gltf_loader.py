"""Tests for GltfLoader"""

import math

import numpy as np
import pygltflib
import pytest

from src.animlib.animation import InterpolationType, TrackKind
from src.animlib.export import export_pose
from src.animlib.loaders import GltfLoader, GltfLoadError, model_stem, sanitize_node_name

from conftest import GltfBuilder, x_rotation


def test_skeleton_hierarchy(character_gltf):
    """Scene nodes become a tree; only skin joints are bones"""
    model = GltfLoader().load_gltf(character_gltf, "hero")
    skeleton = model.skeleton

    names = [node.name for node in skeleton.traverse()]
    assert names == ["hero", "Armature", "Hips", "Arm", "Body"]
    assert [bone.name for bone in skeleton.bones()] == ["Hips", "Arm"]
    assert skeleton.get_bone("Arm").parent.name == "Hips"


def test_node_transforms(character_gltf):
    """Node TRS is read, rotations converted to Euler"""
    skeleton = GltfLoader().load_gltf(character_gltf, "hero").skeleton

    np.testing.assert_allclose(skeleton.get_bone("Hips").position, [0.0, 1.0, 0.0])
    np.testing.assert_allclose(skeleton.get_bone("Arm").rotation, [math.pi / 6, 0.0, 0.0], atol=1e-6)


def test_clips(character_gltf):
    """Each animation becomes a clip with one track per channel"""
    clips = GltfLoader().load_gltf(character_gltf, "hero").clips

    assert [clip.name for clip in clips] == ["Wave", "Idle"]
    wave, idle = clips
    assert wave.duration == pytest.approx(1.0)
    assert idle.duration == pytest.approx(2.0)

    rotation, translation = wave.tracks
    assert rotation.target_name == "Arm"
    assert rotation.kind == TrackKind.ROTATION
    np.testing.assert_allclose(rotation.times, [0.0, 1.0])
    np.testing.assert_allclose(rotation.value_at(1), x_rotation(math.pi / 2), atol=1e-6)
    assert translation.target_name == "Hips"
    assert translation.kind == TrackKind.POSITION
    assert idle.tracks[0].interpolation == InterpolationType.STEP


def test_load_file(character_file):
    """Models load from disk and take their name from the file"""
    model = GltfLoader().load(character_file)

    assert model.name == "hero"
    assert len(model.clips) == 2
    assert model.skeleton.bone_count == 2


def test_missing_file(tmp_path):
    with pytest.raises(GltfLoadError):
        GltfLoader().load(tmp_path / "nope.glb")


def test_model_stem():
    assert model_stem("characters/Hero.glb") == "Hero"
    assert model_stem("robot.GLTF") == "robot"
    assert model_stem("notes.txt") == "notes.txt"


def test_unnamed_nodes_and_weights_channel():
    """Unnamed nodes get placeholder names; morph weight channels are skipped"""
    builder = GltfBuilder()
    times = builder.add([0.0, 0.5], "SCALAR")
    weights = builder.add([0.0, 1.0], "SCALAR")
    gltf = pygltflib.GLTF2(
        scenes=[pygltflib.Scene(nodes=[0])],
        nodes=[pygltflib.Node()],
        skins=[pygltflib.Skin(joints=[0])],
        animations=[pygltflib.Animation(
            samplers=[pygltflib.AnimationSampler(input=times, output=weights)],
            channels=[pygltflib.AnimationChannel(sampler=0, target=pygltflib.AnimationChannelTarget(node=0, path="weights"))],
        )],
        accessors=builder.accessors,
        bufferViews=builder.buffer_views,
        buffers=[builder.buffer()],
    )

    model = GltfLoader().load_gltf(gltf, "blob")

    assert model.skeleton.bones()[0].name == "Node_0"
    assert model.clips[0].name == "Animation_0"
    assert model.clips[0].tracks == ()


def test_cubic_spline_keeps_keyed_values():
    """CUBICSPLINE outputs are reduced to the middle value of each triple"""
    builder = GltfBuilder()
    times = builder.add([0.0, 1.0], "SCALAR")
    tangent = [0.0, 0.0, 0.0]
    outputs = builder.add(tangent + [1.0, 2.0, 3.0] + tangent + tangent + [4.0, 5.0, 6.0] + tangent, "VEC3")
    gltf = pygltflib.GLTF2(
        scenes=[pygltflib.Scene(nodes=[0])],
        nodes=[pygltflib.Node(name="Hips")],
        skins=[pygltflib.Skin(joints=[0])],
        animations=[pygltflib.Animation(
            name="Bounce",
            samplers=[pygltflib.AnimationSampler(input=times, output=outputs, interpolation="CUBICSPLINE")],
            channels=[pygltflib.AnimationChannel(sampler=0, target=pygltflib.AnimationChannelTarget(node=0, path="translation"))],
        )],
        accessors=builder.accessors,
        bufferViews=builder.buffer_views,
        buffers=[builder.buffer()],
    )

    track = GltfLoader().load_gltf(gltf, "bounce").clips[0].tracks[0]

    np.testing.assert_allclose(track.values, [1.0, 2.0, 3.0, 4.0, 5.0, 6.0])
    assert track.interpolation == InterpolationType.CUBICSPLINE


def test_no_scenes_uses_parentless_nodes():
    gltf = pygltflib.GLTF2(nodes=[pygltflib.Node(name="Root", children=[1]), pygltflib.Node(name="Child")])

    skeleton = GltfLoader().load_gltf(gltf, "loose").skeleton

    assert [node.name for node in skeleton.traverse()] == ["loose", "Root", "Child"]
    assert skeleton.bone_count == 0


@pytest.mark.parametrize("raw,expected", [
    ("mixamorig:Hips", "mixamorigHips"),
    ("Left Arm", "Left_Arm"),
    ("Bone.001", "Bone001"),
    ("rig/[spine]", "rigspine"),
    ("Plain", "Plain"),
])
def test_sanitize_node_name(raw, expected):
    assert sanitize_node_name(raw) == expected


def test_node_names_sanitized(character_gltf):
    """Bone names and track targets both use the cleaned name"""
    character_gltf.nodes[2].name = "mixamorig:Left Arm"

    model = GltfLoader().load_gltf(character_gltf, "hero")

    assert [bone.name for bone in model.skeleton.bones()] == ["Hips", "mixamorigLeft_Arm"]
    assert model.clips[0].tracks[0].target_name == "mixamorigLeft_Arm"
    assert '["mixamorigLeft_Arm", "rotation", "x", Math.PI/6, "+"]' in export_pose(model.skeleton, "hero")


def test_load_bytes(character_gltf):
    """A binary GLB buffer loads like a file"""
    chunks = character_gltf.save_to_bytes()
    data = chunks if isinstance(chunks, bytes) else b"".join(chunks)

    model = GltfLoader().load_bytes(data, "hero.glb")

    assert model.name == "hero"
    assert [bone.name for bone in model.skeleton.bones()] == ["Hips", "Arm"]
    assert [clip.name for clip in model.clips] == ["Wave", "Idle"]
    np.testing.assert_allclose(model.clips[0].tracks[0].value_at(1), x_rotation(math.pi / 2), atol=1e-6)
