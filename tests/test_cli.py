"""Tests for the command-line front end"""

import main


def test_list(character_file, capsys):
    assert main.cli(["list", str(character_file)]) == 0

    out = capsys.readouterr().out
    assert "Model: hero" in out
    assert "Bones: 2" in out
    assert "Wave  1.000s  2 tracks" in out


def test_export_to_stdout(character_file, capsys):
    code = main.cli(["export", str(character_file), "--clip", "Wave", "--time", "1.0", "--stdout"])

    out = capsys.readouterr().out
    assert code == 0
    assert out.startswith("export const HERO = (ref) => {")
    assert 'animations.push(["Arm", "rotation", "x", Math.PI/2, "+"]);' in out


def test_export_writes_file(character_file, tmp_path):
    output = tmp_path / "exports"

    code = main.cli([
        "export", str(character_file), "--clip", "Idle", "--name", "rest", "--output", str(output),
    ])

    assert code == 0
    text = (output / "REST.js").read_text(encoding="utf-8")
    assert "export const REST = (ref) => {" in text
    assert '"z", Math.PI/4, "+"' in text


def test_export_bind_pose(character_file, capsys):
    """Without --clip the rest pose is exported"""
    assert main.cli(["export", str(character_file), "--stdout"]) == 0

    out = capsys.readouterr().out
    assert 'animations.push(["Arm", "rotation", "x", Math.PI/6, "+"]);' in out


def test_combine(character_file, capsys):
    code = main.cli(["combine", str(character_file), "Wave", "Idle", "--export-time", "2.0", "--stdout"])

    out = capsys.readouterr().out
    assert code == 0
    assert "into 'combined': 3.000s, 3 tracks" in out
    assert '"z", Math.PI/4, "+"' in out


def test_combine_needs_two(character_file, capsys):
    assert main.cli(["combine", str(character_file), "Wave"]) == 1
    assert "at least two" in capsys.readouterr().err


def test_unknown_clip(character_file):
    assert main.cli(["export", str(character_file), "--clip", "Jump", "--stdout"]) == 1


def test_missing_model(tmp_path):
    assert main.cli(["list", str(tmp_path / "missing.glb")]) == 1
