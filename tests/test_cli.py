"""Tests for the synscreen command line."""

import json
import shutil

import numpy as np
import pytest
from PIL import Image

from synscreen.cli import build_parser, main


class TestParser:
    def test_defaults(self, tmp_path):
        args = build_parser().parse_args([str(tmp_path / "a.wav")])

        assert args.fps == 12.0
        assert args.overlay is False
        assert args.snapshot is None
        assert args.quality == "medium"


class TestMain:
    def test_missing_input(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.wav")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_no_video_needs_snapshot(self, temp_audio_file):
        assert main([str(temp_audio_file), "--no-video"]) == 1

    def test_bad_palette(self, temp_audio_file, tmp_path):
        palette = tmp_path / "colors.json"
        palette.write_text(json.dumps(["#000"] * 12), encoding="utf-8")

        assert main([str(temp_audio_file), "--no-video", "--snapshot", str(tmp_path / "s.png"),
                     "--palette", str(palette)]) == 1

    def test_snapshot_only(self, temp_audio_file, tmp_path):
        snapshot = tmp_path / "frame.png"

        code = main([
            str(temp_audio_file),
            "--no-video",
            "--snapshot", str(snapshot),
            "--snapshot-at", "0.25",
        ])

        assert code == 0
        with Image.open(snapshot) as img:
            assert img.size == (1600, 900)
            assert np.any(np.array(img))

    def test_fps_does_not_change_window(self, temp_audio_file, tmp_path, capsys):
        code = main([
            str(temp_audio_file),
            "--no-video",
            "-f", "30",
            "--snapshot", str(tmp_path / "frame.png"),
        ])

        assert code == 0
        out = capsys.readouterr().out
        assert "Window: 4096 samples, 30 fps" in out

    def test_snapshot_with_overlay(self, temp_audio_file, tmp_path):
        snapshot = tmp_path / "trail.png"

        code = main([
            str(temp_audio_file),
            "--no-video",
            "--overlay",
            "--snapshot", str(snapshot),
            "--snapshot-at", "0.5",
        ])

        assert code == 0
        assert snapshot.exists()

    @pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
    def test_renders_video(self, temp_audio_file, tmp_path):
        output = tmp_path / "out.mp4"

        code = main([str(temp_audio_file), "-o", str(output), "-q", "fast", "--max-duration", "0.5"])

        assert code == 0
        assert output.stat().st_size > 0
