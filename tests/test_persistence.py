"""Sidecar notes and ffmpeg process helpers."""

import os
import sys
from unittest import mock

import pytest

from vid_data_train_crop.media_import import ext_lower, file_stem, find_ffmpeg, is_image_path, run_cmd
from vid_data_train_crop.persistence import read_sidecar_note, sidecar_path_for_media, write_note


class TestSidecar:
    def test_path(self):
        assert sidecar_path_for_media("/in/clip.MP4") == "/in/clip.txt"

    def test_missing_is_empty(self, tmp_path):
        assert read_sidecar_note(str(tmp_path / "clip.mp4")) == ""

    def test_read_verbatim(self, tmp_path):
        (tmp_path / "clip.txt").write_bytes(b"line one\r\nline two\n")
        assert read_sidecar_note(str(tmp_path / "clip.mp4")) == "line one\r\nline two\n"

    def test_write_creates_file_and_leaves_no_temp(self, tmp_path):
        base = str(tmp_path / "clip_range1")
        assert write_note(base, "hello") is True
        assert os.listdir(tmp_path) == ["clip_range1.txt"]
        assert (tmp_path / "clip_range1.txt").read_text(encoding="utf-8") == "hello"

    def test_write_overwrites(self, tmp_path):
        base = str(tmp_path / "clip")
        write_note(base, "old")
        write_note(base, "new")
        assert (tmp_path / "clip.txt").read_text(encoding="utf-8") == "new"

    def test_write_failure_reported(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        assert write_note(str(blocker / "clip"), "hello") is False


class TestPathHelpers:
    def test_ext_and_stem(self):
        assert ext_lower("/a/b/Shot.JPG") == "jpg"
        assert ext_lower("/a/b/noext") == ""
        assert file_stem("/a/b/my.clip.mp4") == "my.clip"
        assert is_image_path("x.WEBP") is True
        assert is_image_path("x.mov") is False

    def test_find_ffmpeg(self, monkeypatch):
        monkeypatch.delenv("FFMPEG_BIN", raising=False)
        assert find_ffmpeg() == "ffmpeg"
        monkeypatch.setenv("FFMPEG_BIN", "/usr/local/bin/ffmpeg")
        assert find_ffmpeg() == "/usr/local/bin/ffmpeg"


class TestRunCmd:
    def test_exit_code_and_output(self):
        code, out = run_cmd([sys.executable, "-c", "import sys; print('hi'); sys.exit(3)"])
        assert code == 3
        assert "hi" in out

    def test_missing_binary_raises(self, tmp_path):
        with pytest.raises(OSError):
            run_cmd([str(tmp_path / "no-such-ffmpeg")])

    def test_output_is_combined(self):
        fake = mock.MagicMock(returncode=0, stdout=b"frame=  10\n", stderr=b"video:12kB")
        with mock.patch("vid_data_train_crop.media_import.subprocess.run", return_value=fake) as run:
            code, out = run_cmd(["ffmpeg", "-version"])
        run.assert_called_once()
        assert run.call_args[0][0] == ["ffmpeg", "-version"]
        assert code == 0
        assert "frame=  10" in out
        assert "video:12kB" in out
