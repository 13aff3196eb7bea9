"""Folder listing, file selection and export snapshots."""

import os

import pytest

from vid_data_train_crop import media_source
from vid_data_train_crop.domain import NormalizedRect
from vid_data_train_crop.export import ExportGate, run_export_job
from vid_data_train_crop.media_import import list_media_files
from vid_data_train_crop.session import Session, SessionLoader

from conftest import make_image_media, make_video_media, plain_uploader


def touch(path, text=""):
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
    return path


@pytest.fixture
def media_dir(tmp_path):
    for name in ("b.MP4", "a.png", "c.mkv", "notes.txt", "readme.md"):
        touch(tmp_path / name)
    sub = tmp_path / "nested"
    sub.mkdir()
    touch(sub / "deep.mp4")
    return tmp_path


@pytest.fixture
def fake_open(monkeypatch):
    """Replaces the decoder: .png/.jpg open as stills, everything else as a 10 s video."""
    opened = []

    def _open(path, is_image):
        opened.append(path)
        if os.path.basename(path).startswith("broken"):
            raise media_source.DecodeOpenError(f"Unable to open video: {path}")
        return make_image_media(800, 600) if is_image else make_video_media(300, 30.0, 1920, 1080)

    monkeypatch.setattr("vid_data_train_crop.session.media_source.open_media", _open)
    return opened


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

class TestListing:
    def test_filters_by_extension_case_insensitively(self, media_dir):
        names = [os.path.basename(p) for p in list_media_files(str(media_dir))]
        assert names == ["a.png", "b.MP4", "c.mkv"]

    def test_does_not_descend(self, media_dir):
        assert all("nested" not in p for p in list_media_files(str(media_dir)))

    def test_missing_dir_raises(self, tmp_path):
        with pytest.raises(OSError):
            list_media_files(str(tmp_path / "nope"))

    def test_loader_reports_unreadable_dir(self, tmp_path):
        s = Session(uploader=plain_uploader())
        files = SessionLoader(s).choose_input_dir(str(tmp_path / "nope"))
        assert files == []
        assert s.file_list == []
        assert s.last_dir_error.startswith("Could not read folder")

    def test_loader_lists_files(self, media_dir):
        s = Session(uploader=plain_uploader())
        SessionLoader(s).choose_input_dir(str(media_dir))
        assert len(s.file_list) == 3
        assert s.last_dir_error is None
        assert s.selected_idx is None


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

class TestSelectFile:
    def test_select_video(self, media_dir, fake_open):
        s = Session(uploader=plain_uploader())
        loader = SessionLoader(s)
        loader.choose_input_dir(str(media_dir))
        assert loader.select_file(1) is True

        assert s.selected_idx == 1
        assert s.is_image is False
        assert s.duration == pytest.approx(10.0)
        assert s.native_fps == pytest.approx(30.0)
        assert s.current_time == 0.0
        assert len(s.annotations) == 1
        rng = s.annotations[0]
        assert (rng.start_time, rng.end_time, rng.crop, rng.note) == (0.0, 10.0, None, "")

    def test_select_image(self, media_dir, fake_open):
        s = Session(uploader=plain_uploader())
        loader = SessionLoader(s)
        loader.choose_input_dir(str(media_dir))
        assert loader.select_file(0) is True
        assert s.is_image is True
        assert s.duration == 0.0
        assert s.playback.enabled is False
        assert (s.annotations[0].start_time, s.annotations[0].end_time) == (0.0, 0.0)

    def test_sidecar_note_loaded(self, media_dir, fake_open):
        touch(media_dir / "c.txt", "left hand only")
        s = Session(uploader=plain_uploader())
        loader = SessionLoader(s)
        loader.choose_input_dir(str(media_dir))
        loader.select_file(2)
        assert s.annotations.current.note == "left hand only"

    def test_reselect_resets_state(self, media_dir, fake_open):
        s = Session(uploader=plain_uploader())
        loader = SessionLoader(s)
        loader.choose_input_dir(str(media_dir))
        loader.select_file(1)
        old_capture = s.media.capture

        s.playback.set_time(4.0)
        s.annotations.add_range(4.0, 10.0)
        s.annotations.set_crop(NormalizedRect(0.1, 0.1, 0.2, 0.2))
        s.playback.pause_play()

        loader.select_file(2)
        assert old_capture.released is True
        assert len(s.annotations) == 1
        assert s.annotations.current_index == 0
        assert s.annotations.current.crop is None
        assert s.current_time == 0.0
        assert s.playback.is_playing is False

    def test_decode_failure_keeps_previous(self, tmp_path, fake_open):
        touch(tmp_path / "ok.mp4")
        touch(tmp_path / "broken.mp4")
        s = Session(uploader=plain_uploader())
        loader = SessionLoader(s)
        loader.choose_input_dir(str(tmp_path))
        assert [os.path.basename(p) for p in s.file_list] == ["broken.mp4", "ok.mp4"]

        assert loader.select_file(1) is True
        media = s.media
        s.annotations.add_range(3.0, 10.0)

        assert loader.select_file(0) is False
        assert s.media is media
        assert s.selected_idx == 1
        assert len(s.annotations) == 2
        assert media.capture.released is False

    def test_out_of_bounds_index(self, media_dir, fake_open):
        s = Session(uploader=plain_uploader())
        loader = SessionLoader(s)
        loader.choose_input_dir(str(media_dir))
        assert loader.select_file(7) is False
        assert loader.select_file(-1) is False
        assert fake_open == []


# ---------------------------------------------------------------------------
# Export snapshot
# ---------------------------------------------------------------------------

class TestExportJob:
    def test_none_without_output_dir(self, video_session):
        assert video_session.export_job() is None

    def test_none_without_selection(self, video_session):
        video_session.output_dir = "/out"
        video_session.selected_idx = None
        assert video_session.export_job() is None

    def test_none_without_media(self):
        s = Session(uploader=plain_uploader())
        s.file_list = ["/in/clip.mp4"]
        s.selected_idx = 0
        s.output_dir = "/out"
        assert s.export_job() is None

    def test_snapshot_is_by_value(self, video_session):
        video_session.output_dir = "/out"
        job = video_session.export_job()
        assert (job.width, job.height, job.is_image) == (64, 48, False)

        video_session.annotations.set_note("changed later")
        video_session.annotations.set_start(5.0, 10.0)
        assert job.ranges[0].note == ""
        assert job.ranges[0].start_time == 0.0

    def test_sidecar_note_round_trips_through_export(self, tmp_path, fake_open, recording_runner):
        in_dir = tmp_path / "in"
        out_dir = tmp_path / "out"
        in_dir.mkdir()
        out_dir.mkdir()
        touch(in_dir / "x.mp4")
        touch(in_dir / "x.txt", "foo")

        s = Session(uploader=plain_uploader())
        loader = SessionLoader(s)
        loader.choose_input_dir(str(in_dir))
        loader.choose_output_dir(str(out_dir))
        loader.select_file(0)

        runner = recording_runner()
        assert run_export_job(s.export_job(), ExportGate(), runner) is True
        assert sorted(os.listdir(out_dir)) == ["x.mp4", "x.txt"]
        assert (out_dir / "x.txt").read_text(encoding="utf-8") == "foo"
