"""Shared test fixtures."""

from typing import List, Tuple

import cv2
import numpy as np
import pytest

from vid_data_train_crop.domain import AnnotationList
from vid_data_train_crop.frames import FrameUploader
from vid_data_train_crop.media_source import ImageMedia, VideoMedia
from vid_data_train_crop.session import Session


class FakeCapture:
    """Stands in for cv2.VideoCapture; frame i is filled with the value i % 256."""

    def __init__(self, frames=300, fps=30.0, width=64, height=48, opened=True):
        self.props = {
            cv2.CAP_PROP_FPS: fps,
            cv2.CAP_PROP_FRAME_COUNT: frames,
            cv2.CAP_PROP_FRAME_WIDTH: width,
            cv2.CAP_PROP_FRAME_HEIGHT: height,
        }
        self.opened = opened
        self.seeks: List[int] = []
        self.empty_reads = False
        self.raise_on_read = False
        self.released = False

    def isOpened(self):
        return self.opened

    def get(self, prop):
        return float(self.props.get(prop, 0.0))

    def set(self, prop, value):
        if prop == cv2.CAP_PROP_POS_FRAMES:
            self.seeks.append(int(value))
        return True

    def read(self):
        if self.raise_on_read:
            raise cv2.error("decoder exploded")
        if self.empty_reads:
            return False, None
        idx = self.seeks[-1] if self.seeks else 0
        w = int(self.props[cv2.CAP_PROP_FRAME_WIDTH])
        h = int(self.props[cv2.CAP_PROP_FRAME_HEIGHT])
        frame = np.full((h, w, 3), idx % 256, dtype=np.uint8)
        return True, frame

    def release(self):
        self.released = True


def make_video_media(frames=300, fps=30.0, width=64, height=48) -> VideoMedia:
    cap = FakeCapture(frames=frames, fps=fps, width=width, height=height)
    return VideoMedia(
        capture=cap,
        fps=fps,
        frame_count=frames,
        duration_seconds=frames / fps,
        width=width,
        height=height,
    )


def make_image_media(width=80, height=60) -> ImageMedia:
    pixels = np.zeros((height, width, 3), dtype=np.uint8)
    pixels[..., 0] = 255  # blue in BGR
    return ImageMedia(pixels=pixels, width=width, height=height)


def plain_uploader() -> FrameUploader:
    """Uploader whose "texture" is the RgbFrame itself, so no Qt is needed."""
    return FrameUploader(texture_factory=lambda rgb: rgb)


@pytest.fixture
def fake_capture():
    return FakeCapture


@pytest.fixture
def video_session() -> Session:
    """10 s, 30 fps, 64x48 video already loaded."""
    media = make_video_media(frames=300, fps=30.0)
    s = Session(media=media, is_image=False, uploader=plain_uploader())
    s.file_list = ["/in/clip.mp4"]
    s.selected_idx = 0
    s.playback.reset(native_fps=30.0, duration=10.0, enabled=True)
    s.annotations = AnnotationList.initial(10.0)
    return s


@pytest.fixture
def image_session() -> Session:
    media = make_image_media()
    s = Session(media=media, is_image=True, uploader=plain_uploader())
    s.file_list = ["/in/pic.png"]
    s.selected_idx = 0
    s.playback.reset(native_fps=1.0, duration=0.0, enabled=False)
    s.annotations = AnnotationList.initial(0.0)
    return s


class RecordingRunner:
    """ffmpeg stand-in: records argv, touches the output file, returns scripted exit codes."""

    def __init__(self, codes=None, touch_outputs=True):
        self.calls: List[List[str]] = []
        self._codes = list(codes or [])
        self._touch = touch_outputs

    def __call__(self, args: List[str]) -> Tuple[int, str]:
        self.calls.append(list(args))
        code = self._codes.pop(0) if self._codes else 0
        if code == 0 and self._touch:
            with open(args[-1], "wb") as f:
                f.write(b"")
        return code, "" if code == 0 else "Error while filtering"


@pytest.fixture
def recording_runner():
    return RecordingRunner


@pytest.fixture
def video_media_factory():
    return make_video_media


@pytest.fixture
def image_media_factory():
    return make_image_media
