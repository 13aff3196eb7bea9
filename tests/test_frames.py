"""Frame conversion and the single-slot texture uploader."""

import numpy as np
import pytest

from vid_data_train_crop.frames import TEXTURE_NAME, FrameUploader, RgbFrame, qimage_from_rgb, to_rgb_frame


def bgr(width=4, height=2, color=(255, 0, 0)):
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :] = color
    return frame


class TestToRgbFrame:
    def test_bgr_is_swapped(self):
        rgb = to_rgb_frame(bgr(color=(255, 0, 0)))
        assert (rgb.width, rgb.height) == (4, 2)
        assert rgb.bytes_per_line == 12
        assert len(rgb.data) == 4 * 2 * 3
        assert rgb.data[:3] == bytes([0, 0, 255])

    def test_gray(self):
        gray = np.full((3, 5), 7, dtype=np.uint8)
        rgb = to_rgb_frame(gray)
        assert (rgb.width, rgb.height) == (5, 3)
        assert rgb.data == bytes([7]) * (5 * 3 * 3)

    def test_bgra_drops_alpha(self):
        frame = np.zeros((2, 2, 4), dtype=np.uint8)
        frame[:, :] = (10, 20, 30, 255)
        rgb = to_rgb_frame(frame)
        assert rgb.data[:3] == bytes([30, 20, 10])
        assert len(rgb.data) == 2 * 2 * 3

    def test_empty_rejected(self):
        with pytest.raises(ValueError):
            to_rgb_frame(np.zeros((0, 0, 3), dtype=np.uint8))


def test_qimage_from_rgb():
    img = qimage_from_rgb(to_rgb_frame(bgr(width=6, height=3)))
    assert (img.width(), img.height()) == (6, 3)
    assert not img.isNull()


class TestFrameUploader:
    def test_single_named_slot(self):
        up = FrameUploader(texture_factory=lambda rgb: rgb)
        assert up.name == TEXTURE_NAME == "video-frame"
        assert up.texture is None

        assert up.upload(bgr()) is True
        first = up.texture
        assert isinstance(first, RgbFrame)
        assert up.size == (4, 2)

        assert up.upload(bgr(width=8, height=6)) is True
        assert up.texture is not first
        assert up.size == (8, 6)

    def test_failed_conversion_keeps_previous(self):
        up = FrameUploader(texture_factory=lambda rgb: rgb)
        up.upload(bgr())
        before = up.texture
        assert up.upload(np.zeros((0, 0, 3), dtype=np.uint8)) is False
        assert up.texture is before
        assert up.size == (4, 2)

    def test_failed_factory_keeps_previous(self):
        calls = []

        def factory(rgb):
            calls.append(rgb)
            if len(calls) > 1:
                raise TypeError("texture rejected")
            return rgb

        up = FrameUploader(texture_factory=factory)
        up.upload(bgr())
        before = up.texture
        assert up.upload(bgr(width=8)) is False
        assert up.texture is before

    def test_clear(self):
        up = FrameUploader(texture_factory=lambda rgb: rgb)
        up.upload(bgr())
        up.clear()
        assert up.texture is None
        assert up.size is None
