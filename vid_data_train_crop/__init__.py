# vid_data_train_crop/__init__.py
'''
vid_data_train_crop/
    __init__.py
    __main__.py

    app.py                 # QApplication + logging + boot
    main_window.py         # QMainWindow layout + wiring + playback/export timers

    domain.py              # NormalizedRect, Range, AnnotationList, play states
    media_source.py        # video/image tagged union over OpenCV: open, size, read frame
    playback.py            # clock: frame stepping, play/pause, play-until, per-tick advance
    geometry.py            # aspect-preserving display rect + display<->normalized mapping
    frames.py              # BGR -> RGB conversion + single-slot texture uploader
    controller.py          # keys / drags / slider / frame field -> session changes
    session.py             # Session state + folder listing and file loading
    export.py              # crop math, ffmpeg argv, export gate + worker thread
    media_import.py        # extension filters, directory listing, ffmpeg helpers
    persistence.py         # sidecar note read/write
    timeutils.py           # time <-> frame helpers, labels, frame-field parsing

    widgets/
      frame_view.py        # letterboxed frame + crop overlay + pointer drags
      range_slider.py      # timeline slider with current-range band and markers
      ranges_panel.py      # ranges / crops list with add + remove
'''

from __future__ import annotations

__all__ = ["__version__", "run_app"]

__version__ = "0.1.0"

from .app import run_app
