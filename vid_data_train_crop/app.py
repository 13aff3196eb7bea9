# vid_data_train_crop/app.py
from __future__ import annotations

import logging
import os
import sys

from PyQt5.QtWidgets import QApplication

from .main_window import MainWindow


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging() -> None:
    level_name = os.environ.get("VDTC_LOG_LEVEL", "INFO").strip().upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def run_app() -> int:
    configure_logging()
    app = QApplication(sys.argv)

    win = MainWindow()
    win.showMaximized()

    return app.exec_()
