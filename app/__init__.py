"""Application core module."""

from app.logging_config import setup_logging
from app.main_window import MainWindow

__all__ = ["MainWindow", "setup_logging"]
