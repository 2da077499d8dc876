"""KPSync - PyQt6 KeePass database comparison."""

import logging
import sys

from PyQt6.QtWidgets import QApplication

from app.logging_config import setup_logging
from app.main_window import MainWindow
from app.version import get_version


def main() -> int:
    """Application entry point."""
    if "--version" in sys.argv or "-v" in sys.argv:
        print(f"kpsync {get_version()}")
        return 0

    setup_logging(logging.DEBUG if "--debug" in sys.argv else logging.INFO)
    app = QApplication(sys.argv)
    app.setApplicationName("KPSync")
    app.setApplicationVersion(get_version())
    window = MainWindow()
    window.show()
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
