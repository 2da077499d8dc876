"""Background worker thread for vault comparison."""

import logging
import time

from PyQt6.QtCore import QThread, pyqtSignal

from features.vault.vault_service import VaultOpenError

from .comparison_service import ComparisonConfig, ComparisonService

logger = logging.getLogger(__name__)


class CompareWorker(QThread):
    """Background worker for vault decryption and comparison."""

    finished = pyqtSignal(object)  # ComparisonReport
    error = pyqtSignal(str)
    progress = pyqtSignal(str, float)  # stage, elapsed

    def __init__(
        self,
        config: ComparisonConfig,
        parent=None,
    ) -> None:
        super().__init__(parent)
        self._config = config
        self._service = ComparisonService()
        self._start_time = 0.0

    def run(self) -> None:
        """Execute comparison in background thread."""
        self._start_time = time.time()
        try:
            logger.info(
                "CompareWorker: opening %s and %s",
                self._config.first.path,
                self._config.second.path,
            )
            self.progress.emit("Decrypting databases...", 0.0)
            self._service.open_vaults(self._config)

            self.progress.emit("Comparing databases...", time.time() - self._start_time)
            report = self._service.compare()

            logger.info(
                "CompareWorker: comparison complete in %.1fs",
                time.time() - self._start_time,
            )
            self.finished.emit(report)

        except VaultOpenError as e:
            self.error.emit(f"Error opening {e.which} database: {e.cause}")
        except Exception as e:
            logger.exception("CompareWorker: comparison failed")
            self.error.emit(f"Comparison failed: {e}")
        finally:
            self._service.close()
