"""Main window for KeePass database comparison."""

import logging

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from app.version import get_version
from features.comparison.comparison_service import (
    ComparisonConfig,
    ComparisonReport,
    Difference,
    DifferenceKind,
)
from features.comparison.difference_tree import DifferenceTreeWidget
from features.comparison.workers import CompareWorker
from features.dialogs.vault_picker import VaultPickerGroup

logger = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window."""

    WINDOW_TITLE = "KPSync - KeePass Database Sync"
    WELCOME_MESSAGE = "Welcome to KPSync!"

    def __init__(self) -> None:
        super().__init__()
        self.setWindowTitle(self.WINDOW_TITLE)
        self.resize(800, 600)

        self._report: ComparisonReport | None = None
        self._compare_worker: CompareWorker | None = None

        self._setup_menu()
        self._setup_toolbar()
        self._setup_central_widget()
        self._setup_statusbar()
        self._update_ui_state()

    def _setup_menu(self) -> None:
        """Setup menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        self._sync_action = QAction("&Sync", self)
        self._sync_action.setShortcut("Ctrl+R")
        self._sync_action.triggered.connect(self._on_sync)
        file_menu.addAction(self._sync_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut("Ctrl+Q")
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Help menu
        help_menu = menubar.addMenu("&Help")

        about_action = QAction("&About", self)
        about_action.triggered.connect(self._on_about)
        help_menu.addAction(about_action)

    def _setup_toolbar(self) -> None:
        """Setup toolbar."""
        toolbar = QToolBar("Main Toolbar")
        toolbar.setMovable(False)
        self.addToolBar(toolbar)
        toolbar.addAction(self._sync_action)

    def _setup_central_widget(self) -> None:
        """Setup central widget."""
        central = QWidget()
        self.setCentralWidget(central)
        layout = QVBoxLayout(central)
        layout.setContentsMargins(4, 4, 4, 4)
        layout.setSpacing(4)

        heading = QLabel(self.WINDOW_TITLE)
        heading.setStyleSheet("font-size: 16px; font-weight: bold; padding: 4px;")
        layout.addWidget(heading)

        # Vault pickers
        self._first_picker = VaultPickerGroup("First Database")
        self._second_picker = VaultPickerGroup("Second Database")
        for picker in (self._first_picker, self._second_picker):
            picker.changed.connect(self._update_ui_state)
            picker.file_selected.connect(self._on_file_selected)
            layout.addWidget(picker)

        # Sync button
        btn_layout = QHBoxLayout()
        self._sync_btn = QPushButton("🔄 Sync")
        self._sync_btn.clicked.connect(self._on_sync)
        btn_layout.addWidget(self._sync_btn)
        btn_layout.addStretch()
        layout.addLayout(btn_layout)

        # Status message
        self._status_label = QLabel(self.WELCOME_MESSAGE)
        self._status_label.setTextInteractionFlags(
            Qt.TextInteractionFlag.TextSelectableByMouse
        )
        self._status_label.setStyleSheet("padding: 4px;")
        layout.addWidget(self._status_label)

        # Differences
        differences_group = QGroupBox("Differences Found")
        differences_layout = QVBoxLayout(differences_group)
        self._tree_widget = DifferenceTreeWidget()
        self._tree_widget.item_selected.connect(self._on_item_selected)
        differences_layout.addWidget(self._tree_widget)
        layout.addWidget(differences_group, 1)

        # Details panel
        details_group = QGroupBox("Details")
        details_layout = QFormLayout(details_group)
        self._detail_title_label = QLabel("-")
        self._detail_status_label = QLabel("-")
        self._detail_username_label = QLabel("-")
        details_layout.addRow("Title:", self._detail_title_label)
        details_layout.addRow("Status:", self._detail_status_label)
        details_layout.addRow("Username:", self._detail_username_label)
        details_group.setMaximumHeight(110)
        layout.addWidget(details_group)

    def _setup_statusbar(self) -> None:
        """Setup status bar."""
        self._statusbar = self.statusBar()
        self._statusbar.showMessage("Select databases to compare")

    def _update_ui_state(self) -> None:
        """Enable Sync only when both vaults can be unlocked and no run is active."""
        config = self._current_config()
        running = self._compare_worker is not None
        enabled = config.is_complete and not running
        self._sync_action.setEnabled(enabled)
        self._sync_btn.setEnabled(enabled)

    def _current_config(self) -> ComparisonConfig:
        return ComparisonConfig(
            first=self._first_picker.credentials,
            second=self._second_picker.credentials,
        )

    def _set_status(self, message: str) -> None:
        self._status_label.setText(message)

    def _on_file_selected(self, path: str) -> None:
        self._set_status(f"Selected: {path}")

    def _on_sync(self) -> None:
        """Decrypt both vaults and compare them in a background thread."""
        config = self._current_config()
        if not config.is_complete or self._compare_worker is not None:
            return

        self._set_status("Decrypting databases...")
        self._statusbar.showMessage("Decrypting databases...")
        self._tree_widget.clear()
        self._report = None

        self._compare_worker = CompareWorker(config, self)
        self._compare_worker.progress.connect(self._on_compare_progress)
        self._compare_worker.finished.connect(self._on_compare_finished)
        self._compare_worker.error.connect(self._on_compare_error)
        self._compare_worker.start()
        self._update_ui_state()

    def _on_compare_progress(self, stage: str, elapsed: float) -> None:
        self._statusbar.showMessage(f"{stage} ({elapsed:.1f}s)")

    def _on_compare_finished(self, report: ComparisonReport) -> None:
        """Handle comparison completion."""
        self._release_worker()
        self._report = report
        self._tree_widget.populate(report.differences)
        self._set_status(report.status_message())

        summary = report.summary()
        parts = []
        if summary[DifferenceKind.ONLY_IN_FIRST] > 0:
            parts.append(f"{summary[DifferenceKind.ONLY_IN_FIRST]} only in database 1")
        if summary[DifferenceKind.ONLY_IN_SECOND] > 0:
            parts.append(f"{summary[DifferenceKind.ONLY_IN_SECOND]} only in database 2")
        if summary[DifferenceKind.USERNAME_DIFFERS] > 0:
            parts.append(f"{summary[DifferenceKind.USERNAME_DIFFERS]} username differences")
        if summary[DifferenceKind.PASSWORD_DIFFERS] > 0:
            parts.append(f"{summary[DifferenceKind.PASSWORD_DIFFERS]} password differences")

        if not parts:
            self._statusbar.showMessage("Databases are identical")
        else:
            self._statusbar.showMessage(", ".join(parts))

    def _on_compare_error(self, message: str) -> None:
        """Handle a failed run; the message names the vault that failed."""
        self._release_worker()
        logger.warning("Sync failed: %s", message)
        self._set_status(message)
        self._statusbar.showMessage("Sync failed")

    def _release_worker(self) -> None:
        if self._compare_worker is not None:
            # run() only has cleanup left once its result signal arrives
            self._compare_worker.wait()
            self._compare_worker.deleteLater()
            self._compare_worker = None
        self._first_picker.clear_secrets()
        self._second_picker.clear_secrets()
        self._update_ui_state()

    def _on_item_selected(self, difference: Difference) -> None:
        """Handle item selection in tree."""
        self._detail_title_label.setText(difference.title)
        self._detail_status_label.setText(
            DifferenceTreeWidget.STATUS_TEXT.get(difference.kind, "")
        )
        if difference.kind == DifferenceKind.USERNAME_DIFFERS:
            self._detail_username_label.setText(
                f"DB1: {difference.username1}  |  DB2: {difference.username2}"
            )
        else:
            self._detail_username_label.setText(difference.username or "-")

    def _on_about(self) -> None:
        """Show about dialog."""
        about_text = (
            f"KPSync v{get_version()}\n\n"
            "Compares two KeePass databases and reports entries that are\n"
            "missing or whose username or password differ.\n\n"
            "Uses the pykeepass library to read databases."
        )
        if self._report is not None:
            about_text += (
                f"\n\nLast comparison:\n"
                f"  Database 1: {self._report.first_entry_count:,} entries\n"
                f"  Database 2: {self._report.second_entry_count:,} entries\n"
                f"  Differences: {len(self._report.differences):,}"
            )
        QMessageBox.about(self, "About KPSync", about_text)

    def closeEvent(self, event) -> None:
        """Wait for a running comparison before closing."""
        if self._compare_worker is not None:
            self._compare_worker.wait()
        event.accept()
