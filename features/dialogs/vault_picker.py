"""Group box for choosing a KeePass file and entering its credentials."""

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtWidgets import (
    QFileDialog,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from features.vault.vault_service import VaultCredentials


class VaultPickerGroup(QGroupBox):
    """Path, password and optional key file for one vault."""

    DATABASE_FILTER = "KeePass Database (*.kdbx);;All Files (*)"
    KEYFILE_FILTER = "Key Files (*.key *.keyx);;All Files (*)"

    file_selected = pyqtSignal(str)
    changed = pyqtSignal()

    def __init__(self, title: str, parent=None) -> None:
        super().__init__(title, parent)
        layout = QVBoxLayout(self)

        form = QFormLayout()

        self._path_edit = QLineEdit()
        self._path_edit.setPlaceholderText("Select a KeePass file...")
        form.addRow("Database Path:", self._with_browse(self._path_edit, self._browse_path))

        self._password_edit = QLineEdit()
        self._password_edit.setEchoMode(QLineEdit.EchoMode.Password)
        form.addRow("Database Password:", self._password_edit)

        self._keyfile_edit = QLineEdit()
        self._keyfile_edit.setPlaceholderText("Optional")
        form.addRow("Key File:", self._with_browse(self._keyfile_edit, self._browse_keyfile))

        layout.addLayout(form)

        for edit in (self._path_edit, self._password_edit, self._keyfile_edit):
            edit.textChanged.connect(lambda _text: self.changed.emit())

    def _with_browse(self, edit: QLineEdit, handler) -> QWidget:
        row = QWidget()
        row_layout = QHBoxLayout(row)
        row_layout.setContentsMargins(0, 0, 0, 0)
        browse_btn = QPushButton("Browse...")
        browse_btn.clicked.connect(handler)
        row_layout.addWidget(edit)
        row_layout.addWidget(browse_btn)
        return row

    def _browse_path(self) -> None:
        """Open file browser for the database."""
        path, _ = QFileDialog.getOpenFileName(
            self, f"Select {self.title()}", "", self.DATABASE_FILTER
        )
        if path:
            self._path_edit.setText(path)
            self.file_selected.emit(path)

    def _browse_keyfile(self) -> None:
        """Open file browser for the key file."""
        path, _ = QFileDialog.getOpenFileName(
            self, "Select Key File", "", self.KEYFILE_FILTER
        )
        if path:
            self._keyfile_edit.setText(path)
            self.file_selected.emit(path)

    def clear_secrets(self) -> None:
        self._password_edit.clear()

    @property
    def credentials(self) -> VaultCredentials:
        """Get vault credentials from the inputs."""
        return VaultCredentials(
            path=self._path_edit.text().strip(),
            password=self._password_edit.text(),
            keyfile=self._keyfile_edit.text().strip() or None,
        )
