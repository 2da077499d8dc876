"""Tree widget for displaying vault differences with colored status."""

import logging
from typing import Optional

from PyQt6.QtCore import Qt, pyqtSignal
from PyQt6.QtGui import QBrush, QColor
from PyQt6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QTreeWidget,
    QTreeWidgetItem,
    QVBoxLayout,
    QWidget,
)

from .comparison_service import Difference, DifferenceKind, filter_differences

logger = logging.getLogger(__name__)


class DifferenceTreeWidget(QWidget):
    """List of differences, one top-level row per entry title."""

    item_selected = pyqtSignal(object)

    COLORS = {
        DifferenceKind.ONLY_IN_FIRST: QColor("#d4b106"),    # Yellow
        DifferenceKind.ONLY_IN_SECOND: QColor("#d4b106"),
        DifferenceKind.USERNAME_DIFFERS: QColor("#5fa8d3"),  # Light blue
        DifferenceKind.PASSWORD_DIFFERS: QColor("#d9534f"),  # Red
    }

    ICONS = {
        DifferenceKind.ONLY_IN_FIRST: "⚠",
        DifferenceKind.ONLY_IN_SECOND: "⚠",
        DifferenceKind.USERNAME_DIFFERS: "📧",
        DifferenceKind.PASSWORD_DIFFERS: "🔑",
    }

    STATUS_TEXT = {
        DifferenceKind.ONLY_IN_FIRST: "Only in Database 1",
        DifferenceKind.ONLY_IN_SECOND: "Only in Database 2",
        DifferenceKind.USERNAME_DIFFERS: "Username differs",
        DifferenceKind.PASSWORD_DIFFERS: "Password differs",
    }

    # Combo index -> kind filter
    FILTERS: list[tuple[str, Optional[DifferenceKind]]] = [
        ("All", None),
        ("Only in Database 1", DifferenceKind.ONLY_IN_FIRST),
        ("Only in Database 2", DifferenceKind.ONLY_IN_SECOND),
        ("Username differs", DifferenceKind.USERNAME_DIFFERS),
        ("Password differs", DifferenceKind.PASSWORD_DIFFERS),
    ]

    def __init__(self) -> None:
        super().__init__()
        self._differences: list[Difference] = []
        self._current_filter: Optional[DifferenceKind] = None
        self._title_pattern = ""
        self._setup_ui()

    def _setup_ui(self) -> None:
        """Setup the widget UI."""
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)

        # Filter bar
        filter_layout = QHBoxLayout()
        filter_layout.addWidget(QLabel("Filter:"))
        self._filter_combo = QComboBox()
        self._filter_combo.addItems([label for label, _ in self.FILTERS])
        self._filter_combo.currentIndexChanged.connect(self._on_filter_changed)
        filter_layout.addWidget(self._filter_combo)

        filter_layout.addWidget(QLabel("Title:"))
        self._title_edit = QLineEdit()
        self._title_edit.setPlaceholderText("Filter by title...")
        self._title_edit.setMaximumWidth(200)
        self._title_edit.textChanged.connect(self._on_title_changed)
        filter_layout.addWidget(self._title_edit)
        filter_layout.addStretch()
        layout.addLayout(filter_layout)

        # Tree widget
        self._tree = QTreeWidget()
        self._tree.setHeaderLabels(["", "Title", "Username", "Status"])
        self._tree.itemSelectionChanged.connect(self._on_selection_changed)
        self._tree.setIndentation(12)
        self._tree.setColumnWidth(0, 30)
        self._tree.setColumnWidth(1, 260)
        self._tree.setColumnWidth(2, 200)
        self._tree.setColumnWidth(3, 140)
        layout.addWidget(self._tree)

    def populate(self, differences: list[Difference]) -> None:
        """Populate tree with differences, keeping their reported order."""
        logger.info("Populating difference tree with %d items", len(differences))
        self._differences = differences
        self._rebuild_tree()

    def clear(self) -> None:
        self._differences = []
        self._tree.clear()

    def _rebuild_tree(self) -> None:
        """Rebuild the tree with current filters."""
        self._tree.clear()
        visible = filter_differences(
            self._differences, self._current_filter, self._title_pattern
        )
        for difference in visible:
            self._tree.addTopLevelItem(self._create_tree_item(difference))
        self._tree.expandAll()

    def _create_tree_item(self, difference: Difference) -> QTreeWidgetItem:
        """Create tree item for a difference."""
        icon = self.ICONS.get(difference.kind, " ")
        status = self.STATUS_TEXT.get(difference.kind, "")

        item = QTreeWidgetItem([icon, difference.title, difference.username, status])
        item.setData(0, Qt.ItemDataRole.UserRole, difference)

        color = self.COLORS.get(difference.kind)
        if color:
            item.setForeground(3, QBrush(color))

        if difference.kind == DifferenceKind.USERNAME_DIFFERS:
            item.addChild(QTreeWidgetItem(["", "", f"DB1: {difference.username1}", ""]))
            item.addChild(QTreeWidgetItem(["", "", f"DB2: {difference.username2}", ""]))

        return item

    def _on_filter_changed(self, index: int) -> None:
        """Handle filter dropdown change."""
        if 0 <= index < len(self.FILTERS):
            self._current_filter = self.FILTERS[index][1]
        else:
            self._current_filter = None
        self._rebuild_tree()

    def _on_title_changed(self, text: str) -> None:
        self._title_pattern = text
        self._rebuild_tree()

    def _on_selection_changed(self) -> None:
        """Emit the difference behind the selected row."""
        items = self._tree.selectedItems()
        if not items:
            return

        item = items[0]
        # Child rows carry no data; use their parent
        if item.parent() is not None:
            item = item.parent()
        difference = item.data(0, Qt.ItemDataRole.UserRole)
        if difference is not None:
            self.item_selected.emit(difference)
