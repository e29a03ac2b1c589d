"""Row widget builders for the tracked time list.

Rows are rebuilt from an EngineView whenever the ledger changes.  They
carry no state of their own; the buttons only report the 1-based position
they were built for.
"""

from PySide6.QtCore import Qt
from PySide6.QtGui import QFont
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QWidget,
)
from stt.core.duration import format_hm


def build_entry_row(theme, position, description, seconds, on_copy, on_delete):
    """Build one tracked time row.  Returns the container widget."""
    rc = QWidget()
    rc.setObjectName("entryRow")
    rc.setAttribute(Qt.WA_StyledBackground, True)
    rc.setStyleSheet(f"QWidget#entryRow {{ background-color: {theme.row_bg}; }}")
    lay = QHBoxLayout(rc)
    lay.setContentsMargins(0, 0, 8, 0)
    lay.setSpacing(8)

    index_label = QLabel(str(position))
    index_label.setObjectName("entryIndex")
    index_label.setStyleSheet(f"background-color: {theme.index_bg}; color: {theme.index_text};")
    index_label.setFont(QFont(index_label.font().family(), 20))
    index_label.setAlignment(Qt.AlignCenter)
    index_label.setFixedWidth(50)
    lay.addWidget(index_label)

    time_label = QLabel(format_hm(seconds))
    time_label.setFont(QFont(time_label.font().family(), 20))
    lay.addWidget(time_label)

    desc_label = QLabel(description)
    desc_label.setFont(QFont(desc_label.font().family(), 16))
    desc_label.setToolTip(description)
    desc_label.setSizePolicy(QSizePolicy.Ignored, QSizePolicy.Preferred)
    lay.addWidget(desc_label, 1)

    copy_btn = QPushButton("Copy Text")
    copy_btn.setCursor(Qt.PointingHandCursor)
    copy_btn.clicked.connect(lambda: on_copy(position))
    lay.addWidget(copy_btn)

    delete_btn = QPushButton("Delete")
    delete_btn.setObjectName("deleteButton")
    delete_btn.setStyleSheet(f"color: {theme.delete_text};")
    delete_btn.setCursor(Qt.PointingHandCursor)
    delete_btn.clicked.connect(lambda: on_delete(position))
    lay.addWidget(delete_btn)

    return rc


def build_entry_rows(theme, entries, on_copy, on_delete):
    """Build every row of the list, in ledger order."""
    return [
        build_entry_row(theme, i, description, seconds, on_copy, on_delete)
        for i, (description, seconds) in enumerate(entries, start=1)
    ]
