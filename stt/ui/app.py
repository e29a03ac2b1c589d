import sys
from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QApplication,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QMainWindow,
    QMessageBox,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)
from stt.common.logger import log, set_level
from stt.core.config import load_config
from stt.core.database import Database, PersistenceError
from stt.core.duration import format_hm
from stt.core.engine import Outcome, TimeAccountingEngine
from stt.ui.theme import build_stylesheet, clock_css, theme_for
from stt.ui.widgets import build_entry_rows


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

# Main window of the tracker. Every button and text field forwards to the engine, and everything on screen is
# redrawn from engine.snapshot().
class MainWindow(QMainWindow):

    def __init__(self, engine, config):
        super().__init__()
        self.engine = engine
        self.config = config
        self.setWindowTitle("Simple Time Tracker")
        self.setMinimumSize(*config.window_size)
        self.resize(*config.window_size)

        central = QWidget()
        central.setObjectName("central")
        self.setCentralWidget(central)
        main_lay = QVBoxLayout(central)
        main_lay.setContentsMargins(8, 8, 8, 8)

        # -- Clock readout and clock buttons --
        top = QHBoxLayout()
        self._clock_label = QLabel()
        self._seconds_label = QLabel()
        top.addWidget(self._clock_label)
        top.addWidget(self._seconds_label)
        top.addStretch(1)
        self._start_btn = self._button("Start", self._on_start_stop)
        self._clear_btn = self._button("Clear", self._on_clear)
        self._theme_btn = self._button("Light", self._on_theme)
        for btn in (self._start_btn, self._clear_btn, self._theme_btn):
            top.addWidget(btn)
        main_lay.addLayout(top)

        # -- Operation form: "Add [time] to new entry called [desc] or to entry # [index]" --
        form = QHBoxLayout()
        form.addWidget(QLabel("Add"))
        self._time_edit = self._line_edit("all", 50, self.engine.set_time_text)
        form.addWidget(self._time_edit)
        form.addWidget(QLabel("to new entry called"))
        self._desc_edit = self._line_edit("", None, self.engine.set_description_text)
        form.addWidget(self._desc_edit, 1)
        form.addWidget(QLabel("or to entry #"))
        self._index_edit = self._line_edit("", 30, self.engine.set_index_text)
        form.addWidget(self._index_edit)
        form.addWidget(self._button("Apply", self._on_apply))
        main_lay.addLayout(form)

        # -- Tracked time list --
        self._list_widget = QWidget()
        self._list = QVBoxLayout(self._list_widget)
        self._list.setContentsMargins(0, 0, 0, 0)
        self._list.setSpacing(6)
        self._list.addStretch(1)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setWidget(self._list_widget)
        main_lay.addWidget(scroll, 1)

        # -- Tick timer, only runs while the clock does --
        self._timer = QTimer(self)
        self._timer.setInterval(config.tick_interval_ms)
        self._timer.timeout.connect(self._tick)

        self._apply_style()
        self._rebuild_rows()
        self._refresh()

    def _button(self, text, handler):
        btn = QPushButton(text)
        btn.setMinimumWidth(75)
        btn.setCursor(Qt.PointingHandCursor)
        btn.clicked.connect(handler)
        return btn

    # Text fields push every edit through the engine's filter; a refused edit is undone on the spot.
    def _line_edit(self, placeholder, width, setter):
        edit = QLineEdit()
        edit.setPlaceholderText(placeholder)
        if width:
            edit.setFixedWidth(width)

        def on_edited(text):
            if not setter(text):
                self._sync_inputs()

        edit.textEdited.connect(on_edited)
        edit.returnPressed.connect(self._on_apply)
        return edit

    # ------------------------------------------------------------------ #
    #  Rendering                                                           #
    # ------------------------------------------------------------------ #

    def _apply_style(self):
        style = build_stylesheet(theme_for(self.engine.dark_mode))
        self.setStyleSheet(style)

    def _rebuild_rows(self):
        """Tear down and recreate every tracked time row from the current snapshot."""
        while self._list.count() > 1:
            item = self._list.takeAt(0)
            w = item.widget()
            if w:
                w.hide()
                w.deleteLater()

        view = self.engine.snapshot()
        rows = build_entry_rows(theme_for(view.dark_mode), view.entries, self._on_copy, self._on_delete)
        for i, row in enumerate(rows):
            self._list.insertWidget(i, row)

    def _sync_inputs(self):
        view = self.engine.snapshot()
        for edit, text in ((self._time_edit, view.time_text),
                           (self._desc_edit, view.description_text),
                           (self._index_edit, view.index_text)):
            if edit.text() != text:
                edit.setText(text)

    def _refresh(self):
        view = self.engine.snapshot()
        t = theme_for(view.dark_mode)
        seconds = max(0, int(view.elapsed))
        self._clock_label.setText(format_hm(seconds))
        self._clock_label.setStyleSheet(clock_css(t, view.running))
        self._seconds_label.setText(f":{seconds % 60:02d}")
        self._seconds_label.setStyleSheet(clock_css(t, view.running, opacity=0.5))
        self._start_btn.setText("Pause" if view.running else "Start")
        self._theme_btn.setText("Light" if view.dark_mode else "Dark")

        if self.engine.should_tick and not self._timer.isActive():
            self._timer.start()
        elif not self.engine.should_tick and self._timer.isActive():
            self._timer.stop()

    def _tick(self):
        self._refresh()

    # ------------------------------------------------------------------ #
    #  Button handlers                                                     #
    # ------------------------------------------------------------------ #

    def _on_start_stop(self):
        self.engine.toggle_start_stop()
        self._refresh()

    def _on_clear(self):
        self.engine.clear_timer()
        self._refresh()

    def _on_theme(self):
        self.engine.toggle_dark_mode()
        self._apply_style()
        self._rebuild_rows()
        self._refresh()

    def _on_apply(self):
        try:
            outcome = self.engine.apply()
        except PersistenceError as e:
            QMessageBox.warning(self, "Save Error",
                                f"Failed to save tracked times, nothing was changed:\n{e}")
            outcome = None
        if outcome is Outcome.OK:
            self._sync_inputs()
            self._rebuild_rows()
        self._refresh()

    def _on_delete(self, position):
        try:
            outcome = self.engine.delete_entry(position)
        except PersistenceError as e:
            QMessageBox.warning(self, "Save Error",
                                f"Failed to delete tracked time #{position}:\n{e}")
            return
        if outcome is Outcome.OK:
            self._rebuild_rows()

    def _on_copy(self, position):
        text = self.engine.copy_description(position)
        if text is not None:
            QApplication.clipboard().setText(text)

    # ------------------------------------------------------------------ #
    #  Window close                                                        #
    # ------------------------------------------------------------------ #

    def closeEvent(self, event):
        try:
            self.engine.shutdown()
        except PersistenceError as e:
            QMessageBox.warning(self, "Save Error",
                                f"Failed to save state:\n{e}")
        event.accept()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    config = load_config()
    set_level(config.log_level)
    # A broken database is fatal here, PersistenceError propagates to the entry point.
    engine = TimeAccountingEngine.load(Database(config.database_path), default_dark_mode=config.default_dark_mode)
    app = QApplication(sys.argv)
    window = MainWindow(engine, config)
    window.show()
    log.info("Main window shown")
    sys.exit(app.exec())
