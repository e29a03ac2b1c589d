"""Colour palettes and stylesheet generation."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Theme:
    name: str
    background: str
    text: str
    input_bg: str
    input_border: str
    button_bg: str
    button_hover: str
    row_bg: str
    index_bg: str
    index_text: str
    running: str
    paused: str
    delete_text: str


THEMES = {
    "dark": Theme(
        name="dark",
        background="#202020",
        text="#eeeeee",
        input_bg="#ffffff",
        input_border="#606060",
        button_bg="#404040",
        button_hover="#505050",
        row_bg="#303030",
        index_bg="#ffb060",
        index_text="#000000",
        running="#009040",
        paused="#c84000",
        delete_text="#c84000",
    ),
    "light": Theme(
        name="light",
        background="#f0f0f0",
        text="#000000",
        input_bg="#ffffff",
        input_border="#606060",
        button_bg="#ffffff",
        button_hover="#e0e0e0",
        row_bg="#c8c8c8",
        index_bg="#ffb060",
        index_text="#000000",
        running="#009040",
        paused="#c84000",
        delete_text="#c84000",
    ),
}


def theme_for(dark_mode):
    return THEMES["dark" if dark_mode else "light"]


def build_stylesheet(t):
    """Window-wide stylesheet for the given Theme."""
    return f"""
        QMainWindow, QWidget#central {{
            background-color: {t.background};
        }}
        QLabel {{
            color: {t.text};
        }}
        QLineEdit {{
            background-color: {t.input_bg};
            border: 1px solid {t.input_border};
            color: #000000;
            padding: 3px;
        }}
        QPushButton {{
            background-color: {t.button_bg};
            border: 1px solid {t.input_border};
            color: {t.text};
            padding: 4px 8px;
        }}
        QPushButton:hover {{
            background-color: {t.button_hover};
        }}
    """


def clock_css(t, running, opacity=1.0):
    """Inline style for the big clock readout, green while running and orange while paused."""
    color = t.running if running else t.paused
    alpha = int(round(opacity * 255))
    # Qt reads 8-digit hex colors as #AARRGGBB
    return f"color: #{alpha:02x}{color[1:]}; font-size: 60px;"
