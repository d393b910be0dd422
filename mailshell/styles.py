from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication

# -----------------------------------------------------------------------------
# Palette
# -----------------------------------------------------------------------------


class ShellColors:
    # Dark Theme (window background matches the shell's #333)
    DARK_WINDOW = "#333333"
    DARK_SURFACE = "#3D3D3D"
    DARK_BORDER = "#4A4A4A"
    DARK_TEXT = "#E0E0E0"
    DARK_TEXT_SEC = "#A0A0A0"

    # Light Theme
    LIGHT_WINDOW = "#F3F3F3"
    LIGHT_SURFACE = "#FFFFFF"
    LIGHT_BORDER = "#E5E5E5"
    LIGHT_TEXT = "#1F1F1F"
    LIGHT_TEXT_SEC = "#5D5D5D"

    SUCCESS = "#5CB85C"
    SUCCESS_HOVER = "#4CAE4C"
    ERROR = "#D9534F"


# -----------------------------------------------------------------------------
# QSS Template
# -----------------------------------------------------------------------------

COMMON_QSS = """
    QPushButton {
        background-color: {{success}};
        color: #FFFFFF;
        border: none;
        border-radius: 4px;
        padding: 6px 14px;
    }
    QPushButton:hover {
        background-color: {{success_hover}};
    }

    QLineEdit {
        background-color: {{surface}};
        color: {{text}};
        border: 1px solid {{border}};
        border-radius: 4px;
        padding: 8px;
        min-width: 240px;
    }

    QFrame[role="row"] {
        background-color: {{surface}};
        border-bottom: 1px solid {{border}};
    }

    QScrollArea {
        border: none;
    }

    #loader {
        background-color: rgba(0, 0, 0, 120);
    }

    #notifier {
        color: #FFFFFF;
        border-radius: 4px;
        padding: 10px;
    }
    #notifier[level="success"] {
        background-color: {{success}};
    }
    #notifier[level="error"] {
        background-color: {{error}};
    }
"""


def _apply_style(app: QApplication, pal_def: dict[str, str]) -> None:
    palette = QPalette()
    c_window = QColor(pal_def["window"])
    c_surface = QColor(pal_def["surface"])
    c_text = QColor(pal_def["text"])

    palette.setColor(QPalette.ColorRole.Window, c_window)
    palette.setColor(QPalette.ColorRole.WindowText, c_text)
    palette.setColor(QPalette.ColorRole.Base, c_surface)
    palette.setColor(QPalette.ColorRole.Text, c_text)
    palette.setColor(QPalette.ColorRole.Button, c_surface)
    palette.setColor(QPalette.ColorRole.ButtonText, c_text)
    palette.setColor(QPalette.ColorGroup.Disabled, QPalette.ColorRole.Text, QColor(pal_def["text_sec"]))
    app.setPalette(palette)

    qss = COMMON_QSS
    for key, val in pal_def.items():
        qss = qss.replace(f"{{{{{key}}}}}", val)
    app.setStyleSheet(qss)


def apply_theme(app: QApplication, theme: str = "dark") -> None:
    """Apply the "dark" (default) or "light" theme to the application."""
    if theme == "light":
        pal_def = {
            "window": ShellColors.LIGHT_WINDOW,
            "surface": ShellColors.LIGHT_SURFACE,
            "border": ShellColors.LIGHT_BORDER,
            "text": ShellColors.LIGHT_TEXT,
            "text_sec": ShellColors.LIGHT_TEXT_SEC,
        }
    else:
        pal_def = {
            "window": ShellColors.DARK_WINDOW,
            "surface": ShellColors.DARK_SURFACE,
            "border": ShellColors.DARK_BORDER,
            "text": ShellColors.DARK_TEXT,
            "text_sec": ShellColors.DARK_TEXT_SEC,
        }
    pal_def.update(
        {
            "success": ShellColors.SUCCESS,
            "success_hover": ShellColors.SUCCESS_HOVER,
            "error": ShellColors.ERROR,
        }
    )
    _apply_style(app, pal_def)
