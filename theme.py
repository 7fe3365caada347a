# theme.py
from __future__ import annotations

from PySide6.QtGui import QColor, QPalette
from PySide6.QtWidgets import QApplication


# canvas colours, by stage type: (header fill, body fill, border)
STAGE_COLORS = {
    "input": ("#2f6b45", "#1f2a24", "#3d8a5a"),
    "output": ("#7a3131", "#2a1f1f", "#9a4545"),
    "mixer": ("#7a6231", "#2a261d", "#9a7d42"),
    "filter": ("#3b4f7a", "#1f2330", "#506eaa"),
}
UNKNOWN_STAGE_COLORS = ("#3a3a42", "#1f1f24", "#55555f")

LANE_BG = "#1b1b1f"
LANE_BORDER = "#2a2a30"
LANE_LABEL = "#aeb3bc"
NODE_TEXT = "#e6e6e6"
NODE_DETAIL = "#cfd3da"
WIRE = "#7fd6a6"
CONNECTOR = "#f2f2f2"
ERROR_BG = "#3a2424"
ERROR_BORDER = "#7a3131"
ERROR_TEXT = "#f3c8c8"


def stage_colors(stage_type: str) -> tuple[QColor, QColor, QColor]:
    head, body, border = STAGE_COLORS.get(stage_type, UNKNOWN_STAGE_COLORS)
    return QColor(head), QColor(body), QColor(border)


def apply_dark_theme(app: QApplication) -> None:
    app.setStyle("Fusion")

    pal = QPalette()
    pal.setColor(QPalette.Window, QColor(20, 20, 22))
    pal.setColor(QPalette.WindowText, QColor(230, 230, 230))
    pal.setColor(QPalette.Base, QColor(14, 14, 16))
    pal.setColor(QPalette.AlternateBase, QColor(26, 26, 28))
    pal.setColor(QPalette.Text, QColor(230, 230, 230))
    pal.setColor(QPalette.Button, QColor(34, 34, 38))
    pal.setColor(QPalette.ButtonText, QColor(230, 230, 230))
    pal.setColor(QPalette.Highlight, QColor(80, 110, 170))
    pal.setColor(QPalette.HighlightedText, QColor(255, 255, 255))
    pal.setColor(QPalette.Disabled, QPalette.Text, QColor(140, 140, 140))
    pal.setColor(QPalette.Disabled, QPalette.ButtonText, QColor(140, 140, 140))
    pal.setColor(QPalette.Disabled, QPalette.WindowText, QColor(140, 140, 140))
    app.setPalette(pal)

    app.setStyleSheet(
        """
        QMainWindow { background: #141416; }

        QLabel#Title {
            font-size: 16px;
            font-weight: 650;
        }

        QLabel#SourcePath { color: #aeb3bc; }

        QGraphicsView#Canvas {
            background: #141416;
            border: 1px solid #2a2a30;
            border-radius: 10px;
        }

        QPushButton {
            padding: 6px 10px;
            border-radius: 10px;
            border: 1px solid #2a2a30;
            background: #232329;
        }
        QPushButton:hover { background: #2a2a33; }

        QPushButton#Primary {
            background: #2c3a5a;
            border: 1px solid #3b4f7a;
        }
        QPushButton#Primary:hover { background: #34456c; }
        """
    )
