# widgets.py
from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QLabel

from models import RenderStatus


_PILL_STYLES = {
    # state: (background, border, foreground)
    "on": ("#233a2c", "#2f6b45", "#cfeedd"),
    "pending": ("#3a3424", "#7a6231", "#f3e6c8"),
    "error": ("#3a2424", "#7a3131", "#f3c8c8"),
    "off": ("#2a2a30", "#3a3a42", "#d6d6d6"),
}

_STATUS_PILL = {
    RenderStatus.UNINITIALIZED: ("Idle", "off"),
    RenderStatus.LOADING: ("Loading", "pending"),
    RenderStatus.REFRESHING: ("Refreshing", "pending"),
    RenderStatus.RENDERED: ("Rendered", "on"),
    RenderStatus.ERRORED: ("Error", "error"),
}


class StatusPill(QLabel):
    """
    Compact fixed-width status indicator to avoid wide rows.
    Details go in tooltip.
    """
    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setAlignment(Qt.AlignCenter)
        self.setFixedWidth(100)
        self.state = "off"
        self.set_status(RenderStatus.UNINITIALIZED)

    def set_status(self, status: RenderStatus, tooltip: str = "") -> None:
        text, state = _STATUS_PILL[status]
        self.setText(text)
        self.setToolTip(tooltip)
        self.set_state(state)

    def set_state(self, state: str) -> None:
        bg, bd, fg = _PILL_STYLES.get(state, _PILL_STYLES["off"])
        self.state = state
        self.setStyleSheet(
            f"""
            QLabel {{
                background: {bg};
                border: 1px solid {bd};
                border-radius: 10px;
                padding: 4px 8px;
                color: {fg};
                font-weight: 600;
            }}
            """
        )
