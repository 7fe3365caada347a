# main_window.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from PySide6.QtCore import QTimer
from PySide6.QtWidgets import (
    QCheckBox,
    QFileDialog,
    QHBoxLayout,
    QLabel,
    QMainWindow,
    QPushButton,
    QSizePolicy,
    QVBoxLayout,
    QWidget,
)

from canvas import PipelineCanvas
from dsp_source import YamlConfigSource
from models import RenderStatus
from qt_async import AsyncPump
from renderer import PipelineRenderer
from store_config import ConfigStore
from widgets import StatusPill


logger = logging.getLogger(__name__)

APP_NAME = "Room EQ"
NO_SOURCE_MESSAGE = "No DSP configuration selected. Use Open to pick a CamillaDSP YAML file."


class MainWindow(QMainWindow):
    def __init__(self, config_path: Optional[str] = None, store: Optional[ConfigStore] = None) -> None:
        super().__init__()
        self.setWindowTitle(APP_NAME)
        self.resize(1220, 640)

        self._init_store(store)
        self._pump = AsyncPump(self)
        self.renderer: Optional[PipelineRenderer] = None

        self._build_ui()
        self._wire_timers()

        path = config_path or self.settings.config_path
        if path:
            self.open_config(path)
        else:
            self.canvas.show_error(NO_SOURCE_MESSAGE)

    def _init_store(self, store: Optional[ConfigStore]) -> None:
        self.store = store if store is not None else ConfigStore()
        self.settings = self.store.view_settings()

    def _build_ui(self) -> None:
        root = QWidget()
        outer = QVBoxLayout()
        outer.setContentsMargins(12, 12, 12, 12)
        outer.setSpacing(10)
        root.setLayout(outer)
        self.setCentralWidget(root)

        outer.addLayout(self._build_header())

        self.canvas = PipelineCanvas()
        self.canvas.resized.connect(self._on_canvas_resized)
        outer.addWidget(self.canvas, 1)

    def _build_header(self) -> QHBoxLayout:
        header = QHBoxLayout()
        header.setSpacing(10)

        title = QLabel(APP_NAME)
        title.setObjectName("Title")

        self.source_label = QLabel("")
        self.source_label.setObjectName("SourcePath")
        self.source_label.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Preferred)

        self.status = StatusPill()

        open_btn = QPushButton("Open…")
        open_btn.clicked.connect(self._choose_config)

        self.auto_refresh = QCheckBox("Auto refresh")
        self.auto_refresh.setChecked(self.settings.auto_refresh)
        self.auto_refresh.toggled.connect(self.store.record_auto_refresh)

        refresh_btn = QPushButton("Refresh")
        refresh_btn.setObjectName("Primary")
        refresh_btn.clicked.connect(self.refresh)

        header.addWidget(title)
        header.addSpacing(8)
        header.addWidget(QLabel("Config:"))
        header.addWidget(self.source_label, 2)
        header.addStretch(1)
        header.addWidget(self.status)
        header.addWidget(open_btn)
        header.addWidget(self.auto_refresh)
        header.addWidget(refresh_btn)
        return header

    def _wire_timers(self) -> None:
        self.timer = QTimer(self)
        self.timer.setInterval(self.settings.refresh_interval_ms)
        self.timer.timeout.connect(self._auto_refresh_tick)
        self.timer.start()

    def _choose_config(self) -> None:
        start = str(Path(self.settings.config_path).parent) if self.settings.config_path else str(Path.home())
        path, _ = QFileDialog.getOpenFileName(
            self,
            "Open DSP configuration",
            start,
            "YAML files (*.yml *.yaml);;All files (*)",
        )
        if path:
            self.open_config(path)

    def open_config(self, path: str) -> None:
        self.store.record_config_path(path)
        self.settings = self.store.view_settings()

        source = YamlConfigSource(path)
        self.source_label.setText(source.label())
        # one renderer per canvas; its generation counter drops passes for the old file
        if self.renderer is None:
            self.renderer = PipelineRenderer(
                source,
                self.canvas,
                layout=self.canvas,
                on_status=self._on_status,
            )
        else:
            self.renderer.use_source(source)
        self._on_status(self.renderer.status)
        self._pump.submit(self.renderer.initialize())

    def refresh(self) -> None:
        if self.renderer is None:
            self.canvas.show_error(NO_SOURCE_MESSAGE)
            return
        self._pump.submit(self.renderer.refresh())

    def _auto_refresh_tick(self) -> None:
        if not self.auto_refresh.isChecked() or self.renderer is None:
            return
        if self.renderer.status != RenderStatus.RENDERED:
            return
        source = self.renderer.source
        if isinstance(source, YamlConfigSource) and source.changed_since_download():
            logger.info("%s changed on disk; refreshing", source.path)
            self.refresh()

    def _on_status(self, status: RenderStatus) -> None:
        tip = ""
        if self.renderer is not None:
            tip = self.renderer.state.error or ""
        self.status.set_status(status, tip)

    def _on_canvas_resized(self) -> None:
        if self.renderer is not None:
            self.renderer.relayout()

    def closeEvent(self, event) -> None:
        self.timer.stop()
        try:
            self._pump.close()
        except Exception as e:
            logger.debug("Async pump shutdown: %s", e)
        super().closeEvent(event)
