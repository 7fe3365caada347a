# store_config.py
from __future__ import annotations

import configparser
import os
import platform
from dataclasses import dataclass
from pathlib import Path


DEFAULT_CONFIG_TEXT = """\
[Source]
config_path =

[View]
auto_refresh = true
refresh_interval_ms = 2000
"""

MIN_REFRESH_INTERVAL_MS = 250


def _windows_appdata_dir() -> Path:
    appdata = os.environ.get("APPDATA")
    if appdata:
        return Path(appdata)
    return Path.home() / "AppData" / "Roaming"


def _linux_xdg_config_dir() -> Path:
    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def user_config_dir(app_name: str) -> Path:
    sysname = (platform.system() or "").lower()
    if sysname.startswith("windows"):
        return _windows_appdata_dir() / app_name
    if sysname.startswith("linux"):
        return _linux_xdg_config_dir() / app_name
    return Path.home() / ".config" / app_name


@dataclass(frozen=True)
class ViewSettings:
    config_path: str
    auto_refresh: bool
    refresh_interval_ms: int


@dataclass(frozen=True)
class ConfigStore:
    app_name: str = "RoomEQ"
    filename: str = "roomeq.cfg"
    base_dir: Path | None = None

    @property
    def dir_path(self) -> Path:
        if self.base_dir is not None:
            return self.base_dir
        return user_config_dir(self.app_name)

    @property
    def file_path(self) -> Path:
        return self.dir_path / self.filename

    def ensure_exists(self) -> None:
        self.dir_path.mkdir(parents=True, exist_ok=True)
        if not self.file_path.exists():
            self.file_path.write_text(DEFAULT_CONFIG_TEXT, encoding="utf-8")

    def load(self) -> configparser.ConfigParser:
        self.ensure_exists()
        cfg = configparser.ConfigParser()
        cfg.read(self.file_path, encoding="utf-8")

        if not cfg.has_section("Source"):
            cfg.add_section("Source")
        cfg.set("Source", "config_path", cfg.get("Source", "config_path", fallback=""))

        if not cfg.has_section("View"):
            cfg.add_section("View")
        cfg.set("View", "auto_refresh", cfg.get("View", "auto_refresh", fallback="true"))
        cfg.set("View", "refresh_interval_ms", cfg.get("View", "refresh_interval_ms", fallback="2000"))

        return cfg

    def save(self, cfg: configparser.ConfigParser) -> None:
        self.ensure_exists()
        with self.file_path.open("w", encoding="utf-8") as f:
            cfg.write(f)

    def view_settings(self) -> ViewSettings:
        cfg = self.load()
        try:
            auto = cfg.getboolean("View", "auto_refresh", fallback=True)
        except ValueError:
            auto = True
        try:
            interval = cfg.getint("View", "refresh_interval_ms", fallback=2000)
        except ValueError:
            interval = 2000
        return ViewSettings(
            config_path=cfg.get("Source", "config_path", fallback="").strip(),
            auto_refresh=auto,
            refresh_interval_ms=max(MIN_REFRESH_INTERVAL_MS, interval),
        )

    def record_config_path(self, path: str) -> None:
        cfg = self.load()
        p = (path or "").strip()
        if cfg.get("Source", "config_path", fallback="").strip() != p:
            cfg.set("Source", "config_path", p)
            self.save(cfg)

    def record_auto_refresh(self, enabled: bool) -> None:
        cfg = self.load()
        v = "true" if enabled else "false"
        if cfg.get("View", "auto_refresh", fallback="") != v:
            cfg.set("View", "auto_refresh", v)
            self.save(cfg)
