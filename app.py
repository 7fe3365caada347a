# app.py
from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from PySide6.QtWidgets import QApplication

from dsp_source import YamlConfigSource
from main_window import MainWindow
from models import RenderStatus
from renderer import PipelineRenderer
from snapshot import SnapshotSurface
from theme import apply_dark_theme


logger = logging.getLogger(__name__)


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    ap = argparse.ArgumentParser(
        prog="roomeq",
        description="Draw a CamillaDSP-style configuration as per-channel lanes of processing stages.",
    )
    ap.add_argument("config", nargs="?", help="YAML configuration file to show")
    ap.add_argument("--dump", action="store_true", help="print the computed layout as JSON instead of opening a window")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return ap.parse_args(argv)


async def dump_layout(path: str) -> dict:
    surface = SnapshotSurface()
    renderer = PipelineRenderer(YamlConfigSource(path), surface)
    await renderer.initialize()
    out = surface.to_dict()
    out["status"] = renderer.status.value
    return out


def _run_dump(path: str) -> int:
    result = asyncio.run(dump_layout(path))
    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 1 if result["status"] == RenderStatus.ERRORED.value else 0


def _run_gui(path: Optional[str]) -> int:
    app = QApplication(sys.argv[:1])
    apply_dark_theme(app)
    w = MainWindow(config_path=path)
    w.show()
    return app.exec()


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.dump:
        if not args.config:
            logger.error("--dump needs a config file")
            return 2
        return _run_dump(args.config)

    return _run_gui(args.config)


if __name__ == "__main__":
    raise SystemExit(main())
