# snapshot.py
from __future__ import annotations

from dataclasses import asdict
from typing import Any, Callable, Dict, List, Optional, Sequence

from models import LaneSpec, WireSpec


class SnapshotSurface:
    """
    Headless surface. Keeps whatever the renderer last emitted.

    With settle_immediately=True the post-layout callback runs inline
    (declared geometry is final as soon as it exists). Otherwise callbacks
    wait for settle().
    """

    def __init__(self, settle_immediately: bool = True) -> None:
        self.settle_immediately = settle_immediately
        self.lanes: List[LaneSpec] = []
        self.wires: Dict[int, List[WireSpec]] = {}
        self.error: Optional[str] = None
        self.clear_count = 0
        self._pending: List[Callable[[], None]] = []

    def clear(self) -> None:
        self.clear_count += 1
        self.lanes = []
        self.wires = {}
        self.error = None

    def show_lanes(self, lanes: Sequence[LaneSpec]) -> None:
        self.lanes = list(lanes)
        self.wires = {}

    def show_wires(self, channel_index: int, wires: Sequence[WireSpec]) -> None:
        self.wires[channel_index] = list(wires)

    def show_error(self, message: str) -> None:
        self.error = message

    def after_layout(self, callback: Callable[[], None]) -> None:
        if self.settle_immediately:
            callback()
        else:
            self._pending.append(callback)

    def settle(self) -> int:
        pending, self._pending = self._pending, []
        for cb in pending:
            cb()
        return len(pending)

    def to_dict(self) -> Dict[str, Any]:
        if self.error is not None:
            return {"error": self.error, "lanes": []}

        lanes = []
        for lane in self.lanes:
            d = asdict(lane)
            d["nodes"] = [dict(n, detail_lines=list(n["detail_lines"])) for n in d["nodes"]]
            d["wires"] = [asdict(w) for w in self.wires.get(lane.channel_index, [])]
            lanes.append(d)
        return {"error": None, "lanes": lanes}
