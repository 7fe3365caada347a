# models.py
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Rect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2.0


@dataclass(frozen=True)
class NodeSpec:
    stage_type: str
    channel_index: int
    x_offset: float
    width: float
    height: float
    header_text: str
    detail_lines: Tuple[str, ...]
    has_left_connector: bool
    has_right_connector: bool
    top: float = 0.0


@dataclass(frozen=True)
class LaneSpec:
    channel_index: int
    label: str
    nodes: Tuple[NodeSpec, ...]
    height: float = 0.0


@dataclass(frozen=True)
class WireSpec:
    anchor_x: float
    anchor_y: float
    length: float
    angle_degrees: float


class RenderStatus(enum.Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    RENDERED = "rendered"
    REFRESHING = "refreshing"
    ERRORED = "errored"


@dataclass
class RendererState:
    status: RenderStatus = RenderStatus.UNINITIALIZED
    lanes: List[LaneSpec] = field(default_factory=list)
    wires: Dict[int, List[WireSpec]] = field(default_factory=dict)  # channel index -> wires
    error: Optional[str] = None
    generation: int = 0
