# lane_layout.py
from __future__ import annotations

from typing import Any, List, Sequence

from dsp_stages import coerce_stage, stage_type_of
from models import LaneSpec, NodeSpec
from stage_format import format_stage


NODE_WIDTH = 120
NODE_HEIGHT = 80
NODE_GAP = 20
NODE_PITCH = NODE_WIDTH + NODE_GAP
LANE_HEIGHT = 120
LANE_START_X = 10
NODE_TOP = (LANE_HEIGHT - NODE_HEIGHT) / 2


def build_node(stage: Any, channel_index: int, x_offset: float) -> NodeSpec:
    s = coerce_stage(stage)
    t = stage_type_of(s)
    text = format_stage(s)
    return NodeSpec(
        stage_type=t,
        channel_index=channel_index,
        x_offset=x_offset,
        width=NODE_WIDTH,
        height=NODE_HEIGHT,
        header_text=text.header_text,
        detail_lines=text.detail_lines,
        has_left_connector=t != "input",
        has_right_connector=t != "output",
        top=NODE_TOP,
    )


def build_lane(channel_index: int, stages: Sequence[Any]) -> LaneSpec:
    nodes: List[NodeSpec] = []
    x = LANE_START_X
    for stage in stages:
        nodes.append(build_node(stage, channel_index, x))
        x += NODE_PITCH

    return LaneSpec(
        channel_index=channel_index,
        label=f"Channel {channel_index}",
        nodes=tuple(nodes),
        height=LANE_HEIGHT,
    )


def build_lanes(channels: Sequence[Sequence[Any]]) -> List[LaneSpec]:
    return [build_lane(i, stages) for i, stages in enumerate(channels)]
