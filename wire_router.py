# wire_router.py
from __future__ import annotations

import math
from typing import List, Protocol, Sequence

from models import NodeSpec, Rect, WireSpec


class LayoutProvider(Protocol):
    def measure(self, node: NodeSpec) -> Rect:
        """Bounding box of a placed node, relative to its lane's node container."""
        ...


class DeclaredLayout:
    """
    Geometry straight from the NodeSpecs. Used headless and in tests,
    where there is no paint surface to measure.
    """

    def measure(self, node: NodeSpec) -> Rect:
        return Rect(left=node.x_offset, top=node.top, width=node.width, height=node.height)


def route(from_rect: Rect, to_rect: Rect) -> WireSpec:
    ax, ay = from_rect.right, from_rect.center_y
    tx, ty = to_rect.left, to_rect.center_y
    dx = tx - ax
    dy = ty - ay
    return WireSpec(
        anchor_x=ax,
        anchor_y=ay,
        length=math.hypot(dx, dy),
        angle_degrees=math.degrees(math.atan2(dy, dx)),
    )


def route_nodes(from_node: NodeSpec, to_node: NodeSpec, layout: LayoutProvider) -> WireSpec:
    return route(layout.measure(from_node), layout.measure(to_node))


def route_lane(nodes: Sequence[NodeSpec], layout: LayoutProvider) -> List[WireSpec]:
    if len(nodes) < 2:
        return []
    rects = [layout.measure(n) for n in nodes]
    return [route(rects[i], rects[i + 1]) for i in range(len(rects) - 1)]
