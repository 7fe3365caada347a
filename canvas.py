# canvas.py
from __future__ import annotations

import logging
from typing import Callable, Dict, List, Sequence, Tuple

from PySide6.QtCore import QRectF, Qt, QTimer, Signal
from PySide6.QtGui import QBrush, QColor, QFont, QFontMetrics, QPainter, QPen
from PySide6.QtWidgets import (
    QGraphicsEllipseItem,
    QGraphicsItem,
    QGraphicsLineItem,
    QGraphicsRectItem,
    QGraphicsScene,
    QGraphicsSimpleTextItem,
    QGraphicsTextItem,
    QGraphicsView,
)

import theme
from models import LaneSpec, NodeSpec, Rect, WireSpec


logger = logging.getLogger(__name__)

LABEL_WIDTH = 90
LANE_SPACING = 8
HEADER_HEIGHT = 20
CONNECTOR_SIZE = 10
TEXT_PAD = 6

NodeKey = Tuple[int, float]


def _node_key(node: NodeSpec) -> NodeKey:
    return node.channel_index, node.x_offset


def _elided(text: str, font: QFont, width: float) -> str:
    fm = QFontMetrics(font)
    return fm.elidedText(text, Qt.ElideRight, int(width))


class NodeItem(QGraphicsRectItem):
    def __init__(self, node: NodeSpec, parent: QGraphicsItem) -> None:
        super().__init__(0, 0, node.width, node.height, parent)
        self.node = node
        self.setPos(node.x_offset, node.top)

        head, body, border = theme.stage_colors(node.stage_type)
        self.setBrush(QBrush(body))
        self.setPen(QPen(border, 1.0))
        self.setToolTip("\n".join((node.header_text,) + node.detail_lines))

        band = QGraphicsRectItem(0, 0, node.width, HEADER_HEIGHT, self)
        band.setBrush(QBrush(head))
        band.setPen(QPen(Qt.NoPen))

        bold = QFont()
        bold.setPointSize(8)
        bold.setWeight(QFont.DemiBold)
        header = QGraphicsSimpleTextItem(_elided(node.header_text, bold, node.width - 2 * TEXT_PAD), self)
        header.setFont(bold)
        header.setBrush(QBrush(QColor(theme.NODE_TEXT)))
        header.setPos(TEXT_PAD, 3)

        small = QFont()
        small.setPointSize(7)
        y = HEADER_HEIGHT + 3
        for line in node.detail_lines:
            t = QGraphicsSimpleTextItem(_elided(line, small, node.width - 2 * TEXT_PAD), self)
            t.setFont(small)
            t.setBrush(QBrush(QColor(theme.NODE_DETAIL)))
            t.setPos(TEXT_PAD, y)
            y += QFontMetrics(small).height()

        cy = node.height / 2.0
        r = CONNECTOR_SIZE / 2.0
        if node.has_left_connector:
            self._connector(-r, cy - r)
        if node.has_right_connector:
            self._connector(node.width - r, cy - r)

    def _connector(self, x: float, y: float) -> None:
        c = QGraphicsEllipseItem(x, y, CONNECTOR_SIZE, CONNECTOR_SIZE, self)
        c.setBrush(QBrush(QColor(theme.CONNECTOR)))
        c.setPen(QPen(QColor(theme.LANE_BORDER), 1.0))
        c.setZValue(2)


class PipelineCanvas(QGraphicsView):
    """
    Qt surface for PipelineRenderer and the LayoutProvider its wires are
    routed against. Node geometry is measured from the placed items.
    """

    resized = Signal()

    def __init__(self, parent=None) -> None:
        super().__init__(parent)
        self.setObjectName("Canvas")
        self.setRenderHint(QPainter.Antialiasing, True)
        self.setAlignment(Qt.AlignLeft | Qt.AlignTop)

        self._scene = QGraphicsScene(self)
        self.setScene(self._scene)

        self._containers: Dict[int, QGraphicsRectItem] = {}
        self._nodes: Dict[NodeKey, NodeItem] = {}
        self._wires: Dict[int, List[QGraphicsLineItem]] = {}

    def clear(self) -> None:
        self._scene.clear()
        self._containers = {}
        self._nodes = {}
        self._wires = {}

    def show_lanes(self, lanes: Sequence[LaneSpec]) -> None:
        self.clear()
        width = self._content_width(lanes)
        y = 0.0
        for lane in lanes:
            self._add_lane(lane, y, width)
            y += lane.height + LANE_SPACING
        self._scene.setSceneRect(QRectF(0, 0, width, max(y - LANE_SPACING, 0)))

    def _content_width(self, lanes: Sequence[LaneSpec]) -> float:
        right = 0.0
        for lane in lanes:
            for n in lane.nodes:
                right = max(right, n.x_offset + n.width)
        return LABEL_WIDTH + right + 20

    def _add_lane(self, lane: LaneSpec, y: float, width: float) -> None:
        bg = QGraphicsRectItem(0, 0, width, lane.height)
        bg.setPos(0, y)
        bg.setBrush(QBrush(QColor(theme.LANE_BG)))
        bg.setPen(QPen(QColor(theme.LANE_BORDER), 1.0))
        self._scene.addItem(bg)

        label = QGraphicsSimpleTextItem(lane.label, bg)
        label.setBrush(QBrush(QColor(theme.LANE_LABEL)))
        label.setPos(10, (lane.height - label.boundingRect().height()) / 2.0)

        container = QGraphicsRectItem(0, 0, width - LABEL_WIDTH, lane.height, bg)
        container.setPos(LABEL_WIDTH, 0)
        container.setPen(QPen(Qt.NoPen))
        self._containers[lane.channel_index] = container

        for node in lane.nodes:
            self._nodes[_node_key(node)] = NodeItem(node, container)

    def show_wires(self, channel_index: int, wires: Sequence[WireSpec]) -> None:
        for old in self._wires.pop(channel_index, []):
            self._scene.removeItem(old)

        container = self._containers.get(channel_index)
        if container is None:
            return

        items: List[QGraphicsLineItem] = []
        pen = QPen(QColor(theme.WIRE), 2.0)
        for w in wires:
            # drawn along +x from the anchor, then rotated about it
            line = QGraphicsLineItem(0, 0, w.length, 0, container)
            line.setPen(pen)
            line.setPos(w.anchor_x, w.anchor_y)
            line.setRotation(w.angle_degrees)
            line.setZValue(1)
            items.append(line)
        self._wires[channel_index] = items

    def show_error(self, message: str) -> None:
        self.clear()
        panel = QGraphicsRectItem(0, 0, 480, 110)
        panel.setBrush(QBrush(QColor(theme.ERROR_BG)))
        panel.setPen(QPen(QColor(theme.ERROR_BORDER), 1.0))
        self._scene.addItem(panel)

        title = QGraphicsSimpleTextItem("Error", panel)
        f = QFont()
        f.setPointSize(12)
        f.setWeight(QFont.DemiBold)
        title.setFont(f)
        title.setBrush(QBrush(QColor(theme.ERROR_TEXT)))
        title.setPos(14, 10)

        body = QGraphicsTextItem(panel)
        body.setPlainText(message)
        body.setDefaultTextColor(QColor(theme.ERROR_TEXT))
        body.setTextWidth(452)
        body.setPos(10, 38)

        self._scene.setSceneRect(panel.rect())

    def after_layout(self, callback: Callable[[], None]) -> None:
        # fires once the event loop has processed pending layout and paint
        QTimer.singleShot(0, callback)

    def measure(self, node: NodeSpec) -> Rect:
        item = self._nodes.get(_node_key(node))
        if item is None:
            logger.debug("No placed item for node at %s; using declared geometry", _node_key(node))
            return Rect(left=node.x_offset, top=node.top, width=node.width, height=node.height)
        r = item.mapRectToParent(item.rect())
        return Rect(left=r.left(), top=r.top(), width=r.width(), height=r.height())

    def lane_count(self) -> int:
        return len(self._containers)

    def node_count(self) -> int:
        return len(self._nodes)

    def wire_count(self, channel_index: int) -> int:
        return len(self._wires.get(channel_index, []))

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        self.resized.emit()
