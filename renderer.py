# renderer.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from dsp_source import ConfigSource
from lane_layout import build_lanes
from models import LaneSpec, RendererState, RenderStatus, WireSpec
from wire_router import DeclaredLayout, LayoutProvider, route_lane


logger = logging.getLogger(__name__)

NOT_CONNECTED_MESSAGE = "Not connected to the DSP configuration source. Check the config path and try again."
LOAD_ERROR_PREFIX = "Error loading DSP configuration: "


class Surface(Protocol):
    """
    Where a render pass ends up. Every call replaces what it names.
    clear() drops everything. show_lanes() replaces all lanes and their wires.
    show_wires() replaces one lane's wires.
    """

    def clear(self) -> None: ...

    def show_lanes(self, lanes: Sequence[LaneSpec]) -> None: ...

    def show_wires(self, channel_index: int, wires: Sequence[WireSpec]) -> None: ...

    def show_error(self, message: str) -> None: ...

    def after_layout(self, callback: Callable[[], None]) -> None:
        """Call back once node geometry is final and measurable."""
        ...


class PipelineRenderer:
    """
    Drives one diagram: fetch, build lanes, emit nodes, then route wires
    once the surface reports layout settled.

    Each pass takes a generation number. A pass that finds a newer generation
    after any suspension point is dropped without touching state or surface,
    so the latest request wins.
    """

    def __init__(
        self,
        source: ConfigSource,
        surface: Surface,
        layout: Optional[LayoutProvider] = None,
        on_status: Optional[Callable[[RenderStatus], None]] = None,
    ) -> None:
        self._source = source
        self._surface = surface
        self._layout: LayoutProvider = layout if layout is not None else DeclaredLayout()
        self._on_status = on_status
        self._state = RendererState()

    @property
    def state(self) -> RendererState:
        return self._state

    @property
    def status(self) -> RenderStatus:
        return self._state.status

    @property
    def lanes(self) -> List[LaneSpec]:
        return list(self._state.lanes)

    @property
    def source(self) -> ConfigSource:
        return self._source

    def use_source(self, source: ConfigSource) -> None:
        """Point the renderer at another source. Passes still in flight are dropped."""
        self._source = source
        self._state.generation += 1

    def _set_status(self, status: RenderStatus) -> None:
        if self._state.status == status:
            return
        logger.debug("Renderer %s -> %s", self._state.status.value, status.value)
        self._state.status = status
        if self._on_status is not None:
            self._on_status(status)

    def _is_stale(self, generation: int) -> bool:
        return generation != self._state.generation

    async def initialize(self) -> None:
        self._set_status(RenderStatus.LOADING)
        await self._render_pass()

    async def refresh(self) -> None:
        if self._state.status == RenderStatus.UNINITIALIZED:
            await self.initialize()
            return
        self._set_status(RenderStatus.REFRESHING)
        await self._render_pass()

    async def _render_pass(self) -> None:
        self._state.generation += 1
        gen = self._state.generation

        if not self._source.is_connected():
            self._fail(NOT_CONNECTED_MESSAGE)
            return

        try:
            await self._source.download_config()
            if self._is_stale(gen):
                logger.debug("Dropping superseded render pass %d after download", gen)
                return
            channels = await self._source.linearize_config()
            if self._is_stale(gen):
                logger.debug("Dropping superseded render pass %d after linearize", gen)
                return
            lanes = self.layout_nodes(channels)
        except Exception as e:
            if self._is_stale(gen):
                return
            logger.error("Render pass %d failed: %s", gen, e)
            self._fail(LOAD_ERROR_PREFIX + str(e))
            return

        self._commit(gen, lanes)

    def layout_nodes(self, channels: Sequence[Sequence[Any]]) -> List[LaneSpec]:
        return build_lanes(channels)

    def route_wires(self, lanes: Sequence[LaneSpec]) -> Dict[int, List[WireSpec]]:
        out: Dict[int, List[WireSpec]] = {}
        for lane in lanes:
            wires = route_lane(lane.nodes, self._layout)
            out[lane.channel_index] = wires
            self._surface.show_wires(lane.channel_index, wires)
        self._state.wires = out
        return out

    def relayout(self) -> None:
        """Re-route wires against current measurements, e.g. after a resize."""
        if self._state.status != RenderStatus.RENDERED:
            return
        self.route_wires(self._state.lanes)

    def _commit(self, gen: int, lanes: List[LaneSpec]) -> None:
        self._state.lanes = lanes
        self._state.wires = {}
        self._state.error = None

        self._surface.clear()
        self._surface.show_lanes(lanes)
        self._set_status(RenderStatus.RENDERED)
        logger.info("Rendered %d channels", len(lanes))

        self._surface.after_layout(lambda: self._on_layout_settled(gen))

    def _on_layout_settled(self, gen: int) -> None:
        if self._is_stale(gen) or self._state.status != RenderStatus.RENDERED:
            return
        self.route_wires(self._state.lanes)

    def _fail(self, message: str) -> None:
        self._state.lanes = []
        self._state.wires = {}
        self._state.error = message

        self._surface.clear()
        self._surface.show_error(message)
        self._set_status(RenderStatus.ERRORED)
