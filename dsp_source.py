# dsp_source.py
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol

import yaml

from dsp_errors import ConfigError, ConnectivityError, MalformedStageError
from dsp_stages import coerce_stage, filter_stage
from dsp_types import ChannelConfig, MixerStage, Stage, UnknownStage


logger = logging.getLogger(__name__)


class ConfigSource(Protocol):
    def is_connected(self) -> bool: ...

    async def download_config(self) -> None: ...

    async def linearize_config(self) -> List[ChannelConfig]: ...


@dataclass(frozen=True)
class _Snapshot:
    text: str
    mtime_ns: int


def _mapping(obj: Any, what: str) -> Mapping[str, Any]:
    if obj is None:
        return {}
    if not isinstance(obj, Mapping):
        raise ConfigError(f"{what} is not a mapping")
    return obj


def _int(v: Any, what: str) -> int:
    try:
        return int(v)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{what} is not an integer: {v!r}") from e


def _device_stage(kind: str, dev: Any) -> Stage:
    return coerce_stage({"type": kind, "device": dev})


def _step_channels(step: Mapping[str, Any], n: int) -> List[int]:
    if step.get("channels") is not None:
        chans = step["channels"]
        if not isinstance(chans, list):
            raise ConfigError("pipeline filter step 'channels' is not a list")
        out = [_int(c, "pipeline filter channel") for c in chans]
    elif step.get("channel") is not None:
        out = [_int(step["channel"], "pipeline filter channel")]
    else:
        out = list(range(n))

    for ch in out:
        if ch < 0 or ch >= n:
            raise ConfigError(f"pipeline filter step targets channel {ch}, but only {n} channels exist")
    return out


def _apply_filter_step(chains: List[ChannelConfig], step: Mapping[str, Any], filters: Mapping[str, Any]) -> None:
    targets = _step_channels(step, len(chains))
    names = step.get("names") or []
    if not isinstance(names, list):
        raise ConfigError("pipeline filter step 'names' is not a list")

    for name in names:
        if name not in filters:
            raise ConfigError(f"pipeline uses undefined filter {name!r}")
        try:
            stage: Stage = filter_stage(str(name), filters[name])
        except MalformedStageError as e:
            logger.warning("Filter %r rendered as unknown: %s", name, e)
            stage = UnknownStage(type="filter", reason=str(e))
        for ch in targets:
            chains[ch].append(stage)


def _mixer_source_channels(mapping: Mapping[str, Any]) -> List[int]:
    out: List[int] = []
    for src in mapping.get("sources") or []:
        src = _mapping(src, "mixer source")
        if src.get("mute"):
            continue
        out.append(_int(src.get("channel"), "mixer source channel"))
    return out


def _apply_mixer_step(chains: List[ChannelConfig], step: Mapping[str, Any], mixers: Mapping[str, Any]) -> List[ChannelConfig]:
    name = str(step.get("name") or "")
    if name not in mixers:
        raise ConfigError(f"pipeline uses undefined mixer {name!r}")
    mdef = _mapping(mixers[name], f"mixer {name!r}")
    chans = _mapping(mdef.get("channels"), f"mixer {name!r} channels")
    n_in = _int(chans.get("in"), f"mixer {name!r} channels.in")
    n_out = _int(chans.get("out"), f"mixer {name!r} channels.out")
    if n_in != len(chains):
        raise ConfigError(f"mixer {name!r} expects {n_in} channels, pipeline has {len(chains)}")

    sources_by_dest: Dict[int, List[int]] = {d: [] for d in range(n_out)}
    for m in mdef.get("mapping") or []:
        m = _mapping(m, f"mixer {name!r} mapping")
        dest = _int(m.get("dest"), f"mixer {name!r} dest")
        if dest < 0 or dest >= n_out:
            raise ConfigError(f"mixer {name!r} maps to channel {dest}, but has only {n_out} outputs")
        if m.get("mute"):
            continue
        sources_by_dest[dest].extend(_mixer_source_channels(m))

    out: List[ChannelConfig] = []
    for dest in range(n_out):
        srcs = sources_by_dest[dest]
        for s in srcs:
            if s < 0 or s >= n_in:
                raise ConfigError(f"mixer {name!r} reads channel {s}, but has only {n_in} inputs")
        # a mixed channel continues the chain of its first source
        base = list(chains[srcs[0]]) if srcs else []
        out.append(base + [MixerStage(sources=tuple(srcs), name=name)])
    return out


def linearize(cfg: Any) -> List[ChannelConfig]:
    """
    I flatten a CamillaDSP-style config into one ordered stage list per channel:
    input, then the pipeline's filters and mixers in order, then output.
    """
    cfg = _mapping(cfg, "configuration")
    devices = _mapping(cfg.get("devices"), "devices")
    capture = devices.get("capture")
    playback = devices.get("playback")
    if not isinstance(capture, Mapping) or not isinstance(playback, Mapping):
        raise ConfigError("devices.capture and devices.playback are required")

    n = _int(capture.get("channels", 0), "devices.capture.channels")
    input_stage = _device_stage("input", capture)
    chains: List[ChannelConfig] = [[input_stage] for _ in range(n)]

    filters = _mapping(cfg.get("filters"), "filters")
    mixers = _mapping(cfg.get("mixers"), "mixers")
    pipeline = cfg.get("pipeline") or []
    if not isinstance(pipeline, list):
        raise ConfigError("pipeline is not a list")

    for i, step in enumerate(pipeline):
        step = _mapping(step, f"pipeline step {i}")
        if step.get("bypassed"):
            continue
        kind = str(step.get("type") or "").strip().lower()
        if kind == "filter":
            _apply_filter_step(chains, step, filters)
        elif kind == "mixer":
            chains = _apply_mixer_step(chains, step, mixers)
        else:
            logger.debug("Pipeline step %d has unsupported type %r", i, step.get("type"))
            for chain in chains:
                chain.append(UnknownStage(type=kind, reason="unsupported pipeline step"))

    output_stage = _device_stage("output", playback)
    for chain in chains:
        chain.append(output_stage)
    return chains


class YamlConfigSource:
    """
    Configuration collaborator backed by a YAML file on disk.
    "Connected" means the file is there; download takes a snapshot of it.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()
        self._snapshot: Optional[_Snapshot] = None

    @property
    def path(self) -> Path:
        return self._path

    def label(self) -> str:
        return str(self._path)

    def is_connected(self) -> bool:
        return self._path.is_file()

    def _read(self) -> _Snapshot:
        st = self._path.stat()
        text = self._path.read_text(encoding="utf-8")
        return _Snapshot(text=text, mtime_ns=st.st_mtime_ns)

    async def download_config(self) -> None:
        try:
            snap = await asyncio.to_thread(self._read)
        except UnicodeDecodeError as e:
            raise ConfigError(f"{self._path.name} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise ConnectivityError(f"Cannot read {self._path}: {e}") from e
        self._snapshot = snap
        logger.debug("Downloaded %s (%d bytes)", self._path, len(snap.text))

    async def linearize_config(self) -> List[ChannelConfig]:
        snap = self._snapshot
        if snap is None:
            raise ConfigError("No configuration has been downloaded.")
        try:
            data = yaml.safe_load(snap.text)
        except yaml.YAMLError as e:
            raise ConfigError(f"{self._path.name} is not valid YAML: {e}") from e
        return linearize(data)

    def changed_since_download(self) -> bool:
        if self._snapshot is None:
            return True
        try:
            return self._path.stat().st_mtime_ns != self._snapshot.mtime_ns
        except OSError:
            return True

