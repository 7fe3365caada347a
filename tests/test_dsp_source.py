import asyncio
import os
from pathlib import Path

import pytest
import yaml

from dsp_errors import ConfigError, ConnectivityError
from dsp_source import YamlConfigSource, linearize
from dsp_types import FilterSpec, FilterStage, InputStage, MixerStage, OutputStage, UnknownStage


SAMPLE = Path(__file__).resolve().parent.parent / "sample_configs" / "room.yml"


def _base(**extra):
    cfg = {
        "devices": {
            "capture": {"type": "Alsa", "channels": 2, "device": "hw:0", "format": "S32LE"},
            "playback": {"type": "Alsa", "channels": 2, "device": "hw:1", "format": "S32LE"},
        },
        "filters": {
            "Low Shelf": {"type": "Biquad", "parameters": {"type": "Lowshelf", "freq": 100, "gain": 3}},
            "Trim": {"type": "Gain", "parameters": {"gain": -3}},
        },
    }
    cfg.update(extra)
    return cfg


def _types(chain):
    return [s.type for s in chain]


def test_no_pipeline_is_input_then_output():
    chains = linearize(_base())
    assert len(chains) == 2
    for chain in chains:
        assert chain == [InputStage("hw:0", "S32LE"), OutputStage("hw:1", "S32LE")]


def test_filter_steps_target_channels():
    chains = linearize(_base(pipeline=[
        {"type": "Filter", "channels": [0], "names": ["Low Shelf"]},
        {"type": "Filter", "channel": 1, "names": ["Trim"]},
        {"type": "Filter", "names": ["Trim"]},
    ]))
    assert [s.name for s in chains[0] if isinstance(s, FilterStage)] == ["Low Shelf", "Trim"]
    assert [s.name for s in chains[1] if isinstance(s, FilterStage)] == ["Trim", "Trim"]


def test_bypassed_steps_are_skipped():
    chains = linearize(_base(pipeline=[{"type": "Filter", "channels": [0], "names": ["Trim"], "bypassed": True}]))
    assert _types(chains[0]) == ["input", "output"]


def test_mixer_remaps_channels():
    mixers = {
        "to_mono_plus_sub": {
            "channels": {"in": 2, "out": 3},
            "mapping": [
                {"dest": 0, "sources": [{"channel": 0}, {"channel": 1}]},
                {"dest": 1, "sources": [{"channel": 1}, {"channel": 0, "mute": True}]},
            ],
        }
    }
    chains = linearize(_base(mixers=mixers, pipeline=[
        {"type": "Filter", "channels": [1], "names": ["Low Shelf"]},
        {"type": "Mixer", "name": "to_mono_plus_sub"},
    ]))
    assert len(chains) == 3
    assert _types(chains[0]) == ["input", "mixer", "output"]
    assert _types(chains[1]) == ["input", "filter", "mixer", "output"]
    # unmapped destination carries only the mixer
    assert _types(chains[2]) == ["mixer", "output"]

    assert chains[0][1] == MixerStage(sources=(0, 1), name="to_mono_plus_sub")
    assert chains[1][2].sources == (1,)
    assert chains[2][0].sources == ()


def test_unsupported_step_becomes_unknown_stage():
    chains = linearize(_base(pipeline=[{"type": "Processor", "name": "comp"}]))
    assert isinstance(chains[0][1], UnknownStage)
    assert chains[0][1].type == "processor"


def test_malformed_filter_definition_degrades():
    cfg = _base(pipeline=[{"type": "Filter", "channels": [0], "names": ["Odd"]}])
    cfg["filters"]["Odd"] = "not a mapping"
    chains = linearize(cfg)
    assert isinstance(chains[0][1], UnknownStage)


def test_filter_named_type_keeps_its_name():
    cfg = _base(pipeline=[{"type": "Filter", "channels": [0], "names": ["type"]}])
    cfg["filters"]["type"] = {"type": "Gain", "parameters": {"gain": -3}}
    chains = linearize(cfg)
    assert chains[0][1] == FilterStage(name="type", spec=FilterSpec(type="Gain", parameters={"gain": -3}))
    assert _types(chains[1]) == ["input", "output"]


@pytest.mark.parametrize(
    "cfg",
    [
        None,
        {"devices": {}},
        _base(pipeline=[{"type": "Filter", "channels": [0], "names": ["Missing"]}]),
        _base(pipeline=[{"type": "Filter", "channels": [5], "names": ["Trim"]}]),
        _base(pipeline=[{"type": "Mixer", "name": "nope"}]),
        _base(pipeline="not a list"),
        _base(mixers={"m": {"channels": {"in": 4, "out": 2}}}, pipeline=[{"type": "Mixer", "name": "m"}]),
    ],
)
def test_bad_configs_raise_config_error(cfg):
    with pytest.raises(ConfigError):
        linearize(cfg)


def test_yaml_source_round_trip(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text(yaml.safe_dump(_base(pipeline=[{"type": "Filter", "channels": [0], "names": ["Low Shelf"]}])))
    src = YamlConfigSource(path)

    assert src.is_connected()
    assert src.changed_since_download()
    asyncio.run(src.download_config())
    assert not src.changed_since_download()

    chains = asyncio.run(src.linearize_config())
    assert _types(chains[0]) == ["input", "filter", "output"]


def test_yaml_source_missing_file(tmp_path):
    src = YamlConfigSource(tmp_path / "gone.yml")
    assert not src.is_connected()
    with pytest.raises(ConnectivityError):
        asyncio.run(src.download_config())


def test_linearize_before_download(tmp_path):
    src = YamlConfigSource(tmp_path / "cfg.yml")
    with pytest.raises(ConfigError, match="No configuration"):
        asyncio.run(src.linearize_config())


def test_undecodable_file_is_a_config_error(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_bytes(b"\xff\xfe devices: {}\n")
    src = YamlConfigSource(path)
    assert src.is_connected()
    with pytest.raises(ConfigError, match="not valid UTF-8"):
        asyncio.run(src.download_config())


def test_invalid_yaml(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text("devices: [unclosed\n")
    src = YamlConfigSource(path)
    asyncio.run(src.download_config())
    with pytest.raises(ConfigError, match="not valid YAML"):
        asyncio.run(src.linearize_config())


def test_changed_since_download_tracks_mtime(tmp_path):
    path = tmp_path / "cfg.yml"
    path.write_text(yaml.safe_dump(_base()))
    src = YamlConfigSource(path)
    asyncio.run(src.download_config())

    st = path.stat()
    os.utime(path, ns=(st.st_atime_ns, st.st_mtime_ns + 1_000_000_000))
    assert src.changed_since_download()


def test_sample_config_linearizes():
    src = YamlConfigSource(SAMPLE)
    asyncio.run(src.download_config())
    chains = asyncio.run(src.linearize_config())
    assert _types(chains[0]) == ["input", "filter", "filter", "mixer", "filter", "output"]
    assert _types(chains[1]) == ["input", "filter", "mixer", "filter", "output"]
