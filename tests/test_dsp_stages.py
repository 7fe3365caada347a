import pytest

from dsp_errors import MalformedStageError
from dsp_stages import coerce_stage, filter_name_of, parse_stage
from dsp_types import FilterStage, InputStage, MixerStage, OutputStage, UnknownStage


def test_parse_input_and_output():
    s = parse_stage({"type": "input", "device": {"device": "hw:0", "format": "S32LE"}})
    assert s == InputStage(device="hw:0", format="S32LE")

    s = parse_stage({"type": "output", "device": {"type": "File", "filename": "/tmp/out.raw", "format": "FLOAT32LE"}})
    assert s == OutputStage(device="/tmp/out.raw", format="FLOAT32LE")


def test_parse_mixer_sources():
    s = parse_stage({"type": "mixer", "sources": [{"channel": 0, "gain": -6}, {"channel": 1}]})
    assert isinstance(s, MixerStage)
    assert s.sources == (0, 1)

    assert parse_stage({"type": "mixer"}).sources == ()


def test_parse_filter_builds_tagged_stage():
    s = parse_stage({"type": "filter", "Bass": {"type": "Biquad", "parameters": {"type": "Lowshelf", "freq": 80}}})
    assert isinstance(s, FilterStage)
    assert s.name == "Bass"
    assert s.spec.type == "Biquad"
    assert s.spec.parameters["freq"] == 80


def test_filter_name_is_the_non_type_key():
    assert filter_name_of({"type": "filter", "Notch": {}}) == "Notch"
    with pytest.raises(MalformedStageError):
        filter_name_of({"type": "filter"})


@pytest.mark.parametrize(
    "raw",
    [
        {"type": "filter"},
        {"type": "filter", "Broken": "not a mapping"},
        {"type": "input"},
        {"type": "processor"},
        "not even a mapping",
    ],
)
def test_malformed_stages_raise(raw):
    with pytest.raises(MalformedStageError):
        parse_stage(raw)


def test_coerce_degrades_instead_of_raising():
    s = coerce_stage({"type": "filter"})
    assert isinstance(s, UnknownStage)
    assert s.type == "filter"
    assert "no named filter key" in s.reason

    assert coerce_stage(42).type == ""


def test_coerce_passes_tagged_stages_through():
    s = InputStage(device="hw:0", format="S16LE")
    assert coerce_stage(s) is s
