import pytest

from dsp_types import FilterSpec, FilterStage, InputStage, MixerStage, OutputStage, UnknownStage
from stage_format import format_number, format_stage


def _filter(name, ftype, **params):
    return {"type": "filter", name: {"type": ftype, "parameters": params}}


def test_input_and_output_show_device_and_format():
    text = format_stage({"type": "input", "device": {"device": "hw:0", "format": "S32LE"}})
    assert text.header_text == "INPUT"
    assert text.detail_lines == ("hw:0", "S32LE")

    text = format_stage(OutputStage(device="hw:1", format="S16LE"))
    assert text.header_text == "OUTPUT"
    assert text.detail_lines == ("hw:1", "S16LE")


@pytest.mark.parametrize("count, expected", [(0, "0 sources"), (1, "1 source"), (3, "3 sources")])
def test_mixer_pluralizes_source_count(count, expected):
    text = format_stage(MixerStage(sources=tuple(range(count))))
    assert text.header_text == "MIXER"
    assert text.detail_lines == (expected,)


def test_biquad_shows_zero_gain():
    text = format_stage(_filter("Dip", "Biquad", type="Peaking", freq=1000, gain=0))
    assert text.header_text == "FILTER"
    assert text.detail_lines == ("Dip", "Peaking", "1000 Hz", "0 dB")


def test_biquad_without_freq_or_gain():
    text = format_stage(_filter("HP", "Biquad", type="Highpass"))
    assert text.detail_lines == ("HP", "Highpass")


def test_biquad_float_values_print_like_numbers():
    text = format_stage(_filter("Shelf", "Biquad", type="Lowshelf", freq=80.0, gain=-2.5))
    assert text.detail_lines == ("Shelf", "Lowshelf", "80 Hz", "-2.5 dB")


def test_gain_filter():
    text = format_stage(FilterStage(name="Trim", spec=FilterSpec(type="Gain", parameters={"gain": -3})))
    assert text.detail_lines == ("Trim", "Gain: -3 dB")


def test_conv_filter_ignores_parameters():
    text = format_stage(_filter("Room", "Conv", filename="room.wav", type="Wav"))
    assert text.detail_lines == ("Room", "Convolution")


def test_other_filter_type_shows_raw_type():
    text = format_stage(_filter("Limiter", "Limiter", clip_limit=-1))
    assert text.detail_lines == ("Limiter", "Limiter")


def test_filter_without_named_key_is_unknown():
    text = format_stage({"type": "filter"})
    assert text.header_text == "FILTER"
    assert text.detail_lines == ("Unknown",)


def test_unknown_stage_type_is_unknown():
    text = format_stage({"type": "processor", "name": "compressor"})
    assert text.header_text == "PROCESSOR"
    assert text.detail_lines == ("Unknown",)

    text = format_stage(UnknownStage(type=""))
    assert text.header_text == "UNKNOWN"


def test_format_is_pure():
    stage = InputStage(device="hw:0", format="S32LE")
    assert format_stage(stage) == format_stage(stage)


def test_format_number():
    assert format_number(1000.0) == "1000"
    assert format_number(0.5) == "0.5"
    assert format_number(3) == "3"
    assert format_number(None) == "?"
