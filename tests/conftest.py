import asyncio
import copy
import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from dsp_errors import ConnectivityError


SCENARIO = [
    {"type": "input", "device": {"device": "hw:0", "format": "S32LE"}},
    {"type": "filter", "Low Shelf": {"type": "Biquad", "parameters": {"type": "Lowshelf", "freq": 100, "gain": 3}}},
    {"type": "output", "device": {"device": "hw:1", "format": "S32LE"}},
]


class FakeSource:
    """In-memory configuration source with scriptable failures and delays."""

    def __init__(self, channels=None, connected=True):
        self.channels = channels if channels is not None else [list(SCENARIO)]
        self.connected = connected
        self.download_error = None
        self.linearize_error = None
        self.download_delays = []
        self.downloads = 0
        self.linearizes = 0

    def is_connected(self):
        return self.connected

    async def download_config(self):
        self.downloads += 1
        delay = self.download_delays.pop(0) if self.download_delays else 0
        await asyncio.sleep(delay)
        if self.download_error is not None:
            raise self.download_error

    async def linearize_config(self):
        self.linearizes += 1
        await asyncio.sleep(0)
        if self.linearize_error is not None:
            raise self.linearize_error
        return copy.deepcopy(self.channels)


@pytest.fixture
def scenario():
    return copy.deepcopy(SCENARIO)


@pytest.fixture
def fake_source():
    return FakeSource()


@pytest.fixture
def offline_source():
    src = FakeSource(connected=False)
    src.download_error = ConnectivityError("should not be called")
    return src


@pytest.fixture
def make_source():
    return FakeSource
