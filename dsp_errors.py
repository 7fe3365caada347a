# dsp_errors.py
from __future__ import annotations


class RoomEqError(RuntimeError):
    pass


class ConnectivityError(RoomEqError):
    """The configuration source cannot be reached."""


class ConfigFetchError(RoomEqError):
    """Downloading or linearizing the configuration failed."""


class ConfigError(ConfigFetchError):
    """The downloaded configuration is malformed."""


class MalformedStageError(RoomEqError):
    """
    A single stage descriptor could not be classified.
    Never fatal: callers degrade the stage to an "Unknown" node.
    """
