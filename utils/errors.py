from __future__ import annotations


class DoubleBottomError(Exception):
    """Base class for every error raised by the detection agent."""


class DataFetchError(DoubleBottomError):
    """Network or provider failure while retrieving market data."""


class DataFormatError(DoubleBottomError):
    """Provider returned data in an unexpected shape."""


class ComputationError(DoubleBottomError):
    """Arithmetic on detection inputs is undefined (zero prices, inverted spans)."""
