"""Exception hierarchy shared by every part of the generator."""


class EnigmindError(Exception):
    """Base class for every error raised by :mod:`enigmind`."""


class ColumnIndexOutOfBounds(EnigmindError, IndexError):
    """A rule references a column that the evaluated code does not have."""

    def __init__(self, index: int, length: int):
        super().__init__(f"column index {index} out of bounds for a code of length {length}")
        self.index = index
        self.length = length


class BitMaskError(EnigmindError):
    """Raised by :class:`enigmind.bitmask.BitMask` on invalid sizes or indices."""


class ConfigurationError(EnigmindError, ValueError):
    """The requested game configuration cannot be generated."""


class GenerationFailed(EnigmindError, RuntimeError):
    """The randomized reduction could not isolate a single code."""


class CodeFormatError(EnigmindError, ValueError):
    """A code string is malformed or does not fit the game configuration."""
