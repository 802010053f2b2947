"""
Exception types raised by the array_pattern package.

Every error derives from ArrayPatternError and from the builtin exception a
caller would naturally catch for the same condition.
"""


class ArrayPatternError(Exception):
    """Base class for all array_pattern errors."""


class InvalidGeometry(ArrayPatternError, ValueError):
    """An element was constructed with physically impossible parameters."""


class IndexOutOfRange(ArrayPatternError, IndexError):
    """A channel index does not refer to an element of the array."""

    def __init__(self, index, count):
        self.index = index
        self.count = count
        super().__init__(f"Channel index {index} out of range for array of {count} element(s)")


class PatternWriteError(ArrayPatternError, OSError):
    """A sampled pattern could not be written to its destination."""
