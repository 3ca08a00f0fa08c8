"""
Exceptions raised by the texture map pipeline.

Both concrete errors derive from ValueError so callers that already catch
ValueError for bad input keep working.
"""


class TexturePipelineError(Exception):
    """Base class for all pipeline errors."""


class DimensionMismatchError(TexturePipelineError, ValueError):
    """A buffer's size or layout disagrees with what the operation expects."""


class InvalidParameterError(TexturePipelineError, ValueError):
    """A parameter is outside the range an operation can process safely."""
