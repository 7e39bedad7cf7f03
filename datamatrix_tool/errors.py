"""Failure kinds raised by the pipelines and reported by ``cli.main``."""


class DatamatrixToolError(Exception):
    """Base class; the message is shown to the user verbatim."""


class ConfigurationError(DatamatrixToolError):
    """Missing, contradictory or unsupported command-line options."""


class NotFoundError(DatamatrixToolError):
    pass


class FileIOError(DatamatrixToolError):
    pass


class InvalidImageError(DatamatrixToolError):
    """The input file exists but is not an image Pillow can read."""


class EncodeError(DatamatrixToolError):
    pass


class DecodeError(DatamatrixToolError):
    pass
