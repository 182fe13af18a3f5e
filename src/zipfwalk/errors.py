# src/zipfwalk/errors.py


class ZipfError(Exception):
    """Base class for every error raised by zipfwalk."""


class ConfigError(ZipfError):
    """Invalid configuration, raised before any traversal happens."""


class TokenizationError(ZipfError):
    """A line could not be split into terms."""


class EmptyTermError(ZipfError):
    """An empty string reached the frequency table."""

    def __init__(self, message: str = "empty term"):
        super().__init__(message)
