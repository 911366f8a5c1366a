"""Exceptions raised at the file and configuration boundary."""


class SorterError(Exception):
    """Base class for errors surfaced to the user by the sorter host."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class DocumentReadError(SorterError):
    """The uploaded file could not be accepted or decoded."""


class ConfigError(SorterError):
    """The configuration file is missing or malformed."""
