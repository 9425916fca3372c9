from __future__ import annotations


class HeadnumError(Exception):
    """Base class for errors raised by headnum."""


class InvalidSettingsError(HeadnumError, ValueError):
    """A setting given explicitly (config file or CLI flag) is not valid."""


class FrontMatterKeyNotFoundError(HeadnumError):
    """The front matter has the settings key, but no line in the block starts with it."""


class OverlappingEditsError(HeadnumError):
    """Two changes in the same transaction touch overlapping ranges."""
