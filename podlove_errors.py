"""Podlove analytics exception hierarchy.

Every failure of the import pipeline is fatal for the whole import, so the
errors only need to say which data contract was broken.
"""


class PodloveError(Exception):
    """Base exception for all podlove analytics failures."""


class SourceNotFound(PodloveError):
    """Raised when an export or reference file does not exist."""


class SchemaMismatch(PodloveError):
    """Raised when expected columns are absent or hold unusable values."""


class DateParseError(PodloveError):
    """Raised when a post date does not match the configured format."""


class DivisionByMissing(PodloveError):
    """Raised when an offset label has no day count in the reference table."""
