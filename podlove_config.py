"""Column layout and thresholds of a Podlove download export.

The import pipeline never guesses the table layout from file positions;
it gets an AnalyticsConfig instead, so synthetic frames can be fed to it
directly in tests.
"""

import re
from dataclasses import dataclass
from typing import Iterable

IDENTITY_COLUMNS = ("id", "title", "post_date", "days_since_release", "downloads")

# Largest offset first, as Podlove Publisher writes them
DEFAULT_OFFSET_COLUMNS = (
    "3y", "2y", "1y",
    "3q", "2q", "1q",
    "4w", "3w", "2w", "1w",
    "6d", "5d", "4d", "3d", "2d", "1d",
)

POST_DATE_FORMAT = "%Y-%m-%d %H:%M"
MIN_AGE_DAYS = 180
START_OFFSET = "1w"

# Optional single marker character, e.g. "X3y" from R's read.csv
OFFSET_LABEL_PATTERN = re.compile(r"^\D?\d+[dwmqy]$")


@dataclass(frozen=True)
class AnalyticsConfig:
    """Layout of the export table and defaults of the ranking views.

    Attributes:
        identity_columns: Per-episode columns copied onto every tidy row.
        offset_columns: Snapshot column names as they appear in the export.
        date_format: strptime format of the post_date column.
        min_age_days: Age an episode must exceed to count as an evergreen.
        start_offset: Offset label that defines an episode launch.
    """

    identity_columns: tuple[str, ...] = IDENTITY_COLUMNS
    offset_columns: tuple[str, ...] = DEFAULT_OFFSET_COLUMNS
    date_format: str = POST_DATE_FORMAT
    min_age_days: int = MIN_AGE_DAYS
    start_offset: str = START_OFFSET

    @classmethod
    def from_header(cls, columns: Iterable[str], **overrides) -> "AnalyticsConfig":
        """Build a config whose offset columns are the ones found in a header.

        Args:
            columns: Column names of an export, in file order.
            **overrides: Any other AnalyticsConfig field.

        Returns:
            Config tracking every offset-like column, in header order.
        """
        offsets = tuple(str(c) for c in columns if is_offset_label(str(c)))
        return cls(offset_columns=offsets, **overrides)


def is_offset_label(name: str) -> bool:
    """Return True for snapshot column names like '1w', '3y' or 'X4d'."""
    return bool(OFFSET_LABEL_PATTERN.match(name))
