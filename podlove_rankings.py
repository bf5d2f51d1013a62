"""Ranked episode lists computed from a tidy Podlove table.

Every list follows the same recipe: filter, de-duplicate per episode where
needed, sort descending, and keep the first ``n`` rows. A negative ``n``
keeps the last ``|n|`` rows instead, i.e. the least successful episodes.
Equal sort keys are ordered by episode id.
"""

import logging

import pandas as pd

from podlove_config import MIN_AGE_DAYS, START_OFFSET

logger = logging.getLogger(__name__)

EPISODE_COLUMNS = ["id", "title", "days_since_release", "downloads"]


def take_ranked(ranked: pd.DataFrame, n: int) -> pd.DataFrame:
    """Top ``n`` rows of an already ranked table, or the bottom ``|n|`` if negative."""
    if n >= 0:
        picked = ranked.head(n)
    else:
        picked = ranked.tail(-n)
    return picked.reset_index(drop=True)


def _rank(df: pd.DataFrame, key: str) -> pd.DataFrame:
    # Two stable passes: id ascending breaks ties of the descending key
    by_id = df.sort_values("id", kind="mergesort")
    return by_id.sort_values(key, ascending=False, kind="mergesort")


def _episodes(tidy_df: pd.DataFrame) -> pd.DataFrame:
    return tidy_df[EPISODE_COLUMNS].drop_duplicates()


def most_downloaded(tidy_df: pd.DataFrame, n: int) -> pd.DataFrame:
    """
    Most (or with negative n, least) downloaded episodes.

    Args:
        tidy_df: Output of podlove_import.tidy()
        n: Length of the list; negative numbers list the least downloaded

    Returns:
        DataFrame with id, title, days_since_release, downloads
    """
    ranked = _rank(_episodes(tidy_df), "downloads")
    return take_ranked(ranked, n)


def best_starts(tidy_df: pd.DataFrame, start_offset: str = START_OFFSET, n: int = 5) -> pd.DataFrame:
    """
    Episodes with the best launch, judged by downloads per day at start_offset.

    start_offset is any point in time of the export (1d ... 6d, 1w, 2w, 3w,
    4w, 1q, 2q, 3q, 1y, ...). A label absent from the table gives an empty list.
    """
    started = tidy_df[tidy_df["point_in_time"] == start_offset]
    if started.empty:
        logger.info("No observations at point in time %r", start_offset)
    ranked = _rank(started, "download_per_day_at_pit")
    return take_ranked(ranked, n)


def evergreens(tidy_df: pd.DataFrame, n: int, min_age_days: int = MIN_AGE_DAYS) -> pd.DataFrame:
    """
    Episodes with the best overall average downloads per day.

    Episodes not older than min_age_days are left out, since young episodes
    still ride on their launch and have an inflated average.
    """
    episodes = _episodes(tidy_df).copy()
    episodes["downloads_per_day_overall"] = episodes["downloads"] / episodes["days_since_release"]
    aged = episodes[episodes["days_since_release"] > min_age_days]
    ranked = _rank(aged, "downloads_per_day_overall")
    return take_ranked(ranked, n)
