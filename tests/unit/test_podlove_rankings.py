"""Unit tests for ranked episode lists."""

import pandas as pd
import pytest

from podlove_rankings import best_starts, evergreens, most_downloaded, take_ranked


def _tidy(rows: list[dict]) -> pd.DataFrame:
    base = {"post_date": pd.Timestamp("2025-01-01 10:00"), "pit_days": 7, "point_in_time": "1w"}
    frame = pd.DataFrame([{**base, **row} for row in rows])
    frame["download_per_day_at_pit"] = frame["downloads_in_time"] / frame["pit_days"]
    return frame


def test_most_downloaded_lists_each_episode_once(sample_tidy: pd.DataFrame) -> None:
    """Episodes should be ranked by total downloads without duplicates."""
    ranked = most_downloaded(sample_tidy, 10)

    assert ranked["id"].tolist() == [101, 102, 103, 104]
    assert list(ranked.columns) == ["id", "title", "days_since_release", "downloads"]


def test_most_downloaded_negative_n_lists_least_downloaded(sample_tidy: pd.DataFrame) -> None:
    """Negative n should return the bottom of the ranking."""
    top = most_downloaded(sample_tidy, 2)
    bottom = most_downloaded(sample_tidy, -2)

    assert top["id"].tolist() == [101, 102]
    assert bottom["id"].tolist() == [103, 104]
    assert set(top["id"]).isdisjoint(bottom["id"])


def test_most_downloaded_breaks_ties_by_id() -> None:
    """Equal download totals should be ordered by episode id."""
    tidy_df = _tidy(
        [
            {"id": 3, "title": "C", "days_since_release": 300, "downloads": 100, "downloads_in_time": 50},
            {"id": 1, "title": "A", "days_since_release": 300, "downloads": 100, "downloads_in_time": 40},
            {"id": 2, "title": "B", "days_since_release": 300, "downloads": 100, "downloads_in_time": 30},
        ]
    )

    assert most_downloaded(tidy_df, 3)["id"].tolist() == [1, 2, 3]


def test_best_starts_ranks_by_downloads_per_day() -> None:
    """The launch with more downloads per day at the offset should win."""
    tidy_df = _tidy(
        [
            {"id": "A", "title": "A", "days_since_release": 30, "downloads": 1200, "downloads_in_time": 1000},
            {"id": "B", "title": "B", "days_since_release": 30, "downloads": 1500, "downloads_in_time": 1400},
        ]
    )

    best = best_starts(tidy_df, "1w", 1)

    assert best["id"].tolist() == ["B"]
    assert best["download_per_day_at_pit"].iloc[0] == pytest.approx(200.0)


def test_best_starts_uses_requested_offset(sample_tidy: pd.DataFrame) -> None:
    """Only rows at the requested point in time should be ranked."""
    best = best_starts(sample_tidy, "4d", 3)

    assert best["id"].tolist() == [101, 102, 103]
    assert set(best["point_in_time"]) == {"4d"}
    assert best["download_per_day_at_pit"].iloc[0] == pytest.approx(245.0)


def test_best_starts_defaults_to_one_week(sample_tidy: pd.DataFrame) -> None:
    """Without an offset the launch is the first week."""
    best = best_starts(sample_tidy)

    assert set(best["point_in_time"]) == {"1w"}
    assert best["id"].iloc[0] == 101


def test_best_starts_unknown_offset_returns_empty(sample_tidy: pd.DataFrame) -> None:
    """An offset absent from the table is not an error."""
    best = best_starts(sample_tidy, "9y", 3)

    assert best.empty


def test_evergreens_skips_young_episodes(sample_tidy: pd.DataFrame) -> None:
    """Episodes not older than min_age_days never appear."""
    result = evergreens(sample_tidy, 10)

    assert result["id"].tolist() == [103, 102, 101]
    assert (result["days_since_release"] > 180).all()
    assert result["downloads_per_day_overall"].iloc[0] == pytest.approx(2600 / 254)


def test_evergreens_excludes_high_rate_young_episode() -> None:
    """A 100 day old episode is left out however well it does."""
    tidy_df = _tidy(
        [
            {"id": 1, "title": "Young", "days_since_release": 100, "downloads": 90000, "downloads_in_time": 5000},
            {"id": 2, "title": "Old", "days_since_release": 400, "downloads": 800, "downloads_in_time": 100},
        ]
    )

    result = evergreens(tidy_df, 5, min_age_days=180)

    assert result["id"].tolist() == [2]


def test_take_ranked_returns_everything_for_large_n() -> None:
    """Asking for more rows than available returns all rows."""
    ranked = pd.DataFrame({"id": [1, 2, 3]})

    assert take_ranked(ranked, 10)["id"].tolist() == [1, 2, 3]
    assert take_ranked(ranked, -10)["id"].tolist() == [1, 2, 3]
    assert take_ranked(ranked, 0).empty
