"""Import, clean and tidy Podlove episode download exports.

A Podlove export is wide: one row per episode and one column per
point in time (3y ... 1d) holding the cumulative downloads the episode had
reached at that age. tidy() turns it into one row per episode and point in
time, with the calendar days of that point joined from a reference table
and the average downloads per day up to that point.

The import is all-or-nothing: any broken date or unmapped offset aborts it.
"""

import logging
from pathlib import Path

import pandas as pd

from podlove_config import IDENTITY_COLUMNS, AnalyticsConfig
from podlove_errors import DateParseError, DivisionByMissing, SchemaMismatch, SourceNotFound

logger = logging.getLogger(__name__)

REFERENCE_COLUMNS = ("point_in_time", "pit_days")

DERIVED_COLUMNS = ["point_in_time", "downloads_in_time", "pit_days", "download_per_day_at_pit"]

TIDY_COLUMNS = list(IDENTITY_COLUMNS) + DERIVED_COLUMNS


def _read_csv(path: Path, what: str) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise SourceNotFound(f"{what} not found: {path}")
    return pd.read_csv(path, encoding="utf-8")


def _require_columns(df: pd.DataFrame, columns, what: str):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaMismatch(f"{what} is missing columns: {', '.join(missing)}")


def load_export(path: Path, config: AnalyticsConfig | None = None) -> pd.DataFrame:
    """
    Load a Podlove episode download export.

    Args:
        path: CSV file exported from Podlove Publisher (UTF-8)
        config: Expected layout; derived from the header if omitted

    Returns:
        The raw export, one row per episode

    Raises:
        SourceNotFound: if the file does not exist
        SchemaMismatch: if identity or offset columns are absent
    """
    raw = _read_csv(path, "Analytics export")
    if config is None:
        config = AnalyticsConfig.from_header(raw.columns)
    _require_columns(raw, config.identity_columns, "Analytics export")
    _require_columns(raw, config.offset_columns, "Analytics export")
    if not config.offset_columns:
        raise SchemaMismatch("Analytics export has no point-in-time columns")
    logger.info("Loaded export %s: %d episodes, %d offsets", path, len(raw), len(config.offset_columns))
    return raw


def load_reference(path: Path) -> pd.DataFrame:
    """Load the point-in-time reference table (point_in_time -> pit_days)."""
    reference = _read_csv(path, "Point-in-time reference")
    _require_columns(reference, REFERENCE_COLUMNS, "Point-in-time reference")
    return reference[list(REFERENCE_COLUMNS)].copy()


def normalize_offset_label(label: str) -> str:
    """Strip a single leading non-numeric marker: 'X1w' -> '1w', '1w' -> '1w'.

    Only one marker is removed, so the result is stable under repeated calls
    for labels matching OFFSET_LABEL_PATTERN. AnalyticsConfig.from_header
    never picks up anything else, e.g. 'XX3y' is not an offset column.
    """
    label = str(label)
    if label and not label[0].isdigit():
        return label[1:]
    return label


def clean(raw: pd.DataFrame, config: AnalyticsConfig | None = None) -> pd.DataFrame:
    """
    Parse post dates and keep only the columns the analysis needs.

    Keeps the identity columns followed by every offset column in the order
    the export lists them. The row count is unchanged.

    Raises:
        DateParseError: if any post_date is missing or malformed
        SchemaMismatch: if columns are absent or snapshots are not numeric
    """
    config = config or AnalyticsConfig.from_header(raw.columns)
    _require_columns(raw, config.identity_columns, "Analytics export")
    _require_columns(raw, config.offset_columns, "Analytics export")

    tracked = set(config.offset_columns)
    offsets = [c for c in raw.columns if c in tracked]
    df = raw[list(config.identity_columns) + offsets].copy()

    parsed = pd.to_datetime(df["post_date"], format=config.date_format, errors="coerce")
    bad = parsed.isna()
    if bad.any():
        first = df.loc[bad, "post_date"].iloc[0]
        raise DateParseError(
            f"{int(bad.sum())} post_date value(s) do not match '{config.date_format}', "
            f"first offender: {first!r}"
        )
    df["post_date"] = parsed

    for column in offsets:
        try:
            df[column] = pd.to_numeric(df[column])
        except (ValueError, TypeError) as error:
            raise SchemaMismatch(f"Offset column {column!r} holds non-numeric downloads") from error

    logger.debug("Cleaned export: %d rows, columns %s", len(df), list(df.columns))
    return df


def _day_counts(reference: pd.DataFrame) -> dict[str, int]:
    """Map normalized offset labels to their calendar day count."""
    _require_columns(reference, REFERENCE_COLUMNS, "Point-in-time reference")
    days = pd.to_numeric(reference["pit_days"], errors="coerce")
    if days.isna().any() or (days <= 0).any():
        raise SchemaMismatch("Point-in-time reference needs a positive pit_days for every label")
    if (days % 1 != 0).any():
        raise SchemaMismatch("Point-in-time reference needs whole-day pit_days")
    days = days.astype("int64")

    day_counts: dict[str, int] = {}
    for label, value in zip(reference["point_in_time"], days):
        key = normalize_offset_label(label)
        if key in day_counts and day_counts[key] != value:
            raise SchemaMismatch(f"Point-in-time reference maps {key!r} twice")
        day_counts[key] = int(value)
    return day_counts


def tidy(clean_df: pd.DataFrame, reference: pd.DataFrame, config: AnalyticsConfig | None = None) -> pd.DataFrame:
    """
    Reshape a cleaned export into one row per episode and point in time.

    Args:
        clean_df: Output of clean()
        reference: point_in_time / pit_days table
        config: Layout of clean_df; derived from its header if omitted

    Returns:
        DataFrame with the identity columns plus DERIVED_COLUMNS, ordered
        by post_date, without rows that have no recorded downloads at their
        point in time

    Raises:
        DivisionByMissing: if an offset column has no entry in the reference
        SchemaMismatch: if configured columns are absent or pit_days are not
            positive whole days
    """
    config = config or AnalyticsConfig.from_header(clean_df.columns)
    _require_columns(clean_df, config.identity_columns, "Cleaned export")
    _require_columns(clean_df, config.offset_columns, "Cleaned export")
    identity = list(config.identity_columns)
    tracked = set(config.offset_columns)
    offsets = [c for c in clean_df.columns if c in tracked]

    # Melt is column-major; row/column positions restore per-episode order
    wide = clean_df[identity + offsets].reset_index(drop=True)
    wide["_row"] = range(len(wide))
    long_df = wide.melt(
        id_vars=identity + ["_row"],
        value_vars=offsets,
        var_name="point_in_time",
        value_name="downloads_in_time",
    )
    long_df["_col"] = long_df["point_in_time"].map({c: i for i, c in enumerate(offsets)})
    logger.debug("Reshaped %d episodes x %d offsets into %d rows", len(wide), len(offsets), len(long_df))

    long_df = long_df.sort_values(["post_date", "_row", "_col"], kind="mergesort")

    day_counts = _day_counts(reference)
    unmapped = [c for c in offsets if normalize_offset_label(c) not in day_counts]
    if unmapped:
        raise DivisionByMissing(f"No pit_days in reference for offset(s): {', '.join(unmapped)}")
    labels = long_df["point_in_time"].map(normalize_offset_label)
    long_df["pit_days"] = labels.map(day_counts).astype("int64")
    long_df["download_per_day_at_pit"] = long_df["downloads_in_time"] / long_df["pit_days"]

    long_df = long_df[long_df["downloads_in_time"].notna()].copy()
    long_df["point_in_time"] = long_df["point_in_time"].map(normalize_offset_label)

    result = long_df[identity + DERIVED_COLUMNS].reset_index(drop=True)
    logger.info("Tidy table: %d of %d possible observations", len(result), len(wide) * len(offsets))
    return result


def import_clean(
    export_path: Path,
    reference_path: Path,
    config: AnalyticsConfig | None = None,
) -> pd.DataFrame:
    """Import, clean and tidy a Podlove export in one go."""
    raw = load_export(export_path, config)
    config = config or AnalyticsConfig.from_header(raw.columns)
    reference = load_reference(reference_path)
    return tidy(clean(raw, config), reference, config)
