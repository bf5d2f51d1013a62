"""Podlove Episode Downloads Analysis

This script imports a Podlove Publisher download export, tidies it into one
row per episode and point in time, prints ranked episode lists and draws
download curves.

Usage:
    python podlove_analyze.py                                   # podlove-episode-downloads.csv next to this script
    python podlove_analyze.py --data sample_podlove_data.csv    # Use specific export file
    python podlove_analyze.py --start 4d --top 3                # Best launches after 4 days
"""

import argparse
import logging
import sys
from pathlib import Path

import matplotlib.pyplot as plt
import pandas as pd
import seaborn as sns

from podlove_charts import ChartSpec, average_downloads_curve, download_curves_per_episode
from podlove_config import AnalyticsConfig
from podlove_errors import PodloveError
from podlove_import import import_clean
from podlove_rankings import best_starts, evergreens, most_downloaded

# Configuration
BASE_DIR = Path(__file__).parent
OUTPUT_DIR = BASE_DIR / "analysis_output"
EXPORT_FILE = BASE_DIR / "podlove-episode-downloads.csv"
REFERENCE_FILE = BASE_DIR / "ref_pit.csv"


def render_chart(spec: ChartSpec, path: Path):
    """Draw a chart specification as a line plot, save it as PNG and return the figure."""
    sns.set_theme(style="darkgrid")

    fig, ax = plt.subplots(figsize=(14, 8))
    colors = sns.color_palette('viridis', n_colors=max(len(spec.series), 1))

    for color, series in zip(colors, spec.series):
        xs = [p.x for p in series.points]
        ys = [p.y for p in series.points]
        ax.plot(xs, ys, color=color, alpha=series.alpha, label=series.name)

        for point in series.points:
            if point.label:
                ax.annotate(
                    point.label,
                    xy=(point.x, point.y),
                    xytext=(5, 0),
                    textcoords='offset points',
                    fontsize=7,
                    color=color,
                    alpha=0.8
                )

    ax.set_xlabel(spec.x_label, fontsize=12)
    ax.set_ylabel(spec.y_label, fontsize=12)
    ax.set_title(spec.title, fontsize=14, fontweight='bold')
    if spec.show_legend and spec.series:
        ax.legend()

    plt.tight_layout()
    plt.savefig(path, dpi=150)
    plt.close(fig)
    print(f"  Saved: {Path(path).name}")
    return fig


def print_ranking(title: str, df: pd.DataFrame, value_column: str):
    """Print one ranked episode list."""
    print("\n" + "="*60)
    print(title)
    print("="*60)

    if df.empty:
        print("  (no episodes)")
        return

    for position, (_, row) in enumerate(df.iterrows(), start=1):
        value = row[value_column]
        value_str = f"{value:>12,.0f}" if value_column == "downloads" else f"{value:>12,.1f}"
        print(f"{position:3d}. {value_str} | {row['title']} (#{row['id']}, {int(row['days_since_release'])} days)")


def print_statistics(tidy_df: pd.DataFrame):
    """Print summary statistics of the tidy table."""
    episodes = tidy_df.drop_duplicates(subset=['id'])

    print("\n" + "="*60)
    print("SUMMARY STATISTICS")
    print("="*60)
    print(f"Episodes: {len(episodes)}")
    print(f"Observations (episode x point in time): {len(tidy_df)}")

    if len(episodes) > 0:
        print(f"\nDownloads per episode:")
        print(f"  Mean: {episodes['downloads'].mean():,.0f}")
        print(f"  Median: {episodes['downloads'].median():,.0f}")
        print(f"  Max: {episodes['downloads'].max():,.0f}")
        print(f"  Min: {episodes['downloads'].min():,.0f}")
        print(f"  Total: {episodes['downloads'].sum():,.0f}")
        print(f"\nFirst episode: {episodes['post_date'].min():%Y-%m-%d}")
        print(f"Latest episode: {episodes['post_date'].max():%Y-%m-%d}")


def main(argv=None):
    """Main entry point."""
    defaults = AnalyticsConfig()
    parser = argparse.ArgumentParser(description='Analyze Podlove episode download exports')
    parser.add_argument('--data', type=str, help='Path to Podlove export (CSV)')
    parser.add_argument('--reference', type=str, help='Path to point-in-time reference (CSV)')
    parser.add_argument('--output', type=str, help='Output directory for tidy data and charts')
    parser.add_argument('--top', type=int, default=5, help='Length of ranked lists (default: 5)')
    parser.add_argument('--start', type=str, default=defaults.start_offset, help='Point in time defining an episode launch')
    parser.add_argument('--min-age', type=int, default=defaults.min_age_days, help='Minimum age in days of evergreen episodes')
    parser.add_argument('--verbose', action='store_true', help='Log every pipeline step')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    data_path = Path(args.data) if args.data else EXPORT_FILE
    reference_path = Path(args.reference) if args.reference else REFERENCE_FILE
    output_dir = Path(args.output) if args.output else OUTPUT_DIR

    print("="*60)
    print("Podlove Episode Downloads - Data Analysis")
    print(f"Data source: {data_path}")
    print(f"Reference: {reference_path}")
    print(f"Output folder: {output_dir}")
    print("="*60)

    try:
        tidy_df = import_clean(data_path, reference_path)
    except PodloveError as e:
        print(f"ERROR: {e}")
        return 1

    output_dir.mkdir(parents=True, exist_ok=True)
    tidy_df.to_csv(output_dir / 'tidy.csv', index=False)
    print(f"\nLoaded {tidy_df['id'].nunique()} episodes ({len(tidy_df)} observations).")

    print_statistics(tidy_df)

    top = abs(args.top)
    print_ranking(f"TOP {top} MOST DOWNLOADED EPISODES", most_downloaded(tidy_df, top), 'downloads')
    print_ranking(f"{top} LEAST DOWNLOADED EPISODES", most_downloaded(tidy_df, -top), 'downloads')
    print_ranking(
        f"TOP {top} LAUNCHES (downloads per day after {args.start})",
        best_starts(tidy_df, args.start, top),
        'download_per_day_at_pit'
    )
    print_ranking(
        f"TOP {top} EVERGREENS (downloads per day, older than {args.min_age} days)",
        evergreens(tidy_df, top, args.min_age),
        'downloads_per_day_overall'
    )

    print(f"\nCreating charts...")
    render_chart(average_downloads_curve(tidy_df), output_dir / 'average_downloads.png')
    render_chart(download_curves_per_episode(tidy_df), output_dir / 'download_curves.png')

    print(f"\n[OK] All output saved to: {output_dir}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
