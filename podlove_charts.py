"""Line chart specifications of episode download curves.

The builders here only decide what to draw; podlove_analyze.render_chart
turns a ChartSpec into a matplotlib figure.
"""

from dataclasses import dataclass, field

import pandas as pd


@dataclass(frozen=True)
class LinePoint:
    x: float
    y: float
    label: str | None = None


@dataclass(frozen=True)
class LineSeries:
    name: str
    points: tuple[LinePoint, ...]
    alpha: float = 1.0


@dataclass(frozen=True)
class ChartSpec:
    """A titled set of line series, ready to hand to a renderer."""

    title: str
    x_label: str
    y_label: str
    series: tuple[LineSeries, ...] = field(default_factory=tuple)
    show_legend: bool = True


def average_downloads_curve(tidy_df: pd.DataFrame) -> ChartSpec:
    """Average downloads over all episodes at each point in time, by days since launch."""
    averages = tidy_df.groupby("pit_days")["downloads_in_time"].mean().sort_index()
    points = tuple(LinePoint(x=float(days), y=float(avg)) for days, avg in averages.items())
    return ChartSpec(
        title="Average Downloads Since Episode Launch",
        x_label="Days since launch",
        y_label="Average downloads",
        series=(LineSeries(name="average downloads", points=points),),
        show_legend=False,
    )


def download_curves_per_episode(tidy_df: pd.DataFrame, alpha: float = 0.5) -> ChartSpec:
    """
    One download curve per episode, overlaid.

    Each curve runs over days since launch and carries the episode title on
    its last point instead of a legend entry.
    """
    series = []
    for _, episode in tidy_df.groupby("id", sort=False):
        episode = episode.sort_values("pit_days", kind="mergesort")
        title = str(episode["title"].iloc[0])
        xs = episode["pit_days"].tolist()
        ys = episode["downloads_in_time"].tolist()
        points = [LinePoint(x=float(x), y=float(y)) for x, y in zip(xs, ys)]
        points[-1] = LinePoint(x=points[-1].x, y=points[-1].y, label=title)
        series.append(LineSeries(name=title, points=tuple(points), alpha=alpha))

    return ChartSpec(
        title="Download Curves per Episode",
        x_label="Days since launch",
        y_label="Downloads",
        series=tuple(series),
        show_legend=False,
    )
