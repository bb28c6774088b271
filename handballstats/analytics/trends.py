"""Match-by-match metric trends, shot windows and the goal-flow timeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from ..events import SHOT_GOAL, SHOT_SAVE, MatchEvent
from .frames import events_to_dataframe
from .models import percentage

TOTAL_COLUMNS = ("shots", "goals", "misses", "turnovers", "fouls", "plays")


@dataclass(frozen=True)
class MatchMeta:
    match_id: str
    label: str
    sort_key: float
    season_id: Optional[str] = None
    season_name: Optional[str] = None
    season_start: Optional[str] = None


@dataclass(frozen=True)
class TrendPoint:
    id: str
    label: str
    kind: str  # "match" or "season"
    sort_key: float
    metrics: Dict[str, float]
    season_id: Optional[str] = None
    season_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "label": self.label,
            "kind": self.kind,
            "sortKey": self.sort_key,
            "seasonId": self.season_id,
            "seasonName": self.season_name,
            "metrics": dict(self.metrics),
        }


@dataclass(frozen=True)
class MetricsTrend:
    points: List[TrendPoint] = field(default_factory=list)
    current_season_id: Optional[str] = None
    current_season_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "points": [point.to_dict() for point in self.points],
            "currentSeasonId": self.current_season_id,
            "currentSeasonName": self.current_season_name,
        }


def _metrics(totals: Mapping[str, float]) -> Dict[str, float]:
    plays = int(totals["plays"])
    return {
        "goals_vs_shots": percentage(totals["goals"], totals["shots"]),
        "goals_vs_plays": percentage(totals["goals"], plays),
        "misses_vs_plays": percentage(totals["misses"], plays),
        "turnovers_vs_plays": percentage(totals["turnovers"], plays),
        "fouls_vs_plays": percentage(totals["fouls"], plays),
        "plays": plays,
    }


def _totals_by_match(events: Sequence[MatchEvent]) -> pd.DataFrame:
    df = events_to_dataframe(events)
    df = df[df["match_id"].notna()]
    if df.empty:
        return pd.DataFrame(columns=list(TOTAL_COLUMNS))
    grouped = df.groupby("match_id").agg(
        shots=("is_shot", "sum"),
        goals=("is_goal", "sum"),
        misses=("is_miss", "sum"),
        turnovers=("is_turnover", "sum"),
        fouls=("is_sanction", "sum"),
    )
    grouped["plays"] = grouped["shots"] + grouped["turnovers"] + grouped["fouls"]
    return grouped.astype(int)


def _season_sort_key(meta: MatchMeta) -> float:
    if meta.season_start:
        try:
            return datetime.fromisoformat(meta.season_start).timestamp() * 1000
        except ValueError:
            pass
    return meta.sort_key


def build_metrics_trend(
    events: Sequence[MatchEvent],
    match_meta: Mapping[str, MatchMeta],
    current_season_id: Optional[str] = None,
    current_season_name: Optional[str] = None,
) -> Optional[MetricsTrend]:
    """
    Build trend points from events spanning several matches.

    Each match of the current season becomes its own point. When
    ``current_season_id`` is given, matches from other seasons are folded into
    one point per season, listed before the match points. Matches without
    metadata are skipped.
    """
    totals = _totals_by_match(events)
    if totals.empty:
        return None

    match_points: List[TrendPoint] = []
    season_totals: Dict[str, pd.Series] = {}
    season_meta: Dict[str, MatchMeta] = {}

    for match_id, row in totals.iterrows():
        meta = match_meta.get(match_id)
        if meta is None:
            continue
        is_past_season = bool(current_season_id and meta.season_id and meta.season_id != current_season_id)
        if is_past_season:
            if meta.season_id in season_totals:
                season_totals[meta.season_id] = season_totals[meta.season_id] + row
            else:
                season_totals[meta.season_id] = row.copy()
                season_meta[meta.season_id] = meta
            continue
        match_points.append(
            TrendPoint(
                id=str(match_id),
                label=meta.label,
                kind="match",
                sort_key=meta.sort_key,
                metrics=_metrics(row),
                season_id=meta.season_id,
                season_name=meta.season_name,
            )
        )

    season_points = [
        TrendPoint(
            id=season_id,
            label=season_meta[season_id].season_name or "Season",
            kind="season",
            sort_key=_season_sort_key(season_meta[season_id]),
            metrics=_metrics(row),
            season_id=season_id,
            season_name=season_meta[season_id].season_name,
        )
        for season_id, row in season_totals.items()
    ]

    season_points.sort(key=lambda point: point.sort_key)
    match_points.sort(key=lambda point: point.sort_key)
    points = season_points + match_points if current_season_id else match_points
    if not points:
        return None
    return MetricsTrend(points=points, current_season_id=current_season_id, current_season_name=current_season_name)


@dataclass(frozen=True)
class PlayWindow:
    label: str
    start: int
    end: int


def play_window_options(events: Sequence[MatchEvent]) -> List[PlayWindow]:
    """Windows over the most recent shots, offered once enough shots exist."""
    total = sum(1 for event in events if event.is_shot)
    options: List[PlayWindow] = []
    if total >= 5:
        options.append(PlayWindow("Show last 5 shots", max(total - 5, 0), total))
    if total >= 10:
        options.append(PlayWindow("Shots 6-10", max(total - 10, 0), max(total - 5, 0)))
    if total >= 15:
        options.append(PlayWindow("Shots 11-15", max(total - 15, 0), max(total - 10, 0)))
    return options


def apply_play_window(events: Sequence[MatchEvent], window: Optional[PlayWindow]) -> List[MatchEvent]:
    """
    Restrict ``events`` to the shots inside ``window``.

    Shots are taken in timestamp order. A window that is not currently on
    offer for ``events`` leaves them untouched.
    """
    if window is None:
        return list(events)
    available = {(option.start, option.end) for option in play_window_options(events)}
    if (window.start, window.end) not in available:
        return list(events)
    shots = sorted((event for event in events if event.is_shot), key=lambda event: event.timestamp)
    return shots[window.start:window.end]


# ---------------------------------------------------------------------------
# Goal flow
# ---------------------------------------------------------------------------

CLUSTER_WINDOW_SECONDS = 120
HALF_BOUNDARY_POSITION = 0.5
HALF_GAP = 0.04
FIRST_SEGMENT = (0.0, HALF_BOUNDARY_POSITION - HALF_GAP / 2)
SECOND_SEGMENT = (HALF_BOUNDARY_POSITION + HALF_GAP / 2, 1.0)


@dataclass(frozen=True)
class SeriesPoint:
    position: float
    value: int

    def to_dict(self) -> dict:
        return {"position": self.position, "value": self.value}


@dataclass(frozen=True)
class ClusterPoint:
    position: float
    count: int

    def to_dict(self) -> dict:
        return {"position": self.position, "count": self.count}


@dataclass(frozen=True)
class GoalFlow:
    team_series: List[SeriesPoint]
    opponent_series: List[SeriesPoint]
    foul_positions: List[float]
    turnover_clusters: List[ClusterPoint]
    save_clusters: List[ClusterPoint]
    max_goals: int

    def to_dict(self) -> dict:
        return {
            "teamSeries": [point.to_dict() for point in self.team_series],
            "opponentSeries": [point.to_dict() for point in self.opponent_series],
            "foulsByPosition": [{"position": position} for position in self.foul_positions],
            "turnoversByPosition": [cluster.to_dict() for cluster in self.turnover_clusters],
            "savesByPosition": [cluster.to_dict() for cluster in self.save_clusters],
            "maxGoals": self.max_goals,
        }


class _HalfScale:
    """Spread the distinct timestamps of one half evenly over a segment."""

    def __init__(self, timestamps: Iterable[float], segment: Tuple[float, float]):
        unique = sorted(set(timestamps))
        self.segment = segment
        self.steps = {value: (index + 1) / (len(unique) + 1) for index, value in enumerate(unique)}

    def position(self, timestamp: float) -> float:
        start, end = self.segment
        if not self.steps:
            return start
        return start + self.steps.get(timestamp, 1.0) * (end - start)


def _cumulative_series(
    timestamps: Sequence[float],
    half_split: float,
    first: _HalfScale,
    second: _HalfScale,
) -> List[SeriesPoint]:
    ordered = sorted(timestamps)
    series = [SeriesPoint(FIRST_SEGMENT[0], 0)]
    value = 0
    for timestamp in ordered:
        if timestamp < half_split:
            value += 1
            series.append(SeriesPoint(first.position(timestamp), value))
    # halftime is always drawn through
    series.append(SeriesPoint(HALF_BOUNDARY_POSITION, value))
    series.append(SeriesPoint(SECOND_SEGMENT[0], value))
    for timestamp in ordered:
        if timestamp >= half_split:
            value += 1
            series.append(SeriesPoint(second.position(timestamp), value))
    series.append(SeriesPoint(1.0, value))
    return series


def _clusters(timestamps: Sequence[float], to_position: Callable[[float], float]) -> List[ClusterPoint]:
    """Group timestamps whose gap to the previous one is under the cluster window."""
    groups: List[List[float]] = []
    for timestamp in sorted(timestamps):
        if groups and timestamp - groups[-1][-1] < CLUSTER_WINDOW_SECONDS:
            groups[-1].append(timestamp)
        else:
            groups.append([timestamp])
    return [ClusterPoint(to_position(sum(group) / len(group)), len(group)) for group in groups]


def build_goal_flow(
    events: Sequence[MatchEvent],
    team_id: str,
    opponent_team_id: Optional[str] = None,
    second_half_mark: Optional[float] = None,
) -> GoalFlow:
    """
    Build the data behind a goal-flow timeline for one match.

    Positions are normalised to ``0..1``: the first half maps onto
    ``FIRST_SEGMENT`` and the second onto ``SECOND_SEGMENT``, each spreading
    the half's distinct event timestamps evenly. Without ``second_half_mark``
    every event belongs to the first half. Goal series are cumulative.
    Turnovers and saved shots of ``team_id`` are grouped into clusters of
    events less than ``CLUSTER_WINDOW_SECONDS`` apart.
    """
    half_split = float("inf") if second_half_mark is None else float(second_half_mark)

    def goal_times(side: Optional[str]) -> List[float]:
        if not side:
            return []
        return [
            event.timestamp
            for event in events
            if event.team_id == side and event.is_shot and event.action == SHOT_GOAL
        ]

    first = _HalfScale((event.timestamp for event in events if event.timestamp < half_split), FIRST_SEGMENT)
    second = _HalfScale((event.timestamp for event in events if event.timestamp >= half_split), SECOND_SEGMENT)

    def to_position(timestamp: float) -> float:
        return second.position(timestamp) if timestamp >= half_split else first.position(timestamp)

    team_series = _cumulative_series(goal_times(team_id), half_split, first, second)
    opponent_series = _cumulative_series(goal_times(opponent_team_id), half_split, first, second)
    own = [event for event in events if event.team_id == team_id]

    return GoalFlow(
        team_series=team_series,
        opponent_series=opponent_series,
        foul_positions=[to_position(event.timestamp) for event in own if event.is_sanction],
        turnover_clusters=_clusters([event.timestamp for event in own if event.is_turnover], to_position),
        save_clusters=_clusters(
            [event.timestamp for event in own if event.is_shot and event.action == SHOT_SAVE],
            to_position,
        ),
        max_goals=max(team_series[-1].value, opponent_series[-1].value, 1),
    )
