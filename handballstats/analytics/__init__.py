"""Analytics utilities for handball match statistics."""

from .engine import StatisticsEngine, calculate_statistics
from .models import (
    CalculatedStats,
    GoalTargetStatistics,
    PlayerComparison,
    PlayerLabel,
    PlayerStatistics,
    ZoneMapKind,
    ZoneStatistics,
    ZoneStatsMap,
)
from .baselines import (
    SummaryRatios,
    ZoneBaselineRatios,
    build_player_baselines,
    build_summary_ratios,
    build_zone_baseline_ratios,
)
from .frames import (
    DEFAULT_LEADERBOARD_GROUPS,
    build_player_leaderboards,
    events_to_dataframe,
    player_stats_to_dataframe,
)
from .trends import (
    ClusterPoint,
    GoalFlow,
    MatchMeta,
    MetricsTrend,
    PlayWindow,
    SeriesPoint,
    TrendPoint,
    apply_play_window,
    build_goal_flow,
    build_metrics_trend,
    play_window_options,
)

__all__ = [
    "StatisticsEngine",
    "calculate_statistics",
    "CalculatedStats",
    "GoalTargetStatistics",
    "PlayerComparison",
    "PlayerLabel",
    "PlayerStatistics",
    "ZoneMapKind",
    "ZoneStatistics",
    "ZoneStatsMap",
    "SummaryRatios",
    "ZoneBaselineRatios",
    "build_player_baselines",
    "build_summary_ratios",
    "build_zone_baseline_ratios",
    "DEFAULT_LEADERBOARD_GROUPS",
    "build_player_leaderboards",
    "events_to_dataframe",
    "player_stats_to_dataframe",
    "ClusterPoint",
    "GoalFlow",
    "MatchMeta",
    "MetricsTrend",
    "PlayWindow",
    "SeriesPoint",
    "TrendPoint",
    "apply_play_window",
    "build_goal_flow",
    "build_metrics_trend",
    "play_window_options",
]
