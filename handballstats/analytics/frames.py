"""Tabular (pandas) views over match events and player statistics."""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence

import pandas as pd

from ..events import SHOT_GOAL, SHOT_MISS, MatchEvent, zone_group
from .models import CalculatedStats, PlayerStatistics

EVENT_COLUMNS = [
    "event_id",
    "match_id",
    "team_id",
    "player_id",
    "player_name",
    "category",
    "action",
    "timestamp",
    "zone",
    "zone_group",
    "goal_target",
    "active_goalkeeper_id",
    "has_opposition",
    "is_collective",
    "is_counter_attack",
    "is_shot",
    "is_goal",
    "is_miss",
    "is_turnover",
    "is_sanction",
]

PLAYER_COLUMNS = [
    "player_id",
    "player_name",
    "player_number",
    "shots",
    "goals",
    "shots_saved",
    "misses",
    "posts",
    "blocks",
    "efficiency",
    "shots_6m",
    "goals_6m",
    "shots_9m",
    "goals_9m",
    "shots_7m",
    "goals_7m",
    "turnovers",
    "yellow_cards",
    "two_minutes",
    "red_cards",
    "blue_cards",
    "common_fouls",
    "saves",
    "goals_conceded",
    "save_efficiency",
    "baseline_efficiency",
    "efficiency_delta",
]

DEFAULT_LEADERBOARD_GROUPS: Mapping[str, Sequence[str]] = {
    "shooting": ("goals", "shots", "efficiency"),
    "distance": ("goals_6m", "goals_9m", "goals_7m"),
    "discipline": ("two_minutes", "yellow_cards", "red_cards", "common_fouls"),
    "ball_security": ("turnovers",),
    "goalkeeping": ("saves", "save_efficiency"),
}


def events_to_dataframe(events: Iterable[MatchEvent]) -> pd.DataFrame:
    """Flatten match events into a DataFrame, one row per event."""

    records: List[dict] = []
    for event in events:
        context = event.context
        records.append(
            {
                "event_id": event.id,
                "match_id": event.match_id,
                "team_id": event.team_id,
                "player_id": event.player_id,
                "player_name": event.player_name,
                "category": event.category,
                "action": event.action,
                "timestamp": event.timestamp,
                "zone": event.zone,
                "zone_group": zone_group(event.zone),
                "goal_target": event.goal_target,
                "active_goalkeeper_id": event.active_goalkeeper_id,
                "has_opposition": context.has_opposition if context else None,
                "is_collective": context.is_collective if context else None,
                "is_counter_attack": context.is_counter_attack if context else None,
                "is_shot": event.is_shot,
                "is_goal": event.is_shot and event.action == SHOT_GOAL,
                "is_miss": event.is_shot and event.action == SHOT_MISS,
                "is_turnover": event.is_turnover,
                "is_sanction": event.is_sanction,
            }
        )

    if not records:
        return pd.DataFrame(columns=EVENT_COLUMNS)
    return pd.DataFrame.from_records(records, columns=EVENT_COLUMNS)


def _player_row(player: PlayerStatistics) -> dict:
    row = {column: getattr(player, column, None) for column in PLAYER_COLUMNS}
    row["baseline_efficiency"] = player.comparison.baseline_efficiency if player.comparison else None
    row["efficiency_delta"] = player.comparison.delta if player.comparison else None
    return row


def player_stats_to_dataframe(stats: CalculatedStats) -> pd.DataFrame:
    """One row per player record of a calculated report, sorted by goals."""

    if not stats.player_stats:
        return pd.DataFrame(columns=PLAYER_COLUMNS)
    df = pd.DataFrame.from_records(
        [_player_row(player) for player in stats.player_stats.values()],
        columns=PLAYER_COLUMNS,
    )
    return df.sort_values(["goals", "shots"], ascending=False, kind="stable").reset_index(drop=True)


def build_player_leaderboards(
    player_summary: pd.DataFrame,
    groups: Mapping[str, Sequence[str]] = DEFAULT_LEADERBOARD_GROUPS,
    top_n: int = 5,
    min_shots: int = 5,
) -> Dict[str, Dict[str, pd.DataFrame]]:
    """Generate leaderboards per statistical category from player rows."""

    if player_summary.empty:
        return {}

    leaderboards: Dict[str, Dict[str, pd.DataFrame]] = {}
    base = player_summary.copy()

    for category, metrics in groups.items():
        metric_tables: Dict[str, pd.DataFrame] = {}
        for metric in metrics:
            if metric not in base.columns:
                continue
            table = base[["player_id", "player_name", metric]].copy()
            if metric == "efficiency":
                table = table[base["shots"] >= min_shots]
            if metric == "save_efficiency":
                table = table[(base["saves"] + base["goals_conceded"]) >= min_shots]
            table = table[table[metric].fillna(0) > 0]
            if table.empty:
                continue
            table = table.sort_values(metric, ascending=False, kind="stable").head(top_n)
            metric_tables[metric] = table.reset_index(drop=True)
        if metric_tables:
            leaderboards[category] = metric_tables
    return leaderboards
