"""Baseline and ratio helpers used to compare a report against reference figures."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from ..events import SHOT_GOAL, MatchEvent
from .models import CalculatedStats, ZoneStatsMap, percentage


@dataclass(frozen=True)
class SummaryRatios:
    goals_vs_shots: Optional[float]
    goals_vs_plays: Optional[float]
    misses_vs_plays: Optional[float]
    turnovers_vs_plays: Optional[float]
    fouls_vs_plays: Optional[float]

    def to_dict(self) -> dict:
        return {
            "goalsVsShots": self.goals_vs_shots,
            "goalsVsPlays": self.goals_vs_plays,
            "missesVsPlays": self.misses_vs_plays,
            "turnoversVsPlays": self.turnovers_vs_plays,
            "foulsVsPlays": self.fouls_vs_plays,
        }


@dataclass(frozen=True)
class ZoneBaselineRatios:
    goals_vs_shots: Dict[str, Optional[float]]
    goals_vs_plays: Dict[str, Optional[float]]
    fouls_vs_plays: Dict[str, Optional[float]]
    defense_fouls_vs_plays: Dict[str, Optional[float]]

    def to_dict(self) -> dict:
        return {
            "goalsVsShots": dict(self.goals_vs_shots),
            "goalsVsPlays": dict(self.goals_vs_plays),
            "foulsVsPlays": dict(self.fouls_vs_plays),
            "defenseFoulsVsPlays": dict(self.defense_fouls_vs_plays),
        }


def _ratio(numerator: int, denominator: int) -> Optional[float]:
    if denominator <= 0:
        return None
    return numerator / denominator


def build_player_baselines(events: Iterable[MatchEvent], team_id: Optional[str] = None) -> Dict[str, float]:
    """
    Shooting efficiency per player over a reference event log.

    Only players with at least one shot get a baseline. With ``team_id`` set,
    only events recorded for that team count, so a transferred player is
    compared against their figures for the current team.
    """
    shots: Dict[str, int] = {}
    goals: Dict[str, int] = {}
    for event in events:
        if not event.player_id:
            continue
        if team_id and event.team_id != team_id:
            continue
        if not event.is_shot:
            continue
        shots[event.player_id] = shots.get(event.player_id, 0) + 1
        if event.action == SHOT_GOAL:
            goals[event.player_id] = goals.get(event.player_id, 0) + 1

    return {player_id: percentage(goals.get(player_id, 0), count) for player_id, count in shots.items()}


def build_summary_ratios(stats: CalculatedStats) -> SummaryRatios:
    total_plays = stats.total_shots + stats.total_turnovers + stats.total_fouls
    return SummaryRatios(
        goals_vs_shots=_ratio(stats.total_goals, stats.total_shots),
        goals_vs_plays=_ratio(stats.total_goals, total_plays),
        misses_vs_plays=_ratio(stats.total_misses, total_plays),
        turnovers_vs_plays=_ratio(stats.total_turnovers, total_plays),
        fouls_vs_plays=_ratio(stats.total_fouls, total_plays),
    )


def _zone_ratios(zone_map: ZoneStatsMap) -> Dict[str, Optional[float]]:
    return {zone: _ratio(value.numerator, value.plays) for zone, value in zone_map.items()}


def build_zone_baseline_ratios(stats: CalculatedStats) -> ZoneBaselineRatios:
    return ZoneBaselineRatios(
        goals_vs_shots=_zone_ratios(stats.zone_stats),
        goals_vs_plays=_zone_ratios(stats.danger_zone_stats),
        fouls_vs_plays=_zone_ratios(stats.foul_received_zone_stats),
        defense_fouls_vs_plays=_zone_ratios(stats.foul_zone_stats),
    )
