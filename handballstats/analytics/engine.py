"""
Statistics engine turning a handball event log into coaching statistics.

Efficiency depends on who the report is about:

* field players: goals / all shots (misses, posts and blocks included)
* goalkeepers: saves / (saves + goals); shots that never required a save
  decision are left out of the denominator

The engine only reads offensive logs. A sanction in a team's own log means
that team was fouled, so fouls *committed* by a side are read from the
opponent's log, passed in as ``foul_events``.
"""
from __future__ import annotations

import logging
import threading
from collections import OrderedDict, defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from ..events import (
    CATEGORY_SHOT,
    GOAL_TARGETS,
    SANCTION_BLUE,
    SANCTION_RED,
    SANCTION_TWO_MINUTES,
    SANCTION_YELLOW,
    SHOT_BLOCK,
    SHOT_GOAL,
    SHOT_MISS,
    SHOT_POST,
    SHOT_SAVE,
    MatchEvent,
    zone_group,
)
from .models import (
    CalculatedStats,
    GoalTargetStatistics,
    PlayerComparison,
    PlayerLabel,
    PlayerStatistics,
    ZoneStatsMap,
    percentage,
)

LOGGER = logging.getLogger(__name__)

PlayerResolver = Callable[[str], Optional[PlayerLabel]]

UNKNOWN_PLAYER = "Unknown"
UNKNOWN_GOALKEEPER = "Unknown GK"

SANCTION_COUNTERS = {
    SANCTION_YELLOW: "yellow_cards",
    SANCTION_TWO_MINUTES: "two_minutes",
    SANCTION_RED: "red_cards",
    SANCTION_BLUE: "blue_cards",
    "Blue Card": "blue_cards",
}
COMMON_FOUL_COUNTER = "common_fouls"

# Distinct foul/goalkeeper source pairs remembered per engine.
MEMO_SIZE = 4

# (context attribute, counters when True, counters when False)
CONTEXT_SPLITS = (
    (
        "has_opposition",
        ("shots_with_opposition", "goals_with_opposition"),
        ("shots_without_opposition", "goals_without_opposition"),
    ),
    ("is_collective", ("shots_collective", "goals_collective"), ("shots_individual", "goals_individual")),
    ("is_counter_attack", ("shots_counter", "goals_counter"), ("shots_static", "goals_static")),
)

_SourceKey = Tuple[MatchEvent, ...]


@dataclass(frozen=True)
class EventPartition:
    shots: Tuple[MatchEvent, ...]
    turnovers: Tuple[MatchEvent, ...]
    sanctions: Tuple[MatchEvent, ...]

    @classmethod
    def from_events(cls, events: Sequence[MatchEvent]) -> "EventPartition":
        shots: List[MatchEvent] = []
        turnovers: List[MatchEvent] = []
        sanctions: List[MatchEvent] = []
        for event in events:
            if event.is_shot:
                shots.append(event)
            elif event.is_turnover:
                turnovers.append(event)
            elif event.is_sanction:
                sanctions.append(event)
        return cls(tuple(shots), tuple(turnovers), tuple(sanctions))


def _count(events: Sequence[MatchEvent], action: str) -> int:
    return sum(1 for event in events if event.action == action)


class StatisticsEngine:
    """
    Compute ``CalculatedStats`` for one primary event collection.

    Build one engine per primary configuration. Results are memoised per
    instance and keyed on the call-time sources, so a call with different
    ``foul_events`` or ``goalkeeper_events`` is computed afresh. Only the
    ``MEMO_SIZE`` most recently used source pairs are kept.
    """

    def __init__(
        self,
        events: Sequence[MatchEvent],
        is_goalkeeper_mode: bool = False,
        comparison: Optional[Mapping[str, float]] = None,
        player_resolver: Optional[PlayerResolver] = None,
    ):
        self.events: Tuple[MatchEvent, ...] = tuple(events)
        self.is_goalkeeper_mode = is_goalkeeper_mode
        self.comparison = dict(comparison) if comparison else {}
        self.player_resolver = player_resolver
        self._memo: OrderedDict[Tuple[_SourceKey, _SourceKey], CalculatedStats] = OrderedDict()
        self._lock = threading.Lock()

    def calculate(
        self,
        foul_events: Optional[Sequence[MatchEvent]] = None,
        goalkeeper_events: Optional[Sequence[MatchEvent]] = None,
    ) -> CalculatedStats:
        """
        Calculate every statistic for the primary events.

        ``foul_events`` replaces the primary events when building the
        fouls-committed zone map, typically with the opponent's log.
        ``goalkeeper_events`` replaces them when crediting saves and goals
        conceded through ``active_goalkeeper_id``.
        """
        foul_source = self.events if foul_events is None else tuple(foul_events)
        goalkeeper_source = self.events if goalkeeper_events is None else tuple(goalkeeper_events)
        key = (foul_source, goalkeeper_source)

        with self._lock:
            cached = self._memo.get(key)
            if cached is not None:
                LOGGER.debug("Returning memoised statistics for %s events", len(self.events))
                self._memo.move_to_end(key)
                return cached
            result = self._compute(foul_source, goalkeeper_source)
            self._memo[key] = result
            while len(self._memo) > MEMO_SIZE:
                self._memo.popitem(last=False)
            return result

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _compute(
        self,
        foul_source: Sequence[MatchEvent],
        goalkeeper_source: Sequence[MatchEvent],
    ) -> CalculatedStats:
        primary = EventPartition.from_events(self.events)
        foul_partition = primary if foul_source is self.events else EventPartition.from_events(foul_source)
        LOGGER.debug(
            "Calculating statistics: %s shots, %s turnovers, %s sanctions (foul source: %s events, goalkeeper source: %s events)",
            len(primary.shots),
            len(primary.turnovers),
            len(primary.sanctions),
            len(foul_source),
            len(goalkeeper_source),
        )

        stats = CalculatedStats()
        shots = primary.shots
        stats.total_shots = len(shots)
        stats.total_goals = _count(shots, SHOT_GOAL)
        stats.total_saves = _count(shots, SHOT_SAVE)
        stats.total_misses = _count(shots, SHOT_MISS)
        stats.total_posts = _count(shots, SHOT_POST)
        stats.total_blocks = _count(shots, SHOT_BLOCK)
        stats.efficiency = self._efficiency(stats.total_goals, stats.total_saves, stats.total_shots)

        self._populate_shot_distribution(shots, stats.zone_stats)
        self._populate_fouls_committed(foul_partition, stats.foul_zone_stats)
        self._populate_play_maps(primary, stats)
        stats.goal_target_stats = self._goal_target_stats(shots)
        stats.player_stats = self._player_stats(goalkeeper_source)

        stats.total_turnovers = len(primary.turnovers)
        stats.total_fouls = len(primary.sanctions)
        stats.total_plays = stats.total_shots + stats.total_turnovers + stats.total_fouls
        stats.goals_percentage = percentage(stats.total_goals, stats.total_plays)
        stats.misses_percentage = percentage(stats.total_misses, stats.total_plays)
        stats.turnovers_percentage = percentage(stats.total_turnovers, stats.total_plays)
        stats.fouls_percentage = percentage(stats.total_fouls, stats.total_plays)
        stats.goals_conceded = sum(player.goals_conceded for player in stats.player_stats.values())
        return stats

    def _efficiency(self, goals: int, saves: int, shots: int) -> float:
        if self.is_goalkeeper_mode:
            return percentage(saves, saves + goals)
        return percentage(goals, shots)

    # ------------------------------------------------------------------
    # Zone maps
    # ------------------------------------------------------------------

    def _populate_shot_distribution(self, shots: Sequence[MatchEvent], zone_stats: ZoneStatsMap) -> None:
        saves_by_zone: Dict[str, int] = defaultdict(int)
        for shot in shots:
            stats = zone_stats.get(shot.zone)
            if stats is None:
                continue
            if self.is_goalkeeper_mode:
                # Only saves and goals were a decision for the goalkeeper.
                if shot.action == SHOT_SAVE:
                    saves_by_zone[shot.zone] += 1
                    stats.plays += 1
                elif shot.action == SHOT_GOAL:
                    stats.numerator += 1
                    stats.plays += 1
            else:
                stats.plays += 1
                if shot.action == SHOT_GOAL:
                    stats.numerator += 1

        for zone, stats in zone_stats.items():
            if self.is_goalkeeper_mode:
                stats.efficiency = percentage(saves_by_zone[zone], stats.plays)
            else:
                stats.efficiency = percentage(stats.numerator, stats.plays)

    @staticmethod
    def _populate_fouls_committed(partition: EventPartition, foul_zone_stats: ZoneStatsMap) -> None:
        for shot in partition.shots:
            stats = foul_zone_stats.get(shot.zone)
            if stats is not None:
                stats.plays += 1
        for sanction in partition.sanctions:
            stats = foul_zone_stats.get(sanction.zone)
            if stats is not None:
                stats.plays += 1
                stats.numerator += 1
        _apply_ratio(foul_zone_stats)

    @staticmethod
    def _populate_play_maps(primary: EventPartition, result: CalculatedStats) -> None:
        received = result.foul_received_zone_stats
        turnovers = result.turnover_zone_stats
        danger = result.danger_zone_stats

        for shot in primary.shots:
            if received.get(shot.zone) is None:
                continue
            received[shot.zone].plays += 1
            turnovers[shot.zone].plays += 1
            danger[shot.zone].plays += 1
            if shot.action == SHOT_GOAL:
                danger[shot.zone].numerator += 1

        for sanction in primary.sanctions:
            if received.get(sanction.zone) is None:
                continue
            received[sanction.zone].plays += 1
            received[sanction.zone].numerator += 1
            turnovers[sanction.zone].plays += 1
            danger[sanction.zone].plays += 1

        for turnover in primary.turnovers:
            if turnovers.get(turnover.zone) is None:
                continue
            turnovers[turnover.zone].plays += 1
            turnovers[turnover.zone].numerator += 1
            danger[turnover.zone].plays += 1

        for zone_map in (received, turnovers, danger):
            _apply_ratio(zone_map)

    # ------------------------------------------------------------------
    # Goal targets
    # ------------------------------------------------------------------

    def _goal_target_stats(self, shots: Sequence[MatchEvent]) -> Dict[int, GoalTargetStatistics]:
        by_target: Dict[int, List[MatchEvent]] = defaultdict(list)
        for shot in shots:
            if shot.goal_target is not None:
                by_target[shot.goal_target].append(shot)

        targets: Dict[int, GoalTargetStatistics] = {}
        for target in GOAL_TARGETS:
            target_shots = by_target.get(target, [])
            goals = _count(target_shots, SHOT_GOAL)
            saves = _count(target_shots, SHOT_SAVE)
            targets[target] = GoalTargetStatistics(
                goals=goals,
                saves=saves,
                shots=len(target_shots),
                efficiency=self._efficiency(goals, saves, len(target_shots)),
            )
        return targets

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def _player_stats(self, goalkeeper_source: Sequence[MatchEvent]) -> Dict[str, PlayerStatistics]:
        events_by_player: Dict[str, List[MatchEvent]] = {}
        for event in self.events:
            if not event.player_id:
                continue
            events_by_player.setdefault(event.player_id, []).append(event)

        players: Dict[str, PlayerStatistics] = {
            player_id: self._offense_stats(player_id, player_events)
            for player_id, player_events in events_by_player.items()
        }

        for event in goalkeeper_source:
            if event.category != CATEGORY_SHOT or not event.active_goalkeeper_id:
                continue
            goalkeeper_id = event.active_goalkeeper_id
            record = players.get(goalkeeper_id)
            if record is None:
                record = self._new_player(goalkeeper_id, fallback_name=UNKNOWN_GOALKEEPER)
                players[goalkeeper_id] = record

            if event.action == SHOT_SAVE:
                record.saves += 1
            elif event.action == SHOT_GOAL:
                record.goals_conceded += 1
            record.save_efficiency = percentage(record.saves, record.shots_faced)
            if record.shots == 0:
                record.efficiency = record.save_efficiency

        return players

    def _new_player(
        self,
        player_id: str,
        fallback_name: str,
        fallback_number: Optional[int] = None,
    ) -> PlayerStatistics:
        name: Optional[str] = fallback_name
        number = fallback_number
        if self.player_resolver is not None:
            label = self.player_resolver(player_id)
            if label is not None:
                name = label.name
                number = label.number
        return PlayerStatistics(player_id=player_id, player_name=name, player_number=number)

    def _offense_stats(self, player_id: str, events: Sequence[MatchEvent]) -> PlayerStatistics:
        name = next((event.player_name for event in events if event.player_name), UNKNOWN_PLAYER)
        number = next((event.player_number for event in events if event.player_number is not None), None)
        stats = self._new_player(player_id, fallback_name=name, fallback_number=number)

        for event in events:
            if event.is_shot:
                self._add_shot(stats, event)
            elif event.is_turnover:
                stats.turnovers += 1
            elif event.is_sanction:
                counter = SANCTION_COUNTERS.get(event.action, COMMON_FOUL_COUNTER)
                setattr(stats, counter, getattr(stats, counter) + 1)

        stats.efficiency = percentage(stats.goals, stats.shots)

        baseline = self.comparison.get(player_id)
        if baseline is not None and stats.shots > 0:
            stats.comparison = PlayerComparison(
                baseline_efficiency=baseline,
                delta=stats.efficiency - baseline,
            )
        return stats

    @staticmethod
    def _add_shot(stats: PlayerStatistics, event: MatchEvent) -> None:
        is_goal = event.action == SHOT_GOAL
        stats.shots += 1
        if is_goal:
            stats.goals += 1
        elif event.action == SHOT_SAVE:
            stats.shots_saved += 1
        elif event.action == SHOT_MISS:
            stats.misses += 1
        elif event.action == SHOT_POST:
            stats.posts += 1
        elif event.action == SHOT_BLOCK:
            stats.blocks += 1

        group = zone_group(event.zone)
        if group is not None:
            _bump(stats, f"shots_{group}", f"goals_{group}", is_goal)

        context = event.context
        if context is None:
            return
        for attribute, when_true, when_false in CONTEXT_SPLITS:
            flag = getattr(context, attribute)
            if flag is True:
                _bump(stats, *when_true, is_goal)
            elif flag is False:
                _bump(stats, *when_false, is_goal)


def _bump(stats: PlayerStatistics, shots_field: str, goals_field: str, is_goal: bool) -> None:
    setattr(stats, shots_field, getattr(stats, shots_field) + 1)
    if is_goal:
        setattr(stats, goals_field, getattr(stats, goals_field) + 1)


def _apply_ratio(zone_map: ZoneStatsMap) -> None:
    for stats in zone_map.zones.values():
        stats.efficiency = percentage(stats.numerator, stats.plays)


def calculate_statistics(
    events: Sequence[MatchEvent],
    *,
    is_goalkeeper_mode: bool = False,
    comparison: Optional[Mapping[str, float]] = None,
    player_resolver: Optional[PlayerResolver] = None,
    foul_events: Optional[Sequence[MatchEvent]] = None,
    goalkeeper_events: Optional[Sequence[MatchEvent]] = None,
) -> CalculatedStats:
    """One-shot helper around ``StatisticsEngine``."""
    engine = StatisticsEngine(
        events,
        is_goalkeeper_mode=is_goalkeeper_mode,
        comparison=comparison,
        player_resolver=player_resolver,
    )
    return engine.calculate(foul_events=foul_events, goalkeeper_events=goalkeeper_events)
