"""Result structures produced by the statistics engine."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, Optional, Tuple

from ..events import GOAL_TARGETS, ZONES


def percentage(numerator: float, denominator: float) -> float:
    """Return ``numerator / denominator * 100`` or ``0.0`` for an empty denominator."""
    if denominator <= 0:
        return 0.0
    return float(numerator) / float(denominator) * 100.0


class ZoneMapKind(str, Enum):
    """What ``plays`` and ``numerator`` mean for a zone map."""

    SHOT_DISTRIBUTION = "shot_distribution"  # goals over shots (saves over on-target for keepers)
    FOULS_COMMITTED = "fouls_committed"  # sanctions over plays, read from the foul source
    FOULS_RECEIVED = "fouls_received"  # suffered sanctions over plays
    TURNOVERS = "turnovers"  # turnovers over plays
    DANGER = "danger"  # goals over plays


@dataclass
class ZoneStatistics:
    plays: int = 0
    numerator: int = 0
    efficiency: float = 0.0

    def to_dict(self) -> dict:
        return {"plays": self.plays, "numerator": self.numerator, "efficiency": self.efficiency}


@dataclass
class ZoneStatsMap:
    """Per-zone statistics of one kind, seeded with every court zone."""

    kind: ZoneMapKind
    zones: Dict[str, ZoneStatistics] = field(default_factory=dict)

    @classmethod
    def seeded(cls, kind: ZoneMapKind) -> "ZoneStatsMap":
        return cls(kind=kind, zones={zone: ZoneStatistics() for zone in ZONES})

    def get(self, zone: Optional[str]) -> Optional[ZoneStatistics]:
        if zone is None:
            return None
        return self.zones.get(zone)

    def __getitem__(self, zone: str) -> ZoneStatistics:
        return self.zones[zone]

    def __iter__(self) -> Iterator[str]:
        return iter(self.zones)

    def __len__(self) -> int:
        return len(self.zones)

    def items(self):
        return self.zones.items()

    def to_dict(self) -> Dict[str, dict]:
        return {zone: stats.to_dict() for zone, stats in self.zones.items()}


@dataclass
class GoalTargetStatistics:
    goals: int = 0
    saves: int = 0
    shots: int = 0
    efficiency: float = 0.0

    def to_dict(self) -> dict:
        return {
            "goals": self.goals,
            "saves": self.saves,
            "shots": self.shots,
            "efficiency": self.efficiency,
        }


@dataclass(frozen=True)
class PlayerComparison:
    baseline_efficiency: float
    delta: float

    def to_dict(self) -> dict:
        return {"baselineEfficiency": self.baseline_efficiency, "delta": self.delta}


@dataclass(frozen=True)
class PlayerLabel:
    name: str
    number: Optional[int] = None


@dataclass
class PlayerStatistics:
    """
    Statistics for one player.

    Shooter fields come from the player's own events. ``saves``,
    ``goals_conceded`` and ``save_efficiency`` come from shots faced as the
    active goalkeeper. ``shots_saved`` counts this player's shots stopped by
    the opposing goalkeeper and is never mixed into ``saves``.

    For a player who both shoots and keeps goal, ``efficiency`` stays the
    shooting figure and the goalkeeper figure lives only in
    ``save_efficiency``. A record with no shots of its own mirrors
    ``save_efficiency`` into ``efficiency``.
    """

    player_id: str
    player_name: Optional[str] = None
    player_number: Optional[int] = None

    shots: int = 0
    goals: int = 0
    shots_saved: int = 0
    misses: int = 0
    posts: int = 0
    blocks: int = 0
    efficiency: float = 0.0

    shots_6m: int = 0
    goals_6m: int = 0
    shots_9m: int = 0
    goals_9m: int = 0
    shots_7m: int = 0
    goals_7m: int = 0

    shots_with_opposition: int = 0
    goals_with_opposition: int = 0
    shots_without_opposition: int = 0
    goals_without_opposition: int = 0
    shots_collective: int = 0
    goals_collective: int = 0
    shots_individual: int = 0
    goals_individual: int = 0
    shots_counter: int = 0
    goals_counter: int = 0
    shots_static: int = 0
    goals_static: int = 0

    turnovers: int = 0

    yellow_cards: int = 0
    two_minutes: int = 0
    red_cards: int = 0
    blue_cards: int = 0
    common_fouls: int = 0

    saves: int = 0
    goals_conceded: int = 0
    save_efficiency: float = 0.0

    comparison: Optional[PlayerComparison] = None

    @property
    def shots_faced(self) -> int:
        return self.saves + self.goals_conceded

    def to_dict(self) -> dict:
        return {
            "playerId": self.player_id,
            "playerName": self.player_name,
            "playerNumber": self.player_number,
            "shots": self.shots,
            "goals": self.goals,
            "shotsSaved": self.shots_saved,
            "misses": self.misses,
            "posts": self.posts,
            "blocks": self.blocks,
            "efficiency": self.efficiency,
            "shots6m": self.shots_6m,
            "goals6m": self.goals_6m,
            "shots9m": self.shots_9m,
            "goals9m": self.goals_9m,
            "shots7m": self.shots_7m,
            "goals7m": self.goals_7m,
            "shotsWithOpp": self.shots_with_opposition,
            "goalsWithOpp": self.goals_with_opposition,
            "shotsNoOpp": self.shots_without_opposition,
            "goalsNoOpp": self.goals_without_opposition,
            "shotsCollective": self.shots_collective,
            "goalsCollective": self.goals_collective,
            "shotsIndividual": self.shots_individual,
            "goalsIndividual": self.goals_individual,
            "shotsCounter": self.shots_counter,
            "goalsCounter": self.goals_counter,
            "shotsStatic": self.shots_static,
            "goalsStatic": self.goals_static,
            "turnovers": self.turnovers,
            "yellowCards": self.yellow_cards,
            "twoMinutes": self.two_minutes,
            "redCards": self.red_cards,
            "blueCards": self.blue_cards,
            "commonFouls": self.common_fouls,
            "saves": self.saves,
            "goalsConceded": self.goals_conceded,
            "saveEfficiency": self.save_efficiency,
            "comparison": self.comparison.to_dict() if self.comparison else None,
        }


def _seeded_goal_targets() -> Dict[int, GoalTargetStatistics]:
    return {target: GoalTargetStatistics() for target in GOAL_TARGETS}


@dataclass
class CalculatedStats:
    total_shots: int = 0
    total_goals: int = 0
    total_saves: int = 0
    total_misses: int = 0
    total_posts: int = 0
    total_blocks: int = 0
    total_fouls: int = 0
    total_turnovers: int = 0
    total_plays: int = 0
    efficiency: float = 0.0
    goals_percentage: float = 0.0
    misses_percentage: float = 0.0
    turnovers_percentage: float = 0.0
    fouls_percentage: float = 0.0
    goals_conceded: int = 0

    zone_stats: ZoneStatsMap = field(default_factory=lambda: ZoneStatsMap.seeded(ZoneMapKind.SHOT_DISTRIBUTION))
    foul_zone_stats: ZoneStatsMap = field(default_factory=lambda: ZoneStatsMap.seeded(ZoneMapKind.FOULS_COMMITTED))
    foul_received_zone_stats: ZoneStatsMap = field(
        default_factory=lambda: ZoneStatsMap.seeded(ZoneMapKind.FOULS_RECEIVED)
    )
    turnover_zone_stats: ZoneStatsMap = field(default_factory=lambda: ZoneStatsMap.seeded(ZoneMapKind.TURNOVERS))
    danger_zone_stats: ZoneStatsMap = field(default_factory=lambda: ZoneStatsMap.seeded(ZoneMapKind.DANGER))
    goal_target_stats: Dict[int, GoalTargetStatistics] = field(default_factory=_seeded_goal_targets)
    player_stats: Dict[str, PlayerStatistics] = field(default_factory=dict)

    @property
    def foul_rate(self) -> float:
        return self.fouls_percentage

    def zone_maps(self) -> Tuple[ZoneStatsMap, ...]:
        return (
            self.zone_stats,
            self.foul_zone_stats,
            self.foul_received_zone_stats,
            self.turnover_zone_stats,
            self.danger_zone_stats,
        )

    def to_dict(self) -> dict:
        """Serialise to the JSON layout consumed by the statistics dashboard."""
        return {
            "totalShots": self.total_shots,
            "totalGoals": self.total_goals,
            "totalSaves": self.total_saves,
            "totalMisses": self.total_misses,
            "totalPosts": self.total_posts,
            "totalBlocks": self.total_blocks,
            "totalFouls": self.total_fouls,
            "totalTurnovers": self.total_turnovers,
            "totalPlays": self.total_plays,
            "efficiency": self.efficiency,
            "goalsPercentage": self.goals_percentage,
            "missesPercentage": self.misses_percentage,
            "turnoversPercentage": self.turnovers_percentage,
            "foulsPercentage": self.fouls_percentage,
            "foulRate": self.foul_rate,
            "goalsConceded": self.goals_conceded,
            "zoneStats": self.zone_stats.to_dict(),
            "foulZoneStats": self.foul_zone_stats.to_dict(),
            "foulReceivedZoneStats": self.foul_received_zone_stats.to_dict(),
            "turnoverZoneStats": self.turnover_zone_stats.to_dict(),
            "dangerZoneStats": self.danger_zone_stats.to_dict(),
            "goalTargetStats": {str(target): stats.to_dict() for target, stats in self.goal_target_stats.items()},
            "playerStats": {player_id: stats.to_dict() for player_id, stats in self.player_stats.items()},
        }
