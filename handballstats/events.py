"""
Match event model and helpers for reading captured handball event logs.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

from .exceptions import EventFormatError

CATEGORY_SHOT = "Shot"
CATEGORY_TURNOVER = "Turnover"
CATEGORY_SANCTION = "Sanction"
# Older capture sessions stored sanctions under this label.
CATEGORY_FOUL = "Foul"

SANCTION_CATEGORIES = frozenset({CATEGORY_SANCTION, CATEGORY_FOUL})

SHOT_GOAL = "Goal"
SHOT_SAVE = "Save"
SHOT_MISS = "Miss"
SHOT_POST = "Post"
SHOT_BLOCK = "Block"

SANCTION_FOUL = "Foul"
SANCTION_YELLOW = "Yellow"
SANCTION_TWO_MINUTES = "2min"
SANCTION_RED = "Red"
SANCTION_BLUE = "Blue"

SIX_METER_ZONES: Tuple[str, ...] = ("6m-LW", "6m-LB", "6m-CB", "6m-RB", "6m-RW")
NINE_METER_ZONES: Tuple[str, ...] = ("9m-LB", "9m-CB", "9m-RB")
PENALTY_ZONE = "7m"
ZONES: Tuple[str, ...] = SIX_METER_ZONES + NINE_METER_ZONES + (PENALTY_ZONE,)

ZONE_LABELS = {
    "6m-LW": "LW 6m",
    "6m-LB": "LB 6m",
    "6m-CB": "CB 6m",
    "6m-RB": "RB 6m",
    "6m-RW": "RW 6m",
    "9m-LB": "LB 9m",
    "9m-CB": "CB 9m",
    "9m-RB": "RB 9m",
    "7m": "Penalty 7m",
}

GOAL_TARGETS: Tuple[int, ...] = tuple(range(1, 10))

PathLike = Union[str, Path]


def zone_group(zone: Optional[str]) -> Optional[str]:
    """Collapse a court zone into its distance line: ``6m``, ``9m`` or ``7m``."""
    if not zone:
        return None
    if zone == PENALTY_ZONE:
        return PENALTY_ZONE
    if zone in SIX_METER_ZONES:
        return "6m"
    if zone in NINE_METER_ZONES:
        return "9m"
    return None


@dataclass(frozen=True)
class ShotContext:
    """Situational flags recorded with a shot. ``None`` means not captured."""

    has_opposition: Optional[bool] = None
    is_collective: Optional[bool] = None
    is_counter_attack: Optional[bool] = None

    def to_dict(self) -> dict:
        return {
            "hasOpposition": self.has_opposition,
            "isCollective": self.is_collective,
            "isCounterAttack": self.is_counter_attack,
        }


@dataclass(frozen=True)
class MatchEvent:
    """
    A single captured play.

    ``player_id`` is the acting player (shooter, player losing the ball, or
    the player involved in the sanction). ``active_goalkeeper_id`` is the
    opposing goalkeeper that faced a shot.
    """

    id: str
    category: str
    action: str = ""
    timestamp: float = 0.0
    zone: Optional[str] = None
    goal_target: Optional[int] = None
    team_id: Optional[str] = None
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    player_number: Optional[int] = None
    match_id: Optional[str] = None
    active_goalkeeper_id: Optional[str] = None
    context: Optional[ShotContext] = None

    @property
    def is_shot(self) -> bool:
        return self.category == CATEGORY_SHOT

    @property
    def is_turnover(self) -> bool:
        return self.category == CATEGORY_TURNOVER

    @property
    def is_sanction(self) -> bool:
        return self.category in SANCTION_CATEGORIES

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "category": self.category,
            "action": self.action,
            "zone": self.zone,
            "goalTarget": self.goal_target,
            "teamId": self.team_id,
            "playerId": self.player_id,
            "playerName": self.player_name,
            "playerNumber": self.player_number,
            "matchId": self.match_id,
            "activeGoalkeeperId": self.active_goalkeeper_id,
            "context": self.context.to_dict() if self.context else None,
        }


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _optional_int(value: Any) -> Optional[int]:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _optional_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return {"true": True, "false": False}.get(value.strip().lower())
    return None


def _goal_target(value: Any) -> Optional[int]:
    target = _optional_int(value)
    if target is None or target not in GOAL_TARGETS:
        return None
    return target


def _context(record: Mapping[str, Any]) -> Optional[ShotContext]:
    raw = record.get("context")
    if not isinstance(raw, Mapping):
        # Legacy records carry the flags at the top level.
        raw = record
    context = ShotContext(
        has_opposition=_optional_bool(raw.get("hasOpposition")),
        is_collective=_optional_bool(raw.get("isCollective")),
        is_counter_attack=_optional_bool(raw.get("isCounterAttack")),
    )
    if context == ShotContext():
        return None
    return context


def event_from_dict(record: Mapping[str, Any]) -> MatchEvent:
    """Build a ``MatchEvent`` from a capture record using camelCase keys."""

    if not isinstance(record, Mapping):
        raise EventFormatError(f"Event record must be a mapping, got {type(record).__name__}")
    event_id = _optional_str(record.get("id"))
    category = _optional_str(record.get("category"))
    if event_id is None:
        raise EventFormatError("Event record is missing 'id'")
    if category is None:
        raise EventFormatError(f"Event {event_id} is missing 'category'")

    try:
        timestamp = float(record.get("timestamp") or 0.0)
    except (TypeError, ValueError) as exc:
        raise EventFormatError(f"Event {event_id} has an invalid timestamp") from exc

    return MatchEvent(
        id=event_id,
        category=category,
        action=_optional_str(record.get("action")) or "",
        timestamp=timestamp,
        zone=_optional_str(record.get("zone")),
        goal_target=_goal_target(record.get("goalTarget")),
        team_id=_optional_str(record.get("teamId")),
        player_id=_optional_str(record.get("playerId")),
        player_name=_optional_str(record.get("playerName")),
        player_number=_optional_int(record.get("playerNumber")),
        match_id=_optional_str(record.get("matchId")),
        active_goalkeeper_id=_optional_str(record.get("activeGoalkeeperId")),
        context=_context(record),
    )


def events_from_records(records: Iterable[Mapping[str, Any]]) -> List[MatchEvent]:
    events: List[MatchEvent] = []
    for index, record in enumerate(records):
        try:
            events.append(event_from_dict(record))
        except EventFormatError as exc:
            raise EventFormatError(str(exc), index=index) from exc
    return events


def load_events(path: PathLike) -> List[MatchEvent]:
    """
    Read an event file.

    The file holds either a JSON array of events or an object with an
    ``events`` array, as exported by the capture application.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Event file not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, Mapping):
        payload = payload.get("events", [])
    if not isinstance(payload, list):
        raise EventFormatError(f"Event file {path} does not contain an event list")
    return events_from_records(payload)
