"""
Report configuration loading and end-to-end report building.
"""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import yaml

from .analytics.baselines import build_player_baselines, build_summary_ratios, build_zone_baseline_ratios
from .analytics.engine import StatisticsEngine
from .analytics.models import PlayerLabel
from .cache import ReportCache, fingerprint
from .events import MatchEvent, load_events
from .exceptions import ReportConfigError

LOGGER = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Configuration models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ReportConfig:
    events: Path
    goalkeeper_mode: bool = False
    foul_events: Optional[Path] = None
    goalkeeper_events: Optional[Path] = None
    roster: Optional[Path] = None
    baseline_events: Tuple[Path, ...] = ()
    baseline_team_id: Optional[str] = None

    def input_paths(self) -> List[Path]:
        paths = [self.events]
        for extra in (self.foul_events, self.goalkeeper_events, self.roster):
            if extra is not None:
                paths.append(extra)
        paths.extend(self.baseline_events)
        return paths


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Report config not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ReportConfigError(f"Report config at {path} must be a mapping")
    return raw


def _resolve(base: Path, value: Any, key: str) -> Optional[Path]:
    if value is None or value == "":
        return None
    if not isinstance(value, str):
        raise ReportConfigError(f"'{key}' must be a file path")
    path = Path(value)
    if not path.is_absolute():
        path = base / path
    return path


def load_report_config(path: Path) -> ReportConfig:
    """
    Parse a report configuration file. Relative paths resolve against the file's directory.
    """
    path = Path(path)
    raw = _load_yaml(path)
    base = path.parent

    events = _resolve(base, raw.get("events"), "events")
    if events is None:
        raise ReportConfigError(f"Report config at {path} is missing 'events'")

    baseline_raw = raw.get("baseline_events") or []
    if isinstance(baseline_raw, str):
        baseline_raw = [baseline_raw]
    if not isinstance(baseline_raw, list):
        raise ReportConfigError("'baseline_events' must be a path or a list of paths")

    baseline_team = raw.get("baseline_team_id")
    return ReportConfig(
        events=events,
        goalkeeper_mode=bool(raw.get("goalkeeper_mode", False)),
        foul_events=_resolve(base, raw.get("foul_events"), "foul_events"),
        goalkeeper_events=_resolve(base, raw.get("goalkeeper_events"), "goalkeeper_events"),
        roster=_resolve(base, raw.get("roster"), "roster"),
        baseline_events=tuple(
            resolved
            for resolved in (_resolve(base, item, "baseline_events") for item in baseline_raw)
            if resolved is not None
        ),
        baseline_team_id=str(baseline_team) if baseline_team is not None else None,
    )


def load_roster(path: Path) -> Dict[str, PlayerLabel]:
    """
    Read ``[{"id", "name", "number"}]`` (optionally wrapped in ``{"players": [...]}``).
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Roster not found at {path}")
    with path.open("r", encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, Mapping):
        payload = payload.get("players", [])

    roster: Dict[str, PlayerLabel] = {}
    for entry in payload or []:
        if not isinstance(entry, Mapping) or entry.get("id") is None or not entry.get("name"):
            continue
        number = entry.get("number")
        try:
            number = int(number) if number is not None else None
        except (TypeError, ValueError):
            number = None
        roster[str(entry["id"])] = PlayerLabel(name=str(entry["name"]), number=number)
    return roster


def roster_resolver(roster: Mapping[str, PlayerLabel]) -> Callable[[str], Optional[PlayerLabel]]:
    return roster.get


def _file_digest(path: Path) -> str:
    return hashlib.sha256(path.read_bytes()).hexdigest()


def report_fingerprint(config: ReportConfig) -> str:
    """Fingerprint of the configuration plus the content of every input file."""
    digests = [_file_digest(path) for path in config.input_paths()]
    return fingerprint([asdict(config), digests])


def _load_optional(path: Optional[Path]) -> Optional[List[MatchEvent]]:
    if path is None:
        return None
    return load_events(path)


# ---------------------------------------------------------------------------
# Report building
# ---------------------------------------------------------------------------


def build_report(config: ReportConfig, cache: Optional[ReportCache] = None) -> Dict[str, Any]:
    """
    Load the configured event files, run the statistics engine and return a JSON-ready report.
    """
    key: Optional[str] = None
    if cache is not None:
        key = report_fingerprint(config)
        cached = cache.load(key)
        if cached is not None:
            LOGGER.info("Using cached report %s", key)
            return cached

    events = load_events(config.events)
    foul_events = _load_optional(config.foul_events)
    goalkeeper_events = _load_optional(config.goalkeeper_events)
    resolver = roster_resolver(load_roster(config.roster)) if config.roster else None

    comparison: Optional[Dict[str, float]] = None
    if config.baseline_events:
        baseline_log: List[MatchEvent] = []
        for path in config.baseline_events:
            baseline_log.extend(load_events(path))
        comparison = build_player_baselines(baseline_log, team_id=config.baseline_team_id)
        LOGGER.info("Built baselines for %s players from %s events", len(comparison), len(baseline_log))

    LOGGER.info(
        "Calculating %s report for %s events",
        "goalkeeper" if config.goalkeeper_mode else "field player",
        len(events),
    )
    engine = StatisticsEngine(
        events,
        is_goalkeeper_mode=config.goalkeeper_mode,
        comparison=comparison,
        player_resolver=resolver,
    )
    stats = engine.calculate(foul_events=foul_events, goalkeeper_events=goalkeeper_events)

    report = {
        "goalkeeperMode": config.goalkeeper_mode,
        "stats": stats.to_dict(),
        "summaryRatios": build_summary_ratios(stats).to_dict(),
        "zoneRatios": build_zone_baseline_ratios(stats).to_dict(),
    }
    if cache is not None and key is not None:
        cache.store(key, report)
    return report
