from __future__ import annotations

import pytest

from handballstats.analytics import (
    build_player_baselines,
    build_summary_ratios,
    build_zone_baseline_ratios,
    calculate_statistics,
)
from handballstats.events import MatchEvent


def _event(event_id: str, category: str, action: str = "", **kwargs) -> MatchEvent:
    return MatchEvent(id=event_id, category=category, action=action, **kwargs)


def test_player_baselines_use_goals_over_shots():
    events = [
        _event("1", "Shot", "Goal", player_id="A", team_id="t1"),
        _event("2", "Shot", "Miss", player_id="A", team_id="t1"),
        _event("3", "Shot", "Save", player_id="A", team_id="t1"),
        _event("4", "Shot", "Goal", player_id="A", team_id="t2"),
        _event("5", "Turnover", "Pass", player_id="B", team_id="t1"),
        _event("6", "Shot", "Goal", team_id="t1"),
    ]

    baselines = build_player_baselines(events)
    assert baselines == {"A": pytest.approx(50.0)}

    team_only = build_player_baselines(events, team_id="t1")
    assert team_only["A"] == pytest.approx(100 / 3)
    assert "B" not in team_only


def test_summary_ratios_are_fractions_or_none():
    empty = build_summary_ratios(calculate_statistics([]))
    assert empty.goals_vs_shots is None
    assert empty.fouls_vs_plays is None

    events = [
        _event("1", "Shot", "Goal"),
        _event("2", "Shot", "Miss"),
        _event("3", "Turnover", "Pass"),
        _event("4", "Sanction", "Foul"),
    ]
    ratios = build_summary_ratios(calculate_statistics(events))
    assert ratios.goals_vs_shots == pytest.approx(0.5)
    assert ratios.goals_vs_plays == pytest.approx(0.25)
    assert ratios.misses_vs_plays == pytest.approx(0.25)
    assert ratios.turnovers_vs_plays == pytest.approx(0.25)
    assert ratios.fouls_vs_plays == pytest.approx(0.25)
    assert ratios.to_dict()["goalsVsShots"] == pytest.approx(0.5)


def test_zone_baseline_ratios_follow_each_map():
    primary = [
        _event("1", "Shot", "Goal", zone="6m-CB"),
        _event("2", "Shot", "Miss", zone="6m-CB"),
        _event("3", "Sanction", "Foul", zone="6m-CB"),
    ]
    opponent = [_event("o1", "Sanction", "Foul", zone="9m-RB")]
    stats = calculate_statistics(primary, foul_events=opponent)

    ratios = build_zone_baseline_ratios(stats)
    assert ratios.goals_vs_shots["6m-CB"] == pytest.approx(0.5)
    assert ratios.goals_vs_plays["6m-CB"] == pytest.approx(1 / 3)
    assert ratios.fouls_vs_plays["6m-CB"] == pytest.approx(1 / 3)
    assert ratios.defense_fouls_vs_plays["9m-RB"] == pytest.approx(1.0)
    assert ratios.defense_fouls_vs_plays["6m-CB"] is None
    assert ratios.goals_vs_shots["7m"] is None
