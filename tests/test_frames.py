from __future__ import annotations

import pytest

from handballstats.analytics import (
    build_player_leaderboards,
    calculate_statistics,
    events_to_dataframe,
    player_stats_to_dataframe,
)
from handballstats.events import MatchEvent, ShotContext


def _event(event_id: str, category: str, action: str = "", **kwargs) -> MatchEvent:
    return MatchEvent(id=event_id, category=category, action=action, **kwargs)


def _season_log():
    events = []
    for index in range(6):
        events.append(_event(f"a{index}", "Shot", "Goal" if index < 4 else "Miss", player_id="A", player_name="Anna", zone="9m-LB"))
    for index in range(5):
        events.append(_event(f"b{index}", "Shot", "Goal" if index < 1 else "Save", player_id="B", player_name="Bea", zone="6m-RW"))
    events.append(_event("c0", "Sanction", "2min", player_id="C", player_name="Cleo"))
    events.append(_event("o0", "Shot", "Save", player_id="opp", active_goalkeeper_id="K"))
    return events


def test_events_to_dataframe_flags_and_columns():
    events = [
        _event("1", "Shot", "Goal", zone="6m-CB", match_id="m1", context=ShotContext(is_counter_attack=True)),
        _event("2", "Foul", "Yellow", zone="7m", match_id="m1"),
        _event("3", "Turnover", "Steps", match_id="m1"),
    ]
    df = events_to_dataframe(events)

    assert len(df) == 3
    assert df["is_goal"].tolist() == [True, False, False]
    assert df["is_sanction"].tolist() == [False, True, False]
    assert df["zone_group"].tolist()[:2] == ["6m", "7m"]
    assert bool(df.iloc[0]["is_counter_attack"]) is True


def test_events_to_dataframe_empty_keeps_columns():
    df = events_to_dataframe([])
    assert df.empty
    assert "is_shot" in df.columns


def test_player_stats_to_dataframe_sorted_by_goals():
    stats = calculate_statistics(_season_log(), comparison={"A": 50.0})
    df = player_stats_to_dataframe(stats)

    assert df["player_id"].tolist()[:2] == ["A", "B"]
    anna = df[df["player_id"] == "A"].iloc[0]
    assert anna["goals"] == 4
    assert anna["efficiency_delta"] == pytest.approx(100 * 4 / 6 - 50.0)
    keeper = df[df["player_id"] == "K"].iloc[0]
    assert keeper["saves"] == 1


def test_leaderboards_respect_minimums():
    stats = calculate_statistics(_season_log())
    df = player_stats_to_dataframe(stats)

    boards = build_player_leaderboards(df, top_n=1, min_shots=6)
    assert boards["shooting"]["goals"].iloc[0]["player_name"] == "Anna"
    assert boards["discipline"]["two_minutes"].iloc[0]["player_name"] == "Cleo"
    # Bea has only five shots.
    assert boards["shooting"]["efficiency"]["player_id"].tolist() == ["A"]
    # The keeper faced one shot, below the minimum.
    assert "save_efficiency" not in boards["goalkeeping"]


def test_leaderboards_empty_input():
    assert build_player_leaderboards(player_stats_to_dataframe(calculate_statistics([]))) == {}
