from __future__ import annotations

import pytest

from handballstats.analytics import PlayerLabel, StatisticsEngine, calculate_statistics
from handballstats.events import MatchEvent, ShotContext


def _event(event_id: str, category: str, action: str = "", **kwargs) -> MatchEvent:
    return MatchEvent(id=event_id, category=category, action=action, **kwargs)


def _shot(event_id: str, action: str, player: str | None = None, **kwargs) -> MatchEvent:
    return _event(event_id, "Shot", action, player_id=player, **kwargs)


def test_offense_pass_splits_zones_contexts_and_sanctions():
    events = [
        _shot(
            "s1",
            "Goal",
            "p1",
            zone="6m-LB",
            context=ShotContext(has_opposition=True, is_collective=True, is_counter_attack=False),
        ),
        _shot(
            "s2",
            "Save",
            "p1",
            zone="9m-CB",
            context=ShotContext(has_opposition=False, is_collective=False, is_counter_attack=True),
        ),
        _shot("s3", "Miss", "p1", zone="7m"),
        _shot("s4", "Post", "p1"),
        _shot("s5", "Block", "p1", zone="9m-RB"),
        _event("t1", "Turnover", "Steps", player_id="p1"),
        _event("c1", "Sanction", "Yellow", player_id="p1"),
        _event("c2", "Sanction", "2min", player_id="p1"),
        _event("c3", "Sanction", "Red", player_id="p1"),
        _event("c4", "Sanction", "Blue", player_id="p1"),
        _event("c5", "Sanction", "Blue Card", player_id="p1"),
        _event("c6", "Sanction", "Foul", player_id="p1"),
        _event("c7", "Foul", "Shirt pull", player_id="p1"),
    ]
    player = calculate_statistics(events).player_stats["p1"]

    assert (player.shots, player.goals, player.shots_saved) == (5, 1, 1)
    assert (player.misses, player.posts, player.blocks) == (1, 1, 1)
    assert player.efficiency == pytest.approx(20.0)

    assert (player.shots_6m, player.goals_6m) == (1, 1)
    assert (player.shots_9m, player.goals_9m) == (2, 0)
    assert (player.shots_7m, player.goals_7m) == (1, 0)

    assert (player.shots_with_opposition, player.goals_with_opposition) == (1, 1)
    assert (player.shots_without_opposition, player.goals_without_opposition) == (1, 0)
    assert (player.shots_collective, player.goals_collective) == (1, 1)
    assert (player.shots_individual, player.goals_individual) == (1, 0)
    assert (player.shots_counter, player.goals_counter) == (1, 0)
    assert (player.shots_static, player.goals_static) == (1, 1)

    assert player.turnovers == 1
    assert player.yellow_cards == 1
    assert player.two_minutes == 1
    assert player.red_cards == 1
    assert player.blue_cards == 2
    assert player.common_fouls == 2

    # Shots stopped by the opposing keeper are never this player's saves.
    assert player.saves == 0
    assert player.goals_conceded == 0


def test_dual_role_player_has_one_merged_record():
    primary = [_shot("s1", "Goal", "X", active_goalkeeper_id="opp-gk")]
    opponent_shots = [_shot("o1", "Save", "opp-9", active_goalkeeper_id="X")]

    stats = StatisticsEngine(primary).calculate(goalkeeper_events=opponent_shots)
    record = stats.player_stats["X"]

    assert (record.goals, record.shots) == (1, 1)
    assert (record.saves, record.goals_conceded) == (1, 0)
    assert record.efficiency == pytest.approx(100.0)
    assert record.save_efficiency == pytest.approx(100.0)
    assert set(stats.player_stats) == {"X"}


def test_dual_role_efficiency_stays_the_shooting_figure():
    primary = [_shot("s1", "Goal", "X"), _shot("s2", "Miss", "X")]
    conceded = [_shot(f"o{index}", "Goal", "opp-9", active_goalkeeper_id="X") for index in range(3)]

    record = StatisticsEngine(primary).calculate(goalkeeper_events=conceded).player_stats["X"]

    assert record.goals_conceded == 3
    assert record.efficiency == pytest.approx(50.0)
    assert record.save_efficiency == pytest.approx(0.0)


def test_shot_saved_by_opponent_is_not_credited_as_own_save():
    primary = [_shot("s1", "Save", "X", active_goalkeeper_id="opp-gk")]

    stats = StatisticsEngine(primary).calculate(goalkeeper_events=[])
    record = stats.player_stats["X"]

    assert record.shots_saved == 1
    assert record.saves == 0
    assert stats.total_saves == 1
    assert "opp-gk" not in stats.player_stats


def test_goalkeeper_records_are_created_on_demand_from_primary_source():
    events = [
        _shot("s1", "Goal", "A", active_goalkeeper_id="G"),
        _shot("s2", "Save", "A", active_goalkeeper_id="G"),
        _shot("s3", "Miss", "A", active_goalkeeper_id="G"),
        _event("t1", "Turnover", "Pass", player_id="A", active_goalkeeper_id="G"),
    ]
    stats = calculate_statistics(events)
    keeper = stats.player_stats["G"]

    assert keeper.player_name == "Unknown GK"
    assert (keeper.saves, keeper.goals_conceded) == (1, 1)
    assert keeper.save_efficiency == pytest.approx(50.0)
    assert keeper.efficiency == pytest.approx(50.0)
    assert keeper.shots == 0
    assert stats.goals_conceded == 1


def test_goals_conceded_sums_every_goalkeeper():
    opponent_shots = [
        _shot("o1", "Goal", "opp-1", active_goalkeeper_id="G1"),
        _shot("o2", "Goal", "opp-2", active_goalkeeper_id="G2"),
        _shot("o3", "Goal", "opp-2", active_goalkeeper_id="G2"),
        _shot("o4", "Goal", "opp-2"),
    ]
    stats = StatisticsEngine([]).calculate(goalkeeper_events=opponent_shots)

    assert stats.player_stats["G1"].goals_conceded == 1
    assert stats.player_stats["G2"].goals_conceded == 2
    assert stats.goals_conceded == 3


def test_player_labels_come_from_resolver_or_events():
    roster = {"G": PlayerLabel(name="Keeper One", number=1), "A": PlayerLabel(name="Alex", number=7)}
    events = [
        _shot("s1", "Goal", "A", player_name="A. Event", active_goalkeeper_id="G"),
        _shot("s2", "Goal", "B", player_name="Blake", player_number=11),
    ]

    resolved = calculate_statistics(events, player_resolver=roster.get).player_stats
    assert (resolved["A"].player_name, resolved["A"].player_number) == ("Alex", 7)
    assert (resolved["G"].player_name, resolved["G"].player_number) == ("Keeper One", 1)
    assert (resolved["B"].player_name, resolved["B"].player_number) == ("Blake", 11)

    unresolved = calculate_statistics(events).player_stats
    assert unresolved["A"].player_name == "A. Event"


def test_resolver_does_not_change_numbers():
    events = [_shot("s1", "Goal", "A"), _shot("s2", "Miss", "A")]
    plain = calculate_statistics(events).player_stats["A"]
    labelled = calculate_statistics(events, player_resolver=lambda _: PlayerLabel("Alex", 7)).player_stats["A"]

    assert plain.efficiency == labelled.efficiency
    assert plain.shots == labelled.shots


def test_comparison_requires_a_shot():
    events = [
        _shot("s1", "Goal", "A"),
        _shot("s2", "Miss", "A"),
        _event("t1", "Turnover", "Pass", player_id="B"),
    ]
    stats = calculate_statistics(events, comparison={"A": 40.0, "B": 30.0})

    comparison = stats.player_stats["A"].comparison
    assert comparison is not None
    assert comparison.baseline_efficiency == pytest.approx(40.0)
    assert comparison.delta == pytest.approx(10.0)
    assert stats.player_stats["B"].comparison is None


def test_events_without_player_are_left_out_of_player_map():
    events = [_shot("s1", "Goal"), _event("t1", "Turnover", "Pass")]
    stats = calculate_statistics(events)

    assert stats.player_stats == {}
    assert stats.total_goals == 1
    assert stats.total_turnovers == 1
