"""
Unit tests for project scoring strategies.
"""

from datetime import date

import pytest

from tessera.models.enums import Scenario
from tessera.models.project import ProjectSignals
from tessera.services.scoring_service import (
    MilestoneStalenessScoring,
    ScoringContext,
    build_scenario_projects,
    hours_to_minutes,
    to_priority_rows,
)

CONTEXT = ScoringContext(week_start=date(2026, 10, 19))


@pytest.fixture
def scoring():
    return MilestoneStalenessScoring()


def test_hours_to_minutes_rounds_half_up():
    assert hours_to_minutes(2.88) == 173
    assert hours_to_minutes(0.5) == 30
    assert hours_to_minutes(1.0 / 120) == 1


def test_normal_scenario_scores(scoring):
    scored = {result.project_id: result for result in scoring.score_projects(build_scenario_projects(Scenario.NORMAL), CONTEXT)}

    assert {pid: result.weekly_minutes_requested for pid, result in scored.items()} == {
        "tessera": 600,
        "sonus": 660,
        "gailforce": 792,
        "knexplan": 449,
        "mentrogress": 379,
    }
    assert scored["tessera"].priority_score == 3.3167
    assert scored["gailforce"].priority_score == 4.1833
    assert scored["knexplan"].priority_score == 3.8


def test_projects_sorted_by_priority(scoring):
    scored = scoring.score_projects(build_scenario_projects(Scenario.NORMAL), CONTEXT)
    assert [result.project_id for result in scored] == ["gailforce", "knexplan", "mentrogress", "sonus", "tessera"]


def test_auto_tasks_have_stable_ids(scoring):
    project = ProjectSignals(
        id="p",
        name="P",
        base_weekly_hours=10,
        last_touched_days_ago=14,
        milestone_count=2,
        tomorrow_tasks_count=5,
        meeting_count=1,
    )

    result = scoring.score(project, CONTEXT)

    assert [task.id for task in result.auto_tasks] == [
        "ms_p_0",
        "ms_p_1",
        "tom_p_1",
        "tom_p_2",
        "tom_p_3",
        "mtg_p_0",
        "stale_p",
    ]
    assert result.auto_tasks[0].label == "Milestone: Milestone 1 (due 2026-10-20)"
    assert result.auto_tasks[3].label == "Tomorrow task bundle (2 items)"
    assert result.auto_tasks[4].label == "Tomorrow task cleanup"
    # 10h * 0.4 * 1.5 = 6h, clamped at 6h
    assert result.auto_tasks[-1].estimated_minutes == 360
    assert result.weekly_minutes_requested == 180 * 2 + 120 * 2 + 60 + 60 + 360


def test_project_without_milestones(scoring):
    project = ProjectSignals(id="idle", name="Idle", base_weekly_hours=2)
    result = scoring.score(project, CONTEXT)
    assert result.auto_tasks == []
    assert result.weekly_minutes_requested == 0
    assert result.priority_score == 0.6


def test_scenario_multiplier_scales_signals():
    light = {project.id: project for project in build_scenario_projects(Scenario.LIGHT)}
    heavy = {project.id: project for project in build_scenario_projects(Scenario.HEAVY)}

    assert light["gailforce"].milestone_count == 2
    assert light["gailforce"].base_weekly_hours == pytest.approx(7.2)
    assert heavy["gailforce"].tomorrow_tasks_count == 6


def test_priority_rows_seeded_from_scores(scoring):
    scored = scoring.score_projects(build_scenario_projects(Scenario.NORMAL), CONTEXT)
    rows = to_priority_rows(scored)

    assert rows[0].project_id == "gailforce"
    assert rows[0].weekly_hours == 13.2
    assert rows[0].label == "Gailforce Workspace & Control Panel"
    assert all(row.enabled for row in rows)
