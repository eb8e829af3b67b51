"""
Project prioritization strategies.

A strategy turns one project's workload signals into a weekly minute request
and a priority score. The layout engine never looks at these heuristics; it
only consumes the resulting ``WorkItem`` demand, so strategies can be swapped
freely.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

from tessera.core.logger import setup_logger
from tessera.models.enums import Scenario
from tessera.models.project import AutoTask, ProjectSignals, ScoredProject
from tessera.models.work_item import PriorityRow

logger = setup_logger(__name__)

SCENARIO_MULTIPLIERS = {
    Scenario.LIGHT: 0.6,
    Scenario.NORMAL: 1.0,
    Scenario.HEAVY: 1.4,
}

STALE_AFTER_DAYS = 5


def _clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def hours_to_minutes(hours: float) -> int:
    return _round_half_up(hours * 60)


@dataclass
class ScoringContext:
    """Week the scoring runs for."""

    week_start: date


class ScoringStrategy(ABC):
    """(project, context) -> requested minutes, plus a priority score for ordering."""

    @abstractmethod
    def score(self, project: ProjectSignals, context: ScoringContext) -> ScoredProject:
        pass

    def requested_minutes(self, project: ProjectSignals, context: ScoringContext) -> int:
        return self.score(project, context).weekly_minutes_requested

    def score_projects(self, projects: list[ProjectSignals], context: ScoringContext) -> list[ScoredProject]:
        """Score every project, highest priority first (stable for ties)."""
        scored = [self.score(project, context) for project in projects]
        scored.sort(key=lambda result: result.priority_score, reverse=True)
        return scored


class MilestoneStalenessScoring(ScoringStrategy):
    """
    Default heuristic.

    Weekly request = sum of auto tasks:
    - one task per milestone: 60% of the base hours split across milestones (1-6h)
    - tomorrow tasks bundled by two when there are more than three (~1h each)
    - 1h per meeting
    - a catch-up task when the project has not been touched for 5+ days

    Priority = milestone urgency, staleness, tomorrow backlog and meeting load,
    blended with fixed weights.
    """

    def score(self, project: ProjectSignals, context: ScoringContext) -> ScoredProject:
        tasks: list[AutoTask] = []
        tasks.extend(self._milestone_tasks(project, context))
        tasks.extend(self._tomorrow_tasks(project))
        tasks.extend(self._meeting_tasks(project, context))
        catch_up = self._staleness_task(project)
        if catch_up:
            tasks.append(catch_up)

        minutes = sum(task.estimated_minutes for task in tasks if task.included)

        milestone_urgency = 1.0 if project.milestone_count > 0 else 0.3
        staleness = _clamp(project.last_touched_days_ago / 10, 0, 1.5)
        tomorrow_weight = _clamp(project.tomorrow_tasks_count / 4, 0, 1.5)
        meeting_weight = _clamp(project.meeting_count / 3, 0, 1.0)
        priority = (
            milestone_urgency * 2.0
            + staleness * 1.5
            + tomorrow_weight * 1.2
            + meeting_weight * 0.8
        )

        return ScoredProject(
            project_id=project.id,
            project_name=project.name,
            company_name=project.company,
            priority_score=round(priority, 4),
            weekly_minutes_requested=minutes,
            auto_tasks=tasks,
        )

    @staticmethod
    def _milestone_tasks(project: ProjectSignals, context: ScoringContext) -> list[AutoTask]:
        count = project.milestone_count
        hours = _clamp(project.base_weekly_hours / (count or 1) * 0.6, 1, 6)
        tasks = []
        for index in range(count):
            due = context.week_start + timedelta(days=int(_clamp(1 + index * 2, 0, 4)))
            tasks.append(
                AutoTask(
                    id=f"ms_{project.id}_{index}",
                    label=f"Milestone: Milestone {index + 1} (due {due.isoformat()})",
                    estimated_minutes=hours_to_minutes(hours),
                )
            )
        return tasks

    @staticmethod
    def _tomorrow_tasks(project: ProjectSignals) -> list[AutoTask]:
        remaining = project.tomorrow_tasks_count
        chunk_size = 2 if remaining > 3 else 1
        tasks = []
        chunk_index = 1
        while remaining > 0:
            chunk = min(chunk_size, remaining)
            label = "Tomorrow task cleanup" if chunk == 1 else f"Tomorrow task bundle ({chunk} items)"
            tasks.append(
                AutoTask(
                    id=f"tom_{project.id}_{chunk_index}",
                    label=label,
                    estimated_minutes=hours_to_minutes(_clamp(chunk * 1.0, 0.5, 4)),
                )
            )
            remaining -= chunk
            chunk_index += 1
        return tasks

    @staticmethod
    def _meeting_tasks(project: ProjectSignals, context: ScoringContext) -> list[AutoTask]:
        tasks = []
        for index in range(project.meeting_count):
            day = context.week_start + timedelta(days=int(_clamp(1 + index * 2, 0, 4)))
            tasks.append(
                AutoTask(
                    id=f"mtg_{project.id}_{index}",
                    label=f"Meeting: Sync {index + 1} ({day.isoformat()})",
                    estimated_minutes=60,
                )
            )
        return tasks

    @staticmethod
    def _staleness_task(project: ProjectSignals) -> Optional[AutoTask]:
        days = project.last_touched_days_ago
        if days < STALE_AFTER_DAYS:
            return None
        if days >= 14:
            intensity = 1.5
        elif days >= 7:
            intensity = 1.2
        else:
            intensity = 1.0
        hours = _clamp(project.base_weekly_hours * 0.4 * intensity, 1, 6)
        return AutoTask(
            id=f"stale_{project.id}",
            label=f"Catch-up: project hasn't been touched in {days} days",
            estimated_minutes=hours_to_minutes(hours),
        )


# ===========================================
# Scenario projects
# ===========================================

_BASE_PROJECTS = [
    ProjectSignals(
        id="tessera",
        name="Tessera Weekly Planner",
        company="BauerVision",
        base_weekly_hours=10,
        last_touched_days_ago=1,
        milestone_count=2,
        tomorrow_tasks_count=3,
        meeting_count=1,
    ),
    ProjectSignals(
        id="sonus",
        name="Sonus Web Rebuild",
        company="IBM R&D",
        base_weekly_hours=8,
        last_touched_days_ago=5,
        milestone_count=2,
        tomorrow_tasks_count=2,
        meeting_count=1,
    ),
    ProjectSignals(
        id="gailforce",
        name="Gailforce Workspace & Control Panel",
        company="Knexus / DLA",
        base_weekly_hours=12,
        last_touched_days_ago=3,
        milestone_count=3,
        tomorrow_tasks_count=4,
        meeting_count=2,
    ),
    ProjectSignals(
        id="knexplan",
        name="KnexPlan Route Visualizer",
        company="Knexus",
        base_weekly_hours=6,
        last_touched_days_ago=10,
        milestone_count=1,
        tomorrow_tasks_count=1,
        meeting_count=0,
    ),
    ProjectSignals(
        id="mentrogress",
        name="Mentrogress Session Engine",
        company="BauerVision",
        base_weekly_hours=4,
        last_touched_days_ago=7,
        milestone_count=1,
        tomorrow_tasks_count=2,
        meeting_count=0,
    ),
]


def build_scenario_projects(scenario: Scenario) -> list[ProjectSignals]:
    """Sample project set scaled by the scenario multiplier (hours and counts)."""
    mult = SCENARIO_MULTIPLIERS[scenario]
    return [
        project.model_copy(
            update={
                "base_weekly_hours": project.base_weekly_hours * mult,
                "milestone_count": max(0, _round_half_up(project.milestone_count * mult)),
                "tomorrow_tasks_count": max(0, _round_half_up(project.tomorrow_tasks_count * mult)),
                "meeting_count": max(0, _round_half_up(project.meeting_count * mult)),
            }
        )
        for project in _BASE_PROJECTS
    ]


def to_priority_rows(scored: list[ScoredProject]) -> list[PriorityRow]:
    """Seed plan priorities from scoring results (weekly hours, two decimals)."""
    return [
        PriorityRow(
            project_id=result.project_id,
            enabled=True,
            weekly_hours=round(result.weekly_minutes_requested / 60, 2),
            label=result.project_name,
        )
        for result in scored
    ]
