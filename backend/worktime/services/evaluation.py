"""
Per-project evaluation over the completed-session ledger.

Window metrics (total time, users, session counts, breakdown) only look at
sessions inside the requested window. Cost, progress and variance always
use the project's full history.
"""

import logging
import math
from collections import defaultdict
from datetime import date, datetime, time, timezone
from typing import Dict, Iterable, List, Optional, Union

from pydantic import BaseModel
from sqlalchemy.orm import Session

from worktime.models.completed_session import CompletedSession
from worktime.models.project import Project
from worktime.schemas.evaluation import (
    EvaluationReport,
    ProjectEvaluation,
    ProjectEvaluationDetail,
    UserBreakdown,
)
from worktime.schemas.session import CompletedSessionOut
from worktime.utils.timekeeping import as_utc

log = logging.getLogger(__name__)

Bound = Union[date, datetime, None]


class SessionWindow(BaseModel):
    """Inclusive ``[start, end]`` range; a missing bound is unbounded."""

    start: Optional[datetime] = None
    end: Optional[datetime] = None

    @classmethod
    def from_bounds(cls, start: Bound = None, end: Bound = None) -> "SessionWindow":
        """Plain dates cover whole UTC days: ``start`` from 00:00, ``end`` until 23:59:59.999999."""
        return cls(start=_lower_bound(start), end=_upper_bound(end))

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None

    def contains(self, moment: datetime) -> bool:
        moment = as_utc(moment)
        if self.start is not None and moment < self.start:
            return False
        if self.end is not None and moment > self.end:
            return False
        return True


def _lower_bound(value: Bound) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return datetime.combine(value, time.min, tzinfo=timezone.utc)


def _upper_bound(value: Bound) -> Optional[datetime]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return as_utc(value)
    return datetime.combine(value, time.max, tzinfo=timezone.utc)


def _as_float(value) -> Optional[float]:
    return None if value is None else float(value)


def _variance_status(variance: Optional[float]) -> Optional[str]:
    if variance is None:
        return None
    if math.isclose(variance, 0.0, abs_tol=1e-9):
        return "on_plan"
    return "over" if variance > 0 else "under"


def evaluate_project(project, lifetime_sessions: List, window: SessionWindow) -> ProjectEvaluation:
    """Metrics for one project given all of its completed sessions."""
    in_window = [s for s in lifetime_sessions if window.contains(s.timestamp)]

    total_time = sum(s.duration_minutes for s in in_window)
    session_count = len(in_window)

    breakdown: Dict[str, UserBreakdown] = {}
    for s in sorted(in_window, key=lambda s: as_utc(s.timestamp)):
        entry = breakdown.setdefault(s.employee_id, UserBreakdown(name=s.employee_name))
        entry.name = s.employee_name  # latest snapshot wins
        entry.total_time += s.duration_minutes
        entry.sessions += 1

    budget = _as_float(project.budget) or 0.0
    estimated = _as_float(project.estimated_hours)
    lifetime_hours = sum(s.duration_minutes for s in lifetime_sessions) / 60

    cost_per_hour = budget / lifetime_hours if lifetime_hours > 0 else 0.0
    if estimated:
        time_variance = lifetime_hours - estimated
        progress = lifetime_hours / estimated * 100
    else:
        time_variance = None
        progress = None

    return ProjectEvaluation(
        project_id=project.id,
        name=project.name,
        budget=budget,
        deadline=project.deadline,
        closed=bool(project.closed),
        estimated_hours=estimated,
        cost_center_id=project.cost_center_id,
        total_time=total_time,
        unique_users=len(breakdown),
        session_count=session_count,
        average_session_minutes=total_time / session_count if session_count else 0.0,
        user_breakdown=breakdown,
        total_lifetime_hours=lifetime_hours,
        cost_per_hour=cost_per_hour,
        work_progress_percentage=progress,
        progress_display_percentage=None if progress is None else min(100.0, max(0.0, progress)),
        time_variance=time_variance,
        variance_status=_variance_status(time_variance),
    )


def evaluate_projects(projects: Iterable, sessions: Iterable, window: Optional[SessionWindow] = None) -> EvaluationReport:
    """
    Evaluate every project against the ledger.

    With an open window every project is returned, including ones without
    sessions. With a bounded window, projects that have no session inside
    it are left out of the report.
    """
    window = window or SessionWindow()

    by_project: Dict[str, List] = defaultdict(list)
    for s in sessions:
        by_project[s.project_id].append(s)

    results: List[ProjectEvaluation] = []
    for project in projects:
        evaluation = evaluate_project(project, by_project.get(project.id, []), window)
        if not window.is_open and evaluation.session_count == 0:
            continue
        results.append(evaluation)

    return EvaluationReport(
        start=window.start,
        end=window.end,
        windowed=not window.is_open,
        total_tracked_minutes=sum(p.total_time for p in results),
        projects=results,
    )


class EvaluationService:
    """Loads projects and sessions for one evaluation call and evaluates them."""

    def __init__(self, db: Session):
        self.db = db

    def _projects(self, cost_center_ids: Optional[Iterable[int]] = None) -> List[Project]:
        query = self.db.query(Project)
        if cost_center_ids is not None:
            query = query.filter(Project.cost_center_id.in_(list(cost_center_ids)))
        return query.order_by(Project.name).all()

    def _sessions(self, project_ids: List[str]) -> List[CompletedSession]:
        if not project_ids:
            return []
        return self.db.query(CompletedSession).filter(CompletedSession.project_id.in_(project_ids)).all()

    def report(self, start: Bound = None, end: Bound = None, cost_center_ids: Optional[Iterable[int]] = None) -> EvaluationReport:
        window = SessionWindow.from_bounds(start, end)
        projects = self._projects(cost_center_ids)
        sessions = self._sessions([p.id for p in projects])
        report = evaluate_projects(projects, sessions, window)
        log.debug(f"Evaluated {len(report.projects)} of {len(projects)} projects (windowed={report.windowed})")
        return report

    def project_detail(self, project_id: str, start: Bound = None, end: Bound = None) -> Optional[ProjectEvaluationDetail]:
        """Evaluation of one project plus its in-window sessions, newest first; None if unknown."""
        project = self.db.get(Project, project_id)
        if project is None:
            return None
        window = SessionWindow.from_bounds(start, end)
        sessions = self._sessions([project.id])
        evaluation = evaluate_project(project, sessions, window)
        in_window = sorted(
            (s for s in sessions if window.contains(s.timestamp)),
            key=lambda s: (as_utc(s.timestamp), s.id),
            reverse=True,
        )
        return ProjectEvaluationDetail(
            **evaluation.model_dump(),
            sessions=[CompletedSessionOut.model_validate(s) for s in in_window],
        )
