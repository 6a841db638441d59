"""
Project progress computation.

Pure functions over already-fetched counts and dates:
- actual progress: completed share of tickets
- planned progress: elapsed share of the project window
- deviation: actual minus planned, classified as on track / at risk / delayed

Nothing here touches the database, so dashboards, widgets and the external
dashboard all share the same arithmetic.
"""

from dataclasses import asdict, dataclass
from datetime import date
from typing import Optional

# Status names counted as "done" by the project status page
COMPLETED_STATUS_NAMES = ('Completed', 'Done', 'Closed')

# Status names counted as "in progress" by the external dashboard
IN_PROGRESS_STATUS_NAMES = ('In Progress', 'Doing')

# Percentage points behind plan before a project counts as delayed
RISK_THRESHOLD = -10


class ProgressStatus:
    ON_TRACK = 'ontrack'
    RISK = 'risk'
    DELAY = 'delay'

    CHOICES = (ON_TRACK, RISK, DELAY)


@dataclass(frozen=True)
class ProjectProgress:
    actual: float
    planned: float
    deviation: float
    status: str

    def as_dict(self):
        return asdict(self)


def actual_progress(completed: int, total: int) -> float:
    """Completed share of ``total`` in percent, rounded to 1 decimal."""
    if total <= 0:
        return 0
    return round(completed / total * 100, 1)


def planned_progress(start: date, end: date, today: date) -> float:
    """
    Elapsed share of the ``start``..``end`` window in percent.

    Before the window it is 0, from the end date on it is 100.
    """
    if today >= end:
        return 100
    if today <= start:
        return 0
    total_days = (end - start).days
    if total_days <= 0:
        return 0
    elapsed = (today - start).days
    return round(elapsed / total_days * 100, 1)


def classify_deviation(deviation: float) -> str:
    if deviation >= 0:
        return ProgressStatus.ON_TRACK
    if deviation >= RISK_THRESHOLD:
        return ProgressStatus.RISK
    return ProgressStatus.DELAY


def compute_progress(
    total: int,
    completed: int,
    start: Optional[date],
    end: Optional[date],
    today: date,
) -> ProjectProgress:
    """
    Combine actual and planned progress for one project.

    Without a complete timeline the plan is assumed to match reality.
    """
    actual = actual_progress(completed, total)
    if start is not None and end is not None:
        planned = planned_progress(start, end, today)
    else:
        planned = actual
    deviation = round(actual - planned, 1)
    return ProjectProgress(
        actual=actual,
        planned=planned,
        deviation=deviation,
        status=classify_deviation(deviation),
    )


def status_position_progress(position: Optional[int], count: int) -> int:
    """
    Progress implied by a status' position in an ordered workflow.

    The first of four columns is 25%, the last 100%. Unknown positions and
    empty workflows give 0.
    """
    if position is None or count <= 0 or position < 0:
        return 0
    progress = (position + 1) / count * 100
    return int(round(max(0, min(100, progress))))
