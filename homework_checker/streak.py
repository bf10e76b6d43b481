"""Streaks of consecutive covered or uncovered periods."""

import logging
from datetime import date
from typing import Iterable, List, Optional

from .models import Assignment, ClassContext, ClassReport

_LOGGER = logging.getLogger(__name__)


def any_due_between(assignments: Iterable[Assignment], start: date, end: Optional[date] = None) -> bool:
	"""Check for an assignment due on or after start and strictly before end."""
	return any(a.due_date >= start and (end is None or a.due_date < end) for a in assignments)


def compute_streak(assignments: List[Assignment], period_starts: List[date], periods: int) -> int:
	"""Count consecutive check periods sharing the current coverage state.

	The current period is the one starting at period_starts[periods - 1].
	Earlier periods of the same length are examined one at a time until
	one has the opposite state or the calendar runs out.

	Args:
		assignments: All retained assignments for the class
		period_starts: Descending period starts
		periods: The class's period length

	Returns:
		Streak length, at least 1
	"""
	cursor = periods - 1
	has_current = any_due_between(assignments, period_starts[cursor])

	streak = 1
	while cursor + periods < len(period_starts):
		previous = any_due_between(assignments, period_starts[cursor + periods], period_starts[cursor])
		if previous != has_current:
			break
		streak += 1
		cursor += periods
	return streak


def build_class_report(cls: ClassContext, period_starts: List[date]) -> ClassReport:
	"""Derive the coverage report for a class without modifying it."""
	current = tuple(a for a in cls.assignments if a.due_date >= cls.start_date)
	streak = compute_streak(cls.assignments, period_starts, cls.periods)
	_LOGGER.debug(f"{cls.name}: {len(current)} current assignments, streak {streak}")
	return ClassReport(
		cls=cls,
		current_assignments=current,
		has_current_homework=bool(current),
		streak=streak,
	)
