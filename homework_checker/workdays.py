"""Working-day calendar resolution."""

import logging
from datetime import date, timedelta
from typing import Iterable, List

from .exceptions import InsufficientHistoryError

_LOGGER = logging.getLogger(__name__)


def period_start(day: date) -> date:
	"""Return the Monday of the week containing day."""
	return day - timedelta(days=day.weekday())


def resolve_period_starts(working_days: Iterable[date], today: date) -> List[date]:
	"""Resolve working days into distinct period starts, most recent first.

	Only days strictly before today are considered.

	Args:
		working_days: Dates on which the school operates, in any order
		today: Reference date of the report

	Returns:
		Descending list of period-start dates
	"""
	starts = {period_start(day) for day in working_days if day < today}
	return sorted(starts, reverse=True)


def ensure_history(period_starts: List[date], max_periods: int) -> None:
	"""Raise InsufficientHistoryError unless max_periods periods are available."""
	if len(period_starts) < max_periods:
		raise InsufficientHistoryError(f"fewer than {max_periods} periods available ({len(period_starts)} found)")
	_LOGGER.debug(f"{len(period_starts)} periods available, {max_periods} needed")
