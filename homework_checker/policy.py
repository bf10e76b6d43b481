"""Check-period policy for classes."""

import logging
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .exceptions import HomeworkConfigError
from .models import PeriodOverride

_LOGGER = logging.getLogger(__name__)


class PeriodPolicy:
	"""Resolve period lengths and exclusion phrases per (year, subject).

	A period length of zero means the class is never checked.
	"""

	def __init__(self, default_periods: int, overrides: Optional[Iterable[PeriodOverride]] = None):
		self.default_periods = default_periods
		self._overrides: Dict[Tuple[int, str], PeriodOverride] = {}
		for override in overrides or []:
			if override.periods is not None and override.periods < 0:
				raise HomeworkConfigError(f"Negative period length for year {override.year} {override.subject}")
			key = (override.year, override.subject)
			# First matching override wins
			if key in self._overrides:
				_LOGGER.warning(f"Ignoring duplicate override for year {override.year} {override.subject}")
				continue
			self._overrides[key] = override

	def override_for(self, year: int, subject: str) -> Optional[PeriodOverride]:
		return self._overrides.get((year, subject))

	def has_custom_periods(self, year: int, subject: str) -> bool:
		override = self.override_for(year, subject)
		return override is not None and override.periods is not None

	def period_length(self, year: int, subject: str) -> int:
		"""Number of periods back a class's window starts; 0 to skip the class."""
		override = self.override_for(year, subject)
		if override is not None and override.periods is not None:
			return override.periods
		return self.default_periods

	def is_excluded(self, year: int, subject: str) -> bool:
		return self.period_length(year, subject) == 0

	def exclusion_phrase(self, year: int, subject: str) -> Optional[str]:
		override = self.override_for(year, subject)
		if override is None or not override.exclude_text:
			return None
		return override.exclude_text

	@property
	def max_period_length(self) -> int:
		"""Longest period length configured anywhere in the policy."""
		lengths = [o.periods for o in self._overrides.values() if o.periods is not None]
		return max([self.default_periods] + lengths)

	@staticmethod
	def window_start(period_starts: List[date], periods: int) -> date:
		"""Return the start of the check window for a period length.

		Args:
			period_starts: Descending period starts from resolve_period_starts
			periods: Period length, at least 1

		Returns:
			The period start at index periods - 1
		"""
		if periods < 1:
			raise ValueError(f"Period length must be at least 1, got {periods}")
		return period_starts[periods - 1]
