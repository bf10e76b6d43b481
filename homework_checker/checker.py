"""Per-school homework coverage checks."""

import logging
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional

from .client import GraphClient
from .config import Settings, discover_school_codes, load_school
from .coverage import compute_stats, rank_departments
from .exceptions import ConfigurationGapError, HomeworkCheckerError, HomeworkConfigError, NotAReportingDayError
from .models import School, SchoolReport
from .policy import PeriodPolicy
from .roster import build_classes, rank_teacher_codes
from .streak import build_class_report
from .workdays import ensure_history, resolve_period_starts

_LOGGER = logging.getLogger(__name__)


def find_missing_teachers(school: School, teacher_codes_by_class: Dict[str, List[str]]) -> List[str]:
	"""Teacher codes referenced by the school that have no teacher record."""
	referenced: List[Optional[str]] = [code for codes in teacher_codes_by_class.values() for code in codes]
	referenced += [d.curriculum_leader for d in school.departments]
	referenced += school.senior_team
	referenced.append(school.reply_to)
	return [code for code in dict.fromkeys(referenced) if code and code not in school.teachers_by_code]


class HomeworkChecker:
	"""Run the coverage checks for one or more schools."""

	def __init__(self, client: GraphClient):
		self.client = client

	async def check_school(self, school: School, today: date) -> SchoolReport:
		"""Build the coverage report for one school.

		Args:
			school: School settings and reference data
			today: Reference date of the report

		Returns:
			SchoolReport for the presentation layer

		Raises:
			ConfigurationGapError: If referenced teachers are missing
			NotAReportingDayError: If today is not a working day
			InsufficientHistoryError: If the calendar is too short for the policy
		"""
		teacher_codes_by_class = rank_teacher_codes(school.class_teacher_pairs)
		missing = find_missing_teachers(school, teacher_codes_by_class)
		if missing:
			raise ConfigurationGapError(missing)

		if today not in school.working_days:
			raise NotAReportingDayError("not a working day")

		if school.default_periods < 1:
			raise HomeworkConfigError(f"default period length must be at least 1, got {school.default_periods}")

		policy = PeriodPolicy(school.default_periods, school.overrides)
		period_starts = resolve_period_starts(school.working_days, today)
		ensure_history(period_starts, policy.max_period_length)

		end_date = today - timedelta(days=1)
		start_date = policy.window_start(period_starts, school.default_periods)

		_LOGGER.info(f"{school.code} - Retrieving classes...")
		roster = await self.client.list_classes(school.id, school.class_filter)
		classes = build_classes(roster, teacher_codes_by_class, school.departments, policy, period_starts, today)

		_LOGGER.info(f"{school.code} - Retrieving homework for {len(classes)} classes...")
		fetch = await self.client.fetch_assignments(classes, end_date)
		if fetch.failed:
			_LOGGER.warning(f"{school.code} - No homework retrieved for {len(fetch.failed)} classes")

		reports = [build_class_report(cls, period_starts) for cls in classes]
		return SchoolReport(
			school=school,
			start_date=start_date,
			end_date=end_date,
			reports=reports,
			stats=compute_stats(reports),
			departments=rank_departments(reports),
			fetch=fetch,
		)

	async def run(self, schools: Iterable[School], today: date) -> Dict[str, SchoolReport]:
		"""Check schools one after another.

		A school that cannot be checked is logged and skipped; the
		remaining schools are still processed.
		"""
		results: Dict[str, SchoolReport] = {}
		for school in schools:
			try:
				report = await self.check_school(school, today)
			except NotAReportingDayError as e:
				_LOGGER.info(f"{school.code} - Skipped: {e}.")
				continue
			except HomeworkCheckerError as e:
				_LOGGER.error(f"{school.code} - Skipped: {e}.")
				continue
			_LOGGER.info(f"{school.code} - {report.title}: {report.stats.overall}% of {len(report.reports)} classes")
			results[school.code] = report
		return results


def load_schools(settings: Settings) -> List[School]:
	"""Load every school in the config directory, skipping broken ones."""
	schools = []
	for code in discover_school_codes(settings.config_dir):
		try:
			schools.append(load_school(settings.config_dir, code))
		except HomeworkConfigError as e:
			_LOGGER.error(f"{code} - Skipped: {e}")
	return schools


async def check_all(settings: Settings, today: Optional[date] = None) -> Dict[str, SchoolReport]:
	"""Check every configured school with a fresh Graph client."""
	today = today or settings.today or date.today()
	schools = load_schools(settings)
	async with GraphClient(settings.access_token) as client:
		return await HomeworkChecker(client).run(schools, today)
