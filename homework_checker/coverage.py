"""Coverage percentages and department ranking."""

from collections import OrderedDict
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .const import KEY_STAGE_3, KEY_STAGE_4, KEY_STAGE_5
from .models import ClassReport, CoverageStats, DepartmentSummary

KEY_STAGES: Dict[str, Callable[[int], bool]] = OrderedDict([
	(KEY_STAGE_3, lambda year: year <= 9),
	(KEY_STAGE_4, lambda year: 10 <= year <= 11),
	(KEY_STAGE_5, lambda year: year >= 12),
])


def mean_coverage(reports: Iterable[ClassReport]) -> Optional[float]:
	values = [r.covered for r in reports]
	if not values:
		return None
	return sum(values) / len(values)


def percentage(reports: Iterable[ClassReport]) -> Optional[int]:
	"""Percentage of classes with current homework, or None for no classes."""
	mean = mean_coverage(reports)
	if mean is None:
		return None
	return round(mean * 100)


def key_stage_of(year: int) -> Optional[str]:
	for name, matches in KEY_STAGES.items():
		if matches(year):
			return name
	return None


def key_stage_percentages(reports: Iterable[ClassReport]) -> Dict[str, Optional[int]]:
	reports = list(reports)
	return {
		name: percentage(r for r in reports if matches(r.cls.year))
		for name, matches in KEY_STAGES.items()
	}


def department_sort_key(reports: Iterable[ClassReport]) -> Tuple[float, int, int]:
	"""Sort key putting the worst and most persistent gaps first.

	Orders by mean coverage ascending, then streak-weighted sum descending,
	then number of covered classes descending.
	"""
	reports = list(reports)
	mean = mean_coverage(reports) or 0.0
	weighted = sum(r.signed_streak for r in reports)
	covered = sum(r.covered for r in reports)
	return (mean, -weighted, -covered)


def group_by_department(reports: Iterable[ClassReport]) -> Dict[str, List[ClassReport]]:
	"""Group reports by department, each ordered by year then class name."""
	groups: Dict[str, List[ClassReport]] = {}
	for report in sorted(reports, key=lambda r: (r.cls.year, r.cls.name)):
		groups.setdefault(report.cls.department_name, []).append(report)
	return groups


def rank_departments(reports: Iterable[ClassReport]) -> List[DepartmentSummary]:
	summaries = [
		DepartmentSummary(
			name=name,
			reports=tuple(group),
			percentage=percentage(group),
			sort_key=department_sort_key(group),
		)
		for name, group in group_by_department(reports).items()
	]
	return sorted(summaries, key=lambda s: (s.sort_key, s.name))


def compute_stats(reports: Iterable[ClassReport]) -> CoverageStats:
	reports = list(reports)
	return CoverageStats(
		overall=percentage(reports),
		key_stages=key_stage_percentages(reports),
		departments={name: percentage(group) for name, group in group_by_department(reports).items()},
	)
