"""Turning roster entries into classes to check."""

import logging
import re
from collections import Counter
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from .const import SUMMER_LEAVER_YEARS, SUMMER_MONTHS
from .models import ClassContext, Department, RosterClass
from .policy import PeriodPolicy

_LOGGER = logging.getLogger(__name__)

YEAR_RE = re.compile(r"^(\d+)")


@dataclass(frozen=True)
class ParsedClassName:
	"""Year and subject extracted from a class display name."""
	name: str
	year: int
	subject: str


def parse_class_name(external_name: str) -> Optional[ParsedClassName]:
	"""Parse names such as 'Maths 10_Ma1' into ('10/Ma1', 10, 'Ma').

	Returns:
		ParsedClassName, or None if the name does not follow the convention
	"""
	name = external_name.strip().split(" ")[-1].replace("_", "/")
	match = YEAR_RE.match(name)
	if not match:
		return None
	slash = name.find("/")
	if slash < 0 or len(name) < slash + 3:
		return None
	return ParsedClassName(name=name, year=int(match.group(1)), subject=name[slash + 1:slash + 3])


def rank_teacher_codes(pairs: Iterable[Tuple[str, str]]) -> Dict[str, List[str]]:
	"""Map each class to its teacher codes, most frequent first.

	Identical (class, teacher) pairs are counted; ties are broken by
	teacher code. Blank codes are ignored.
	"""
	counts = Counter((cls.strip(), code.strip()) for cls, code in pairs if code and code.strip())
	ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0][1]))
	codes_by_class: Dict[str, List[str]] = {}
	for (cls, code), _ in ranked:
		codes_by_class.setdefault(cls, []).append(code)
	return codes_by_class


def department_for(subject: str, departments: Iterable[Department]) -> Optional[Department]:
	for department in departments:
		if subject in department.subjects:
			return department
	return None


def is_summer_leaver(year: int, today: date) -> bool:
	return today.month in SUMMER_MONTHS and year in SUMMER_LEAVER_YEARS


def build_classes(
	roster: Iterable[RosterClass],
	teacher_codes_by_class: Dict[str, List[str]],
	departments: List[Department],
	policy: PeriodPolicy,
	period_starts: List[date],
	today: date,
) -> List[ClassContext]:
	"""Build the classes to check from the remote roster.

	Classes are skipped when their name cannot be parsed, when they have
	no teacher or department, when they have left for the summer, or when
	their period length is zero.
	"""
	classes: List[ClassContext] = []
	for entry in roster:
		parsed = parse_class_name(entry.name)
		if parsed is None:
			_LOGGER.debug(f"Skipping '{entry.name}': unrecognised name")
			continue
		if is_summer_leaver(parsed.year, today):
			continue
		teacher_codes = teacher_codes_by_class.get(parsed.name, [])
		if not teacher_codes:
			_LOGGER.debug(f"Skipping {parsed.name}: no teacher")
			continue
		department = department_for(parsed.subject, departments)
		if department is None:
			_LOGGER.debug(f"Skipping {parsed.name}: no department for {parsed.subject}")
			continue
		if policy.is_excluded(parsed.year, parsed.subject):
			continue
		periods = policy.period_length(parsed.year, parsed.subject)

		classes.append(ClassContext(
			id=entry.id,
			name=parsed.name,
			year=parsed.year,
			subject=parsed.subject,
			teacher_codes=list(teacher_codes),
			department_name=department.name,
			periods=periods,
			start_date=policy.window_start(period_starts, periods),
			has_custom_periods=policy.has_custom_periods(parsed.year, parsed.subject),
			exclude_text=policy.exclusion_phrase(parsed.year, parsed.subject),
		))
	return classes
