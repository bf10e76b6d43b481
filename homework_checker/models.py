"""Data models for homework checker entities."""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple


@dataclass(frozen=True)
class Assignment:
	"""A piece of homework set for a class."""
	title: str
	instructions: str
	due_date: date

	def __str__(self) -> str:
		return f"{self.title} (due {self.due_date.strftime('%Y-%m-%d')})"


@dataclass(frozen=True)
class PeriodOverride:
	"""Policy override for one (year, subject) pair.

	Either field may be left unset: an override can change only the
	period length, only the exclusion phrase, or both.
	"""
	year: int
	subject: str
	periods: Optional[int] = None
	exclude_text: Optional[str] = None


@dataclass(frozen=True)
class Department:
	"""A department and the subject codes it owns."""
	name: str
	curriculum_leader: Optional[str]
	subjects: List[str]


@dataclass(frozen=True)
class Teacher:
	"""A member of staff who can receive a report."""
	code: str
	first: str
	email: str


@dataclass(frozen=True)
class RosterClass:
	"""A class as listed by the remote roster."""
	id: str
	name: str


@dataclass
class School:
	"""Settings and reference data for one institution."""
	code: str
	name: str
	id: str
	default_periods: int
	from_email: Optional[str] = None
	reply_to: Optional[str] = None
	class_filter: Optional[str] = None
	senior_team: List[str] = field(default_factory=list)
	overrides: List[PeriodOverride] = field(default_factory=list)
	departments: List[Department] = field(default_factory=list)
	teachers_by_code: Dict[str, Teacher] = field(default_factory=dict)
	working_days: List[date] = field(default_factory=list)
	class_teacher_pairs: List[Tuple[str, str]] = field(default_factory=list)


@dataclass
class ClassContext:
	"""A class being checked in one report run."""
	id: str
	name: str
	year: int
	subject: str
	teacher_codes: List[str]
	department_name: str
	periods: int
	start_date: date
	has_custom_periods: bool = False
	exclude_text: Optional[str] = None
	assignments: List[Assignment] = field(default_factory=list)

	def __str__(self) -> str:
		return f"{self.name} ({', '.join(self.teacher_codes)})"

	@property
	def label(self) -> str:
		"""Class name, marked with its period length when that is not the default."""
		if self.has_custom_periods:
			return f"{self} [{self.periods} periods]"
		return str(self)


@dataclass(frozen=True)
class ClassReport:
	"""Derived coverage state for a class."""
	cls: ClassContext
	current_assignments: Tuple[Assignment, ...]
	has_current_homework: bool
	streak: int

	@property
	def covered(self) -> int:
		"""1 if the class is covered, otherwise 0."""
		return 1 if self.has_current_homework else 0

	@property
	def signed_streak(self) -> int:
		"""Streak counted positively when covered and negatively when not."""
		return self.streak if self.has_current_homework else -self.streak


@dataclass(frozen=True)
class DepartmentSummary:
	"""Coverage for one department, ready for ranking."""
	name: str
	reports: Tuple[ClassReport, ...]
	percentage: Optional[int]
	sort_key: Tuple[float, int, int]


@dataclass(frozen=True)
class CoverageStats:
	"""Percentage of classes covered at several groupings."""
	overall: Optional[int]
	key_stages: Dict[str, Optional[int]]
	departments: Dict[str, Optional[int]]


@dataclass
class FetchSummary:
	"""Outcome of a batched assignment fetch."""
	batches: int = 0
	resubmitted: int = 0
	failed: Dict[str, int] = field(default_factory=dict)


@dataclass
class SchoolReport:
	"""Everything the presentation layer needs for one school."""
	school: School
	start_date: date
	end_date: date
	reports: List[ClassReport]
	stats: CoverageStats
	departments: List[DepartmentSummary]
	fetch: FetchSummary

	@property
	def title(self) -> str:
		return f"Homework due {self.start_date.day} {self.start_date.strftime('%b')} to {self.end_date.day} {self.end_date.strftime('%b')}"

	def reports_for_teacher(self, code: str) -> List[ClassReport]:
		"""Reports for classes taught by a teacher, ordered by year then name."""
		matches = [r for r in self.reports if code in r.cls.teacher_codes]
		return sorted(matches, key=lambda r: (r.cls.year, r.cls.name))
