"""Configuration loading for the homework checker."""

import csv
import io
import json
import logging
import os
from dataclasses import dataclass
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional

from dotenv import load_dotenv

from .const import (
	CLASSES_SUFFIX, DAYS_SUFFIX, DEFAULT_CONFIG_DIR, DEPARTMENTS_SUFFIX, ENV_ACCESS_TOKEN,
	ENV_CONFIG_DIR, ENV_LOG_LEVEL, ENV_TODAY, SETTINGS_SUFFIX, TEACHERS_SUFFIX,
)
from .exceptions import HomeworkConfigError
from .models import Department, PeriodOverride, School, Teacher

_LOGGER = logging.getLogger(__name__)


@dataclass
class Settings:
	"""Process-wide settings read from the environment."""
	access_token: str
	config_dir: Path
	today: Optional[date] = None
	log_level: str = "INFO"


def load_settings(env_file: Optional[Path] = None) -> Settings:
	"""Load settings from the environment, reading a .env file if present."""
	load_dotenv(env_file)

	access_token = os.environ.get(ENV_ACCESS_TOKEN, "")
	if not access_token:
		raise HomeworkConfigError(f"{ENV_ACCESS_TOKEN} is not set")

	today = None
	if os.environ.get(ENV_TODAY):
		try:
			today = date.fromisoformat(os.environ[ENV_TODAY])
		except ValueError as e:
			raise HomeworkConfigError(f"Invalid {ENV_TODAY}: {os.environ[ENV_TODAY]!r}") from e

	return Settings(
		access_token=access_token,
		config_dir=Path(os.environ.get(ENV_CONFIG_DIR, DEFAULT_CONFIG_DIR)),
		today=today,
		log_level=os.environ.get(ENV_LOG_LEVEL, "INFO").upper(),
	)


def _rows(text: str) -> List[List[str]]:
	"""CSV rows with the header skipped and blank lines dropped."""
	rows = list(csv.reader(io.StringIO(text.strip())))
	return [[cell.strip() for cell in row] for row in rows[1:] if any(cell.strip() for cell in row)]


def _read(config_dir: Path, code: str, suffix: str) -> str:
	"""Read a school file, matching its name without regard to case."""
	name = f"{code}{suffix}"
	try:
		path = next((p for p in config_dir.iterdir() if p.name.lower() == name.lower()), config_dir / name)
		return path.read_text(encoding="utf-8-sig")
	except OSError as e:
		raise HomeworkConfigError(f"Cannot read {name}: {e}") from e


def discover_school_codes(config_dir: Path) -> List[str]:
	"""List school codes with a settings file in config_dir."""
	if not config_dir.is_dir():
		raise HomeworkConfigError(f"Config directory {config_dir} does not exist")
	codes = {p.name[:-len(SETTINGS_SUFFIX)].upper() for p in config_dir.iterdir() if p.name.lower().endswith(SETTINGS_SUFFIX)}
	return sorted(codes)


def parse_overrides(items: Any) -> List[PeriodOverride]:
	overrides = []
	for item in items or []:
		if not isinstance(item, dict):
			raise HomeworkConfigError(f"Invalid custom period entry: {item!r}")
		periods = item.get("periods")
		if periods is not None and int(periods) < 0:
			raise HomeworkConfigError(f"Negative period length for year {item.get('year')} {item.get('subject')}: {periods}")
		overrides.append(PeriodOverride(
			year=int(item["year"]),
			subject=str(item["subject"]),
			periods=int(periods) if periods is not None else None,
			exclude_text=item.get("excludeText") or None,
		))
	return overrides


def parse_working_days(text: str) -> List[date]:
	try:
		return [date.fromisoformat(row[0]) for row in _rows(text)]
	except ValueError as e:
		raise HomeworkConfigError(f"Invalid working day: {e}") from e


def parse_departments(text: str) -> List[Department]:
	departments = []
	for row in _rows(text):
		if len(row) < 3:
			raise HomeworkConfigError(f"Invalid department row: {row}")
		subjects = [s.strip() for s in row[2].split(";") if s.strip()]
		departments.append(Department(name=row[0], curriculum_leader=row[1] or None, subjects=subjects))
	return departments


def parse_teachers(text: str) -> Dict[str, Teacher]:
	teachers = {}
	for row in _rows(text):
		if len(row) < 3:
			raise HomeworkConfigError(f"Invalid teacher row: {row}")
		teachers[row[0]] = Teacher(code=row[0], first=row[1], email=row[2])
	return teachers


def load_school(config_dir: Path, code: str) -> School:
	"""Load one school's settings and reference files.

	Args:
		config_dir: Directory holding the school files
		code: School code used as the file prefix

	Returns:
		School populated with policy, departments, teachers and calendar

	Raises:
		HomeworkConfigError: If a file is missing or cannot be parsed
	"""
	try:
		data: Dict[str, Any] = json.loads(_read(config_dir, code, SETTINGS_SUFFIX))
	except json.JSONDecodeError as e:
		raise HomeworkConfigError(f"{code} settings are not valid JSON: {e}") from e

	try:
		school = School(
			code=code,
			name=data["name"],
			id=data["id"],
			default_periods=int(data["defaultPeriods"]),
			from_email=data.get("fromEmail"),
			reply_to=data.get("replyTo"),
			class_filter=data.get("classFilter"),
			senior_team=list(data.get("seniorTeam") or []),
			overrides=parse_overrides(data.get("customPeriods")),
		)
	except (AttributeError, KeyError, TypeError, ValueError) as e:
		raise HomeworkConfigError(f"{code} settings are incomplete: {e}") from e

	school.class_teacher_pairs = [(row[0], row[1] if len(row) > 1 else "") for row in _rows(_read(config_dir, code, CLASSES_SUFFIX))]
	school.working_days = parse_working_days(_read(config_dir, code, DAYS_SUFFIX))
	school.departments = parse_departments(_read(config_dir, code, DEPARTMENTS_SUFFIX))
	school.teachers_by_code = parse_teachers(_read(config_dir, code, TEACHERS_SUFFIX))

	_LOGGER.debug(f"{code} - Loaded {len(school.working_days)} working days, {len(school.departments)} departments, {len(school.teachers_by_code)} teachers")
	return school
