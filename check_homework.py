#!/usr/bin/env python3
"""
Homework Checker Debug Script

Runs the coverage checks for every configured school and prints a summary
of each report instead of handing it to the mail layer.

Usage:
    python3 check_homework.py

Create a .env file with:
    GRAPH_ACCESS_TOKEN=your_token_here
    HOMEWORK_CONFIG_DIR=config
    HOMEWORK_TODAY=2024-06-10    (optional)
"""

import asyncio
import logging
import sys

from homework_checker.checker import check_all
from homework_checker.config import load_settings
from homework_checker.exceptions import HomeworkConfigError


def print_report(report) -> None:
	print(f"\n{report.school.name}: {report.title} ({report.stats.overall}%)")
	print("   " + ", ".join(f"{name.upper()} {perc}%" for name, perc in report.stats.key_stages.items() if perc is not None))
	for department in report.departments:
		print(f"   {department.name} ({department.percentage}%)")
		for r in department.reports:
			mark = "✅" if r.has_current_homework else "❌"
			streak = f" x{r.streak}" if r.streak > 1 else ""
			print(f"      {mark} {r.cls.label}{streak}")
	if report.fetch.failed:
		print(f"   ⚠️ No homework retrieved for {len(report.fetch.failed)} classes")


async def main():
	"""Main debug function."""
	try:
		settings = load_settings()
		logging.basicConfig(
			level=settings.log_level,
			format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
		)
		reports = await check_all(settings)
	except HomeworkConfigError as e:
		print(f"❌ {e}")
		return 1

	for report in reports.values():
		print_report(report)
	return 0


if __name__ == "__main__":
	try:
		sys.exit(asyncio.run(main()))
	except KeyboardInterrupt:
		print("\n\n⚠️ Check interrupted by user.")
		sys.exit(1)
