"""Unit tests for coverage streaks."""

from datetime import date, timedelta

from homework_checker.streak import any_due_between, build_class_report, compute_streak

from conftest import homework

# Eight Mondays, most recent first
STARTS = [date(2024, 6, 3) - timedelta(weeks=w) for w in range(8)]


def due_in_weeks(*weeks):
	"""One assignment due on the Wednesday of each listed week index."""
	return [homework(STARTS[w] + timedelta(days=2)) for w in weeks]


def test_any_due_between_is_half_open():
	assignments = [homework(date(2024, 5, 27))]
	assert any_due_between(assignments, date(2024, 5, 27), date(2024, 6, 3))
	assert not any_due_between(assignments, date(2024, 5, 20), date(2024, 5, 27))
	assert any_due_between(assignments, date(2024, 5, 20))


def test_covered_streak_counts_consecutive_weeks():
	assert compute_streak(due_in_weeks(0, 1, 2, 4), STARTS, 1) == 3


def test_uncovered_streak_counts_consecutive_gaps():
	assert compute_streak(due_in_weeks(3, 4), STARTS, 1) == 3


def test_alternating_history_gives_streak_of_one():
	assert compute_streak(due_in_weeks(0, 2, 4, 6), STARTS, 1) == 1
	assert compute_streak(due_in_weeks(1, 3, 5, 7), STARTS, 1) == 1


def test_streak_stops_when_calendar_is_exhausted():
	assert compute_streak(due_in_weeks(*range(8)), STARTS, 1) == 8
	assert compute_streak([], STARTS, 1) == 8


def test_longer_periods_step_by_period_length():
	# Fortnightly: current window is weeks 0-1, then 2-3, 4-5, 6-7
	assert compute_streak(due_in_weeks(1, 2, 5), STARTS, 2) == 3
	assert compute_streak(due_in_weeks(0, 6), STARTS, 2) == 1
	assert compute_streak([], STARTS, 2) == 4


def test_streak_is_at_least_one_with_no_history_to_compare():
	assert compute_streak(due_in_weeks(0), STARTS[:1], 1) == 1
	assert compute_streak([], STARTS[:3], 3) == 1


def test_class_report_is_derived_without_mutating_class(make_class):
	assignments = due_in_weeks(0, 1, 3)
	cls = make_class(periods=1, start_date=STARTS[0], assignments=assignments)

	report = build_class_report(cls, STARTS)

	assert report.has_current_homework
	assert report.current_assignments == (assignments[0],)
	assert report.streak == 2
	assert report.signed_streak == 2
	assert cls.assignments == assignments
	assert all(a.due_date >= cls.start_date for a in report.current_assignments)


def test_uncovered_class_report(make_class):
	cls = make_class(periods=2, start_date=STARTS[1], assignments=due_in_weeks(4))
	report = build_class_report(cls, STARTS)
	assert not report.has_current_homework
	assert report.current_assignments == ()
	assert report.streak == 2
	assert report.signed_streak == -2
	assert report.covered == 0
