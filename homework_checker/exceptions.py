"""Custom exceptions for the homework checker."""

from typing import List


class HomeworkCheckerError(Exception):
	"""Base exception for homework checker errors."""
	pass


class HomeworkConfigError(HomeworkCheckerError):
	"""School configuration could not be loaded."""
	pass


class ConfigurationGapError(HomeworkCheckerError):
	"""A referenced teacher code has no matching teacher record."""

	def __init__(self, missing_codes: List[str]):
		self.missing_codes = missing_codes
		super().__init__(f"missing teachers {', '.join(missing_codes)}")


class InsufficientHistoryError(HomeworkCheckerError):
	"""Fewer period starts are available than the longest configured period."""
	pass


class NotAReportingDayError(HomeworkCheckerError):
	"""Today is not a working day."""
	pass


class GraphAPIError(HomeworkCheckerError):
	"""API request failed."""
	pass


class GraphConnectionError(HomeworkCheckerError):
	"""Connection to the Graph API failed."""
	pass


class MalformedAssignmentError(HomeworkCheckerError):
	"""Assignment payload had an unexpected shape."""
	pass
