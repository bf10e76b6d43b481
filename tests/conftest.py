"""Shared fixtures for homework checker tests."""

import copy
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional

import pytest

from homework_checker.models import Assignment, ClassContext


class MockResponse:
	"""Simple mock response class."""
	def __init__(self, status, json_data=None, headers=None, json_error=None):
		self.status = status
		self._json_data = json_data or {}
		self.headers = headers or {}
		self._json_error = json_error

	async def json(self):
		if self._json_error is not None:
			raise self._json_error
		return self._json_data

	async def __aenter__(self):
		return self

	async def __aexit__(self, exc_type, exc_val, exc_tb):
		pass


class FakeSession:
	"""Records requests and answers them from handlers or queued responses."""

	def __init__(self, post_handler: Optional[Callable[[int, Dict[str, Any]], MockResponse]] = None, get_responses: Optional[List[MockResponse]] = None):
		self.post_handler = post_handler
		self.get_responses = list(get_responses or [])
		self.posts: List[Dict[str, Any]] = []
		self.gets: List[Dict[str, Any]] = []

	def post(self, url, headers=None, json=None):
		payload = copy.deepcopy(json)
		self.posts.append({"url": url, "headers": headers, "json": payload})
		return self.post_handler(len(self.posts) - 1, payload)

	def get(self, url, headers=None, params=None):
		self.gets.append({"url": url, "headers": headers, "params": params})
		return self.get_responses.pop(0)

	async def close(self):
		pass


def weekdays(first_monday: date, weeks: int) -> List[date]:
	"""Every Monday to Friday for a number of weeks."""
	return [first_monday + timedelta(weeks=w, days=d) for w in range(weeks) for d in range(5)]


def sub_response(request_id: str, status: int = 200, value=None, headers=None) -> Dict[str, Any]:
	response = {"id": request_id, "status": status, "headers": headers or {}}
	if status == 200:
		response["body"] = {"value": value if value is not None else []}
	return response


def graph_assignment(title: str, due: str, content: str = "<p>Do it</p>") -> Dict[str, Any]:
	return {
		"displayName": title,
		"instructions": {"content": content, "contentType": "html"},
		"dueDateTime": due,
	}


@pytest.fixture
def make_class():
	"""Factory for ClassContext objects."""
	def _make(id="c1", name="10/Ma1", year=10, subject="Ma", teacher_codes=None, department="Maths", periods=1, start_date=date(2024, 6, 3), assignments=None, exclude_text=None):
		return ClassContext(
			id=id,
			name=name,
			year=year,
			subject=subject,
			teacher_codes=teacher_codes or ["ABC"],
			department_name=department,
			periods=periods,
			start_date=start_date,
			exclude_text=exclude_text,
			assignments=list(assignments or []),
		)
	return _make


def homework(due: date, title: str = "Homework") -> Assignment:
	return Assignment(title=title, instructions="", due_date=due)
