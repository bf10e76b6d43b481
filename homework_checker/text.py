"""Normalisation of assignment payloads."""

import html
import logging
import re
from datetime import date
from typing import Any, Dict, Optional

from .const import ELLIPSIS, MAX_INSTRUCTIONS_LENGTH, TRUNCATED_INSTRUCTIONS_LENGTH
from .exceptions import MalformedAssignmentError
from .models import Assignment

_LOGGER = logging.getLogger(__name__)

# Some API versions wrap instructions in a full HTML document
BODY_TAG_RE = re.compile(r"<body\b[^>]*>", re.IGNORECASE)
BLOCK_TAG_RE = re.compile(r"</?(?:p|div|br|li|ul|ol|tr|td|th|table|h[1-6]|blockquote|body|html|head)\b[^>]*>", re.IGNORECASE)
HTML_TAG_RE = re.compile(r"<.*?>", re.DOTALL)
WHITESPACE_RE = re.compile(r"\s+")


def strip_wrapper(content: str) -> str:
	"""Drop anything before a body tag that appears mid-payload."""
	match = BODY_TAG_RE.search(content)
	if match and match.start() > 0:
		return content[match.start():]
	return content


def normalize_instructions(content: Optional[str]) -> str:
	"""Convert an HTML fragment into a single line of plain text."""
	if not content:
		return ""
	text = strip_wrapper(content)
	text = BLOCK_TAG_RE.sub(" ", text)
	text = HTML_TAG_RE.sub("", text)
	text = html.unescape(text)
	return WHITESPACE_RE.sub(" ", text).strip()


def is_excluded(text: str, exclude_text: Optional[str]) -> bool:
	"""Check whether text contains the exclusion phrase, ignoring case."""
	if not exclude_text:
		return False
	return exclude_text.casefold() in text.casefold()


def truncate(text: str) -> str:
	if len(text) > MAX_INSTRUCTIONS_LENGTH:
		return text[:TRUNCATED_INSTRUCTIONS_LENGTH].rstrip() + ELLIPSIS
	return text


def parse_due_date(value: Any) -> date:
	"""Take the calendar date from an ISO 8601 date-time string."""
	if not isinstance(value, str) or len(value) < 10:
		raise MalformedAssignmentError(f"Invalid dueDateTime: {value!r}")
	try:
		return date.fromisoformat(value[:10])
	except ValueError as e:
		raise MalformedAssignmentError(f"Invalid dueDateTime: {value!r}") from e


def normalize_assignment(data: Dict[str, Any], exclude_text: Optional[str] = None) -> Optional[Assignment]:
	"""Build an Assignment from a raw API payload.

	Args:
		data: One entry from an assignments collection response
		exclude_text: Optional phrase that marks the assignment as not homework

	Returns:
		The Assignment, or None if it matched the exclusion phrase

	Raises:
		MalformedAssignmentError: If the payload has an unexpected shape
	"""
	if not isinstance(data, dict):
		raise MalformedAssignmentError(f"Expected an object, got {type(data).__name__}")

	instructions = data.get("instructions") or {}
	if not isinstance(instructions, dict):
		raise MalformedAssignmentError("Instructions is not an object")
	content = instructions.get("content")
	if content is not None and not isinstance(content, str):
		raise MalformedAssignmentError("Instructions content is not a string")

	title = data.get("displayName") or ""
	if not isinstance(title, str):
		raise MalformedAssignmentError("displayName is not a string")

	due_date = parse_due_date(data.get("dueDateTime"))
	text = normalize_instructions(content)

	if is_excluded(text, exclude_text):
		_LOGGER.debug(f"Excluding '{title.strip()}': matched '{exclude_text}'")
		return None

	return Assignment(title=title.strip(), instructions=truncate(text), due_date=due_date)
