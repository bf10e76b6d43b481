"""Unit tests for assignment text normalisation."""

from datetime import date

import pytest

from homework_checker.exceptions import MalformedAssignmentError
from homework_checker.text import normalize_assignment, normalize_instructions, truncate

from conftest import graph_assignment


def test_markup_and_whitespace_are_removed():
	assert normalize_instructions("<p>Read  pages <b>3</b>-5</p>") == "Read pages 3-5"


def test_block_tags_separate_words():
	assert normalize_instructions("<p>Part one</p><p>Part two</p>line<br/>break") == "Part one Part two line break"


def test_entities_are_unescaped():
	assert normalize_instructions("Fish &amp; chips&nbsp;&nbsp;tonight") == "Fish & chips tonight"


def test_wrapper_before_body_is_discarded():
	content = "<html><head><style>p { color: red }</style></head><body><p>Learn the words</p></body></html>"
	assert normalize_instructions(content) == "Learn the words"


def test_text_without_body_is_kept():
	assert normalize_instructions("Answer questions 1 to 4") == "Answer questions 1 to 4"
	assert normalize_instructions(None) == ""


def test_long_text_is_truncated_to_200_characters():
	result = truncate("a" * 250)
	assert len(result) == 200
	assert result == "a" * 197 + "..."


def test_truncation_trims_trailing_space_before_ellipsis():
	result = truncate("a" * 196 + " " + "b" * 60)
	assert result == "a" * 196 + "..."


def test_text_of_exactly_200_characters_is_unchanged():
	assert truncate("a" * 200) == "a" * 200


def test_assignment_fields_are_normalised():
	assignment = normalize_assignment(graph_assignment("  Vocab test  ", "2024-06-07T22:59:00Z", "<div>Learn  list 4</div>"))
	assert assignment.title == "Vocab test"
	assert assignment.instructions == "Learn list 4"
	assert assignment.due_date == date(2024, 6, 7)


def test_exclusion_phrase_is_case_insensitive():
	data = graph_assignment("Task", "2024-06-07T15:00:00Z", "<p>Complete the WORKSHEET</p>")
	assert normalize_assignment(data, "worksheet") is None
	assert normalize_assignment(data, "quiz") is not None


def test_missing_instructions_give_empty_text():
	assignment = normalize_assignment({"displayName": "Read", "instructions": None, "dueDateTime": "2024-06-07T15:00:00Z"})
	assert assignment.instructions == ""


@pytest.mark.parametrize("data", [
	"not an object",
	{"displayName": "No due date", "instructions": {"content": "x"}},
	{"displayName": "Bad date", "instructions": {"content": "x"}, "dueDateTime": "next week"},
	{"displayName": "Bad instructions", "instructions": "x", "dueDateTime": "2024-06-07T15:00:00Z"},
])
def test_malformed_payloads_raise(data):
	with pytest.raises(MalformedAssignmentError):
		normalize_assignment(data)
