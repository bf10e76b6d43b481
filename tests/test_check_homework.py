"""Tests for the debug script entry point."""

from unittest.mock import patch

import check_homework
from homework_checker.config import Settings


async def test_missing_config_directory_exits_cleanly(tmp_path, capsys):
	settings = Settings(access_token="token", config_dir=tmp_path / "missing")
	with patch.object(check_homework, "load_settings", return_value=settings):
		assert await check_homework.main() == 1
	assert "does not exist" in capsys.readouterr().out
