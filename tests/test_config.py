"""
Tests for settings resolution.

config.json is redirected to tmp_path; SESSIONGUARD_* variables are
cleared so the developer's environment cannot leak in.
"""

import json
import pytest
from unittest.mock import patch
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).parent.parent))

from sessionguard import config
from sessionguard.config import Settings, get_settings, load_config
from sessionguard.formatting import seconds_to_human_duration


@pytest.fixture
def config_file(tmp_path, monkeypatch):
    for name in [f.upper() for f in Settings.__dataclass_fields__]:
        monkeypatch.delenv(config.ENV_PREFIX + name, raising=False)
    path = tmp_path / "config.json"
    with patch.object(config, 'get_config_path', return_value=path):
        yield path


class TestGetSettings:

    def test_defaults(self, config_file):
        settings = get_settings()
        assert settings.check_interval == 60
        assert settings.min_safe_session_time == 120
        assert settings.username is None
        assert settings.require_mfa is False

    def test_config_file_values(self, config_file):
        config_file.write_text(json.dumps({'check_interval': 30, 'username': 'editor'}))
        settings = get_settings()
        assert settings.check_interval == 30
        assert settings.username == 'editor'

    def test_env_beats_config_file(self, config_file, monkeypatch):
        config_file.write_text(json.dumps({'check_interval': 30}))
        monkeypatch.setenv('SESSIONGUARD_CHECK_INTERVAL', '45')
        monkeypatch.setenv('SESSIONGUARD_REQUIRE_MFA', 'yes')

        settings = get_settings()

        assert settings.check_interval == 45
        assert settings.require_mfa is True

    def test_overrides_beat_env(self, config_file, monkeypatch):
        monkeypatch.setenv('SESSIONGUARD_CHECK_INTERVAL', '45')
        assert get_settings({'check_interval': 10}).check_interval == 10

    def test_invalid_value_rejected(self, config_file, monkeypatch):
        monkeypatch.setenv('SESSIONGUARD_CHECK_INTERVAL', 'soon')
        with pytest.raises(ValueError):
            get_settings()

    def test_non_positive_interval_rejected(self, config_file):
        with pytest.raises(ValueError):
            get_settings({'min_safe_session_time': 0})

    def test_resolution_leaves_config_file_untouched(self, config_file, monkeypatch):
        monkeypatch.setenv('SESSIONGUARD_BASE_URL', 'https://cms.example.com')
        assert get_settings().base_url == 'https://cms.example.com'
        assert not config_file.exists()
        assert not hasattr(config, 'save_config')

    def test_corrupt_config_file_ignored(self, config_file):
        config_file.write_text('{not json')
        assert load_config() == {}
        assert get_settings().check_interval == 60


class TestDuration:

    @pytest.mark.parametrize("seconds,expected", [
        (0, '0 seconds'),
        (1, '1 second'),
        (60, '1 minute'),
        (90, '1 minute, 30 seconds'),
        (3661, '1 hour, 1 minute, 1 second'),
        (-5, '0 seconds'),
    ])
    def test_human_duration(self, seconds, expected):
        assert seconds_to_human_duration(seconds) == expected

    def test_without_seconds_rounds_to_minutes(self):
        assert seconds_to_human_duration(90, show_seconds=False) == '2 minutes'
        assert seconds_to_human_duration(20, show_seconds=False) == '0 minutes'
