import logging
from pathlib import Path

import pytest

from daybook.config import Settings, configure_logging, default_data_dir, load_settings


def test_defaults_from_empty_env():
    settings = load_settings({})
    assert settings.data_dir == default_data_dir()
    assert settings.profile == "mood"
    assert settings.tz is None
    assert settings.log_level == "INFO"
    assert settings.storage_key == "mood"


def test_env_overrides(tmp_path):
    settings = load_settings({
        "DAYBOOK_DATA_DIR": str(tmp_path),
        "DAYBOOK_PROFILE": "plants",
        "DAYBOOK_TZ": "Europe/Berlin",
        "DAYBOOK_LOG_LEVEL": "debug",
    })
    assert settings.data_dir == tmp_path.resolve()
    assert settings.storage_key == "plants"
    assert settings.tz.key == "Europe/Berlin"
    assert settings.log_level == "DEBUG"


def test_bad_timezone_rejected():
    with pytest.raises(ValueError, match="DAYBOOK_TZ"):
        load_settings({"DAYBOOK_TZ": "Mars/Olympus"})


def test_blank_timezone_means_local():
    assert load_settings({"DAYBOOK_TZ": ""}).tz_name is None


def test_default_data_dir_under_home():
    assert default_data_dir() == Path.home() / ".config" / "daybook"


def test_settings_is_frozen(tmp_path):
    settings = Settings(data_dir=tmp_path)
    with pytest.raises(AttributeError):
        settings.profile = "ideas"


def test_configure_logging_accepts_unknown_level():
    configure_logging("not-a-level")
    configure_logging("debug")
    assert logging.getLogger("daybook").getEffectiveLevel() <= logging.WARNING
