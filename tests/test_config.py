import json
from pathlib import Path

import pytest

from vidbatch.core.models import DownloadMode
from vidbatch.exceptions import ConfigurationError
from vidbatch.utils import config as config_module
from vidbatch.utils.config import BatchConfig, load_links, load_settings


def write_json(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_load_links_from_named_array(tmp_path: Path) -> None:
    path = write_json(tmp_path / "links.json", {"links": [" https://youtu.be/a ", "", "https://youtu.be/b"]})

    assert load_links(path) == ["https://youtu.be/a", "https://youtu.be/b"]


def test_load_links_custom_key_and_bare_array(tmp_path: Path) -> None:
    named = write_json(tmp_path / "named.json", {"videos": ["https://youtu.be/a"]})
    bare = write_json(tmp_path / "bare.json", ["https://youtu.be/b"])

    assert load_links(named, key="videos") == ["https://youtu.be/a"]
    assert load_links(bare) == ["https://youtu.be/b"]


@pytest.mark.parametrize(
    "content",
    [
        '{"other": []}',
        '{"links": "https://youtu.be/a"}',
        '{"links": [1, 2]}',
        '{not json',
    ],
)
def test_malformed_links_file(tmp_path: Path, content: str) -> None:
    path = tmp_path / "links.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(ConfigurationError):
        load_links(path)


def test_missing_links_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_links(tmp_path / "missing.json")


def test_repository_links_file_is_valid() -> None:
    links = load_links(Path(__file__).resolve().parent.parent / "links.json")
    assert len(links) == 10
    assert all(link.startswith("https://youtu.be/") for link in links)


def test_load_settings_ignores_unknown_keys(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    path = write_json(tmp_path / "settings.json", {"mode": "audio-only", "delay": 5, "colour": "blue"})

    settings = load_settings(path)

    assert settings == {"mode": "audio-only", "delay": 5}
    assert "colour" in caplog.text


def test_load_settings_without_path_is_empty() -> None:
    assert load_settings(None) == {}


def test_load_settings_named_missing_file_is_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="nope.json"):
        load_settings(tmp_path / "nope.json")


def test_settings_must_be_object(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(write_json(tmp_path / "settings.json", ["a"]))


def test_from_settings_overrides_win(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(config_module.ENV_COOKIES_FROM_BROWSER, raising=False)

    config = BatchConfig.from_settings({"mode": "video-only", "delay": 4}, delay=3.0, mode=None,
                                       urls=["https://youtu.be/a"])

    assert config.mode is DownloadMode.VIDEO_ONLY
    assert config.delay == 3.0
    assert config.cookies_from_browser is None


def test_cookies_browser_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(config_module.ENV_COOKIES_FROM_BROWSER, "chrome")

    assert BatchConfig.from_settings({}).cookies_from_browser == "chrome"
    assert BatchConfig.from_settings({}, cookies_from_browser="edge").cookies_from_browser == "edge"


def test_invalid_mode_string() -> None:
    with pytest.raises(ConfigurationError):
        BatchConfig(mode="best-quality")


@pytest.mark.parametrize(
    "overrides",
    [
        {"urls": []},
        {"delay": -1},
        {"retry_attempts": 0},
        {"retry_base_delay": -0.5},
        {"timeout": 0},
    ],
)
def test_validate_rejects_bad_values(overrides) -> None:
    values = {"urls": ["https://youtu.be/a"]}
    values.update(overrides)

    with pytest.raises(ConfigurationError):
        BatchConfig(**values).validate()


@pytest.mark.parametrize(
    "settings",
    [
        {"delay": "two"},
        {"retry_attempts": "many"},
        {"timeout": None},
        {"retry_base_delay": [1]},
        {"delay": True},
        {"urls": "https://youtu.be/a"},
        {"urls": ["https://youtu.be/a", 7]},
        {"strict": "false"},
        {"strict": 1},
        {"cookies_from_browser": 42},
        {"output_dir": 5},
        {"ffmpeg": ""},
    ],
)
def test_wrongly_typed_settings_are_configuration_errors(settings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(config_module.ENV_COOKIES_FROM_BROWSER, raising=False)

    with pytest.raises(ConfigurationError):
        BatchConfig.from_settings(settings)


def test_numeric_strings_are_converted() -> None:
    config = BatchConfig(urls=["https://youtu.be/a"], delay="1.5", retry_attempts="4", timeout=30)

    assert config.delay == 1.5
    assert config.retry_attempts == 4
    assert isinstance(config.timeout, float)


def test_settings_urls_are_stripped() -> None:
    config = BatchConfig(urls=[" https://youtu.be/a ", ""])

    assert config.urls == ["https://youtu.be/a"]
