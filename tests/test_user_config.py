from pathlib import Path

import pytest

from user_config import (
    ConfigError,
    Settings,
    config_path,
    get_config_value,
    load_config,
    reset_config,
    resolve_settings,
    update_config,
)


@pytest.fixture
def cfg(tmp_path: Path) -> Path:
    return tmp_path / "citeease" / "config.json"


def test_missing_file_is_empty_config(cfg: Path) -> None:
    assert load_config(cfg) == {}


def test_update_then_get(cfg: Path) -> None:
    update_config("style", "ieee", cfg)
    update_config("format", "html", cfg)

    assert get_config_value("style", cfg) == "ieee"
    assert load_config(cfg) == {"style": "ieee", "format": "html"}


def test_get_unset_key_is_none(cfg: Path) -> None:
    assert get_config_value("locale", cfg) is None


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("colour", "blue", "Invalid key"),
        ("format", "pdf", "Invalid format"),
        ("intext", "yes", "Invalid intext"),
    ],
)
def test_update_rejects_invalid_entries(cfg: Path, key: str, value: str, message: str) -> None:
    with pytest.raises(ConfigError, match=message):
        update_config(key, value, cfg)
    assert not cfg.exists()


def test_reset_clears_everything(cfg: Path) -> None:
    update_config("style", "ieee", cfg)
    reset_config(cfg)
    assert load_config(cfg) == {}


def test_unparseable_file_raises(cfg: Path) -> None:
    cfg.parent.mkdir(parents=True)
    cfg.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="Failed to parse"):
        load_config(cfg)


def test_non_object_file_raises(cfg: Path) -> None:
    cfg.parent.mkdir(parents=True)
    cfg.write_text('["style"]', encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(cfg)


def test_config_dir_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("CITEEASE_CONFIG_DIR", str(tmp_path))
    assert config_path() == tmp_path / "config.json"


def test_resolve_settings_defaults() -> None:
    assert resolve_settings({}) == Settings(
        style="apa", locale="en-US", output_format="text", intext=False, log_errors=False
    )


def test_resolve_settings_flags_override_config() -> None:
    config = {"style": "ieee", "locale": "fr-FR", "format": "html", "intext": "true"}
    settings = resolve_settings(
        config,
        {"style": "mla", "locale": None, "output_format": "RTF", "intext": False, "log_errors": True},
    )

    assert settings.style == "mla"
    assert settings.locale == "fr-FR"
    assert settings.output_format == "rtf"
    assert settings.intext is False
    assert settings.log_errors is True


def test_resolve_settings_reads_intext_from_config() -> None:
    assert resolve_settings({"intext": "true"}).intext is True
    assert resolve_settings({"intext": "false"}).intext is False


def test_resolve_settings_rejects_bad_format() -> None:
    with pytest.raises(ConfigError, match="Invalid format"):
        resolve_settings({}, {"output_format": "docx"})
