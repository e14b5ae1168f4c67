"""Tests for config module."""

from pathlib import Path
from unittest.mock import patch

import pytest

from numbered_print.config import (
    DEFAULT_EXTENSIONS,
    _config_paths,
    _find_project_root,
    default_config,
    load_config,
)


def test_load_config_valid(temp_config: Path) -> None:
    """Values from the file override defaults; unset keys keep defaults."""
    config = load_config(temp_config)
    assert config["image_folder"] == "pages/"
    assert config["image_extensions"] == ["png", "jpg"]
    assert config["max_consecutive_misses"] == 3
    assert config["max_index"] == 50
    assert config["output_html"] == "out/pages.html"
    assert config["print_settings"]["landscape"] is True
    assert config["print_settings"]["margin"] == "minimum"
    assert config["print_settings"]["print_background"] is True
    assert config["ui"]["show_image_info"] is False
    assert config["ui"]["show_stats"] is True
    assert config["theme"]["primary_color"] == "#112233"
    assert config["theme"]["secondary_color"] == "#764ba2"
    assert config["auth_username"] is None
    assert config["_loaded_from"] == str(temp_config)


def test_default_config_values() -> None:
    config = default_config()
    assert config["image_folder"] == "src/"
    assert config["image_extensions"] == DEFAULT_EXTENSIONS
    assert config["max_consecutive_misses"] == 5
    assert config["probe_delay"] == 0.0
    assert config["_loaded_from"] == "defaults"


def test_load_config_missing_file() -> None:
    """Missing explicit config raises FileNotFoundError with helpful message."""
    with pytest.raises(FileNotFoundError) as exc_info:
        load_config(Path("/nonexistent/numbered-print.yaml"))
    assert "Config not found" in str(exc_info.value)
    assert "numbered-print.yaml" in str(exc_info.value)


def test_load_config_falls_back_to_defaults(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """No config at any search path gives the built-in defaults."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    (tmp_path / "pyproject.toml").write_text("", encoding="utf-8")
    config = load_config()
    assert config["_loaded_from"] == "defaults"


def test_load_config_empty_file_uses_defaults(tmp_path: Path) -> None:
    config_path = tmp_path / "empty.yaml"
    config_path.write_text("", encoding="utf-8")
    config = load_config(config_path)
    assert config["image_extensions"] == DEFAULT_EXTENSIONS


def test_load_config_invalid_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "bad.yaml"
    config_path.write_text("image_extensions: [png", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid YAML"):
        load_config(config_path)


def test_load_config_not_mapping(tmp_path: Path) -> None:
    config_path = tmp_path / "list.yaml"
    config_path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="must contain a YAML mapping"):
        load_config(config_path)


@pytest.mark.parametrize(
    ("content", "message"),
    [
        ("image_extensions: []\n", "image_extensions"),
        ("image_extensions: png\n", "image_extensions"),
        ("image_extensions: [png, '']\n", "non-empty strings"),
        ("max_consecutive_misses: 0\n", "max_consecutive_misses"),
        ("max_consecutive_misses: three\n", "max_consecutive_misses"),
        ("max_index: -1\n", "max_index"),
        ("probe_delay: -0.5\n", "probe_delay"),
        ("request_timeout: 0\n", "request_timeout must be a number > 0"),
        ("image_folder: ''\n", "image_folder"),
        ("print_settings: 3\n", "print_settings must be a mapping"),
        ("print_settings:\n  margin: huge\n", "print_settings.margin"),
        ("ui:\n  show_stats: maybe\n", "ui.show_stats"),
    ],
)
def test_load_config_rejects_invalid_values(tmp_path: Path, content: str, message: str) -> None:
    config_path = tmp_path / "bad.yaml"
    config_path.write_text(content, encoding="utf-8")
    with pytest.raises(ValueError) as exc_info:
        load_config(config_path)
    assert message in str(exc_info.value)


@patch("numbered_print.config._get_password_from_keyring", return_value="s3cret")
def test_load_config_reads_password_from_keyring(mock_keyring: object, tmp_path: Path) -> None:
    config_path = tmp_path / "auth.yaml"
    config_path.write_text('image_folder: "https://x.org/p/"\nauth_username: "me"\n', encoding="utf-8")
    config = load_config(config_path)
    assert config["auth_username"] == "me"
    assert config["auth_password"] == "s3cret"
    mock_keyring.assert_called_once_with("me")


@patch("numbered_print.config._get_password_from_keyring", return_value=None)
def test_load_config_raises_when_password_missing(mock_keyring: object, tmp_path: Path) -> None:
    config_path = tmp_path / "auth.yaml"
    config_path.write_text('auth_username: "me"\n', encoding="utf-8")
    with pytest.raises(ValueError) as exc_info:
        load_config(config_path)
    assert "not found in keyring" in str(exc_info.value)
    assert "numbered-print setup" in str(exc_info.value)


def test_find_project_root_finds_pyproject_toml(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """_find_project_root finds project root by looking for pyproject.toml."""
    project_root = tmp_path / "project"
    project_root.mkdir()
    (project_root / "pyproject.toml").write_text("", encoding="utf-8")
    subdir = project_root / "conf" / "subdir"
    subdir.mkdir(parents=True)

    monkeypatch.chdir(subdir)
    assert _find_project_root() == project_root


def test_config_paths_uses_project_root(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    """_config_paths finds config relative to project root, not cwd."""
    project_root = tmp_path / "project"
    project_root.mkdir()
    (project_root / "pyproject.toml").write_text("", encoding="utf-8")
    (project_root / "conf").mkdir()
    (project_root / "conf" / "numbered-print.yaml").write_text("max_index: 7\n", encoding="utf-8")
    subdir = project_root / "conf" / "subdir"
    subdir.mkdir(parents=True)

    monkeypatch.chdir(subdir)
    paths = _config_paths(None)
    assert paths[0] == project_root / "conf" / "numbered-print.yaml"
    assert load_config()["max_index"] == 7


def test_config_paths_override(tmp_path: Path) -> None:
    override = tmp_path / "custom.yaml"
    assert _config_paths(override) == [override]
