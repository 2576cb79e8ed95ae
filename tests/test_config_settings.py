"""Layered config loading tests."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from descry.lib.config.settings import DescryConfig, load_config, resolve_config_root
from descry.lib.describe import DescribeOptions
from descry.lib.formatter import ansi_color, html_color, plain_color
from descry.lib.levels import INFO


def _install_config(repo_root: Path, content: str) -> None:
    config_path = repo_root / ".descry" / "config.toml"
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(content, encoding="utf-8")


def test_load_config_from_toml(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _install_config(
        repo_root,
        (
            "[inspect]\n"
            "line_limit = 80\n"
            "max_elements = 20\n"
            "head_elements = 10\n"
            "tail_elements = 5\n"
            "\n"
            "[log]\n"
            "level = 'INFO'\n"
            "color = 'html'\n"
        ),
    )

    loaded = load_config(repo_root)

    assert loaded == DescryConfig(
        line_limit=80,
        max_elements=20,
        head_elements=10,
        tail_elements=5,
        log_level="info",
        color="html",
    )
    assert loaded.threshold == INFO
    assert loaded.describe_options() == DescribeOptions(
        max_elements=20, head_elements=10, tail_elements=5
    )


def test_load_config_missing_file_returns_defaults(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir(parents=True, exist_ok=True)

    loaded = load_config(repo_root)

    assert loaded == DescryConfig()


def test_load_config_env_override(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _install_config(
        repo_root,
        (
            "[inspect]\n"
            "line_limit = 30\n"
            "max_elements = 60\n"
        ),
    )
    monkeypatch.setenv("DESCRY_LINE_LIMIT", "120")
    monkeypatch.setenv("DESCRY_LOG_LEVEL", "warn")

    loaded = load_config(repo_root)

    assert loaded.line_limit == 120
    assert loaded.log_level == "warn"
    assert loaded.max_elements == 60
    assert (loaded.head_elements, loaded.tail_elements) == (30, 30)


def test_config_root_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    repo_root = tmp_path / "elsewhere"
    _install_config(repo_root, "[inspect]\nline_limit = 7\n")
    monkeypatch.setenv("DESCRY_CONFIG_ROOT", str(repo_root))

    assert resolve_config_root() == repo_root.resolve()
    assert load_config().line_limit == 7
    assert resolve_config_root(tmp_path) == tmp_path.resolve()


def test_load_config_warns_on_unknown_keys(
    caplog: pytest.LogCaptureFixture,
    tmp_path: Path,
) -> None:
    repo_root = tmp_path / "repo"
    _install_config(
        repo_root,
        (
            "[inspect]\n"
            "line_limit = 40\n"
            "depth = 3\n"
            "\n"
            "[mystery]\n"
            "value = 123\n"
        ),
    )
    caplog.set_level(logging.WARNING, logger="descry.lib.config.settings")

    loaded = load_config(repo_root)

    assert loaded.line_limit == 40
    messages = [record.getMessage() for record in caplog.records]
    assert any("inspect.depth" in message for message in messages)
    assert any("mystery" in message for message in messages)


def test_load_config_rejects_type_errors(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    repo_root = tmp_path / "repo"
    _install_config(
        repo_root,
        "[inspect]\n"
        "line_limit = 'wide'\n",
    )
    with pytest.raises(ValueError, match=r"inspect\.line_limit.*expected int"):
        load_config(repo_root)

    _install_config(repo_root, "")
    monkeypatch.setenv("DESCRY_MAX_ELEMENTS", "many")
    with pytest.raises(ValueError, match=r"DESCRY_MAX_ELEMENTS.*expected int"):
        load_config(repo_root)


def test_load_config_rejects_negative_limits(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _install_config(repo_root, "[inspect]\nline_limit = -1\n")

    with pytest.raises(ValueError, match=r"inspect\.line_limit.*non-negative"):
        load_config(repo_root)


def test_load_config_rejects_unknown_level_and_color(
    monkeypatch: pytest.MonkeyPatch,
    tmp_path: Path,
) -> None:
    repo_root = tmp_path / "repo"
    _install_config(repo_root, "[log]\nlevel = 'loud'\n")
    with pytest.raises(ValueError, match="Unknown log level"):
        load_config(repo_root)

    _install_config(repo_root, "")
    monkeypatch.setenv("DESCRY_COLOR", "rainbow")
    with pytest.raises(ValueError, match="DESCRY_COLOR"):
        load_config(repo_root)


def test_load_config_rejects_inconsistent_bounds(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _install_config(
        repo_root,
        (
            "[inspect]\n"
            "max_elements = 10\n"
            "head_elements = 8\n"
            "tail_elements = 8\n"
        ),
    )

    with pytest.raises(ValueError, match="exceeds max_elements"):
        load_config(repo_root)


@pytest.mark.parametrize(
    ("max_elements", "head", "tail"),
    ((10, 5, 5), (11, 5, 6), (0, 0, 0)),
)
def test_max_elements_alone_splits_head_and_tail(
    tmp_path: Path, max_elements: int, head: int, tail: int
) -> None:
    repo_root = tmp_path / "repo"
    _install_config(repo_root, f"[inspect]\nmax_elements = {max_elements}\n")

    loaded = load_config(repo_root)

    assert (loaded.max_elements, loaded.head_elements, loaded.tail_elements) == (
        max_elements,
        head,
        tail,
    )
    assert loaded.describe_options().max_elements == max_elements


def test_max_elements_from_environment_splits_head_and_tail(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    repo_root = tmp_path / "repo"
    repo_root.mkdir(parents=True, exist_ok=True)
    monkeypatch.setenv("DESCRY_MAX_ELEMENTS", "7")

    loaded = load_config(repo_root)

    assert (loaded.head_elements, loaded.tail_elements) == (3, 4)


def test_explicit_head_is_not_rescaled(tmp_path: Path) -> None:
    repo_root = tmp_path / "repo"
    _install_config(repo_root, "[inspect]\nmax_elements = 40\nhead_elements = 10\n")

    with pytest.raises(ValueError, match=r"10 \+ 50\) exceeds max_elements \(40\)"):
        load_config(repo_root)


@pytest.mark.parametrize(
    ("color", "is_tty", "expected"),
    (
        ("auto", True, ansi_color),
        ("auto", False, plain_color),
        ("ansi", False, ansi_color),
        ("html", True, html_color),
        ("plain", True, plain_color),
    ),
)
def test_color_function_selection(color: str, is_tty: bool, expected: object) -> None:
    config = DescryConfig(color=color)  # type: ignore[arg-type]

    assert config.color_function(is_tty=is_tty) is expected
    assert config.format_options(is_tty=is_tty).color is expected
