"""Shared pytest fixtures for descry tests."""

from __future__ import annotations

import os
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

import pytest

from descry.lib.sinks import MemoryLogger

if TYPE_CHECKING:
    from collections.abc import Callable

PACKAGE_ROOT = Path(__file__).resolve().parents[1]


@dataclass(frozen=True, slots=True)
class CliResult:
    args: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str


@pytest.fixture
def package_root() -> Path:
    return PACKAGE_ROOT


@pytest.fixture
def cli_env(package_root: Path, tmp_path: Path) -> dict[str, str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("DESCRY_")}
    existing = env.get("PYTHONPATH", "")
    root = str(package_root / "src")
    env["PYTHONPATH"] = root if not existing else f"{root}:{existing}"
    env["DESCRY_CONFIG_ROOT"] = str(tmp_path)
    return env


@pytest.fixture
def run_descry(package_root: Path, cli_env: dict[str, str]) -> Callable[..., CliResult]:
    def _run(args: list[str], timeout: float = 15.0, stdin: str | None = None) -> CliResult:
        completed = subprocess.run(
            [sys.executable, "-m", "descry", *args],
            cwd=package_root,
            env=cli_env,
            input=stdin,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout,
        )
        return CliResult(
            args=tuple(args),
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )

    return _run


@pytest.fixture
def memory_logger() -> MemoryLogger:
    return MemoryLogger(threshold="debug")


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    for name in list(os.environ):
        if name.startswith("DESCRY_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DESCRY_CONFIG_ROOT", str(tmp_path))
