"""Shared fixtures for buildstamp tests."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Iterator
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from buildstamp.config import reset_config

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


class GitRepo:
    """A throwaway repository with a deterministic clock.

    Every commit and tag is stamped one minute after the previous one so
    tag ordering by date is predictable.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self._clock = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.git("init", "-q")

    def _env(self) -> dict[str, str]:
        stamp = self._clock.isoformat()
        env = dict(os.environ)
        env.update(
            {
                "GIT_AUTHOR_NAME": "Test Author",
                "GIT_AUTHOR_EMAIL": "author@example.com",
                "GIT_COMMITTER_NAME": "Test Committer",
                "GIT_COMMITTER_EMAIL": "committer@example.com",
                "GIT_AUTHOR_DATE": stamp,
                "GIT_COMMITTER_DATE": stamp,
            }
        )
        return env

    def git(self, *args: str) -> str:
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", "-c", "tag.gpgsign=false", *args],
            cwd=self.path,
            env=self._env(),
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def _tick(self) -> None:
        self._clock += timedelta(minutes=1)

    def commit(self, message: str = "change") -> str:
        """Create an empty commit and return its full hash."""
        self._tick()
        self.git("commit", "-q", "--allow-empty", "-m", message)
        return self.git("rev-parse", "HEAD")

    def commits(self, count: int) -> list[str]:
        return [self.commit(f"commit {i}") for i in range(count)]

    def tag(self, name: str, ref: str = "HEAD", annotated: bool = True) -> None:
        self._tick()
        if annotated:
            self.git("tag", "-a", name, "-m", f"Release {name}", ref)
        else:
            self.git("tag", name, ref)

    @property
    def branch(self) -> str:
        return self.git("rev-parse", "--abbrev-ref", "HEAD")

    def checkout(self, *args: str) -> None:
        self.git("checkout", "-q", *args)

    def merge(self, branch: str) -> str:
        self._tick()
        self.git("merge", "-q", "--no-ff", "-m", f"Merge {branch}", branch)
        return self.git("rev-parse", "HEAD")


@pytest.fixture(autouse=True)
def _clean_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Isolate tests from user config files and cached configuration."""
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    # Stop git from discovering a repository above the test directory
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))
    reset_config()
    yield
    reset_config()


@pytest.fixture
def git_repo(tmp_path: Path) -> GitRepo:
    """Create an empty repository in a temporary directory."""
    path = tmp_path / "repo"
    path.mkdir()
    return GitRepo(path)
