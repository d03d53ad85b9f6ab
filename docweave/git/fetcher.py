"""Shallow clones into disposable scratch directories."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterable, Iterator

from ..config import AnalysisConfig
from ..errors import CleanupFailure, FetchFailed, FetchTimeout
from ..logging import get_logger

DEFAULT_BRANCH = "main"
DEFAULT_CLONE_TIMEOUT = 120.0


def repository_name(repo_url: str) -> str:
    """Return the display name for a repository URL (last path segment, no ``.git``)."""
    trimmed = repo_url.strip().rstrip("/")
    segment = re.split(r"[/:]", trimmed)[-1] if trimmed else ""
    if segment.endswith(".git"):
        segment = segment[: -len(".git")]
    return segment or "repository"


class RepositoryFetcher:
    """Clones a single branch of a remote repository under a scratch root.

    Every scratch directory is named ``<repo>-<timestamp>-<token>`` so
    concurrent fetches never share a path.
    """

    def __init__(
        self,
        scratch_root: Path | str | None = None,
        *,
        timeout: float = DEFAULT_CLONE_TIMEOUT,
        runner: Callable[..., str] | None = None,
    ) -> None:
        if scratch_root is None:
            scratch_root = AnalysisConfig().scratch_root
        self.scratch_root = Path(scratch_root)
        self.timeout = timeout
        self._runner = runner or self._default_runner
        self.logger = get_logger("git.fetcher")

    def fetch(self, repo_url: str, branch: str = DEFAULT_BRANCH) -> Path:
        """Clone ``repo_url`` at ``branch`` and return the scratch directory.

        On failure the scratch directory is removed before the error propagates.
        """
        if not isinstance(repo_url, str) or not repo_url.strip():
            raise ValueError("repo_url must be a non-empty string")
        branch = branch or DEFAULT_BRANCH

        target = self._allocate(repo_url)
        args = [
            "git",
            "clone",
            "--depth",
            "1",
            "--single-branch",
            "--branch",
            branch,
            "--",
            repo_url,
            str(target),
        ]
        env = os.environ.copy()
        env["GIT_TERMINAL_PROMPT"] = "0"

        self.logger.debug("Cloning %s (branch %s) into %s", repo_url, branch, target)
        try:
            self._runner(args, timeout=self.timeout, env=env)
        except subprocess.TimeoutExpired as exc:
            self._release_quietly(target)
            raise FetchTimeout(repo_url, branch, self.timeout) from exc
        except subprocess.CalledProcessError as exc:
            self._release_quietly(target)
            stderr = (exc.stderr or "").strip() if isinstance(exc.stderr, str) else ""
            detail = stderr.splitlines()[-1] if stderr else f"git exited with status {exc.returncode}"
            raise FetchFailed(repo_url, branch, detail, stderr=stderr) from exc
        except OSError as exc:
            self._release_quietly(target)
            raise FetchFailed(repo_url, branch, f"unable to run git: {exc}") from exc
        except BaseException:
            self._release_quietly(target)
            raise
        return target

    def release(self, path: Path | str) -> None:
        """Remove a scratch directory. Raises CleanupFailure when removal fails."""
        target = Path(path)
        if not target.exists():
            return
        try:
            shutil.rmtree(target)
        except OSError as exc:
            raise CleanupFailure(str(target), str(exc)) from exc
        self.logger.debug("Removed scratch directory %s", target)

    @contextmanager
    def checkout(self, repo_url: str, branch: str = DEFAULT_BRANCH) -> Iterator[Path]:
        """Fetch for the duration of a ``with`` block and release on every exit path."""
        path = self.fetch(repo_url, branch)
        try:
            yield path
        finally:
            self._release_quietly(path)

    # ------------------------------------------------------------------
    # Helpers

    def _allocate(self, repo_url: str) -> Path:
        safe_name = re.sub(r"[^A-Za-z0-9._-]", "-", repository_name(repo_url))
        token = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}"
        self.scratch_root.mkdir(parents=True, exist_ok=True)
        target = self.scratch_root / f"{safe_name}-{token}"
        target.mkdir()
        return target

    def _release_quietly(self, path: Path) -> None:
        try:
            self.release(path)
        except CleanupFailure as exc:
            self.logger.warning("%s", exc)

    @staticmethod
    def _default_runner(
        args: Iterable[str],
        *,
        timeout: float | None = None,
        env: dict[str, str] | None = None,
    ) -> str:
        completed = subprocess.run(
            list(args),
            env=env,
            check=True,
            text=True,
            capture_output=True,
            timeout=timeout,
        )
        return completed.stderr


__all__ = ["DEFAULT_BRANCH", "DEFAULT_CLONE_TIMEOUT", "RepositoryFetcher", "repository_name"]
