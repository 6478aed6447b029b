"""Git command-line client.

Every query shells out to the git executable with ``cwd`` set to the
repository path. The process working directory is never changed.
"""

from __future__ import annotations

import logging
import re
import shutil
import subprocess
from datetime import datetime
from pathlib import Path

from buildstamp.errors import (
    GitError,
    GitUnavailableError,
    InvalidReferenceError,
    RepositoryError,
)
from buildstamp.git.models import CommitMetadata, CommitRef, Tag

logger = logging.getLogger(__name__)

# Transient spawn failures (EAGAIN, ENOMEM) get one more attempt
_SPAWN_RETRIES = 1

_TAG_FORMAT = "%00".join(
    [
        "%(refname:lstrip=2)",
        "%(objecttype)",
        "%(objectname)",
        "%(objectname:short)",
        "%(*objecttype)",
        "%(*objectname)",
        "%(*objectname:short)",
        "%(creatordate:iso-strict)",
    ]
)

_LOG_FORMAT = "%x00".join(["%H", "%h", "%an", "%ae", "%aI", "%cn", "%s", "%b"])

_REMOTE_NAME_PATTERN = re.compile(r"[:/]([^/:]+?)(?:\.git)?/*$")


def parse_remote_name(url: str | None) -> str | None:
    """Extract the repository name from a remote URL.

    Handles HTTPS (``https://host/owner/name.git``), SSH
    (``git@host:owner/name.git``) and local path remotes.

    Args:
        url: Remote URL as reported by git.

    Returns:
        Repository name without the ``.git`` suffix, or None if not parseable.
    """
    if not url:
        return None
    match = _REMOTE_NAME_PATTERN.search(url.strip())
    if match:
        return match.group(1)
    return None


def _parse_timestamp(value: str) -> datetime | None:
    value = value.strip()
    if not value:
        return None
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        logger.debug("Unparseable git timestamp: %r", value)
        return None


class GitClient:
    """Client for a git repository on the local filesystem."""

    def __init__(
        self,
        repository_path: str | Path | None = None,
        executable: str | None = None,
        timeout: float = 10.0,
    ) -> None:
        """Initialize the git client.

        Args:
            repository_path: Repository directory. Defaults to the current directory.
            executable: Path to the git executable. Defaults to ``git`` on PATH.
            timeout: Per-command timeout in seconds.

        Raises:
            GitUnavailableError: If no git executable can be found.
        """
        self.repository_path = Path(repository_path) if repository_path is not None else None
        resolved = shutil.which(executable or "git")
        if resolved is None:
            raise GitUnavailableError(f"git executable not found: {executable or 'git'}")
        self.executable = resolved
        self.timeout = timeout
        self._verified = False

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess[str]:
        """Run a git command and capture its output.

        Args:
            args: Arguments passed to git.
            check: Raise GitError on a non-zero exit code.

        Returns:
            The completed process.

        Raises:
            GitUnavailableError: If the executable disappeared.
            GitError: On timeout, repeated spawn failure, or (with check) non-zero exit.
        """
        argv = [self.executable, *args]
        attempts = 0
        while True:
            attempts += 1
            try:
                result = subprocess.run(
                    argv,
                    cwd=self.repository_path,
                    capture_output=True,
                    text=True,
                    encoding="utf-8",
                    errors="replace",
                    timeout=self.timeout,
                )
            except FileNotFoundError as e:
                raise GitUnavailableError(f"git executable not found: {self.executable}") from e
            except subprocess.TimeoutExpired as e:
                raise GitError(
                    f"git {args[0]} timed out after {self.timeout}s", args_=args
                ) from e
            except OSError as e:
                if attempts > _SPAWN_RETRIES:
                    raise GitError(f"Failed to run git {args[0]}: {e}", args_=args) from e
                logger.debug("Spawning git %s failed (%s), retrying", args[0], e)
                continue
            break

        logger.debug(
            "git %s (cwd=%s) -> %d", " ".join(args), self.repository_path or ".", result.returncode
        )
        if check and result.returncode != 0:
            raise GitError(
                f"git {args[0]} exited with status {result.returncode}",
                args_=args,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        return result

    def ensure_repository(self) -> None:
        """Check that the configured path is inside a git work tree.

        Raises:
            RepositoryError: If the path is missing or not a repository.
        """
        if self._verified:
            return
        if self.repository_path is not None and not self.repository_path.is_dir():
            raise RepositoryError(f"{self.repository_path} is not a directory")

        args = ["rev-parse", "--git-dir"]
        result = self._run(args, check=False)
        if result.returncode != 0:
            raise RepositoryError(
                str(self.repository_path or Path.cwd()),
                args_=args,
                returncode=result.returncode,
                stderr=result.stderr.strip(),
            )
        self._verified = True

    def list_tags(self) -> list[Tag]:
        """List all tags, newest first.

        Annotated tags are ordered by tagger date, lightweight tags by the
        date of the commit they point at. Ties keep git's order.

        Returns:
            Tags pointing at commits, in git's order.
        """
        self.ensure_repository()
        result = self._run(
            ["for-each-ref", "--sort=-creatordate", f"--format={_TAG_FORMAT}", "refs/tags"]
        )

        tags: list[Tag] = []
        for line in result.stdout.splitlines():
            if not line.strip():
                continue
            fields = line.split("\x00")
            if len(fields) != 8:
                logger.debug("Skipping unexpected tag line: %r", line)
                continue
            name, obj_type, obj, obj_short, peeled_type, peeled, peeled_short, created = fields
            target = self._tag_target(
                name, (obj_type, obj, obj_short), (peeled_type, peeled, peeled_short)
            )
            if target is None:
                continue
            tags.append(
                Tag(
                    name=name,
                    target_commit=target,
                    tagger_timestamp=_parse_timestamp(created),
                )
            )
        return tags

    def _tag_target(
        self, name: str, direct: tuple[str, str, str], peeled: tuple[str, str, str]
    ) -> CommitRef | None:
        """Get the commit a tag ultimately points at, or None for non-commit tags."""
        obj_type, full_hash, short_hash = peeled if peeled[1] else direct
        if obj_type == "commit":
            return CommitRef(full_hash=full_hash, abbreviated_id=short_hash)
        if obj_type == "tag":
            # Tag of a tag: for-each-ref only unwraps one level
            try:
                return self.resolve_commit(f"refs/tags/{name}")
            except InvalidReferenceError:
                pass
        logger.debug("Skipping tag %s: does not point at a commit", name)
        return None

    def resolve_commit(self, reference: str) -> CommitRef:
        """Resolve a tag, branch or hash to the commit it names.

        Args:
            reference: Any git revision expression.

        Returns:
            The commit the reference points at.

        Raises:
            InvalidReferenceError: If the reference does not name a commit.
        """
        self.ensure_repository()
        if not reference or reference.startswith("-"):
            raise InvalidReferenceError(reference)

        args = ["rev-parse", "--verify", "--quiet", f"{reference}^{{commit}}"]
        result = self._run(args, check=False)
        if result.returncode != 0:
            raise InvalidReferenceError(
                reference, args_=args, returncode=result.returncode, stderr=result.stderr.strip()
            )
        full_hash = result.stdout.strip()
        short_hash = self._run(["rev-parse", "--short", full_hash]).stdout.strip()
        return CommitRef(full_hash=full_hash, abbreviated_id=short_hash)

    def head(self) -> CommitRef:
        """Get the commit currently checked out.

        Raises:
            RepositoryError: If the repository has no commits yet.
        """
        try:
            return self.resolve_commit("HEAD")
        except InvalidReferenceError as e:
            raise RepositoryError(
                f"{self.repository_path or Path.cwd()} has no commits",
                args_=e.args_,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    def count_commits(self, since: CommitRef | None = None) -> int:
        """Count commits leading up to HEAD.

        Args:
            since: Exclusive lower bound. Only commits that descend from it
                along the ancestry path are counted. None counts everything
                reachable from HEAD.

        Returns:
            Number of commits.
        """
        self.ensure_repository()
        if since is None:
            args = ["rev-list", "--count", "HEAD"]
        else:
            args = ["rev-list", "--count", "--ancestry-path", f"{since.full_hash}..HEAD"]
        output = self._run(args).stdout.strip()
        try:
            return int(output)
        except ValueError as e:
            raise GitError(f"Unexpected rev-list output: {output!r}", args_=args) from e

    def is_ancestor(self, commit: CommitRef) -> bool:
        """Check whether a commit is HEAD or one of its ancestors."""
        self.ensure_repository()
        args = ["merge-base", "--is-ancestor", commit.full_hash, "HEAD"]
        result = self._run(args, check=False)
        if result.returncode == 0:
            return True
        if result.returncode == 1:
            return False
        raise GitError(
            f"git merge-base exited with status {result.returncode}",
            args_=args,
            returncode=result.returncode,
            stderr=result.stderr.strip(),
        )

    def commit_metadata(self, reference: str = "HEAD") -> CommitMetadata:
        """Get author, date and message details for a commit.

        Raises:
            InvalidReferenceError: If the reference does not name a commit.
        """
        commit = self.resolve_commit(reference)
        output = self._run(
            ["log", "-1", f"--format={_LOG_FORMAT}", commit.full_hash, "--"]
        ).stdout
        fields = output.split("\x00", 7)
        if len(fields) != 8:
            raise GitError(f"Unexpected git log output for {commit.abbreviated_id}")
        _, _, author_name, author_email, author_date, committer_name, subject, body = fields
        parsed_date = _parse_timestamp(author_date)
        if parsed_date is None:
            raise GitError(f"Missing author date for {commit.abbreviated_id}")
        return CommitMetadata(
            commit=commit,
            author_name=author_name,
            author_email=author_email,
            author_date=parsed_date,
            committer_name=committer_name,
            subject=subject,
            body=body.strip(),
        )

    def remote_url(self, name: str = "origin") -> str | None:
        """Get the URL of a remote, or None if it is not configured."""
        self.ensure_repository()
        result = self._run(["remote", "get-url", name], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None
