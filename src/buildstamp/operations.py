"""Public entry points.

``resolve_version`` and ``resolve_commit_metadata`` return git failures as
values instead of raising them, so callers check the result type before
use. ``select_latest_version_tag`` returns None when no version tag exists,
which is a normal state and not an error.
"""

from __future__ import annotations

import logging
from pathlib import Path

from buildstamp.config import AppConfig, get_config
from buildstamp.errors import GitError, InvalidReferenceError
from buildstamp.git import CommitMetadata, CommitRef, GitClient, Tag
from buildstamp.metadata import CommitMetadataResolver
from buildstamp.versioning import (
    ResolutionResult,
    RevisionCount,
    RevisionCounter,
    TagSelector,
    VersionComposer,
    VersionParser,
)

logger = logging.getLogger(__name__)


def create_client(
    repository_path: str | Path | None = None, config: AppConfig | None = None
) -> GitClient:
    """Create a git client configured from the application config."""
    cfg = config or get_config()
    return GitClient(
        repository_path=repository_path,
        executable=cfg.git.executable,
        timeout=cfg.git.timeout,
    )


def resolve_version(
    repository_path: str | Path | None = None,
    honor_tag_revision: bool | None = None,
    config: AppConfig | None = None,
) -> ResolutionResult | GitError:
    """Resolve the four-part build version of a repository's HEAD.

    Args:
        repository_path: Repository directory. Defaults to the current directory.
        honor_tag_revision: Override the configured explicit-revision mode.
        config: Configuration to use instead of the loaded one.

    Returns:
        The resolution result, or the error that aborted it
        (RepositoryError for an unusable repository, UnrelatedTagError when
        the newest version tag is not in HEAD's history).

    Raises:
        pydantic.ValidationError: If no ``config`` is given and the config
            file on disk holds invalid values. Only git failures are
            returned as values.
    """
    cfg = config or get_config()
    if honor_tag_revision is None:
        honor_tag_revision = cfg.version.honor_tag_revision
    try:
        client = create_client(repository_path, cfg)
        parser = VersionParser(
            honor_tag_revision=honor_tag_revision, default=cfg.version.default
        )
        return VersionComposer(client, parser=parser).resolve()
    except GitError as e:
        logger.debug("Version resolution failed: %s", e)
        return e


def resolve_commit_metadata(
    repository_path: str | Path | None = None,
    commit_hash: str | None = None,
    config: AppConfig | None = None,
) -> CommitMetadata | GitError:
    """Look up metadata for a commit, or for HEAD if no hash is given.

    Returns:
        The metadata, InvalidReferenceError if ``commit_hash`` does not name
        a commit, or RepositoryError if the repository is unusable.

    Raises:
        pydantic.ValidationError: If no ``config`` is given and the config
            file on disk holds invalid values.
    """
    try:
        client = create_client(repository_path, config)
        return CommitMetadataResolver(client).resolve(commit_hash)
    except GitError as e:
        logger.debug("Commit metadata lookup failed: %s", e)
        return e


def select_latest_version_tag(
    repository_path: str | Path | None = None,
    config: AppConfig | None = None,
) -> Tag | None:
    """Get the newest tag carrying a version number.

    Returns:
        The tag, or None if the repository has no version tag.

    Raises:
        RepositoryError: If the repository is unusable.
    """
    client = create_client(repository_path, config)
    return TagSelector().select(client.list_tags())


def count_revisions(
    repository_path: str | Path | None = None,
    reference: CommitRef | str | None = None,
    config: AppConfig | None = None,
) -> RevisionCount:
    """Count commits up to HEAD, optionally only those after ``reference``.

    Args:
        repository_path: Repository directory. Defaults to the current directory.
        reference: Commit (or any revision expression) to count from.
        config: Configuration to use instead of the loaded one.

    Returns:
        The count. An unknown or unrelated reference gives a zero count with
        ``error`` set.

    Raises:
        RepositoryError: If the repository is unusable.
    """
    client = create_client(repository_path, config)
    if isinstance(reference, str):
        try:
            reference = client.resolve_commit(reference)
        except InvalidReferenceError as e:
            return RevisionCount(error=str(e))
    return RevisionCounter(client).count(reference)
