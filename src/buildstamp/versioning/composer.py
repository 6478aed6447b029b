"""Build version resolution for a repository."""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from buildstamp.errors import InvalidReferenceError, RepositoryError, UnrelatedTagError
from buildstamp.versioning.models import ResolutionResult, VersionTuple
from buildstamp.versioning.parser import VersionParser
from buildstamp.versioning.revisions import RevisionCounter
from buildstamp.versioning.tags import TagSelector

if TYPE_CHECKING:
    from buildstamp.git import CommitRef, GitClient, Tag

logger = logging.getLogger(__name__)


class ResolutionState(Enum):
    """Steps of a single version resolution, in order."""

    START = "start"
    TAG_LOOKUP = "tag_lookup"
    COMMIT_RESOLUTION = "commit_resolution"
    REVISION_COMPUTATION = "revision_computation"
    COMPOSE = "compose"
    DONE = "done"


class VersionComposer:
    """Combines the latest version tag and commit counts into a build version.

    Every collaborator failure aborts the resolution; no partial result is
    ever returned.
    """

    def __init__(
        self,
        client: GitClient,
        selector: TagSelector | None = None,
        parser: VersionParser | None = None,
        counter: RevisionCounter | None = None,
    ) -> None:
        """Initialize the composer.

        Args:
            client: Git client for the target repository.
            selector: Tag selector. Defaults to a plain TagSelector.
            parser: Tag name parser. Defaults to a VersionParser with the
                built-in 1.0.0 fallback.
            counter: Revision counter. Defaults to one bound to ``client``.
        """
        self._client = client
        self._selector = selector or TagSelector()
        self._parser = parser or VersionParser()
        self._counter = counter or RevisionCounter(client)
        self.state = ResolutionState.START

    def _advance(self, state: ResolutionState) -> None:
        logger.debug("Resolution %s -> %s", self.state.value, state.value)
        self.state = state

    def resolve(self) -> ResolutionResult:
        """Resolve the build version of HEAD.

        Returns:
            The resolved version with the tag and commits it was derived from.

        Raises:
            RepositoryError: If the repository is unusable or its history
                cannot be counted from the selected tag.
            UnrelatedTagError: If the selected tag is not an ancestor of HEAD.
            GitError: If any git query fails.
        """
        self.state = ResolutionState.START
        current_commit = self._client.head()

        self._advance(ResolutionState.TAG_LOOKUP)
        tag = self._selector.select(self._client.list_tags())

        self._advance(ResolutionState.COMMIT_RESOLUTION)
        tag_commit = self._resolve_tag_commit(tag)

        self._advance(ResolutionState.REVISION_COMPUTATION)
        _, partial = self._parser.classify(tag.name if tag else None)
        if tag_commit is None:
            revision = self._count(None)
        elif current_commit != tag_commit:
            revision = self._count_since_tag(tag, tag_commit)
        elif partial.revision is not None:
            # Only populated when explicit tag revisions are honored
            revision = partial.revision
        else:
            revision = 0

        self._advance(ResolutionState.COMPOSE)
        version = VersionTuple(
            major=partial.major,
            minor=partial.minor,
            patch=partial.patch if partial.patch is not None else 0,
            revision=revision,
        )
        result = ResolutionResult(
            version=version,
            tag=tag,
            tag_commit=tag_commit,
            current_commit=current_commit,
        )

        self._advance(ResolutionState.DONE)
        logger.info("Resolved version %s at %s", version, current_commit.abbreviated_id)
        return result

    def _resolve_tag_commit(self, tag: Tag | None) -> CommitRef | None:
        if tag is None:
            return None
        try:
            return self._client.resolve_commit(f"refs/tags/{tag.name}")
        except InvalidReferenceError as e:
            raise RepositoryError(
                f"Tag {tag.name} does not resolve to a commit",
                args_=e.args_,
                returncode=e.returncode,
                stderr=e.stderr,
            ) from e

    def _count_since_tag(self, tag: Tag | None, tag_commit: CommitRef) -> int:
        # A newer tag on another branch has no ancestry path to HEAD
        if not self._client.is_ancestor(tag_commit):
            raise UnrelatedTagError(tag.name if tag else "", tag_commit.abbreviated_id)
        return self._count(tag_commit)

    def _count(self, reference: CommitRef | None) -> int:
        counted = self._counter.count(reference)
        if not counted.ok:
            raise RepositoryError(f"Cannot count revisions: {counted.error}")
        return counted.count
