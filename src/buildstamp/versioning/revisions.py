"""Commit counting along the ancestry path."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from buildstamp.errors import InvalidReferenceError
from buildstamp.versioning.models import RevisionCount

if TYPE_CHECKING:
    from buildstamp.git import CommitRef, GitClient

logger = logging.getLogger(__name__)


class RevisionCounter:
    """Counts commits between a reference and HEAD."""

    def __init__(self, client: GitClient) -> None:
        self._client = client

    def count(self, reference: CommitRef | None = None) -> RevisionCount:
        """Count commits up to and including HEAD.

        Without a reference, every commit reachable from HEAD is counted.
        With one, only commits strictly after it on the ancestry path are
        counted, so side branches merged in from elsewhere do not inflate
        the number.

        Args:
            reference: Exclusive starting commit, or None for the full depth.

        Returns:
            The count. A reference that does not exist or is not an ancestor
            of HEAD yields a zero count with ``error`` set.
        """
        if reference is None:
            total = self._client.count_commits()
            logger.debug("Total commits reachable from HEAD: %d", total)
            return RevisionCount(count=total)

        try:
            self._client.resolve_commit(reference.full_hash)
        except InvalidReferenceError as e:
            logger.warning("Cannot count revisions: %s", e)
            return RevisionCount(reference=reference, error=str(e))

        if not self._client.is_ancestor(reference):
            message = f"{reference.abbreviated_id} is not an ancestor of HEAD"
            logger.warning("Cannot count revisions: %s", message)
            return RevisionCount(reference=reference, error=message)

        count = self._client.count_commits(since=reference)
        logger.debug("Commits since %s: %d", reference.abbreviated_id, count)
        return RevisionCount(count=count, reference=reference)
