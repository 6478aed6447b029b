"""Commit metadata lookup."""

from __future__ import annotations

from typing import TYPE_CHECKING

from buildstamp.git import CommitMetadata, parse_remote_name

if TYPE_CHECKING:
    from buildstamp.git import GitClient


class CommitMetadataResolver:
    """Reads author, date and message details for a commit."""

    def __init__(self, client: GitClient, remote: str = "origin") -> None:
        self._client = client
        self._remote = remote

    def resolve(self, commit_hash: str | None = None) -> CommitMetadata:
        """Get metadata for a commit, or for HEAD if no hash is given.

        Raises:
            InvalidReferenceError: If ``commit_hash`` does not name a commit.
            RepositoryError: If the repository is unusable or has no commits.
        """
        if commit_hash is None:
            head = self._client.head()
            metadata = self._client.commit_metadata(head.full_hash)
        else:
            metadata = self._client.commit_metadata(commit_hash)

        repository_name = parse_remote_name(self._client.remote_url(self._remote))
        if repository_name is None:
            return metadata
        return metadata.model_copy(update={"repository_name": repository_name})
