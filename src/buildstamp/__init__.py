"""buildstamp - Deterministic build version numbers from git tags and history."""

from buildstamp._version import __version__
from buildstamp.errors import (
    BuildstampError,
    GitError,
    GitUnavailableError,
    InvalidReferenceError,
    MalformedTagError,
    RepositoryError,
    UnrelatedTagError,
)
from buildstamp.git import CommitMetadata, CommitRef, Tag
from buildstamp.operations import (
    count_revisions,
    resolve_commit_metadata,
    resolve_version,
    select_latest_version_tag,
)
from buildstamp.versioning import (
    PartialVersion,
    ResolutionResult,
    RevisionCount,
    VersionTuple,
)

__all__ = [
    "__version__",
    # Operations
    "resolve_version",
    "resolve_commit_metadata",
    "select_latest_version_tag",
    "count_revisions",
    # Models
    "CommitRef",
    "CommitMetadata",
    "Tag",
    "PartialVersion",
    "VersionTuple",
    "RevisionCount",
    "ResolutionResult",
    # Errors
    "BuildstampError",
    "GitError",
    "GitUnavailableError",
    "RepositoryError",
    "InvalidReferenceError",
    "UnrelatedTagError",
    "MalformedTagError",
]
