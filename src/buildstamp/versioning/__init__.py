"""Build version resolution from tags and commit history."""

from buildstamp.versioning.composer import ResolutionState, VersionComposer
from buildstamp.versioning.models import (
    PartialVersion,
    ResolutionResult,
    RevisionCount,
    VersionTuple,
)
from buildstamp.versioning.parser import (
    DEFAULT_VERSION,
    VersionParser,
    VersionTier,
    parse_version_string,
)
from buildstamp.versioning.revisions import RevisionCounter
from buildstamp.versioning.tags import TagSelector, match_version_tag

__all__ = [
    # Models
    "PartialVersion",
    "VersionTuple",
    "RevisionCount",
    "ResolutionResult",
    # Components
    "VersionParser",
    "VersionTier",
    "TagSelector",
    "RevisionCounter",
    "VersionComposer",
    "ResolutionState",
    # Helpers
    "DEFAULT_VERSION",
    "match_version_tag",
    "parse_version_string",
]
