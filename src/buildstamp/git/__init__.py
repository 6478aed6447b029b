"""Git command-line integration."""

from buildstamp.git.client import GitClient, parse_remote_name
from buildstamp.git.models import CommitMetadata, CommitRef, Tag

__all__ = [
    "GitClient",
    "parse_remote_name",
    "CommitRef",
    "CommitMetadata",
    "Tag",
]
