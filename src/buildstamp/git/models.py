"""Data models for git objects."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class CommitRef(BaseModel):
    """A single commit, identified by its full and abbreviated hash."""

    model_config = ConfigDict(frozen=True)

    full_hash: str
    abbreviated_id: str

    def __str__(self) -> str:
        return self.abbreviated_id


class Tag(BaseModel):
    """A tag as listed by git, pointing at a commit."""

    model_config = ConfigDict(frozen=True)

    name: str
    target_commit: CommitRef
    tagger_timestamp: datetime | None = None  # None for tags git reports without a date


class CommitMetadata(BaseModel):
    """Human-readable details of one commit."""

    model_config = ConfigDict(frozen=True)

    commit: CommitRef
    author_name: str
    author_email: str
    author_date: datetime
    committer_name: str
    subject: str
    body: str = ""
    repository_name: str | None = None

    @property
    def message(self) -> str:
        """Get the full commit message (subject and body)."""
        if self.body:
            return f"{self.subject}\n\n{self.body}"
        return self.subject

    @property
    def author(self) -> str:
        """Get the author in 'Name <email>' form."""
        return f"{self.author_name} <{self.author_email}>"
