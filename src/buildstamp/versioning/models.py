"""Data models for version resolution results."""

from pydantic import BaseModel, ConfigDict, Field

from buildstamp.git.models import CommitRef, Tag


class PartialVersion(BaseModel):
    """Version numbers read from a tag name.

    ``patch`` is None for two-part tags. ``revision`` is only set by the
    four-part tier, which is off unless explicit tag revisions are honored.
    """

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int | None = Field(default=None, ge=0)
    revision: int | None = Field(default=None, ge=0)


class VersionTuple(BaseModel):
    """A fully populated four-part build version."""

    model_config = ConfigDict(frozen=True)

    major: int = Field(ge=0)
    minor: int = Field(ge=0)
    patch: int = Field(ge=0)
    revision: int = Field(ge=0)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}.{self.revision}"

    @property
    def short(self) -> str:
        """Get the three-part MAJOR.MINOR.PATCH form."""
        return f"{self.major}.{self.minor}.{self.patch}"


class RevisionCount(BaseModel):
    """Result of counting commits since a reference.

    When the reference is not part of HEAD's history the count is 0 and
    ``error`` explains why. A non-empty ``error`` must never be read as a
    real count.
    """

    model_config = ConfigDict(frozen=True)

    count: int = Field(default=0, ge=0)
    reference: CommitRef | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Check if the count is valid."""
        return self.error is None

    def __int__(self) -> int:
        return self.count


class ResolutionResult(BaseModel):
    """Outcome of resolving the build version of a repository."""

    model_config = ConfigDict(frozen=True)

    version: VersionTuple
    tag: Tag | None = None
    tag_commit: CommitRef | None = None
    current_commit: CommitRef

    @property
    def is_tagged_build(self) -> bool:
        """Check if HEAD is exactly the selected tag's commit."""
        return self.tag_commit is not None and self.tag_commit == self.current_commit
