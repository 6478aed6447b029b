"""Exception hierarchy for buildstamp.

Collaborator failures (anything that comes back from the git executable)
derive from GitError. Tag classification problems derive directly from
BuildstampError because they are recoverable: the offending tag is skipped.
"""

from __future__ import annotations


class BuildstampError(Exception):
    """Base exception for all buildstamp errors."""

    pass


class GitError(BuildstampError):
    """A git invocation failed.

    Attributes:
        args_: The git arguments that were run (without the executable).
        returncode: Process exit code, or None if the process never ran.
        stderr: Captured standard error, stripped.
    """

    def __init__(
        self,
        message: str,
        args_: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.args_ = list(args_ or [])
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class GitUnavailableError(GitError):
    """The git executable could not be found."""

    pass


class RepositoryError(GitError):
    """The target path is not a usable git repository."""

    pass


class InvalidReferenceError(GitError):
    """A commit reference does not resolve to a commit.

    Attributes:
        reference: The reference exactly as the caller supplied it.
    """

    def __init__(
        self,
        reference: str,
        args_: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        self.reference = reference
        super().__init__(
            f"Unknown revision: {reference}", args_=args_, returncode=returncode, stderr=stderr
        )


class UnrelatedTagError(GitError):
    """The selected version tag is not part of HEAD's history.

    This happens when the newest version tag sits on another branch, so no
    revision count from it to HEAD exists.

    Attributes:
        tag_name: Name of the selected tag.
        commit: Abbreviated id of the commit the tag points at.
    """

    def __init__(self, tag_name: str, commit: str) -> None:
        self.tag_name = tag_name
        self.commit = commit
        super().__init__(f"Version tag {tag_name} ({commit}) is not an ancestor of HEAD")


class MalformedTagError(BuildstampError):
    """A tag name does not match the version-tag pattern exactly once.

    Attributes:
        tag_name: The offending tag name.
        match_count: How many version patterns were found in the name.
    """

    def __init__(self, tag_name: str, match_count: int) -> None:
        self.tag_name = tag_name
        self.match_count = match_count
        if match_count == 0:
            message = f"Tag '{tag_name}' contains no version number"
        else:
            message = f"Tag '{tag_name}' contains {match_count} version numbers"
        super().__init__(message)


def get_friendly_message(error: Exception) -> str:
    """Get a short, user-facing description of an error.

    Args:
        error: The exception to describe.

    Returns:
        A one-line message suitable for the console.
    """
    if isinstance(error, GitUnavailableError):
        return "git executable not found. Install git or set [git] executable in buildstamp.ini."
    if isinstance(error, RepositoryError):
        return f"Not a git repository: {error}"
    if isinstance(error, InvalidReferenceError):
        return f"Unknown commit reference '{error.reference}'"
    if isinstance(error, UnrelatedTagError):
        return f"Version tag {error.tag_name} is not in HEAD's history"
    if isinstance(error, GitError):
        detail = f" ({error.stderr})" if error.stderr else ""
        return f"git failed: {error}{detail}"
    return str(error) or type(error).__name__
