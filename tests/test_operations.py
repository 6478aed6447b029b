"""End-to-end tests against real git repositories."""

from pathlib import Path

import pytest
from conftest import GitRepo, requires_git
from pydantic import ValidationError

from buildstamp import (
    CommitMetadata,
    InvalidReferenceError,
    RepositoryError,
    ResolutionResult,
    UnrelatedTagError,
    count_revisions,
    resolve_commit_metadata,
    resolve_version,
    select_latest_version_tag,
)
from buildstamp.config import AppConfig, VersionConfig
from buildstamp.errors import get_friendly_message

pytestmark = requires_git


def resolved(path: Path, **kwargs: object) -> ResolutionResult:
    result = resolve_version(path, **kwargs)  # type: ignore[arg-type]
    assert isinstance(result, ResolutionResult), result
    return result


class TestResolveVersion:
    """Tests for resolve_version."""

    def test_untagged_repository(self, git_repo: GitRepo) -> None:
        """Test seven untagged commits give 1.0.0.7."""
        git_repo.commits(7)

        result = resolved(git_repo.path)

        assert str(result.version) == "1.0.0.7"
        assert result.tag is None

    def test_two_part_tag_with_commits_after(self, git_repo: GitRepo) -> None:
        """Test v2.1 followed by three commits gives 2.1.0.3."""
        git_repo.commits(2)
        tagged = git_repo.commit("release")
        git_repo.tag("v2.1")
        git_repo.commits(3)

        result = resolved(git_repo.path)

        assert str(result.version) == "2.1.0.3"
        assert result.tag is not None
        assert result.tag.name == "v2.1"
        assert result.tag_commit is not None
        assert result.tag_commit.full_hash == tagged

    def test_three_part_tag_on_head(self, git_repo: GitRepo) -> None:
        """Test building the tagged commit gives revision 0."""
        git_repo.commits(4)
        git_repo.tag("v1.2.3")

        result = resolved(git_repo.path)

        assert str(result.version) == "1.2.3.0"
        assert result.is_tagged_build is True

    def test_lightweight_tag(self, git_repo: GitRepo) -> None:
        """Test lightweight tags are selected like annotated ones."""
        git_repo.commit()
        git_repo.tag("3.4", annotated=False)
        git_repo.commits(2)

        assert str(resolved(git_repo.path).version) == "3.4.0.2"

    def test_newest_version_tag_selected(self, git_repo: GitRepo) -> None:
        """Test the most recently created version tag wins over older ones."""
        git_repo.commit()
        git_repo.tag("v1.0")
        git_repo.commit()
        git_repo.tag("v1.1")
        git_repo.commit()

        assert str(resolved(git_repo.path).version) == "1.1.0.1"

    def test_malformed_and_plain_tags_skipped(self, git_repo: GitRepo) -> None:
        """Test newer non-version and ambiguous tags fall through to an older version tag."""
        git_repo.commit()
        git_repo.tag("v5.2.1")
        git_repo.commit()
        git_repo.tag("deployed")
        git_repo.commit()
        git_repo.tag("nightly-2024.06-v9.9")

        assert str(resolved(git_repo.path).version) == "5.2.1.2"

    def test_merged_side_branch_not_counted(self, git_repo: GitRepo) -> None:
        """Test commits from a branch forked before the tag are not counted."""
        git_repo.commit("root")
        main = git_repo.branch
        git_repo.checkout("-b", "feature")
        git_repo.commits(2)
        git_repo.checkout(main)
        git_repo.commit("tagged")
        git_repo.tag("v1.0")
        git_repo.commit("after tag")
        git_repo.merge("feature")

        result = resolved(git_repo.path)

        # "after tag" and the merge commit; the two feature commits predate the tag
        assert result.version.revision == 2

    def test_newest_tag_on_other_branch(self, git_repo: GitRepo) -> None:
        """Test a newer release-branch tag aborts with its own error, not a repository error."""
        git_repo.commits(2)
        git_repo.tag("v1.0")
        main = git_repo.branch
        git_repo.checkout("-b", "release")
        git_repo.commit("release fix")
        git_repo.tag("v1.1")
        git_repo.checkout(main)
        git_repo.commits(3)

        result = resolve_version(git_repo.path)

        assert isinstance(result, UnrelatedTagError)
        assert not isinstance(result, RepositoryError)
        assert result.tag_name == "v1.1"
        assert get_friendly_message(result) == "Version tag v1.1 is not in HEAD's history"

    def test_four_part_tag(self, git_repo: GitRepo) -> None:
        """Test four-part tags use three numbers unless revisions are honored."""
        git_repo.commits(3)
        git_repo.tag("v1.2.3.4")

        assert str(resolved(git_repo.path).version) == "1.2.3.0"
        assert str(resolved(git_repo.path, honor_tag_revision=True).version) == "1.2.3.4"

    def test_configured_default_version(self, git_repo: GitRepo) -> None:
        git_repo.commits(2)
        config = AppConfig(version=VersionConfig(default_version="0.1.0"))

        assert str(resolved(git_repo.path, config=config).version) == "0.1.0.2"

    def test_idempotent(self, git_repo: GitRepo) -> None:
        """Test two resolutions of the same state are identical."""
        git_repo.commit()
        git_repo.tag("v2.0")
        git_repo.commits(2)

        assert resolved(git_repo.path) == resolved(git_repo.path)

    def test_not_a_repository(self, tmp_path: Path) -> None:
        """Test a plain directory returns RepositoryError."""
        plain = tmp_path / "plain"
        plain.mkdir()

        assert isinstance(resolve_version(plain), RepositoryError)

    def test_invalid_config_file_raises(
        self, git_repo: GitRepo, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test a bad config file is raised, not returned as a git failure."""
        git_repo.commit()
        (git_repo.path / "buildstamp.ini").write_text(
            "[git]\ntimeout = 0\n", encoding="utf-8"
        )
        monkeypatch.chdir(git_repo.path)

        with pytest.raises(ValidationError):
            resolve_version(git_repo.path)
        with pytest.raises(ValidationError):
            resolve_commit_metadata(git_repo.path)

    def test_repository_without_commits(self, git_repo: GitRepo) -> None:
        """Test an empty repository returns RepositoryError."""
        assert isinstance(resolve_version(git_repo.path), RepositoryError)


class TestCountRevisions:
    """Tests for count_revisions."""

    def test_total_depth(self, git_repo: GitRepo) -> None:
        git_repo.commits(5)
        assert count_revisions(git_repo.path).count == 5

    def test_since_reference(self, git_repo: GitRepo) -> None:
        start = git_repo.commit()
        git_repo.commits(4)

        result = count_revisions(git_repo.path, start)

        assert result.ok
        assert result.count == 4

    def test_monotonic_along_history(self, git_repo: GitRepo) -> None:
        """Test the count never decreases as HEAD moves forward."""
        start = git_repo.commit()
        counts = []
        for _ in range(4):
            git_repo.commit()
            counts.append(count_revisions(git_repo.path, start).count)
        assert counts == sorted(counts)
        assert counts == [1, 2, 3, 4]

    def test_invalid_reference(self, git_repo: GitRepo) -> None:
        """Test an unknown hash gives zero with an error flag."""
        git_repo.commits(2)

        result = count_revisions(git_repo.path, "0123456789abcdef0123456789abcdef01234567")

        assert result.count == 0
        assert result.ok is False


class TestSelectLatestVersionTag:
    """Tests for select_latest_version_tag."""

    def test_no_tags(self, git_repo: GitRepo) -> None:
        git_repo.commit()
        assert select_latest_version_tag(git_repo.path) is None

    def test_selects_tag(self, git_repo: GitRepo) -> None:
        tagged = git_repo.commit()
        git_repo.tag("v0.9")
        git_repo.commit()

        tag = select_latest_version_tag(git_repo.path)

        assert tag is not None
        assert tag.name == "v0.9"
        assert tag.target_commit.full_hash == tagged
        assert tag.tagger_timestamp is not None

    def test_tag_of_tag_points_at_commit(self, git_repo: GitRepo) -> None:
        """Test a tag of an annotated tag reports the underlying commit."""
        tagged = git_repo.commit()
        git_repo.tag("v1.9")
        git_repo.tag("v2.0", ref="v1.9")

        tag = select_latest_version_tag(git_repo.path)

        assert tag is not None
        assert tag.name == "v2.0"
        assert tag.target_commit.full_hash == tagged

    def test_not_a_repository_raises(self, tmp_path: Path) -> None:
        plain = tmp_path / "plain"
        plain.mkdir()

        with pytest.raises(RepositoryError):
            select_latest_version_tag(plain)


class TestResolveCommitMetadata:
    """Tests for resolve_commit_metadata."""

    def test_head(self, git_repo: GitRepo) -> None:
        git_repo.commit("first")
        head = git_repo.commit("second\n\nwith a body")

        metadata = resolve_commit_metadata(git_repo.path)

        assert isinstance(metadata, CommitMetadata)
        assert metadata.commit.full_hash == head
        assert metadata.subject == "second"
        assert metadata.body == "with a body"
        assert metadata.author_name == "Test Author"
        assert metadata.committer_name == "Test Committer"

    def test_specific_commit(self, git_repo: GitRepo) -> None:
        first = git_repo.commit("first")
        git_repo.commit("second")

        metadata = resolve_commit_metadata(git_repo.path, first[:10])

        assert isinstance(metadata, CommitMetadata)
        assert metadata.commit.full_hash == first

    def test_repository_name_from_remote(self, git_repo: GitRepo) -> None:
        git_repo.commit()
        git_repo.git("remote", "add", "origin", "git@example.com:team/widgets.git")

        metadata = resolve_commit_metadata(git_repo.path)

        assert isinstance(metadata, CommitMetadata)
        assert metadata.repository_name == "widgets"

    def test_invalid_hash(self, git_repo: GitRepo) -> None:
        """Test an unknown hash returns InvalidReferenceError and no metadata."""
        git_repo.commit()

        result = resolve_commit_metadata(git_repo.path, "ffffffffffff")

        assert isinstance(result, InvalidReferenceError)
        assert result.reference == "ffffffffffff"
