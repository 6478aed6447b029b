"""Tag name to version number classification.

Tag names are tried against an ordered list of tiers. The first tier whose
pattern occurs anywhere in the name wins, and the first occurrence of that
pattern supplies the numbers. Names that match no tier fall back to the
default version.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from buildstamp.versioning.models import PartialVersion

logger = logging.getLogger(__name__)

DEFAULT_VERSION = PartialVersion(major=1, minor=0, patch=0)

DEFAULT_TIER = "default"


@dataclass(frozen=True)
class VersionTier:
    """One level of the tiered tag match.

    Attributes:
        name: Identifier reported alongside the parsed version.
        pattern: Regex with one capture group per version component.
    """

    name: str
    pattern: re.Pattern[str]

    def match(self, text: str) -> PartialVersion | None:
        """Parse the first occurrence of this tier's pattern in text."""
        found = self.pattern.search(text)
        if found is None:
            return None
        numbers = [int(group) for group in found.groups()]
        major, minor = numbers[0], numbers[1]
        patch = numbers[2] if len(numbers) > 2 else None
        revision = numbers[3] if len(numbers) > 3 else None
        return PartialVersion(major=major, minor=minor, patch=patch, revision=revision)


FOUR_PART = VersionTier("major.minor.patch.revision", re.compile(r"(\d+)\.(\d+)\.(\d+)\.(\d+)"))
THREE_PART = VersionTier("major.minor.patch", re.compile(r"(\d+)\.(\d+)\.(\d+)"))
TWO_PART = VersionTier("major.minor", re.compile(r"(\d+)\.(\d+)"))


def parse_version_string(value: str) -> PartialVersion:
    """Parse a strict ``MAJOR.MINOR.PATCH`` string.

    Args:
        value: Version text, optionally prefixed with ``v``.

    Returns:
        Parsed version.

    Raises:
        ValueError: If the text is not exactly three dot-separated integers.
    """
    match = re.fullmatch(r"v?(\d+)\.(\d+)\.(\d+)", value.strip())
    if match is None:
        raise ValueError(f"Expected MAJOR.MINOR.PATCH, got {value!r}")
    major, minor, patch = (int(group) for group in match.groups())
    return PartialVersion(major=major, minor=minor, patch=patch)


class VersionParser:
    """Classifies tag names into partial versions."""

    def __init__(
        self,
        honor_tag_revision: bool = False,
        default: PartialVersion = DEFAULT_VERSION,
    ) -> None:
        """Initialize the parser.

        Args:
            honor_tag_revision: Also recognize four-part tags and keep their
                fourth component as an explicit revision.
            default: Version used when a name matches no tier.
        """
        self.default = default
        self.tiers: list[VersionTier] = [THREE_PART, TWO_PART]
        if honor_tag_revision:
            self.tiers.insert(0, FOUR_PART)

    def classify(self, tag_name: str | None) -> tuple[str, PartialVersion]:
        """Classify a tag name.

        Args:
            tag_name: Tag name, or None when no tag was selected.

        Returns:
            Tuple of (tier name, parsed version). The tier is ``"default"``
            when nothing matched.
        """
        if tag_name:
            for tier in self.tiers:
                version = tier.match(tag_name)
                if version is not None:
                    return tier.name, version
            logger.debug("Tag %r matches no version tier, using default", tag_name)
        return DEFAULT_TIER, self.default

    def parse(self, tag_name: str | None) -> PartialVersion:
        """Parse a tag name into a partial version."""
        return self.classify(tag_name)[1]
