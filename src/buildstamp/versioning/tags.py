"""Selection of the most recent version tag."""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable

from buildstamp.errors import MalformedTagError
from buildstamp.git.models import Tag

logger = logging.getLogger(__name__)

# Optional "v" followed by two or three dot-separated integers
VERSION_TAG_PATTERN = re.compile(r"v?\d+\.\d+(?:\.\d+)?")


def match_version_tag(name: str) -> str:
    """Find the single version number embedded in a tag name.

    Args:
        name: Tag name.

    Returns:
        The matched version text (e.g. ``"v1.2.3"``).

    Raises:
        MalformedTagError: If the name contains no version number or more than one.
    """
    matches = VERSION_TAG_PATTERN.findall(name)
    if len(matches) != 1:
        raise MalformedTagError(name, len(matches))
    return matches[0]


class TagSelector:
    """Picks the newest tag that carries exactly one version number."""

    def select(self, tags: Iterable[Tag]) -> Tag | None:
        """Scan tags in the given order and return the first version tag.

        The caller supplies tags newest first. Ties in timestamp keep the
        supplied order.

        Args:
            tags: Tags, newest first.

        Returns:
            The selected tag, or None if no tag is a version tag.
        """
        for tag in tags:
            try:
                matched = match_version_tag(tag.name)
            except MalformedTagError as e:
                logger.debug("Skipping tag: %s", e)
                continue
            logger.info("Selected version tag %s (%s)", tag.name, matched)
            return tag
        logger.info("No version tag found")
        return None
