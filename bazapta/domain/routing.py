"""
Request path classification.

Paths are matched against an explicit, ordered list of matchers. The first
matcher that recognizes the path decides its kind; a path no matcher
recognizes is a NoMatch. The order is a contract:

    binary > info (hierarchical, then flat) > collection > root > term

so `/dists/d/c/n_v_a.deb` is never taken for an info request about an
architecture called `a.deb`.
"""

from __future__ import annotations

import itertools
import logging
import re
from typing import Callable, List, Optional, Sequence, Tuple

from bazapta.domain.errors import UnsupportedDistribution
from bazapta.domain.grammar import (
    BINARY_PATH,
    COLLECTION_PATH,
    FLAT_INFO_PATH,
    INFO_PATH,
    TERM_PATH,
)
from bazapta.domain.models import (
    BinaryMatch,
    CollectionMatch,
    InfoMatch,
    NoMatch,
    PathMatch,
    RootMatch,
    TermMatch,
)

logger = logging.getLogger(__name__)

Matcher = Callable[[str], Optional[PathMatch]]


def _regex_matcher(pattern: re.Pattern, model) -> Matcher:
    def match(path: str) -> Optional[PathMatch]:
        m = pattern.match(path)
        if m is None:
            return None
        return model(**m.groupdict())

    match.__name__ = f"match_{model.__name__}"
    return match


def _match_root(path: str) -> Optional[PathMatch]:
    return RootMatch() if path in ("", "/") else None


MATCHERS: Tuple[Matcher, ...] = (
    _regex_matcher(BINARY_PATH, BinaryMatch),
    _regex_matcher(INFO_PATH, InfoMatch),
    _regex_matcher(FLAT_INFO_PATH, InfoMatch),
    _regex_matcher(COLLECTION_PATH, CollectionMatch),
    _match_root,
    _regex_matcher(TERM_PATH, TermMatch),
)


def classify(path: str) -> PathMatch:
    """Return the match of the first matcher that recognizes `path`."""
    for matcher in MATCHERS:
        result = matcher(path)
        if result is not None:
            return result
    return NoMatch(path=path)


class ResourceRouter:
    """
    Per-process routing state: the distributions found at startup and a
    request counter used to correlate log lines.

    The distribution list never changes after construction. The counter is
    diagnostic only.
    """

    def __init__(self, distributions: Sequence[str]):
        self._distributions: Tuple[str, ...] = tuple(distributions)
        self._ids = itertools.count(1)

    @property
    def distributions(self) -> List[str]:
        return list(self._distributions)

    def next_request_id(self) -> int:
        return next(self._ids)

    def is_supported(self, distribution: str) -> bool:
        return distribution in self._distributions

    def ensure_supported(self, match: PathMatch) -> PathMatch:
        distribution = getattr(match, "distribution", None)
        if distribution is not None and not self.is_supported(distribution):
            logger.debug(f"rejecting unknown distribution '{distribution}'")
            raise UnsupportedDistribution(distribution)
        return match
