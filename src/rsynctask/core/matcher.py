"""Regular-expression line matching.

This module provides:
- Matcher: A precompiled pattern with match/extract helpers
- PROGRESS_MATCHER: Finds "to-chk=REMAIN/TOTAL" in a progress line
- SPEED_MATCHER: Finds a transfer speed such as "999.99kB/s"
"""

from __future__ import annotations

import re
from itertools import islice


class Matcher:
    """Immutable, stateless line matcher.

    Safe to share between threads: the compiled pattern holds no
    per-call state.
    """

    __slots__ = ("_regex",)

    def __init__(self, pattern: str) -> None:
        self._regex = re.compile(pattern)

    @property
    def pattern(self) -> str:
        return self._regex.pattern

    def match(self, line: str) -> bool:
        """Check if the pattern occurs anywhere in the line."""
        return self._regex.search(line) is not None

    def extract(self, line: str) -> tuple[str, ...]:
        """Get the capture groups of the first match.

        Returns:
            Captured substrings in group order, "" for groups that did
            not participate. Empty tuple if the line does not match.
        """
        found = self._regex.search(line)
        if found is None:
            return ()
        return tuple(group or "" for group in found.groups())

    def extract_all(self, line: str, limit: int = -1) -> list[tuple[str, ...]]:
        """Get every match in the line, up to limit.

        Args:
            line: Text to search.
            limit: Maximum number of matches; negative means no limit.

        Returns:
            One tuple per match: the whole match followed by its
            capture groups, so index 1 is the first group.
        """
        matches = self._regex.finditer(line)
        if limit >= 0:
            matches = islice(matches, limit)
        return [
            (found.group(0), *(group or "" for group in found.groups()))
            for found in matches
        ]

    def __repr__(self) -> str:
        return f"Matcher({self.pattern!r})"


# Progress line printed by --progress, e.g.
#     999,999 99%  999.99kB/s    0:00:59 (xfr#9, to-chk=999/9999)
PROGRESS_MATCHER = Matcher(r"\(.+-chk=(\d+.\d+)")
SPEED_MATCHER = Matcher(r"(\d+\.\d+.{2}\/s)")
