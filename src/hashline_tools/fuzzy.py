"""Content-anchored matching for edits that have no reliable line anchor.

Strategies, tried in order (first success wins):

1. exact substring search,
2. whitespace-insensitive search mapped back to original offsets,
3. per-line edit-distance ranking.

A target that matches in more than one place is never guessed at: the matcher
fails with :class:`AmbiguousMatchError` and lists the candidates so the caller
can add context.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .errors import AmbiguousMatchError, MatchCandidate, NoMatchError

logger = logging.getLogger(__name__)

# Candidates must score above this to be ranked at all.
INCLUSION_FLOOR = 0.0
# Candidates at or above this count as plausible; more than one is ambiguous.
AMBIGUITY_THRESHOLD = 0.3
MAX_LISTED_CANDIDATES = 3
PREVIEW_CHARS = 50


@dataclass(frozen=True)
class FuzzyMatch:
    """Location of a matched span in the searched content.

    ``start``/``end`` are string offsets into the content, end exclusive.
    """

    start: int
    end: int
    text: str
    strategy: str
    line: int
    similarity: float = 1.0


def levenshtein(a: str, b: str) -> int:
    """Unit-cost insert/delete/substitute distance over code points."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def similarity(a: str, b: str) -> float:
    """Normalized similarity in ``[0, 1]``; 1.0 means identical."""
    if not a and not b:
        return 1.0
    if not a or not b:
        return 0.0
    return 1.0 - levenshtein(a, b) / max(len(a), len(b))


def _line_starts(content: str) -> list[int]:
    starts = [0]
    for idx, ch in enumerate(content):
        if ch == "\n":
            starts.append(idx + 1)
    return starts


def _line_at(starts: list[int], offset: int) -> int:
    """1-based line number containing ``offset``."""
    lo, hi = 0, len(starts) - 1
    while lo < hi:
        mid = (lo + hi + 1) // 2
        if starts[mid] <= offset:
            lo = mid
        else:
            hi = mid - 1
    return lo + 1


def _find_all(haystack: str, needle: str) -> list[int]:
    positions = []
    pos = haystack.find(needle)
    while pos != -1:
        positions.append(pos)
        pos = haystack.find(needle, pos + 1)
    return positions


def _occurrence_candidates(
    content: str, target: str, line_numbers: list[int]
) -> list[MatchCandidate]:
    lines = content.split("\n")
    return [
        MatchCandidate(line=n, similarity=similarity(lines[n - 1], target), text=lines[n - 1])
        for n in line_numbers
    ]


def _nonspace_offsets(content: str) -> list[int]:
    """Original offsets of every non-whitespace character, in order."""
    return [idx for idx, ch in enumerate(content) if not ch.isspace()]


def rank_candidates(content: str, target: str) -> list[MatchCandidate]:
    """Score every line against ``target``, best first.

    Only lines scoring above :data:`INCLUSION_FLOOR` are kept. Ties keep file
    order.
    """
    scored = [
        MatchCandidate(line=idx, similarity=similarity(line, target), text=line)
        for idx, line in enumerate(content.split("\n"), start=1)
    ]
    scored = [c for c in scored if c.similarity > INCLUSION_FLOOR]
    scored.sort(key=lambda c: c.similarity, reverse=True)
    return scored


def find_fuzzy_match(content: str, target: str) -> FuzzyMatch:
    """Locate ``target`` in ``content``.

    Args:
        content: Text to search (lines joined with ``\\n``).
        target: Text the caller wants to replace.

    Returns:
        The unique matching span.

    Raises:
        NoMatchError: Nothing plausible was found.
        AmbiguousMatchError: Several places match equally well.
    """
    if not target or not content:
        raise NoMatchError(target)

    starts = _line_starts(content)

    positions = _find_all(content, target)
    if len(positions) == 1:
        start = positions[0]
        return FuzzyMatch(
            start=start,
            end=start + len(target),
            text=target,
            strategy="exact",
            line=_line_at(starts, start),
        )
    if len(positions) > 1:
        line_numbers = [_line_at(starts, p) for p in positions[:MAX_LISTED_CANDIDATES]]
        raise AmbiguousMatchError(target, _occurrence_candidates(content, target, line_numbers))

    normalized_target = "".join(ch for ch in target if not ch.isspace())
    if normalized_target:
        offsets = _nonspace_offsets(content)
        normalized_content = "".join(content[i] for i in offsets)
        hits = _find_all(normalized_content, normalized_target)
        if len(hits) == 1:
            first = offsets[hits[0]]
            last = offsets[hits[0] + len(normalized_target) - 1]
            logger.debug("Whitespace-insensitive match for %r at offset %d", target[:50], first)
            return FuzzyMatch(
                start=first,
                end=last + 1,
                text=content[first : last + 1],
                strategy="whitespace",
                line=_line_at(starts, first),
            )
        if len(hits) > 1:
            line_numbers = [
                _line_at(starts, offsets[h]) for h in hits[:MAX_LISTED_CANDIDATES]
            ]
            raise AmbiguousMatchError(
                target, _occurrence_candidates(content, target, line_numbers)
            )

    ranked = rank_candidates(content, target)
    plausible = [c for c in ranked if c.similarity >= AMBIGUITY_THRESHOLD]
    if len(plausible) > 1:
        raise AmbiguousMatchError(target, plausible[:MAX_LISTED_CANDIDATES])
    if len(plausible) == 1:
        best = plausible[0]
        start = starts[best.line - 1]
        logger.debug(
            "Similarity match for %r at line %d (%.0f%%)",
            target[:50],
            best.line,
            best.similarity * 100,
        )
        return FuzzyMatch(
            start=start,
            end=start + len(best.text),
            text=best.text,
            strategy="similarity",
            line=best.line,
            similarity=best.similarity,
        )
    raise NoMatchError(target, ranked[0] if ranked else None)
