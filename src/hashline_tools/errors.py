"""Hashline error hierarchy.

Every failure of an edit batch is reported through a ``HashlineError``
subclass. Errors carry structured fields only (mismatch records, conflicting
edit pairs, fuzzy-match candidates) so that callers can act on them
programmatically; :func:`hashline_tools.render.render_error` turns them into
the human-readable listing shown to the caller.

Error Categories:
- EditParseError: malformed batch JSON, unknown op, unparseable anchor
- StructuralError: anchor out of range, inverted range
- MismatchError: anchor fingerprint no longer matches the file
- OverlapError: two edits touch intersecting line ranges
- NoMatchError / AmbiguousMatchError: content-anchored edit can't be located
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import asdict, dataclass
from enum import StrEnum
from typing import Any


class ErrorCategory(StrEnum):
    """High-level error categories for classification."""

    PARSE = "parse"
    STRUCTURE = "structure"
    STALE = "stale"
    CONFLICT = "conflict"
    MATCH = "match"


@dataclass(frozen=True)
class StructuralIssue:
    """One structural problem found in an edit."""

    edit_index: int
    op: str
    message: str


@dataclass(frozen=True)
class Mismatch:
    """An anchor whose fingerprint disagrees with the current file."""

    line: int
    expected: str
    actual: str


@dataclass(frozen=True)
class Conflict:
    """Two edits whose affected line ranges collide."""

    first_index: int
    first_op: str
    first_range: tuple[int, int]
    second_index: int
    second_op: str
    second_range: tuple[int, int]
    same_insertion_point: bool = False


@dataclass(frozen=True)
class MatchCandidate:
    """A line considered by the fuzzy matcher."""

    line: int
    similarity: float
    text: str


class HashlineError(Exception):
    """Base exception for all edit-batch failures.

    Attributes:
        error_code: Stable machine-readable code.
        category: Category for routing and logging.
        retry_allowed: Whether resubmitting a corrected batch can succeed.
    """

    error_code: str = "HASHLINE_ERROR"
    category: ErrorCategory = ErrorCategory.PARSE
    retry_allowed: bool = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def details(self) -> dict[str, Any]:
        """Structured payload specific to the error type."""
        return {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "category": self.category.value,
            "retry_allowed": self.retry_allowed,
            "details": self.details(),
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.error_code}, message={self.message!r})"


class EditParseError(HashlineError):
    """Raised when the batch or one of its edits can't be decoded."""

    error_code = "PARSE_ERROR"
    category = ErrorCategory.PARSE

    def __init__(self, message: str, *, edit_index: int | None = None, op: str | None = None):
        super().__init__(message)
        self.edit_index = edit_index
        self.op = op

    def details(self) -> dict[str, Any]:
        return {"edit_index": self.edit_index, "op": self.op}


class StructuralError(HashlineError):
    """Raised when edits reference lines that don't exist or inverted ranges."""

    error_code = "STRUCTURAL_ERROR"
    category = ErrorCategory.STRUCTURE

    def __init__(self, issues: Sequence[StructuralIssue]):
        self.issues = list(issues)
        count = len(self.issues)
        super().__init__(f"{count} invalid edit{'s' if count != 1 else ''} in batch")

    def details(self) -> dict[str, Any]:
        return {"issues": [asdict(issue) for issue in self.issues]}


class MismatchError(HashlineError):
    """Raised when anchors are stale.

    Carries the current lines and their fingerprints (up to ``context_lines``
    past the last mismatch) so the caller can retry without a full re-read.
    The same radius bounds the listing shown around each stale line.
    """

    error_code = "FINGERPRINT_MISMATCH"
    category = ErrorCategory.STALE

    def __init__(
        self,
        mismatches: Sequence[Mismatch],
        lines: Sequence[str],
        fingerprints: Sequence[str],
        *,
        anchor_separator: str = "#",
        content_separator: str = ":",
        context_lines: int = 2,
    ):
        self.mismatches = list(mismatches)
        self.lines = tuple(lines)
        self.fingerprints = tuple(fingerprints)
        self.anchor_separator = anchor_separator
        self.content_separator = content_separator
        self.context_lines = context_lines
        self.remaps = {
            f"{m.line}{anchor_separator}{m.expected}": f"{m.line}{anchor_separator}{m.actual}"
            for m in self.mismatches
        }
        count = len(self.mismatches)
        super().__init__(
            f"{count} line{'s have' if count != 1 else ' has'} changed since last read"
        )

    def details(self) -> dict[str, Any]:
        return {
            "mismatches": [asdict(m) for m in self.mismatches],
            "remaps": dict(self.remaps),
        }


class OverlapError(HashlineError):
    """Raised when two edits in one batch touch overlapping line ranges."""

    error_code = "OVERLAPPING_EDITS"
    category = ErrorCategory.CONFLICT

    def __init__(self, conflicts: Sequence[Conflict]):
        self.conflicts = list(conflicts)
        super().__init__(f"Overlapping edits detected ({len(self.conflicts)} conflicting pairs)")

    def details(self) -> dict[str, Any]:
        return {"conflicts": [asdict(c) for c in self.conflicts]}


class NoMatchError(HashlineError):
    """Raised when a content-anchored edit finds nothing to replace."""

    error_code = "NO_MATCH"
    category = ErrorCategory.MATCH

    def __init__(self, target: str, best: MatchCandidate | None = None):
        self.target = target
        self.best = best
        super().__init__(f"Could not find {target[:50]!r}")

    def details(self) -> dict[str, Any]:
        return {"target": self.target, "best": asdict(self.best) if self.best else None}


class AmbiguousMatchError(HashlineError):
    """Raised when a content-anchored edit matches several places equally well."""

    error_code = "AMBIGUOUS_MATCH"
    category = ErrorCategory.MATCH

    def __init__(self, target: str, candidates: Sequence[MatchCandidate]):
        self.target = target
        self.candidates = list(candidates)
        super().__init__(f"Multiple matches found for {target[:50]!r}")

    def details(self) -> dict[str, Any]:
        return {"target": self.target, "candidates": [asdict(c) for c in self.candidates]}
