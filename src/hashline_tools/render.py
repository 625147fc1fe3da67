"""Human-readable rendering of listings and batch errors."""

from __future__ import annotations

from collections.abc import Sequence
from functools import singledispatch

from .errors import (
    AmbiguousMatchError,
    EditParseError,
    HashlineError,
    MatchCandidate,
    MismatchError,
    NoMatchError,
    OverlapError,
    StructuralError,
)
from .fingerprint import FingerprintConfig
from .fuzzy import PREVIEW_CHARS

REREAD_HINT = (
    "The file content has changed since it was read. Use the updated anchors "
    "above, or re-read the file and try again."
)


def render_read_listing(
    lines: Sequence[str],
    fingerprints: Sequence[str],
    config: FingerprintConfig,
    start_line: int = 1,
) -> str:
    """Format ``lines`` as ``LINE<sep>FP<sep>CONTENT`` rows."""
    sep, csep = config.anchor_separator, config.content_separator
    return "\n".join(
        f"{start_line + i}{sep}{fp}{csep}{line}"
        for i, (line, fp) in enumerate(zip(lines, fingerprints))
    )


def _edit_label(index: int | None, op: str | None) -> str:
    if index is None:
        return ""
    return f"Edit #{index + 1} ({op}): " if op else f"Edit #{index + 1}: "


def _candidate(candidate: MatchCandidate) -> str:
    preview = candidate.text[:PREVIEW_CHARS]
    return f"Line {candidate.line} (similarity {candidate.similarity:.0%}): {preview}"


@singledispatch
def render_error(err: HashlineError) -> str:
    """Render any batch error as the text shown to the caller."""
    return err.message


@render_error.register
def _(err: EditParseError) -> str:
    return f"{_edit_label(err.edit_index, err.op)}{err.message}"


@render_error.register
def _(err: StructuralError) -> str:
    out = [f"Invalid edits ({err.message}):"]
    for issue in err.issues:
        out.append(f"  {_edit_label(issue.edit_index, issue.op)}{issue.message}")
    return "\n".join(out)


@render_error.register
def _(err: MismatchError) -> str:
    sep = err.anchor_separator
    stale = {m.line for m in err.mismatches}

    shown: set[int] = set()
    for line in stale:
        lo = max(1, line - err.context_lines)
        hi = min(len(err.lines), line + err.context_lines)
        shown.update(range(lo, hi + 1))

    out = [f"{err.message}. Current anchors near the stale lines (>>> marks them):", ""]
    previous = None
    for number in sorted(shown):
        if previous is not None and number != previous + 1:
            out.append("    ...")
        marker = ">>> " if number in stale else "    "
        fp = err.fingerprints[number - 1]
        out.append(f"{marker}{number}{sep}{fp}{err.content_separator}{err.lines[number - 1]}")
        previous = number

    out.append("")
    out.append("Quick fix - replace stale anchors:")
    for old, new in err.remaps.items():
        out.append(f"  {old} -> {new}")
    out.append("")
    out.append(REREAD_HINT)
    return "\n".join(out)


@render_error.register
def _(err: OverlapError) -> str:
    out = ["Overlapping edits detected:"]
    for c in err.conflicts:
        first = (
            f"edit #{c.first_index + 1} ({c.first_op}, "
            f"lines {c.first_range[0]}-{c.first_range[1]})"
        )
        second = (
            f"edit #{c.second_index + 1} ({c.second_op}, "
            f"lines {c.second_range[0]}-{c.second_range[1]})"
        )
        reason = " at the same insertion point" if c.same_insertion_point else ""
        out.append(f"  {first} and {second}{reason}")
    out.append("Merge the conflicting edits or split them across separate calls.")
    return "\n".join(out)


@render_error.register
def _(err: NoMatchError) -> str:
    out = [f"Could not find a match for: {err.target[:PREVIEW_CHARS]}"]
    if err.best is not None:
        out.append(f"Closest: {_candidate(err.best)}")
    return "\n".join(out)


@render_error.register
def _(err: AmbiguousMatchError) -> str:
    out = [
        f"Multiple matches found for: {err.target[:PREVIEW_CHARS]}",
        "Add surrounding context to make the target unique. Candidates:",
    ]
    out.extend(f"  {_candidate(c)}" for c in err.candidates)
    return "\n".join(out)
