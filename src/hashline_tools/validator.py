"""Batch validation against the pre-edit file.

All edits in a batch are checked before any is applied: a single structural
problem, stale anchor or overlap rejects the whole batch.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from .edits import (
    AnchoredEdit,
    AppendEdit,
    Edit,
    FuzzyReplaceEdit,
    IndexedEdit,
    PrependEdit,
    ReplaceEdit,
    anchors_of,
)
from .errors import (
    Conflict,
    Mismatch,
    MismatchError,
    OverlapError,
    StructuralError,
    StructuralIssue,
)
from .fingerprint import Fingerprinter

logger = logging.getLogger(__name__)

DEFAULT_MISMATCH_CONTEXT = 2


@dataclass
class ValidatedBatch:
    """A batch that passed validation, split by application pass."""

    anchored: list[IndexedEdit] = field(default_factory=list)
    fuzzy: list[IndexedEdit] = field(default_factory=list)
    duplicates_dropped: int = 0

    def __len__(self) -> int:
        return len(self.anchored) + len(self.fuzzy)


def affected_range(edit: AnchoredEdit, line_count: int) -> tuple[int, int]:
    """1-indexed inclusive line interval an anchored edit occupies.

    Insertions occupy the lines they will create; an insertion of zero lines
    yields an empty interval (start > end).
    """
    if isinstance(edit, ReplaceEdit):
        end = edit.end.line if edit.end is not None else edit.pos.line
        return edit.pos.line, end
    n = len(edit.lines)
    if isinstance(edit, AppendEdit):
        ref = edit.pos.line if edit.pos is not None else line_count
        return ref + 1, ref + n
    ref = edit.pos.line if edit.pos is not None else 1
    return ref, ref + n - 1


def _intervals_intersect(a: tuple[int, int], b: tuple[int, int]) -> bool:
    if a[0] > a[1] or b[0] > b[1]:
        return False
    return a[0] <= b[1] and b[0] <= a[1]


def _same_insertion_point(a: Edit, b: Edit) -> bool:
    pairs = ((a, b), (b, a))
    for first, second in pairs:
        if (
            isinstance(first, AppendEdit)
            and isinstance(second, PrependEdit)
            and first.pos is not None
            and second.pos is not None
            and first.pos.line == second.pos.line
        ):
            return True
    return False


def deduplicate(edits: Sequence[IndexedEdit]) -> tuple[list[IndexedEdit], int]:
    """Drop repeats of an identical edit, keeping the first occurrence."""
    seen: set[Edit] = set()
    unique: list[IndexedEdit] = []
    for item in edits:
        if item.edit in seen:
            continue
        seen.add(item.edit)
        unique.append(item)
    return unique, len(edits) - len(unique)


def find_overlaps(edits: Sequence[IndexedEdit], line_count: int) -> list[Conflict]:
    """Every pair of anchored edits whose affected ranges collide."""
    ranges = [affected_range(item.edit, line_count) for item in edits]
    conflicts: list[Conflict] = []
    for j in range(len(edits)):
        for k in range(j + 1, len(edits)):
            a, b = edits[j], edits[k]
            same_point = _same_insertion_point(a.edit, b.edit)
            if not same_point and not _intervals_intersect(ranges[j], ranges[k]):
                continue
            conflicts.append(
                Conflict(
                    first_index=a.index,
                    first_op=a.edit.kind,
                    first_range=ranges[j],
                    second_index=b.index,
                    second_op=b.edit.kind,
                    second_range=ranges[k],
                    same_insertion_point=same_point,
                )
            )
    return conflicts


class EditValidator:
    """Check a batch against the current lines and fingerprints."""

    def __init__(
        self,
        fingerprinter: Fingerprinter,
        context_lines: int = DEFAULT_MISMATCH_CONTEXT,
    ):
        self.fingerprinter = fingerprinter
        self.context_lines = context_lines

    def validate(self, lines: Sequence[str], edits: Sequence[Edit]) -> ValidatedBatch:
        """Run every check in order and return the batch ready to apply.

        Raises:
            StructuralError: An anchor is out of range or a range is inverted.
            MismatchError: An anchor's fingerprint is stale.
            OverlapError: Two edits touch overlapping lines.
        """
        indexed = [IndexedEdit(index=i, edit=e) for i, e in enumerate(edits)]

        issues = self.check_structure(lines, indexed)
        if issues:
            raise StructuralError(issues)

        self.check_fingerprints(lines, indexed)

        unique, dropped = deduplicate(indexed)
        if dropped:
            logger.debug("Dropped %d duplicate edit(s)", dropped)

        batch = ValidatedBatch(duplicates_dropped=dropped)
        for item in unique:
            if isinstance(item.edit, FuzzyReplaceEdit):
                batch.fuzzy.append(item)
            else:
                batch.anchored.append(item)

        conflicts = find_overlaps(batch.anchored, len(lines))
        if conflicts:
            raise OverlapError(conflicts)
        return batch

    def check_structure(
        self, lines: Sequence[str], edits: Sequence[IndexedEdit]
    ) -> list[StructuralIssue]:
        issues: list[StructuralIssue] = []
        total = len(lines)
        for item in edits:
            for name, anchor in anchors_of(item.edit):
                if anchor.line < 1 or anchor.line > total:
                    issues.append(
                        StructuralIssue(
                            edit_index=item.index,
                            op=item.edit.kind,
                            message=(
                                f"{name} line {anchor.line} out of range "
                                f"(file has {total} lines)"
                            ),
                        )
                    )
            edit = item.edit
            if (
                isinstance(edit, ReplaceEdit)
                and edit.end is not None
                and edit.pos.line > edit.end.line
            ):
                issues.append(
                    StructuralIssue(
                        edit_index=item.index,
                        op=edit.kind,
                        message=f"start line {edit.pos.line} > end line {edit.end.line}",
                    )
                )
        return issues

    def check_fingerprints(self, lines: Sequence[str], edits: Sequence[IndexedEdit]) -> None:
        """Compare every anchor to the current fingerprint of its line.

        Raises:
            MismatchError: With every stale anchor, not just the first.
        """
        anchors = [anchor for item in edits for _, anchor in anchors_of(item.edit)]
        if not anchors:
            return

        highest = max(anchor.line for anchor in anchors)
        upto = min(len(lines), highest + self.context_lines)
        current = self.fingerprinter.fingerprint_lines(lines, upto)

        mismatches: dict[tuple[int, str], Mismatch] = {}
        for anchor in anchors:
            actual = current[anchor.line - 1]
            if actual != anchor.fingerprint:
                key = (anchor.line, anchor.fingerprint)
                mismatches.setdefault(
                    key, Mismatch(line=anchor.line, expected=anchor.fingerprint, actual=actual)
                )

        if mismatches:
            ordered = sorted(mismatches.values(), key=lambda m: (m.line, m.expected))
            logger.debug("Rejecting batch: %d stale anchor(s)", len(ordered))
            raise MismatchError(
                ordered,
                lines[:upto],
                current,
                anchor_separator=self.fingerprinter.config.anchor_separator,
                content_separator=self.fingerprinter.config.content_separator,
                context_lines=self.context_lines,
            )
