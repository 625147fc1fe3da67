"""Apply a validated batch to a line sequence.

Anchored edits are spliced bottom-up so every anchor keeps meaning the line it
named in the pre-edit file. Content-anchored replacements run afterwards, in
submission order, on the already-spliced text.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence

from .edits import AppendEdit, FuzzyReplaceEdit, IndexedEdit, PrependEdit, ReplaceEdit
from .fuzzy import FuzzyMatch, find_fuzzy_match
from .validator import ValidatedBatch

logger = logging.getLogger(__name__)

Matcher = Callable[[str, str], FuzzyMatch]


def splice_position(item: IndexedEdit, line_count: int) -> tuple[int, int]:
    """Sort key placing an edit by the original line it touches.

    The second element orders an insertion just below the next line, so
    ``append after k`` sorts between line ``k`` and line ``k + 1``.
    """
    edit = item.edit
    if isinstance(edit, ReplaceEdit):
        end = edit.end.line if edit.end is not None else edit.pos.line
        return end, 0
    if isinstance(edit, AppendEdit):
        return (edit.pos.line if edit.pos is not None else line_count), 1
    if isinstance(edit, PrependEdit):
        return (edit.pos.line - 1 if edit.pos is not None else 0), 1
    raise TypeError(f"not an anchored edit: {edit!r}")


class EditApplier:
    """Apply anchored splices, then content-anchored replacements."""

    def __init__(self, matcher: Matcher = find_fuzzy_match):
        self.matcher = matcher

    def apply(self, lines: Sequence[str], batch: ValidatedBatch) -> list[str]:
        """Return the edited lines; ``lines`` itself is left untouched.

        Raises:
            NoMatchError: A content-anchored edit found nothing to replace.
            AmbiguousMatchError: A content-anchored edit matched several places.
        """
        working = list(lines)
        total = len(working)

        def order(item: IndexedEdit) -> tuple[int, int, int]:
            line, rank = splice_position(item, total)
            return -line, -rank, item.index

        for item in sorted(batch.anchored, key=order):
            self._splice(working, item.edit)

        if batch.fuzzy:
            working = self._replace_text(working, [item.edit for item in batch.fuzzy])
        return working

    @staticmethod
    def _splice(working: list[str], edit) -> None:
        new = list(edit.lines)
        if isinstance(edit, ReplaceEdit):
            end = edit.end.line if edit.end is not None else edit.pos.line
            working[edit.pos.line - 1 : end] = new
        elif isinstance(edit, AppendEdit):
            at = edit.pos.line if edit.pos is not None else len(working)
            working[at:at] = new
        else:
            at = edit.pos.line - 1 if edit.pos is not None else 0
            working[at:at] = new

    def _replace_text(self, lines: list[str], edits: list[FuzzyReplaceEdit]) -> list[str]:
        content = "\n".join(lines)
        for edit in edits:
            if edit.all:
                content = self._replace_all(content, edit)
                continue
            match = self.matcher(content, edit.old_text)
            logger.debug("Replacing %s match at line %d", match.strategy, match.line)
            content = content[: match.start] + edit.new_text + content[match.end :]
        return content.split("\n") if content else []

    @staticmethod
    def _replace_all(content: str, edit: FuzzyReplaceEdit) -> str:
        """Replace every occurrence. Zero occurrences leave the content as is."""
        if "\n" in edit.old_text:
            return content.replace(edit.old_text, edit.new_text)
        return "\n".join(
            line.replace(edit.old_text, edit.new_text) for line in content.split("\n")
        )
