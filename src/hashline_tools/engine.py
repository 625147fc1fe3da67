"""Read listings and edit batches over in-memory file text.

The engine is pure: it takes the file's text and returns new text. Reading
from and writing to disk is left to the callers (MCP tools, CLI).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from .applier import EditApplier
from .config import settings
from .diff_report import DEFAULT_DIFF_CONTEXT, DiffReporter, render_diff
from .document import TextDocument
from .edits import parse_edit_batch
from .errors import HashlineError
from .fingerprint import (
    CHAINED_CONFIG,
    FingerprintConfig,
    Fingerprinter,
    FingerprintMode,
    config_for_mode,
)
from .render import render_read_listing
from .validator import DEFAULT_MISMATCH_CONTEXT, EditValidator

logger = logging.getLogger(__name__)

DEFAULT_READ_LIMIT = 2000
NO_CHANGES = "No changes made"


@dataclass
class EditOutcome:
    """Result of a successfully applied (or no-op) edit batch."""

    text: str
    changed: bool
    first_changed_line: int | None
    diff: str
    edits_applied: int = 0
    duplicates_dropped: int = 0


class HashlineEngine:
    """Render anchored listings and apply anchored edit batches.

    Args:
        config: Fingerprint config to use. Takes precedence over ``mode``.
        mode: Fingerprint mode name, used when ``config`` is not given.
        diff_context: Rows of context kept around each change in diffs.
        mismatch_context: Lines shown on each side of a stale anchor in
            mismatch errors.
    """

    def __init__(
        self,
        config: FingerprintConfig | None = None,
        *,
        mode: FingerprintMode | str | None = None,
        diff_context: int = DEFAULT_DIFF_CONTEXT,
        mismatch_context: int = DEFAULT_MISMATCH_CONTEXT,
    ):
        if config is None:
            config = config_for_mode(mode) if mode else CHAINED_CONFIG
        self.config = config
        self.fingerprinter = Fingerprinter(config)
        self.validator = EditValidator(self.fingerprinter, context_lines=mismatch_context)
        self.applier = EditApplier()
        self.reporter = DiffReporter(self.fingerprinter, context=diff_context)

    @property
    def mode(self) -> FingerprintMode:
        return self.config.mode

    def render_read(self, raw_text: str, offset: int = 0, limit: int = DEFAULT_READ_LIMIT) -> str:
        """List lines ``[offset, offset + limit)`` with their anchors.

        ``offset`` is 0-based. A non-positive ``limit`` lists to end of file.
        """
        lines = TextDocument.from_text(raw_text).lines
        total = len(lines)
        start = min(max(offset, 0), total)
        end = total if limit <= 0 else min(total, start + limit)

        fingerprints = self.fingerprinter.fingerprint_lines(lines, end)
        listing = render_read_listing(
            lines[start:end], fingerprints[start:end], self.config, start_line=start + 1
        )

        if end < total:
            trailer = f"(File has more lines. Use 'offset' parameter to read beyond line {end})"
        else:
            trailer = f"(End of file - {total} total lines)"

        parts = ["<file>"]
        if listing:
            parts.append(listing)
        parts.extend(["", trailer, "</file>"])
        return "\n".join(parts)

    def apply_edit_batch(self, raw_text: str, edit_batch: str | list[Any]) -> EditOutcome:
        """Validate and apply a batch atomically.

        Args:
            raw_text: Current file content.
            edit_batch: JSON array text, or the decoded list.

        Returns:
            The outcome; ``text`` is ``raw_text`` itself when nothing changed.

        Raises:
            HashlineError: Any parse, structural, stale-anchor, overlap or
                match failure. Nothing is applied in that case.
        """
        document = TextDocument.from_text(raw_text)
        try:
            edits = parse_edit_batch(edit_batch)
            logger.debug("Applying batch of %d edit(s) to %d lines", len(edits), len(document))
            batch = self.validator.validate(document.lines, edits)
            new_lines = self.applier.apply(document.lines, batch)
        except HashlineError as exc:
            logger.info("Rejected edit batch: %s", exc.error_code)
            raise

        if new_lines == document.lines:
            logger.info("Edit batch produced no changes")
            return EditOutcome(
                text=raw_text,
                changed=False,
                first_changed_line=None,
                diff=NO_CHANGES,
                edits_applied=len(batch),
                duplicates_dropped=batch.duplicates_dropped,
            )

        report = self.reporter.build(document.lines, new_lines)
        logger.info(
            "Applied %d edit(s); first changed line %s",
            len(batch),
            report.first_changed_line,
        )
        return EditOutcome(
            text=document.to_text(new_lines),
            changed=True,
            first_changed_line=report.first_changed_line,
            diff=render_diff(report),
            edits_applied=len(batch),
            duplicates_dropped=batch.duplicates_dropped,
        )


def _default_engine(mode: FingerprintMode | str | None = None) -> HashlineEngine:
    return HashlineEngine(
        mode=mode or settings.fingerprint_mode,
        diff_context=settings.diff_context,
        mismatch_context=settings.mismatch_context,
    )


def render_read(
    raw_text: str,
    offset: int = 0,
    limit: int | None = None,
    mode: FingerprintMode | str | None = None,
) -> str:
    """Render a listing with the configured defaults."""
    if limit is None:
        limit = settings.read_limit
    return _default_engine(mode).render_read(raw_text, offset, limit)


def apply_edit_batch(
    raw_text: str,
    edit_batch: str | list[Any],
    mode: FingerprintMode | str | None = None,
) -> EditOutcome:
    """Apply a batch with the configured defaults."""
    return _default_engine(mode).apply_edit_batch(raw_text, edit_batch)
