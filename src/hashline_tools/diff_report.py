"""Compact diff of an applied edit, annotated with the new anchors."""

from __future__ import annotations

import difflib
from collections.abc import Sequence
from dataclasses import dataclass, field

from .fingerprint import Fingerprinter

DEFAULT_DIFF_CONTEXT = 5
GAP_MARKER = "..."


@dataclass(frozen=True)
class DiffRow:
    """One row of the diff.

    ``kind`` is ``"context"``, ``"insert"``, ``"delete"`` or ``"gap"``.
    Line numbers are 1-based; the side a row doesn't exist on is ``None``.
    """

    kind: str
    old_line: int | None = None
    new_line: int | None = None
    text: str = ""
    fingerprint: str = ""


@dataclass
class DiffReport:
    rows: list[DiffRow] = field(default_factory=list)
    first_changed_line: int | None = None
    anchor_separator: str = "#"
    content_separator: str = ":"
    fingerprint_width: int = 4

    @property
    def changed(self) -> bool:
        return self.first_changed_line is not None


class DiffReporter:
    """Build a windowed diff between the pre- and post-edit lines."""

    def __init__(self, fingerprinter: Fingerprinter, context: int = DEFAULT_DIFF_CONTEXT):
        self.fingerprinter = fingerprinter
        self.context = context

    def build(self, old_lines: Sequence[str], new_lines: Sequence[str]) -> DiffReport:
        config = self.fingerprinter.config
        report = DiffReport(
            anchor_separator=config.anchor_separator,
            content_separator=config.content_separator,
            fingerprint_width=config.width,
        )
        fingerprints = self.fingerprinter.fingerprint_lines(new_lines)

        rows: list[DiffRow] = []
        matcher = difflib.SequenceMatcher(a=old_lines, b=new_lines, autojunk=False)
        for tag, i1, i2, j1, j2 in matcher.get_opcodes():
            if tag == "equal":
                for offset in range(i2 - i1):
                    rows.append(
                        DiffRow(
                            kind="context",
                            old_line=i1 + offset + 1,
                            new_line=j1 + offset + 1,
                            text=new_lines[j1 + offset],
                            fingerprint=fingerprints[j1 + offset],
                        )
                    )
                continue
            if report.first_changed_line is None:
                report.first_changed_line = j1 + 1
            for i in range(i1, i2):
                rows.append(DiffRow(kind="delete", old_line=i + 1, text=old_lines[i]))
            for j in range(j1, j2):
                rows.append(
                    DiffRow(
                        kind="insert",
                        new_line=j + 1,
                        text=new_lines[j],
                        fingerprint=fingerprints[j],
                    )
                )

        report.rows = self._window(rows)
        return report

    def _window(self, rows: list[DiffRow]) -> list[DiffRow]:
        """Keep rows within ``context`` of a change, marking skipped runs."""
        changed = [idx for idx, row in enumerate(rows) if row.kind != "context"]
        if not changed:
            return []

        keep = [False] * len(rows)
        for idx in changed:
            lo = max(0, idx - self.context)
            hi = min(len(rows), idx + self.context + 1)
            for k in range(lo, hi):
                keep[k] = True

        windowed: list[DiffRow] = []
        skipping = False
        for idx, row in enumerate(rows):
            if keep[idx]:
                windowed.append(row)
                skipping = False
            elif not skipping:
                windowed.append(DiffRow(kind="gap"))
                skipping = True
        return windowed


def render_diff(report: DiffReport) -> str:
    """Render a report as ``+``/``-``/context rows with current anchors."""
    if not report.changed:
        return "No changes made"

    sep = report.anchor_separator
    csep = report.content_separator
    blank = " " * report.fingerprint_width
    out: list[str] = []
    for row in report.rows:
        if row.kind == "gap":
            out.append(GAP_MARKER)
        elif row.kind == "delete":
            out.append(f"- {row.old_line}{sep}{blank}{csep}{row.text}")
        elif row.kind == "insert":
            out.append(f"+ {row.new_line}{sep}{row.fingerprint}{csep}{row.text}")
        else:
            out.append(f"  {row.new_line}{sep}{row.fingerprint}{csep}{row.text}")

    out.append("")
    out.append(
        f"Note: anchors from line {report.first_changed_line} onward may have new "
        "fingerprints. Re-read the file before making further edits there."
    )
    return "\n".join(out)
