"""Line sequence view of a text file."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TextDocument:
    """A file as an ordered list of lines.

    The trailing newline and the end-of-line style are kept apart from the
    lines so ``from_text(t).to_text() == t`` for any ``\\n`` or ``\\r\\n`` file.
    """

    lines: list[str] = field(default_factory=list)
    trailing_newline: bool = False
    eol: str = "\n"

    @classmethod
    def from_text(cls, text: str) -> TextDocument:
        eol = "\r\n" if "\r\n" in text else "\n"
        if eol == "\r\n":
            text = text.replace("\r\n", "\n")
        if not text:
            return cls(lines=[], trailing_newline=False, eol=eol)
        trailing_newline = text.endswith("\n")
        lines = text.split("\n")
        if trailing_newline:
            lines.pop()
        return cls(lines=lines, trailing_newline=trailing_newline, eol=eol)

    def to_text(self, lines: list[str] | None = None) -> str:
        """Join ``lines`` (default: this document's lines) back into text."""
        lines = self.lines if lines is None else lines
        text = "\n".join(lines)
        if self.trailing_newline and lines:
            text += "\n"
        if self.eol != "\n":
            text = text.replace("\n", self.eol)
        return text

    def __len__(self) -> int:
        return len(self.lines)
