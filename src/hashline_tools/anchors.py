"""Anchor references: ``LINE#FP`` (current) and ``LINE:FP`` (legacy)."""

from __future__ import annotations

import re
from dataclasses import dataclass

from .errors import EditParseError

_SEPARATORS = ("#", ":")
# ">>>" mismatch markers, or a diff "+"/"-" that must be followed by whitespace
# so a signed line number is never mistaken for one.
_DISPLAY_PREFIX_RE = re.compile(r"^(?:>+\s*|[+-]\s+)")
_FINGERPRINT_RE = re.compile(r"[0-9A-Za-z]+")


@dataclass(frozen=True)
class AnchorRef:
    """A ``(line, fingerprint)`` pair identifying an expected line of text."""

    line: int
    fingerprint: str

    def __str__(self) -> str:
        return format_anchor(self.line, self.fingerprint)


def format_anchor(line: int, fingerprint: str, separator: str = "#") -> str:
    return f"{line}{separator}{fingerprint}"


def parse_anchor(text: str) -> AnchorRef | None:
    """Parse an anchor string like ``'2#ZPMQ'`` or ``'2:a3b1'``.

    The ``#`` form is tried first, then the legacy ``:`` form. Leading display
    markers (``>>>``, ``+``, ``-``) and a copied display suffix such as
    ``'2#ZPMQ:content'`` are tolerated.

    Returns:
        The parsed anchor, or None if the separator is missing, the line part
        is not a positive integer, or the fingerprint is empty.
    """
    if not isinstance(text, str):
        return None
    text = _DISPLAY_PREFIX_RE.sub("", text.strip(), count=1)
    for sep in _SEPARATORS:
        if sep not in text:
            continue
        line_part, rest = text.split(sep, 1)
        line_part = line_part.strip()
        if not (line_part.isascii() and line_part.isdigit()):
            continue
        line = int(line_part)
        if line < 1:
            return None
        match = _FINGERPRINT_RE.match(rest.strip())
        if not match:
            return None
        return AnchorRef(line=line, fingerprint=match.group(0))
    return None


def require_anchor(text: object, edit_index: int, field: str) -> AnchorRef:
    """Parse an anchor field of an edit, failing the batch if it is malformed.

    Raises:
        EditParseError: If the value is missing, not a string, or unparseable.
    """
    if text is None:
        raise EditParseError(f"missing required field '{field}'", edit_index=edit_index)
    if not isinstance(text, str):
        raise EditParseError(f"'{field}' must be a string", edit_index=edit_index)
    anchor = parse_anchor(text)
    if anchor is None:
        raise EditParseError(
            f"invalid anchor '{text}' in '{field}' "
            "(expected \"LINE#FP\" or \"LINE:FP\" with a positive line number)",
            edit_index=edit_index,
        )
    return anchor
