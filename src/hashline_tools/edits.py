"""Edit operations and their wire formats.

A batch arrives as a JSON array. Each element is either flat, with a
``"type"`` or ``"op"`` discriminator::

    {"op": "set_line", "anchor": "2#ZPMQ", "new_text": "x = 1"}

or nested under a single key naming the operation::

    {"set_line": {"anchor": "2#ZPMQ", "new_text": "x = 1"}}

Both shapes are normalized here into one closed set of edit variants before
anything is validated.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from .anchors import AnchorRef, require_anchor
from .errors import EditParseError


@dataclass(frozen=True)
class ReplaceEdit:
    """Replace line ``pos`` (or the inclusive range ``pos..end``) with ``lines``."""

    pos: AnchorRef
    end: AnchorRef | None
    lines: tuple[str, ...]

    kind = "replace"


@dataclass(frozen=True)
class AppendEdit:
    """Insert ``lines`` after ``pos``, or at end of file when ``pos`` is None."""

    pos: AnchorRef | None
    lines: tuple[str, ...]

    kind = "append"


@dataclass(frozen=True)
class PrependEdit:
    """Insert ``lines`` before ``pos``, or at start of file when ``pos`` is None."""

    pos: AnchorRef | None
    lines: tuple[str, ...]

    kind = "prepend"


@dataclass(frozen=True)
class FuzzyReplaceEdit:
    """Replace ``old_text`` located by content rather than by anchor."""

    old_text: str
    new_text: str
    all: bool = False

    kind = "fuzzy_replace"


Edit = ReplaceEdit | AppendEdit | PrependEdit | FuzzyReplaceEdit
AnchoredEdit = ReplaceEdit | AppendEdit | PrependEdit

_DISCRIMINATORS = ("type", "op")


@dataclass(frozen=True)
class IndexedEdit:
    """An edit paired with its 0-based position in the submitted batch."""

    index: int
    edit: Edit

    @property
    def number(self) -> int:
        return self.index + 1


def split_lines(text: str) -> tuple[str, ...]:
    """Split replacement text into lines; an empty string means no lines."""
    if not text:
        return ()
    return tuple(text.splitlines())


def anchors_of(edit: Edit) -> list[tuple[str, AnchorRef]]:
    """The ``(field, anchor)`` pairs an edit is constrained by."""
    if isinstance(edit, ReplaceEdit):
        refs = [("pos", edit.pos)]
        if edit.end is not None:
            refs.append(("end", edit.end))
        return refs
    if isinstance(edit, (AppendEdit, PrependEdit)) and edit.pos is not None:
        return [("pos", edit.pos)]
    return []


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def _content(
    fields: Mapping[str, Any], names: Iterable[str], index: int, op: str
) -> tuple[str, ...]:
    names = tuple(names)
    for name in (*names, "content"):
        if name not in fields:
            continue
        value = fields[name]
        if isinstance(value, str):
            return split_lines(value)
        if isinstance(value, list) and all(isinstance(item, str) for item in value):
            lines: list[str] = []
            for item in value:
                lines.extend(item.splitlines() or [""])
            return tuple(lines)
        raise EditParseError(
            f"'{name}' must be a string or a list of strings", edit_index=index, op=op
        )
    wanted = " or ".join(f"'{n}'" for n in names)
    raise EditParseError(f"missing required field {wanted}", edit_index=index, op=op)


def _optional_anchor(
    fields: Mapping[str, Any], name: str, index: int, op: str
) -> AnchorRef | None:
    if fields.get(name) is None:
        return None
    return _anchor(fields, name, index, op)


def _anchor(fields: Mapping[str, Any], name: str, index: int, op: str) -> AnchorRef:
    try:
        return require_anchor(fields.get(name), index, name)
    except EditParseError as exc:
        exc.op = op
        raise


def _text(fields: Mapping[str, Any], name: str, index: int, op: str) -> str:
    value = fields.get(name)
    if value is None:
        raise EditParseError(f"missing required field '{name}'", edit_index=index, op=op)
    if not isinstance(value, str):
        raise EditParseError(f"'{name}' must be a string", edit_index=index, op=op)
    return value


# ---------------------------------------------------------------------------
# Per-op builders
# ---------------------------------------------------------------------------


def _set_line(fields: Mapping[str, Any], index: int) -> Edit:
    op = "set_line"
    pos = _anchor(fields, "anchor", index, op)
    return ReplaceEdit(pos=pos, end=None, lines=_content(fields, ("new_text",), index, op))


def _replace_lines(fields: Mapping[str, Any], index: int) -> Edit:
    op = "replace_lines"
    pos = _anchor(fields, "start_anchor", index, op)
    end = _anchor(fields, "end_anchor", index, op)
    return ReplaceEdit(pos=pos, end=end, lines=_content(fields, ("new_text",), index, op))


def _insert_after(fields: Mapping[str, Any], index: int) -> Edit:
    op = "insert_after"
    pos = _anchor(fields, "anchor", index, op)
    return AppendEdit(pos=pos, lines=_content(fields, ("text",), index, op))


def _insert_before(fields: Mapping[str, Any], index: int) -> Edit:
    op = "insert_before"
    pos = _anchor(fields, "anchor", index, op)
    return PrependEdit(pos=pos, lines=_content(fields, ("text",), index, op))


def _replace(fields: Mapping[str, Any], index: int) -> Edit:
    op = "replace"
    if "pos" in fields:
        pos = _anchor(fields, "pos", index, op)
        end = _optional_anchor(fields, "end", index, op)
        return ReplaceEdit(pos=pos, end=end, lines=_content(fields, ("lines",), index, op))

    old_text = _text(fields, "old_text", index, op)
    if not old_text:
        raise EditParseError("'old_text' must not be empty", edit_index=index, op=op)
    new_text = _text(fields, "new_text", index, op)
    replace_all = fields.get("all", False)
    if replace_all is None:
        replace_all = False
    if not isinstance(replace_all, bool):
        raise EditParseError("'all' must be a boolean", edit_index=index, op=op)
    return FuzzyReplaceEdit(old_text=old_text, new_text=new_text, all=replace_all)


def _append(fields: Mapping[str, Any], index: int) -> Edit:
    op = "append"
    pos = _optional_anchor(fields, "pos", index, op)
    return AppendEdit(pos=pos, lines=_content(fields, ("lines", "text"), index, op))


def _prepend(fields: Mapping[str, Any], index: int) -> Edit:
    op = "prepend"
    pos = _optional_anchor(fields, "pos", index, op)
    return PrependEdit(pos=pos, lines=_content(fields, ("lines", "text"), index, op))


_BUILDERS: dict[str, Callable[[Mapping[str, Any], int], Edit]] = {
    "set_line": _set_line,
    "replace_lines": _replace_lines,
    "insert_after": _insert_after,
    "insert_before": _insert_before,
    "replace": _replace,
    "append": _append,
    "prepend": _prepend,
}

SUPPORTED_OPS = tuple(_BUILDERS)


def _unwrap(item: Any, index: int) -> tuple[str, Mapping[str, Any]]:
    """Return ``(op, fields)`` for either wire shape."""
    if not isinstance(item, dict):
        raise EditParseError("operation must be an object", edit_index=index)

    for key in _DISCRIMINATORS:
        if key in item:
            op = item[key]
            if not isinstance(op, str):
                raise EditParseError(f"'{key}' must be a string", edit_index=index)
            return op, item

    if len(item) == 1:
        op, fields = next(iter(item.items()))
        if op in _BUILDERS:
            if not isinstance(fields, dict):
                raise EditParseError(
                    f"value of '{op}' must be an object", edit_index=index, op=op
                )
            return op, fields

    keys = ", ".join(sorted(map(str, item))) or "none"
    raise EditParseError(
        f"can't determine operation (no 'type'/'op' field and no single wrapper key; keys: {keys})",
        edit_index=index,
    )


def parse_edit(item: Any, index: int) -> Edit:
    """Normalize one wire-format edit into its canonical variant.

    Raises:
        EditParseError: If the edit is malformed or names an unknown op.
    """
    op, fields = _unwrap(item, index)
    builder = _BUILDERS.get(op)
    if builder is None:
        raise EditParseError(
            f"unknown op '{op}' (supported: {', '.join(SUPPORTED_OPS)})", edit_index=index
        )
    return builder(fields, index)


def parse_edit_batch(batch: str | list[Any]) -> list[Edit]:
    """Decode and normalize a whole batch.

    Args:
        batch: JSON text of an array of edits, or the already-decoded list.

    Returns:
        Canonical edits in submission order.

    Raises:
        EditParseError: If the JSON is invalid or any edit is malformed.
    """
    if isinstance(batch, str):
        try:
            batch = json.loads(batch)
        except json.JSONDecodeError as exc:
            raise EditParseError(f"Invalid JSON in edits: {exc}") from exc
    if not isinstance(batch, list):
        raise EditParseError("edits must be a JSON array of operations")
    return [parse_edit(item, index) for index, item in enumerate(batch)]
