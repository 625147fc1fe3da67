import json
import logging
import re
from typing import Any

from fastmcp import FastMCP

from ...config import settings
from ...engine import HashlineEngine
from ...errors import HashlineError
from ...fingerprint import FingerprintConfig
from ...render import render_error
from ..file_io import FileTooLargeError, read_text_file, write_text_atomic
from ..security import get_secure_path

logger = logging.getLogger(__name__)

_CONTENT_FIELDS = ("new_text", "text", "lines", "content")


def _prefix_re(config: FingerprintConfig) -> re.Pattern[str]:
    """Pattern for the ``LINE<sep>FP<sep>`` prefix of a listing row."""
    digits = re.escape(config.alphabet)
    return re.compile(
        rf"^\d+{re.escape(config.anchor_separator)}[{digits}]{{{config.width}}}"
        rf"{re.escape(config.content_separator)}"
    )


def _strip_content_prefixes(lines: list[str], pattern: re.Pattern[str]) -> list[str]:
    """Strip listing prefixes from content lines when all have them.

    Callers frequently copy listing rows (e.g. '5#ZPMQ:content') into their
    content fields. Only strips when 2+ non-empty lines all carry the prefix,
    so a single literal line that happens to match is left alone.
    """
    non_empty = [ln for ln in lines if ln]
    if len(non_empty) < 2:
        return lines
    if not all(pattern.match(ln) for ln in non_empty):
        return lines
    return [pattern.sub("", ln, count=1) for ln in lines]


def _clean_value(value: Any, pattern: re.Pattern[str]) -> Any:
    if isinstance(value, str):
        lines = value.split("\n")
        cleaned = _strip_content_prefixes(lines, pattern)
        return value if cleaned == lines else "\n".join(cleaned)
    if isinstance(value, list) and all(isinstance(item, str) for item in value):
        return _strip_content_prefixes(value, pattern)
    return value


def _clean_op(op: Any, pattern: re.Pattern[str]) -> tuple[Any, bool]:
    """Return ``op`` with prefixes stripped from its content fields."""
    if not isinstance(op, dict):
        return op, False
    if "type" not in op and "op" not in op and len(op) == 1:
        name, fields = next(iter(op.items()))
        cleaned, changed = _clean_op(fields, pattern)
        return ({name: cleaned} if changed else op), changed

    changed = False
    result = dict(op)
    for name in _CONTENT_FIELDS:
        if name in result:
            cleaned = _clean_value(result[name], pattern)
            if cleaned != result[name]:
                result[name] = cleaned
                changed = True
    return result, changed


def register_tools(mcp: FastMCP) -> None:
    """Register the hashline edit tool with the MCP server."""

    @mcp.tool()
    def hashline_edit(
        path: str,
        edits: str,
        mode: str = "",
        auto_cleanup: bool = True,
        encoding: str = "utf-8",
    ) -> dict:
        """
        Purpose
            Edit a file using LINE#FP anchors from hashline_read.

        When to use
            After reading a file with hashline_read, use the anchors to make
            targeted edits without reproducing exact file content.

        Rules & Constraints
            Anchors must match the current file content (fingerprint validation).
            All edits in a batch are validated before any are applied (atomic).
            Overlapping line ranges within a single call are rejected.
            Anchored edits are applied first; content replacements run after.

        Args:
            path: The path to the file (relative to the workspace root)
            edits: JSON string containing a list of edit operations.
                Each op is a dict with an "op" (or "type") field:
                - set_line: anchor, new_text
                - replace_lines: start_anchor, end_anchor, new_text
                - insert_after: anchor, text
                - insert_before: anchor, text
                - replace: pos, end (optional), lines
                - replace: old_text, new_text, all (optional)
                - append: pos (optional, default end of file), lines
                - prepend: pos (optional, default start of file), lines
                An op may also be wrapped: {"set_line": {"anchor": ..., ...}}
            mode: Fingerprint mode, "chained" or "independent" (default: configured)
            auto_cleanup: If True (default), strip listing prefixes copied into
                multi-line content. Set to False to write content exactly as provided.
            encoding: File encoding (default "utf-8"). Must match the file's actual encoding.

        Returns:
            Dict with success status, diff of the change and edit counts, or error dict
        """
        # 1. Parse JSON
        try:
            edit_ops = json.loads(edits)
        except (json.JSONDecodeError, TypeError) as e:
            return {"error": f"Invalid JSON in edits: {e}", "error_code": "PARSE_ERROR"}

        if not isinstance(edit_ops, list):
            return {
                "error": "edits must be a JSON array of operations",
                "error_code": "PARSE_ERROR",
            }

        if not edit_ops:
            return {"error": "edits array is empty"}

        if len(edit_ops) > settings.max_edits:
            return {
                "error": f"Too many edits in one call (max {settings.max_edits}). "
                "Split into multiple calls."
            }

        try:
            engine = HashlineEngine(
                mode=mode or settings.fingerprint_mode,
                diff_context=settings.diff_context,
                mismatch_context=settings.mismatch_context,
            )
        except ValueError as e:
            return {"error": str(e)}

        # 2. Strip copied listing prefixes
        cleanup_actions = []
        if auto_cleanup:
            pattern = _prefix_re(engine.config)
            cleaned_ops = []
            for op in edit_ops:
                cleaned, changed = _clean_op(op, pattern)
                cleaned_ops.append(cleaned)
                if changed and "prefix_strip" not in cleanup_actions:
                    cleanup_actions.append("prefix_strip")
            edit_ops = cleaned_ops

        # 3. Read file
        try:
            secure_path = get_secure_path(path)
            content = read_text_file(secure_path, encoding, settings.max_file_bytes)
        except FileNotFoundError:
            return {"error": f"File not found at {path}"}
        except IsADirectoryError:
            return {"error": f"Path is not a file: {path}"}
        except FileTooLargeError as e:
            return {"error": f"{e}: {path}"}
        except Exception as e:
            return {"error": f"Failed to read file: {e}"}

        # 4. Validate and apply
        try:
            outcome = engine.apply_edit_batch(content, edit_ops)
        except HashlineError as e:
            return {"error": render_error(e), "error_code": e.error_code}

        # 5. Atomic write, only when something changed
        if outcome.changed:
            try:
                write_text_atomic(secure_path, outcome.text, encoding)
            except Exception as e:
                return {"error": f"Failed to write file: {e}"}
            logger.info("Wrote %s (%d edit(s))", path, outcome.edits_applied)

        result = {
            "success": True,
            "path": path,
            "changed": outcome.changed,
            "first_changed_line": outcome.first_changed_line,
            "edits_applied": outcome.edits_applied,
            "duplicates_dropped": outcome.duplicates_dropped,
            "diff": outcome.diff,
        }
        if cleanup_actions:
            result["cleanup_applied"] = cleanup_actions
        return result
