import logging

from fastmcp import FastMCP

from ...config import settings
from ...document import TextDocument
from ...engine import HashlineEngine
from ..file_io import FileTooLargeError, read_text_file
from ..security import get_secure_path

logger = logging.getLogger(__name__)


def register_tools(mcp: FastMCP) -> None:
    """Register the hashline read tool with the MCP server."""

    @mcp.tool()
    def hashline_read(
        path: str,
        offset: int = 0,
        limit: int = 0,
        mode: str = "",
        encoding: str = "utf-8",
    ) -> dict:
        """
        Purpose
            Read a file with a LINE#FP anchor in front of every line.

        When to use
            Before editing a file with hashline_edit: the anchors in this
            listing are what hashline_edit operations reference.

        Rules & Constraints
            Anchors are only valid for the content they were read from.
            After an edit, lines from the first changed line onward carry new
            fingerprints and must be re-read.

        Args:
            path: The path to the file (relative to the workspace root)
            offset: 0-based index of the first line to list (default 0)
            limit: Max lines to list, 0 = configured default (2000)
            mode: Fingerprint mode, "chained" or "independent" (default: configured)
            encoding: File encoding (default "utf-8")

        Returns:
            Dict with the anchored listing and line count, or error dict
        """
        if offset < 0:
            return {"error": f"offset must be >= 0, got {offset}"}
        if limit < 0:
            return {"error": f"limit must be >= 0, got {limit}"}

        try:
            engine = HashlineEngine(
                mode=mode or settings.fingerprint_mode,
                diff_context=settings.diff_context,
                mismatch_context=settings.mismatch_context,
            )
        except ValueError as e:
            return {"error": str(e)}

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

        listing = engine.render_read(content, offset, limit or settings.read_limit)
        total_lines = len(TextDocument.from_text(content))
        logger.debug("Listed %s (%d lines, mode=%s)", path, total_lines, engine.mode)
        return {
            "success": True,
            "path": path,
            "content": listing,
            "total_lines": total_lines,
            "mode": str(engine.mode),
        }
