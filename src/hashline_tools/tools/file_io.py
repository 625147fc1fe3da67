"""Text file reads and atomic writes shared by the tools and the CLI."""

import contextlib
import os
import tempfile

DEFAULT_MAX_BYTES = 10 * 1024 * 1024


class FileTooLargeError(ValueError):
    """Raised when a file exceeds the configured size cap."""


def read_text_file(path: str, encoding: str = "utf-8", max_bytes: int = DEFAULT_MAX_BYTES) -> str:
    """Read a whole file without newline translation.

    Raises:
        FileNotFoundError: If the path does not exist.
        IsADirectoryError: If the path is not a regular file.
        FileTooLargeError: If the file is larger than ``max_bytes``.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(path)
    if not os.path.isfile(path):
        raise IsADirectoryError(path)

    size = os.path.getsize(path)
    if size > max_bytes:
        raise FileTooLargeError(f"File too large ({size} bytes, max {max_bytes})")

    with open(path, encoding=encoding, newline="") as f:
        return f.read()


def write_text_atomic(path: str, text: str, encoding: str = "utf-8") -> None:
    """Replace ``path`` with ``text`` via a temp file in the same directory.

    The original file's mode bits are kept. Line endings are written as-is.
    """
    original_mode = os.stat(path).st_mode if os.path.exists(path) else None
    fd, tmp_path = tempfile.mkstemp(dir=os.path.dirname(path) or ".")
    fd_open = True
    try:
        if original_mode is not None:
            os.fchmod(fd, original_mode)
        with os.fdopen(fd, "w", encoding=encoding, newline="") as f:
            fd_open = False
            f.write(text)
        os.replace(tmp_path, path)
    except BaseException:
        if fd_open:
            os.close(fd)
        with contextlib.suppress(OSError):
            os.unlink(tmp_path)
        raise
