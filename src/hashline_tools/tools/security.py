import os
import re

from ..config import settings

# Pattern to detect Windows drive letters (e.g., C:, D:, Z:)
_WINDOWS_DRIVE_RE = re.compile(r"^[A-Za-z]:")


def get_secure_path(path: str, root: str | None = None) -> str:
    """Resolve ``path`` inside the workspace root and refuse anything outside it.

    - Normalizes both '/' and '\\' separators to os.sep.
    - Strips all leading separators, so absolute paths land under the root.
    - Blocks Windows drive-letter paths (C:, D:, etc.).
    - Rejects null bytes.

    Args:
        path: Caller-supplied path, relative to the root.
        root: Sandbox root; defaults to ``settings.workspace_root``.

    Raises:
        ValueError: If the path is rejected.
    """
    root_dir = os.path.abspath(root if root is not None else settings.workspace_root)

    path = path.strip()
    if not path:
        raise ValueError("Path must not be empty")

    if "\x00" in path:
        raise ValueError(f"Access denied: Path contains null bytes: '{path}'")

    normalized = path.replace("/", os.sep).replace("\\", os.sep)

    if _WINDOWS_DRIVE_RE.match(normalized):
        raise ValueError(
            f"Access denied: Absolute paths with drive letters are not allowed: '{path}'"
        )

    while normalized and normalized[0] == os.sep:
        normalized = normalized[1:]

    normalized = os.path.normpath(normalized) if normalized else ""

    # normpath can re-introduce a drive letter
    if _WINDOWS_DRIVE_RE.match(normalized):
        raise ValueError(
            f"Access denied: Absolute paths with drive letters are not allowed: '{path}'"
        )

    final_path = os.path.abspath(os.path.join(root_dir, normalized))

    try:
        common_prefix = os.path.commonpath([final_path, root_dir])
    except ValueError as err:
        raise ValueError(f"Access denied: Path '{path}' is outside the workspace.") from err

    if common_prefix != root_dir:
        raise ValueError(f"Access denied: Path '{path}' is outside the workspace.")

    return final_path
