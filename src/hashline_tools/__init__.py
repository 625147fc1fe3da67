"""
Hashline Tools - anchor-based file reading and editing.

Every line of a file is listed with a short content fingerprint
(``LINE#FP:content``). Edits reference lines by those anchors; if the file
changed since it was read, the stale anchors are reported and nothing is
applied.

Usage:
    from hashline_tools import HashlineEngine

    engine = HashlineEngine()
    listing = engine.render_read(text)
    outcome = engine.apply_edit_batch(
        text, [{"op": "set_line", "anchor": "2#ZPMQ", "new_text": "x = 1"}]
    )
"""

from .engine import EditOutcome, HashlineEngine, apply_edit_batch, render_read
from .errors import (
    AmbiguousMatchError,
    EditParseError,
    HashlineError,
    MismatchError,
    NoMatchError,
    OverlapError,
    StructuralError,
)
from .fingerprint import (
    CHAINED_CONFIG,
    INDEPENDENT_CONFIG,
    FingerprintConfig,
    Fingerprinter,
    FingerprintMode,
    compute_fingerprints,
    compute_line_hash,
)
from .render import render_error

__version__ = "0.1.0"

__all__ = [
    "AmbiguousMatchError",
    "CHAINED_CONFIG",
    "EditOutcome",
    "EditParseError",
    "FingerprintConfig",
    "FingerprintMode",
    "Fingerprinter",
    "HashlineEngine",
    "HashlineError",
    "INDEPENDENT_CONFIG",
    "MismatchError",
    "NoMatchError",
    "OverlapError",
    "StructuralError",
    "apply_edit_batch",
    "compute_fingerprints",
    "compute_line_hash",
    "render_error",
    "render_read",
]
