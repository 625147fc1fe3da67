"""Per-line fingerprints for anchor-based file editing.

Each line gets a short content fingerprint. Callers reference lines by
``LINE#FP`` anchors instead of reproducing text; if the file changed since it
was read, the fingerprint no longer matches and the edit is cleanly rejected.

Two generations are supported:

- independent: the fingerprint depends on the line content alone (legacy
  ``LINE:FP`` anchors).
- chained: the fingerprint also folds in the previous line's fingerprint, so
  any upstream edit invalidates every anchor below it.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from enum import StrEnum

import xxhash

BASE36_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"
NIBBLE_ALPHABET = "ZPMQVRWSNKTXJBYH"
DEFAULT_SEED = 0


class FingerprintMode(StrEnum):
    """Fingerprint generations accepted by the engine."""

    INDEPENDENT = "independent"
    CHAINED = "chained"


@dataclass(frozen=True)
class FingerprintConfig:
    """Constants that shape fingerprints and their display.

    Attributes:
        mode: Whether fingerprints chain through predecessor lines.
        alphabet: Digits used to encode the hash.
        width: Number of digits in a fingerprint.
        seed: Hash seed for lines with alphanumeric content.
        anchor_separator: Separator between line number and fingerprint.
        content_separator: Separator between the anchor and the line text.
    """

    mode: FingerprintMode
    alphabet: str
    width: int
    seed: int = DEFAULT_SEED
    anchor_separator: str = "#"
    content_separator: str = ":"

    @property
    def modulus(self) -> int:
        return len(self.alphabet) ** self.width


INDEPENDENT_CONFIG = FingerprintConfig(
    mode=FingerprintMode.INDEPENDENT,
    alphabet=BASE36_ALPHABET,
    width=4,
    anchor_separator=":",
    content_separator="|",
)

CHAINED_CONFIG = FingerprintConfig(
    mode=FingerprintMode.CHAINED,
    alphabet=NIBBLE_ALPHABET,
    width=4,
)

_PRESETS = {
    FingerprintMode.INDEPENDENT: INDEPENDENT_CONFIG,
    FingerprintMode.CHAINED: CHAINED_CONFIG,
}


def config_for_mode(mode: FingerprintMode | str) -> FingerprintConfig:
    """Return the preset config for a mode name.

    Raises:
        ValueError: If the mode is not a known fingerprint mode.
    """
    try:
        return _PRESETS[FingerprintMode(mode)]
    except ValueError as exc:
        valid = ", ".join(m.value for m in FingerprintMode)
        raise ValueError(f"Unknown fingerprint mode '{mode}' (expected one of: {valid})") from exc


def normalize_whitespace(text: str) -> str:
    """Remove every whitespace character."""
    return "".join(ch for ch in text if not ch.isspace())


def normalize_line(line: str) -> str:
    """Strip a trailing carriage return, then remove all whitespace."""
    if line.endswith("\r"):
        line = line[:-1]
    return normalize_whitespace(line)


def encode(value: int, alphabet: str, width: int) -> str:
    """Encode a non-negative integer as ``width`` digits of ``alphabet``."""
    radix = len(alphabet)
    value %= radix**width
    digits = []
    for _ in range(width):
        value, rem = divmod(value, radix)
        digits.append(alphabet[rem])
    return "".join(reversed(digits))


class Fingerprinter:
    """Compute line fingerprints under one :class:`FingerprintConfig`."""

    def __init__(self, config: FingerprintConfig = CHAINED_CONFIG):
        self.config = config

    @property
    def chained(self) -> bool:
        return self.config.mode is FingerprintMode.CHAINED

    def fingerprint(self, line_number: int, line: str, predecessor: str | None = None) -> str:
        """Fingerprint one line.

        Lines without any alphanumeric character (blank lines, lone braces)
        are seeded with their line number so they don't all collapse onto the
        same fingerprint. A predecessor fingerprint, when given, is folded into
        the seed so the result depends on the whole prefix of the file.

        Args:
            line_number: 1-based line number.
            line: Raw line text, without the line terminator.
            predecessor: Fingerprint of the previous line (chained mode only).

        Returns:
            Fixed-width fingerprint string.
        """
        normalized = normalize_line(line)
        seed = self.config.seed
        has_alnum = any(ch.isalnum() for ch in normalized)
        if not has_alnum or (self.chained and predecessor is None):
            seed = line_number
        if predecessor is not None:
            seed = xxhash.xxh64_intdigest(predecessor.encode("utf-8"), seed=seed)
        digest = xxhash.xxh64_intdigest(normalized.encode("utf-8"), seed=seed)
        return encode(digest, self.config.alphabet, self.config.width)

    def fingerprint_lines(self, lines: Sequence[str], upto: int | None = None) -> list[str]:
        """Fingerprint lines ``1..=upto`` (all lines by default) in one pass.

        Chained fingerprints need the whole prefix, so callers that only care
        about a few lines should still pass the highest line they need rather
        than fingerprinting lines one at a time.
        """
        count = len(lines) if upto is None else max(0, min(upto, len(lines)))
        result: list[str] = []
        previous: str | None = None
        for idx in range(count):
            fp = self.fingerprint(idx + 1, lines[idx], previous if self.chained else None)
            result.append(fp)
            previous = fp
        return result

    def is_valid(self, fingerprint: str) -> bool:
        """Whether a string has the shape of a fingerprint in this config."""
        return len(fingerprint) == self.config.width and all(
            ch in self.config.alphabet for ch in fingerprint
        )


def compute_line_hash(
    line_number: int,
    line: str,
    predecessor: str | None = None,
    config: FingerprintConfig = CHAINED_CONFIG,
) -> str:
    """Fingerprint a single line (see :meth:`Fingerprinter.fingerprint`)."""
    return Fingerprinter(config).fingerprint(line_number, line, predecessor)


def compute_fingerprints(
    lines: Sequence[str],
    config: FingerprintConfig = CHAINED_CONFIG,
    upto: int | None = None,
) -> list[str]:
    """Fingerprint a whole line sequence (or its first ``upto`` lines)."""
    return Fingerprinter(config).fingerprint_lines(lines, upto)
