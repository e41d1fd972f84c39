"""Secret redaction utility — strip passphrases from logs."""

from __future__ import annotations

import re

_PATTERNS = [
    (re.compile(r"(?i)(pragma\s+(?:re)?key\s*=\s*)'(?:[^']|'')*'"), r"\1'[PASSPHRASE]'"),
    (re.compile(r"(?i)(pragma\s+(?:re)?key\s*=\s*)\"(?:[^\"]|\"\")*\""), r"\1'[PASSPHRASE]'"),
    (re.compile(r"(?i)(pragma\s+(?:re)?key\s*=\s*)x'[0-9a-f]*'"), r"\1'[PASSPHRASE]'"),
]


def redact(text: str) -> str:
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text
