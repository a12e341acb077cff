# Copyright Rand Arete @ Ananke 2025
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
"""TypeScript identifiers for label names."""

from __future__ import annotations

import json
import re
from typing import Dict, FrozenSet, Iterable, Set

from ..core.label import Label, LabelId

# ECMAScript reserved words plus the legacy Java-style future reserved words
RESERVED_IDENTIFIERS: FrozenSet[str] = frozenset({
    "break", "case", "catch", "class", "const", "continue", "debugger",
    "default", "delete", "do", "else", "enum", "export", "extends", "false",
    "finally", "for", "function", "if", "import", "in", "instanceof", "new",
    "null", "return", "super", "switch", "this", "throw", "true", "try",
    "typeof", "var", "void", "while", "with", "yield", "let", "static",
    "implements", "interface", "package", "private", "protected", "public",
    "await", "abstract", "boolean", "byte", "char", "double", "final",
    "float", "goto", "int", "long", "native", "short", "synchronized",
    "throws", "transient", "volatile",
})

_INVALID_CHARS = re.compile(r"[^a-zA-Z0-9]")
_VALID_START = re.compile(r"^[A-Za-z_]")

# Numbered names the synthesizer declares for its own constants
_GENERATED_NAME = re.compile(r"^(?:ok|source|computation|sink|write)\d+$")


def string_literal(value: str) -> str:
    """Quote and escape a string for use as a TypeScript literal."""
    return json.dumps(value, ensure_ascii=False)


def sanitize_identifier(name: str) -> str:
    """Turn an arbitrary label name into a valid identifier.

    >>> sanitize_identifier("Top Secret")
    'Top_Secret'
    >>> sanitize_identifier("2fa")
    '_2fa'
    """
    sanitized = _INVALID_CHARS.sub("_", name)
    if not _VALID_START.match(sanitized):
        sanitized = f"_{sanitized}"
    if sanitized in RESERVED_IDENTIFIERS:
        sanitized = f"_{sanitized}"
    return sanitized


def assign_identifiers(
    labels: Iterable[Label],
    reserved: Iterable[str] = (),
) -> Dict[LabelId, str]:
    """Give every label a distinct identifier, in iteration order.

    Names in reserved, and numbered names such as ok1 or source2, get an
    underscore prefix.
    Collisions get a numeric suffix: Secret, Secret_1, Secret_2, ...
    """
    taken = frozenset(reserved)
    names: Dict[LabelId, str] = {}
    used: Set[str] = set()
    for label in labels:
        base = sanitize_identifier(label.name or label.id)
        if base in taken or _GENERATED_NAME.match(base):
            base = f"_{base}"
        candidate = base
        counter = 1
        while candidate in used:
            candidate = f"{base}_{counter}"
            counter += 1
        names[label.id] = candidate
        used.add(candidate)
    return names
