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
"""Bounded log of decision traces."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator, Tuple

DEFAULT_MAX_ENTRIES = 50


@dataclass(frozen=True, slots=True)
class DecisionLog:
    """Immutable, most-recent-first log of decision traces.

    Appending beyond max_entries drops the oldest entries.

    Example:
        >>> log = DecisionLog().append("a").append("b")
        >>> list(log)
        ['b', 'a']
    """

    entries: Tuple[str, ...] = ()
    max_entries: int = DEFAULT_MAX_ENTRIES

    def append(self, trace: str) -> DecisionLog:
        if not trace:
            return self
        entries = (trace,) + self.entries
        return DecisionLog(entries[: self.max_entries], self.max_entries)

    @property
    def latest(self) -> str:
        return self.entries[0] if self.entries else ""

    def clear(self) -> DecisionLog:
        return DecisionLog((), self.max_entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)
