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
"""Configuration for code synthesis and editing sessions.

Both configs are plain dataclasses with defaults:

    >>> config = SessionConfig(max_log_entries=20, reject_cycles=True)
    >>> synth = SynthesisConfig(include_banner=False)
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SynthesisConfig:
    """Controls the text produced by the code synthesizer.

    Attributes:
        include_banner: Emit the header banner (the only place a
            generation timestamp appears)
        library: Module the generated code imports its IFC primitives from
        map_suffix_note: Text appended to values in narrated map steps
    """

    include_banner: bool = True
    library: str = "ifc-ts"
    map_suffix_note: str = " (transformed)"

    def __post_init__(self) -> None:
        if not self.library:
            raise ValueError("library must be a non-empty module name")


@dataclass
class SessionConfig:
    """Controls an editing session.

    Attributes:
        max_log_entries: Decision traces kept, most recent first (default: 50)
        max_history: Snapshots kept for undo (default: 200)
        reject_cycles: Refuse relations that would close a cycle instead of
            storing them (default: False, cycles are tolerated)
        map_suffix: Appended to string values by map steps (default: "!")
    """

    max_log_entries: int = 50
    max_history: int = 200
    reject_cycles: bool = False
    map_suffix: str = "!"

    def __post_init__(self) -> None:
        if self.max_log_entries <= 0:
            raise ValueError(f"max_log_entries must be positive, got {self.max_log_entries}")
        if self.max_history <= 0:
            raise ValueError(f"max_history must be positive, got {self.max_history}")
