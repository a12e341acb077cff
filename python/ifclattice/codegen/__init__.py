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
"""Lattice-to-code synthesis."""

from .identifiers import (
    RESERVED_IDENTIFIERS,
    assign_identifiers,
    sanitize_identifier,
    string_literal,
)
from .layout import (
    LatticeLayout,
    base_predecessor,
    down_sets,
    first_unrelated_pair,
    label_expression,
    topological_order,
)
from .synthesizer import (
    render_banner,
    render_flow,
    render_lattice,
    render_sinks,
    render_sources,
    synthesize,
)

__all__ = [
    "RESERVED_IDENTIFIERS",
    "assign_identifiers",
    "sanitize_identifier",
    "string_literal",
    "LatticeLayout",
    "base_predecessor",
    "down_sets",
    "first_unrelated_pair",
    "label_expression",
    "topological_order",
    "render_banner",
    "render_flow",
    "render_lattice",
    "render_sinks",
    "render_sources",
    "synthesize",
]
