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
"""Lattice algebra: labels, the lattice store and the order oracle."""

from .label import (
    UNRESOLVED,
    InvalidLabelNameError,
    Label,
    LabelId,
    is_valid_label_name,
    label_id_for,
    make_label,
)
from .lattice import (
    PRESET_DESCRIPTIONS,
    PRESETS,
    Lattice,
    Relation,
    add_label,
    add_relation,
    build_lattice,
    empty_lattice,
    predecessors,
    preset,
    preset_names,
    reset,
    successors,
)
from .order import (
    comparable,
    join,
    leq,
    minimal_elements,
    strictly_below,
    upper_bounds,
    would_create_cycle,
)
from .oracle import CheckedOracle, ExternalOracle

__all__ = [
    # Labels
    "UNRESOLVED",
    "InvalidLabelNameError",
    "Label",
    "LabelId",
    "is_valid_label_name",
    "label_id_for",
    "make_label",
    # Lattice store
    "PRESET_DESCRIPTIONS",
    "PRESETS",
    "Lattice",
    "Relation",
    "add_label",
    "add_relation",
    "build_lattice",
    "empty_lattice",
    "predecessors",
    "preset",
    "preset_names",
    "reset",
    "successors",
    # Order
    "comparable",
    "join",
    "leq",
    "minimal_elements",
    "strictly_below",
    "upper_bounds",
    "would_create_cycle",
    # Oracle
    "CheckedOracle",
    "ExternalOracle",
]
