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
"""ifclattice: user-editable security lattices and code synthesis.

ifclattice models a finite partial order over confidentiality labels,
decides which information flows it permits, and synthesizes statically
checked TypeScript that encodes the same lattice with type-level subtyping.

Key Components:
    - core: Labels, the lattice store, the order oracle (leq / join)
    - flow: Flow graphs of labelled values with recorded write verdicts
    - codegen: Topological layering and TypeScript synthesis
    - session: Single-writer editing sessions with undo, scenario replay
    - cli: Command line entry point

Usage:
    >>> from ifclattice import preset, leq, join
    >>> lattice = preset("three")
    >>> leq(lattice, "public", "secret")
    True
    >>> join(lattice, "public", "internal")
    'internal'
"""

__version__ = "0.1.0"

# Use lazy imports so submodules stay importable on their own
# Full imports are done on first access via __getattr__


def __getattr__(name: str):
    """Lazy import of module attributes."""
    # Lattice algebra
    if name in (
        "UNRESOLVED",
        "Label",
        "Lattice",
        "Relation",
        "InvalidLabelNameError",
        "make_label",
        "label_id_for",
        "is_valid_label_name",
        "empty_lattice",
        "add_label",
        "add_relation",
        "build_lattice",
        "preset",
        "preset_names",
        "leq",
        "join",
        "CheckedOracle",
        "ExternalOracle",
    ):
        from . import core

        return getattr(core, name)

    # Flow graphs
    if name in (
        "FlowGraph",
        "FlowNode",
        "FlowEdge",
        "NodeKind",
        "EdgeKind",
        "Source",
        "Sink",
        "DecisionLog",
        "empty_graph",
        "create_source",
        "compose_map",
        "compose_combine",
        "try_write",
    ):
        from . import flow

        return getattr(flow, name)

    # Synthesis
    if name in ("synthesize", "LatticeLayout"):
        from . import codegen

        return getattr(codegen, name)

    # Sessions
    if name in ("Session", "SessionError", "ScenarioError", "load_scenario", "load_scenario_file"):
        from . import session

        return getattr(session, name)

    # Configuration
    if name in ("SessionConfig", "SynthesisConfig"):
        from . import config

        return getattr(config, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Lattice algebra
    "UNRESOLVED",
    "Label",
    "Lattice",
    "Relation",
    "InvalidLabelNameError",
    "make_label",
    "label_id_for",
    "is_valid_label_name",
    "empty_lattice",
    "add_label",
    "add_relation",
    "build_lattice",
    "preset",
    "preset_names",
    "leq",
    "join",
    "CheckedOracle",
    "ExternalOracle",
    # Flow
    "FlowGraph",
    "FlowNode",
    "FlowEdge",
    "NodeKind",
    "EdgeKind",
    "Source",
    "Sink",
    "DecisionLog",
    "empty_graph",
    "create_source",
    "compose_map",
    "compose_combine",
    "try_write",
    # Synthesis
    "synthesize",
    "LatticeLayout",
    # Sessions
    "Session",
    "SessionError",
    "ScenarioError",
    "load_scenario",
    "load_scenario_file",
    # Configuration
    "SessionConfig",
    "SynthesisConfig",
]
